"""Keyword-based intent analysis.

Extracts keywords from a query, infers relevant tool categories from a
trigger-word table and recognises required capabilities from a known
vocabulary. Uses only the standard library, no NLP model.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from src.jittools.retrieval.base import IntentAnalyzer, ToolRegistry
from src.jittools.retrieval.models import (
    AgentContext,
    ParsedIntent,
    TaskContext,
    ToolCategory,
)

# Common English stopwords plus filler words of tool requests
_STOPWORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "is", "are", "was", "were", "be", "been",
    "this", "that", "it", "its", "as", "if", "not", "no", "do", "does",
    "can", "will", "has", "have", "had", "may", "might", "should", "would",
    "all", "each", "every", "any", "some", "i", "me", "my", "we", "our",
    "you", "your", "need", "want", "please", "help", "find", "tools", "tool",
    "using", "use", "into", "about", "then",
})

CATEGORY_TRIGGERS: dict[ToolCategory, frozenset[str]] = {
    ToolCategory.CODE_ANALYSIS: frozenset({
        "analyze", "analysis", "lint", "complexity", "refactor", "dependencies",
        "smell", "static", "ast", "circular",
    }),
    ToolCategory.CODE_GENERATION: frozenset({
        "generate", "generation", "scaffold", "template", "boilerplate", "codegen",
        "create",
    }),
    ToolCategory.TESTING: frozenset({
        "test", "tests", "testing", "coverage", "unit", "e2e", "assert", "mock",
    }),
    ToolCategory.SECURITY: frozenset({
        "security", "vulnerability", "vulnerabilities", "cve", "secret",
        "secrets", "audit", "exploit", "auth", "permission",
    }),
    ToolCategory.DOCUMENTATION: frozenset({
        "docs", "documentation", "readme", "docstring", "document", "comments",
    }),
    ToolCategory.DEPLOYMENT: frozenset({
        "deploy", "deployment", "release", "rollout", "docker", "kubernetes",
        "ci", "pipeline",
    }),
    ToolCategory.MONITORING: frozenset({
        "monitor", "monitoring", "metrics", "logs", "alert", "alerts",
        "health", "performance", "latency",
    }),
    ToolCategory.VERSION_CONTROL: frozenset({
        "git", "github", "commit", "branch", "merge", "pull", "pr", "diff",
        "review", "worktree", "vcs",
    }),
    ToolCategory.DATA: frozenset({
        "data", "database", "sql", "query", "csv", "json", "schema", "migration",
    }),
    ToolCategory.COMMUNICATION: frozenset({
        "slack", "email", "message", "notify", "notification", "chat",
    }),
    ToolCategory.COORDINATION: frozenset({
        "agent", "agents", "swarm", "orchestrate", "coordinate", "task", "workflow",
    }),
    ToolCategory.MEMORY: frozenset({
        "memory", "remember", "recall", "context", "store", "knowledge",
    }),
}


def tokenize(text: str) -> list[str]:
    """Lowercase words of text, split on _ and non-word chars, stopwords removed.

    Duplicates are dropped; first occurrence order is kept.
    """
    words = re.split(r"[_\W]+", text.lower())
    seen: dict[str, None] = {}
    for w in words:
        if w and w not in _STOPWORDS and len(w) > 1:
            seen.setdefault(w, None)
    return list(seen)


def normalize_query(query: str) -> str:
    return " ".join(query.lower().split())


def _names_category(category: ToolCategory, text: str) -> bool:
    for name in {category.value, category.value.replace("_", " ")}:
        if re.search(rf"\b{re.escape(name)}\b", text):
            return True
    return False


class KeywordIntentAnalyzer(IntentAnalyzer):
    """Rule-based IntentAnalyzer driven by trigger words and a capability vocabulary."""

    def __init__(
        self,
        capability_vocabulary: Iterable[str] = (),
        category_triggers: Optional[dict[ToolCategory, frozenset[str]]] = None,
    ) -> None:
        self.capability_vocabulary = {c.lower(): c for c in capability_vocabulary}
        self.category_triggers = category_triggers or CATEGORY_TRIGGERS

    @classmethod
    def for_registry(cls, registry: ToolRegistry) -> "KeywordIntentAnalyzer":
        """Analyzer whose capability vocabulary is every capability in the registry."""
        vocabulary = {
            capability
            for tool in registry.get_all(exclude_deprecated=False)
            for capability in tool.capabilities
        }
        return cls(capability_vocabulary=sorted(vocabulary))

    def _categories(self, keywords: list[str], text: str = "") -> list[ToolCategory]:
        """Categories named in ``text`` or triggered by one of ``keywords``.

        Names match as written ("version_control") or with spaces
        ("version control"), since tokenizing splits them apart.
        """
        found: list[ToolCategory] = []
        keyword_set = set(keywords)
        for category in ToolCategory:
            triggers = self.category_triggers.get(category, frozenset())
            if _names_category(category, text) or keyword_set & triggers:
                found.append(category)
        return found

    def _capabilities(self, normalized: str, keywords: list[str]) -> list[str]:
        """Vocabulary entries mentioned as a keyword or as a phrase in the query.

        Multi-word and hyphenated capabilities match as substrings of the
        normalized query.
        """
        found: list[str] = []
        keyword_set = set(keywords)
        for lowered, original in self.capability_vocabulary.items():
            if lowered in keyword_set or (
                any(sep in lowered for sep in (" ", "-", "_")) and lowered in normalized
            ):
                found.append(original)
        return found

    def _parse(self, query: str) -> tuple[str, list[str], list[ToolCategory], list[str]]:
        normalized = normalize_query(query)
        keywords = tokenize(normalized)
        return (
            normalized,
            keywords,
            self._categories(keywords, normalized),
            self._capabilities(normalized, keywords),
        )

    async def analyze(
        self,
        query: str,
        context: Optional[AgentContext] = None,
    ) -> ParsedIntent:
        """Parse ``query``. The agent context does not influence keyword analysis."""
        normalized, keywords, categories, capabilities = self._parse(query)
        return ParsedIntent(
            normalized_query=normalized,
            keywords=tuple(keywords),
            relevant_categories=tuple(categories),
            required_capabilities=tuple(capabilities),
        )

    async def analyze_with_task_context(
        self,
        query: str,
        task_context: TaskContext,
    ) -> ParsedIntent:
        """Parse ``query`` and fold in the task's description, categories and capabilities."""
        normalized, keywords, categories, capabilities = self._parse(query)
        extra_keywords = tokenize(task_context.description)

        merged_keywords = list(dict.fromkeys(keywords + extra_keywords))
        merged_categories = list(dict.fromkeys(
            categories
            + self._categories(extra_keywords, normalize_query(task_context.description))
            + [ToolCategory(c) for c in task_context.relevant_categories]
        ))
        merged_capabilities = list(dict.fromkeys(
            capabilities + list(task_context.required_capabilities)
        ))
        return ParsedIntent(
            normalized_query=normalized,
            keywords=tuple(merged_keywords),
            relevant_categories=tuple(merged_categories),
            required_capabilities=tuple(merged_capabilities),
        )
