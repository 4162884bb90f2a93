"""Shared fixtures for retrieval tests."""
from datetime import datetime, timezone
from typing import Optional

from src.jittools.registry import InMemoryToolRegistry
from src.jittools.retrieval.base import EmbeddingProvider, IntentAnalyzer
from src.jittools.retrieval.models import ParsedIntent, RetrievedTool, ToolCategory, ToolSpec

FIXED_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_tool(
    tool_id: str,
    category: ToolCategory = ToolCategory.CUSTOM,
    capabilities=(),
    keywords=(),
    permissions=(),
    priority: int = 50,
    token_cost: int = 100,
    deprecated: bool = False,
    description: str = "",
) -> ToolSpec:
    return ToolSpec(
        id=tool_id,
        name=tool_id,
        description=description or f"The {tool_id} tool",
        category=category,
        capabilities=list(capabilities),
        keywords=list(keywords),
        permissions=list(permissions),
        priority=priority,
        token_cost=token_cost,
        deprecated=deprecated,
        updated_at=FIXED_TIME,
    )


def make_retrieved(tool_id: str, score: float, token_cost: int = 100) -> RetrievedTool:
    return RetrievedTool(tool=make_tool(tool_id, token_cost=token_cost), final_score=score)


def build_registry() -> InMemoryToolRegistry:
    """A realistic catalog of developer tools."""
    return InMemoryToolRegistry([
        make_tool(
            "git_diff", ToolCategory.VERSION_CONTROL,
            capabilities=["diff", "compare"], keywords=["git", "diff", "changes"],
            permissions=["repo:read"], priority=70, token_cost=300,
            description="Show the diff between two git revisions",
        ),
        make_tool(
            "pr_review", ToolCategory.VERSION_CONTROL,
            capabilities=["code-review", "comment"], keywords=["pull", "request", "review"],
            permissions=["repo:read", "repo:write"], priority=80, token_cost=600,
            description="Review a pull request and leave comments",
        ),
        make_tool(
            "secret_scan", ToolCategory.SECURITY,
            capabilities=["scan", "secrets"], keywords=["secret", "credential", "leak"],
            permissions=["repo:read"], priority=75, token_cost=400,
            description="Scan the repository for leaked credentials",
        ),
        make_tool(
            "vuln_audit", ToolCategory.SECURITY,
            capabilities=["scan", "cve"], keywords=["vulnerability", "dependency", "audit"],
            permissions=["repo:read", "net:access"], priority=65, token_cost=800,
            description="Audit dependencies for known vulnerabilities",
        ),
        make_tool(
            "unit_runner", ToolCategory.TESTING,
            capabilities=["run-tests", "coverage"], keywords=["test", "pytest", "coverage"],
            permissions=["exec"], priority=60, token_cost=500,
            description="Run the unit test suite with coverage",
        ),
        make_tool(
            "doc_gen", ToolCategory.DOCUMENTATION,
            capabilities=["generate-docs"], keywords=["docs", "readme"],
            priority=40, token_cost=200,
            description="Generate API documentation",
        ),
        make_tool(
            "legacy_lint", ToolCategory.CODE_ANALYSIS,
            capabilities=["lint"], keywords=["lint", "style"],
            priority=30, token_cost=100, deprecated=True,
            description="Old style checker",
        ),
        make_tool(
            "metrics_dash", ToolCategory.MONITORING,
            capabilities=["metrics"], keywords=["metrics", "dashboard"],
            permissions=["metrics:read"], priority=50, token_cost=250,
            description="Query service metrics dashboards",
        ),
    ])


class StubIntentAnalyzer(IntentAnalyzer):
    """Returns a fixed intent and records what it was asked."""

    def __init__(self, intent: Optional[ParsedIntent] = None) -> None:
        self.intent = intent or ParsedIntent(normalized_query="")
        self.queries: list[str] = []
        self.task_contexts = []

    async def analyze(self, query, context=None):
        self.queries.append(query)
        return self.intent

    async def analyze_with_task_context(self, query, task_context):
        self.queries.append(query)
        self.task_contexts.append(task_context)
        return self.intent


class CountingEmbeddingProvider(EmbeddingProvider):
    """Wraps fixed vectors per text and counts embed calls."""

    def __init__(self, vectors: Optional[dict] = None, default=None) -> None:
        self.vectors = vectors or {}
        self.default = default
        self.calls: list[str] = []

    async def embed(self, text):
        self.calls.append(text)
        return self.vectors.get(text, self.default)
