"""Multi-signal tool scoring.

Each candidate gets five independent signals (semantic, keyword, permission,
priority, category). They are combined with the configured weights, then
multiplied by contextual boosts (prioritized ids, agent preferences, usage
history) and clamped to [0, 1].
"""

from __future__ import annotations

from typing import Mapping, Optional

from .config import JITToolConfig
from .embedding import EmbeddingCache, cosine_similarity
from .models import (
    AgentContext,
    ParsedIntent,
    PermissionMode,
    RetrievalOptions,
    RetrievedTool,
    ToolCategory,
    ToolSpec,
)


PRIORITIZED_BOOST = 1.5
PREFERRED_BOOST = 1.3
# Per-rate contribution to the history boost
_HISTORY_RATE_WEIGHT = 0.2
# helpful_rate when no history record carries feedback
_NEUTRAL_HELPFUL_RATE = 0.5

_HIGH_SEMANTIC = 0.7
_KEYWORD_REASON = 0.5
_MAX_REASON_ITEMS = 3


def keyword_score(tool: ToolSpec, intent: ParsedIntent) -> float:
    """Fraction of query keywords found among the tool's keywords, capabilities and name.

    Exact hits count 1, substring overlaps in either direction count 0.5.
    """
    query_keywords = [k.lower() for k in intent.keywords]
    if not query_keywords:
        return 0.0

    tool_keywords = {k.lower() for k in tool.keywords}
    tool_keywords.update(c.lower() for c in tool.capabilities)
    tool_keywords.add(tool.name.lower())

    matches = 0.0
    for keyword in query_keywords:
        if keyword in tool_keywords:
            matches += 1.0
            continue
        for tool_keyword in tool_keywords:
            if keyword in tool_keyword or tool_keyword in keyword:
                matches += 0.5
                break

    return min(matches / len(query_keywords), 1.0)


def permission_score(
    tool: ToolSpec,
    context: Optional[AgentContext],
    mode: PermissionMode = PermissionMode.STRICT,
) -> float:
    """Fraction of the tool's required permissions the agent holds."""
    if context is None or mode == PermissionMode.DISABLED or not tool.permissions:
        return 1.0
    granted = set(context.permissions)
    matched = sum(1 for p in tool.permissions if p in granted)
    return matched / len(tool.permissions)


def category_score(
    tool: ToolSpec,
    intent: ParsedIntent,
    boosts: Mapping[ToolCategory, float],
) -> float:
    score = 1.0 if tool.category in intent.relevant_categories else 0.0
    boost = boosts.get(tool.category)
    if boost:
        score *= boost
    return min(score, 1.0)


def history_boost(tool_id: str, context: AgentContext) -> float:
    """1 + 0.2 x success rate + 0.2 x helpful rate over this tool's history."""
    records = [h for h in context.tool_history if h.tool_id == tool_id]
    if not records:
        return 1.0

    success_rate = sum(1 for h in records if h.success) / len(records)

    with_feedback = [h for h in records if h.relevance_feedback]
    if with_feedback:
        helpful = sum(1 for h in with_feedback if h.relevance_feedback == "helpful")
        helpful_rate = helpful / len(with_feedback)
    else:
        helpful_rate = _NEUTRAL_HELPFUL_RATE

    return 1.0 + success_rate * _HISTORY_RATE_WEIGHT + helpful_rate * _HISTORY_RATE_WEIGHT


def match_reasons(
    tool: ToolSpec,
    intent: ParsedIntent,
    semantic: float,
    keyword: float,
    permission: float,
) -> list[str]:
    """Human-readable explanations for why a tool matched. Diagnostic only."""
    reasons: list[str] = []

    if semantic > _HIGH_SEMANTIC:
        reasons.append("High semantic similarity")

    if keyword > _KEYWORD_REASON:
        query_keywords = {k.lower() for k in intent.keywords}
        matching = [k for k in tool.keywords if k.lower() in query_keywords]
        if matching:
            reasons.append(f"Keywords: {', '.join(matching[:_MAX_REASON_ITEMS])}")

    if tool.category in intent.relevant_categories:
        reasons.append(f"Category: {tool.category.value}")

    required = set(intent.required_capabilities)
    matching_caps = [c for c in tool.capabilities if c in required]
    if matching_caps:
        reasons.append(f"Capabilities: {', '.join(matching_caps[:_MAX_REASON_ITEMS])}")

    if permission == 1.0 and tool.permissions:
        reasons.append("Full permission match")

    return reasons


class ToolScorer:
    """Scores candidate tools against a parsed intent."""

    def __init__(self, embeddings: EmbeddingCache) -> None:
        self.embeddings = embeddings

    async def semantic_score(self, tool: ToolSpec, intent: ParsedIntent) -> float:
        """Cosine similarity of tool and query embeddings; 0.0 when either is missing.

        The value may be negative for embeddings that allow it. It is left as-is
        and only the combined score is clamped.
        """
        tool_vector = await self.embeddings.tool_embedding(tool)
        query_vector = await self.embeddings.query_embedding(intent.normalized_query)
        if tool_vector is None or query_vector is None:
            return 0.0
        return cosine_similarity(tool_vector, query_vector)

    async def score_tools(
        self,
        tools: list[ToolSpec],
        intent: ParsedIntent,
        config: JITToolConfig,
        context: Optional[AgentContext] = None,
        options: Optional[RetrievalOptions] = None,
    ) -> list[RetrievedTool]:
        """Score every tool sequentially and return them sorted by final score descending."""
        options = options or RetrievalOptions()
        weights = config.scoring_weights
        boosts = {ToolCategory(c): b for c, b in options.category_boosts.items()}
        prioritized = set(options.prioritized_tool_ids)
        preferred = set(context.preferences.preferred_tools) if context else set()

        scored: list[RetrievedTool] = []
        for tool in tools:
            semantic = (
                await self.semantic_score(tool, intent)
                if config.enable_semantic_search
                else 0.0
            )
            keyword = keyword_score(tool, intent)
            permission = permission_score(tool, context, config.permission_mode)
            priority = tool.priority / 100
            category = category_score(tool, intent, boosts)

            final = (
                semantic * weights.semantic
                + keyword * weights.keyword
                + permission * weights.permission
                + priority * weights.priority
                + category * weights.category
            )

            if tool.id in prioritized:
                final *= PRIORITIZED_BOOST
            if tool.id in preferred:
                final *= PREFERRED_BOOST
            if context is not None:
                final *= history_boost(tool.id, context)

            final = min(max(final, 0.0), 1.0)

            scored.append(RetrievedTool(
                tool=tool,
                semantic_score=semantic,
                keyword_score=keyword,
                permission_score=permission,
                priority_score=priority,
                category_score=category,
                relevance_score=(semantic + keyword) / 2,
                final_score=final,
                match_reasons=match_reasons(tool, intent, semantic, keyword, permission),
            ))

        # Stable sort keeps candidate order for equal scores
        scored.sort(key=lambda rt: rt.final_score, reverse=True)
        return scored
