"""Tests for multi-signal tool scoring."""
import pytest
from dataclasses import replace

from src.jittools.retrieval.config import JITToolConfig, ScoringWeights
from src.jittools.retrieval.embedding import EmbeddingCache, HashEmbeddingProvider, tool_to_text
from src.jittools.retrieval.models import (
    AgentContext,
    AgentPreferences,
    ParsedIntent,
    PermissionMode,
    RetrievalOptions,
    ToolCategory,
    ToolUsageRecord,
)
from src.jittools.retrieval.scorer import (
    ToolScorer,
    category_score,
    history_boost,
    keyword_score,
    match_reasons,
    permission_score,
)
from tests.utils import CountingEmbeddingProvider, make_tool


class TestKeywordScore:
    def test_exact_and_partial_matches(self):
        tool = make_tool("pr_reviewer", keywords=["git", "review"], capabilities=["diff"])
        intent = ParsedIntent("q", keywords=("review", "pull", "rev"))
        # review = 1, pull = 0, rev ⊂ review = 0.5
        assert keyword_score(tool, intent) == pytest.approx(1.5 / 3)

    def test_capabilities_and_name_count(self):
        tool = make_tool("linter", capabilities=["lint"])
        intent = ParsedIntent("q", keywords=("lint", "linter"))
        assert keyword_score(tool, intent) == 1.0

    def test_case_insensitive(self):
        tool = make_tool("t", keywords=["GitHub"])
        intent = ParsedIntent("q", keywords=("github",))
        assert keyword_score(tool, intent) == 1.0

    def test_query_keyword_containing_tool_keyword_is_partial(self):
        tool = make_tool("t", keywords=["leak"])
        intent = ParsedIntent("q", keywords=("leaked",))
        assert keyword_score(tool, intent) == 0.5

    def test_no_query_keywords_scores_zero(self):
        tool = make_tool("t", keywords=["anything"])
        assert keyword_score(tool, ParsedIntent("q")) == 0.0

    def test_capped_at_one(self):
        tool = make_tool("t", keywords=["a1", "b1"])
        intent = ParsedIntent("q", keywords=("a1", "b1"))
        assert keyword_score(tool, intent) == 1.0


class TestPermissionScore:
    def test_fraction_of_required_permissions(self):
        tool = make_tool("t", permissions=["read", "write", "admin", "exec"])
        ctx = AgentContext(agent_id="a", permissions=["read", "exec"])
        assert permission_score(tool, ctx) == 0.5

    def test_no_requirements_is_full(self):
        ctx = AgentContext(agent_id="a")
        assert permission_score(make_tool("t"), ctx) == 1.0

    def test_no_context_is_full(self):
        tool = make_tool("t", permissions=["admin"])
        assert permission_score(tool, None) == 1.0

    def test_disabled_mode_is_full(self):
        tool = make_tool("t", permissions=["admin"])
        ctx = AgentContext(agent_id="a")
        assert permission_score(tool, ctx, PermissionMode.DISABLED) == 1.0


class TestCategoryScore:
    def test_match_and_miss(self):
        intent = ParsedIntent("q", relevant_categories=(ToolCategory.SECURITY,))
        assert category_score(make_tool("s", ToolCategory.SECURITY), intent, {}) == 1.0
        assert category_score(make_tool("t", ToolCategory.TESTING), intent, {}) == 0.0

    def test_boost_capped_at_one(self):
        intent = ParsedIntent("q", relevant_categories=(ToolCategory.SECURITY,))
        tool = make_tool("s", ToolCategory.SECURITY)
        assert category_score(tool, intent, {ToolCategory.SECURITY: 2.0}) == 1.0

    def test_boost_below_one_reduces(self):
        intent = ParsedIntent("q", relevant_categories=(ToolCategory.SECURITY,))
        tool = make_tool("s", ToolCategory.SECURITY)
        assert category_score(tool, intent, {ToolCategory.SECURITY: 0.5}) == 0.5

    def test_boost_without_match_stays_zero(self):
        tool = make_tool("s", ToolCategory.SECURITY)
        assert category_score(tool, ParsedIntent("q"), {ToolCategory.SECURITY: 2.0}) == 0.0


class TestHistoryBoost:
    def test_no_history_no_boost(self):
        ctx = AgentContext(agent_id="a", tool_history=[ToolUsageRecord("other")])
        assert history_boost("t", ctx) == 1.0

    def test_mixed_history(self):
        ctx = AgentContext(agent_id="a", tool_history=[
            ToolUsageRecord("t", success=True, relevance_feedback="helpful"),
            ToolUsageRecord("t", success=False, relevance_feedback="not_helpful"),
            ToolUsageRecord("t", success=True),
            ToolUsageRecord("other", success=False, relevance_feedback="not_helpful"),
        ])
        # success 2/3, helpful 1/2 (only records with feedback)
        assert history_boost("t", ctx) == pytest.approx(1 + 0.2 * 2 / 3 + 0.2 * 0.5)

    def test_no_feedback_defaults_helpful_rate_to_half(self):
        ctx = AgentContext(agent_id="a", tool_history=[ToolUsageRecord("t", success=True)])
        assert history_boost("t", ctx) == pytest.approx(1.3)


class TestMatchReasons:
    def test_all_reasons(self):
        tool = make_tool(
            "s", ToolCategory.SECURITY,
            keywords=["secret", "leak", "credential", "token"],
            capabilities=["scan", "secrets"],
            permissions=["repo:read"],
        )
        intent = ParsedIntent(
            "q",
            keywords=("secret", "leak", "credential", "token"),
            relevant_categories=(ToolCategory.SECURITY,),
            required_capabilities=("scan",),
        )
        reasons = match_reasons(tool, intent, semantic=0.8, keyword=1.0, permission=1.0)
        assert reasons == [
            "High semantic similarity",
            "Keywords: secret, leak, credential",
            "Category: security",
            "Capabilities: scan",
            "Full permission match",
        ]

    def test_no_permission_reason_without_requirements(self):
        reasons = match_reasons(make_tool("t"), ParsedIntent("q"), 0.0, 0.0, 1.0)
        assert reasons == []


class TestToolScorer:
    def setup_method(self):
        self.scorer = ToolScorer(EmbeddingCache(HashEmbeddingProvider()))
        self.config = JITToolConfig(enable_semantic_search=False)
        self.intent = ParsedIntent("q", relevant_categories=(ToolCategory.TESTING,))

    @pytest.mark.asyncio
    async def test_weighted_combination(self):
        tool = make_tool("t", ToolCategory.TESTING, priority=50)
        [scored] = await self.scorer.score_tools([tool], self.intent, self.config)
        # permission 1*0.15 + priority 0.5*0.1 + category 1*0.15
        assert scored.final_score == pytest.approx(0.35)
        assert scored.semantic_score == 0.0
        assert scored.priority_score == 0.5
        assert scored.category_score == 1.0

    @pytest.mark.asyncio
    async def test_prioritized_and_preferred_boosts(self):
        tool = make_tool("t", ToolCategory.TESTING, priority=50)
        ctx = AgentContext(
            agent_id="a",
            preferences=AgentPreferences(preferred_tools=["t"]),
        )
        options = RetrievalOptions(prioritized_tool_ids=["t"])
        [scored] = await self.scorer.score_tools([tool], self.intent, self.config, ctx, options)
        assert scored.final_score == pytest.approx(0.35 * 1.5 * 1.3)

    @pytest.mark.asyncio
    async def test_history_boost_applied(self):
        tool = make_tool("t", ToolCategory.TESTING, priority=50)
        ctx = AgentContext(agent_id="a", tool_history=[ToolUsageRecord("t", success=True)])
        [scored] = await self.scorer.score_tools([tool], self.intent, self.config, ctx)
        assert scored.final_score == pytest.approx(0.35 * 1.3)

    @pytest.mark.asyncio
    async def test_final_score_clamped(self):
        config = JITToolConfig(
            enable_semantic_search=False,
            scoring_weights=ScoringWeights(permission=5.0),
        )
        [scored] = await self.scorer.score_tools([make_tool("t")], self.intent, config)
        assert scored.final_score == 1.0

    @pytest.mark.asyncio
    async def test_sorted_descending(self):
        tools = [
            make_tool("low", priority=10),
            make_tool("high", ToolCategory.TESTING, priority=90),
            make_tool("mid", priority=60),
        ]
        scored = await self.scorer.score_tools(tools, self.intent, self.config)
        assert [s.tool.id for s in scored] == ["high", "mid", "low"]

    @pytest.mark.asyncio
    async def test_relevance_is_mean_of_semantic_and_keyword(self):
        intent = replace(self.intent, keywords=("t",))
        [scored] = await self.scorer.score_tools([make_tool("t")], intent, self.config)
        assert scored.relevance_score == pytest.approx((0.0 + 1.0) / 2)


class TestSemanticScore:
    @pytest.mark.asyncio
    async def test_missing_embedding_scores_zero(self):
        scorer = ToolScorer(EmbeddingCache(CountingEmbeddingProvider(default=None)))
        score = await scorer.semantic_score(make_tool("t"), ParsedIntent("query"))
        assert score == 0.0

    @pytest.mark.asyncio
    async def test_negative_similarity_kept_then_clamped(self):
        provider = CountingEmbeddingProvider(vectors={"opposite": [-1.0, 0.0]}, default=[1.0, 0.0])
        scorer = ToolScorer(EmbeddingCache(provider))
        config = JITToolConfig(scoring_weights=ScoringWeights(
            semantic=1.0, keyword=0.0, permission=0.0, priority=0.0, category=0.0,
        ))
        [scored] = await scorer.score_tools([make_tool("t")], ParsedIntent("opposite"), config)
        assert scored.semantic_score == pytest.approx(-1.0)
        assert scored.final_score == 0.0

    @pytest.mark.asyncio
    async def test_identical_text_scores_one(self):
        tool = make_tool("t", ToolCategory.TESTING)
        scorer = ToolScorer(EmbeddingCache(HashEmbeddingProvider()))
        score = await scorer.semantic_score(tool, ParsedIntent(tool_to_text(tool)))
        assert score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_semantic_disabled_skips_embeddings(self):
        provider = CountingEmbeddingProvider(default=[1.0])
        scorer = ToolScorer(EmbeddingCache(provider))
        config = JITToolConfig(enable_semantic_search=False)
        await scorer.score_tools([make_tool("t")], ParsedIntent("q"), config)
        assert provider.calls == []
