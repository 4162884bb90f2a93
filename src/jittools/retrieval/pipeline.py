"""JITToolRetriever: single entry point for tool retrieval and ranking."""

from __future__ import annotations

import time
from typing import Any, Iterable, Optional

from src.utils.logger import get_logger

from .base import EmbeddingProvider, IntentAnalyzer, ToolRegistry
from .budget import apply_budget_constraints, total_token_cost
from .cache import ResultCache, cache_key
from .candidates import CandidateSelector
from .config import JITToolConfig
from .embedding import EmbeddingCache, HashEmbeddingProvider
from .logging import RetrievalLogger
from .models import (
    AgentContext,
    RetrievalMetadata,
    RetrievalOptions,
    ToolCategory,
    ToolRetrievalResult,
)
from .permissions import filter_by_permissions
from .scorer import ToolScorer

# Boost applied to explicitly requested categories in retrieve_by_categories
CATEGORY_REQUEST_BOOST = 2.0
# History entries considered by get_recommendations
RECOMMENDATION_HISTORY_SIZE = 10


class JITToolRetriever:
    """Retrieves and ranks tools for a natural-language query.

    Pipeline: cache check → intent analysis → candidate selection → scoring →
    permission filter → score threshold → budget allocation → cache write.

    Collaborator failures propagate unchanged after observers are told via
    ``log_retrieval_error``. Nothing is retried.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        intent_analyzer: IntentAnalyzer,
        config: Optional[JITToolConfig] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        loggers: Optional[Iterable[RetrievalLogger]] = None,
    ) -> None:
        self.registry = registry
        self.intent_analyzer = intent_analyzer
        self._config = config.model_copy(deep=True) if config else JITToolConfig()
        self.embeddings = EmbeddingCache(embedding_provider or HashEmbeddingProvider())
        self.scorer = ToolScorer(self.embeddings)
        self.selector = CandidateSelector(registry)
        self.cache = ResultCache(self._config.cache_ttl_ms)
        self.loggers: list[RetrievalLogger] = list(loggers or [])
        self.logger = get_logger("JITToolRetriever")

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_logger(self, observer: RetrievalLogger) -> None:
        self.loggers.append(observer)

    def remove_logger(self, observer: RetrievalLogger) -> None:
        if observer in self.loggers:
            self.loggers.remove(observer)

    def _emit(self, event: str, *args: Any) -> None:
        for observer in self.loggers:
            getattr(observer, event)(*args)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def retrieve(
        self,
        query: str,
        context: Optional[AgentContext] = None,
        options: Optional[RetrievalOptions] = None,
    ) -> ToolRetrievalResult:
        """Retrieve the most relevant tools for ``query`` within budget."""
        options = options or RetrievalOptions()
        config = self._config
        start = time.perf_counter()

        self._emit("log_retrieval_started", query, context)

        try:
            key = cache_key(query, context, options)
            if config.enable_caching:
                cached = self.cache.get(key)
                if cached is not None:
                    self.logger.debug(f"Cache hit for {query!r}")
                    self._emit("log_cache_hit", query)
                    return cached
                self._emit("log_cache_miss", query)

            if context is not None and context.task_context is not None:
                intent = await self.intent_analyzer.analyze_with_task_context(
                    query, context.task_context
                )
            else:
                intent = await self.intent_analyzer.analyze(query, context)

            candidates = self.selector.select(intent, config, options)
            scored = await self.scorer.score_tools(candidates, intent, config, context, options)

            permitted = filter_by_permissions(
                scored,
                context,
                config.permission_mode,
                bypass=options.bypass_permissions,
            )

            min_score = (
                options.min_relevance_score
                if options.min_relevance_score is not None
                else config.min_relevance_score
            )
            above_threshold = [rt for rt in permitted if rt.final_score >= min_score]

            max_tools = options.max_tools if options.max_tools is not None else config.max_tools
            max_budget = (
                options.max_token_budget
                if options.max_token_budget is not None
                else config.max_token_budget
            )
            selected = apply_budget_constraints(above_threshold, max_tools, max_budget)

            result = ToolRetrievalResult(
                tools=selected,
                total_matches=len(scored),
                query=query,
                retrieval_time_ms=(time.perf_counter() - start) * 1000,
                total_token_cost=total_token_cost(selected),
                metadata=RetrievalMetadata(
                    tools_scanned=len(candidates),
                    filtered_by_permissions=len(scored) - len(permitted),
                    filtered_by_score=len(permitted) - len(above_threshold),
                    used_semantic_search=config.enable_semantic_search,
                    cache_hit=False,
                ),
            )
            self.logger.debug(
                f"Scanned {len(candidates)} candidates, "
                f"{result.metadata.filtered_by_permissions} removed by permissions, "
                f"{result.metadata.filtered_by_score} below {min_score}, "
                f"{len(selected)} selected"
            )

            if config.enable_caching:
                swept = self.cache.put(key, result)
                if swept:
                    self._emit("log_cache_invalidated", swept)

            self._emit("log_retrieval_completed", result)
            return result

        except Exception as e:
            self.logger.error(f"❌ Tool retrieval failed for {query!r}: {e}")
            self._emit("log_retrieval_error", query, e)
            raise

    async def retrieve_by_capabilities(
        self,
        capabilities: list[str],
        context: Optional[AgentContext] = None,
        options: Optional[RetrievalOptions] = None,
    ) -> ToolRetrievalResult:
        query = f"Find tools with capabilities: {', '.join(capabilities)}"
        return await self.retrieve(query, context, options)

    async def retrieve_by_categories(
        self,
        categories: list[ToolCategory | str],
        context: Optional[AgentContext] = None,
        options: Optional[RetrievalOptions] = None,
    ) -> ToolRetrievalResult:
        """Retrieve with a 2.0x category boost for each requested category.

        The boosts replace any ``category_boosts`` already set on ``options``.
        """
        resolved = [ToolCategory(c) for c in categories]
        options = options or RetrievalOptions()
        boosted = RetrievalOptions(
            max_tools=options.max_tools,
            max_token_budget=options.max_token_budget,
            min_relevance_score=options.min_relevance_score,
            bypass_permissions=options.bypass_permissions,
            include_deprecated=options.include_deprecated,
            category_boosts={c: CATEGORY_REQUEST_BOOST for c in resolved},
            prioritized_tool_ids=list(options.prioritized_tool_ids),
            excluded_tool_ids=list(options.excluded_tool_ids),
        )
        query = f"Find tools in categories: {', '.join(c.value for c in resolved)}"
        return await self.retrieve(query, context, boosted)

    async def get_recommendations(
        self,
        context: AgentContext,
        options: Optional[RetrievalOptions] = None,
    ) -> ToolRetrievalResult:
        """Recommend tools from the agent's recent successful history and preferences.

        The agent's preferred tools are prioritized and its excluded tools are
        excluded, replacing those lists on ``options``.
        """
        recent = [
            record.tool_id
            for record in context.tool_history
            if record.success and record.relevance_feedback != "not_helpful"
        ][:RECOMMENDATION_HISTORY_SIZE]
        preferred_categories = [
            ToolCategory(c).value for c in context.preferences.preferred_categories
        ]
        query = (
            f"Recommend tools similar to: {', '.join(recent)}. "
            f"Prefer categories: {', '.join(preferred_categories)}"
        )

        options = options or RetrievalOptions()
        hinted = RetrievalOptions(
            max_tools=options.max_tools,
            max_token_budget=options.max_token_budget,
            min_relevance_score=options.min_relevance_score,
            bypass_permissions=options.bypass_permissions,
            include_deprecated=options.include_deprecated,
            category_boosts=dict(options.category_boosts),
            prioritized_tool_ids=list(context.preferences.preferred_tools),
            excluded_tool_ids=list(context.preferences.excluded_tools),
        )
        return await self.retrieve(query, context, hinted)

    # ------------------------------------------------------------------
    # Configuration and cache
    # ------------------------------------------------------------------

    def update_config(self, partial: Optional[dict] = None, **changes: Any) -> None:
        """Merge ``partial``/``changes`` over the current config and clear the cache."""
        merged = {**(partial or {}), **changes}
        self._config = self._config.merged(merged)
        self.cache.ttl_ms = self._config.cache_ttl_ms
        self.logger.info(f"⚙️ Retriever config updated: {sorted(merged)}")
        self.clear_cache()

    def clear_cache(self) -> None:
        count = self.cache.clear()
        self._emit("log_cache_invalidated", count)

    def get_config(self) -> JITToolConfig:
        """Return a copy of the current configuration."""
        return self._config.model_copy(deep=True)


def create_tool_retriever(
    registry: ToolRegistry,
    config: Optional[JITToolConfig] = None,
    intent_analyzer: Optional[IntentAnalyzer] = None,
    embedding_provider: Optional[EmbeddingProvider] = None,
    loggers: Optional[Iterable[RetrievalLogger]] = None,
) -> JITToolRetriever:
    """Build a retriever, defaulting to the keyword intent analyzer.

    The default analyzer recognises capabilities offered by the registry's
    current tools.
    """
    if intent_analyzer is None:
        from src.jittools.intent import KeywordIntentAnalyzer

        intent_analyzer = KeywordIntentAnalyzer.for_registry(registry)
    return JITToolRetriever(
        registry,
        intent_analyzer,
        config=config,
        embedding_provider=embedding_provider,
        loggers=loggers,
    )
