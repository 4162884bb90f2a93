"""Observer interface for retrieval lifecycle events.

These hooks are advisory and synchronous. The retriever calls them in order,
so a slow observer slows retrieval and one that raises propagates to the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from src.utils.logger import get_logger

from .models import AgentContext, ToolRetrievalResult


class RetrievalLogger(ABC):
    """Abstract interface for retrieval event observers."""

    @abstractmethod
    def log_retrieval_started(
        self,
        query: str,
        context: Optional[AgentContext],
    ) -> None: ...

    @abstractmethod
    def log_retrieval_completed(self, result: ToolRetrievalResult) -> None: ...

    @abstractmethod
    def log_retrieval_error(self, query: str, error: BaseException) -> None: ...

    @abstractmethod
    def log_cache_hit(self, query: str) -> None: ...

    @abstractmethod
    def log_cache_miss(self, query: str) -> None: ...

    @abstractmethod
    def log_cache_invalidated(self, count: int) -> None: ...


class NullLogger(RetrievalLogger):
    """No-op observer. Default when none is configured."""

    def log_retrieval_started(
        self,
        query: str,
        context: Optional[AgentContext],
    ) -> None:
        pass

    def log_retrieval_completed(self, result: ToolRetrievalResult) -> None:
        pass

    def log_retrieval_error(self, query: str, error: BaseException) -> None:
        pass

    def log_cache_hit(self, query: str) -> None:
        pass

    def log_cache_miss(self, query: str) -> None:
        pass

    def log_cache_invalidated(self, count: int) -> None:
        pass


class LoguruRetrievalLogger(RetrievalLogger):
    """Writes retrieval events to the application log."""

    def __init__(self, name: str = "retrieval.events") -> None:
        self.logger = get_logger(name)

    def log_retrieval_started(
        self,
        query: str,
        context: Optional[AgentContext],
    ) -> None:
        agent = context.agent_id if context else "anonymous"
        self.logger.debug(f"🔎 Retrieval started for {agent}: {query!r}")

    def log_retrieval_completed(self, result: ToolRetrievalResult) -> None:
        ids = [rt.tool.id for rt in result.tools]
        self.logger.info(
            f"✅ Retrieved {len(ids)}/{result.total_matches} tools "
            f"({result.total_token_cost} tokens, {result.retrieval_time_ms:.1f} ms): {ids}"
        )

    def log_retrieval_error(self, query: str, error: BaseException) -> None:
        self.logger.error(f"❌ Retrieval failed for {query!r}: {error}")

    def log_cache_hit(self, query: str) -> None:
        self.logger.debug(f"Cache hit: {query!r}")

    def log_cache_miss(self, query: str) -> None:
        self.logger.debug(f"Cache miss: {query!r}")

    def log_cache_invalidated(self, count: int) -> None:
        self.logger.debug(f"🧹 Invalidated {count} cached results")
