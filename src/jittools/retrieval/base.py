"""Abstract interfaces for the collaborators the retriever depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from .models import AgentContext, ParsedIntent, TaskContext, ToolCategory, ToolSpec


class ToolRegistry(ABC):
    """Read-only view of the tools available for retrieval."""

    @abstractmethod
    def get_by_category(
        self,
        category: ToolCategory,
        include_deprecated: bool = False,
    ) -> list[ToolSpec]: ...

    @abstractmethod
    def get_all(self, exclude_deprecated: bool = True) -> list[ToolSpec]: ...

    @abstractmethod
    def search(
        self,
        capabilities: Optional[Iterable[str]] = None,
        include_deprecated: bool = False,
    ) -> list[ToolSpec]:
        """Return tools offering at least one of the given capabilities."""
        ...


class IntentAnalyzer(ABC):
    """Turns a natural-language query into a ParsedIntent."""

    @abstractmethod
    async def analyze(
        self,
        query: str,
        context: Optional[AgentContext] = None,
    ) -> ParsedIntent: ...

    @abstractmethod
    async def analyze_with_task_context(
        self,
        query: str,
        task_context: TaskContext,
    ) -> ParsedIntent: ...


class EmbeddingProvider(ABC):
    """Maps text to a fixed-dimension vector.

    Implementations MUST be deterministic for identical text. Returning None
    means no vector is available; callers treat that as zero similarity.
    """

    @abstractmethod
    async def embed(self, text: str) -> Optional[Sequence[float]]: ...
