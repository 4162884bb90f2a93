"""In-memory tool registry."""

from __future__ import annotations

from typing import Iterable, Optional

from src.jittools.retrieval.base import ToolRegistry
from src.jittools.retrieval.models import ToolCategory, ToolSpec
from src.jittools.yaml_config import ToolEntry
from src.utils.logger import get_logger

logger = get_logger("registry")


class InMemoryToolRegistry(ToolRegistry):
    """Dict-backed registry keyed by tool id. Registration order is preserved.

    Lookups skip deprecated tools unless asked otherwise.
    """

    def __init__(self, tools: Optional[Iterable[ToolSpec]] = None) -> None:
        self._tools: dict[str, ToolSpec] = {}
        if tools:
            self.register_many(tools)

    @classmethod
    def from_entries(cls, entries: Iterable[ToolEntry]) -> "InMemoryToolRegistry":
        return cls(entry.to_spec() for entry in entries)

    def register(self, tool: ToolSpec) -> None:
        """Add or replace a tool."""
        if tool.id in self._tools:
            logger.debug(f"Replacing registered tool '{tool.id}'")
        self._tools[tool.id] = tool

    def register_many(self, tools: Iterable[ToolSpec]) -> None:
        for tool in tools:
            self.register(tool)

    def unregister(self, tool_id: str) -> bool:
        """Remove a tool. Returns False if it was not registered."""
        return self._tools.pop(tool_id, None) is not None

    def get(self, tool_id: str) -> Optional[ToolSpec]:
        return self._tools.get(tool_id)

    def get_by_category(
        self,
        category: ToolCategory,
        include_deprecated: bool = False,
    ) -> list[ToolSpec]:
        category = ToolCategory(category)
        return [
            t for t in self._tools.values()
            if t.category == category and (include_deprecated or not t.deprecated)
        ]

    def get_all(self, exclude_deprecated: bool = True) -> list[ToolSpec]:
        if not exclude_deprecated:
            return list(self._tools.values())
        return [t for t in self._tools.values() if not t.deprecated]

    def search(
        self,
        capabilities: Optional[Iterable[str]] = None,
        include_deprecated: bool = False,
        category: Optional[ToolCategory] = None,
    ) -> list[ToolSpec]:
        """Tools offering any of ``capabilities`` (case-insensitive).

        With no capabilities, every tool passing the other filters matches.
        """
        wanted = {c.lower() for c in capabilities} if capabilities else None
        results = []
        for tool in self._tools.values():
            if tool.deprecated and not include_deprecated:
                continue
            if category is not None and tool.category != ToolCategory(category):
                continue
            if wanted is not None and not wanted & {c.lower() for c in tool.capabilities}:
                continue
            results.append(tool)
        return results

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._tools
