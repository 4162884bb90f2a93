"""Candidate pool selection from parsed intent.

Pure read of the registry: picks the initial pool by intent category,
configured categories or the full registry, applies exclusions, then merges
in tools matching the intent's required capabilities.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .base import ToolRegistry
from .config import JITToolConfig
from .models import ParsedIntent, RetrievalOptions, ToolCategory, ToolSpec


def _union_by_category(
    registry: ToolRegistry,
    categories: Iterable[ToolCategory],
    include_deprecated: bool = False,
) -> dict[str, ToolSpec]:
    pool: dict[str, ToolSpec] = {}
    for category in categories:
        for tool in registry.get_by_category(
            ToolCategory(category), include_deprecated=include_deprecated
        ):
            pool.setdefault(tool.id, tool)
    return pool


class CandidateSelector:
    """Derives the candidate tool pool for one retrieval call."""

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    def select(
        self,
        intent: ParsedIntent,
        config: JITToolConfig,
        options: Optional[RetrievalOptions] = None,
    ) -> list[ToolSpec]:
        """Return candidate tools. Order is not significant; scoring re-sorts.

        The capability merge runs last and only adds tools. Excluded categories
        and excluded ids still apply to what it adds.
        """
        options = options or RetrievalOptions()
        excluded_categories = {ToolCategory(c) for c in config.excluded_categories}
        excluded_ids = set(options.excluded_tool_ids)

        def allowed(tool: ToolSpec) -> bool:
            return tool.category not in excluded_categories and tool.id not in excluded_ids

        if intent.relevant_categories:
            pool = _union_by_category(
                self.registry, intent.relevant_categories, options.include_deprecated
            )
        elif config.included_categories:
            pool = _union_by_category(
                self.registry, config.included_categories, options.include_deprecated
            )
        else:
            pool = {
                t.id: t
                for t in self.registry.get_all(
                    exclude_deprecated=not options.include_deprecated
                )
            }

        pool = {k: t for k, t in pool.items() if allowed(t)}

        if intent.required_capabilities:
            for tool in self.registry.search(
                capabilities=intent.required_capabilities,
                include_deprecated=options.include_deprecated,
            ):
                if allowed(tool):
                    pool.setdefault(tool.id, tool)

        return list(pool.values())
