"""Retriever configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .models import PermissionMode, ToolCategory


class ScoringWeights(BaseModel):
    """Weights of the five scoring signals. Need not sum to 1."""
    semantic: float = 0.35
    keyword: float = 0.25
    permission: float = 0.15
    priority: float = 0.1
    category: float = 0.15


class JITToolConfig(BaseModel):
    """Retriever configuration.

    Only types are validated; negative weights or a zero budget are accepted.
    """
    max_tools: int = 10
    max_token_budget: int = 8000
    min_relevance_score: float = 0.3
    enable_semantic_search: bool = True
    enable_caching: bool = True
    cache_ttl_ms: int = 300_000
    permission_mode: PermissionMode = PermissionMode.STRICT
    included_categories: list[ToolCategory] = Field(default_factory=list)
    excluded_categories: list[ToolCategory] = Field(default_factory=list)
    scoring_weights: ScoringWeights = Field(default_factory=ScoringWeights)

    def merged(self, changes: dict) -> "JITToolConfig":
        """Return a new config with ``changes`` applied over this one.

        ``scoring_weights`` may be given as a partial dict; missing weights
        keep their current values.
        """
        data = self.model_dump()
        for key, value in changes.items():
            if key == "scoring_weights" and isinstance(value, dict):
                data[key] = {**data[key], **value}
            elif isinstance(value, BaseModel):
                data[key] = value.model_dump()
            else:
                data[key] = value
        return JITToolConfig.model_validate(data)
