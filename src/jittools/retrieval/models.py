"""Core data models for the JIT tool retrieval engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional


class ToolCategory(str, Enum):
    """Functional area a tool belongs to."""
    CODE_ANALYSIS = "code_analysis"
    CODE_GENERATION = "code_generation"
    TESTING = "testing"
    SECURITY = "security"
    DOCUMENTATION = "documentation"
    DEPLOYMENT = "deployment"
    MONITORING = "monitoring"
    VERSION_CONTROL = "version_control"
    DATA = "data"
    COMMUNICATION = "communication"
    COORDINATION = "coordination"
    MEMORY = "memory"
    CUSTOM = "custom"


class PermissionMode(str, Enum):
    """How partial permission matches are treated by the permission filter."""
    DISABLED = "disabled"
    LENIENT = "lenient"
    STRICT = "strict"


RelevanceFeedback = Literal["helpful", "not_helpful"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ToolSpec:
    """A registered tool. Owned by the registry; read-only to the retriever."""
    id: str
    name: str
    description: str = ""
    category: ToolCategory = ToolCategory.CUSTOM
    capabilities: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    permissions: list[str] = field(default_factory=list)
    priority: int = 50
    token_cost: int = 100
    deprecated: bool = False
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ParsedIntent:
    """Structured reading of one query. Scoped to a single retrieval call."""
    normalized_query: str
    keywords: tuple[str, ...] = ()
    relevant_categories: tuple[ToolCategory, ...] = ()
    required_capabilities: tuple[str, ...] = ()


@dataclass
class ToolUsageRecord:
    """One past use of a tool by an agent."""
    tool_id: str
    success: bool = True
    relevance_feedback: Optional[RelevanceFeedback] = None
    timestamp: Optional[datetime] = None


@dataclass
class AgentPreferences:
    preferred_tools: list[str] = field(default_factory=list)
    excluded_tools: list[str] = field(default_factory=list)
    preferred_categories: list[ToolCategory] = field(default_factory=list)


@dataclass
class TaskContext:
    """What the agent is currently working on."""
    task_type: str
    description: str = ""
    required_capabilities: list[str] = field(default_factory=list)
    relevant_categories: list[ToolCategory] = field(default_factory=list)


@dataclass
class AgentContext:
    """Identity, grants and history of the requesting agent.

    ``tool_history`` is ordered most recent first.
    """
    agent_id: str
    permissions: list[str] = field(default_factory=list)
    tool_history: list[ToolUsageRecord] = field(default_factory=list)
    preferences: AgentPreferences = field(default_factory=AgentPreferences)
    task_context: Optional[TaskContext] = None


@dataclass
class RetrievedTool:
    """A candidate tool with its component scores for one retrieval call."""
    tool: ToolSpec
    semantic_score: float = 0.0
    keyword_score: float = 0.0
    permission_score: float = 1.0
    priority_score: float = 0.0
    category_score: float = 0.0
    relevance_score: float = 0.0
    final_score: float = 0.0
    match_reasons: list[str] = field(default_factory=list)


@dataclass
class RetrievalMetadata:
    tools_scanned: int = 0
    filtered_by_permissions: int = 0
    filtered_by_score: int = 0
    used_semantic_search: bool = False
    cache_hit: bool = False


@dataclass
class ToolRetrievalResult:
    """Ranked tools returned to the caller, ordered by final score descending."""
    tools: list[RetrievedTool]
    total_matches: int
    query: str
    retrieval_time_ms: float
    total_token_cost: int
    metadata: RetrievalMetadata = field(default_factory=RetrievalMetadata)


@dataclass
class RetrievalOptions:
    """Per-call overrides. ``None`` means "use the retriever's config"."""
    max_tools: Optional[int] = None
    max_token_budget: Optional[int] = None
    min_relevance_score: Optional[float] = None
    bypass_permissions: bool = False
    include_deprecated: bool = False
    category_boosts: dict[ToolCategory, float] = field(default_factory=dict)
    prioritized_tool_ids: list[str] = field(default_factory=list)
    excluded_tool_ids: list[str] = field(default_factory=list)

    def fingerprint(self) -> str:
        """Stable string for the options that change which tools are returned.

        Empty when every option is at its default, so plain calls share keys.
        """
        parts = []
        if self.max_tools is not None:
            parts.append(f"max={self.max_tools}")
        if self.max_token_budget is not None:
            parts.append(f"budget={self.max_token_budget}")
        if self.min_relevance_score is not None:
            parts.append(f"min={self.min_relevance_score}")
        if self.bypass_permissions:
            parts.append("bypass")
        if self.include_deprecated:
            parts.append("deprecated")
        if self.category_boosts:
            boosts = sorted(
                f"{ToolCategory(c).value}={b}" for c, b in self.category_boosts.items()
            )
            parts.append("boost=" + ",".join(boosts))
        if self.prioritized_tool_ids:
            parts.append("prio=" + ",".join(sorted(self.prioritized_tool_ids)))
        if self.excluded_tool_ids:
            parts.append("excl=" + ",".join(sorted(self.excluded_tool_ids)))
        return "|".join(parts)


@dataclass
class CacheEntry:
    result: ToolRetrievalResult
    timestamp: float
    key: str
