"""JIT tool retrieval: scoring, filtering and budget-aware selection of tools."""

from .base import EmbeddingProvider, IntentAnalyzer, ToolRegistry
from .config import JITToolConfig, ScoringWeights
from .embedding import HashEmbeddingProvider
from .logging import LoguruRetrievalLogger, NullLogger, RetrievalLogger
from .models import (
    AgentContext,
    AgentPreferences,
    ParsedIntent,
    PermissionMode,
    RetrievalOptions,
    RetrievedTool,
    TaskContext,
    ToolCategory,
    ToolRetrievalResult,
    ToolSpec,
    ToolUsageRecord,
)
from .pipeline import JITToolRetriever, create_tool_retriever

__all__ = [
    "AgentContext",
    "AgentPreferences",
    "EmbeddingProvider",
    "HashEmbeddingProvider",
    "IntentAnalyzer",
    "JITToolConfig",
    "JITToolRetriever",
    "LoguruRetrievalLogger",
    "NullLogger",
    "ParsedIntent",
    "PermissionMode",
    "RetrievalLogger",
    "RetrievalOptions",
    "RetrievedTool",
    "ScoringWeights",
    "TaskContext",
    "ToolCategory",
    "ToolRegistry",
    "ToolRetrievalResult",
    "ToolSpec",
    "ToolUsageRecord",
    "create_tool_retriever",
]
