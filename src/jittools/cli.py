from __future__ import annotations
from pathlib import Path
from typing import Optional
from src.jittools.registry import InMemoryToolRegistry
from src.jittools.retrieval import (
    AgentContext,
    LoguruRetrievalLogger,
    RetrievalOptions,
    ToolCategory,
    create_tool_retriever,
)
from src.jittools.yaml_config import load_config
from src.utils.logger import get_logger

logger = get_logger("cli")
DEFAULT_YAML = Path.home() / ".config" / "jit-tools" / "tools.yaml"


def cmd_list(
    yaml_path: Path = DEFAULT_YAML,
    category: Optional[str] = None,
) -> str:
    config = load_config(yaml_path)
    if not config.tools:
        return f"No tools configured. Add a 'tools:' list to {yaml_path}"

    try:
        wanted = ToolCategory(category) if category else None
    except ValueError:
        known = ", ".join(c.value for c in ToolCategory)
        return f"Unknown category '{category}'. Known categories: {known}"
    lines = []
    for entry in sorted(config.tools, key=lambda t: (t.category.value, t.id)):
        if wanted is not None and entry.category != wanted:
            continue
        status = "⚠" if entry.deprecated else "✓"
        label = " [deprecated]" if entry.deprecated else ""
        lines.append(
            f"  {status} {entry.id} ({entry.category.value}, "
            f"priority {entry.priority}, {entry.token_cost} tokens){label}"
        )

    if not lines:
        return f"No tools in category '{category}'."
    return "\n".join(lines)


async def cmd_retrieve(
    query: str,
    yaml_path: Path = DEFAULT_YAML,
    agent_id: Optional[str] = None,
    permissions: Optional[list[str]] = None,
    max_tools: Optional[int] = None,
    max_token_budget: Optional[int] = None,
) -> str:
    config = load_config(yaml_path)
    if not config.tools:
        return "No tools configured."

    registry = InMemoryToolRegistry.from_entries(config.tools)
    retriever = create_tool_retriever(
        registry,
        config=config.retrieval,
        loggers=[LoguruRetrievalLogger()],
    )
    context = (
        AgentContext(agent_id=agent_id, permissions=list(permissions or []))
        if agent_id
        else None
    )
    options = RetrievalOptions(max_tools=max_tools, max_token_budget=max_token_budget)

    result = await retriever.retrieve(query, context, options)
    if not result.tools:
        return f"No tools matched {query!r} ({result.total_matches} scored)."

    lines = [f"{len(result.tools)} tool(s) for {query!r}:"]
    for rank, rt in enumerate(result.tools, start=1):
        reasons = f"  [{'; '.join(rt.match_reasons)}]" if rt.match_reasons else ""
        lines.append(f"  {rank}. {rt.tool.id}  {rt.final_score:.3f}  ({rt.tool.token_cost} tokens){reasons}")
    lines.append(f"Total token cost: {result.total_token_cost}")
    return "\n".join(lines)
