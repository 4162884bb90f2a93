"""Permission filtering of scored tools."""

from __future__ import annotations

from typing import Optional

from .models import AgentContext, PermissionMode, RetrievedTool


def filter_by_permissions(
    tools: list[RetrievedTool],
    context: Optional[AgentContext],
    mode: PermissionMode,
    bypass: bool = False,
) -> list[RetrievedTool]:
    """Drop tools the agent may not use. Preserves input order.

    No filtering happens when bypassed, when the mode is disabled, or when
    there is no agent context to check against.

    strict:  every required permission must be granted.
    lenient: the tool requires nothing, or at least one requirement is granted.
    """
    if bypass or mode == PermissionMode.DISABLED or context is None:
        return list(tools)

    granted = set(context.permissions)

    if mode == PermissionMode.STRICT:
        return [rt for rt in tools if all(p in granted for p in rt.tool.permissions)]

    return [
        rt for rt in tools
        if not rt.tool.permissions or any(p in granted for p in rt.tool.permissions)
    ]
