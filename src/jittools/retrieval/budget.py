"""Greedy token-budget allocation over ranked tools."""

from __future__ import annotations

from .models import RetrievedTool


def apply_budget_constraints(
    tools: list[RetrievedTool],
    max_tools: int,
    max_budget: int,
) -> list[RetrievedTool]:
    """Select tools in ranked order within a count limit and a token budget.

    A tool that does not fit the remaining budget is skipped and scanning
    continues, so a cheaper lower-ranked tool can still be picked. Selected
    tools keep their relative order.
    """
    selected: list[RetrievedTool] = []
    spent = 0

    for scored in tools:
        if len(selected) >= max_tools:
            break
        cost = scored.tool.token_cost
        if spent + cost > max_budget:
            continue
        selected.append(scored)
        spent += cost

    return selected


def total_token_cost(tools: list[RetrievedTool]) -> int:
    return sum(rt.tool.token_cost for rt in tools)
