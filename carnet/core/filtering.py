from __future__ import annotations

from collections.abc import Collection, Mapping

import structlog

from carnet.core.session import SessionState
from carnet.schemas.prompt import ToolFilteringDiagnostics
from carnet.tools.base import BaseTool
from carnet.tools.registry import ToolRegistry, ToolSet

log = structlog.get_logger()


def merge_tool_sets(
    meta_tools: Mapping[str, BaseTool],
    session: SessionState,
    registry: ToolRegistry,
) -> ToolSet:
    """Meta-tools plus the domain tools of every loaded toolset.

    Domain tools are applied last and shadow a meta-tool of the same name.
    """
    with session.lock:
        domain_tools = registry.get_tools_for_toolsets(list(session.loaded_toolsets))
    shadowed = sorted(set(meta_tools) & set(domain_tools))
    if shadowed:
        log.warning("filtering.meta_tool_shadowed", agent=session.agent_name, tools=shadowed)
    return {**meta_tools, **domain_tools}


def tool_filtering_diagnostics(
    session: SessionState,
    provided_tools: Mapping[str, BaseTool] | None,
    declared_tools: Collection[str] | None = None,
) -> ToolFilteringDiagnostics:
    """Split the tools a host provided into exposed, not-yet-exposed and undeclared names.

    ``declared_tools`` is every tool name some manifest toolset lists. Provided
    tools outside it can never be exposed and are reported as undeclared rather
    than filtered out. When omitted, every provided tool counts as declared.
    """
    provided = list(provided_tools or {})
    with session.lock:
        exposed_names = set(session.exposed_domain_tools)
        loaded = list(session.loaded_toolsets)

    declared = set(provided) if declared_tools is None else set(declared_tools)
    exposed = [name for name in provided if name in exposed_names]
    filtered_out = [name for name in provided if name in declared and name not in exposed_names]
    undeclared = [name for name in provided if name not in declared and name not in exposed_names]

    reasons = []
    if filtered_out:
        reasons.append(
            f"{len(filtered_out)} of {len(provided)} provided tools belong to toolsets that are "
            f"not loaded yet (loaded toolsets: {', '.join(loaded) or 'none'})."
        )
    if undeclared:
        reasons.append(
            f"{len(undeclared)} provided tools are not declared by any toolset in the manifest "
            f"and are never exposed: {', '.join(undeclared)}."
        )
    if not provided:
        reason = "No domain tools were provided."
    elif reasons:
        reason = " ".join(reasons)
    else:
        reason = "All provided tools are exposed by the loaded toolsets."

    return ToolFilteringDiagnostics(
        exposed_tools=exposed,
        filtered_out_tools=filtered_out,
        undeclared_tools=undeclared,
        provided_tools=provided,
        reason=reason,
    )
