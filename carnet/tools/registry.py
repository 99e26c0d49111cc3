from __future__ import annotations

from collections.abc import Iterable, Mapping

from carnet.tools.base import BaseTool

ToolSet = dict[str, BaseTool]


class ToolRegistry:
    """Domain tools grouped by the toolset name they are exposed under."""

    def __init__(self) -> None:
        self._toolsets: dict[str, ToolSet] = {}

    def register(self, toolset_name: str, tools: Mapping[str, BaseTool]) -> None:
        """Merge ``tools`` into the toolset; newly registered tools win on name collision."""
        self._toolsets[toolset_name] = {**self._toolsets.get(toolset_name, {}), **tools}

    def get_tools(self, toolset_name: str) -> ToolSet | None:
        return self._toolsets.get(toolset_name)

    def get_tools_for_toolsets(self, toolset_names: Iterable[str]) -> ToolSet:
        merged: ToolSet = {}
        for toolset_name in toolset_names:
            tools = self._toolsets.get(toolset_name)
            if tools:
                merged.update(tools)
        return merged

    def list_toolsets(self) -> list[str]:
        return list(self._toolsets)
