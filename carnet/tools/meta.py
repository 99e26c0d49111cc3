from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import structlog

from carnet.errors import NotFoundError
from carnet.tools.base import BaseTool

if TYPE_CHECKING:
    from carnet.engine import Carnet

log = structlog.get_logger()


class MetaTool(BaseTool):
    """A framework tool bound to one engine and one agent session."""

    def __init__(self, carnet: Carnet, agent_name: str):
        self._carnet = carnet
        self._agent_name = agent_name

    def _available_skill_names(self) -> list[str]:
        try:
            return [s.name for s in self._carnet.list_available_skills(self._agent_name)]
        except NotFoundError:
            return []


def _string_param(description: str) -> dict[str, str]:
    return {"type": "string", "description": description}


class LoadSkillTool(MetaTool):
    name = "loadSkill"
    description = "Load a skill by name to get its full content and capabilities"

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"skillName": _string_param("The name of the skill to load")},
            "required": ["skillName"],
        }

    async def execute(self, args: dict[str, Any]) -> dict[str, Any]:
        skill_name = args.get("skillName", "")
        try:
            content = self._carnet.get_skill_content(skill_name)
            metadata = self._carnet.get_skill_metadata(skill_name)
            skill = self._carnet.get_skill(skill_name)
        except NotFoundError as exc:
            log.info("meta_tool.load_skill_failed", agent=self._agent_name, skill=skill_name)
            return {
                "success": False,
                "error": exc.message,
                "available": self._available_skill_names(),
            }

        self._carnet._update_session_on_skill_load(self._agent_name, skill_name)
        files = [{"path": f.path, "description": f.description} for f in skill.files] if skill else []
        return {
            "success": True,
            "content": content,
            "metadata": metadata.model_dump(),
            "files": files,
        }


class LoadSkillFileTool(MetaTool):
    name = "loadSkillFile"
    description = "Load a file bundled with a skill, by skill name and relative path"

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "skillName": _string_param("The name of the skill owning the file"),
                "path": _string_param("Path of the file, as listed by loadSkill"),
            },
            "required": ["skillName", "path"],
        }

    async def execute(self, args: dict[str, Any]) -> dict[str, Any]:
        skill_name = args.get("skillName", "")
        path = args.get("path", "")
        try:
            skill_file = self._carnet.get_skill_file(skill_name, path)
        except NotFoundError as exc:
            log.info("meta_tool.load_skill_file_failed", skill=skill_name, path=path)
            return {"success": False, "error": exc.message, "path": path}

        if skill_file.content is None:
            return {
                "success": False,
                "error": f"File content was not embedded in the manifest: {path}",
                "path": path,
            }
        return {
            "success": True,
            "content": self._carnet.inject_variables(skill_file.content),
            "path": skill_file.path,
        }


class ListAvailableSkillsTool(MetaTool):
    name = "listAvailableSkills"
    description = "List all available skills for the agent"

    def parameters_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}}

    async def execute(self, args: dict[str, Any]) -> dict[str, Any]:
        try:
            skills = self._carnet.list_available_skills(self._agent_name)
        except NotFoundError as exc:
            return {"success": False, "error": f"Failed to list skills: {exc.message}"}
        return {"success": True, "skills": [s.model_dump() for s in skills]}


class ListSkillToolsetsTool(MetaTool):
    name = "listSkillToolsets"
    description = "List all toolsets available in a skill"

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"skillName": _string_param("The name of the skill")},
            "required": ["skillName"],
        }

    async def execute(self, args: dict[str, Any]) -> dict[str, Any]:
        try:
            toolsets = self._carnet.list_skill_toolsets(args.get("skillName", ""))
        except NotFoundError as exc:
            return {
                "success": False,
                "error": f"Failed to list toolsets: {exc.message}",
                "available": self._available_skill_names(),
            }
        return {
            "success": True,
            "toolsets": [
                {"name": t.name, "description": t.description, "toolCount": len(t.tools)}
                for t in toolsets
            ],
        }


class LoadToolsetTool(MetaTool):
    name = "loadToolset"
    description = "Load a toolset to get its instructions and available tools"

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"toolsetName": _string_param("The name of the toolset to load")},
            "required": ["toolsetName"],
        }

    async def execute(self, args: dict[str, Any]) -> dict[str, Any]:
        toolset_name = args.get("toolsetName", "")
        try:
            content = self._carnet.get_toolset_content(toolset_name)
            tools = self._carnet.list_toolset_tools(toolset_name)
        except NotFoundError as exc:
            return {"success": False, "error": f"Failed to load toolset: {exc.message}"}
        return {
            "success": True,
            "content": content,
            "availableTools": [t.model_dump() for t in tools],
        }


class LoadToolTool(MetaTool):
    name = "loadTool"
    description = "Load a specific tool to get its full documentation and usage"

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"toolName": _string_param("The name of the tool to load")},
            "required": ["toolName"],
        }

    async def execute(self, args: dict[str, Any]) -> dict[str, Any]:
        tool_name = args.get("toolName", "")
        try:
            content = self._carnet.get_tool_content(tool_name)
            metadata = self._carnet.get_tool_metadata(tool_name)
        except NotFoundError as exc:
            return {"success": False, "error": f"Failed to load tool: {exc.message}"}
        return {"success": True, "metadata": metadata.model_dump(), "content": content}


META_TOOLS: dict[str, type[MetaTool]] = {
    tool_cls.name: tool_cls
    for tool_cls in (
        LoadSkillTool,
        LoadSkillFileTool,
        ListAvailableSkillsTool,
        ListSkillToolsetsTool,
        LoadToolsetTool,
        LoadToolTool,
    )
}


def create_meta_tools(
    carnet: Carnet, agent_name: str, enabled: Iterable[str] | None = None
) -> dict[str, MetaTool]:
    """Instantiate the requested meta-tools for one agent, in the order given."""
    names = list(enabled) if enabled is not None else list(META_TOOLS)
    unknown = [n for n in names if n not in META_TOOLS]
    if unknown:
        raise ValueError(f"Unknown meta-tools: {', '.join(unknown)}")
    return {name: META_TOOLS[name](carnet, agent_name) for name in names}
