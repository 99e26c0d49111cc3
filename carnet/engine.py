from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import structlog

from carnet.config import Settings
from carnet.config import settings as default_settings
from carnet.core.dynamic_prompt import DynamicPromptGenerator
from carnet.core.filtering import merge_tool_sets, tool_filtering_diagnostics
from carnet.core.prompt import SECTION_SEPARATOR, PromptGenerator
from carnet.core.session import SessionState, SessionStore
from carnet.core.variables import VariableInjector
from carnet.errors import NotFoundError
from carnet.schemas.manifest import Agent, Manifest, Skill, SkillFile, Tool, Toolset
from carnet.schemas.prompt import (
    GeneratedPrompt,
    PromptOptions,
    SkillMetadata,
    ToolFilteringDiagnostics,
    ToolMetadata,
    ToolsetMetadata,
)
from carnet.tools.base import BaseTool
from carnet.tools.loader import load_manifest, validate_manifest
from carnet.tools.meta import create_meta_tools
from carnet.tools.registry import ToolRegistry, ToolSet

log = structlog.get_logger()


class Carnet:
    """Runtime engine: manifest lookups, prompt assembly and per-agent disclosure sessions.

    The engine is the only mutator of session state. Sessions are created
    lazily on the first ``get_tools`` / ``get_system_prompt`` call for an agent
    and grow only through ``_update_session_on_skill_load``.
    """

    def __init__(
        self,
        manifest: Manifest | Mapping[str, Any],
        *,
        variables: Mapping[str, str] | None = None,
        env_prefixes: Sequence[str] | None = None,
        environ: Callable[[], Mapping[str, str]] | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or default_settings
        self._manifest = validate_manifest(manifest)
        self._injector = VariableInjector(
            variables={**self._settings.variables, **(variables or {})},
            env_prefixes=self._settings.env_prefixes if env_prefixes is None else env_prefixes,
            environ=environ,
        )
        self._prompts = DynamicPromptGenerator(PromptGenerator(self._injector))
        self._sessions = SessionStore(self._seed_session)
        self._registry = ToolRegistry()
        self._provided_tools: dict[str, dict[str, BaseTool]] = {}

    @classmethod
    def from_manifest(cls, path: str | Path | None = None, **kwargs: Any) -> Carnet:
        settings = kwargs.get("settings") or default_settings
        return cls(load_manifest(path or settings.manifest_path), **kwargs)

    @property
    def manifest(self) -> Manifest:
        return self._manifest

    @property
    def agents(self) -> dict[str, Agent]:
        return self._manifest.agents

    @property
    def tool_registry(self) -> ToolRegistry:
        return self._registry

    @property
    def variable_injector(self) -> VariableInjector:
        return self._injector

    def inject_variables(self, content: str, variables: Mapping[str, str] | None = None) -> str:
        return self._injector.inject(content, variables)

    # Raw lookups

    def get_agent(self, name: str) -> Agent | None:
        return self._manifest.agents.get(name)

    def get_skill(self, name: str) -> Skill | None:
        return self._manifest.skills.get(name)

    def get_toolset(self, name: str) -> Toolset | None:
        return self._manifest.toolsets.get(name)

    def get_tool(self, name: str) -> Tool | None:
        return self._manifest.tools.get(name)

    def _require_agent(self, name: str) -> Agent:
        agent = self.get_agent(name)
        if agent is None:
            raise NotFoundError("agent", name)
        return agent

    def _require_skill(self, name: str) -> Skill:
        skill = self.get_skill(name)
        if skill is None:
            raise NotFoundError("skill", name)
        return skill

    def _require_toolset(self, name: str) -> Toolset:
        toolset = self.get_toolset(name)
        if toolset is None:
            raise NotFoundError("toolset", name)
        return toolset

    def _require_tool(self, name: str) -> Tool:
        tool = self.get_tool(name)
        if tool is None:
            raise NotFoundError("tool", name)
        return tool

    # Content

    def _render(self, content: str, variables: Mapping[str, str] | None, raw: bool) -> str:
        return content if raw else self._injector.inject(content, variables)

    def get_skill_content(
        self, name: str, *, variables: Mapping[str, str] | None = None, raw: bool = False
    ) -> str:
        return self._render(self._require_skill(name).content, variables, raw)

    def get_toolset_content(
        self, name: str, *, variables: Mapping[str, str] | None = None, raw: bool = False
    ) -> str:
        return self._render(self._require_toolset(name).content, variables, raw)

    def get_tool_content(
        self, name: str, *, variables: Mapping[str, str] | None = None, raw: bool = False
    ) -> str:
        return self._render(self._require_tool(name).content, variables, raw)

    def get_skill_file(self, skill_name: str, path: str) -> SkillFile:
        skill = self._require_skill(skill_name)
        normalized = path.removeprefix("./")
        for skill_file in skill.files:
            if skill_file.path == normalized:
                return skill_file
        raise NotFoundError("file", path, {"skill": skill_name})

    # Metadata

    def get_skill_metadata(self, name: str) -> SkillMetadata:
        skill = self._require_skill(name)
        return SkillMetadata(
            name=skill.name, description=skill.description, toolsets=list(skill.toolsets)
        )

    def get_toolset_metadata(self, name: str) -> ToolsetMetadata:
        toolset = self._require_toolset(name)
        return ToolsetMetadata(
            name=toolset.name, description=toolset.description, tools=list(toolset.tools)
        )

    def get_tool_metadata(self, name: str) -> ToolMetadata:
        tool = self._require_tool(name)
        return ToolMetadata(name=tool.name, description=tool.description)

    def list_available_skills(self, agent_name: str) -> list[SkillMetadata]:
        agent = self._require_agent(agent_name)
        names = dict.fromkeys(
            [*self._manifest.initial_skills_for(agent), *self._manifest.on_demand_skills_for(agent)]
        )
        return [self.get_skill_metadata(name) for name in names if name in self._manifest.skills]

    def list_skill_toolsets(self, skill_name: str) -> list[ToolsetMetadata]:
        skill = self._require_skill(skill_name)
        return [
            self.get_toolset_metadata(name) for name in skill.toolsets if name in self._manifest.toolsets
        ]

    def list_toolset_tools(self, toolset_name: str) -> list[ToolMetadata]:
        toolset = self._require_toolset(toolset_name)
        return [self.get_tool_metadata(name) for name in toolset.tools if name in self._manifest.tools]

    def describe_skill(self, skill_name: str) -> str:
        """Markdown summary of a skill and its toolsets, for listing and inspection."""
        return self._prompts.static.generate_skill_metadata_section(
            self.get_skill_metadata(skill_name), self.list_skill_toolsets(skill_name)
        )

    def describe_toolset(self, toolset_name: str) -> str:
        return self._prompts.static.generate_toolset_metadata_section(
            self.get_toolset_metadata(toolset_name), self.list_toolset_tools(toolset_name)
        )

    # Prompts

    def generate_agent_prompt(
        self, agent_name: str, options: PromptOptions | None = None
    ) -> GeneratedPrompt:
        agent = self._require_agent(agent_name)
        initial_skills = [
            self._manifest.skills[name]
            for name in self._manifest.initial_skills_for(agent)
            if name in self._manifest.skills
        ]
        return self._prompts.generate_agent_prompt(
            agent, initial_skills, self.list_available_skills(agent_name), options
        )

    def get_system_prompt(self, agent_name: str, options: PromptOptions | None = None) -> str:
        options = options or PromptOptions()
        prompt = self.generate_agent_prompt(agent_name, options)
        # Both dynamic sections render from one snapshot.
        session = self._sessions.get_or_create(agent_name).snapshot()

        sections = [prompt.content]
        if options.include_loaded_skills:
            sections.append(
                self._prompts.generate_loaded_skills_section(session, self._manifest)
                or self._prompts.generate_empty_loaded_skills_section()
            )
        if options.include_available_tools:
            sections.append(self._prompts.generate_available_tools_section(session, self._registry))
        return SECTION_SEPARATOR.join(s for s in sections if s)

    # Sessions

    def _seed_session(self, agent_name: str) -> SessionState:
        agent = self._require_agent(agent_name)
        session = SessionState(agent_name)
        for skill_name in self._manifest.initial_skills_for(agent):
            self._apply_skill(session, skill_name)
        return session

    def _apply_skill(self, session: SessionState, skill_name: str) -> bool:
        skill = self.get_skill(skill_name)
        if skill is None:
            return False
        # Compute the additions first so the three sets change together.
        toolsets = list(skill.toolsets)
        tools = []
        for toolset_name in toolsets:
            toolset = self.get_toolset(toolset_name)
            if toolset is not None:
                tools.extend(toolset.tools)
        with session.lock:
            session.discovered_skills.add(skill_name)
            session.loaded_toolsets.update(toolsets)
            session.exposed_domain_tools.update(tools)
        return True

    def _update_session_on_skill_load(self, agent_name: str, skill_name: str) -> None:
        def load(session: SessionState) -> SessionState | None:
            if not self._apply_skill(session, skill_name):
                return None
            return session.snapshot()

        session = self._sessions.update(agent_name, load)
        if session is None:
            log.warning("engine.unknown_skill", agent=agent_name, skill=skill_name)
            return
        log.info(
            "session.skill_loaded",
            agent=agent_name,
            skill=skill_name,
            toolsets=len(session.loaded_toolsets),
            tools=len(session.exposed_domain_tools),
        )

    def get_session_state(self, agent_name: str) -> SessionState | None:
        session = self._sessions.get(agent_name)
        return session.snapshot() if session is not None else None

    def get_discovered_skills(self, agent_name: str) -> list[str]:
        session = self.get_session_state(agent_name)
        return list(session.discovered_skills) if session else []

    def get_available_tools(self, agent_name: str) -> list[str]:
        session = self.get_session_state(agent_name)
        return list(session.exposed_domain_tools) if session else []

    def reset_session(self, agent_name: str) -> None:
        if self.get_agent(agent_name) is None:
            log.warning("engine.reset_unknown_agent", agent=agent_name)
            return
        self._sessions.reset(agent_name)

    # Tools

    def _register_domain_tools(self, tools: Mapping[str, BaseTool]) -> None:
        for toolset in self._manifest.toolsets.values():
            declared = {name: tools[name] for name in toolset.tools if name in tools}
            if declared:
                self._registry.register(toolset.name, declared)

    def _declared_tool_names(self) -> set[str]:
        return {name for toolset in self._manifest.toolsets.values() for name in toolset.tools}

    def get_tools(
        self,
        agent_name: str,
        *,
        tools: Mapping[str, BaseTool] | None = None,
        meta_tools: Iterable[str] | None = None,
    ) -> ToolSet:
        """Meta-tools plus the domain tools of every toolset loaded in the agent's session."""
        session = self._sessions.get_or_create(agent_name)
        if tools is not None:
            self._register_domain_tools(tools)
            self._provided_tools[agent_name] = dict(tools)

        enabled = self._settings.meta_tools if meta_tools is None else meta_tools
        merged = merge_tool_sets(create_meta_tools(self, agent_name, enabled), session, self._registry)
        log.debug("engine.tools_resolved", agent=agent_name, tools=list(merged))
        return merged

    def get_tool_filtering_diagnostics(
        self, agent_name: str, tools: Mapping[str, BaseTool] | None = None
    ) -> ToolFilteringDiagnostics:
        self._require_agent(agent_name)
        provided = tools if tools is not None else self._provided_tools.get(agent_name, {})
        session = self._sessions.get(agent_name)
        if session is None:
            # Inspection only; do not create the session as a side effect.
            session = self._seed_session(agent_name)
        return tool_filtering_diagnostics(session, provided, self._declared_tool_names())
