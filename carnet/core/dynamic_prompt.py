from __future__ import annotations

from collections.abc import Sequence

from carnet.core.prompt import PromptGenerator
from carnet.core.session import SessionState
from carnet.schemas.manifest import Agent, Manifest, Skill
from carnet.schemas.prompt import GeneratedPrompt, PromptOptions, SkillMetadata
from carnet.tools.registry import ToolRegistry

LOADED_SKILLS_HEADING = "## Currently Loaded Skills"
AVAILABLE_TOOLS_HEADING = "## Available Domain Tools"


class DynamicPromptGenerator:
    """Adds the session-dependent sections on top of a PromptGenerator."""

    def __init__(self, static: PromptGenerator):
        self.static = static

    def generate_agent_prompt(
        self,
        agent: Agent,
        initial_skills: Sequence[Skill],
        available_skills: Sequence[SkillMetadata],
        options: PromptOptions | None = None,
    ) -> GeneratedPrompt:
        return self.static.generate_agent_prompt(agent, initial_skills, available_skills, options)

    def generate_loaded_skills_section(self, session: SessionState, manifest: Manifest) -> str:
        with session.lock:
            discovered = list(session.discovered_skills)

        blocks = []
        for name in discovered:
            skill = manifest.skills.get(name)
            if skill is None:
                continue
            block = f"### {skill.name}\n\n{skill.description}"
            if skill.toolsets:
                block += f"\n\nToolsets: {', '.join(skill.toolsets)}"
            blocks.append(block)

        if not blocks:
            return ""
        return (
            f"{LOADED_SKILLS_HEADING}\n\n"
            "These skills are loaded and their tools are available:\n\n" + "\n\n".join(blocks)
        )

    def generate_empty_loaded_skills_section(self) -> str:
        return f"{LOADED_SKILLS_HEADING}\n\nNo skills loaded yet. Use `loadSkill` to load one."

    def generate_available_tools_section(self, session: SessionState, registry: ToolRegistry) -> str:
        with session.lock:
            exposed = list(session.exposed_domain_tools)
            loaded = list(session.loaded_toolsets)
        if not exposed:
            return ""

        reachable = registry.get_tools_for_toolsets(loaded)
        lines = []
        for name in exposed:
            tool = reachable.get(name)
            description = getattr(tool, "description", None) if tool is not None else None
            if not description:
                continue
            lines.append(f"- **{name}**: {description}")

        if not lines:
            return ""
        return (
            f"{AVAILABLE_TOOLS_HEADING}\n\n"
            "Based on your loaded skills, you can now use these tools:\n\n" + "\n".join(lines)
        )
