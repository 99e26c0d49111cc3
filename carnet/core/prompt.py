from __future__ import annotations

from collections.abc import Sequence

from carnet.core.variables import VariableInjector
from carnet.schemas.manifest import Agent, Skill
from carnet.schemas.prompt import (
    GeneratedPrompt,
    PromptOptions,
    SkillMetadata,
    ToolMetadata,
    ToolsetMetadata,
)

SECTION_SEPARATOR = "\n\n"
SKILL_SEPARATOR = "\n\n---\n\n"

SKILL_LOADING_INSTRUCTIONS = """\
## How to Load Skills

To access additional capabilities, use the `loadSkill` tool to load a skill by \
name from the catalog above.

When you load a skill:
1. You receive its full documentation and instructions
2. You receive a list of available files (if any) with descriptions
3. All associated toolsets and tools are automatically loaded
4. You can load specific files on-demand using the `loadSkillFile` tool

Example workflow:
- Review the "Available Skills (On-Demand)" catalog above
- Call `loadSkill({ skillName: "code-review" })` to load a skill
- Review the `files` array in the response to see available resources
- Call `loadSkillFile({ skillName: "code-review", path: "guidelines/python-pep8.md" })` \
to load a specific file

Available tools for progressive loading:
- `loadSkill(skillName)` - Load a skill and get access to its tools
- `loadSkillFile(skillName, path)` - Load a specific file from a loaded skill

Note: You do not need to manually load toolsets or individual tools - they become \
available automatically when you load their parent skill."""


def _bullet(name: str, description: str) -> str:
    return f"- **{name}**: {description}"


class PromptGenerator:
    """Renders the session-independent part of an agent's system prompt."""

    def __init__(self, variable_injector: VariableInjector):
        self._injector = variable_injector

    @property
    def variable_injector(self) -> VariableInjector:
        return self._injector

    def generate_agent_prompt(
        self,
        agent: Agent,
        initial_skills: Sequence[Skill],
        available_skills: Sequence[SkillMetadata],
        options: PromptOptions | None = None,
    ) -> GeneratedPrompt:
        """Assemble agent prompt, initial skills, skill catalog and loading instructions.

        Each section is separated by a blank line and left out when empty or
        disabled through ``options``.
        """
        options = options or PromptOptions()
        sections = [self._injector.inject(agent.prompt, options.variables)]

        if options.include_initial_skills and initial_skills:
            sections.append(self.generate_initial_skills_section(initial_skills, options))

        if options.include_skill_catalog and available_skills:
            sections.append(self.generate_skill_catalog_section(available_skills))
            sections.append(SKILL_LOADING_INSTRUCTIONS)

        return GeneratedPrompt(
            content=SECTION_SEPARATOR.join(s for s in sections if s),
            agent=agent,
            initial_skills=list(initial_skills),
            available_skills=list(available_skills),
        )

    def generate_initial_skills_section(
        self, skills: Sequence[Skill], options: PromptOptions | None = None
    ) -> str:
        options = options or PromptOptions()
        blocks = []
        for skill in skills:
            variables = {**options.variables, **options.skill_variables.get(skill.name, {})}
            content = self._injector.inject(skill.content, variables)
            blocks.append(f"### Skill: {skill.name}\n\n{skill.description}\n\n{content}")
        return (
            "## Initial Skills\n\nYou have the following skills available immediately:\n\n"
            + SKILL_SEPARATOR.join(blocks)
        )

    def generate_skill_catalog_section(self, available_skills: Sequence[SkillMetadata]) -> str:
        # Name and description only; full content stays out of the static prompt.
        lines = "\n".join(_bullet(s.name, s.description) for s in available_skills)
        return (
            "## Available Skills (On-Demand)\n\n"
            "You can load these skills on-demand by using the `loadSkill` tool:\n\n"
            f"{lines}"
        )

    def generate_skill_metadata_section(
        self, skill: SkillMetadata, toolsets: Sequence[ToolsetMetadata]
    ) -> str:
        content = f"## Skill: {skill.name}\n\n{skill.description}"
        relevant = [t for t in toolsets if t.name in skill.toolsets]
        if relevant:
            lines = "\n".join(_bullet(t.name, t.description) for t in relevant)
            content += f"\n\n### Associated Toolsets\n\n{lines}"
        return content

    def generate_toolset_metadata_section(
        self, toolset: ToolsetMetadata, tools: Sequence[ToolMetadata]
    ) -> str:
        content = f"## Toolset: {toolset.name}\n\n{toolset.description}"
        relevant = [t for t in tools if t.name in toolset.tools]
        if relevant:
            lines = "\n".join(_bullet(t.name, t.description) for t in relevant)
            content += f"\n\n### Tools in this Toolset\n\n{lines}"
        return content
