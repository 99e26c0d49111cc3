from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ManifestModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AppConfig(ManifestModel):
    global_initial_skills: list[str] = Field(
        default_factory=list, description="Initial skills available to every agent"
    )
    global_skills: list[str] = Field(
        default_factory=list, description="On-demand skills available to every agent"
    )


class Agent(ManifestModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    initial_skills: list[str] = Field(
        default_factory=list, description="Skills loaded when the session is created"
    )
    skills: list[str] = Field(default_factory=list, description="Skills loadable on demand")
    prompt: str = Field(..., description="Markdown prompt template of the agent")


class SkillFile(ManifestModel):
    path: str = Field(..., min_length=1, description="Path relative to the skill directory")
    description: str = ""
    content: str | None = Field(default=None, description="File body embedded at build time")


class Skill(ManifestModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    toolsets: list[str] = Field(default_factory=list)
    files: list[SkillFile] = Field(default_factory=list)
    content: str


class Toolset(ManifestModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    tools: list[str]
    content: str


class Tool(ManifestModel):
    name: str = Field(..., pattern=r"^[a-zA-Z][a-zA-Z0-9_]*$")
    description: str = Field(..., min_length=1)
    content: str


class Manifest(ManifestModel):
    version: int = 1
    app: AppConfig = Field(default_factory=AppConfig)
    agents: dict[str, Agent]
    skills: dict[str, Skill]
    toolsets: dict[str, Toolset]
    tools: dict[str, Tool]

    def initial_skills_for(self, agent: Agent) -> list[str]:
        """Agent initial skills followed by the global ones, first-seen order."""
        return list(dict.fromkeys([*agent.initial_skills, *self.app.global_initial_skills]))

    def on_demand_skills_for(self, agent: Agent) -> list[str]:
        return list(dict.fromkeys([*agent.skills, *self.app.global_skills]))
