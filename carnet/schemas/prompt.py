from __future__ import annotations

from pydantic import BaseModel, Field

from carnet.schemas.manifest import Agent, Skill


class SkillMetadata(BaseModel):
    name: str
    description: str
    toolsets: list[str] = Field(default_factory=list)


class ToolsetMetadata(BaseModel):
    name: str
    description: str
    tools: list[str] = Field(default_factory=list)


class ToolMetadata(BaseModel):
    name: str
    description: str


class PromptOptions(BaseModel):
    variables: dict[str, str] = Field(default_factory=dict)
    skill_variables: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Per-skill variable overrides, keyed by skill name",
    )
    include_initial_skills: bool = True
    include_skill_catalog: bool = True
    include_loaded_skills: bool = True
    include_available_tools: bool = True


class GeneratedPrompt(BaseModel):
    content: str
    agent: Agent
    initial_skills: list[Skill] = Field(default_factory=list)
    available_skills: list[SkillMetadata] = Field(default_factory=list)


class ToolFilteringDiagnostics(BaseModel):
    exposed_tools: list[str] = Field(default_factory=list)
    filtered_out_tools: list[str] = Field(default_factory=list)
    undeclared_tools: list[str] = Field(default_factory=list)
    provided_tools: list[str] = Field(default_factory=list)
    reason: str = ""
