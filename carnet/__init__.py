from carnet.core.dynamic_prompt import DynamicPromptGenerator
from carnet.core.prompt import PromptGenerator
from carnet.core.session import OrderedSet, SessionState
from carnet.core.variables import VariableInjector
from carnet.engine import Carnet
from carnet.errors import CarnetError, ConfigError, InvalidManifestError, NotFoundError
from carnet.schemas.manifest import Agent, Manifest, Skill, SkillFile, Tool, Toolset
from carnet.schemas.prompt import (
    GeneratedPrompt,
    PromptOptions,
    SkillMetadata,
    ToolFilteringDiagnostics,
    ToolMetadata,
    ToolsetMetadata,
)
from carnet.tools.base import BaseTool, FunctionTool, tool
from carnet.tools.registry import ToolRegistry

__all__ = [
    "Agent",
    "BaseTool",
    "Carnet",
    "CarnetError",
    "ConfigError",
    "DynamicPromptGenerator",
    "FunctionTool",
    "GeneratedPrompt",
    "InvalidManifestError",
    "Manifest",
    "NotFoundError",
    "OrderedSet",
    "PromptGenerator",
    "PromptOptions",
    "SessionState",
    "Skill",
    "SkillFile",
    "SkillMetadata",
    "Tool",
    "ToolFilteringDiagnostics",
    "ToolMetadata",
    "ToolRegistry",
    "Toolset",
    "ToolsetMetadata",
    "VariableInjector",
    "tool",
]
