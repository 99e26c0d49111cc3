from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


class BaseTool(ABC):
    """An executable tool exposed to the model: description, input schema and execute()."""

    name: str
    description: str

    @abstractmethod
    async def execute(self, args: dict[str, Any]) -> Any:
        """Execute the tool and return its result."""

    @abstractmethod
    def parameters_schema(self) -> dict[str, Any]:
        """JSON Schema for the tool's arguments."""

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.parameters_schema()

    def to_llm_spec(self, name_override: str | None = None) -> dict[str, Any]:
        """Return the tool specification for a generic function-calling interface."""
        return {
            "name": name_override or self.name,
            "description": self.description,
            "parameters": self.parameters_schema(),
        }

    def to_anthropic_spec(self, name_override: str | None = None) -> dict[str, Any]:
        """Return the tool specification for the Anthropic tool-use interface."""
        return {
            "name": name_override or self.name,
            "description": self.description,
            "input_schema": self.parameters_schema(),
        }


class FunctionTool(BaseTool):
    """Wraps a plain (sync or async) callable taking the argument dict."""

    def __init__(
        self,
        func: Callable[[dict[str, Any]], Any],
        *,
        name: str | None = None,
        description: str | None = None,
        schema: dict[str, Any] | None = None,
    ):
        self._func = func
        self.name = name or func.__name__
        self.description = description if description is not None else inspect.getdoc(func) or ""
        self._schema = schema or EMPTY_SCHEMA

    async def execute(self, args: dict[str, Any]) -> Any:
        result = self._func(args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def parameters_schema(self) -> dict[str, Any]:
        return self._schema


def tool(
    name: str | None = None,
    description: str | None = None,
    schema: dict[str, Any] | None = None,
) -> Callable[[Callable[[dict[str, Any]], Any]], FunctionTool]:
    """Decorator turning a function into a FunctionTool."""

    def decorator(func: Callable[[dict[str, Any]], Any]) -> FunctionTool:
        return FunctionTool(func, name=name, description=description, schema=schema)

    return decorator
