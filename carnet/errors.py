from __future__ import annotations

import json
from typing import Any


class CarnetError(Exception):
    """Base error for everything raised by carnet."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": type(self).__name__, "message": self.message}
        if self.context:
            data["context"] = self.context
        return data


class ConfigError(CarnetError):
    pass


class InvalidManifestError(CarnetError):
    """The manifest handed to the engine is structurally malformed or unreadable."""


class NotFoundError(CarnetError):
    """An agent, skill, toolset, tool or skill file was looked up by name and is absent."""

    def __init__(self, kind: str, name: str, context: dict[str, Any] | None = None):
        super().__init__(f"{kind.capitalize()} not found: {name}", context)
        self.kind = kind
        self.name = name

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["kind"] = self.kind
        data["entity_name"] = self.name
        return data


def format_error(error: BaseException) -> str:
    """Render an error with its context for terminal display."""
    if not isinstance(error, CarnetError):
        return f"{type(error).__name__}: {error}"

    lines = [f"{type(error).__name__}: {error.message}"]
    if isinstance(error, NotFoundError):
        lines.append(f"  Type: {error.kind}")
        lines.append(f"  Name: {error.name}")
    if error.context:
        lines.append("  Context:")
        for key, value in error.context.items():
            rendered = value if isinstance(value, str) else json.dumps(value, default=str)
            lines.append(f"    {key}: {rendered}")
    return "\n".join(lines)
