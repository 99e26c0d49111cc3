from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping, Sequence

from carnet.config import DEFAULT_ENV_PREFIXES

VARIABLE_PATTERN = re.compile(r"\{\{\s*([A-Z_][A-Za-z0-9_]*)\s*\}\}")


def _process_environ() -> Mapping[str, str]:
    return os.environ


class VariableInjector:
    """Replaces ``{{ NAME }}`` placeholders with custom and environment variables.

    Precedence, highest first: call-site variables, constructor variables,
    environment variables whose name starts with one of ``env_prefixes``.
    Unknown placeholders are left untouched.
    """

    def __init__(
        self,
        variables: Mapping[str, str] | None = None,
        env_prefixes: Sequence[str] | None = None,
        environ: Callable[[], Mapping[str, str]] | None = None,
    ):
        self._variables = dict(variables or {})
        self._env_prefixes = tuple(DEFAULT_ENV_PREFIXES if env_prefixes is None else env_prefixes)
        self._environ = environ or _process_environ

    @property
    def env_prefixes(self) -> tuple[str, ...]:
        return self._env_prefixes

    def inject(self, content: str, additional_variables: Mapping[str, str] | None = None) -> str:
        # Environment is read on every call so late changes are picked up.
        resolved = {
            **self.environment_variables(),
            **self._variables,
            **(additional_variables or {}),
        }

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name in resolved:
                return str(resolved[name])
            return match.group(0)

        return VARIABLE_PATTERN.sub(_replace, content)

    def has_variables(self, content: str) -> bool:
        return VARIABLE_PATTERN.search(content) is not None

    def environment_variables(self) -> dict[str, str]:
        return {
            key: value or ""
            for key, value in self._environ().items()
            if key.startswith(self._env_prefixes)
        }
