from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from carnet.errors import ConfigError

MANIFEST_FILENAME = "carnet.manifest.json"

DEFAULT_ENV_PREFIXES = ["CARNET_", "PUBLIC_"]
DEFAULT_META_TOOLS = ["loadSkill", "loadSkillFile"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CARNET_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    manifest_path: str = f"./dist/{MANIFEST_FILENAME}"

    # Custom prompt variables, e.g. CARNET_VARIABLES='{"COMPANY": "Acme"}'
    variables: dict[str, str] = {}
    env_prefixes: list[str] = DEFAULT_ENV_PREFIXES

    meta_tools: list[str] = DEFAULT_META_TOOLS

    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("env_prefixes")
    @classmethod
    def strip_empty_prefixes(cls, value: list[str]) -> list[str]:
        # An empty prefix would expose the whole process environment to prompts.
        return [p for p in value if p]

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


def get_settings(**overrides) -> Settings:
    """Build a fresh Settings instance, wrapping validation failures in ConfigError."""
    try:
        return Settings(**overrides)
    except (ValidationError, SettingsError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}", {"overrides": sorted(overrides)}) from exc


settings = Settings()
