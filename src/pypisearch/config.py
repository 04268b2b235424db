"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (PYPISEARCH__METADATA__WORKERS=8)
  3. pypisearch.yaml        (searched in cwd, then ~/.config/pypisearch/)
  4. Hardcoded defaults

The config file is optional; all fields have defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("pypisearch")
_DEFAULT_INDEX_PATH = str(Path(_DEFAULT_CACHE_DIR) / "index.txt")
_DEFAULT_METADATA_DIR = str(Path(_DEFAULT_CACHE_DIR) / "metadata")

# One week, for both tiers.
DEFAULT_TTL_SECONDS = 604800


def _find_config_file() -> str | None:
    """Return the path of the first pypisearch.yaml found, or None."""
    candidates = [
        Path("pypisearch.yaml"),
        Path.home() / ".config" / "pypisearch" / "pypisearch.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


def _default_workers() -> int:
    return os.cpu_count() or 4


class IndexSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str = "https://pypi.org/simple/"
    path: str = _DEFAULT_INDEX_PATH
    ttl_seconds: int = Field(default=DEFAULT_TTL_SECONDS, ge=0)
    # Lines of page preamble before the first package link
    header_lines: int = Field(default=7, ge=0)


class MetadataSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url_template: str = "https://pypi.org/pypi/{name}/json"
    dir: str = _DEFAULT_METADATA_DIR
    ttl_seconds: int = Field(default=DEFAULT_TTL_SECONDS, ge=0)
    workers: int = Field(default_factory=_default_workers, ge=1)


class FetcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = "pypisearch/0.1"


class MatcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    strategy: Literal["substring", "regex"] = "substring"
    case_sensitive: bool = False


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: PYPISEARCH__INDEX__TTL_SECONDS=3600
        env_prefix="PYPISEARCH__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    index: IndexSettings = IndexSettings()
    metadata: MetadataSettings = MetadataSettings()
    fetcher: FetcherSettings = FetcherSettings()
    matcher: MatcherSettings = MatcherSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
