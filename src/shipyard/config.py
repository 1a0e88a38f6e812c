"""Engine settings.

Settings are loaded in priority order (highest first):
  1. Environment variables   (SHIPYARD__CACHE__TTL_MINUTES=5)
  2. shipyard-settings.yaml  (searched in cwd, then platform config dir)
  3. Hardcoded defaults

These are settings of the tool itself, not the project configuration that
the resolver fetches. The settings file is optional.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from shipyard import __version__

_FALLBACK_CACHE_DIR = str(Path(".shipyard") / "cache" / "remote-configs")


def _default_cache_dir() -> str:
    """User cache dir for remote configs, or a project-local fallback."""
    user_cache = platformdirs.user_cache_dir("shipyard")
    if not user_cache or not Path(user_cache).is_absolute():
        return _FALLBACK_CACHE_DIR
    return str(Path(user_cache) / "remote-configs")


_DEFAULT_CACHE_DIR = _default_cache_dir()


def _find_config_file() -> str | None:
    """Return the path of the first shipyard-settings.yaml found, or None."""
    candidates = [
        Path("shipyard-settings.yaml"),
        Path(platformdirs.user_config_dir("shipyard")) / "shipyard-settings.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    dir: str = _DEFAULT_CACHE_DIR
    ttl_minutes: int = 60


class HttpSettings(BaseModel):
    timeout_seconds: float = 30.0
    user_agent: str = f"shipyard/{__version__}"


class GitSettings(BaseModel):
    depth: int = 1
    # Fail fast instead of hanging on a username/password prompt.
    disable_prompts: bool = True


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: SHIPYARD__HTTP__TIMEOUT_SECONDS=10
        env_prefix="SHIPYARD__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = CacheSettings()
    http: HttpSettings = HttpSettings()
    git: GitSettings = GitSettings()
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
