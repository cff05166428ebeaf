"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (TEAMSYNC__SECTION__KEY)
3. User config (~/.config/teamsync/user.yaml) - minimal user-facing options
4. Global config (~/.config/teamsync/config.yaml) - full nested structure
5. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from teamsync.config import user_config as _user_config
from teamsync.config.models import (
    CacheConfig,
    GitHubConfig,
    LoggingConfig,
    SyncConfig,
    TeamSyncConfig,
)
from teamsync.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/teamsync/config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _user_config_to_yaml(path: Path) -> dict[str, Any]:
    """Map the flat user config onto the nested settings structure.

    Only explicitly set fields are mapped so user.yaml defaults never
    shadow values from the global config.
    """
    user = _user_config.load_user_config(path)
    explicit = user.model_dump(exclude_unset=True)
    mapped: dict[str, Any] = {}
    if explicit.get("team") is not None:
        mapped.setdefault("github", {})["team"] = explicit["team"]
    if explicit.get("org") is not None:
        mapped.setdefault("github", {})["org"] = explicit["org"]
    if "editor" in explicit:
        mapped.setdefault("sync", {})["editor"] = explicit["editor"]
    if "log_level" in explicit:
        mapped.setdefault("logging", {})["level"] = explicit["log_level"]
    return mapped


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class TeamSyncSettings(BaseSettings):
        """Root config. Env vars: TEAMSYNC__GITHUB__TEAM, TEAMSYNC__LOGGING__LEVEL, etc."""

        model_config = SettingsConfigDict(
            env_prefix="TEAMSYNC__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        github: GitHubConfig = GitHubConfig()
        cache: CacheConfig = CacheConfig()
        sync: SyncConfig = SyncConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return TeamSyncSettings


def load_config(
    *,
    global_path: Path | None = None,
    user_path: Path | None = None,
    **kwargs: Any,
) -> TeamSyncConfig:
    """Load config: defaults < global yaml < user yaml < env vars < kwargs.

    Args:
        global_path: Override for the global config.yaml location.
        user_path: Override for the user.yaml location.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    global_config = _load_yaml(global_path or GLOBAL_CONFIG_PATH)
    user_overrides = _user_config_to_yaml(user_path or _user_config.USER_CONFIG_PATH)
    yaml_config = _deep_merge(global_config, user_overrides)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return TeamSyncConfig.model_validate(settings.model_dump())


def require_team(config: TeamSyncConfig) -> str:
    """Return the configured team slug or raise ConfigError."""
    if not config.github.team:
        raise ConfigError.missing_required("github.team", "run: tsm config --team <slug>")
    return config.github.team


def require_org(config: TeamSyncConfig) -> str:
    """Return the configured organization login or raise ConfigError."""
    if not config.github.org:
        raise ConfigError.missing_required("github.org", "run: tsm config --org <login>")
    return config.github.org
