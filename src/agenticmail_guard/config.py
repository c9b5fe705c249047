"""Configuration settings for agenticmail-guard using pydantic-settings."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_core import ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from agenticmail_guard.exceptions import ConfigError
from agenticmail_guard.protection.models import ProtectionConfig


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source that loads configuration from a YAML file.

    Looks for config file in the following order:
    1. AGM_CONFIG_FILE environment variable
    2. ./agm.yaml (current directory)
    3. $XDG_CONFIG_HOME/agenticmail-guard/config.yaml (defaults to ~/.config)
    """

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML config."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load and cache YAML config file."""
        if not hasattr(self, "_yaml_data"):
            self._yaml_data = self._read_yaml_file()
        return self._yaml_data

    def _read_yaml_file(self) -> dict[str, Any]:
        """Read YAML config from the first existing candidate path."""
        xdg_config = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        config_paths = [
            os.environ.get("AGM_CONFIG_FILE"),
            Path.cwd() / "agm.yaml",
            Path(xdg_config) / "agenticmail-guard" / "config.yaml",
        ]

        for path in config_paths:
            if not path:
                continue
            path_obj = Path(path)
            if not path_obj.exists():
                continue
            try:
                with open(path_obj) as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                mark = getattr(e, "problem_mark", None)
                problem = getattr(e, "problem", None) or str(e)
                raise ConfigError(
                    f"Invalid YAML syntax: {problem}",
                    file_path=str(path_obj),
                    line=mark.line + 1 if mark else None,
                    col=mark.column + 1 if mark else None,
                ) from e
            except PermissionError as e:
                raise ConfigError(
                    "Cannot read config file: permission denied",
                    file_path=str(path_obj),
                ) from e
            except OSError as e:
                raise ConfigError(
                    f"Cannot read config file: {e}",
                    file_path=str(path_obj),
                ) from e

            if data is None:
                return {}
            if not isinstance(data, dict):
                raise ConfigError(
                    "Top level of the config file must be a mapping",
                    file_path=str(path_obj),
                )
            return data

        return {}


def _parse_validation_error(error: ValidationError) -> str:
    """Convert Pydantic ValidationError to a user-friendly message."""
    errors = error.errors()
    if not errors:
        return "Unknown validation error"

    err = errors[0]
    loc = err.get("loc", ())
    msg = err.get("msg", "")
    if err.get("type") == "missing" and loc:
        return f"Missing required field '{loc[-1]}'"
    if loc:
        field_name = ".".join(str(part) for part in loc)
        return f"Invalid value for '{field_name}': {msg}"
    return str(error)


class Settings(BaseSettings):
    """Application settings loaded from environment variables with AGM_ prefix.

    Protection settings are usually given in the YAML file:
        protection:
          internal_domains: ["localhost"]
          max_match_length: 80
          disabled_rules: ["ob_phone"]

    Nested values can also be set from the environment, e.g.
    AGM_PROTECTION__MAX_MATCH_LENGTH=120.
    """

    model_config = SettingsConfigDict(env_prefix="AGM_", env_nested_delimiter="__")

    protection: ProtectionConfig = Field(default_factory=ProtectionConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
            dotenv_settings,
            file_secret_settings,
        )


def get_settings_eager() -> Settings:
    """Load settings with eager validation at startup.

    Raises:
        ConfigError: If the configuration file or its values are invalid.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigError(_parse_validation_error(e)) from e
