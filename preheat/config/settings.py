import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from preheat.core.logging import get_logger

from .core import HTTPSettings, LoggingSettings


logger = get_logger(__name__)

__all__ = ["Settings", "ConfigurationError", "find_toml_config_file"]

ENV_PREFIX = "PREHEAT_"
CONFIG_FILE_NAMES = (".preheat.toml", "preheat.toml")


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def find_toml_config_file(directory: Path | None = None) -> Path | None:
    """Find a TOML configuration file in ``directory`` (default: cwd)."""
    base = directory or Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def _deep_update(target: dict[str, Any], overrides: dict[str, Any]) -> None:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


class Settings(BaseSettings):
    """
    Configuration settings for preheat.

    Settings are loaded from environment variables (prefix ``PREHEAT_``,
    nested with ``__``), .env files, and TOML configuration files.
    Precedence, highest first: explicit overrides, environment, TOML file,
    defaults. The TOML file is looked up in the following order:
    1. the path given to ``from_config``
    2. the PREHEAT_CONFIG_FILE environment variable
    3. .preheat.toml or preheat.toml in the current directory
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    http: HTTPSettings = Field(
        default_factory=HTTPSettings,
        description="HTTP client configuration settings",
    )

    requests: list[str] = Field(
        default_factory=list,
        description="Request specs (<method>:<path>[:body]) sent by default",
    )

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file."""
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read TOML config file {toml_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls,
        config_path: Path | str | None = None,
        **kwargs: Any,
    ) -> "Settings":
        """Create Settings from a TOML file, the environment and overrides."""
        if config_path is None:
            config_path_env = os.environ.get(f"{ENV_PREFIX}CONFIG_FILE")
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        if config_path is None:
            config_path = find_toml_config_file()

        config_data: dict[str, Any] = {}
        if config_path is not None:
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            config_data = cls.load_toml_config(config_path)
            logger.info("config_file_loaded", path=str(config_path))

        try:
            settings = cls()
            data = settings.model_dump()

            for key, value in config_data.items():
                if key not in cls.model_fields:
                    continue
                if isinstance(value, dict) and isinstance(data.get(key), dict):
                    for nested_key, nested_value in value.items():
                        env_key = f"{ENV_PREFIX}{key.upper()}__{nested_key.upper()}"
                        if os.getenv(env_key) is None:
                            data[key][nested_key] = nested_value
                elif os.getenv(f"{ENV_PREFIX}{key.upper()}") is None:
                    data[key] = value

            if kwargs:
                _deep_update(data, kwargs)

            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
