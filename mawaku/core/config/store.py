"""Load and persist ~/.mawaku/config.toml."""

import logging
import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from mawaku.core.config.migrate import migrate_document
from mawaku.core.environment import Environment, ProcessEnvironment, home_dir
from mawaku.core.shapes import Config, GeminiApiConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".mawaku"
CONFIG_FILE_NAME = "config.toml"


class ConfigError(Exception):
    """Base class for configuration failures."""


class ConfigDirUnavailableError(ConfigError):
    """Raised when the home directory cannot be determined."""

    def __init__(self):
        super().__init__("could not determine configuration directory")


class ConfigIoError(ConfigError):
    """Raised when the configuration file or its directory cannot be read or written."""


class ConfigDeserializeError(ConfigError):
    """Raised when the configuration file is not valid TOML or has the wrong shape."""


class ConfigSerializeError(ConfigError):
    """Raised when a configuration cannot be rendered as TOML."""


class LoadOutcome(BaseModel):
    config: Config
    path: Path
    created: bool = Field(..., description="Whether the file was written for the first time")
    migrations: list[str] = Field(default_factory=list)


def config_file_path(env: Environment) -> Path:
    home = home_dir(env)
    if home is None:
        raise ConfigDirUnavailableError()
    return home / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def default_config(path: Path) -> Config:
    return Config(gemini_api=GeminiApiConfig(), image_output_dir=str(path.parent))


def load_or_init(env: Environment | None = None) -> LoadOutcome:
    """Load the config file, creating it with defaults when absent.

    Legacy layouts are migrated and written back to disk.
    """
    env = env or ProcessEnvironment()
    path = config_file_path(env)

    if not path.exists():
        config = default_config(path)
        save(config, path)
        logger.info(f"Created default configuration at {path}")
        return LoadOutcome(config=config, path=path, created=True)

    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigIoError(f"failed to read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigDeserializeError(f"{path} is not valid UTF-8: {e}") from e

    try:
        document = tomllib.loads(contents)
    except tomllib.TOMLDecodeError as e:
        raise ConfigDeserializeError(f"failed to parse {path}: {e}") from e

    migrations = migrate_document(document, path.parent)

    try:
        config = Config.model_validate(document)
    except ValidationError as e:
        raise ConfigDeserializeError(f"invalid configuration in {path}: {e}") from e

    if migrations:
        save(config, path)

    return LoadOutcome(config=config, path=path, created=False, migrations=migrations)


def save(config: Config, path: Path) -> None:
    """Write config to path as TOML, creating parent directories."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigIoError(f"failed to create {path.parent}: {e}") from e

    try:
        serialized = tomli_w.dumps(config.model_dump(mode="json"), multiline_strings=True)
    except (TypeError, ValueError) as e:
        raise ConfigSerializeError(f"failed to serialize configuration: {e}") from e

    try:
        path.write_text(serialized, encoding="utf-8")
    except OSError as e:
        raise ConfigIoError(f"failed to write {path}: {e}") from e


def resolve_api_key(gemini_api: GeminiApiConfig, env: Environment | None = None) -> str | None:
    """Return the API key from the configured variable, or None when unset or blank."""
    env = env or ProcessEnvironment()
    value = env.get(gemini_api.api_key_env_var)
    if value is None or not value.strip():
        return None
    return value.strip()
