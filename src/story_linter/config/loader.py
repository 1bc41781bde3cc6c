"""Configuration loading utilities.

Reads ``.story-linter.yml`` and translates it into an EngineConfig plus
logging settings. Unknown top-level keys become ``engine``/``CONF001``
warnings instead of failing the load.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from story_linter.config.models import EngineConfig, LoggingConfig
from story_linter.errors import ConfigError
from story_linter.models.findings import (
    ENGINE_VALIDATOR_KEY,
    Finding,
    Severity,
    SourceLocation,
)

CONFIG_FILE_NAMES = (".story-linter.yml", ".story-linter.yaml")
DEFAULT_INCLUDE = ["**/*.md"]

_ENGINE_KEYS = {
    "include": "include",
    "exclude": "exclude",
    "rootDir": "root_dir",
    "validators": "validators",
    "stopOnError": "stop_on_error",
    "minSeverity": "min_severity",
}
_LOGGING_KEY = "logging"


@dataclass
class LoadedConfig:
    """Result of loading a configuration file."""

    engine: EngineConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    diagnostics: list[Finding] = field(default_factory=list)
    path: Path | None = None


def find_config(start: Path) -> Path | None:
    """
    Find a configuration file in ``start`` or any parent directory.

    Args:
        start: Directory to start searching from.

    Returns:
        Path to the first config file found, or None.
    """
    current = start.expanduser().resolve()
    while True:
        for name in CONFIG_FILE_NAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        if current.parent == current:
            return None
        current = current.parent


def default_config(root_dir: Path) -> LoadedConfig:
    """Return the configuration used when no config file exists."""
    return LoadedConfig(engine=EngineConfig(include=list(DEFAULT_INCLUDE), root_dir=root_dir))


def load_config(config_path: Path) -> LoadedConfig:
    """
    Load configuration from a YAML file.

    A relative ``rootDir`` is anchored at the config file's directory,
    which is also the default root.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        LoadedConfig with the validated engine config and diagnostics.

    Raises:
        ConfigError: If the file is missing, the YAML is malformed, or the
            values do not validate.
    """
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    config_path = config_path.resolve()
    text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"YAML root must be a mapping, not {type(data).__name__}")

    diagnostics = _unknown_key_diagnostics(data, text, config_path)

    engine_data: dict[str, Any] = {
        _ENGINE_KEYS[key]: value for key, value in data.items() if key in _ENGINE_KEYS
    }
    engine_data.setdefault("include", list(DEFAULT_INCLUDE))
    root = Path(engine_data.get("root_dir") or ".").expanduser()
    if not root.is_absolute():
        root = config_path.parent / root
    engine_data["root_dir"] = root

    try:
        engine = EngineConfig(**engine_data)
        logging_config = LoggingConfig(**(data.get(_LOGGING_KEY) or {}))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
    except TypeError as e:
        raise ConfigError(f"Invalid logging section in {config_path}: {e}") from e

    logger.debug("Loaded config {} (root={})", config_path, engine.root_dir)
    return LoadedConfig(
        engine=engine,
        logging=logging_config,
        diagnostics=diagnostics,
        path=config_path,
    )


def _unknown_key_diagnostics(data: dict[str, Any], text: str, config_path: Path) -> list[Finding]:
    """Build CONF001 warnings for unrecognised top-level keys."""
    unknown = [key for key in data if key not in _ENGINE_KEYS and key != _LOGGING_KEY]
    if not unknown:
        return []

    lines = _top_level_key_lines(text)
    diagnostics = []
    for key in unknown:
        logger.warning("Unknown configuration key '{}' in {}", key, config_path)
        diagnostics.append(
            Finding(
                validator=ENGINE_VALIDATOR_KEY,
                code="CONF001",
                severity=Severity.WARNING,
                message=f'Unknown configuration key "{key}" is ignored',
                location=SourceLocation(
                    file=config_path.as_posix(),
                    line=lines.get(str(key), 1),
                ),
            )
        )
    return diagnostics


def _top_level_key_lines(text: str) -> dict[str, int]:
    """Map top-level YAML keys to their 1-based line numbers."""
    node = yaml.compose(text)
    if not isinstance(node, yaml.MappingNode):
        return {}
    return {
        str(key_node.value): key_node.start_mark.line + 1
        for key_node, _ in node.value
        if isinstance(key_node, yaml.ScalarNode)
    }
