"""
Configuration for the Thing command line tools.

Settings are read from ``thing.toml`` or from the ``[tool.thing]`` table of
``pyproject.toml``. Example ``thing.toml``:

    color = false
    max_errors = 20
    program = true
    log_level = "info"
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

from thing.utils.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "thing.toml"
PYPROJECT_FILENAME = "pyproject.toml"

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass
class ThingConfig:
    """
    Settings shared by the command line tools.

    Attributes:
        color: Force colored output on or off; None decides from the terminal
        max_errors: Report at most this many errors (0 means no limit)
        program: Parse input as a statement sequence instead of one expression
        log_level: Name of the logging level
    """

    color: Optional[bool] = None
    max_errors: int = 0
    program: bool = True
    log_level: str = "warning"

    @classmethod
    def from_dict(cls, data: dict[str, Any], origin: str = "<config>") -> ThingConfig:
        """
        Build a configuration from a parsed TOML table.

        Raises:
            ConfigError: On unknown keys or values of the wrong type
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"{origin}: unknown setting(s): {', '.join(unknown)}")

        config = cls()
        if "color" in data:
            config.color = _expect(data, "color", bool, origin)
        if "max_errors" in data:
            config.max_errors = _expect(data, "max_errors", int, origin)
            if config.max_errors < 0:
                raise ConfigError(f"{origin}: max_errors must not be negative")
        if "program" in data:
            config.program = _expect(data, "program", bool, origin)
        if "log_level" in data:
            level = _expect(data, "log_level", str, origin).lower()
            if level not in LOG_LEVELS:
                raise ConfigError(
                    f"{origin}: log_level must be one of {', '.join(LOG_LEVELS)}"
                )
            config.log_level = level
        return config

    def merged(self, **overrides: Any) -> ThingConfig:
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _expect(data: dict[str, Any], key: str, kind: type, origin: str) -> Any:
    value = data[key]
    # bool is a subclass of int; reject it where a number is required
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(
            f"{origin}: {key} must be of type {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: invalid TOML: {e}") from e


def load_config(path: Optional[Path] = None, directory: Optional[Path] = None) -> ThingConfig:
    """
    Load configuration.

    Lookup order: ``path`` when given, else ``thing.toml`` in ``directory``
    (default: the current directory), else ``[tool.thing]`` in that
    directory's ``pyproject.toml``, else defaults.

    Raises:
        ConfigError: If the file is unreadable or holds invalid settings
    """
    if path is not None:
        logger.debug("loading configuration from %s", path)
        data = _read_toml(path)
        if path.name == PYPROJECT_FILENAME:
            data = data.get("tool", {}).get("thing", {})
        return ThingConfig.from_dict(data, str(path))

    base = directory if directory is not None else Path.cwd()

    candidate = base / CONFIG_FILENAME
    if candidate.is_file():
        logger.debug("loading configuration from %s", candidate)
        return ThingConfig.from_dict(_read_toml(candidate), str(candidate))

    candidate = base / PYPROJECT_FILENAME
    if candidate.is_file():
        table = _read_toml(candidate).get("tool", {}).get("thing")
        if table is not None:
            logger.debug("loading configuration from [tool.thing] in %s", candidate)
            return ThingConfig.from_dict(table, f"{candidate} [tool.thing]")

    return ThingConfig()
