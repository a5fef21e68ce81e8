"""Configuration loading.

Settings come from an optional YAML file::

    json:
      pretty: true
    logging:
      verbosity: 1
      file: logs/digraph.jsonl

Environment variables override the file:
- DIGRAPH_PRETTY: "1"/"true"/"yes"/"on" for pretty JSON output
- DIGRAPH_VERBOSITY: integer verbosity
- DIGRAPH_LOG_FILE: path of the JSONL log file
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

DEFAULT_CONFIG_FILE = Path("digraph.yaml")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at {path}: {reason}")


@dataclass
class DigraphConfig:
    """Settings for the command line tools.

    Attributes:
        pretty: Write JSON with two-space indentation by default.
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG.
        log_file: Optional JSONL log file.
    """

    pretty: bool = False
    verbosity: int = 0
    log_file: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DigraphConfig:
        """Build config from the parsed YAML mapping."""
        json_section = dict(data.get("json") or {})
        logging_section = dict(data.get("logging") or {})

        pretty = json_section.get("pretty", False)
        if not isinstance(pretty, bool):
            raise ValueError(f"json.pretty must be a boolean, got {pretty!r}")

        verbosity = logging_section.get("verbosity", 0)
        if isinstance(verbosity, bool) or not isinstance(verbosity, int) or verbosity < 0:
            raise ValueError(f"logging.verbosity must be a non-negative integer, got {verbosity!r}")

        log_file = logging_section.get("file")
        return cls(
            pretty=pretty,
            verbosity=verbosity,
            log_file=Path(str(log_file)) if log_file else None,
        )

    def with_env_overrides(self) -> DigraphConfig:
        """Return a copy with DIGRAPH_* environment variables applied."""
        pretty = self.pretty
        if (raw := os.getenv("DIGRAPH_PRETTY")) is not None:
            pretty = _parse_bool("DIGRAPH_PRETTY", raw)

        verbosity = self.verbosity
        if (raw := os.getenv("DIGRAPH_VERBOSITY")) is not None:
            try:
                verbosity = int(raw)
            except ValueError as e:
                raise ConfigError("DIGRAPH_VERBOSITY", f"not an integer: {raw!r}") from e

        log_file = self.log_file
        if raw := os.getenv("DIGRAPH_LOG_FILE"):
            log_file = Path(raw)

        return DigraphConfig(pretty=pretty, verbosity=verbosity, log_file=log_file)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(name, f"not a boolean: {raw!r}")


def load_config(config_path: Path | None = None) -> DigraphConfig:
    """Load configuration from YAML and the environment.

    Args:
        config_path: YAML file to read. Defaults to ``./digraph.yaml``; a
            missing default file means built-in defaults.

    Returns:
        DigraphConfig instance.

    Raises:
        ConfigError: If an explicitly given file is missing, or any file or
            environment value cannot be parsed.
    """
    path = config_path if config_path is not None else DEFAULT_CONFIG_FILE

    if not path.exists():
        if config_path is not None:
            raise ConfigError(path, "File not found")
        return DigraphConfig().with_env_overrides()

    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(path, "Top level must be a mapping")
        config = DigraphConfig.from_dict(data)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(path, str(e)) from e

    return config.with_env_overrides()
