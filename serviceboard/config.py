"""
Board configuration loading.

Loads board and source configuration from YAML with environment variable expansion.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from serviceboard.board.visibility import DONE_STAGE_KEYWORDS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class BoardConfigError(ValueError):
    """Raised when the board configuration is invalid."""


@dataclass
class BoardSettings:
    """
    Engine settings.

    Attributes:
        default_source: Source name under "sources" used by tools
        sequential_services: Hide later services of an order in stage view
        done_stage_keywords: Stage-name fragments that mark a finished stage
        export_path: Where write_board_data puts the board JSON
        log_level: Package log level
    """
    default_source: str = "yaml"
    sequential_services: bool = False
    done_stage_keywords: tuple[str, ...] = DONE_STAGE_KEYWORDS
    export_path: str = "board/board.json"
    log_level: str = "INFO"
    sources: dict[str, dict[str, Any]] = field(default_factory=dict)


def expand_env_vars(value: Any) -> Any:
    """
    Recursively expand ${VAR} environment variables in config values.

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with env vars expanded
    """
    if isinstance(value, str):
        # Match ${VAR} or $VAR patterns
        pattern = r'\$\{([^}]+)\}|\$([A-Z_][A-Z0-9_]*)'

        def replace(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, "")

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]

    return value


def default_config() -> dict:
    """Minimal config built from the environment."""
    return {
        "board": {
            "default_source": os.environ.get("BOARD_SOURCE", "yaml"),
            "sequential_services": False,
            "export_path": os.environ.get("BOARD_EXPORT_PATH", "board/board.json"),
            "log_level": os.environ.get("BOARD_LOG_LEVEL", "INFO"),
        },
        "sources": {
            "yaml": {
                "path": os.environ.get("BOARD_SNAPSHOT_PATH", "config/snapshot.yaml"),
            },
            "rest": {
                "base_url": os.environ.get("BOARD_REST_URL", ""),
                "api_key_env": "BOARD_REST_KEY",
                "timeout_s": 30,
            },
        },
    }


def load_board_config(config_path: str | Path | None = None) -> dict:
    """
    Load board configuration from YAML file.

    Looks for config in this order:
    1. Explicitly provided path
    2. config/board.yaml relative to project root
    3. Returns minimal default config

    Environment variables in the format ${VAR} are expanded.

    Args:
        config_path: Optional path to config file

    Returns:
        Dict with board configuration
    """
    if config_path is None:
        # serviceboard/config.py -> project root is ../..
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config" / "board.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        return default_config()

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise BoardConfigError(f"Board config must be a mapping: {config_path}")

    return expand_env_vars(config)


def parse_settings(config: dict) -> BoardSettings:
    """
    Build BoardSettings from a loaded config dict.

    Raises:
        BoardConfigError: If a section has the wrong shape
    """
    board = config.get("board", {}) or {}
    sources = config.get("sources", {}) or {}
    if not isinstance(board, dict):
        raise BoardConfigError("'board' section must be a mapping")
    if not isinstance(sources, dict):
        raise BoardConfigError("'sources' section must be a mapping")

    keywords = board.get("done_stage_keywords", DONE_STAGE_KEYWORDS)
    if not isinstance(keywords, (list, tuple)) or not all(isinstance(k, str) for k in keywords):
        raise BoardConfigError("board.done_stage_keywords must be a list of strings")

    log_level = str(board.get("log_level", "INFO")).strip().upper()
    if log_level not in LOG_LEVELS:
        raise BoardConfigError(
            f"board.log_level must be one of {list(LOG_LEVELS)}, got '{log_level}'"
        )

    sequential = board.get("sequential_services", False)
    if isinstance(sequential, str):
        sequential = sequential.strip().lower() in {"1", "true", "yes", "on"}

    return BoardSettings(
        default_source=str(board.get("default_source", "yaml")),
        sequential_services=bool(sequential),
        done_stage_keywords=tuple(keywords),
        export_path=str(board.get("export_path", "board/board.json")),
        log_level=log_level,
        sources=sources,
    )


def get_source_config(source_name: str, config: dict | None = None) -> dict:
    """
    Get configuration for a specific source.

    Args:
        source_name: Name of the source (e.g., "yaml", "rest")
        config: Optional pre-loaded config dict

    Returns:
        Source-specific configuration dict

    Raises:
        BoardConfigError: If source not found in config
    """
    if config is None:
        config = load_board_config()

    sources = config.get("sources", {}) or {}

    if source_name not in sources:
        raise BoardConfigError(f"Source '{source_name}' not found in config")

    return sources[source_name]
