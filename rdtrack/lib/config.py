"""
Configuration loaders for rdtrack.

Loads tracker settings from rdtrack.env in the tracker home directory and
manages the "current project" context used by the CLI.
"""

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from . import envparse

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "rdtrack.env"
HOME_ENV_VAR = "RDTRACK_HOME"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class TrackerConfig:
    """Tracker settings from rdtrack.env"""
    home: Path
    store_dir: Path
    default_profit_margin: Decimal
    code_prefix: str
    seed_default_costs: bool
    lock_timeout: int
    log_level: str
    master_data_path: Path


def resolve_home(explicit: str | None = None) -> Path:
    """Pick the tracker home: explicit arg, then $RDTRACK_HOME, then cwd."""
    if explicit:
        return Path(explicit)
    env_home = os.environ.get(HOME_ENV_VAR)
    if env_home:
        return Path(env_home)
    return Path.cwd()


def _parse_margin(raw: str) -> Decimal:
    default = Decimal("25")
    try:
        margin = Decimal(raw)
    except InvalidOperation:
        logger.warning(f"Invalid DEFAULT_PROFIT_MARGIN '{raw}', using {default}")
        return default
    if not margin.is_finite() or margin < 0 or margin > 100:
        logger.warning(f"DEFAULT_PROFIT_MARGIN '{raw}' outside 0-100, using {default}")
        return default
    return margin


def _parse_int(raw: str, key: str, default: int) -> int:
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {key} '{raw}', using {default}")
        return default


def load_tracker_config(home: Path) -> TrackerConfig:
    """Load rdtrack.env from home and return TrackerConfig.

    A missing file is not an error: every key has a default.
    """
    config_path = home / CONFIG_FILENAME
    env: dict[str, str] = {}
    if config_path.exists():
        env = envparse.load_env(config_path)

    log_level = env.get("LOG_LEVEL", "WARNING").upper()
    if log_level not in VALID_LOG_LEVELS:
        logger.warning(f"Unknown LOG_LEVEL '{log_level}', defaulting to WARNING")
        log_level = "WARNING"

    store_dir = Path(env.get("STORE_DIR", "store"))
    if not store_dir.is_absolute():
        store_dir = home / store_dir

    master_data = Path(env.get("MASTER_DATA", "master_data.yaml"))
    if not master_data.is_absolute():
        master_data = home / master_data

    return TrackerConfig(
        home=home,
        store_dir=store_dir,
        default_profit_margin=_parse_margin(env.get("DEFAULT_PROFIT_MARGIN", "25")),
        code_prefix=env.get("CODE_PREFIX", "RND"),
        seed_default_costs=env.get("SEED_DEFAULT_COSTS", "true").lower() == "true",
        lock_timeout=_parse_int(env.get("LOCK_TIMEOUT", "10"), "LOCK_TIMEOUT", 10),
        log_level=log_level,
        master_data_path=master_data,
    )


def get_current_project(home: Path, known_ids: list[str] | None = None) -> str | None:
    """Get the current project ID from context, or None if not set.

    When known_ids is given, a context pointing at a project that no longer
    exists is cleared.
    """
    context_file = home / "config" / "current_project"
    if context_file.exists():
        project_id = context_file.read_text().strip()
        if project_id:
            if known_ids is None or project_id in known_ids:
                return project_id
            context_file.unlink()
    return None


def set_current_project(home: Path, project_id: str) -> None:
    """Set the current project context."""
    config_dir = home / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "current_project").write_text(project_id + "\n")


def clear_current_project(home: Path) -> None:
    """Clear the current project context."""
    context_file = home / "config" / "current_project"
    if context_file.exists():
        context_file.unlink()
