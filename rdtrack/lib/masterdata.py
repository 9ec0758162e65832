"""
Master-data display names.

Brands, categories, countries and colours are simple key/value tables kept
in master_data.yaml. They are only used to render names; no domain rule
depends on them.

Example master_data.yaml:

    brands:
      b1: Campus
    colors:
      blk: Black
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

KINDS = ("brands", "categories", "types", "countries", "colors")


@dataclass
class MasterData:
    """Key -> display name tables, one per kind."""
    tables: dict[str, dict[str, str]] = field(default_factory=dict)

    def name(self, kind: str, key: str | None) -> str:
        """Display name for key, falling back to the key itself."""
        if not key:
            return "-"
        return self.tables.get(kind, {}).get(key, key)


def load_master_data(path: Path | None) -> MasterData:
    """Load master_data.yaml and return MasterData.

    If path is None or the file doesn't exist, returns empty tables.
    """
    if path is None or not path.exists():
        return MasterData()

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return MasterData()

    if not isinstance(data, dict):
        logger.warning(f"Ignoring {path}: expected a mapping at top level")
        return MasterData()

    tables = {}
    for kind in KINDS:
        entries = data.get(kind) or {}
        if not isinstance(entries, dict):
            logger.warning(f"Ignoring '{kind}' in {path}: expected a mapping")
            continue
        tables[kind] = {str(k): str(v) for k, v in entries.items()}
    return MasterData(tables=tables)
