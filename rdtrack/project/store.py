"""
Project persistence.

Records are stored one JSON file per project in:
  <store_dir>/projects/<project_id>.json

Every record carries an integer version. save() only writes when the caller
saw the latest version, so two editors can't silently overwrite each other.
A project that was never saved has version 0.
"""

import copy
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from rdtrack.lib.constants import MAX_PROJECT_ID_LEN, PROJECT_ID_PATTERN
from rdtrack.lib.locking import record_lock, sequence_lock
from rdtrack.lib.result import Result, StaleVersion
from rdtrack.lib.validate import validate, validate_before_write, validate_file
from rdtrack.project.models import Project

logger = logging.getLogger(__name__)


class ProjectNotFound(Exception):
    """No record with this project ID."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project '{project_id}' not found")


def check_project_id(project_id: str) -> None:
    """Raise ValueError unless project_id is usable as a record key."""
    if not PROJECT_ID_PATTERN.match(project_id or ""):
        raise ValueError(
            f"Invalid project ID '{project_id}': use lowercase letters, digits, '-' and '_'"
        )
    if len(project_id) > MAX_PROJECT_ID_LEN:
        raise ValueError(f"Project ID '{project_id}' is longer than {MAX_PROJECT_ID_LEN} characters")


class ProjectStore(ABC):
    """Keyed record store for projects."""

    @abstractmethod
    def load(self, project_id: str) -> Project:
        """Return the stored project. Raises ProjectNotFound."""

    @abstractmethod
    def save(self, project: Project, expected_version: int) -> Result:
        """Write project if the stored version equals expected_version.

        Returns the saved copy (with its new version) or StaleVersion.
        """

    @abstractmethod
    def exists(self, project_id: str) -> bool:
        ...

    @abstractmethod
    def list_ids(self) -> list[str]:
        ...

    @abstractmethod
    def next_sequence(self, key: str, start: int = 1) -> int:
        """Return the next value of a named counter, starting at start."""


class MemoryProjectStore(ProjectStore):
    """In-process store. Records are kept as validated dicts."""

    def __init__(self):
        self._records: dict[str, dict] = {}
        self._sequences: dict[str, int] = {}

    def load(self, project_id: str) -> Project:
        if project_id not in self._records:
            raise ProjectNotFound(project_id)
        return Project.from_dict(copy.deepcopy(self._records[project_id]))

    def save(self, project: Project, expected_version: int) -> Result:
        check_project_id(project.id)
        stored = self._records.get(project.id)
        actual = stored["version"] if stored else 0
        if actual != expected_version:
            logger.warning(f"[STORE] {project.id}: stale save (expected v{expected_version}, found v{actual})")
            return Result.fail(StaleVersion(project.id, expected_version, actual))

        saved = copy.deepcopy(project)
        saved.version = actual + 1
        data = saved.to_dict()
        validate(data, "project")
        self._records[project.id] = data
        return Result.ok(saved)

    def exists(self, project_id: str) -> bool:
        return project_id in self._records

    def list_ids(self) -> list[str]:
        return sorted(self._records)

    def next_sequence(self, key: str, start: int = 1) -> int:
        value = max(self._sequences.get(key, start - 1) + 1, start)
        self._sequences[key] = value
        return value


class JsonProjectStore(ProjectStore):
    """One JSON file per project, written atomically under a record lock."""

    def __init__(self, store_dir: Path, lock_timeout: float = 10):
        self.store_dir = store_dir
        self.lock_timeout = lock_timeout

    @property
    def projects_dir(self) -> Path:
        return self.store_dir / "projects"

    @property
    def sequences_file(self) -> Path:
        return self.store_dir / "sequences.json"

    def _path(self, project_id: str) -> Path:
        return self.projects_dir / f"{project_id}.json"

    def _write_json(self, path: Path, data: dict) -> None:
        """Write via a temp file and rename, so readers never see half a record."""
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2) + "\n")
        os.replace(tmp_path, path)

    def load(self, project_id: str) -> Project:
        path = self._path(project_id)
        if not path.exists():
            raise ProjectNotFound(project_id)
        return Project.from_dict(validate_file(path, "project"))

    def save(self, project: Project, expected_version: int) -> Result:
        check_project_id(project.id)
        path = self._path(project.id)

        with record_lock(self.store_dir, project.id, self.lock_timeout):
            actual = validate_file(path, "project")["version"] if path.exists() else 0
            if actual != expected_version:
                logger.warning(
                    f"[STORE] {project.id}: stale save (expected v{expected_version}, found v{actual})"
                )
                return Result.fail(StaleVersion(project.id, expected_version, actual))

            saved = copy.deepcopy(project)
            saved.version = actual + 1
            data = saved.to_dict()
            validate_before_write(data, "project", path)
            self._write_json(path, data)

        logger.debug(f"[STORE] {project.id}: saved v{saved.version}")
        return Result.ok(saved)

    def exists(self, project_id: str) -> bool:
        return self._path(project_id).exists()

    def list_ids(self) -> list[str]:
        if not self.projects_dir.exists():
            return []
        return sorted(f.stem for f in self.projects_dir.glob("*.json"))

    def next_sequence(self, key: str, start: int = 1) -> int:
        with sequence_lock(self.store_dir, self.lock_timeout):
            sequences = {}
            if self.sequences_file.exists():
                try:
                    sequences = json.loads(self.sequences_file.read_text())
                except json.JSONDecodeError as e:
                    # Counters restart; generate_project_code skips codes in use
                    logger.warning(f"Failed to read {self.sequences_file}: {e}")
            value = max(sequences.get(key, start - 1) + 1, start)
            sequences[key] = value
            self._write_json(self.sequences_file, sequences)
        return value
