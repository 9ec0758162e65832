"""
JSON schema checks for persisted project records.

The store checks every record on write and on read. An invalid record is
never written, and a record hand-edited into a bad shape fails on load with
the offending field named.
"""

import json
from functools import lru_cache
from pathlib import Path

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class ValidationError(Exception):
    """A record does not match its schema."""

    def __init__(self, schema_name: str, message: str, path: str | None = None):
        self.schema_name = schema_name
        self.path = path
        location = f" at {path}" if path else ""
        super().__init__(f"[{schema_name}] {message}{location}")


@lru_cache(maxsize=None)
def get_validator(schema_name: str) -> Draft202012Validator:
    """Compiled validator for rdtrack/schemas/<schema_name>.schema.json."""
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
    schema = json.loads(schema_path.read_text())
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate(data: dict, schema_name: str) -> None:
    """Raise ValidationError for the most relevant violation, if any."""
    error = best_match(get_validator(schema_name).iter_errors(data))
    if error is None:
        return
    location = ".".join(str(part) for part in error.absolute_path) or "(root)"
    raise ValidationError(schema_name, error.message, location)


def validate_file(filepath: Path, schema_name: str) -> dict:
    """Read a JSON record and check it. Returns the parsed data."""
    if not filepath.exists():
        raise ValidationError(schema_name, f"File not found: {filepath}")
    try:
        data = json.loads(filepath.read_text())
    except json.JSONDecodeError as e:
        raise ValidationError(schema_name, f"Invalid JSON in {filepath}: {e}") from None
    validate(data, schema_name)
    return data


def validate_before_write(data: dict, schema_name: str, filepath: Path) -> None:
    try:
        validate(data, schema_name)
    except ValidationError as e:
        raise ValidationError(schema_name, f"Refusing to write {filepath}: {e}", e.path) from None
