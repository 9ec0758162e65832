"""
Reader for rdtrack.env.

The file holds plain KEY=value lines. Nothing is expanded or executed, and
values that look like shell syntax are refused rather than passed on.
"""

import re
from pathlib import Path

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')

# Backticks, $( and ${, command chaining and pipes
UNSAFE_VALUE = re.compile(r'`|\$[({]|;|&&|\|')

QUOTES = ('"', "'")


class EnvSyntaxError(ValueError):
    """A line of an env file could not be accepted."""

    def __init__(self, lineno: int, problem: str):
        self.lineno = lineno
        super().__init__(f"Line {lineno}: {problem}")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def _parse_line(lineno: int, raw: str) -> tuple[str, str] | None:
    """Return (key, value), or None for blank and comment lines."""
    line = raw.strip()
    if not line or line.startswith("#"):
        return None
    line = line.removeprefix("export ").lstrip()

    key, sep, value = line.partition("=")
    if not sep:
        raise EnvSyntaxError(lineno, "Invalid syntax (no '=')")
    key = key.strip()
    if not KEY_PATTERN.match(key):
        raise EnvSyntaxError(lineno, f"Invalid key '{key}'")

    value = _unquote(value.strip())
    if UNSAFE_VALUE.search(value):
        raise EnvSyntaxError(lineno, f"Forbidden pattern in value of {key}")
    return key, value


def parse_env_text(text: str) -> dict[str, str]:
    """Parse env-file content. Later lines win over earlier ones.

    Raises:
        EnvSyntaxError: (a ValueError) for the first line that can't be accepted
    """
    pairs = (_parse_line(lineno, raw) for lineno, raw in enumerate(text.splitlines(), 1))
    return dict(pair for pair in pairs if pair is not None)


def load_env(filepath: str | Path) -> dict[str, str]:
    """Read and parse an env file.

    Raises:
        FileNotFoundError: if the file doesn't exist
        EnvSyntaxError: if a line is malformed or unsafe
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env_text(path.read_text())
