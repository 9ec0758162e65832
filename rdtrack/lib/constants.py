"""Shared constants for rdtrack."""

import re

# Version of the persisted project record shape
SCHEMA_VERSION = 1

# Project IDs double as file names in the JSON store
PROJECT_ID_PATTERN = re.compile(r'^[a-z0-9][a-z0-9_-]*$')
MAX_PROJECT_ID_LEN = 40

DEFAULT_COLOR_HEX = "#cccccc"
HEX_PATTERN = re.compile(r'^#[0-9a-f]{3}([0-9a-f]{3})?$')
