"""
Project code generation.

Codes look like RND/25-26/04/101: prefix, fiscal year (April to March),
month, and a per fiscal-year-and-month serial that starts at 101.
"""

from datetime import date

FIRST_SERIAL = 101


def fiscal_year_label(day: date) -> str:
    """'25-26' for any day from 1 April 2025 to 31 March 2026."""
    start = day.year if day.month >= 4 else day.year - 1
    return f"{start % 100:02d}-{(start + 1) % 100:02d}"


def code_period(day: date) -> str:
    """Counter key for the month containing day, e.g. '25-26/04'."""
    return f"{fiscal_year_label(day)}/{day.month:02d}"


def generate_project_code(store, prefix: str, day: date | None = None,
                          used_codes: set[str] | None = None) -> str:
    """Take the next code for day's period from the store's counter.

    Codes in used_codes are skipped.
    """
    day = day or date.today()
    period = code_period(day)
    used_codes = used_codes or set()
    while True:
        serial = store.next_sequence(period, start=FIRST_SERIAL)
        code = f"{prefix}/{period}/{serial:03d}"
        if code not in used_codes:
            return code
