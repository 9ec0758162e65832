"""Tests for rdtrack.project.codes module."""

from datetime import date

from rdtrack.project.codes import code_period, fiscal_year_label, generate_project_code
from rdtrack.project.store import MemoryProjectStore


class TestFiscalYear:
    def test_april_starts_new_year(self):
        assert fiscal_year_label(date(2025, 4, 1)) == "25-26"
        assert fiscal_year_label(date(2025, 3, 31)) == "24-25"

    def test_march_belongs_to_previous_start(self):
        assert fiscal_year_label(date(2026, 3, 31)) == "25-26"

    def test_century_wrap(self):
        assert fiscal_year_label(date(2099, 12, 1)) == "99-00"

    def test_period(self):
        assert code_period(date(2026, 1, 15)) == "25-26/01"


class TestGenerateProjectCode:
    def test_first_code_of_month(self):
        code = generate_project_code(MemoryProjectStore(), "RND", date(2025, 4, 10))
        assert code == "RND/25-26/04/101"

    def test_serial_increments_within_month(self):
        store = MemoryProjectStore()
        generate_project_code(store, "RND", date(2025, 4, 10))
        assert generate_project_code(store, "RND", date(2025, 4, 30)) == "RND/25-26/04/102"

    def test_new_month_restarts(self):
        store = MemoryProjectStore()
        generate_project_code(store, "RND", date(2025, 4, 10))
        assert generate_project_code(store, "RND", date(2025, 5, 1)) == "RND/25-26/05/101"

    def test_prefix(self):
        assert generate_project_code(MemoryProjectStore(), "DEV", date(2025, 4, 1)).startswith("DEV/")

    def test_used_codes_skipped(self):
        used = {"RND/25-26/04/101", "RND/25-26/04/102"}
        code = generate_project_code(MemoryProjectStore(), "RND", date(2025, 4, 1), used)
        assert code == "RND/25-26/04/103"
