"""Tests for rdtrack.workflow.stages module."""

import pytest

from rdtrack.workflow.stages import (
    INITIAL_STAGE,
    PIPELINE,
    Stage,
    next_stage,
    parse_stage,
)


class TestStageEnum:
    """Tests for the Stage enum and pipeline order."""

    def test_pipeline_order(self):
        assert [s.value for s in PIPELINE] == [
            "idea_submitted", "prototype", "red_seal",
            "green_seal", "po_pending", "po_approved",
        ]

    def test_production_outside_pipeline(self):
        """Production is a boundary marker, not a pipeline stage."""
        assert Stage.PRODUCTION not in PIPELINE
        assert Stage.PRODUCTION.index == len(PIPELINE)

    def test_initial_stage(self):
        assert INITIAL_STAGE is Stage.IDEA_SUBMITTED

    def test_display_names(self):
        assert Stage.RED_SEAL.display_name == "Red Seal"
        assert Stage.PO_PENDING.display_name == "PO Pending"
        assert Stage.PRODUCTION.display_name == "Production"

    def test_progress_derived_from_position(self):
        """Progress is (index + 1) / 6, rounded to a whole percent."""
        assert [s.progress for s in PIPELINE] == [17, 33, 50, 67, 83, 100]
        assert Stage.PRODUCTION.progress == 100


class TestParseStage:
    """Tests for parse_stage() function."""

    def test_parse_identifier(self):
        assert parse_stage("red_seal") is Stage.RED_SEAL
        assert parse_stage("po_approved") is Stage.PO_APPROVED

    def test_parse_display_name(self):
        """Display names parse regardless of case and spacing."""
        assert parse_stage("Green Seal") is Stage.GREEN_SEAL
        assert parse_stage("PO Pending") is Stage.PO_PENDING
        assert parse_stage("  idea   submitted ") is Stage.IDEA_SUBMITTED

    @pytest.mark.parametrize("alias,expected", [
        ("proto", Stage.PROTOTYPE),
        ("rs", Stage.RED_SEAL),
        ("GS", Stage.GREEN_SEAL),
        ("po-pending", Stage.PO_PENDING),
        ("po-appr", Stage.PO_APPROVED),
        ("prod", Stage.PRODUCTION),
    ])
    def test_parse_alias(self, alias, expected):
        assert parse_stage(alias) is expected

    def test_parse_unknown(self):
        """Should return None for unknown or empty input."""
        assert parse_stage("bogus") is None
        assert parse_stage("") is None
        assert parse_stage(None) is None


class TestNextStage:
    """Tests for next_stage() function."""

    def test_successors(self):
        assert next_stage(Stage.IDEA_SUBMITTED) is Stage.PROTOTYPE
        assert next_stage(Stage.GREEN_SEAL) is Stage.PO_PENDING
        assert next_stage(Stage.PO_PENDING) is Stage.PO_APPROVED

    def test_end_of_pipeline(self):
        """No successor past PO Approved; production is not a pipeline step."""
        assert next_stage(Stage.PO_APPROVED) is None
        assert next_stage(Stage.PRODUCTION) is None
