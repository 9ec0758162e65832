"""Approval pipeline stages.

The pipeline is fixed and linear:

    idea_submitted -> prototype -> red_seal -> green_seal
        -> po_pending -> po_approved

`production` is not part of the pipeline. It marks the hand-off to the
production floor and is only reachable from the PO stages.
"""

from enum import Enum


class Stage(Enum):
    """All stages a project can be in.

    Values match the identifiers stored in project records.
    """

    IDEA_SUBMITTED = "idea_submitted"
    PROTOTYPE = "prototype"
    RED_SEAL = "red_seal"
    GREEN_SEAL = "green_seal"
    PO_PENDING = "po_pending"
    PO_APPROVED = "po_approved"

    # Boundary marker, outside the gated pipeline
    PRODUCTION = "production"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]

    @property
    def index(self) -> int:
        """Position in the pipeline; production sorts after the last stage."""
        if self is Stage.PRODUCTION:
            return len(PIPELINE)
        return PIPELINE.index(self)

    @property
    def progress(self) -> int:
        """Percent complete, derived from the stage position (17, 33, ... 100)."""
        if self is Stage.PRODUCTION:
            return 100
        return round(100 * (self.index + 1) / len(PIPELINE))


PIPELINE = [
    Stage.IDEA_SUBMITTED,
    Stage.PROTOTYPE,
    Stage.RED_SEAL,
    Stage.GREEN_SEAL,
    Stage.PO_PENDING,
    Stage.PO_APPROVED,
]

INITIAL_STAGE = Stage.IDEA_SUBMITTED

DISPLAY_NAMES = {
    Stage.IDEA_SUBMITTED: "Idea Submitted",
    Stage.PROTOTYPE: "Prototype",
    Stage.RED_SEAL: "Red Seal",
    Stage.GREEN_SEAL: "Green Seal",
    Stage.PO_PENDING: "PO Pending",
    Stage.PO_APPROVED: "PO Approved",
    Stage.PRODUCTION: "Production",
}

# Short forms people type for each stage
STAGE_ALIASES = {
    Stage.IDEA_SUBMITTED: ["idea", "submitted"],
    Stage.PROTOTYPE: ["proto"],
    Stage.RED_SEAL: ["redseal", "rs"],
    Stage.GREEN_SEAL: ["greenseal", "gs"],
    Stage.PO_PENDING: ["popending", "po-pending"],
    Stage.PO_APPROVED: ["poapproved", "po-appr", "po appr", "approved po"],
    Stage.PRODUCTION: ["prod"],
}


def parse_stage(text: str | None) -> Stage | None:
    """Parse a stage identifier, display name or alias.

    Matching ignores case and treats spaces, hyphens and underscores alike.
    Returns None if the text is unknown.
    """
    if text is None:
        return None
    s = " ".join(str(text).strip().lower().split())
    if not s:
        return None

    snake = s.replace(" ", "_").replace("-", "_")
    for stage in Stage:
        if stage.value == snake:
            return stage

    collapsed = snake.replace("_", "")
    for stage in Stage:
        if stage.display_name.lower().replace(" ", "") == collapsed:
            return stage
        for alias in STAGE_ALIASES[stage]:
            if alias == s or alias.replace(" ", "").replace("-", "") == collapsed:
                return stage
    return None


def next_stage(stage: Stage) -> Stage | None:
    """The immediate successor in the pipeline, or None at the end."""
    if stage is Stage.PRODUCTION or stage is PIPELINE[-1]:
        return None
    return PIPELINE[stage.index + 1]
