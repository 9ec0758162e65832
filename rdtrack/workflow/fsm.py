"""Project stage state machine using the transitions library.

Each legal move in the approval pipeline is a named trigger. The two
triggers that leave po_pending are guarded by has_po_number: the purchase
order number is the contractual gate, and no other move checks project data.

Usage:
    from rdtrack.workflow.fsm import ProjectFSM

    fsm = ProjectFSM(project)
    fsm.submit_prototype()   # idea_submitted -> prototype
    fsm.approve_po()         # False (and no move) while po_number is blank
"""

import logging
from typing import Callable

from transitions import Machine

from rdtrack.workflow.stages import Stage

logger = logging.getLogger(__name__)


STATES = [stage.value for stage in Stage]

# Trigger names become methods on ProjectFSM
TRANSITIONS = [
    # Development pipeline
    {"trigger": "submit_prototype", "source": "idea_submitted", "dest": "prototype"},
    {"trigger": "approve_red_seal", "source": "prototype", "dest": "red_seal"},
    {"trigger": "approve_green_seal", "source": "red_seal", "dest": "green_seal"},
    {"trigger": "request_po", "source": "green_seal", "dest": "po_pending"},

    # Leaving PO pending needs a PO number
    {"trigger": "approve_po", "source": "po_pending", "dest": "po_approved",
     "conditions": "has_po_number"},
    {"trigger": "fast_track_production", "source": "po_pending", "dest": "production",
     "conditions": "has_po_number"},

    # Hand-off to the production floor
    {"trigger": "release_to_production", "source": "po_approved", "dest": "production"},
]

# Guard name -> project field it checks
GUARD_FIELDS = {
    "has_po_number": "po_number",
}


# (source, dest) -> trigger; each stage pair has at most one trigger
TRIGGER_FOR = {(t["source"], t["dest"]): t["trigger"] for t in TRANSITIONS}

# trigger -> project field its guard reads
PRECONDITION_FOR = {
    t["trigger"]: GUARD_FIELDS[t["conditions"]]
    for t in TRANSITIONS
    if "conditions" in t
}


class ProjectFSM:
    """State machine for one project's stage.

    Wraps the transitions library:
    - Takes its initial state from project.stage
    - Writes every accepted transition back to project.stage
    - Logs each accepted move
    """

    def __init__(self, project, on_transition: Callable[[str, str, str], None] | None = None):
        """Initialize FSM for a project.

        Args:
            project: Project whose stage this machine drives (mutated in place)
            on_transition: Optional callback(from_stage, to_stage, trigger) run after each move
        """
        self.project = project
        self.on_transition = on_transition

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=project.stage.value,
            auto_transitions=False,  # no to_<stage>() shortcuts
            send_event=True,
            after_state_change="on_state_change",
        )

    def has_po_number(self, event) -> bool:
        """Guard: the project has a non-blank PO number."""
        po_number = self.project.po_number
        return bool(po_number and po_number.strip())

    def on_state_change(self, event) -> None:
        """Sync project.stage after an accepted move.

        Also logs the move and notifies on_transition.
        """
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        self.project.stage = Stage(to_state)
        logger.info(f"[FSM] {self.project.auto_code}: {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def can(self, trigger: str) -> bool:
        """Check if a trigger exists for the current state (guards not evaluated)."""
        return trigger in self.machine.get_triggers(self.state)

    def get_available_triggers(self) -> list[str]:
        """Triggers defined for the current stage."""
        return self.machine.get_triggers(self.state)
