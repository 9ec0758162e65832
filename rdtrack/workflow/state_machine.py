"""Stage control for projects: advance and PO number.

Thin destination-based API over the trigger-based FSM in fsm.py.
Both operations work on a copy of the project and return it in a Result,
so a rejected call leaves the caller's project untouched.

Usage:
    from rdtrack.workflow.state_machine import advance, set_po_number

    result = advance(project, Stage.PO_APPROVED)
    if not result.success:
        print(result.error)   # Missing precondition: po_number is required
"""

import copy
import logging

from rdtrack.lib.result import (
    EmptyValue,
    InvalidTransition,
    MissingPrecondition,
    Result,
)
from rdtrack.workflow.fsm import PRECONDITION_FOR, TRIGGER_FOR, ProjectFSM
from rdtrack.workflow.stages import Stage

logger = logging.getLogger(__name__)


def advance(project, target: Stage) -> Result:
    """Move project to target stage.

    Legal targets are the immediate successor of the current stage, plus
    production directly from po_pending. Moving to the current stage is
    rejected as InvalidTransition rather than treated as a no-op.

    Returns:
        Result with the updated copy of the project, or
        InvalidTransition / MissingPrecondition.
    """
    current = project.stage
    trigger = TRIGGER_FOR.get((current.value, target.value))
    if trigger is None:
        logger.info(f"[STAGE] {project.auto_code}: rejected {current.value} -> {target.value}")
        return Result.fail(InvalidTransition(current.value, target.value))

    updated = copy.deepcopy(project)
    fsm = ProjectFSM(updated)
    if not getattr(fsm, trigger)():
        field = PRECONDITION_FOR.get(trigger, "unknown")
        logger.info(f"[STAGE] {project.auto_code}: {trigger} blocked, {field} not set")
        return Result.fail(MissingPrecondition(field))

    return Result.ok(updated)


def set_po_number(project, value: str | None) -> Result:
    """Record the client's purchase order number.

    Does not change the stage. May be called again to correct the number,
    at any stage.
    """
    po_number = (value or "").strip()
    if not po_number:
        return Result.fail(EmptyValue("po_number"))

    updated = copy.deepcopy(project)
    previous = updated.po_number
    updated.po_number = po_number
    if previous and previous != po_number:
        logger.info(f"[PO] {project.auto_code}: PO number changed {previous} -> {po_number}")
    else:
        logger.info(f"[PO] {project.auto_code}: PO number set to {po_number}")
    return Result.ok(updated)


def can_advance(project, target: Stage) -> bool:
    """Check whether advance(project, target) would succeed."""
    trigger = TRIGGER_FOR.get((project.stage.value, target.value))
    if trigger is None:
        return False
    if trigger in PRECONDITION_FOR:
        return ProjectFSM(project).has_po_number(None)
    return True


def legal_targets(project) -> list[Stage]:
    """Stages reachable from the current stage by one advance (guards ignored)."""
    return [
        Stage(dest)
        for (source, dest) in TRIGGER_FOR
        if source == project.stage.value
    ]
