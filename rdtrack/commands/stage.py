"""
rd advance / po - Move a project through the approval pipeline.
"""

from pathlib import Path

from rdtrack.commands.common import format_po_details, open_service, report_failure
from rdtrack.lib.config import TrackerConfig
from rdtrack.workflow.stages import Stage, next_stage, parse_stage
from rdtrack.workflow.state_machine import legal_targets


def cmd_advance(args, home: Path, config: TrackerConfig) -> int:
    """Advance to the given stage, or to the next stage if none is given."""
    service = open_service(config)
    project = service.get(args.project)

    if args.stage:
        target = parse_stage(args.stage)
        if target is None:
            print(f"ERROR: Unknown stage '{args.stage}'")
            print(f"  Stages: {', '.join(stage.value for stage in Stage)}")
            return 2
    else:
        target = next_stage(project.stage)
        if target is None:
            print(f"ERROR: {project.id} is at {project.stage.display_name}; name a target stage")
            targets = legal_targets(project)
            if targets:
                print(f"  Allowed: {', '.join(stage.value for stage in targets)}")
            return 1

    result = service.advance(project.id, target, expected_version=args.expect_version)
    if not result.success:
        return report_failure(result)

    updated = result.value
    print(f"{updated.id}: {project.stage.display_name} -> {updated.stage.display_name} ({updated.progress}%)")
    return 0


def cmd_po(args, home: Path, config: TrackerConfig) -> int:
    """Record or correct the PO number, order quantity and unit price."""
    if args.number is None and args.qty is None and args.price is None:
        print("ERROR: Give a PO number, --qty or --price")
        return 2

    service = open_service(config)
    if args.qty is None and args.price is None:
        result = service.set_po_number(args.project, args.number, expected_version=args.expect_version)
    else:
        result = service.set_po_details(
            args.project, args.qty, args.price,
            po_number=args.number, expected_version=args.expect_version,
        )
    if not result.success:
        return report_failure(result)

    project = result.value
    print(f"{project.id}: PO number {project.po_number or '-'}")
    details = project.po_details
    if details.order_quantity is not None or details.unit_price is not None:
        print(f"  {format_po_details(details)}")
    return 0
