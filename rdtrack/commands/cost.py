"""
rd cost - Edit a project's cost sheet and show its totals.
"""

from pathlib import Path

from rdtrack.commands.common import open_service, print_summary, report_failure
from rdtrack.costing.ledger import CostCategory, CostLineItem, format_amount, parse_category
from rdtrack.costing.rollup import compute_totals
from rdtrack.lib.config import TrackerConfig


def _category(text: str) -> CostCategory | None:
    category = parse_category(text)
    if category is None:
        print(f"ERROR: Unknown cost category '{text}'")
        print(f"  Categories: {', '.join(c.value for c in CostCategory)}")
    return category


def cmd_cost_add(args, home: Path, config: TrackerConfig) -> int:
    category = _category(args.category)
    if category is None:
        return 2

    item = CostLineItem(
        name=args.name,
        description=args.desc or "",
        consumption=args.consumption or "",
        cost=args.cost,
    )
    service = open_service(config)
    result = service.add_line_item(args.project, category, item, expected_version=args.expect_version)
    if not result.success:
        return report_failure(result)

    added = result.value.cost_breakdown.items(category)[-1]
    print(f"Added {category.value} line {added.id}: {added.name} {added.cost}")
    return 0


def cmd_cost_update(args, home: Path, config: TrackerConfig) -> int:
    category = _category(args.category)
    if category is None:
        return 2

    patch = {}
    if args.name is not None:
        patch["name"] = args.name
    if args.desc is not None:
        patch["description"] = args.desc
    if args.consumption is not None:
        patch["consumption"] = args.consumption
    if args.cost is not None:
        patch["cost"] = args.cost
    if not patch:
        print("ERROR: Nothing to update. Use --name, --desc, --consumption or --cost")
        return 2

    service = open_service(config)
    result = service.update_line_item(
        args.project, category, args.item_id, patch, expected_version=args.expect_version
    )
    if not result.success:
        return report_failure(result)

    item = result.value.cost_breakdown.find(category, args.item_id)
    print(f"Updated {category.value} line {item.id}: {item.name} {item.cost}")
    return 0


def cmd_cost_remove(args, home: Path, config: TrackerConfig) -> int:
    category = _category(args.category)
    if category is None:
        return 2

    service = open_service(config)
    result = service.remove_line_item(
        args.project, category, args.item_id, expected_version=args.expect_version
    )
    if not result.success:
        return report_failure(result)

    print(f"Removed {category.value} line {args.item_id}")
    return 0


def cmd_cost_margin(args, home: Path, config: TrackerConfig) -> int:
    service = open_service(config)
    result = service.set_profit_margin(args.project, args.percent, expected_version=args.expect_version)
    if not result.success:
        return report_failure(result)

    print(f"Profit margin set to {result.value.cost_breakdown.profit_margin}%")
    return 0


def cmd_cost_extra(args, home: Path, config: TrackerConfig) -> int:
    service = open_service(config)
    result = service.set_additional_costs(args.project, args.amount, expected_version=args.expect_version)
    if not result.success:
        return report_failure(result)

    print(f"Additional costs set to {result.value.cost_breakdown.additional_costs}")
    return 0


def cmd_cost_labour(args, home: Path, config: TrackerConfig) -> int:
    service = open_service(config)
    result = service.set_labour_total(args.project, args.amount, expected_version=args.expect_version)
    if not result.success:
        return report_failure(result)

    labour = result.value.cost_breakdown.items(CostCategory.LABOUR)[0]
    print(f"Labour set to {labour.cost}")
    return 0


def cmd_cost_final(args, home: Path, config: TrackerConfig) -> int:
    service = open_service(config)
    result = service.set_client_final_cost(args.project, args.amount, expected_version=args.expect_version)
    if not result.success:
        return report_failure(result)

    project = result.value
    tentative = compute_totals(project.cost_breakdown).tentative_cost
    print(f"Client final cost set to {format_amount(project.client_final_cost)} (tentative {tentative})")
    return 0


def cmd_cost_summary(args, home: Path, config: TrackerConfig) -> int:
    service = open_service(config)
    project = service.get(args.project)
    print_summary(compute_totals(project.cost_breakdown))
    if project.client_final_cost is not None:
        print(f"  {'Client final':<16} {format_amount(project.client_final_cost):>12}")
    return 0
