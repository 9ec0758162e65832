"""
rd new / list / show - Register and inspect projects.
"""

from pathlib import Path

from rdtrack.commands.common import format_po_details, open_service, print_summary, report_failure
from rdtrack.costing.ledger import CostCategory, format_amount
from rdtrack.costing.rollup import compute_totals
from rdtrack.lib.config import TrackerConfig, get_current_project, set_current_project
from rdtrack.lib.masterdata import load_master_data
from rdtrack.project.models import Priority, parse_priority
from rdtrack.variants.registry import list_variants


def cmd_new(args, home: Path, config: TrackerConfig) -> int:
    """Register a new project at Idea Submitted."""
    priority = Priority.MEDIUM
    if args.priority:
        priority = parse_priority(args.priority)
        if priority is None:
            print(f"ERROR: Unknown priority '{args.priority}'")
            print("  Use one of: low, medium, high")
            return 2

    color = None
    if args.color:
        color = (args.color, args.color_name or args.color, args.color_hex)

    service = open_service(config)
    result = service.create(
        args.id,
        art_name=args.name or "",
        priority=priority,
        brand_id=args.brand,
        category_id=args.category,
        country_id=args.country,
        color=color,
    )
    if not result.success:
        return report_failure(result)

    project = result.value
    print(f"Created project: {project.id}")
    print(f"  Code:  {project.auto_code}")
    print(f"  Stage: {project.stage.display_name}")

    if args.use:
        set_current_project(home, project.id)
        print(f"Now using project: {project.id}")
    return 0


def cmd_list(args, home: Path, config: TrackerConfig) -> int:
    """List projects with stage and tentative cost."""
    service = open_service(config)
    projects = service.list_projects()
    if not projects:
        print("Projects: none")
        print()
        print("Get started:")
        print("  rd new <id> --name '<art name>'")
        return 0

    current = get_current_project(home)
    print("Projects")
    print("-" * 72)
    for project in projects:
        marker = "*" if project.id == current else " "
        tentative = compute_totals(project.cost_breakdown).tentative_cost
        print(
            f"{marker} {project.id:<20} {project.auto_code:<18} "
            f"{project.stage.display_name:<15} {tentative:>10}"
        )
    print()
    print(f"{len(projects)} project(s)")
    return 0


def cmd_show(args, home: Path, config: TrackerConfig) -> int:
    """Show project details, costs and colour variants."""
    service = open_service(config)
    project = service.get(args.project)
    names = load_master_data(config.master_data_path)

    print(f"Project: {project.id}")
    print("=" * 60)
    print(f"Code:       {project.auto_code}")
    print(f"Art name:   {project.art_name or '-'}")
    print(f"Brand:      {names.name('brands', project.brand_id)}")
    print(f"Category:   {names.name('categories', project.category_id)}")
    print(f"Country:    {names.name('countries', project.country_id)}")
    print(f"Stage:      {project.stage.display_name} ({project.progress}%)")
    print(f"PO number:  {project.po_number or '-'}")
    if project.po_details.order_quantity is not None or project.po_details.unit_price is not None:
        print(f"PO order:   {format_po_details(project.po_details)}")
    print(f"Priority:   {project.priority.value}")
    print(f"Version:    {project.version}")
    print()

    breakdown = project.cost_breakdown
    print("Cost Lines")
    print("-" * 60)
    for category in CostCategory:
        items = breakdown.items(category)
        if not items:
            continue
        print(f"  {category.display_name}")
        for item in items:
            print(f"    {item.id}  {item.name:<18} {item.description:<10} {item.cost:>10}")
    print()

    print_summary(compute_totals(breakdown))
    if project.client_final_cost is not None:
        print(f"  {'Client final':<16} {format_amount(project.client_final_cost):>12}")
    print()

    variants = list_variants(project)
    print("Colour Variants")
    print("-" * 40)
    if not variants:
        print("  none (default bill of materials applies)")
    for variant in variants:
        default = " (default)" if variant.color_id == project.default_color_id else ""
        color_label = names.name("colors", variant.color_id)
        print(f"  {variant.color_id:<10} {variant.color_name:<14} {variant.color_hex}  {color_label}{default}")
    return 0
