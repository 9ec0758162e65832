"""
rd variant - Manage colour variants and their bills of materials.

A bill file for `rd variant save --bom-file` is YAML:

    components:
      - {name: Foam, desc: "-", consumption: 7.5grm}
    materials:
      - {name: Upper, desc: Rexine, consumption: 26 pairs/mtr}
"""

from pathlib import Path

import yaml

from rdtrack.commands.common import open_service, report_failure
from rdtrack.lib.config import TrackerConfig
from rdtrack.variants.registry import BomItem


def _load_bom_file(path: Path) -> tuple[list[dict], list[dict]] | None:
    if not path.exists():
        print(f"ERROR: Bill file not found: {path}")
        return None
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        print(f"ERROR: Failed to parse {path}: {e}")
        return None
    if not isinstance(data, dict):
        print(f"ERROR: {path} must be a mapping with 'components' and 'materials'")
        return None

    sections = []
    for key in ("components", "materials"):
        rows = data.get(key) or []
        if not isinstance(rows, list) or not all(isinstance(row, dict) and "name" in row for row in rows):
            print(f"ERROR: '{key}' in {path} must be a list of items with a name")
            return None
        sections.append([
            {k: "" if row.get(k) is None else str(row.get(k)) for k in ("name", "desc", "consumption")}
            for row in rows
        ])
    return sections[0], sections[1]


def _print_items(title: str, items: list[BomItem]) -> None:
    print(title)
    print("-" * 50)
    for item in items:
        print(f"  {item.name:<16} {item.desc:<14} {item.consumption}")
    print()


def cmd_variant_save(args, home: Path, config: TrackerConfig) -> int:
    """Save a colour variant.

    The bill comes from --bom-file, else the colour's current bill (the
    default bill for a new colour).
    """
    service = open_service(config)
    if args.bom_file:
        bill = _load_bom_file(Path(args.bom_file))
        if bill is None:
            return 2
        components, materials = bill
    else:
        current = service.bill_of_materials(args.project, args.color_id)
        components, materials = current.components, current.materials

    result = service.save_variant(
        args.project, args.color_id, args.color_name, args.hex, components, materials,
        expected_version=args.expect_version,
    )
    if not result.success:
        return report_failure(result)

    variant = result.value.variants[args.color_id.strip()]
    print(f"Saved variant {variant.color_id}: {variant.color_name} {variant.color_hex}")
    print(f"  {len(variant.components)} component(s), {len(variant.materials)} material(s)")
    return 0


def cmd_variant_remove(args, home: Path, config: TrackerConfig) -> int:
    service = open_service(config)
    result = service.remove_variant(args.project, args.color_id, expected_version=args.expect_version)
    if not result.success:
        return report_failure(result)

    print(f"Removed variant {args.color_id}")
    return 0


def cmd_variant_bom(args, home: Path, config: TrackerConfig) -> int:
    """Print the bill of materials for a colour."""
    service = open_service(config)
    bill = service.bill_of_materials(args.project, args.color_id)
    if bill.is_default:
        print("(default bill of materials)")
        print()
    _print_items("Components", bill.components)
    _print_items("Materials", bill.materials)
    return 0


def cmd_variant_list(args, home: Path, config: TrackerConfig) -> int:
    service = open_service(config)
    project = service.get(args.project)
    variants = service.variants(args.project)
    if not variants:
        print("Variants: none")
        return 0
    for variant in variants:
        default = " (default)" if variant.color_id == project.default_color_id else ""
        print(f"  {variant.color_id:<10} {variant.color_name:<14} {variant.color_hex}{default}")
    return 0


def parse_color_spec(text: str) -> tuple[str, str, str | None] | None:
    """'blk:Black' or 'blk:Black:#000000' -> (color_id, color_name, color_hex)."""
    parts = text.split(":")
    if len(parts) not in (2, 3) or not parts[0].strip() or not parts[1].strip():
        return None
    color_hex = parts[2] if len(parts) == 3 else None
    return parts[0].strip(), parts[1].strip(), color_hex


def cmd_variant_clone(args, home: Path, config: TrackerConfig) -> int:
    """Create variants for several colours from the default colour's bill."""
    colors = []
    for spec in args.colors:
        color = parse_color_spec(spec)
        if color is None:
            print(f"ERROR: Invalid colour '{spec}'. Use <id>:<name>[:<hex>]")
            return 2
        colors.append(color)

    service = open_service(config)
    before = set(service.get(args.project).variants)
    result = service.clone_default_to_colors(args.project, colors, expected_version=args.expect_version)
    if not result.success:
        return report_failure(result)

    created = [color_id for color_id in result.value.variants if color_id not in before]
    skipped = [color_id for color_id, _, _ in colors if color_id in before]
    print(f"Created {len(created)} variant(s): {', '.join(created) or '-'}")
    if skipped:
        print(f"Skipped existing: {', '.join(skipped)}")
    return 0
