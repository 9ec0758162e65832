#!/usr/bin/env python3
"""rd - R&D project tracker CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from rdtrack.commands import cost as cmd_cost_module
from rdtrack.commands import project as cmd_project_module
from rdtrack.commands import stage as cmd_stage_module
from rdtrack.commands import variant as cmd_variant_module
from rdtrack.commands.common import open_service
from rdtrack.lib.config import (
    TrackerConfig,
    clear_current_project,
    get_current_project,
    load_tracker_config,
    resolve_home,
    set_current_project,
)
from rdtrack.lib.locking import LockTimeout
from rdtrack.lib.validate import ValidationError
from rdtrack.project.store import ProjectNotFound

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_project_id(args, home: Path) -> str:
    """Resolve project ID from args or current context."""
    project_id = getattr(args, "project", None)
    if project_id:
        return project_id

    current = get_current_project(home)
    if current:
        return current

    print("ERROR: No project specified. Use 'rd use <id>' to set current project.")
    sys.exit(2)


def cmd_use(args, home: Path, config: TrackerConfig) -> int:
    """Set, show, or clear the current project context."""
    if args.clear:
        clear_current_project(home)
        print("Cleared current project context.")
        return 0

    service = open_service(config)
    if not args.project:
        current = get_current_project(home, known_ids=service.store.list_ids())
        if current:
            print(f"Current project: {current}")
        else:
            print("No current project set. Use 'rd use <id>' to set one.")
        return 0

    if not service.store.exists(args.project):
        print(f"ERROR: Project '{args.project}' not found.")
        return 1

    set_current_project(home, args.project)
    print(f"Now using project: {args.project}")
    return 0


def _add_project_option(parser):
    parser.add_argument('--project', '-p', help='Project ID (uses current if not specified)')
    parser.add_argument('--expect-version', type=int,
                        help='Fail if the project was saved since this version')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='rd', description='R&D project tracker')
    parser.add_argument('--home', help='Tracker home directory (default: $RDTRACK_HOME or cwd)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # rd new
    p_new = subparsers.add_parser('new', help='Register a new project')
    p_new.add_argument('id', help='Project ID (lowercase letters, digits, - and _)')
    p_new.add_argument('--name', '-n', help='Art name')
    p_new.add_argument('--priority', help='low, medium or high (default: medium)')
    p_new.add_argument('--brand', help='Brand key')
    p_new.add_argument('--category', help='Category key')
    p_new.add_argument('--country', help='Country key')
    p_new.add_argument('--color', help='Default colour ID')
    p_new.add_argument('--color-name', help='Default colour name (default: the colour ID)')
    p_new.add_argument('--color-hex', help='Default colour hex (default: #cccccc)')
    p_new.add_argument('--use', action='store_true', help='Set as current project')
    p_new.set_defaults(func=cmd_project_module.cmd_new)

    # rd list
    p_list = subparsers.add_parser('list', help='List projects')
    p_list.set_defaults(func=cmd_project_module.cmd_list)

    # rd use
    p_use = subparsers.add_parser('use', help='Set/show current project')
    p_use.add_argument('project', nargs='?', help='Project ID to use')
    p_use.add_argument('--clear', action='store_true', help='Clear current project')
    p_use.set_defaults(func=cmd_use)

    # rd show
    p_show = subparsers.add_parser('show', help='Show project details')
    p_show.add_argument('project', nargs='?', help='Project ID (uses current if not specified)')
    p_show.set_defaults(func=cmd_project_module.cmd_show, needs_project=True)

    # rd advance
    p_advance = subparsers.add_parser('advance', help='Advance project to a stage')
    p_advance.add_argument('stage', nargs='?', help='Target stage (default: next stage)')
    _add_project_option(p_advance)
    p_advance.set_defaults(func=cmd_stage_module.cmd_advance, needs_project=True)

    # rd po
    p_po = subparsers.add_parser('po', help='Set the purchase order number and details')
    p_po.add_argument('number', nargs='?', help='PO number')
    p_po.add_argument('--qty', help='Order quantity')
    p_po.add_argument('--price', help='Unit price')
    _add_project_option(p_po)
    p_po.set_defaults(func=cmd_stage_module.cmd_po, needs_project=True)

    # rd cost
    p_cost = subparsers.add_parser('cost', help='Edit cost sheet')
    cost_sub = p_cost.add_subparsers(dest='cost_cmd', required=True)

    p_cost_add = cost_sub.add_parser('add', help='Add a cost line')
    p_cost_add.add_argument('category', help='upper, component, material, packaging, labour, miscellaneous')
    p_cost_add.add_argument('name', help='Item name')
    p_cost_add.add_argument('cost', help='Cost amount')
    p_cost_add.add_argument('--desc', help='Description')
    p_cost_add.add_argument('--consumption', help='Consumption note')
    _add_project_option(p_cost_add)
    p_cost_add.set_defaults(func=cmd_cost_module.cmd_cost_add)

    p_cost_update = cost_sub.add_parser('update', help='Edit a cost line')
    p_cost_update.add_argument('category', help='Cost category')
    p_cost_update.add_argument('item_id', help='Line item ID (see rd show)')
    p_cost_update.add_argument('--name', help='Item name')
    p_cost_update.add_argument('--desc', help='Description')
    p_cost_update.add_argument('--consumption', help='Consumption note')
    p_cost_update.add_argument('--cost', help='Cost (invalid input is stored as 0)')
    _add_project_option(p_cost_update)
    p_cost_update.set_defaults(func=cmd_cost_module.cmd_cost_update)

    p_cost_remove = cost_sub.add_parser('remove', help='Remove a cost line')
    p_cost_remove.add_argument('category', help='Cost category')
    p_cost_remove.add_argument('item_id', help='Line item ID')
    _add_project_option(p_cost_remove)
    p_cost_remove.set_defaults(func=cmd_cost_module.cmd_cost_remove)

    p_cost_margin = cost_sub.add_parser('margin', help='Set profit margin percent')
    p_cost_margin.add_argument('percent', help='0-100')
    _add_project_option(p_cost_margin)
    p_cost_margin.set_defaults(func=cmd_cost_module.cmd_cost_margin)

    p_cost_extra = cost_sub.add_parser('extra', help='Set additional costs added before profit')
    p_cost_extra.add_argument('amount', help='Amount >= 0')
    _add_project_option(p_cost_extra)
    p_cost_extra.set_defaults(func=cmd_cost_module.cmd_cost_extra)

    p_cost_labour = cost_sub.add_parser('labour', help='Replace labour with one total')
    p_cost_labour.add_argument('amount', help='Labour total')
    _add_project_option(p_cost_labour)
    p_cost_labour.set_defaults(func=cmd_cost_module.cmd_cost_labour)

    p_cost_final = cost_sub.add_parser('final', help='Record the cost agreed with the client')
    p_cost_final.add_argument('amount', help='Amount >= 0')
    _add_project_option(p_cost_final)
    p_cost_final.set_defaults(func=cmd_cost_module.cmd_cost_final)

    p_cost_summary = cost_sub.add_parser('summary', help='Show cost totals')
    _add_project_option(p_cost_summary)
    p_cost_summary.set_defaults(func=cmd_cost_module.cmd_cost_summary)

    for p in (p_cost_add, p_cost_update, p_cost_remove, p_cost_margin,
              p_cost_extra, p_cost_labour, p_cost_final, p_cost_summary):
        p.set_defaults(needs_project=True)

    # rd variant
    p_variant = subparsers.add_parser('variant', help='Manage colour variants')
    variant_sub = p_variant.add_subparsers(dest='variant_cmd', required=True)

    p_variant_save = variant_sub.add_parser('save', help='Add or replace a colour variant')
    p_variant_save.add_argument('color_id', help='Colour ID')
    p_variant_save.add_argument('color_name', help='Colour name')
    p_variant_save.add_argument('--hex', help='Colour hex (default: #cccccc)')
    p_variant_save.add_argument('--bom-file', help='YAML file with components and materials')
    _add_project_option(p_variant_save)
    p_variant_save.set_defaults(func=cmd_variant_module.cmd_variant_save)

    p_variant_remove = variant_sub.add_parser('remove', help='Remove a colour variant')
    p_variant_remove.add_argument('color_id', help='Colour ID')
    _add_project_option(p_variant_remove)
    p_variant_remove.set_defaults(func=cmd_variant_module.cmd_variant_remove)

    p_variant_bom = variant_sub.add_parser('bom', help='Show bill of materials')
    p_variant_bom.add_argument('color_id', nargs='?', help='Colour ID (default: default colour)')
    _add_project_option(p_variant_bom)
    p_variant_bom.set_defaults(func=cmd_variant_module.cmd_variant_bom)

    p_variant_list = variant_sub.add_parser('list', help='List colour variants')
    _add_project_option(p_variant_list)
    p_variant_list.set_defaults(func=cmd_variant_module.cmd_variant_list)

    p_variant_clone = variant_sub.add_parser('clone', help="Copy the default colour's bill to new colours")
    p_variant_clone.add_argument('colors', nargs='+', help='<id>:<name>[:<hex>]')
    _add_project_option(p_variant_clone)
    p_variant_clone.set_defaults(func=cmd_variant_module.cmd_variant_clone)

    for p in (p_variant_save, p_variant_remove, p_variant_bom, p_variant_list, p_variant_clone):
        p.set_defaults(needs_project=True)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    home = resolve_home(args.home)
    try:
        config = load_tracker_config(home)
    except ValueError as e:
        print(f"ERROR: Invalid rdtrack.env in {home}: {e}")
        return 2
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    if getattr(args, "needs_project", False):
        args.project = resolve_project_id(args, home)

    try:
        return args.func(args, home, config)
    except (ProjectNotFound, LockTimeout, ValidationError) as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
