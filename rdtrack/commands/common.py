"""
Helpers shared by the rd subcommands.
"""

from rdtrack.costing.ledger import CostCategory, format_amount
from rdtrack.costing.rollup import CostSummary
from rdtrack.lib.config import TrackerConfig
from rdtrack.lib.result import Result
from rdtrack.project.commercial import PoDetails
from rdtrack.project.service import ProjectService
from rdtrack.project.store import JsonProjectStore


def open_service(config: TrackerConfig) -> ProjectService:
    store = JsonProjectStore(config.store_dir, lock_timeout=config.lock_timeout)
    return ProjectService(store, config)


def report_failure(result: Result) -> int:
    """Print the error of a failed Result. Returns the exit code."""
    print(f"ERROR: {result.error}")
    return 1


def print_summary(summary: CostSummary) -> None:
    print("Cost Summary")
    print("-" * 40)
    for category in CostCategory:
        print(f"  {category.display_name:<16} {summary.category_total(category):>12}")
    print(f"  {'Grand total':<16} {summary.grand_total:>12}")
    if summary.additional_costs:
        print(f"  {'Additional':<16} {summary.additional_costs:>12}")
        print(f"  {'Subtotal':<16} {summary.subtotal:>12}")
    print(f"  {f'Profit ({summary.profit_margin}%)':<16} {summary.profit_amount:>12}")
    print(f"  {'Tentative cost':<16} {summary.tentative_cost:>12}")


def format_po_details(details: PoDetails) -> str:
    def show(value):
        return "-" if value is None else format_amount(value)

    return f"qty {show(details.order_quantity)} x {show(details.unit_price)} = {show(details.total_amount)}"
