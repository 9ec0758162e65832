"""
Project service: the one entry point that changes stored projects.

Each method loads the record, runs a domain operation on it, and saves the
result only if the operation succeeded. Methods that change a project take
an optional expected_version; when it is given and the record has moved on,
the call fails with StaleVersion before anything runs.

Usage:
    service = ProjectService(JsonProjectStore(config.store_dir), config)
    result = service.set_po_number("campus-runner", "PO-2024-001")
    result = service.advance("campus-runner", Stage.PO_APPROVED)
"""

import dataclasses
import logging
from datetime import date
from decimal import Decimal
from typing import Callable

from rdtrack.costing import rollup
from rdtrack.costing.ledger import CostBreakdown, CostCategory, CostLineItem, default_breakdown
from rdtrack.costing.rollup import CostSummary
from rdtrack.lib.result import InvalidValue, Result, StaleVersion
from rdtrack.lib.validate import ValidationError
from rdtrack.project import commercial
from rdtrack.project.codes import generate_project_code
from rdtrack.project.models import Priority, Project
from rdtrack.project.store import ProjectStore, check_project_id
from rdtrack.variants import registry
from rdtrack.variants.registry import BillOfMaterials, ColorVariant
from rdtrack.workflow import state_machine
from rdtrack.workflow.stages import Stage

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, store: ProjectStore, config=None):
        self.store = store
        self.default_profit_margin = config.default_profit_margin if config else Decimal("25")
        self.code_prefix = config.code_prefix if config else "RND"
        self.seed_default_costs = config.seed_default_costs if config else True

    # --- Reading ---

    def get(self, project_id: str) -> Project:
        """Load a project. Raises ProjectNotFound."""
        return self.store.load(project_id)

    def list_projects(self) -> list[Project]:
        return [self.store.load(project_id) for project_id in self.store.list_ids()]

    def summary(self, project_id: str) -> CostSummary:
        return rollup.compute_totals(self.get(project_id).cost_breakdown)

    def bill_of_materials(self, project_id: str, color_id: str | None = None) -> BillOfMaterials:
        """Bill for color_id; the default colour's bill when color_id is None."""
        project = self.get(project_id)
        return registry.get_bill_of_materials(project, color_id or project.default_color_id)

    def variants(self, project_id: str) -> list[ColorVariant]:
        return registry.list_variants(self.get(project_id))

    def _used_codes(self) -> set[str]:
        """Codes of every readable project. Unreadable records are skipped."""
        codes = set()
        for project_id in self.store.list_ids():
            try:
                codes.add(self.store.load(project_id).auto_code)
            except ValidationError as e:
                logger.warning(f"[PROJECT] skipping unreadable record {project_id}: {e}")
        return codes

    # --- Creating ---

    def create(
        self,
        project_id: str,
        art_name: str = "",
        priority: Priority = Priority.MEDIUM,
        brand_id: str | None = None,
        category_id: str | None = None,
        country_id: str | None = None,
        color: tuple[str, str, str | None] | None = None,
        today: date | None = None,
    ) -> Result:
        """Register a new project at idea_submitted.

        The cost sheet starts from the default sheet unless seeding is
        turned off. color, given as (color_id, color_name, color_hex),
        becomes the default colour with the default bill of materials.
        """
        try:
            check_project_id(project_id)
        except ValueError as e:
            return Result.fail(InvalidValue("id", str(e)))
        if self.store.exists(project_id):
            return Result.fail(InvalidValue("id", f"project '{project_id}' already exists"))

        used_codes = self._used_codes()
        project = Project(
            id=project_id,
            auto_code=generate_project_code(self.store, self.code_prefix, today, used_codes),
            art_name=art_name.strip(),
            priority=priority,
            brand_id=brand_id,
            category_id=category_id,
            country_id=country_id,
            cost_breakdown=default_breakdown(self.default_profit_margin, seed=self.seed_default_costs),
        )

        if color is not None:
            color_id, color_name, color_hex = color
            bill = registry.default_bill()
            result = registry.save_variant(project, color_id, color_name, color_hex,
                                           bill.components, bill.materials)
            if not result.success:
                return result
            project = result.value

        result = self.store.save(project, expected_version=0)
        if result.success:
            logger.info(f"[PROJECT] created {project_id} as {project.auto_code}")
        return result

    # --- Changing ---

    def _apply(self, project_id: str, change: Callable[[Project], Result],
               expected_version: int | None = None) -> Result:
        project = self.get(project_id)
        if expected_version is not None and expected_version != project.version:
            logger.warning(
                f"[PROJECT] {project_id}: edit based on v{expected_version}, record is v{project.version}"
            )
            return Result.fail(StaleVersion(project_id, expected_version, project.version))

        result = change(project)
        if not result.success:
            return result
        return self.store.save(result.value, expected_version=project.version)

    def _apply_cost(self, project_id: str, edit: Callable[[CostBreakdown], object],
                    expected_version: int | None = None) -> Result:
        """Run a breakdown edit (returning a breakdown or a Result) on a project."""
        def change(project: Project) -> Result:
            outcome = edit(project.cost_breakdown)
            if isinstance(outcome, CostBreakdown):
                outcome = Result.ok(outcome)
            if not outcome.success:
                return outcome
            return Result.ok(dataclasses.replace(project, cost_breakdown=outcome.value))

        return self._apply(project_id, change, expected_version)

    def advance(self, project_id: str, target: Stage, expected_version: int | None = None) -> Result:
        return self._apply(project_id, lambda p: state_machine.advance(p, target), expected_version)

    def set_po_number(self, project_id: str, value: str, expected_version: int | None = None) -> Result:
        return self._apply(project_id, lambda p: state_machine.set_po_number(p, value), expected_version)

    def set_po_details(self, project_id: str, order_quantity=None, unit_price=None,
                       po_number: str | None = None, expected_version: int | None = None) -> Result:
        """Update PO quantity and unit price, and the PO number when given, in one save."""
        def change(project: Project) -> Result:
            if po_number is not None:
                result = state_machine.set_po_number(project, po_number)
                if not result.success:
                    return result
                project = result.value
            return commercial.set_po_details(project, order_quantity, unit_price)

        return self._apply(project_id, change, expected_version)

    def set_client_final_cost(self, project_id: str, value, expected_version: int | None = None) -> Result:
        return self._apply(
            project_id, lambda p: commercial.set_client_final_cost(p, value), expected_version
        )

    def add_line_item(self, project_id: str, category: CostCategory, item: CostLineItem,
                      expected_version: int | None = None) -> Result:
        return self._apply_cost(
            project_id, lambda b: rollup.add_line_item(b, category, item), expected_version
        )

    def update_line_item(self, project_id: str, category: CostCategory, item_id: str, patch: dict,
                         expected_version: int | None = None) -> Result:
        return self._apply_cost(
            project_id, lambda b: rollup.update_line_item(b, category, item_id, patch), expected_version
        )

    def remove_line_item(self, project_id: str, category: CostCategory, item_id: str,
                         expected_version: int | None = None) -> Result:
        return self._apply_cost(
            project_id, lambda b: rollup.remove_line_item(b, category, item_id), expected_version
        )

    def set_profit_margin(self, project_id: str, value, expected_version: int | None = None) -> Result:
        return self._apply_cost(
            project_id, lambda b: rollup.set_profit_margin(b, value), expected_version
        )

    def set_additional_costs(self, project_id: str, value, expected_version: int | None = None) -> Result:
        return self._apply_cost(
            project_id, lambda b: rollup.set_additional_costs(b, value), expected_version
        )

    def set_labour_total(self, project_id: str, value, expected_version: int | None = None) -> Result:
        return self._apply_cost(
            project_id, lambda b: rollup.set_labour_total(b, value), expected_version
        )

    def save_variant(self, project_id: str, color_id: str, color_name: str, color_hex: str | None,
                     components, materials, expected_version: int | None = None) -> Result:
        return self._apply(
            project_id,
            lambda p: registry.save_variant(p, color_id, color_name, color_hex, components, materials),
            expected_version,
        )

    def remove_variant(self, project_id: str, color_id: str, expected_version: int | None = None) -> Result:
        return self._apply(project_id, lambda p: registry.remove_variant(p, color_id), expected_version)

    def clone_default_to_colors(self, project_id: str, colors: list[tuple[str, str, str | None]],
                                expected_version: int | None = None) -> Result:
        return self._apply(
            project_id, lambda p: registry.clone_default_to_colors(p, colors), expected_version
        )
