"""
Data models for the project aggregate.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

from rdtrack.costing.ledger import CostBreakdown, format_amount
from rdtrack.lib.constants import SCHEMA_VERSION
from rdtrack.project.commercial import ClientCostEntry, PoDetails
from rdtrack.variants.registry import ColorVariant
from rdtrack.workflow.stages import INITIAL_STAGE, Stage


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def parse_priority(text: str | None) -> Priority | None:
    """Parse a priority name, case-insensitive. 'normal' means medium."""
    if not text:
        return None
    s = text.strip().lower()
    if s == "normal":
        return Priority.MEDIUM
    for priority in Priority:
        if priority.value == s:
            return priority
    return None


@dataclass
class Project:
    """One R&D project: its stage, cost sheet and colour variants.

    Changes come from the workflow, costing, variant and commercial
    modules, which always return a modified copy.
    """
    id: str                                    # Store key, e.g. "campus-runner"
    auto_code: str                             # RND/25-26/04/001
    stage: Stage = INITIAL_STAGE
    po_number: Optional[str] = None
    po_details: PoDetails = field(default_factory=PoDetails)
    priority: Priority = Priority.MEDIUM
    cost_breakdown: CostBreakdown = field(default_factory=CostBreakdown)
    variants: dict[str, ColorVariant] = field(default_factory=dict)
    default_color_id: Optional[str] = None
    art_name: str = ""
    brand_id: Optional[str] = None             # Master-data keys, display only
    category_id: Optional[str] = None
    country_id: Optional[str] = None
    client_final_cost: Optional[Decimal] = None    # Agreed price, beside the tentative cost
    client_cost_history: list[ClientCostEntry] = field(default_factory=list)
    version: int = 0                           # Bumped by every successful save

    @property
    def progress(self) -> int:
        return self.stage.progress

    def to_dict(self) -> dict:
        """Persisted record shape (see rdtrack/schemas/project.schema.json)."""
        return {
            "schema_version": SCHEMA_VERSION,
            "id": self.id,
            "auto_code": self.auto_code,
            "art_name": self.art_name,
            "brand_id": self.brand_id,
            "category_id": self.category_id,
            "country_id": self.country_id,
            "stage": self.stage.value,
            "po_number": self.po_number,
            "po_details": self.po_details.to_dict(),
            "client_final_cost": (
                None if self.client_final_cost is None else format_amount(self.client_final_cost)
            ),
            "client_cost_history": [entry.to_dict() for entry in self.client_cost_history],
            "priority": self.priority.value,
            "version": self.version,
            "cost_breakdown": self.cost_breakdown.to_dict(),
            "variants": {
                color_id: variant.to_dict()
                for color_id, variant in self.variants.items()
            },
            "default_color_id": self.default_color_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        return cls(
            id=data["id"],
            auto_code=data["auto_code"],
            stage=Stage(data["stage"]),
            po_number=data.get("po_number"),
            po_details=PoDetails.from_dict(data.get("po_details")),
            client_final_cost=(
                None if data.get("client_final_cost") is None else Decimal(data["client_final_cost"])
            ),
            client_cost_history=[
                ClientCostEntry.from_dict(row) for row in data.get("client_cost_history", [])
            ],
            priority=Priority(data.get("priority", "medium")),
            cost_breakdown=CostBreakdown.from_dict(data["cost_breakdown"]),
            variants={
                color_id: ColorVariant.from_dict(row)
                for color_id, row in data.get("variants", {}).items()
            },
            default_color_id=data.get("default_color_id"),
            art_name=data.get("art_name", ""),
            brand_id=data.get("brand_id"),
            category_id=data.get("category_id"),
            country_id=data.get("country_id"),
            version=data.get("version", 0),
        )
