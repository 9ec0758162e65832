"""
Colour-variant registry.

A project can carry several colour variants, each with its own components
and materials list. Variants carry no costs; costing lives in the project's
single cost breakdown.

When a colour has no saved variant, callers get the default bill below, so
a project whose materials were never customized still has a usable
production sheet.
"""

import copy
import logging
from dataclasses import dataclass, field

from rdtrack.lib.constants import DEFAULT_COLOR_HEX, HEX_PATTERN
from rdtrack.lib.result import (
    CannotRemoveDefault,
    EmptyValue,
    InvalidValue,
    LastVariant,
    Result,
    UnknownVariant,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BomItem:
    """A component or material row: what it is, spec, and how much."""
    name: str
    desc: str = ""
    consumption: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "desc": self.desc, "consumption": self.consumption}

    @classmethod
    def from_dict(cls, data: dict) -> "BomItem":
        return cls(
            name=data["name"],
            desc=data.get("desc", ""),
            consumption=data.get("consumption", ""),
        )


# Components and materials have the same shape
ComponentItem = BomItem
MaterialItem = BomItem


DEFAULT_COMPONENTS = (
    BomItem("Foam", "-", "7.5grm"),
    BomItem("Velcro", "75mm", "1.25 pair"),
    BomItem("Elastic Roop", "-", "-"),
    BomItem("Thread", "-", "-"),
    BomItem("Tafta Label", "MRP", "-"),
    BomItem("Buckle", "-", "2pcs"),
    BomItem("Heat Transfer", "-", "-"),
    BomItem("Trim", "sticker", "10 pcs"),
    BomItem("Welding", "-", "-"),
)

DEFAULT_MATERIALS = (
    BomItem("Upper", "Rexine", "26 pairs/mtr"),
    BomItem("Lining", "Skinfit", "25 pair @ 155/-"),
    BomItem("Lining", "EVA", "33/70 - 1.5mm 35pair"),
    BomItem("Footbed", "-", "-"),
    BomItem("Mid Sole 1", "-", "-"),
    BomItem("Mid Sole 2", "-", "-"),
    BomItem("Out Sole", "-", "-"),
    BomItem("PU Adhesive", "-", "-"),
    BomItem("Print", "-", "-"),
)


@dataclass
class ColorVariant:
    """Bill of materials for one colour of the product."""
    color_id: str
    color_name: str
    color_hex: str = DEFAULT_COLOR_HEX
    components: list[BomItem] = field(default_factory=list)
    materials: list[BomItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "color_id": self.color_id,
            "color_name": self.color_name,
            "color_hex": self.color_hex,
            "components": [item.to_dict() for item in self.components],
            "materials": [item.to_dict() for item in self.materials],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ColorVariant":
        return cls(
            color_id=data["color_id"],
            color_name=data["color_name"],
            color_hex=data.get("color_hex", DEFAULT_COLOR_HEX),
            components=[BomItem.from_dict(row) for row in data.get("components", [])],
            materials=[BomItem.from_dict(row) for row in data.get("materials", [])],
        )


@dataclass
class BillOfMaterials:
    components: list[BomItem]
    materials: list[BomItem]
    is_default: bool = False  # True when no variant was saved for the colour


def default_bill() -> BillOfMaterials:
    return BillOfMaterials(
        components=list(DEFAULT_COMPONENTS),
        materials=list(DEFAULT_MATERIALS),
        is_default=True,
    )


def normalize_hex(value: str | None) -> str | None:
    """'#' prefix, lower case; blank gives the default grey. None if invalid."""
    hex_value = (value or "").strip().lower()
    if not hex_value:
        return DEFAULT_COLOR_HEX
    if not hex_value.startswith("#"):
        hex_value = "#" + hex_value
    if not HEX_PATTERN.match(hex_value):
        return None
    return hex_value


def _to_bom_items(rows, field_name: str) -> list[BomItem] | EmptyValue:
    items = []
    for i, row in enumerate(rows or []):
        item = row if isinstance(row, BomItem) else BomItem.from_dict(row)
        name = (item.name or "").strip()
        if not name:
            return EmptyValue(f"{field_name}[{i}].name")
        items.append(BomItem(name, (item.desc or "").strip(), (item.consumption or "").strip()))
    return items


def get_bill_of_materials(project, color_id: str | None) -> BillOfMaterials:
    """Components and materials for a colour, or the default bill."""
    variant = project.variants.get(color_id) if color_id else None
    if variant is None:
        return default_bill()
    return BillOfMaterials(
        components=list(variant.components),
        materials=list(variant.materials),
    )


def save_variant(project, color_id: str, color_name: str, color_hex: str | None,
                 components, materials) -> Result:
    """Insert or replace the variant for color_id.

    The first variant saved on a project without a default colour becomes
    the default.
    """
    color_id = (color_id or "").strip()
    if not color_id:
        return Result.fail(EmptyValue("color_id"))
    color_name = (color_name or "").strip()
    if not color_name:
        return Result.fail(EmptyValue("color_name"))
    hex_value = normalize_hex(color_hex)
    if hex_value is None:
        return Result.fail(InvalidValue("color_hex", f"'{color_hex}' is not a hex colour"))

    component_items = _to_bom_items(components, "components")
    if isinstance(component_items, EmptyValue):
        return Result.fail(component_items)
    material_items = _to_bom_items(materials, "materials")
    if isinstance(material_items, EmptyValue):
        return Result.fail(material_items)

    updated = copy.deepcopy(project)
    replaced = color_id in updated.variants
    updated.variants[color_id] = ColorVariant(
        color_id=color_id,
        color_name=color_name,
        color_hex=hex_value,
        components=component_items,
        materials=material_items,
    )
    if not updated.default_color_id:
        updated.default_color_id = color_id
        logger.info(f"[VARIANT] {project.auto_code}: '{color_id}' is now the default colour")

    action = "replaced" if replaced else "added"
    logger.info(f"[VARIANT] {project.auto_code}: {action} variant '{color_id}' ({color_name})")
    return Result.ok(updated)


def remove_variant(project, color_id: str) -> Result:
    """Remove a colour variant.

    The last remaining variant can never be removed, and the default colour
    cannot be removed while other variants exist.
    """
    if color_id not in project.variants:
        return Result.fail(UnknownVariant(color_id))
    if len(project.variants) == 1:
        return Result.fail(LastVariant(color_id))
    if color_id == project.default_color_id:
        return Result.fail(CannotRemoveDefault(color_id))

    updated = copy.deepcopy(project)
    del updated.variants[color_id]
    logger.info(f"[VARIANT] {project.auto_code}: removed variant '{color_id}'")
    return Result.ok(updated)


def clone_default_to_colors(project, colors: list[tuple[str, str, str | None]]) -> Result:
    """Seed new variants from the default colour's bill.

    colors is a list of (color_id, color_name, color_hex). Colours that
    already have a variant are left as they are. Each new variant gets a
    copy of the default variant's bill, or the default bill when the
    project has no default variant yet.
    """
    source = get_bill_of_materials(project, project.default_color_id)
    updated = project
    for color_id, color_name, color_hex in colors:
        if color_id in updated.variants:
            continue
        result = save_variant(updated, color_id, color_name, color_hex,
                              source.components, source.materials)
        if not result.success:
            return result
        updated = result.value
    if updated is project:
        updated = copy.deepcopy(project)
    return Result.ok(updated)


def list_variants(project) -> list[ColorVariant]:
    """Variants with the default colour first, then by colour name."""
    return sorted(
        project.variants.values(),
        key=lambda v: (v.color_id != project.default_color_id, v.color_name.lower()),
    )
