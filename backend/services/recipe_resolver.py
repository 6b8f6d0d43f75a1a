"""
Turn a checkout line into the list of inventory deductions it needs.

Recipes reference inventory by ingredient *name*; nothing here touches the
database, callers pass loaded MenuItem objects (anything exposing `name` and
an `ingredients` list of `inventory_item`/`quantity`).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemandLine:
    ingredient_name: str
    quantity: Decimal
    source: str  # name of the menu item (or add-on) the ingredient belongs to


@dataclass(frozen=True)
class RemovedIngredient:
    inventory_item: str
    quantity: Decimal
    name: Optional[str] = None


def _dec(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


def removal_map(removed: Iterable[RemovedIngredient]) -> Dict[str, Decimal]:
    out: Dict[str, Decimal] = {}
    for r in removed:
        out[r.inventory_item] = out.get(r.inventory_item, Decimal("0")) + _dec(r.quantity)
    return out


def validate_removed_ingredients(menu_item, removed: Sequence[RemovedIngredient]) -> None:
    """Every removal must name a base-recipe ingredient and stay within its recipe quantity.

    Repeated entries for one ingredient are summed before the bound is checked.
    """
    recipe = {ri.inventory_item: _dec(ri.quantity) for ri in menu_item.ingredients}
    for ingredient_name, qty in removal_map(removed).items():
        if ingredient_name not in recipe:
            raise ValidationError(f"Ingredient {ingredient_name} is not part of this menu item")
        if qty > recipe[ingredient_name]:
            raise ValidationError(f"Cannot remove more {ingredient_name} than what's in the menu item")


def resolve(
    menu_item,
    quantity: int,
    add_ons: Sequence[Tuple[object, int]] = (),
    removed: Sequence[RemovedIngredient] = (),
) -> List[DemandLine]:
    """
    Net ingredient demand for one checkout line.

    - base recipe: (recipe qty - removed qty, floored at 0) * quantity; fully removed ingredients are skipped
    - add-ons: their full recipe * add-on quantity (no removals on add-ons)

    Lines come out main item first, then each add-on in the given order.
    """
    removed_qty = removal_map(removed)
    qty = Decimal(int(quantity))
    lines: List[DemandLine] = []

    for ri in menu_item.ingredients:
        net = max(Decimal("0"), _dec(ri.quantity) - removed_qty.get(ri.inventory_item, Decimal("0")))
        if net == 0:
            logger.debug("skipping %s for %s: fully removed by customer", ri.inventory_item, menu_item.name)
            continue
        lines.append(DemandLine(ri.inventory_item, net * qty, menu_item.name))

    for add_on, add_on_qty in add_ons:
        aq = Decimal(int(add_on_qty))
        for ri in add_on.ingredients:
            required = _dec(ri.quantity) * aq
            if required <= 0:
                continue
            lines.append(DemandLine(ri.inventory_item, required, add_on.name))

    return lines


def total_amount(price, quantity: int, add_ons: Sequence[Tuple[object, int]] = ()) -> Decimal:
    """price * quantity + sum(add-on price * add-on quantity); removals never change the price."""
    total = _dec(price) * int(quantity)
    for add_on, add_on_qty in add_ons:
        total += _dec(add_on.price) * int(add_on_qty)
    return total
