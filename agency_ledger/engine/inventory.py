"""
Inventory Flow Calculator

Derives stock levels per item type from the purchase and sale streams.

    inbound  = purchases + customer returns
    outbound = sales + returns to suppliers
    on_hand  = max(0, inbound - outbound)
    turnover = min(1, sold / inbound), 0 without inbound

DESIGN DECISION: Stock is never reported negative. A negative raw balance
(e.g. a sale recorded before its purchase) is clamped to zero here and the
turnover ratio is capped at 1. The anomaly is surfaced separately by the
snapshot validator.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from agency_ledger.models.ledger import InventoryLevel, MovementDirection, StockMovement
from agency_ledger.models.records import Purchase, Sale


def inventory(
    item_type: str,
    sales: Iterable[Sale] = (),
    purchases: Iterable[Purchase] = (),
    low_stock_threshold: Optional[int] = None,
) -> InventoryLevel:
    """Stock level and turnover of one item type."""
    purchased = returned_to_supplier = 0
    sold = returned_by_customer = 0

    for purchase in purchases:
        if purchase.item_type != item_type:
            continue
        if purchase.is_return:
            returned_to_supplier += purchase.quantity
        else:
            purchased += purchase.quantity

    for sale in sales:
        if sale.item_type != item_type:
            continue
        if sale.is_return:
            returned_by_customer += sale.quantity
        else:
            sold += sale.quantity

    inbound = purchased + returned_by_customer
    outbound = sold + returned_to_supplier
    on_hand = max(0, inbound - outbound)

    if inbound > 0:
        turnover = min(Decimal("1"), Decimal(sold) / Decimal(inbound))
    else:
        turnover = Decimal("0")

    return InventoryLevel(
        item_type=item_type,
        inbound=inbound,
        outbound=outbound,
        on_hand=on_hand,
        turnover_ratio=turnover,
        is_low_stock=(
            low_stock_threshold is not None and on_hand <= low_stock_threshold
        ),
    )


def discover_item_types(
    sales: Iterable[Sale] = (),
    purchases: Iterable[Purchase] = (),
) -> list[str]:
    """Item types in first-seen order, purchases before sales."""
    seen: dict[str, None] = {}
    for purchase in purchases:
        seen.setdefault(purchase.item_type, None)
    for sale in sales:
        seen.setdefault(sale.item_type, None)
    return list(seen)


def inventory_levels(
    item_types: Optional[Sequence[str]],
    sales: Sequence[Sale] = (),
    purchases: Sequence[Purchase] = (),
    low_stock_threshold: Optional[int] = None,
) -> list[InventoryLevel]:
    """
    One level per item type.

    When `item_types` is None, every item type that appears in the records
    is reported.
    """
    if item_types is None:
        item_types = discover_item_types(sales, purchases)
    return [
        inventory(item_type, sales, purchases, low_stock_threshold)
        for item_type in item_types
    ]


def stock_movements(
    item_type: str,
    sales: Iterable[Sale] = (),
    purchases: Iterable[Purchase] = (),
) -> list[StockMovement]:
    """Movement log of one item type, newest first."""
    movements = []
    for purchase in purchases:
        if purchase.item_type != item_type:
            continue
        if purchase.is_return:
            description = "Return to supplier"
            direction = MovementDirection.OUT
        else:
            description = f"Supply from {purchase.supplier_name or 'supplier'}"
            direction = MovementDirection.IN
        movements.append(StockMovement(
            source_id=purchase.id,
            timestamp=purchase.timestamp,
            description=description,
            quantity=purchase.quantity,
            direction=direction,
        ))

    for sale in sales:
        if sale.item_type != item_type:
            continue
        if sale.is_return:
            description = "Customer return"
            direction = MovementDirection.IN
        else:
            description = f"Sale to {sale.customer_name or 'customer'}"
            direction = MovementDirection.OUT
        movements.append(StockMovement(
            source_id=sale.id,
            timestamp=sale.timestamp,
            description=description,
            quantity=sale.quantity,
            direction=direction,
        ))

    movements.sort(key=lambda m: m.timestamp, reverse=True)
    return movements
