"""
NexaProc Fulfillment Engine — Ledger
======================================
How much of each sales order line remains shippable.

The ledger is pure: callers pass the sales order's lines and the
delivery order records, and get derived quantities back. Nothing here
is persisted; it is recomputed from the delivery records every time.

    shipped[key]   = Σ qty of matching lines over the order's deliveries
                     (optionally excluding the delivery being edited)
    remaining(L)   = max(ordered(L) − shipped[key(L)], 0)

Line identity is core.records.codec.line_key: id:<good_id> or
name:<normalized name>.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from core.records.codec import decode_lines, line_key, to_decimal

ZERO = Decimal("0")


def build_shipped_map(
    deliveries: Iterable[dict],
    sales_order_id=None,
    exclude_delivery_id=None,
) -> Dict[str, Decimal]:
    shipped: Dict[str, Decimal] = {}
    for delivery in deliveries:
        if sales_order_id is not None and str(delivery.get("sales_order_id")) != str(sales_order_id):
            continue
        if exclude_delivery_id is not None and str(delivery.get("id")) == str(exclude_delivery_id):
            continue
        for item in decode_lines(delivery.get("goods")):
            key = line_key(item)
            shipped[key] = shipped.get(key, ZERO) + to_decimal(item.get("qty"))
    return shipped


def remaining_for_line(ordered_line: dict, shipped_map: Dict[str, Decimal]) -> Decimal:
    ordered = to_decimal(ordered_line.get("qty"))
    shipped = shipped_map.get(line_key(ordered_line), ZERO)
    return max(ordered - shipped, ZERO)


def remaining_by_key(order_lines: Iterable[dict], shipped_map: Dict[str, Decimal]) -> Dict[str, Decimal]:
    """
    Ceiling per line key. A key appearing on several order lines is
    treated as one line whose ordered quantity is the sum.
    """
    ordered: Dict[str, Decimal] = OrderedDict()
    for line in order_lines:
        key = line_key(line)
        ordered[key] = ordered.get(key, ZERO) + to_decimal(line.get("qty"))
    return OrderedDict(
        (key, max(qty - shipped_map.get(key, ZERO), ZERO)) for key, qty in ordered.items()
    )


def is_fully_shipped(order_lines: List[dict], shipped_map: Dict[str, Decimal]) -> bool:
    """Every line with an ordered quantity has shipped at least that much."""
    if not order_lines:
        return False
    for line in order_lines:
        ordered = to_decimal(line.get("qty"))
        if ordered > 0 and shipped_map.get(line_key(line), ZERO) < ordered:
            return False
    return True


# ══════════════════════════════════════════════════════════════
# VIEWS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RemainingView:
    """
    Lines offered to a delivery flow.

    Each line is the sales order line plus:
        remaining_qty: the most this delivery may ship of the line
        qty:           what this delivery currently ships (0 for new)
    """
    sales_order_id: str
    lines: tuple
    delivery_id: Optional[str] = None

    def by_key(self) -> Dict[str, dict]:
        return {line_key(line): line for line in self.lines}


def _offer_line(order_line: dict, remaining: Decimal, current_qty: Decimal) -> dict:
    offered = dict(order_line)
    offered["ordered_qty"] = to_decimal(order_line.get("qty"))
    offered["remaining_qty"] = remaining
    offered["qty"] = current_qty
    return offered


def new_delivery_view(
    sales_order_id,
    order_lines: List[dict],
    shipped_map: Dict[str, Decimal],
) -> RemainingView:
    """Fully shipped lines are not offered."""
    lines = []
    for order_line in order_lines:
        remaining = remaining_for_line(order_line, shipped_map)
        if remaining > 0:
            lines.append(_offer_line(order_line, remaining, ZERO))
    return RemainingView(sales_order_id=str(sales_order_id), lines=tuple(lines))


def edit_delivery_view(
    sales_order_id,
    delivery: dict,
    order_lines: List[dict],
    shipped_excluding_delivery: Dict[str, Decimal],
) -> RemainingView:
    """
    Every order line is offered with its ceiling computed without the
    delivery's own quantities, so the delivery never competes with
    itself. A ceiling may be 0 when other deliveries consumed the line.
    """
    own = build_shipped_map([delivery])
    lines = [
        _offer_line(
            order_line,
            remaining_for_line(order_line, shipped_excluding_delivery),
            own.get(line_key(order_line), ZERO),
        )
        for order_line in order_lines
    ]
    return RemainingView(
        sales_order_id=str(sales_order_id),
        lines=tuple(lines),
        delivery_id=str(delivery.get("id")),
    )
