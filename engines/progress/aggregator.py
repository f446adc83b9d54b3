"""
NexaProc Progress Engine — Aggregator
=======================================
Delivered / remaining / workload metrics for one sales order, derived
from the same shipped map the fulfillment ledger uses (all deliveries
counted). Read-only and recomputed on every request.

Per line:
    delivered       = min(shipped, ordered)
    remaining       = ordered − delivered
    subtotal        = ordered × price
    workload %      = subtotal / Σ subtotal × 100        (0 if Σ is 0)
    progress value  = delivered × price
    remaining value = remaining × price
    progress %      = delivered / ordered × 100          (0 if ordered is 0)

Order:
    overall %       = Σ delivered / Σ ordered × 100      (0 if Σ is 0)

Percentages are unrounded Decimals; rounding is a presentation concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List

from core.records.codec import line_key, to_decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LineProgress:
    key: str
    name: str
    unit: str
    ordered_qty: Decimal
    price: Decimal
    delivered_qty: Decimal
    remaining_qty: Decimal
    subtotal: Decimal
    workload_percent: Decimal
    progress_value: Decimal
    remaining_value: Decimal
    progress_percent: Decimal

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "unit": self.unit,
            "ordered_qty": self.ordered_qty,
            "price": self.price,
            "delivered_qty": self.delivered_qty,
            "remaining_qty": self.remaining_qty,
            "subtotal": self.subtotal,
            "workload_percent": self.workload_percent,
            "progress_value": self.progress_value,
            "remaining_value": self.remaining_value,
            "progress_percent": self.progress_percent,
        }


@dataclass(frozen=True)
class OrderProgress:
    sales_order_id: str
    lines: tuple
    total_ordered_qty: Decimal
    total_delivered_qty: Decimal
    total_subtotal: Decimal
    total_progress_value: Decimal
    total_remaining_value: Decimal
    overall_progress_percent: Decimal

    def to_dict(self) -> dict:
        return {
            "sales_order_id": self.sales_order_id,
            "lines": [line.to_dict() for line in self.lines],
            "total_ordered_qty": self.total_ordered_qty,
            "total_delivered_qty": self.total_delivered_qty,
            "total_subtotal": self.total_subtotal,
            "total_progress_value": self.total_progress_value,
            "total_remaining_value": self.total_remaining_value,
            "overall_progress_percent": self.overall_progress_percent,
        }


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO
    return part / whole * HUNDRED


def compute_order_progress(
    sales_order_id,
    order_lines: List[dict],
    shipped_map: Dict[str, Decimal],
) -> OrderProgress:
    total_subtotal = sum(
        (to_decimal(line.get("qty")) * to_decimal(line.get("price")) for line in order_lines),
        ZERO,
    )

    lines = []
    for line in order_lines:
        key = line_key(line)
        ordered = to_decimal(line.get("qty"))
        price = to_decimal(line.get("price"))
        delivered = min(shipped_map.get(key, ZERO), ordered)
        remaining = ordered - delivered
        subtotal = ordered * price
        lines.append(LineProgress(
            key=key,
            name=line.get("name") or "",
            unit=line.get("unit") or "",
            ordered_qty=ordered,
            price=price,
            delivered_qty=delivered,
            remaining_qty=remaining,
            subtotal=subtotal,
            workload_percent=_percent(subtotal, total_subtotal),
            progress_value=delivered * price,
            remaining_value=remaining * price,
            progress_percent=_percent(delivered, ordered),
        ))

    total_ordered = sum((line.ordered_qty for line in lines), ZERO)
    total_delivered = sum((line.delivered_qty for line in lines), ZERO)
    return OrderProgress(
        sales_order_id=str(sales_order_id),
        lines=tuple(lines),
        total_ordered_qty=total_ordered,
        total_delivered_qty=total_delivered,
        total_subtotal=total_subtotal,
        total_progress_value=sum((line.progress_value for line in lines), ZERO),
        total_remaining_value=sum((line.remaining_value for line in lines), ZERO),
        overall_progress_percent=_percent(total_delivered, total_ordered),
    )
