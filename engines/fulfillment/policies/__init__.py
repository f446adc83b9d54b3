"""
NexaProc Fulfillment Engine — Policies
========================================
Validation of a delivery commit. Run by the service inside the sales
order's critical section, against quantities recomputed there.
"""

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.records.codec import is_blank, line_key, to_decimal
from engines.sales_order.lifecycle import (
    ACCEPTS_DELIVERY_EDIT,
    ACCEPTS_NEW_DELIVERY,
    normalize_order_status,
)


def submitted_quantities(command: Command) -> Dict[str, Decimal]:
    """
    Submitted qty per line key. Repeated keys add up; blank qty counts
    as 0. Call only after quantities_must_be_valid_policy passed.
    """
    totals: Dict[str, Decimal] = OrderedDict()
    for line in command.payload.get("lines") or ():
        key = line_key(line)
        totals[key] = totals.get(key, Decimal("0")) + to_decimal(line.get("qty"))
    return totals


def order_accepts_delivery_policy(
    command: Command,
    order: dict,
) -> Optional[RejectionReason]:
    status = normalize_order_status(order.get("status"))
    editing = bool(command.payload.get("delivery_id"))
    allowed = ACCEPTS_DELIVERY_EDIT if editing else ACCEPTS_NEW_DELIVERY
    if status in allowed:
        return None
    flow = "edited" if editing else "created"
    return RejectionReason(
        code=ReasonCode.SALES_ORDER_LOCKED,
        message=f"Sales order is '{status}'; deliveries cannot be {flow}.",
        policy_name="order_accepts_delivery_policy",
    )


def delivery_belongs_to_order_policy(
    command: Command,
    delivery: dict,
) -> Optional[RejectionReason]:
    if str(delivery.get("sales_order_id")) == command.payload["sales_order_id"]:
        return None
    return RejectionReason(
        code=ReasonCode.DELIVERY_ORDER_MISMATCH,
        message=(
            f"Delivery '{delivery.get('id')}' belongs to sales order "
            f"'{delivery.get('sales_order_id')}', not '{command.payload['sales_order_id']}'."
        ),
        policy_name="delivery_belongs_to_order_policy",
    )


def quantities_must_be_valid_policy(command: Command) -> Optional[RejectionReason]:
    for index, line in enumerate(command.payload.get("lines") or ()):
        raw = line.get("qty")
        if is_blank(raw):
            continue
        qty = to_decimal(raw, default=None)
        if qty is None or qty < 0:
            return RejectionReason(
                code=ReasonCode.INVALID_QUANTITY,
                message=f"Line {index + 1}: quantity {raw!r} must be a number >= 0.",
                policy_name="quantities_must_be_valid_policy",
            )
    return None


def lines_must_match_order_policy(
    command: Command,
    order_lines: List[dict],
) -> Optional[RejectionReason]:
    known = {line_key(line) for line in order_lines}
    for index, line in enumerate(command.payload.get("lines") or ()):
        key = line_key(line)
        if key not in known:
            return RejectionReason(
                code=ReasonCode.UNKNOWN_LINE,
                message=f"Line {index + 1} ({key}) is not on the sales order.",
                policy_name="lines_must_match_order_policy",
            )
    return None


def delivery_must_move_goods_policy(
    command: Command,
    quantities: Dict[str, Decimal],
) -> Optional[RejectionReason]:
    if any(qty > 0 for qty in quantities.values()):
        return None
    return RejectionReason(
        code=ReasonCode.EMPTY_DELIVERY,
        message="A delivery must ship at least one unit of at least one good.",
        policy_name="delivery_must_move_goods_policy",
    )


def quantities_within_remaining_policy(
    command: Command,
    quantities: Dict[str, Decimal],
    ceilings: Dict[str, Decimal],
) -> Optional[RejectionReason]:
    for key, qty in quantities.items():
        remaining = ceilings.get(key, Decimal("0"))
        if qty > remaining:
            return RejectionReason(
                code=ReasonCode.QTY_EXCEEDS_REMAINING,
                message=f"{key}: requested {qty} but only {remaining} remains shippable.",
                policy_name="quantities_within_remaining_policy",
            )
    return None


def delivery_date_required_policy(
    command: Command,
    delivery_date,
) -> Optional[RejectionReason]:
    if not is_blank(delivery_date):
        return None
    return RejectionReason(
        code=ReasonCode.MISSING_DELIVERY_DATE,
        message="Delivery date must be filled out.",
        policy_name="delivery_date_required_policy",
    )


def ship_address_required_policy(
    command: Command,
    ship_address,
) -> Optional[RejectionReason]:
    if not is_blank(ship_address):
        return None
    return RejectionReason(
        code=ReasonCode.MISSING_SHIP_ADDRESS,
        message="No ship-to address given and the sales order has no delivery address.",
        policy_name="ship_address_required_policy",
    )
