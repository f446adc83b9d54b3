"""
NexaProc Sales Order Engine — Policies
========================================
Engine-specific validation policies for sales order operations.
"""

from __future__ import annotations

from typing import List, Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.records.codec import to_decimal
from engines.quotation.lifecycle import STATUS_PROCESS, normalize_status
from engines.sales_order.lifecycle import (
    FINAL_STATUSES,
    LOCKED_STATUSES,
    SALES_ORDER_STATUSES,
    normalize_order_status,
)


def quotation_must_be_in_process_policy(
    command: Command,
    quotation: dict,
) -> Optional[RejectionReason]:
    """Only a quotation accepted into 'process' can become a sales order."""
    status = normalize_status(quotation.get("status"))
    if status == STATUS_PROCESS:
        return None
    return RejectionReason(
        code=ReasonCode.QUOTATION_NOT_IN_PROCESS,
        message=(
            f"Quotation '{quotation.get('id')}' is {status or 'UNKNOWN'}. "
            f"Only quotations in process can be materialized."
        ),
        policy_name="quotation_must_be_in_process_policy",
    )


def quotation_not_yet_materialized_policy(
    command: Command,
    existing_orders: List[dict],
) -> Optional[RejectionReason]:
    """A quotation backs at most one sales order."""
    if not existing_orders:
        return None
    numbers = ", ".join(str(o.get("order_number") or o.get("id")) for o in existing_orders)
    return RejectionReason(
        code=ReasonCode.DUPLICATE_SALES_ORDER,
        message=(
            f"Quotation '{command.payload['quotation_id']}' already has "
            f"sales order(s): {numbers}."
        ),
        policy_name="quotation_not_yet_materialized_policy",
    )


def deadlines_required_policy(
    command: Command,
    lines: List[dict],
) -> Optional[RejectionReason]:
    """One non-negative deadline (days) per line, aligned by index."""
    deadlines = command.payload.get("deadlines") or []
    if len(deadlines) != len(lines):
        return RejectionReason(
            code=ReasonCode.MISSING_DEADLINE,
            message=(
                f"Expected {len(lines)} deadline(s), one per line; "
                f"got {len(deadlines)}."
            ),
            policy_name="deadlines_required_policy",
        )
    for index, raw in enumerate(deadlines):
        days = to_decimal(raw, default=None)
        if days is None or days < 0:
            return RejectionReason(
                code=ReasonCode.MISSING_DEADLINE,
                message=f"Line {index + 1}: deadline (days) must be filled out and not negative.",
                policy_name="deadlines_required_policy",
            )
    return None


def goods_required_policy(
    command: Command,
    lines: List[dict],
) -> Optional[RejectionReason]:
    if lines:
        return None
    return RejectionReason(
        code=ReasonCode.EMPTY_GOODS,
        message="A sales order must contain at least one goods line.",
        policy_name="goods_required_policy",
    )


def status_update_policy(
    command: Command,
    order: dict,
) -> Optional[RejectionReason]:
    current = normalize_order_status(order.get("status"))
    target = normalize_order_status(command.payload.get("status"))

    if target not in SALES_ORDER_STATUSES:
        message = f"Unknown sales order status '{target}'."
    elif current in FINAL_STATUSES:
        message = f"Sales order is '{current}' and cannot change status."
    elif current in LOCKED_STATUSES and target not in FINAL_STATUSES:
        # an invoice already exists; the order can only be closed
        message = f"Sales order is '{current}' and can only move to 'done'."
    elif current == target:
        message = f"Sales order is already '{current}'."
    else:
        return None

    return RejectionReason(
        code=ReasonCode.INVALID_STATUS_TRANSITION,
        message=message,
        policy_name="status_update_policy",
    )
