"""
NexaProc Sales Order Engine — Event Types and Payload Builders
================================================================
Sales order owns: materialization from a quotation → header edits →
status moves up to waiting payment / done.
"""

from __future__ import annotations

from core.commands.base import Command


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

SALES_ORDER_MATERIALIZED_V1 = "sales_order.order.materialized.v1"
SALES_ORDER_EDITED_V1 = "sales_order.order.edited.v1"
SALES_ORDER_STATUS_UPDATED_V1 = "sales_order.status.updated.v1"

SALES_ORDER_EVENT_TYPES = (
    SALES_ORDER_MATERIALIZED_V1,
    SALES_ORDER_EDITED_V1,
    SALES_ORDER_STATUS_UPDATED_V1,
)


# ══════════════════════════════════════════════════════════════
# COMMAND → EVENT MAPPING
# ══════════════════════════════════════════════════════════════

COMMAND_TO_EVENT_TYPE = {
    "sales_order.order.materialize.request": SALES_ORDER_MATERIALIZED_V1,
    "sales_order.order.edit.request": SALES_ORDER_EDITED_V1,
    "sales_order.status.update.request": SALES_ORDER_STATUS_UPDATED_V1,
}


def resolve_sales_order_event_type(command_type: str) -> str | None:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def _base_payload(command: Command) -> dict:
    return {
        "actor_id": command.actor_id,
        "actor_role": command.actor_role,
        "command_id": str(command.command_id),
        "correlation_id": str(command.correlation_id),
    }


def build_sales_order_materialized_payload(
    command: Command, order: dict, goods_edited: bool,
) -> dict:
    payload = _base_payload(command)
    payload.update({
        "sales_order_id": order["id"],
        "quotation_id": order["quotation_id"],
        "order_number": order["order_number"],
        "goods_edited": goods_edited,
        "grand_total": str(order["grand_total"]),
    })
    return payload


def build_sales_order_edited_payload(command: Command, order: dict) -> dict:
    payload = _base_payload(command)
    payload.update({
        "sales_order_id": order["id"],
        "changed_fields": sorted(command.payload["changes"]),
    })
    return payload


def build_sales_order_status_updated_payload(
    command: Command, order: dict, previous_status: str,
) -> dict:
    payload = _base_payload(command)
    payload.update({
        "sales_order_id": order["id"],
        "from_status": previous_status,
        "to_status": order["status"],
    })
    return payload
