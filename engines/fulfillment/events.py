"""
NexaProc Fulfillment Engine — Event Types and Payload Builders
================================================================
"""

from __future__ import annotations

from core.commands.base import Command

DELIVERY_CREATED_V1 = "fulfillment.delivery.created.v1"
DELIVERY_UPDATED_V1 = "fulfillment.delivery.updated.v1"
SALES_ORDER_DELIVERY_STATUS_V1 = "fulfillment.order.status_changed.v1"

FULFILLMENT_EVENT_TYPES = (
    DELIVERY_CREATED_V1,
    DELIVERY_UPDATED_V1,
    SALES_ORDER_DELIVERY_STATUS_V1,
)


def resolve_delivery_event_type(command: Command) -> str:
    if command.payload.get("delivery_id"):
        return DELIVERY_UPDATED_V1
    return DELIVERY_CREATED_V1


def build_delivery_committed_payload(command: Command, delivery: dict, shipped: dict) -> dict:
    return {
        "actor_id": command.actor_id,
        "command_id": str(command.command_id),
        "delivery_id": delivery["id"],
        "delivery_number": delivery["delivery_number"],
        "sales_order_id": delivery["sales_order_id"],
        "shipped": {key: str(qty) for key, qty in shipped.items()},
    }


def build_order_status_changed_payload(
    command: Command, sales_order_id: str, previous_status: str, status: str,
) -> dict:
    return {
        "actor_id": command.actor_id,
        "command_id": str(command.command_id),
        "sales_order_id": sales_order_id,
        "from_status": previous_status,
        "to_status": status,
    }
