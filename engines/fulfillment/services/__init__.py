"""
NexaProc Fulfillment Engine — Application Service
===================================================
Partial deliveries against a sales order, never shipping more than was
ordered.

commit_delivery holds the sales order's critical section across
"recompute shipped quantities → validate → insert/update delivery →
recompute order status". Two callers racing for the last units of a
line are serialized there; the second sees the first one's delivery
and is rejected. Remaining quantities shown when a delivery flow opens
are advisory only.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Optional

from core.audit import (
    ACTION_CREATE,
    ACTION_STATUS,
    ACTION_UPDATE,
    create_activity_entry,
    record_activity,
)
from core.commands.base import Command
from core.commands.outcomes import CommandOutcome, accept, reject
from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ActorContext, actor_from_command
from core.documents.numbering import NumberingPolicy, next_document_number
from core.permissions import authorize
from core.permissions.constants import ACTION_DELIVERY_CREATE, ACTION_DELIVERY_EDIT
from core.records.codec import decode_lines, encode_lines, is_blank, line_key
from core.records.store import RecordNotFound, numbering_lock_key, sales_order_lock_key
from engines.fulfillment.commands import (
    DELIVERY_COMMIT_REQUEST,
    FULFILLMENT_COMMAND_TYPES,
    DeliveryCommitRequest,
)
from engines.fulfillment.events import (
    SALES_ORDER_DELIVERY_STATUS_V1,
    build_delivery_committed_payload,
    build_order_status_changed_payload,
    resolve_delivery_event_type,
)
from engines.fulfillment.ledger import (
    RemainingView,
    build_shipped_map,
    edit_delivery_view,
    is_fully_shipped,
    new_delivery_view,
    remaining_by_key,
)
from engines.fulfillment.policies import (
    delivery_belongs_to_order_policy,
    delivery_date_required_policy,
    delivery_must_move_goods_policy,
    lines_must_match_order_policy,
    order_accepts_delivery_policy,
    quantities_must_be_valid_policy,
    quantities_within_remaining_policy,
    ship_address_required_policy,
    submitted_quantities,
)
from engines.sales_order.lifecycle import (
    ACCEPTS_DELIVERY_EDIT,
    delivery_status_for,
    normalize_order_status,
)

logger = logging.getLogger("nexaproc.fulfillment")

COLLECTION = "delivery_orders"
ORDERS = "sales_orders"


class _FulfillmentCommandHandler:
    def __init__(self, service: "FulfillmentService"):
        self._service = service

    def execute(self, command: Command) -> CommandOutcome:
        return self._service.execute(command)


class FulfillmentService:
    """Fulfillment Ledger application service."""

    def __init__(self, *, store, config_store, clock, command_bus=None):
        self._store = store
        self._config_store = config_store
        self._clock = clock
        self._command_bus = command_bus

        if self._command_bus is not None:
            handler = _FulfillmentCommandHandler(self)
            for command_type in sorted(FULFILLMENT_COMMAND_TYPES):
                self._command_bus.register_handler(command_type, handler)

    def _deliveries_for(self, sales_order_id) -> list:
        return self._store.list(COLLECTION, sales_order_id=sales_order_id)

    # ── reads ─────────────────────────────────────────────────

    def get_remaining_for_new_delivery(self, sales_order_id) -> RemainingView:
        """Raises RecordNotFound for an unknown sales order."""
        order = self._store.get(ORDERS, sales_order_id)
        shipped = build_shipped_map(self._deliveries_for(order["id"]), order["id"])
        return new_delivery_view(order["id"], decode_lines(order.get("goods")), shipped)

    def get_remaining_for_edit_delivery(self, delivery_id) -> RemainingView:
        """Raises RecordNotFound for an unknown delivery or sales order."""
        delivery = self._store.get(COLLECTION, delivery_id)
        order = self._store.get(ORDERS, delivery.get("sales_order_id"))
        shipped = build_shipped_map(
            self._deliveries_for(order["id"]), order["id"], exclude_delivery_id=delivery["id"],
        )
        return edit_delivery_view(order["id"], delivery, decode_lines(order.get("goods")), shipped)

    def get_delivery(self, delivery_id) -> dict:
        return present_delivery(self._store.get(COLLECTION, delivery_id))

    def numbering_policy(self) -> NumberingPolicy:
        rules = self._config_store.get_rules()
        return NumberingPolicy(doc_code=rules.delivery_doc_code, company_code=rules.company_code)

    # ── commit ────────────────────────────────────────────────

    def commit_delivery(
        self,
        sales_order_id,
        lines,
        actor: ActorContext,
        exclude_delivery_id=None,
        *,
        delivery_date=None,
        ship_address: Optional[str] = None,
    ) -> CommandOutcome:
        """
        Create a delivery order, or with exclude_delivery_id, replace the
        quantities of that existing delivery.
        """
        request = DeliveryCommitRequest(
            sales_order_id=str(sales_order_id),
            lines=tuple(lines or ()),
            delivery_id=None if exclude_delivery_id is None else str(exclude_delivery_id),
            delivery_date=delivery_date,
            ship_address=ship_address,
        )
        command = request.to_command(
            actor=actor,
            command_id=uuid.uuid4(),
            correlation_id=uuid.uuid4(),
            issued_at=self._clock.now(),
        )
        if self._command_bus is not None:
            return self._command_bus.handle(command)
        return self.execute(command)

    def execute(self, command: Command) -> CommandOutcome:
        if command.command_type != DELIVERY_COMMIT_REQUEST:
            raise ValueError(f"Unsupported fulfillment command type: {command.command_type}")

        sales_order_id = command.payload["sales_order_id"]
        with self._store.critical_section(sales_order_lock_key(sales_order_id)):
            outcome = self._commit_locked(command)

        if outcome.is_rejected:
            logger.info(
                "Delivery commit on sales order %s rejected: %s (%s)",
                sales_order_id, outcome.reason.code, outcome.reason.message,
            )
        return outcome

    def _reject(self, command: Command, reason: RejectionReason) -> CommandOutcome:
        return reject(command, occurred_at=self._clock.now(), reason=reason)

    def _commit_locked(self, command: Command) -> CommandOutcome:
        payload = command.payload
        sales_order_id = payload["sales_order_id"]
        delivery_id = payload["delivery_id"]
        editing = delivery_id is not None

        try:
            order = self._store.get(ORDERS, sales_order_id)
        except RecordNotFound:
            return self._reject(command, RejectionReason(
                code=ReasonCode.SALES_ORDER_NOT_FOUND,
                message=f"Sales order '{sales_order_id}' not found.",
                policy_name="sales_order_must_exist",
            ))

        action = ACTION_DELIVERY_EDIT if editing else ACTION_DELIVERY_CREATE
        rejection = (
            authorize(actor_from_command(command), action, order).to_rejection()
            or order_accepts_delivery_policy(command, order)
        )
        if rejection is not None:
            return self._reject(command, rejection)

        existing = None
        if editing:
            try:
                existing = self._store.get(COLLECTION, delivery_id)
            except RecordNotFound:
                return self._reject(command, RejectionReason(
                    code=ReasonCode.DELIVERY_NOT_FOUND,
                    message=f"Delivery order '{delivery_id}' not found.",
                    policy_name="delivery_must_exist",
                ))
            rejection = delivery_belongs_to_order_policy(command, existing)
            if rejection is not None:
                return self._reject(command, rejection)

        order_lines = decode_lines(order.get("goods"))
        deliveries = self._deliveries_for(sales_order_id)
        shipped = build_shipped_map(deliveries, sales_order_id, exclude_delivery_id=delivery_id)
        ceilings = remaining_by_key(order_lines, shipped)

        rejection = (
            quantities_must_be_valid_policy(command)
            or lines_must_match_order_policy(command, order_lines)
        )
        if rejection is not None:
            return self._reject(command, rejection)

        quantities = submitted_quantities(command)
        delivery_date = payload["delivery_date"]
        if is_blank(delivery_date) and existing is not None:
            delivery_date = existing.get("delivery_date")
        ship_address = payload["ship_address"]
        if is_blank(ship_address) and existing is not None:
            ship_address = existing.get("ship_address")
        if is_blank(ship_address):
            ship_address = order.get("delivery_address")

        rejection = (
            delivery_must_move_goods_policy(command, quantities)
            or quantities_within_remaining_policy(command, quantities, ceilings)
            or delivery_date_required_policy(command, delivery_date)
            or ship_address_required_policy(command, ship_address)
        )
        if rejection is not None:
            return self._reject(command, rejection)

        delivery_lines = self._delivery_lines(order_lines, quantities)
        if editing:
            record = self._store.update(COLLECTION, delivery_id, {
                "delivery_date": delivery_date,
                "ship_address": ship_address,
                "goods": encode_lines(delivery_lines),
                "last_edited_by": command.actor_id,
            })
            description = f"Updated delivery order {record.get('delivery_number') or delivery_id}"
        else:
            record = self._create_delivery(command, order, delivery_date, ship_address, delivery_lines)
            description = f"Created delivery order {record['delivery_number']}"

        record_activity(self._store, create_activity_entry(
            actor_id=command.actor_id,
            entity_type=COLLECTION,
            entity_id=record["id"],
            action=ACTION_UPDATE if editing else ACTION_CREATE,
            description=description,
            occurred_at=command.issued_at,
            event_type=resolve_delivery_event_type(command),
            metadata=build_delivery_committed_payload(command, record, quantities),
        ))

        self._refresh_order_status(command, order, order_lines)
        logger.info(
            "Delivery %s committed on sales order %s: %s",
            record.get("delivery_number"), sales_order_id,
            {key: str(qty) for key, qty in quantities.items()},
        )
        return accept(command, occurred_at=command.issued_at, record=present_delivery(record))

    @staticmethod
    def _delivery_lines(order_lines, quantities) -> list:
        lines = []
        seen = set()
        for order_line in order_lines:
            key = line_key(order_line)
            qty = quantities.get(key, Decimal("0"))
            if key in seen or qty <= 0:
                continue
            seen.add(key)
            lines.append({
                "good_id": order_line.get("good_id"),
                "name": order_line.get("name"),
                "description": order_line.get("description"),
                "unit": order_line.get("unit"),
                "qty": qty,
            })
        return lines

    def _create_delivery(self, command, order, delivery_date, ship_address, lines) -> dict:
        with self._store.critical_section(numbering_lock_key(COLLECTION)):
            existing = [d.get("delivery_number") for d in self._store.list(COLLECTION)]
            number = next_document_number(
                existing, policy=self.numbering_policy(), issued_at=command.issued_at,
            )
            return self._store.create(COLLECTION, {
                "delivery_number": number,
                "delivery_date": delivery_date,
                "sales_order_id": order["id"],
                "company_name": order.get("company_name") or "",
                "ship_address": ship_address,
                "goods": encode_lines(lines),
                "created_by": command.actor_id,
                "created_at": command.issued_at,
            })

    def _refresh_order_status(self, command: Command, order: dict, order_lines: list) -> None:
        current = normalize_order_status(order.get("status"))
        if current not in ACCEPTS_DELIVERY_EDIT:
            return

        shipped = build_shipped_map(self._deliveries_for(order["id"]), order["id"])
        target = delivery_status_for(is_fully_shipped(order_lines, shipped))
        if target == current:
            return

        self._store.update(ORDERS, order["id"], {"status": target})
        record_activity(self._store, create_activity_entry(
            actor_id=command.actor_id,
            entity_type=ORDERS,
            entity_id=order["id"],
            action=ACTION_STATUS,
            description=f"Updated sales order status to {target}",
            occurred_at=command.issued_at,
            event_type=SALES_ORDER_DELIVERY_STATUS_V1,
            metadata=build_order_status_changed_payload(command, order["id"], current, target),
        ))
        logger.info("Sales order %s: %s → %s", order["id"], current, target)


def present_delivery(record: dict) -> dict:
    presented = dict(record)
    presented["goods"] = decode_lines(record.get("goods"))
    return presented
