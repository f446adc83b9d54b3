"""
NexaProc Sales Order Engine — Application Service
===================================================
Materializes an accepted quotation into exactly one sales order and
manages the order's header and status afterwards.

Materialization runs inside the quotation's critical section so the
"no sales order references this quotation yet" check and the insert
cannot interleave with a second materialization.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

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
from core.permissions import authorize
from core.permissions.constants import (
    ACTION_SALES_ORDER_CREATE,
    ACTION_SALES_ORDER_EDIT,
    ACTION_SALES_ORDER_STATUS_UPDATE,
)
from core.records.codec import decode_lines, encode_lines, line_key, to_decimal
from core.records.store import RecordNotFound, sales_order_lock_key
from engines.invoice.services import InvoiceService
from engines.quotation.tax import HUNDRED, quantize_money, raw_subtotal
from engines.sales_order.commands import (
    SALES_ORDER_COMMAND_TYPES,
    SALES_ORDER_EDIT_REQUEST,
    SALES_ORDER_MATERIALIZE_REQUEST,
    SALES_ORDER_STATUS_UPDATE_REQUEST,
    SalesOrderEditRequest,
    SalesOrderMaterializeRequest,
    SalesOrderStatusUpdateRequest,
)
from engines.sales_order.events import (
    build_sales_order_edited_payload,
    build_sales_order_materialized_payload,
    build_sales_order_status_updated_payload,
    resolve_sales_order_event_type,
)
from engines.sales_order.lifecycle import (
    STATUS_ONGOING,
    STATUS_WAITING_PAYMENT,
    normalize_order_status,
)
from engines.sales_order.policies import (
    deadlines_required_policy,
    goods_required_policy,
    quotation_must_be_in_process_policy,
    quotation_not_yet_materialized_policy,
    status_update_policy,
)

logger = logging.getLogger("nexaproc.sales_order")

COLLECTION = "sales_orders"


def _lines_signature(lines: List[dict]) -> list:
    return [
        (line_key(line), to_decimal(line.get("qty")), to_decimal(line.get("price")))
        for line in lines
    ]


def materialize_totals(quotation: dict, lines: List[dict], goods_edited: bool, tax_rate) -> dict:
    """
    Untouched lines carry the quotation's totals over. Edited lines
    recompute total_amount; tax and grand total stay as quoted when the
    quotation has them, otherwise subtotal + tax at the current rate.
    """
    if not goods_edited:
        return {
            "total_amount": to_decimal(quotation.get("total_amount")),
            "tax_amount": to_decimal(quotation.get("tax_amount")),
            "grand_total": to_decimal(quotation.get("grand_total")),
        }

    total = quantize_money(raw_subtotal(lines))
    quoted_tax = to_decimal(quotation.get("tax_amount"), default=None)
    tax = quoted_tax if quoted_tax is not None else quantize_money(
        total * to_decimal(tax_rate) / HUNDRED
    )
    quoted_grand = to_decimal(quotation.get("grand_total"), default=None)
    grand = quoted_grand if quoted_grand is not None else total + tax
    return {"total_amount": total, "tax_amount": tax, "grand_total": grand}


# ══════════════════════════════════════════════════════════════
# COMMAND HANDLER
# ══════════════════════════════════════════════════════════════

class _SalesOrderCommandHandler:
    def __init__(self, service: "SalesOrderService"):
        self._service = service

    def execute(self, command: Command) -> CommandOutcome:
        return self._service.execute(command)


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class SalesOrderService:
    """Sales Order Materializer application service."""

    def __init__(
        self,
        *,
        store,
        config_store,
        clock,
        command_bus=None,
        invoice_service=None,
    ):
        self._store = store
        self._config_store = config_store
        self._clock = clock
        self._command_bus = command_bus
        self._invoice_service = invoice_service or InvoiceService(
            store=store, config_store=config_store, clock=clock,
        )

        if self._command_bus is not None:
            self._register_handlers()

    def _register_handlers(self) -> None:
        handler = _SalesOrderCommandHandler(self)
        for command_type in sorted(SALES_ORDER_COMMAND_TYPES):
            self._command_bus.register_handler(command_type, handler)

    # ── public operations ─────────────────────────────────────

    def materialize_sales_order(
        self,
        quotation_id,
        deadlines_per_line,
        actor: ActorContext,
        *,
        order_number: Optional[str] = None,
        goods=None,
        delivery_address: str = "",
        order_date=None,
    ) -> CommandOutcome:
        request = SalesOrderMaterializeRequest(
            quotation_id=str(quotation_id),
            deadlines=tuple(deadlines_per_line or ()),
            order_number=order_number,
            goods=goods,
            delivery_address=delivery_address,
            order_date=order_date,
        )
        return self._submit(request, actor)

    def edit_sales_order(self, sales_order_id, fields: dict, actor: ActorContext) -> CommandOutcome:
        return self._submit(
            SalesOrderEditRequest(sales_order_id=str(sales_order_id), fields=fields), actor,
        )

    def update_sales_order_status(self, sales_order_id, status: str, actor: ActorContext) -> CommandOutcome:
        return self._submit(
            SalesOrderStatusUpdateRequest(sales_order_id=str(sales_order_id), status=status),
            actor,
        )

    def get_sales_order(self, sales_order_id) -> dict:
        return present_sales_order(self._store.get(COLLECTION, sales_order_id))

    # ── command execution ─────────────────────────────────────

    def _submit(self, request, actor: ActorContext) -> CommandOutcome:
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
        handlers = {
            SALES_ORDER_MATERIALIZE_REQUEST: self._execute_materialize,
            SALES_ORDER_EDIT_REQUEST: self._execute_edit,
            SALES_ORDER_STATUS_UPDATE_REQUEST: self._execute_status_update,
        }
        handler = handlers.get(command.command_type)
        if handler is None:
            raise ValueError(f"Unsupported sales order command type: {command.command_type}")

        outcome = handler(command)
        if outcome.is_rejected:
            logger.info(
                "Sales order command %s rejected: %s (%s)",
                command.command_type, outcome.reason.code, outcome.reason.message,
            )
        return outcome

    def _reject(self, command: Command, reason: RejectionReason) -> CommandOutcome:
        return reject(command, occurred_at=self._clock.now(), reason=reason)

    def _load_order(self, sales_order_id) -> tuple:
        try:
            return self._store.get(COLLECTION, sales_order_id), None
        except RecordNotFound:
            return None, RejectionReason(
                code=ReasonCode.SALES_ORDER_NOT_FOUND,
                message=f"Sales order '{sales_order_id}' not found.",
                policy_name="sales_order_must_exist",
            )

    def _log_activity(self, command: Command, order: dict, action: str,
                      description: str, metadata: dict) -> None:
        record_activity(self._store, create_activity_entry(
            actor_id=command.actor_id,
            entity_type=COLLECTION,
            entity_id=order["id"],
            action=action,
            description=description,
            occurred_at=command.issued_at,
            event_type=resolve_sales_order_event_type(command.command_type) or "",
            metadata=metadata,
        ))

    # ── materialize ───────────────────────────────────────────

    def _execute_materialize(self, command: Command) -> CommandOutcome:
        rejection = authorize(
            actor_from_command(command), ACTION_SALES_ORDER_CREATE,
        ).to_rejection()
        if rejection is not None:
            return self._reject(command, rejection)

        payload = command.payload
        quotation_id = payload["quotation_id"]

        with self._store.critical_section(f"quotation:{quotation_id}"):
            try:
                quotation = self._store.get("quotations", quotation_id)
            except RecordNotFound:
                return self._reject(command, RejectionReason(
                    code=ReasonCode.QUOTATION_NOT_FOUND,
                    message=f"Quotation '{quotation_id}' not found.",
                    policy_name="quotation_must_exist",
                ))

            quoted_lines = decode_lines(quotation.get("goods"))
            lines = quoted_lines if payload["goods"] is None else payload["goods"]
            goods_edited = (
                payload["goods"] is not None
                and _lines_signature(lines) != _lines_signature(quoted_lines)
            )

            rejection = (
                quotation_must_be_in_process_policy(command, quotation)
                or quotation_not_yet_materialized_policy(
                    command, self._store.list(COLLECTION, quotation_id=quotation_id),
                )
                or goods_required_policy(command, lines)
                or deadlines_required_policy(command, lines)
            )
            if rejection is not None:
                return self._reject(command, rejection)

            order_lines = []
            for line, deadline in zip(lines, payload["deadlines"]):
                materialized = dict(line)
                materialized["deadline_days"] = to_decimal(deadline)
                order_lines.append(materialized)

            totals = materialize_totals(
                quotation, order_lines, goods_edited,
                self._config_store.get_rules().tax_rate,
            )
            order = self._store.create(COLLECTION, {
                "order_number": payload["order_number"] or quotation.get("quotation_number") or "",
                "quotation_id": quotation_id,
                "client_id": quotation.get("client_id"),
                "company_name": quotation.get("company_name") or "",
                "order_date": payload["order_date"],
                "delivery_address": payload["delivery_address"],
                "payment_time": quotation.get("payment_time") or "",
                "goods": encode_lines(order_lines),
                "include_tax": bool(quotation.get("include_tax")),
                **totals,
                "status": STATUS_ONGOING,
                "created_by": command.actor_id,
                "created_at": command.issued_at,
            })

            self._log_activity(
                command, order, ACTION_CREATE,
                f"Created sales order {order['order_number'] or order['id']}",
                build_sales_order_materialized_payload(command, order, goods_edited),
            )

        logger.info(
            "Quotation %s materialized into sales order %s", quotation_id, order["id"],
        )
        return accept(command, occurred_at=command.issued_at, record=present_sales_order(order))

    # ── edit ──────────────────────────────────────────────────

    def _execute_edit(self, command: Command) -> CommandOutcome:
        sales_order_id = command.payload["sales_order_id"]
        with self._store.critical_section(sales_order_lock_key(sales_order_id)):
            order, rejection = self._load_order(sales_order_id)
            if rejection is None:
                rejection = authorize(
                    actor_from_command(command), ACTION_SALES_ORDER_EDIT, order,
                ).to_rejection()
            if rejection is not None:
                return self._reject(command, rejection)

            updates = dict(command.payload["changes"])
            updates["last_edited_by"] = command.actor_id
            updated = self._store.update(COLLECTION, sales_order_id, updates)
            self._log_activity(
                command, updated, ACTION_UPDATE,
                f"Updated sales order {updated.get('order_number') or sales_order_id}",
                build_sales_order_edited_payload(command, updated),
            )

        return accept(command, occurred_at=command.issued_at, record=present_sales_order(updated))

    # ── status update ─────────────────────────────────────────

    def _execute_status_update(self, command: Command) -> CommandOutcome:
        sales_order_id = command.payload["sales_order_id"]
        target = normalize_order_status(command.payload["status"])

        with self._store.critical_section(sales_order_lock_key(sales_order_id)):
            order, rejection = self._load_order(sales_order_id)
            if rejection is None:
                rejection = authorize(
                    actor_from_command(command), ACTION_SALES_ORDER_STATUS_UPDATE,
                    order, target_status=target,
                ).to_rejection()
            if rejection is None:
                rejection = status_update_policy(command, order)
            if rejection is not None:
                return self._reject(command, rejection)

            previous_status = normalize_order_status(order.get("status"))
            updated = self._store.update(COLLECTION, sales_order_id, {
                "status": target,
                "last_edited_by": command.actor_id,
            })
            self._log_activity(
                command, updated, ACTION_STATUS,
                f"Updated sales order status to {target}",
                build_sales_order_status_updated_payload(command, updated, previous_status),
            )

            if target == STATUS_WAITING_PAYMENT:
                invoice_outcome = self._invoice_service.create_invoice_for_order(
                    sales_order_id, actor_from_command(command),
                )
                if invoice_outcome.is_rejected:
                    logger.info(
                        "No invoice created for sales order %s: %s",
                        sales_order_id, invoice_outcome.reason_code,
                    )

        logger.info("Sales order %s: %s → %s", sales_order_id, previous_status, target)
        return accept(command, occurred_at=command.issued_at, record=present_sales_order(updated))


def present_sales_order(record: dict) -> dict:
    presented = dict(record)
    presented["goods"] = decode_lines(record.get("goods"))
    presented["status"] = normalize_order_status(record.get("status"))
    return presented
