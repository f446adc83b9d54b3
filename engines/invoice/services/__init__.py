"""
NexaProc Invoice Engine — Application Service
===============================================
Creates the single invoice of a sales order (automatically when the
order moves to waiting payment) and confirms its payment.

Confirming payment closes the whole chain: the sales order becomes
done, its quotation success, and the quotation's RFQ success.
"""

from __future__ import annotations

import logging
import uuid

from core.audit import (
    ACTION_CREATE,
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
from core.permissions.constants import ACTION_INVOICE_CREATE, ACTION_INVOICE_PAY
from core.records.codec import decode_lines, encode_lines
from core.records.store import RecordNotFound, numbering_lock_key, sales_order_lock_key
from engines.invoice.commands import (
    INVOICE_COMMAND_TYPES,
    INVOICE_CREATE_REQUEST,
    INVOICE_PAY_REQUEST,
    InvoiceCreateRequest,
    InvoicePayRequest,
)
from engines.invoice.events import (
    build_invoice_created_payload,
    build_invoice_paid_payload,
    resolve_invoice_event_type,
)
from engines.invoice.lines import (
    build_invoice_lines,
    normalize_invoice_line,
    resolve_invoice_totals,
)
from engines.invoice.policies import (
    STATUS_OVERDUE,
    STATUS_PAID,
    invoice_must_be_overdue_policy,
    one_invoice_per_order_policy,
)

logger = logging.getLogger("nexaproc.invoice")

COLLECTION = "invoices"
CLOSED_ORDER_STATUS = "done"
CLOSED_QUOTATION_STATUS = "success"


class _InvoiceCommandHandler:
    def __init__(self, service: "InvoiceService"):
        self._service = service

    def execute(self, command: Command) -> CommandOutcome:
        return self._service.execute(command)


class InvoiceService:

    def __init__(self, *, store, config_store, clock, command_bus=None):
        self._store = store
        self._config_store = config_store
        self._clock = clock
        self._command_bus = command_bus

        if self._command_bus is not None:
            handler = _InvoiceCommandHandler(self)
            for command_type in sorted(INVOICE_COMMAND_TYPES):
                self._command_bus.register_handler(command_type, handler)

    # ── public operations ─────────────────────────────────────

    def create_invoice_for_order(self, sales_order_id, actor: ActorContext) -> CommandOutcome:
        return self._submit(InvoiceCreateRequest(sales_order_id=str(sales_order_id)), actor)

    def mark_invoice_paid(self, invoice_id, actor: ActorContext) -> CommandOutcome:
        return self._submit(InvoicePayRequest(invoice_id=str(invoice_id)), actor)

    def get_invoice(self, invoice_id) -> dict:
        return present_invoice(self._store.get(COLLECTION, invoice_id))

    def numbering_policy(self) -> NumberingPolicy:
        rules = self._config_store.get_rules()
        return NumberingPolicy(doc_code=rules.invoice_doc_code, company_code=rules.company_code)

    # ── command execution ─────────────────────────────────────

    def _submit(self, request, actor: ActorContext) -> CommandOutcome:
        command = request.to_command(
            actor=actor,
            command_id=uuid.uuid4(),
            correlation_id=uuid.uuid4(),
            issued_at=self._clock.now(),
        )
        if self._command_bus is not None and self._command_bus.is_registered(command.command_type):
            return self._command_bus.handle(command)
        return self.execute(command)

    def execute(self, command: Command) -> CommandOutcome:
        if command.command_type == INVOICE_CREATE_REQUEST:
            outcome = self._execute_create(command)
        elif command.command_type == INVOICE_PAY_REQUEST:
            outcome = self._execute_pay(command)
        else:
            raise ValueError(f"Unsupported invoice command type: {command.command_type}")

        if outcome.is_rejected:
            logger.info(
                "Invoice command %s rejected: %s", command.command_type, outcome.reason.code,
            )
        return outcome

    def _reject(self, command: Command, code: str, message: str, policy_name: str) -> CommandOutcome:
        return reject(command, occurred_at=self._clock.now(), reason=RejectionReason(
            code=code, message=message, policy_name=policy_name,
        ))

    def _log_activity(self, command: Command, invoice: dict, action: str,
                      description: str, metadata: dict) -> None:
        record_activity(self._store, create_activity_entry(
            actor_id=command.actor_id,
            entity_type=COLLECTION,
            entity_id=invoice["id"],
            action=action,
            description=description,
            occurred_at=command.issued_at,
            event_type=resolve_invoice_event_type(command.command_type) or "",
            metadata=metadata,
        ))

    # ── create ────────────────────────────────────────────────

    def _execute_create(self, command: Command) -> CommandOutcome:
        rejection = authorize(actor_from_command(command), ACTION_INVOICE_CREATE).to_rejection()
        if rejection is not None:
            return reject(command, occurred_at=self._clock.now(), reason=rejection)

        sales_order_id = command.payload["sales_order_id"]
        try:
            order = self._store.get("sales_orders", sales_order_id)
        except RecordNotFound:
            return self._reject(
                command, ReasonCode.SALES_ORDER_NOT_FOUND,
                f"Sales order '{sales_order_id}' not found.", "sales_order_must_exist",
            )

        with self._store.critical_section(numbering_lock_key(COLLECTION)):
            rejection = one_invoice_per_order_policy(
                command, self._store.list(COLLECTION, sales_order_id=sales_order_id),
            )
            if rejection is not None:
                return reject(command, occurred_at=self._clock.now(), reason=rejection)

            invoice_lines = build_invoice_lines(decode_lines(order.get("goods")))
            totals = resolve_invoice_totals(order, invoice_lines)
            payment_time = order.get("payment_time")
            if order.get("quotation_id"):
                quotations = self._store.list("quotations", id=order["quotation_id"])
                if quotations and quotations[0].get("payment_time"):
                    payment_time = quotations[0]["payment_time"]

            existing = [i.get("invoice_number") for i in self._store.list(COLLECTION)]
            number = next_document_number(
                existing, policy=self.numbering_policy(), issued_at=command.issued_at,
            )
            invoice = self._store.create(COLLECTION, {
                "invoice_number": number,
                "sales_order_id": sales_order_id,
                "client_id": order.get("client_id"),
                "company_name": order.get("company_name") or "",
                "billing_address": order.get("delivery_address") or "",
                "payment_time": payment_time or "",
                "invoice_date": command.issued_at.date(),
                "goods": encode_lines(invoice_lines, normalize_invoice_line),
                **totals,
                "status": STATUS_OVERDUE,
                "paid_date": None,
                "created_by": command.actor_id,
                "created_at": command.issued_at,
            })

            self._log_activity(
                command, invoice, ACTION_CREATE,
                f"Auto-created invoice {number}",
                build_invoice_created_payload(command, invoice),
            )

        logger.info("Invoice %s created for sales order %s", number, sales_order_id)
        return accept(command, occurred_at=command.issued_at, record=present_invoice(invoice))

    # ── pay ───────────────────────────────────────────────────

    def _execute_pay(self, command: Command) -> CommandOutcome:
        rejection = authorize(actor_from_command(command), ACTION_INVOICE_PAY).to_rejection()
        if rejection is not None:
            return reject(command, occurred_at=self._clock.now(), reason=rejection)

        invoice_id = command.payload["invoice_id"]
        try:
            invoice = self._store.get(COLLECTION, invoice_id)
        except RecordNotFound:
            return self._reject(
                command, ReasonCode.INVOICE_NOT_FOUND,
                f"Invoice '{invoice_id}' not found.", "invoice_must_exist",
            )

        sales_order_id = invoice.get("sales_order_id")
        with self._store.critical_section(sales_order_lock_key(sales_order_id)):
            invoice = self._store.get(COLLECTION, invoice_id)
            rejection = invoice_must_be_overdue_policy(command, invoice)
            if rejection is not None:
                return reject(command, occurred_at=self._clock.now(), reason=rejection)

            updated = self._store.update(COLLECTION, invoice_id, {
                "status": STATUS_PAID,
                "paid_date": command.issued_at.date(),
            })
            self._log_activity(
                command, updated, ACTION_UPDATE,
                f"Updated invoice {updated.get('invoice_number') or invoice_id}",
                build_invoice_paid_payload(command, updated),
            )
            self._close_chain(sales_order_id)

        return accept(command, occurred_at=command.issued_at, record=present_invoice(updated))

    def _close_chain(self, sales_order_id) -> None:
        orders = self._store.list("sales_orders", id=sales_order_id) if sales_order_id else []
        if not orders:
            return
        order = self._store.update("sales_orders", sales_order_id, {"status": CLOSED_ORDER_STATUS})

        quotation_id = order.get("quotation_id")
        quotations = self._store.list("quotations", id=quotation_id) if quotation_id else []
        if not quotations:
            return
        self._store.update("quotations", quotation_id, {"status": CLOSED_QUOTATION_STATUS})

        rfq_id = quotations[0].get("rfq_id")
        if rfq_id and self._store.list("rfqs", id=rfq_id):
            self._store.update("rfqs", rfq_id, {"status": CLOSED_QUOTATION_STATUS})
        logger.info("Sales order %s closed after payment", sales_order_id)


def present_invoice(record: dict) -> dict:
    presented = dict(record)
    presented["goods"] = decode_lines(record.get("goods"), normalize_invoice_line)
    return presented
