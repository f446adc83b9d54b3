"""
NexaProc Quotation Engine — Application Service
=================================================
Quotation lifecycle: submit → negotiate (rounds) → process | reject.

Every operation is a command executed against the record store:
authorize → policies → write → activity log. Totals are always
computed here from the submitted lines and the configured tax rate;
totals supplied by callers are never trusted.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

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
from core.permissions.constants import (
    ACTION_QUOTATION_CREATE,
    ACTION_QUOTATION_EDIT,
    ACTION_QUOTATION_STATUS_UPDATE,
)
from core.records.codec import decode_lines, encode_lines
from core.records.store import RecordNotFound, numbering_lock_key
from engines.quotation.commands import (
    QUOTATION_COMMAND_TYPES,
    QUOTATION_CREATE_REQUEST,
    QUOTATION_EDIT_REQUEST,
    QUOTATION_STATUS_UPDATE_REQUEST,
    QuotationCreateRequest,
    QuotationEditRequest,
    QuotationStatusUpdateRequest,
)
from engines.quotation.events import (
    build_quotation_created_payload,
    build_quotation_edited_payload,
    build_quotation_status_updated_payload,
    resolve_quotation_event_type,
)
from engines.quotation.lifecycle import (
    STATUS_NEGOTIATION,
    STATUS_RENEGOTIATION,
    STATUS_WAITING,
    is_editable,
    normalize_status,
)
from engines.quotation.policies import (
    CONTACT_POLICIES,
    LOOKUP_POLICIES,
    SUBMISSION_POLICIES,
    entering_negotiation,
    status_transition_policy,
)
from engines.quotation.tax import compute_totals

logger = logging.getLogger("nexaproc.quotation")

COLLECTION = "quotations"
RFQ_STATUS_PROCESS = "process"


# ══════════════════════════════════════════════════════════════
# COMMAND HANDLER
# ══════════════════════════════════════════════════════════════

class _QuotationCommandHandler:
    def __init__(self, service: "QuotationService"):
        self._service = service

    def execute(self, command: Command) -> CommandOutcome:
        return self._service.execute(command)


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class QuotationService:
    """Quotation Negotiation Engine application service."""

    def __init__(
        self,
        *,
        store,
        config_store,
        clock,
        command_bus=None,
        good_lookup: Optional[Callable[[str], Optional[dict]]] = None,
    ):
        self._store = store
        self._config_store = config_store
        self._clock = clock
        self._command_bus = command_bus
        self._good_lookup = good_lookup or self._catalog_lookup

        if self._command_bus is not None:
            self._register_handlers()

    def _register_handlers(self) -> None:
        handler = _QuotationCommandHandler(self)
        for command_type in sorted(QUOTATION_COMMAND_TYPES):
            self._command_bus.register_handler(command_type, handler)

    def _catalog_lookup(self, good_id) -> Optional[dict]:
        matches = self._store.list("goods", id=good_id)
        return matches[0] if matches else None

    # ── public operations ─────────────────────────────────────

    def create_quotation(self, fields: dict, actor: ActorContext) -> CommandOutcome:
        return self._submit(QuotationCreateRequest.from_fields(fields), actor)

    def edit_quotation(self, quotation_id, fields: dict, actor: ActorContext) -> CommandOutcome:
        return self._submit(QuotationEditRequest(quotation_id=str(quotation_id), fields=fields), actor)

    def update_quotation_status(self, quotation_id, status: str, actor: ActorContext) -> CommandOutcome:
        return self._submit(
            QuotationStatusUpdateRequest(quotation_id=str(quotation_id), status=status),
            actor,
        )

    def get_quotation(self, quotation_id) -> dict:
        return present_quotation(self._store.get(COLLECTION, quotation_id))

    def numbering_policy(self) -> NumberingPolicy:
        rules = self._config_store.get_rules()
        return NumberingPolicy(
            doc_code=rules.quotation_doc_code,
            company_code=rules.company_code,
            accept_legacy=True,
        )

    def next_quotation_number(self) -> str:
        """Preview of the number the next submission would receive."""
        existing = [q.get("quotation_number") for q in self._store.list(COLLECTION)]
        return next_document_number(
            existing, policy=self.numbering_policy(), issued_at=self._clock.now(),
        )

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
            QUOTATION_CREATE_REQUEST: self._execute_create,
            QUOTATION_EDIT_REQUEST: self._execute_edit,
            QUOTATION_STATUS_UPDATE_REQUEST: self._execute_status_update,
        }
        handler = handlers.get(command.command_type)
        if handler is None:
            raise ValueError(f"Unsupported quotation command type: {command.command_type}")

        outcome = handler(command)
        if outcome.is_rejected:
            logger.info(
                "Quotation command %s rejected: %s (%s)",
                command.command_type, outcome.reason.code, outcome.reason.message,
            )
        return outcome

    def _reject(self, command: Command, reason: RejectionReason) -> CommandOutcome:
        return reject(command, occurred_at=self._clock.now(), reason=reason)

    def _run_policies(self, command: Command, policies) -> Optional[RejectionReason]:
        for policy in policies:
            if policy in LOOKUP_POLICIES:
                rejection = policy(command, good_lookup=self._good_lookup)
            else:
                rejection = policy(command)
            if rejection is not None:
                return rejection
        return None

    def _load(self, command: Command) -> tuple:
        quotation_id = command.payload["quotation_id"]
        try:
            return self._store.get(COLLECTION, quotation_id), None
        except RecordNotFound:
            return None, RejectionReason(
                code=ReasonCode.QUOTATION_NOT_FOUND,
                message=f"Quotation '{quotation_id}' not found.",
                policy_name="quotation_must_exist",
            )

    def _log_activity(self, command: Command, quotation: dict, action: str,
                      description: str, metadata: dict) -> None:
        entry = create_activity_entry(
            actor_id=command.actor_id,
            entity_type=COLLECTION,
            entity_id=quotation["id"],
            action=action,
            description=description,
            occurred_at=command.issued_at,
            event_type=resolve_quotation_event_type(command.command_type) or "",
            metadata=metadata,
        )
        record_activity(self._store, entry)

    # ── create ────────────────────────────────────────────────

    def _execute_create(self, command: Command) -> CommandOutcome:
        actor = actor_from_command(command)
        rejection = authorize(actor, ACTION_QUOTATION_CREATE).to_rejection()
        if rejection is None:
            rejection = self._run_policies(command, CONTACT_POLICIES)
        if rejection is None:
            rejection = self._run_policies(command, SUBMISSION_POLICIES)
        if rejection is not None:
            return self._reject(command, rejection)

        payload = command.payload
        rules = self._config_store.get_rules()
        totals = compute_totals(payload["goods"], rules.tax_rate, payload["include_tax"])

        with self._store.critical_section(numbering_lock_key(COLLECTION)):
            existing = [q.get("quotation_number") for q in self._store.list(COLLECTION)]
            number = next_document_number(
                existing, policy=self.numbering_policy(), issued_at=command.issued_at,
            )
            record = self._store.create(COLLECTION, {
                "quotation_number": number,
                "rfq_id": payload["rfq_id"],
                "client_id": payload["client_id"],
                "company_name": payload["company_name"],
                "pic_name": payload["pic_name"],
                "pic_email": payload["pic_email"],
                "pic_phone": payload["pic_phone"],
                "payment_time": payload["payment_time"],
                "goods": encode_lines(payload["goods"]),
                "include_tax": payload["include_tax"],
                **totals.as_fields(),
                "status": STATUS_WAITING,
                "negotiation_round": 0,
                "performed_by": command.actor_id,
                "created_at": command.issued_at,
            })

        rfq_id = payload["rfq_id"]
        if rfq_id and self._store.list("rfqs", id=rfq_id):
            self._store.update("rfqs", rfq_id, {"status": RFQ_STATUS_PROCESS})

        self._log_activity(
            command, record, ACTION_CREATE,
            f"Created quotation {number}",
            build_quotation_created_payload(command, record),
        )
        logger.info("Quotation %s created by %s", number, command.actor_id)
        return accept(command, occurred_at=command.issued_at, record=present_quotation(record))

    # ── edit ──────────────────────────────────────────────────

    def _execute_edit(self, command: Command) -> CommandOutcome:
        quotation_id = command.payload["quotation_id"]
        with self._store.critical_section(f"quotation:{quotation_id}"):
            quotation, rejection = self._load(command)
            if rejection is None:
                rejection = authorize(
                    actor_from_command(command), ACTION_QUOTATION_EDIT, quotation,
                ).to_rejection()
            if rejection is None and not is_editable(quotation.get("status")):
                rejection = RejectionReason(
                    code=ReasonCode.QUOTATION_LOCKED,
                    message=f"Quotation in status '{quotation.get('status')}' cannot be edited.",
                    policy_name="quotation_must_be_editable",
                )
            if rejection is None:
                rejection = self._run_policies(command, SUBMISSION_POLICIES)
            if rejection is not None:
                return self._reject(command, rejection)

            changes = command.payload["changes"]
            goods = changes["goods"] if "goods" in changes else decode_lines(quotation.get("goods"))
            include_tax = changes.get("include_tax", bool(quotation.get("include_tax")))
            totals = compute_totals(
                goods, self._config_store.get_rules().tax_rate, include_tax,
            )

            updates = {
                "goods": encode_lines(goods),
                "include_tax": include_tax,
                **totals.as_fields(),
                "last_edited_by": command.actor_id,
            }
            if "payment_time" in changes:
                updates["payment_time"] = changes["payment_time"]

            previous_status = normalize_status(quotation.get("status"))
            if previous_status == STATUS_NEGOTIATION:
                # a revised offer needs manager approval again
                updates["status"] = STATUS_RENEGOTIATION

            updated = self._store.update(COLLECTION, quotation_id, updates)

            self._log_activity(
                command, updated, ACTION_UPDATE,
                f"Updated quotation {updated.get('quotation_number') or quotation_id}",
                build_quotation_edited_payload(command, updated),
            )
            if updates.get("status") == STATUS_RENEGOTIATION:
                self._log_activity(
                    command, updated, ACTION_STATUS,
                    "Quotation moved to renegotiation after offer revision",
                    build_quotation_status_updated_payload(command, updated, previous_status),
                )

        return accept(command, occurred_at=command.issued_at, record=present_quotation(updated))

    # ── status update ─────────────────────────────────────────

    def _execute_status_update(self, command: Command) -> CommandOutcome:
        quotation_id = command.payload["quotation_id"]
        with self._store.critical_section(f"quotation:{quotation_id}"):
            quotation, rejection = self._load(command)
            if rejection is None:
                rejection = authorize(
                    actor_from_command(command), ACTION_QUOTATION_STATUS_UPDATE, quotation,
                ).to_rejection()
            if rejection is None:
                rejection = status_transition_policy(command, quotation)
            if rejection is not None:
                return self._reject(command, rejection)

            previous_status = normalize_status(quotation.get("status"))
            target = normalize_status(command.payload["status"])
            updates = {"status": target, "last_edited_by": command.actor_id}
            if entering_negotiation(command):
                updates["negotiation_round"] = int(quotation.get("negotiation_round") or 0) + 1

            updated = self._store.update(COLLECTION, quotation_id, updates)
            self._log_activity(
                command, updated, ACTION_STATUS,
                f"Updated quotation status to {target}",
                build_quotation_status_updated_payload(command, updated, previous_status),
            )

        logger.info(
            "Quotation %s: %s → %s", quotation_id, previous_status, target,
        )
        return accept(command, occurred_at=command.issued_at, record=present_quotation(updated))


# ══════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════

def present_quotation(record: dict) -> dict:
    """Record with its line items decoded and status normalized."""
    presented = dict(record)
    presented["goods"] = decode_lines(record.get("goods"))
    presented["status"] = normalize_status(record.get("status"))
    return presented
