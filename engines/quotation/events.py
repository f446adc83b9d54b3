"""
NexaProc Quotation Engine — Event Types and Payload Builders
==============================================================
Quotation owns: submission → negotiation rounds → process/reject.
Each accepted command is recorded in the activity log under its
event type; the payload builders shape the entry's metadata.
"""

from __future__ import annotations

from core.commands.base import Command


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

QUOTATION_CREATED_V1 = "quotation.record.created.v1"
QUOTATION_EDITED_V1 = "quotation.record.edited.v1"
QUOTATION_STATUS_UPDATED_V1 = "quotation.status.updated.v1"

QUOTATION_EVENT_TYPES = (
    QUOTATION_CREATED_V1,
    QUOTATION_EDITED_V1,
    QUOTATION_STATUS_UPDATED_V1,
)


# ══════════════════════════════════════════════════════════════
# COMMAND → EVENT MAPPING
# ══════════════════════════════════════════════════════════════

COMMAND_TO_EVENT_TYPE = {
    "quotation.record.create.request": QUOTATION_CREATED_V1,
    "quotation.record.edit.request": QUOTATION_EDITED_V1,
    "quotation.status.update.request": QUOTATION_STATUS_UPDATED_V1,
}


def resolve_quotation_event_type(command_type: str) -> str | None:
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


def build_quotation_created_payload(command: Command, quotation: dict) -> dict:
    payload = _base_payload(command)
    payload.update({
        "quotation_id": quotation["id"],
        "quotation_number": quotation["quotation_number"],
        "rfq_id": quotation.get("rfq_id"),
        "grand_total": str(quotation["grand_total"]),
    })
    return payload


def build_quotation_edited_payload(command: Command, quotation: dict) -> dict:
    payload = _base_payload(command)
    payload.update({
        "quotation_id": quotation["id"],
        "changed_fields": sorted(command.payload["changes"]),
        "status": quotation["status"],
        "grand_total": str(quotation["grand_total"]),
    })
    return payload


def build_quotation_status_updated_payload(
    command: Command, quotation: dict, previous_status: str,
) -> dict:
    payload = _base_payload(command)
    payload.update({
        "quotation_id": quotation["id"],
        "from_status": previous_status,
        "to_status": quotation["status"],
        "negotiation_round": quotation.get("negotiation_round", 0),
    })
    return payload
