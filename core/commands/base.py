"""
NexaProc Command Layer — Command Base Contract
=================================================
Every mutation of a quotation, sales order or delivery order begins
as a Command.

A Command is a frozen declaration of intent. It carries identity,
the acting user and a payload — nothing else.

Rules:
- Immutable once created (frozen dataclass)
- No business logic inside
- No persistence
- command_type follows engine.domain.action.request format
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime


# ══════════════════════════════════════════════════════════════
# CANONICAL COMMAND
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Command:
    """
    Canonical NexaProc Command — declaration of intent.

    Fields:
        command_id:     Unique identifier (UUID).
        command_type:   Namespaced type ending in '.request'
                        (e.g. 'quotation.status.update.request').
        actor_id:       Identity of the user issuing the command.
        actor_role:     Role supplied by the identity collaborator.
        payload:        Intent data (dict).
        issued_at:      When the command was issued.
        correlation_id: Groups related commands in one story.
        source_engine:  Engine that owns this command.
    """

    command_id: uuid.UUID
    command_type: str
    actor_id: str
    actor_role: str
    payload: dict
    issued_at: datetime
    correlation_id: uuid.UUID
    source_engine: str

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError(
                f"command_id must be UUID, got {type(self.command_id).__name__}"
            )

        if not self.command_type or not isinstance(self.command_type, str):
            raise ValueError("command_type must be a non-empty string.")

        if not self.command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{self.command_type}' must end with "
                f"'.request' (e.g. 'quotation.status.update.request')."
            )

        parts = self.command_type.split(".")
        if len(parts) < 4:
            raise ValueError(
                f"command_type '{self.command_type}' must follow "
                f"engine.domain.action.request format (minimum 4 segments)."
            )

        if parts[0] != self.source_engine:
            raise ValueError(
                f"command_type namespace '{parts[0]}' does not match "
                f"source_engine '{self.source_engine}'."
            )

        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")

        if not isinstance(self.actor_role, str):
            raise ValueError("actor_role must be a string.")

        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

        if not isinstance(self.issued_at, datetime):
            raise ValueError("issued_at must be a datetime.")

        if not isinstance(self.correlation_id, uuid.UUID):
            raise ValueError("correlation_id must be UUID.")


# ══════════════════════════════════════════════════════════════
# NAMING HELPERS
# ══════════════════════════════════════════════════════════════

def derive_rejection_event_type(command_type: str) -> str:
    """
    quotation.status.update.request → quotation.status.update.rejected
    """
    if not command_type.endswith(".request"):
        raise ValueError(
            f"Cannot derive rejection event type from "
            f"'{command_type}' — must end with '.request'."
        )

    base = command_type[: -len(".request")]
    return f"{base}.rejected"


def build_command(
    *,
    command_type: str,
    source_engine: str,
    payload: dict,
    actor,
    command_id: uuid.UUID,
    correlation_id: uuid.UUID,
    issued_at: datetime,
) -> Command:
    """Assemble a Command for a request issued by an ActorContext."""
    return Command(
        command_id=command_id,
        command_type=command_type,
        actor_id=actor.actor_id,
        actor_role=actor.role,
        payload=payload,
        issued_at=issued_at,
        correlation_id=correlation_id,
        source_engine=source_engine,
    )
