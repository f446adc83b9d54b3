"""
NexaProc Command Layer — Command Outcome Contract
===================================================
Every Command produces exactly one Outcome.

ACCEPTED → the write happened; `record` holds the new snapshot.
REJECTED → nothing was written; `reason` explains why.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from core.commands.rejection import RejectionReason


class CommandStatus(Enum):
    """Binary command decision. No middle ground."""
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CommandOutcome:
    """
    Deterministic result of command execution.

    Invariants:
        - REJECTED + reason is None → ValueError
        - ACCEPTED + reason is not None → ValueError
    """

    command_id: uuid.UUID
    status: CommandStatus
    reason: Optional[RejectionReason]
    occurred_at: datetime
    record: Optional[dict] = None

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError("command_id must be UUID.")

        if not isinstance(self.status, CommandStatus):
            raise ValueError(
                f"status must be CommandStatus, got {type(self.status).__name__}."
            )

        if self.status == CommandStatus.REJECTED and self.reason is None:
            raise ValueError(
                "REJECTED outcome must include a RejectionReason. "
                "No silent rejections allowed."
            )

        if self.status == CommandStatus.ACCEPTED and self.reason is not None:
            raise ValueError(
                "ACCEPTED outcome must NOT include a RejectionReason."
            )

        if not isinstance(self.occurred_at, datetime):
            raise ValueError("occurred_at must be a datetime.")

    @property
    def is_accepted(self) -> bool:
        return self.status == CommandStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == CommandStatus.REJECTED

    @property
    def reason_code(self) -> Optional[str]:
        return self.reason.code if self.reason is not None else None


def accept(command, *, occurred_at: datetime, record: dict) -> CommandOutcome:
    return CommandOutcome(
        command_id=command.command_id,
        status=CommandStatus.ACCEPTED,
        reason=None,
        occurred_at=occurred_at,
        record=record,
    )


def reject(command, *, occurred_at: datetime, reason: RejectionReason) -> CommandOutcome:
    return CommandOutcome(
        command_id=command.command_id,
        status=CommandStatus.REJECTED,
        reason=reason,
        occurred_at=occurred_at,
    )
