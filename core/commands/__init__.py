"""
NexaProc Command Layer
========================
Every mutation begins as a Command.
Every Command produces exactly one Outcome.
"""

from core.commands.base import (
    Command,
    build_command,
    derive_rejection_event_type,
)
from core.commands.outcomes import (
    CommandOutcome,
    CommandStatus,
    accept,
    reject,
)
from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)
from core.commands.bus import (
    CommandBus,
    CommandBusError,
    NoHandlerRegistered,
)

__all__ = [
    # ── Base ──────────────────────────────────────────────────
    "Command",
    "build_command",
    "derive_rejection_event_type",
    # ── Outcomes ──────────────────────────────────────────────
    "CommandOutcome",
    "CommandStatus",
    "accept",
    "reject",
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
    # ── Bus ───────────────────────────────────────────────────
    "CommandBus",
    "CommandBusError",
    "NoHandlerRegistered",
]
