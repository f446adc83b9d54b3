"""
NexaProc Core Audit — Activity Log Model
==========================================
Append-only record of who changed which quotation, sales order,
delivery order or invoice. Frozen once created; never deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

ACTION_CREATE = "create"
ACTION_UPDATE = "update"
ACTION_STATUS = "status"

VALID_ACTIONS = frozenset({ACTION_CREATE, ACTION_UPDATE, ACTION_STATUS})


@dataclass(frozen=True)
class ActivityEntry:
    entry_id: str
    actor_id: str
    entity_type: str
    entity_id: str
    action: str
    description: str
    occurred_at: datetime
    event_type: str = ""
    metadata: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.action not in VALID_ACTIONS:
            raise ValueError(
                f"ActivityEntry action must be create|update|status, got '{self.action}'."
            )

    def to_record(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "actor_id": self.actor_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "description": self.description,
            "occurred_at": self.occurred_at,
            "event_type": self.event_type,
            "metadata": dict(self.metadata),
        }
