"""
NexaProc Core Audit — Activity Functions
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from core.audit.models import ActivityEntry

logger = logging.getLogger("nexaproc.audit")

ACTIVITY_COLLECTION = "activity_logs"


def create_activity_entry(
    *,
    actor_id: str,
    entity_type: str,
    entity_id,
    action: str,
    description: str,
    occurred_at: datetime,
    event_type: str = "",
    metadata: Optional[dict] = None,
) -> ActivityEntry:
    return ActivityEntry(
        entry_id=str(uuid.uuid4()),
        actor_id=str(actor_id),
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        description=description,
        occurred_at=occurred_at,
        event_type=event_type,
        metadata=metadata or {},
    )


def record_activity(store, entry: ActivityEntry) -> dict:
    """Append the entry to the store's activity log."""
    logger.info(
        "%s %s/%s by %s: %s",
        entry.action, entry.entity_type, entry.entity_id,
        entry.actor_id, entry.description,
    )
    return store.create(ACTIVITY_COLLECTION, entry.to_record())
