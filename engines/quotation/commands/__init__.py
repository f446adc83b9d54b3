"""
NexaProc Quotation Engine — Request Commands
==============================================
Typed quotation requests that convert into canonical Command objects.
Structural problems raise at construction; business validation is
left to the engine policies.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.commands.base import Command, build_command
from core.records.codec import normalize_lines


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

QUOTATION_CREATE_REQUEST = "quotation.record.create.request"
QUOTATION_EDIT_REQUEST = "quotation.record.edit.request"
QUOTATION_STATUS_UPDATE_REQUEST = "quotation.status.update.request"

QUOTATION_COMMAND_TYPES = frozenset({
    QUOTATION_CREATE_REQUEST,
    QUOTATION_EDIT_REQUEST,
    QUOTATION_STATUS_UPDATE_REQUEST,
})

CONTACT_FIELDS = ("company_name", "pic_name", "pic_email", "pic_phone")
EDITABLE_FIELDS = frozenset({"goods", "include_tax", "payment_time"})


def _goods_tuple(goods) -> tuple:
    if goods is None:
        return ()
    if isinstance(goods, (list, tuple)):
        return tuple(goods)
    raise TypeError("goods must be a list or tuple of line dicts.")


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class QuotationCreateRequest:
    """Submit a new quotation against an RFQ."""
    company_name: str = ""
    pic_name: str = ""
    pic_email: str = ""
    pic_phone: str = ""
    goods: tuple = ()
    include_tax: bool = False
    payment_time: str = ""
    rfq_id: Optional[str] = None
    client_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "goods", _goods_tuple(self.goods))
        if not isinstance(self.include_tax, bool):
            raise TypeError("include_tax must be bool.")

    @classmethod
    def from_fields(cls, fields: dict) -> "QuotationCreateRequest":
        known = {name: fields[name] for name in cls.__dataclass_fields__ if name in fields}
        return cls(**known)

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return build_command(
            command_type=QUOTATION_CREATE_REQUEST,
            source_engine="quotation",
            payload={
                "rfq_id": self.rfq_id,
                "client_id": self.client_id,
                "company_name": str(self.company_name or "").strip(),
                "pic_name": str(self.pic_name or "").strip(),
                "pic_email": str(self.pic_email or "").strip(),
                "pic_phone": str(self.pic_phone or "").strip(),
                "goods": normalize_lines(self.goods),
                "include_tax": self.include_tax,
                "payment_time": self.payment_time,
            },
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )


@dataclass(frozen=True)
class QuotationEditRequest:
    """Revise goods, tax mode or payment terms of an open quotation."""
    quotation_id: str
    fields: dict

    def __post_init__(self):
        if not self.quotation_id:
            raise ValueError("quotation_id must be non-empty.")
        if not isinstance(self.fields, dict) or not self.fields:
            raise ValueError("fields must be a non-empty dict.")
        unknown = set(self.fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(
                f"Fields {sorted(unknown)} are not editable; "
                f"editable: {sorted(EDITABLE_FIELDS)}."
            )
        if "include_tax" in self.fields and not isinstance(self.fields["include_tax"], bool):
            raise TypeError("include_tax must be bool.")
        if "goods" in self.fields:
            _goods_tuple(self.fields["goods"])

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        changes = dict(self.fields)
        if "goods" in changes:
            changes["goods"] = normalize_lines(_goods_tuple(changes["goods"]))
        return build_command(
            command_type=QUOTATION_EDIT_REQUEST,
            source_engine="quotation",
            payload={
                "quotation_id": str(self.quotation_id),
                "changes": changes,
            },
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )


@dataclass(frozen=True)
class QuotationStatusUpdateRequest:
    """Move a quotation through the negotiation lifecycle."""
    quotation_id: str
    status: str

    def __post_init__(self):
        if not self.quotation_id:
            raise ValueError("quotation_id must be non-empty.")
        if not self.status or not isinstance(self.status, str):
            raise ValueError("status must be a non-empty string.")

    def to_command(
        self,
        *,
        actor,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return build_command(
            command_type=QUOTATION_STATUS_UPDATE_REQUEST,
            source_engine="quotation",
            payload={
                "quotation_id": str(self.quotation_id),
                "status": self.status,
            },
            actor=actor,
            command_id=command_id,
            correlation_id=correlation_id,
            issued_at=issued_at,
        )
