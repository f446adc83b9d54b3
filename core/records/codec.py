"""
NexaProc Core Records — Line-Item Codec
=========================================
Quotation, sales order and delivery order line items are stored as one
serialized text column. This module is the only place that reads or
writes that column.

Wire format (version 1):

    {"version": 1, "lines": [{"good_id": "7", "name": "Bolt M8", ...}]}

Decoding is defensive. A corrupt historical record must not break a
listing of other records, so every failure decodes to an empty list:

    None / ""            → []
    list                 → normalized lines (already decoded)
    {"version": 1, ...}  → normalized lines
    bare JSON array      → normalized lines (pre-envelope records)
    anything else        → [] + WARNING on nexaproc.records

Quantities and prices decode to Decimal. The empty string is kept as-is
because "not filled in" is distinct from zero. Documents with their own
line shape (invoices) pass a `normalizer` to encode_lines/decode_lines.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

logger = logging.getLogger("nexaproc.records")

LINE_CODEC_VERSION = 1

# Line fields every document type understands.
BASE_LINE_FIELDS = ("good_id", "name", "description", "unit", "qty", "price")
# Per-document extras carried through untouched when present.
EXTRA_LINE_FIELDS = ("delivery_time", "deadline_days", "remaining_qty")
NUMERIC_LINE_FIELDS = frozenset({
    "qty", "price", "delivery_time", "deadline_days", "remaining_qty",
})


# ══════════════════════════════════════════════════════════════
# SCALAR HELPERS
# ══════════════════════════════════════════════════════════════

def is_blank(value: Any) -> bool:
    """None and '' are blank. Zero is a value."""
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def to_decimal(value: Any, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """Parse a stored number; blanks, garbage, NaN and infinities yield ``default``."""
    if is_blank(value) or isinstance(value, bool):
        return default
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return default
    if not value.is_finite():
        return default
    return value


def normalize_name(name: Any) -> str:
    return " ".join(str(name or "").split()).casefold()


def line_key(line: dict) -> str:
    """
    Identity of a good line across quotation, sales order and delivery.

    id:<good_id> when the line references a catalog good, otherwise
    name:<normalized name> for legacy free-text lines.
    """
    good_id = line.get("good_id")
    if not is_blank(good_id):
        return f"id:{str(good_id).strip()}"
    return f"name:{normalize_name(line.get('name'))}"


# ══════════════════════════════════════════════════════════════
# NORMALIZATION
# ══════════════════════════════════════════════════════════════

def _normalize_numeric(value: Any) -> Any:
    if is_blank(value):
        return "" if isinstance(value, str) else None
    parsed = to_decimal(value, default=None)
    return parsed if parsed is not None else value


def normalize_line(raw: dict) -> dict:
    good_id = raw.get("good_id")
    line = {
        "good_id": None if is_blank(good_id) else str(good_id).strip(),
        "name": str(raw.get("name") or ""),
        "description": str(raw.get("description") or ""),
        "unit": str(raw.get("unit") or ""),
        "qty": _normalize_numeric(raw.get("qty")),
        "price": _normalize_numeric(raw.get("price")),
    }
    for extra in EXTRA_LINE_FIELDS:
        if extra in raw:
            line[extra] = _normalize_numeric(raw[extra])
    return line


def normalize_lines(raw_lines, normalizer=None) -> List[dict]:
    normalizer = normalizer or normalize_line
    lines = []
    for index, raw in enumerate(raw_lines):
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object line item at index %d", index)
            continue
        lines.append(normalizer(raw))
    return lines


# ══════════════════════════════════════════════════════════════
# ENCODE / DECODE
# ══════════════════════════════════════════════════════════════

def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_lines(lines, normalizer=None) -> str:
    envelope = {
        "version": LINE_CODEC_VERSION,
        "lines": normalize_lines(lines or [], normalizer),
    }
    return json.dumps(envelope, default=_json_default)


def decode_lines(raw: Any, normalizer=None) -> List[dict]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return normalize_lines(raw, normalizer)

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        if not raw.strip():
            return []
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Malformed line-item payload; decoding to []")
            return []

    if isinstance(raw, list):
        return normalize_lines(raw, normalizer)

    if isinstance(raw, dict) and "lines" in raw:
        version = raw.get("version")
        if version != LINE_CODEC_VERSION:
            logger.warning("Unknown line-item codec version %r; decoding to []", version)
            return []
        if not isinstance(raw["lines"], list):
            logger.warning("Line-item envelope without a list; decoding to []")
            return []
        return normalize_lines(raw["lines"], normalizer)

    logger.warning(
        "Unsupported line-item payload of type %s; decoding to []",
        type(raw).__name__,
    )
    return []
