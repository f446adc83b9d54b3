"""
NexaProc Core Records
=======================
Record store protocol, in-memory store and the line-item codec.
"""

from core.records.codec import (
    LINE_CODEC_VERSION,
    decode_lines,
    encode_lines,
    is_blank,
    line_key,
    normalize_name,
    to_decimal,
)
from core.records.store import (
    COLLECTIONS,
    InMemoryRecordStore,
    RecordNotFound,
    RecordStore,
    UnknownCollection,
    numbering_lock_key,
    sales_order_lock_key,
)

__all__ = [
    "LINE_CODEC_VERSION",
    "decode_lines",
    "encode_lines",
    "is_blank",
    "line_key",
    "normalize_name",
    "to_decimal",
    "COLLECTIONS",
    "InMemoryRecordStore",
    "RecordNotFound",
    "RecordStore",
    "UnknownCollection",
    "numbering_lock_key",
    "sales_order_lock_key",
]
