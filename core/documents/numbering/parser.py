"""
NexaProc Documents - Number Parser
===================================
Tagged-variant parser: every stored document number parses to either
a ParsedNumber (with the variant that matched) or Unrecognized.
Free-text and foreign numbers are Unrecognized, never an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from core.documents.numbering.models import NumberingPolicy

VARIANT_CURRENT = "CURRENT"
VARIANT_LEGACY = "LEGACY"


@dataclass(frozen=True)
class ParsedNumber:
    variant: str
    year: int
    sequence: int


@dataclass(frozen=True)
class Unrecognized:
    raw: str


ParseResult = Union[ParsedNumber, Unrecognized]


def _current_pattern(policy: NumberingPolicy) -> re.Pattern:
    return re.compile(
        rf"^(\d{{{policy.padding},}})/{re.escape(policy.company_code)}"
        rf"/{re.escape(policy.doc_code)}/[IVXLCDM]+/(\d{{4}})$"
    )


def _parse_current(raw: str, policy: NumberingPolicy) -> ParseResult:
    match = _current_pattern(policy).match(raw)
    if match is None:
        return Unrecognized(raw)
    return ParsedNumber(
        variant=VARIANT_CURRENT,
        year=int(match.group(2)),
        sequence=int(match.group(1)),
    )


def _parse_legacy(raw: str, policy: NumberingPolicy) -> ParseResult:
    # RGI-QTN-<year>-<sequence>: prefix match, remainder must be all digits
    stem = policy.legacy_stem
    if not raw.startswith(stem):
        return Unrecognized(raw)
    year_part, sep, sequence_part = raw[len(stem):].partition("-")
    if not sep or len(year_part) != 4 or not year_part.isdigit():
        return Unrecognized(raw)
    if not sequence_part.isdigit():
        return Unrecognized(raw)
    return ParsedNumber(
        variant=VARIANT_LEGACY,
        year=int(year_part),
        sequence=int(sequence_part),
    )


def parse_document_number(raw, policy: NumberingPolicy) -> ParseResult:
    """Try the current format first, then legacy when the policy allows it."""
    text = str(raw or "").strip()
    if not text:
        return Unrecognized(text)

    parsed = _parse_current(text, policy)
    if isinstance(parsed, ParsedNumber):
        return parsed

    if policy.accept_legacy:
        return _parse_legacy(text, policy)
    return parsed
