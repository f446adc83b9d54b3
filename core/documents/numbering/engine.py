"""
NexaProc Documents - Numbering Engine
=======================================
Next number = max(sequence of every recognised number for the target
year, across all accepted variants) + 1.

Stateless: the caller supplies the existing numbers and the issue time.
Callers that write the number must hold the numbering critical section
of their record store so two writers cannot pick the same sequence.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from core.documents.numbering.models import NumberingPolicy
from core.documents.numbering.parser import ParsedNumber, parse_document_number


def max_sequence_for_year(
    existing_numbers: Iterable,
    policy: NumberingPolicy,
    year: int,
) -> int:
    highest = 0
    for raw in existing_numbers:
        parsed = parse_document_number(raw, policy)
        if isinstance(parsed, ParsedNumber) and parsed.year == year:
            highest = max(highest, parsed.sequence)
    return highest


def next_sequence(
    existing_numbers: Iterable,
    policy: NumberingPolicy,
    year: int,
) -> int:
    return max_sequence_for_year(existing_numbers, policy, year) + 1


def next_document_number(
    existing_numbers: Iterable,
    *,
    policy: NumberingPolicy,
    issued_at: datetime,
) -> str:
    if not isinstance(issued_at, datetime):
        raise ValueError("issued_at must be datetime.")
    sequence = next_sequence(existing_numbers, policy, issued_at.year)
    return policy.format_number(sequence, issued_at)
