"""
Parsing of the free-text ``sets``/``reps`` fields of a routine.

Routine authors type things like ``"3"``, ``"3-4"``, ``"8 - 12"``, ``"AMRAP"``
or ``"To failure"``. The text is stored untouched; this module turns it into a
tagged value at the point where a number is needed.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

_RANGE = re.compile(r"^\s*(\d+)\s*[-–]\s*(\d+)\s*$")
_FIXED = re.compile(r"^\s*(\d+)\s*$")


@dataclass(frozen=True, slots=True)
class Fixed:
    value: int


@dataclass(frozen=True, slots=True)
class Range:
    low: int
    high: int


@dataclass(frozen=True, slots=True)
class Text:
    text: str


Prescription = Union[Fixed, Range, Text]


def parse_prescription(raw: str | None) -> Prescription | None:
    if raw is None or not raw.strip():
        return None
    m = _FIXED.match(raw)
    if m:
        return Fixed(int(m.group(1)))
    m = _RANGE.match(raw)
    if m:
        lo, hi = int(m.group(1)), int(m.group(2))
        return Range(min(lo, hi), max(lo, hi))
    return Text(raw.strip())


MAX_PLACEHOLDER_SETS = 20


def placeholder_count(raw: str | None, default: int = 3) -> int:
    """Number of empty sets to create for a routine slot.

    Only a plain integer between 1 and ``MAX_PLACEHOLDER_SETS`` is honoured;
    ranges, tokens and out-of-range counts fall back to ``default``.
    """
    parsed = parse_prescription(raw)
    if isinstance(parsed, Fixed) and 1 <= parsed.value <= MAX_PLACEHOLDER_SETS:
        return parsed.value
    return default
