"""
Field Mapper — header-keyed raw cells → customer candidate.

Header semantics are assigned by case-insensitive substring match:

    "name"                    → name
    "email"                   → email
    "phone"                   → phone
    "amount" | "outstanding"  → outstanding_amount   (float, 0 on failure)
    "overdue" | "days"        → days_overdue         (int, 0 on failure)

Matching is non-exclusive (one header can feed several fields) and columns are
applied in header order, so when several columns match the same field the LAST
one wins.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Optional

import structlog

from app.ingestion.parser import RawRow

logger = structlog.get_logger()


# Ordered: (field, substrings). Order only affects the column plan layout,
# never which value wins — that is decided by header order.
FIELD_PATTERNS: list[tuple[str, tuple[str, ...]]] = [
    ("name", ("name",)),
    ("email", ("email",)),
    ("phone", ("phone",)),
    ("outstanding_amount", ("amount", "outstanding")),
    ("days_overdue", ("overdue", "days")),
]

NUMERIC_FIELDS = ("outstanding_amount", "days_overdue")

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")


@dataclass
class CustomerCandidate:
    owner_id: str
    row_index: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    outstanding_amount: float = 0.0
    days_overdue: int = 0
    defaulted_fields: list[str] = field(default_factory=list)

    @property
    def needs_review(self) -> bool:
        return bool(self.defaulted_fields)


def parse_amount(value: str) -> Optional[float]:
    """
    Lenient decimal parse: accepts a leading numeric prefix ("12.5 EUR" → 12.5).
    Returns None when nothing numeric is found.
    """
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return None
    number = float(match.group(0))
    if not math.isfinite(number):
        return None
    return max(number, 0.0)


def parse_days(value: str) -> Optional[int]:
    """Lenient integer parse: "45.9" → 45, "30 days" → 30."""
    match = _INT_PREFIX.match(value)
    if not match:
        return None
    return max(int(match.group(0)), 0)


def match_fields(header: str) -> list[str]:
    header = header.strip().lower()
    return [name for name, needles in FIELD_PATTERNS if any(n in header for n in needles)]


class FieldMapper:
    """
    Built once per file from its header row, then applied to every data row.
    """

    def __init__(self, headers: list[str]):
        self.headers = [h.strip().lower() for h in headers]
        self.column_plan: list[tuple[int, list[str]]] = [
            (index, match_fields(header)) for index, header in enumerate(self.headers)
        ]
        self.duplicate_matches = self._find_duplicate_matches()
        for field_name, columns in self.duplicate_matches.items():
            logger.warning(
                "duplicate_header_match",
                field=field_name,
                headers=columns,
                winner=columns[-1],
            )

    def _find_duplicate_matches(self) -> dict[str, list[str]]:
        by_field: dict[str, list[str]] = {}
        for index, fields in self.column_plan:
            for field_name in fields:
                by_field.setdefault(field_name, []).append(self.headers[index])
        return {k: v for k, v in by_field.items() if len(v) > 1}

    def map_row(self, row: RawRow, owner_id: str) -> CustomerCandidate:
        values: dict[str, str] = {}
        for index, fields in self.column_plan:
            value = row.cells[index].strip() if index < len(row.cells) else ""
            for field_name in fields:
                values[field_name] = value  # later column overwrites

        candidate = CustomerCandidate(
            owner_id=owner_id,
            row_index=row.row_index,
            name=values.get("name") or f"Customer {row.row_index}",
            email=values.get("email") or None,
            phone=values.get("phone") or None,
        )

        if "outstanding_amount" in values:
            amount = parse_amount(values["outstanding_amount"])
            if amount is None:
                candidate.defaulted_fields.append("outstanding_amount")
            else:
                candidate.outstanding_amount = amount

        if "days_overdue" in values:
            days = parse_days(values["days_overdue"])
            if days is None:
                candidate.defaulted_fields.append("days_overdue")
            else:
                candidate.days_overdue = days

        return candidate
