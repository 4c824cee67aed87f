"""Search, filter and paginate in-memory record sequences."""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .schemas import Page, PageMeta

ALL_SENTINEL = "all"


def _is_unconstrained(value: Any) -> bool:
    return value is None or value == "" or value == ALL_SENTINEL


def _matches_term(record: Mapping[str, Any], needle: str, search_fields: Iterable[str]) -> bool:
    for field_name in search_fields:
        value = record.get(field_name)
        if value is None or value == "":
            continue
        if needle in str(value).lower():
            return True
    return False


def filter_records(
    records: Sequence[Mapping[str, Any]],
    search_term: Optional[str],
    search_fields: Iterable[str],
    field_filters: Optional[Mapping[str, Any]] = None,
) -> List[Mapping[str, Any]]:
    """Return the records matching ``search_term`` and every field filter.

    The term matches when any of ``search_fields`` contains it, ignoring
    case. A filter value of ``"all"``, ``""`` or ``None`` places no
    constraint on its field. Input order is preserved.
    """

    fields = list(search_fields)
    needle = (search_term or "").lower()
    constraints = {
        name: expected
        for name, expected in (field_filters or {}).items()
        if not _is_unconstrained(expected)
    }

    filtered = []
    for record in records:
        if needle and not _matches_term(record, needle, fields):
            continue
        if any(record.get(name) != expected for name, expected in constraints.items()):
            continue
        filtered.append(record)
    return filtered


def paginate(records: Sequence[Mapping[str, Any]], page: int, limit: int) -> Page:
    """Slice ``records`` into a 1-indexed page.

    ``page`` and ``limit`` below 1 are clamped to 1; ``meta`` reports the
    clamped values. Pages past the end have empty ``data``.
    """

    page = max(1, int(page))
    limit = max(1, int(limit))
    total = len(records)
    start = (page - 1) * limit
    data = [dict(record) for record in records[start:start + limit]]
    meta = PageMeta(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit))
    return Page(data=data, meta=meta)
