"""
List-response normalization and pagination-total reconciliation.

The upstream backend answers the same list request either with a bare JSON
array or with a `{data, total, limit, offset}` envelope. Records it still
returns may have to be dropped client-side (voided invoices), which makes the
reported `total` overstate the number of valid records. `normalize_list`
turns any such payload into a `NormalizedPage` whose `total` a pager can use
without advertising pages that cannot exist.

Everything here is pure and synchronous; no I/O happens in this module.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .models import DateAccessor, DateValue, FilterPredicate, NormalizedPage

logger = logging.getLogger(__name__)

ENVELOPE = "envelope"
ARRAY = "array"


@dataclass(frozen=True)
class PageRequest:
    """
    The window a caller asks for.

    limit=None means no explicit page size was requested.
    """
    limit: Optional[int] = None
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be >= 0")
        if self.offset < 0:
            raise ValueError("offset must be >= 0")

    @property
    def is_paginated(self) -> bool:
        return self.limit is not None or self.offset > 0


@dataclass(frozen=True)
class DetectedShape:
    """Classification of a raw list payload."""
    kind: str
    records: List[Any]
    total: Optional[int] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    recognized: bool = True


@dataclass(frozen=True)
class ReconcileContext:
    requested_offset: int
    original_count: int
    filtered_count: int
    source_had_envelope: bool
    requested_limit: Optional[int] = None
    backend_total: Optional[int] = None
    backend_limit: Optional[int] = None


# PUBLIC_INTERFACE
def keep_all(record: Any) -> bool:
    """Predicate for resources that need no client-side filtering."""
    return True


def _as_count(value: Any) -> Optional[int]:
    # bool is an int subclass but never a meaningful count
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


# PUBLIC_INTERFACE
def detect_shape(raw: Any) -> DetectedShape:
    """
    Classify a raw payload as an envelope or a bare array.

    - A mapping whose `data` is a list is an envelope; its total/limit/offset
      are kept when they are non-negative integers. Keys missing at the top
      level are read from a nested `meta` block, where a 1-based `page`
      stands in for the offset.
    - A list is a bare array.
    - Anything else degrades to an empty bare array.

    The payload itself is never mutated.
    """
    if isinstance(raw, Mapping) and isinstance(raw.get("data"), list):
        meta = raw.get("meta")
        if not isinstance(meta, Mapping):
            meta = {}
        total = _as_count(raw.get("total"))
        if total is None:
            total = _as_count(meta.get("total"))
        limit = _as_count(raw.get("limit"))
        if limit is None:
            limit = _as_count(meta.get("limit"))
        offset = _as_count(raw.get("offset"))
        if offset is None:
            offset = _as_count(meta.get("offset"))
        if offset is None:
            page = _as_count(meta.get("page"))
            if page and limit is not None:
                offset = (page - 1) * limit
        return DetectedShape(
            kind=ENVELOPE,
            records=list(raw["data"]),
            total=total,
            limit=limit,
            offset=offset,
        )
    if isinstance(raw, list):
        return DetectedShape(kind=ARRAY, records=list(raw))

    logger.warning("Unexpected list payload of type %s; treating as empty", type(raw).__name__)
    return DetectedShape(kind=ARRAY, records=[], recognized=False)


# PUBLIC_INTERFACE
def filter_records(records: Sequence[Any], predicate: FilterPredicate) -> Tuple[List[Any], int]:
    """Return the records the predicate keeps, in input order, and how many were dropped."""
    kept = [r for r in records if predicate(r)]
    return kept, len(records) - len(kept)


def to_timestamp(value: DateValue) -> float:
    """
    Convert a date-like value to a POSIX timestamp.

    Missing or unparseable values map to 0 so they sort as the oldest.
    Numbers are epoch milliseconds, strings are ISO8601; naive datetimes
    are read as UTC.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, datetime):
        dt = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
        return dt.timestamp()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp()
    if isinstance(value, (int, float)):
        return float(value) / 1000.0 if math.isfinite(value) else 0.0
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return 0.0
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return to_timestamp(datetime.fromisoformat(s))
        except ValueError:
            return 0.0
    return 0.0


# PUBLIC_INTERFACE
def sort_by_recency(records: Sequence[Any], date_accessor: DateAccessor) -> List[Any]:
    """Most recent first; ties keep their input order."""
    return sorted(records, key=lambda r: to_timestamp(date_accessor(r)), reverse=True)


# PUBLIC_INTERFACE
def reconcile_total(ctx: ReconcileContext) -> int:
    """
    Estimate the number of valid records behind a (possibly filtered) page.

    The result is never smaller than the coverage already observed
    (offset + filtered page size). When records were filtered out of a full
    page, the backend total is scaled by the page's valid rate; this is an
    estimate and can be off when voided records are unevenly spread.
    """
    coverage = ctx.requested_offset + ctx.filtered_count

    if not ctx.source_had_envelope and ctx.requested_limit is None and ctx.requested_offset == 0:
        return ctx.filtered_count

    if ctx.requested_limit is not None:
        effective_limit = ctx.requested_limit
    elif ctx.backend_limit is not None:
        effective_limit = ctx.backend_limit
    else:
        effective_limit = ctx.filtered_count

    removed = ctx.original_count - ctx.filtered_count
    page_full = effective_limit > 0 and ctx.original_count >= effective_limit
    # An overshooting page proves nothing about further pages.
    exact_fill = effective_limit > 0 and ctx.original_count == effective_limit

    # Short page from the backend: nothing lies beyond it.
    if ctx.original_count < effective_limit:
        return coverage

    if not ctx.backend_total:
        return coverage + effective_limit if exact_fill else coverage

    if removed > 0:
        if not page_full:
            return coverage
        # ceil(backend_total * filtered / original) in integer arithmetic
        estimated = -(-ctx.backend_total * ctx.filtered_count // ctx.original_count)
        logger.debug(
            "Extrapolated total %d from backend total %d (%d of %d valid)",
            estimated, ctx.backend_total, ctx.filtered_count, ctx.original_count,
        )
        return max(estimated, coverage + effective_limit)

    if ctx.backend_total <= coverage:
        return coverage + effective_limit if exact_fill else coverage
    if not page_full:
        return coverage
    return ctx.backend_total


# PUBLIC_INTERFACE
def assemble_page(data: List[Any], limit: Optional[int], offset: int, total: int) -> NormalizedPage:
    """Build the page handed to callers."""
    return {
        "data": data,
        "total": max(int(total), 0),
        "limit": limit,
        "offset": offset,
    }


# PUBLIC_INTERFACE
def normalize_list(
    raw: Any,
    request: Optional[PageRequest] = None,
    predicate: FilterPredicate = keep_all,
    date_accessor: Optional[DateAccessor] = None,
) -> NormalizedPage:
    """
    Normalize a raw list payload into a NormalizedPage.

    Args:
        raw: Bare array or `{data, total?, limit?, offset?}` envelope.
        request: The caller's page window.
        predicate: Keeps a record when it returns True.
        date_accessor: Returns the value records are sorted by (descending).
            When omitted, input order is kept.

    Envelope pages are trusted as one page and never re-sliced. A bare array
    longer than the requested limit is taken to be the full dataset and is
    sliced here.
    """
    req = request or PageRequest()
    shape = detect_shape(raw)
    if not shape.recognized:
        return assemble_page([], req.limit, req.offset, 0)

    # Records that are not JSON objects are dropped like filtered ones.
    kept, removed = filter_records(shape.records, lambda r: isinstance(r, Mapping) and predicate(r))
    ordered = sort_by_recency(kept, date_accessor) if date_accessor is not None else kept

    if shape.kind == ENVELOPE:
        offset = req.offset if req.is_paginated else (shape.offset or 0)
        limit = req.limit if req.limit is not None else shape.limit
        total = reconcile_total(
            ReconcileContext(
                requested_limit=req.limit,
                requested_offset=offset,
                backend_total=shape.total,
                backend_limit=shape.limit,
                original_count=len(shape.records),
                filtered_count=len(ordered),
                source_had_envelope=True,
            )
        )
        return assemble_page(ordered, limit, offset, total)

    if not req.is_paginated:
        return assemble_page(ordered, None, 0, len(ordered))

    if req.limit is not None and len(shape.records) <= req.limit:
        # The backend already paginated; this array is one page.
        total = reconcile_total(
            ReconcileContext(
                requested_limit=req.limit,
                requested_offset=req.offset,
                original_count=len(shape.records),
                filtered_count=len(ordered),
                source_had_envelope=False,
            )
        )
        return assemble_page(ordered, req.limit, req.offset, total)

    # The backend returned everything; paginate locally.
    end = req.offset + req.limit if req.limit is not None else None
    page = ordered[req.offset:end]
    logger.debug(
        "Sliced %d of %d records locally (removed %d)", len(page), len(ordered), removed
    )
    return assemble_page(page, req.limit, req.offset, max(len(ordered), req.offset + len(page)))
