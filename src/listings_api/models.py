from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, TypedDict, Union

# A record as returned by the upstream backend (one JSON object).
Record = Dict[str, Any]

DateValue = Union[str, datetime, date, int, float, None]

# PUBLIC_INTERFACE
FilterPredicate = Callable[[Any], bool]

# PUBLIC_INTERFACE
DateAccessor = Callable[[Any], DateValue]


# PUBLIC_INTERFACE
class NormalizedPage(TypedDict):
    """
    A single page of a list resource as handed to callers.

    Fields:
    - data: Filtered records, most recent first
    - total: Estimated number of valid records (never below offset + len(data))
    - limit: Page size in effect, or None when no page size was requested
    - offset: Zero-based index of the first record of this page

    `len(data) <= limit` is not guaranteed; the upstream backend may return
    more records than were asked for.
    """

    data: List[Any]
    total: int
    limit: Optional[int]
    offset: int
