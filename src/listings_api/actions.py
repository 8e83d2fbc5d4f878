"""
List and lookup actions for the upstream resources.

Each action builds the upstream query, fetches the raw payload through a
Source and hands it to the reconciliation engine. Transport errors raised by
the source are not caught here.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .models import NormalizedPage, Record
from .reconcile import PageRequest, assemble_page, normalize_list
from .resources import INVOICE_SEARCH, ResourceConfig
from .schemas import InvoiceSearchCriteria
from .sources import Source

logger = logging.getLogger(__name__)


class InvalidIdentifierError(ValueError):
    """Raised before any upstream call when a record id cannot be valid."""


def _fetch_and_normalize(
    source: Source, resource: ResourceConfig, request: PageRequest, params: Dict[str, Any]
) -> NormalizedPage:
    if resource.page_based and request.limit:
        # The backend can only start pages at multiples of limit.
        request = PageRequest(limit=request.limit, offset=request.offset - request.offset % request.limit)
    params.update(resource.pagination_params(request.limit, request.offset))
    raw = source.fetch_list(resource.path, params)
    page = normalize_list(raw, request, resource.predicate, resource.date_accessor)
    logger.info(
        "%s: %d records, total=%d limit=%s offset=%d",
        resource.name, len(page["data"]), page["total"], page["limit"], page["offset"],
    )
    return page


# PUBLIC_INTERFACE
def list_records(
    source: Source,
    resource: ResourceConfig,
    request: Optional[PageRequest] = None,
    q: Optional[str] = None,
    status: Optional[str] = None,
) -> NormalizedPage:
    """
    List one page of a resource.

    `q` and `status` are forwarded to the backend as `q` and `estado`; the
    engine does not interpret them.
    """
    req = request or PageRequest()
    params: Dict[str, Any] = {}
    if q and q.strip():
        params["q"] = q.strip()
    if status:
        params["estado"] = status
    return _fetch_and_normalize(source, resource, req, params)


# PUBLIC_INTERFACE
def search_invoices(
    source: Source,
    criteria: InvoiceSearchCriteria,
    request: Optional[PageRequest] = None,
) -> NormalizedPage:
    """
    Search invoices; voided invoices are always dropped from the results.

    Without any criterion the backend is not contacted and an empty page is
    returned.
    """
    req = request or PageRequest()
    if not criteria.has_criteria():
        return assemble_page([], req.limit, req.offset, 0)
    return _fetch_and_normalize(source, INVOICE_SEARCH, req, criteria.to_upstream_params())


# PUBLIC_INTERFACE
def get_record(source: Source, resource: ResourceConfig, record_id: Any) -> Optional[Record]:
    """
    Fetch a single record by id.

    Raises:
        InvalidIdentifierError: if record_id is not a positive integer.
    """
    if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id <= 0:
        raise InvalidIdentifierError(f"Invalid {resource.label.lower()} id: {record_id!r}")
    return source.fetch_one(resource.path, record_id, resource.id_field)
