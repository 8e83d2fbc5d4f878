from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..actions import InvalidIdentifierError, get_record, list_records, search_invoices
from ..reconcile import PageRequest
from ..resources import LIST_RESOURCES, ResourceConfig
from ..schemas import InvoiceSearchCriteria, PageOut
from ..sources import Source, get_source

router = APIRouter(
    prefix="/api/v1",
    tags=["listings"],
)


def _get_source(source: Source = Depends(get_source)) -> Source:
    """
    Dependency wrapper for the upstream source to keep signatures clean.
    """
    return source


# PUBLIC_INTERFACE
@router.get(
    "/invoices/search",
    response_model=PageOut,
    summary="Search Invoices",
    description=(
        "Search invoices on the upstream backend. Voided invoices are always removed "
        "from the result and the total is re-estimated accordingly. A search without "
        "any criterion returns an empty page."
    ),
    responses={
        200: {"description": "Search completed"},
        502: {"description": "Upstream backend failed"},
    },
)
def search_invoices_endpoint(
    limit: Optional[int] = Query(None, ge=0, le=1000, description="Maximum number of items to return"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    code: Optional[str] = Query(None, description="Exact invoice code"),
    code_like: Optional[str] = Query(None, description="Partial invoice code"),
    client_id: Optional[int] = Query(None, description="Client identifier"),
    employee_id: Optional[int] = Query(None, description="Employee identifier"),
    warehouse: Optional[str] = Query(None, description="Warehouse name"),
    currency_id: Optional[int] = Query(None, description="Currency identifier"),
    payment_type_id: Optional[int] = Query(None, description="Payment type identifier"),
    status_: Optional[str] = Query(None, alias="status", description="Invoice status"),
    voided: Optional[bool] = Query(None, description="Voided flag forwarded to the backend"),
    date_from: Optional[date] = Query(None, description="Lower bound on invoice date"),
    date_to: Optional[date] = Query(None, description="Upper bound on invoice date (inclusive)"),
    min_total: Optional[Decimal] = Query(None, description="Minimum invoice total"),
    max_total: Optional[Decimal] = Query(None, description="Maximum invoice total"),
    source: Source = Depends(_get_source),
) -> PageOut:
    """
    Search invoices with pagination.
    """
    criteria = InvoiceSearchCriteria(
        code=code,
        code_like=code_like,
        client_id=client_id,
        employee_id=employee_id,
        warehouse=warehouse,
        currency_id=currency_id,
        payment_type_id=payment_type_id,
        status=status_,
        voided=voided,
        date_from=date_from,
        date_to=date_to,
        min_total=min_total,
        max_total=max_total,
    )
    page = search_invoices(source, criteria, PageRequest(limit=limit, offset=offset))
    return PageOut(**page)


def _register(resource: ResourceConfig) -> None:
    """Add the list and get-by-id routes for one resource."""

    def list_endpoint(
        limit: Optional[int] = Query(None, ge=0, le=1000, description="Maximum number of items to return"),
        offset: int = Query(0, ge=0, description="Number of items to skip"),
        q: Optional[str] = Query(None, description="Search text forwarded to the backend"),
        status_: Optional[str] = Query(None, alias="status", description="Status filter forwarded to the backend"),
        source: Source = Depends(_get_source),
    ) -> PageOut:
        page = list_records(source, resource, PageRequest(limit=limit, offset=offset), q=q, status=status_)
        return PageOut(**page)

    def get_endpoint(record_id: int, source: Source = Depends(_get_source)) -> Dict[str, Any]:
        try:
            record = get_record(source, resource, record_id)
        except InvalidIdentifierError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource.label} not found")
        return record

    router.add_api_route(
        f"/{resource.name}/",
        list_endpoint,
        methods=["GET"],
        response_model=PageOut,
        name=f"list_{resource.name}",
        summary=f"List {resource.name.capitalize()}",
        description=(
            f"List {resource.name} newest first. Bare-array and envelope responses from the "
            "backend are normalized into one pagination envelope."
        ),
        responses={
            200: {"description": "List retrieved successfully"},
            502: {"description": "Upstream backend failed"},
        },
    )
    router.add_api_route(
        f"/{resource.name}/{{record_id}}",
        get_endpoint,
        methods=["GET"],
        name=f"get_{resource.name}",
        summary=f"Get {resource.label}",
        description=f"Get a single {resource.label.lower()} by ID.",
        responses={
            200: {"description": f"{resource.label} found"},
            400: {"description": "Invalid identifier"},
            404: {"description": f"{resource.label} not found"},
        },
    )


for _resource in LIST_RESOURCES.values():
    _register(_resource)
