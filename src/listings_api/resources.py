from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .models import DateAccessor, DateValue, FilterPredicate
from .reconcile import keep_all


def field_accessor(name: str) -> DateAccessor:
    """Return a DateAccessor reading `name` from mapping records."""
    def _get(record: Any) -> DateValue:
        if isinstance(record, Mapping):
            return record.get(name)
        return None
    return _get


# PUBLIC_INTERFACE
def is_not_voided(record: Any) -> bool:
    """
    Keep an invoice unless it is voided.

    An invoice is voided when its `anulada` flag is True or its `estado`
    reads ANULADA (case-insensitive).
    """
    if not isinstance(record, Mapping):
        return True
    if record.get("anulada") is True:
        return False
    estado = record.get("estado")
    return not (isinstance(estado, str) and estado.upper() == "ANULADA")


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ResourceConfig:
    """
    Per-resource settings for the list engine and the upstream source.

    - name: URL segment used by this service (e.g. "quotes")
    - path: Upstream path relative to the backend base URL
    - id_field: Record key holding the primary identifier
    - date_field: Record key used for recency ordering
    - predicate: Client-side keep-filter the backend does not apply
    - page_based: Upstream expects `page` instead of `offset`
    - label: Human-readable singular used in error messages
    """
    name: str
    path: str
    id_field: str
    date_field: str
    label: str
    predicate: FilterPredicate = keep_all
    page_based: bool = False
    date_accessor: DateAccessor = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "date_accessor", field_accessor(self.date_field))

    def pagination_params(self, limit: Optional[int], offset: int) -> Dict[str, int]:
        """Upstream query parameters for the requested window."""
        params: Dict[str, int] = {}
        if limit is not None:
            params["limit"] = limit
        if self.page_based:
            if limit:
                params["page"] = offset // limit + 1
        elif offset or limit is not None:
            params["offset"] = offset
        return params


QUOTES = ResourceConfig(
    name="quotes",
    path="/cotizaciones",
    id_field="idCotizacion",
    date_field="fecha",
    label="Quote",
)

INVOICES = ResourceConfig(
    name="invoices",
    path="/facturas",
    id_field="idFactura",
    date_field="fecha",
    label="Invoice",
    predicate=is_not_voided,
)

ITEMS = ResourceConfig(
    name="items",
    path="/items",
    id_field="idItem",
    date_field="fechaCreacion",
    label="Item",
)

INVOICE_SEARCH = ResourceConfig(
    name="invoice-search",
    path="/facturas/search",
    id_field="idFactura",
    date_field="fecha",
    label="Invoice",
    predicate=is_not_voided,
    page_based=True,
)

LIST_RESOURCES: Dict[str, ResourceConfig] = {r.name: r for r in (QUOTES, INVOICES, ITEMS)}


# PUBLIC_INTERFACE
def get_resource(name: str) -> ResourceConfig:
    """Look up a list resource by name; raises KeyError for unknown names."""
    return LIST_RESOURCES[name]
