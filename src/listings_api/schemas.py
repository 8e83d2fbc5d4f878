from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateInput = Union[date, datetime, str]


def _normalize_date(value: Optional[DateInput]) -> Optional[str]:
    """
    Normalize a date filter to the ISO string the upstream backend expects.
    - date/datetime values are rendered with isoformat()
    - strings must parse as ISO8601 date or datetime and are passed through trimmed
    """
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(
                "Invalid date format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
            ) from e
        return s
    raise ValueError("Invalid type for date; expected date, datetime, or ISO8601 string.")


# PUBLIC_INTERFACE
class PageOut(BaseModel):
    """
    Envelope for normalized list responses.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": [{"idFactura": 12, "fecha": "2025-01-31T10:00:00", "estado": "PAGADO"}],
                "total": 70,
                "limit": 10,
                "offset": 0,
            }
        }
    )

    data: List[Dict[str, Any]] = Field(..., description="Records of this page, most recent first")
    total: int = Field(..., ge=0, description="Estimated number of valid records")
    limit: Optional[int] = Field(default=None, description="Page size in effect, if any")
    offset: int = Field(..., ge=0, description="Zero-based index of the first record")


# PUBLIC_INTERFACE
class InvoiceSearchCriteria(BaseModel):
    """
    Criteria for the upstream invoice search.

    Every field is optional, but a search without any criterion returns an
    empty page without contacting the backend.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"client_id": 42, "date_from": "2025-01-01", "date_to": "2025-01-31"}
        }
    )

    code: Optional[str] = Field(default=None, description="Exact invoice code")
    code_like: Optional[str] = Field(default=None, description="Partial invoice code")
    client_id: Optional[int] = Field(default=None, description="Client identifier")
    employee_id: Optional[int] = Field(default=None, description="Employee identifier")
    warehouse: Optional[str] = Field(default=None, description="Warehouse name")
    currency_id: Optional[int] = Field(default=None, description="Currency identifier (forwarded when > 0)")
    payment_type_id: Optional[int] = Field(default=None, description="Payment type identifier (forwarded when > 0)")
    status: Optional[str] = Field(default=None, description="Invoice status")
    voided: Optional[bool] = Field(default=None, description="Voided flag forwarded to the backend")
    date_from: Optional[str] = Field(default=None, description="Lower bound on invoice date")
    date_to: Optional[str] = Field(default=None, description="Upper bound; a bare date covers the whole day")
    min_total: Optional[Decimal] = Field(default=None, description="Minimum invoice total")
    max_total: Optional[Decimal] = Field(default=None, description="Maximum invoice total")

    @field_validator("code", "code_like", "warehouse", "status")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        """
        Strip whitespace; blank strings count as not provided.
        """
        if v is None:
            return None
        s = v.strip()
        return s or None

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def parse_dates(cls, v: Optional[DateInput]) -> Optional[str]:
        return _normalize_date(v)

    def has_criteria(self) -> bool:
        return any(value is not None for value in self.model_dump().values())

    def to_upstream_params(self) -> Dict[str, Any]:
        """
        Map criteria onto the backend's query parameter names.
        """
        params: Dict[str, Any] = {}
        if self.code:
            params["codigo_factura"] = self.code
        if self.code_like:
            params["codigoLike"] = self.code_like
        if self.client_id is not None:
            params["id_cliente"] = self.client_id
        if self.employee_id is not None:
            params["id_empleado"] = self.employee_id
        if self.warehouse:
            params["bodegaNombre"] = self.warehouse
        if self.currency_id is not None and self.currency_id > 0:
            params["id_moneda"] = self.currency_id
        if self.payment_type_id is not None and self.payment_type_id > 0:
            params["id_tipo_pago"] = self.payment_type_id
        if self.status:
            params["estado"] = self.status
        if self.voided is not None:
            params["anulada"] = self.voided
        if self.date_from:
            params["dateFrom"] = self.date_from
        if self.date_to:
            # A bare date would exclude everything after midnight.
            params["dateTo"] = f"{self.date_to}T23:59:59" if _DATE_ONLY.match(self.date_to) else self.date_to
        if self.min_total is not None:
            params["minTotal"] = str(self.min_total)
        if self.max_total is not None:
            params["maxTotal"] = str(self.max_total)
        return params
