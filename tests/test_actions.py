import pytest

from listings_api.actions import InvalidIdentifierError, get_record, list_records, search_invoices
from listings_api.reconcile import PageRequest
from listings_api.resources import INVOICE_SEARCH, INVOICES, ITEMS, QUOTES, get_resource
from listings_api.schemas import InvoiceSearchCriteria
from listings_api.sources import InMemorySource


def invoice(i, fecha, anulada=False, estado="PENDIENTE"):
    return {"idFactura": i, "fecha": fecha, "anulada": anulada, "estado": estado}


class TestResourceConfig:
    def test_lookup_by_name(self):
        assert get_resource("quotes") is QUOTES
        assert get_resource("invoices") is INVOICES
        assert get_resource("items") is ITEMS
        with pytest.raises(KeyError):
            get_resource("invoice-search")

    def test_offset_based_pagination_params(self):
        assert QUOTES.pagination_params(None, 0) == {}
        assert QUOTES.pagination_params(10, 0) == {"limit": 10, "offset": 0}
        assert QUOTES.pagination_params(None, 5) == {"offset": 5}

    def test_page_based_pagination_params(self):
        assert INVOICE_SEARCH.pagination_params(10, 0) == {"limit": 10, "page": 1}
        assert INVOICE_SEARCH.pagination_params(10, 25) == {"limit": 10, "page": 3}
        assert INVOICE_SEARCH.pagination_params(None, 25) == {}

    def test_items_sort_by_creation_date(self):
        record = {"idItem": 1, "fechaCreacion": "2024-01-01"}
        assert ITEMS.date_accessor(record) == "2024-01-01"
        assert ITEMS.date_accessor("not a record") is None


class TestListRecords:
    def test_forwards_search_and_status_and_window(self):
        source = InMemorySource({"/cotizaciones": []})
        list_records(source, QUOTES, PageRequest(limit=5, offset=10), q="  taller  ", status="GENERADA")
        assert source.calls == [
            ("/cotizaciones", {"q": "taller", "estado": "GENERADA", "limit": 5, "offset": 10})
        ]

    def test_blank_search_is_not_forwarded(self):
        source = InMemorySource()
        list_records(source, QUOTES, q="   ")
        assert source.calls == [("/cotizaciones", {})]

    def test_invoices_drop_voided_and_sort_newest_first(self):
        source = InMemorySource(
            {
                "/facturas": [
                    invoice(1, "2024-01-10"),
                    invoice(2, "2024-03-10", anulada=True),
                    invoice(3, "2024-02-10"),
                    invoice(4, "2024-04-10", estado="ANULADA"),
                ]
            }
        )
        page = list_records(source, INVOICES)
        assert [r["idFactura"] for r in page["data"]] == [3, 1]
        assert page["total"] == 2

    def test_quotes_keep_every_record(self):
        source = InMemorySource(
            {"/cotizaciones": {"data": [{"idCotizacion": 1, "estado": "ANULADA"}], "total": 1}}
        )
        page = list_records(source, QUOTES, PageRequest(limit=10))
        assert len(page["data"]) == 1
        assert page["total"] == 1


class TestSearchInvoices:
    def test_no_criteria_skips_backend(self):
        source = InMemorySource({"/facturas/search": [invoice(1, "2024-01-01")]})
        page = search_invoices(source, InvoiceSearchCriteria(code="   "), PageRequest(limit=10, offset=0))
        assert page == {"data": [], "total": 0, "limit": 10, "offset": 0}
        assert source.calls == []

    def test_criteria_mapped_to_backend_params(self):
        source = InMemorySource({"/facturas/search": {"data": [], "total": 0}})
        criteria = InvoiceSearchCriteria(
            code="F-001",
            client_id=42,
            currency_id=0,
            payment_type_id=3,
            voided=False,
            date_from="2025-01-01",
            date_to="2025-01-31",
            min_total="100.50",
        )
        search_invoices(source, criteria, PageRequest(limit=20, offset=40))
        path, params = source.calls[0]
        assert path == "/facturas/search"
        assert params == {
            "codigo_factura": "F-001",
            "id_cliente": 42,
            "id_tipo_pago": 3,
            "anulada": False,
            "dateFrom": "2025-01-01",
            "dateTo": "2025-01-31T23:59:59",
            "minTotal": "100.50",
            "limit": 20,
            "page": 3,
        }

    def test_warehouse_forwarded_by_name(self):
        criteria = InvoiceSearchCriteria(warehouse="  Central  ")
        assert criteria.has_criteria()
        assert criteria.to_upstream_params() == {"bodegaNombre": "Central"}

    def test_datetime_upper_bound_is_kept(self):
        criteria = InvoiceSearchCriteria(status="PAGADO", date_to="2025-01-31T12:00:00")
        assert criteria.to_upstream_params()["dateTo"] == "2025-01-31T12:00:00"

    def test_invalid_date_rejected(self):
        with pytest.raises(ValueError):
            InvoiceSearchCriteria(date_from="31/01/2025")

    def test_search_results_are_reconciled(self):
        records = [invoice(i, f"2024-01-{i + 1:02d}", anulada=(i % 4 == 0)) for i in range(10)]
        source = InMemorySource({"/facturas/search": {"data": records, "total": 40, "limit": 10}})
        page = search_invoices(source, InvoiceSearchCriteria(client_id=7), PageRequest(limit=10))
        # 3 of 10 voided: ceil(40 * 0.7) = 28
        assert len(page["data"]) == 7
        assert page["total"] == 28

    def test_search_reads_meta_block(self):
        records = [invoice(i, f"2024-01-{i + 1:02d}") for i in range(10)]
        source = InMemorySource(
            {"/facturas/search": {"data": records, "meta": {"total": 100, "limit": 10, "page": 1}}}
        )
        page = search_invoices(source, InvoiceSearchCriteria(status="PAGADO"), PageRequest(limit=10))
        assert page["total"] == 100
        assert page["limit"] == 10

    def test_misaligned_offset_snaps_to_page_start(self):
        source = InMemorySource({"/facturas/search": [invoice(i, "2024-01-01") for i in range(10)]})
        page = search_invoices(source, InvoiceSearchCriteria(client_id=1), PageRequest(limit=10, offset=25))
        assert source.calls[0][1]["page"] == 3
        assert page["offset"] == 20
        assert page["total"] >= page["offset"] + len(page["data"])


class TestGetRecord:
    @pytest.mark.parametrize("bad_id", [0, -1, "12", 1.5, None, True])
    def test_invalid_id_fails_before_fetch(self, bad_id):
        source = InMemorySource()
        with pytest.raises(InvalidIdentifierError):
            get_record(source, INVOICES, bad_id)
        assert source.calls == []

    def test_found_and_missing(self):
        source = InMemorySource({"/items": {"data": [{"idItem": 5, "descripcion": "Filtro"}]}})
        assert get_record(source, ITEMS, 5) == {"idItem": 5, "descripcion": "Filtro"}
        assert get_record(source, ITEMS, 6) is None
