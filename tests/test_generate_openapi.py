import json

from listings_api.generate_openapi import generate_openapi


def test_writes_schema_with_listing_routes(tmp_path):
    out = tmp_path / "interfaces" / "openapi.json"
    written = generate_openapi(str(out))
    assert written == str(out)

    schema = json.loads(out.read_text(encoding="utf-8"))
    paths = schema["paths"]
    for route in (
        "/api/v1/quotes/",
        "/api/v1/invoices/",
        "/api/v1/items/",
        "/api/v1/invoices/search",
        "/api/v1/items/{record_id}",
    ):
        assert route in paths
    assert {"health", "listings"} <= {t["name"] for t in schema["tags"]}
