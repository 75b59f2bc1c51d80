import pytest

pytestmark = pytest.mark.integration


class TestOpenAPISchema:
    def test_schema_is_public(self, client):
        response = client.get("/api/schema/", HTTP_ACCEPT="application/json")
        assert response.status_code == 200

    def test_schema_lists_product_routes(self, client):
        schema = client.get("/api/schema/", HTTP_ACCEPT="application/json").json()
        assert "/api/v1/products/" in schema["paths"]
        assert "/api/v1/products/{id}/price/" in schema["paths"]
