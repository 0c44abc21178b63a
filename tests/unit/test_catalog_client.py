"""
Unit tests for CatalogClient.

Run: pytest tests/unit/test_catalog_client.py -v
"""

import pytest
import requests
from unittest.mock import patch, MagicMock

from integrations.catalog_client import CatalogClient
from exceptions import CatalogNotFoundError, CatalogRemoteError, CatalogNotConfiguredError


BASE_URL = "https://acme.vtexcommercestable.com.br"


def make_response(status_code: int, body=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.json.return_value = body
    return response


@pytest.fixture
def session() -> requests.Session:
    return requests.Session()


@pytest.fixture
def client(session) -> CatalogClient:
    return CatalogClient(BASE_URL, "app-key", "app-token", timeout=12.0, session=session)


class TestCatalogClientRequests:
    """Tests for URL building and headers."""

    def test_sets_auth_headers_on_session(self, client, session):
        assert session.headers["X-VTEX-API-AppKey"] == "app-key"
        assert session.headers["X-VTEX-API-AppToken"] == "app-token"
        assert session.headers["Accept"] == "application/json"

    @pytest.mark.parametrize("method, key, path", [
        ("get_product_by_ref_id", "TROMOLM0090L1",
         "/api/catalog_system/pvt/products/productgetbyrefid/TROMOLM0090L1"),
        ("get_brand", 500, "/api/catalog_system/pvt/brand/500"),
        ("get_category", 900, "/api/catalog/pvt/category/900"),
        ("get_skus_by_product_id", 2000024,
         "/api/catalog_system/pvt/sku/stockkeepingunitByProductId/2000024"),
        ("get_images_by_sku_id", 310002, "/api/catalog/pvt/stockkeepingunit/310002/file"),
        ("get_stock_by_sku_id", 310002, "/api/logistics/pvt/inventory/skus/310002"),
        ("get_product_specifications", 2000024,
         "/api/catalog_system/pvt/products/2000024/specification"),
    ])
    def test_endpoint_urls(self, client, session, method, key, path):
        """Should GET the entity endpoint with the configured timeout."""
        with patch.object(session, "get", return_value=make_response(200, {"ok": True})) as get:
            result = getattr(client, method)(key)

        get.assert_called_once_with(BASE_URL + path, timeout=12.0)
        assert result == {"ok": True}

    def test_strips_trailing_slash_from_base_url(self, session):
        client = CatalogClient(BASE_URL + "/", "k", "t", session=session)

        with patch.object(session, "get", return_value=make_response(200, {})) as get:
            client.get_brand(1)

        assert get.call_args[0][0] == BASE_URL + "/api/catalog_system/pvt/brand/1"


class TestCatalogClientErrors:
    """Tests for status code mapping."""

    def test_404_raises_not_found(self, client, session):
        with patch.object(session, "get", return_value=make_response(404)):
            with pytest.raises(CatalogNotFoundError) as exc_info:
                client.get_product_by_ref_id("MISSING")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "CATALOG_PRODUCT_NOT_FOUND"
        assert "MISSING" in exc_info.value.message

    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    def test_other_errors_raise_remote_error(self, client, session, status):
        with patch.object(session, "get", return_value=make_response(status)):
            with pytest.raises(CatalogRemoteError) as exc_info:
                client.get_brand(500)

        assert exc_info.value.status == status
        assert f"status {status}" in exc_info.value.message

    def test_transport_failure_raises_remote_error_without_status(self, client, session):
        with patch.object(session, "get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(CatalogRemoteError) as exc_info:
                client.get_stock_by_sku_id(1)

        assert exc_info.value.status is None
        assert "refused" in exc_info.value.message


class TestCatalogClientFromSettings:
    """Tests for CatalogClient.from_settings()"""

    def test_missing_credentials_raise(self):
        with patch("integrations.catalog_client.settings") as mock_settings:
            mock_settings.catalog_configured = False

            with pytest.raises(CatalogNotConfiguredError):
                CatalogClient.from_settings()

    def test_builds_from_settings(self):
        with patch("integrations.catalog_client.settings") as mock_settings:
            mock_settings.catalog_configured = True
            mock_settings.catalog_base_url = BASE_URL
            mock_settings.vtex_app_key = "key"
            mock_settings.vtex_app_token = "token"
            mock_settings.catalog_timeout_seconds = 7.0

            client = CatalogClient.from_settings()

        assert client.base_url == BASE_URL
        assert client.timeout == 7.0
        assert client.session.headers["X-VTEX-API-AppKey"] == "key"
