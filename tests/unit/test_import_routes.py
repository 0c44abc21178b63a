"""
Unit tests for the /api/import routes.

Run: pytest tests/unit/test_import_routes.py -v
"""

import inspect
import pytest
from unittest.mock import patch

from config.settings import settings
from routes.imports import _run_fast_import
from services.admission_controller import AdmissionController
from services import import_progress_service

from tests.factories import load_product


GROUP_PAUSE = 0.05


@pytest.fixture
def routed_services(batch_service, fast_service):
    """Point the route module's service getters at the test doubles."""
    with patch("routes.imports.get_batch_import_service", return_value=batch_service):
        with patch("routes.imports.get_fast_batch_import_service", return_value=fast_service):
            yield batch_service, fast_service


class TestBatchRoute:
    """Tests for POST /api/import/batch"""

    def test_imports_and_summarizes(self, test_client, routed_services, catalog):
        load_product(catalog, images_by_sku={310002: 3})

        response = test_client.post(
            "/api/import/batch",
            json={"references": ["TROMOLM0090L1", "MISSING"]}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["summary"] == {"total": 2, "succeeded": 1, "failed": 1}
        first, second = body["results"]
        assert first["success"] is True
        assert first["image_sku_id"] == 310002
        assert first["stage_status"]["images"] == "succeeded"
        assert second["errors"][0]["kind"] == "not_found"

    def test_config_is_applied(self, test_client, routed_services, catalog):
        load_product(catalog)

        response = test_client.post(
            "/api/import/batch",
            json={"references": ["TROMOLM0090L1"], "config": {"import_stock": False}}
        )

        assert response.status_code == 200
        assert response.json()["results"][0]["stage_status"]["stock"] == "skipped"
        assert catalog.calls["get_stock_by_sku_id"] == 0

    def test_empty_list_rejected(self, test_client, routed_services):
        response = test_client.post("/api/import/batch", json={"references": []})

        assert response.status_code == 422

    def test_blank_references_rejected(self, test_client, routed_services):
        response = test_client.post("/api/import/batch", json={"references": ["  "]})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "IMPORT_REQUEST_INVALID"


class TestFastBatchRoute:
    """Tests for POST /api/import/batch-fast and GET /api/import/progress/{id}"""

    def test_background_import_reports_progress(self, test_client, routed_services, catalog):
        load_product(catalog)

        response = test_client.post(
            "/api/import/batch-fast",
            json={"references": ["TROMOLM0090L1", "MISSING"], "config": {"batch_size": 1}}
        )

        assert response.status_code == 202
        progress_id = response.json()["progress_id"]

        # TestClient runs background tasks before returning
        progress = test_client.get(f"/api/import/progress/{progress_id}")
        assert progress.status_code == 200
        body = progress.json()
        assert body["status"] == "completed"
        assert body["total"] == 2
        assert body["done"] == 2
        assert body["succeeded"] == 1
        assert body["failed"] == 1

    def test_unexpected_error_marks_progress_failed(self, test_client, routed_services):
        _, fast_service = routed_services

        with patch.object(fast_service, "import_many", side_effect=RuntimeError("boom")):
            response = test_client.post(
                "/api/import/batch-fast",
                json={"references": ["A"]}
            )

        progress_id = response.json()["progress_id"]
        body = test_client.get(f"/api/import/progress/{progress_id}").json()
        assert body["status"] == "failed"
        assert body["error"] == "boom"

    def test_swept_progress_record_does_not_stop_import(self, routed_services, catalog):
        """A progress record dropped mid-run leaves the import itself untouched."""
        load_product(catalog)
        stale = import_progress_service.create_progress(total=3, ttl_minutes=-1)
        import_progress_service.create_progress(total=1)

        _run_fast_import(stale.progress_id, ["TROMOLM0090L1"] * 3, None)

        assert catalog.calls["get_product_by_ref_id"] == 3

    def test_omitted_config_uses_settings_batch_size(self, test_client, routed_services, sleeps):
        with patch.object(settings, "fast_import_batch_size", 1):
            response = test_client.post(
                "/api/import/batch-fast",
                json={"references": ["A", "B"]}
            )

        assert response.status_code == 202
        assert sleeps == [GROUP_PAUSE]

    def test_unknown_progress_is_404(self, test_client):
        response = test_client.get("/api/import/progress/unknown")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "IMPORT_PROGRESS_NOT_FOUND"


class TestUtilityRoutes:
    """Tests for existence, cache and admission endpoints."""

    def test_existence(self, test_client, routed_services, store):
        store.seed("products", [{"id": 1, "ref_id": "A"}])

        response = test_client.post("/api/import/existence", json={"references": ["A", "B"]})

        assert response.status_code == 200
        assert response.json() == {
            "existing": {"A": True, "B": False},
            "existing_count": 1,
            "missing_count": 1,
        }

    def test_existence_store_failure(self, test_client, routed_services, store):
        store.fail("products", "select")

        response = test_client.post("/api/import/existence", json={"references": ["A"]})

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "DATABASE_ERROR"

    def test_clear_cache(self, test_client, routed_services, catalog):
        _, fast_service = routed_services
        load_product(catalog, ref_id="A", product_id=1, sku_ids=(10,))
        fast_service.import_many(["A"])

        response = test_client.post("/api/import/cache/clear")

        assert response.status_code == 200
        assert response.json() == {"cleared": {"brands": 1, "categories": 1}}
        assert fast_service.cache_stats() == {"brands": 0, "categories": 0}

    def test_service_backed_routes_run_in_threadpool(self):
        """Routes that may build the fast importer must not block the event loop."""
        from routes import imports

        assert not inspect.iscoroutinefunction(imports.clear_import_cache)
        assert not inspect.iscoroutinefunction(imports.get_import_progress)
        assert not inspect.iscoroutinefunction(imports.check_existence)

    def test_admission_status(self, test_client):
        controller = AdmissionController(4)
        controller.acquire()

        with patch("routes.imports.get_admission_controller", return_value=controller):
            response = test_client.get("/api/import/admission")

        assert response.status_code == 200
        assert response.json() == {"in_flight": 1, "queued": 0, "ceiling": 4}

    def test_catalog_not_configured(self, test_client):
        from exceptions import CatalogNotConfiguredError

        with patch(
            "routes.imports.get_batch_import_service",
            side_effect=CatalogNotConfiguredError()
        ):
            response = test_client.post("/api/import/batch", json={"references": ["A"]})

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "CATALOG_ERROR"
