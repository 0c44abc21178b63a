"""
VTEX catalog API client.

Thin GET wrapper, one method per entity-by-key endpoint. A 404 raises
CatalogNotFoundError, any other non-2xx (or a transport failure) raises
CatalogRemoteError. Successful responses are returned as decoded JSON.
"""

from typing import Any, Optional
import requests
import structlog

from config.settings import settings
from exceptions import (
    CatalogNotFoundError,
    CatalogRemoteError,
    CatalogNotConfiguredError,
)

logger = structlog.get_logger(__name__)


# Endpoint templates, relative to the store host
PRODUCT_BY_REF_ID = "/api/catalog_system/pvt/products/productgetbyrefid/{ref_id}"
BRAND_BY_ID = "/api/catalog_system/pvt/brand/{brand_id}"
CATEGORY_BY_ID = "/api/catalog/pvt/category/{category_id}"
SKUS_BY_PRODUCT_ID = "/api/catalog_system/pvt/sku/stockkeepingunitByProductId/{product_id}"
IMAGES_BY_SKU_ID = "/api/catalog/pvt/stockkeepingunit/{sku_id}/file"
STOCK_BY_SKU_ID = "/api/logistics/pvt/inventory/skus/{sku_id}"
SPECIFICATIONS_BY_PRODUCT_ID = "/api/catalog_system/pvt/products/{product_id}/specification"


class CatalogClient:
    """
    Remote catalog collaborator.

    Credentials are fixed at construction time and sent as headers on every
    request through one shared requests.Session.
    """

    def __init__(
        self,
        base_url: str,
        app_key: str,
        app_token: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-VTEX-API-AppKey": app_key,
            "X-VTEX-API-AppToken": app_token,
        })

    @classmethod
    def from_settings(cls) -> "CatalogClient":
        """Build a client from VTEX_* settings."""
        if not settings.catalog_configured:
            logger.warning(
                "catalog_not_configured",
                has_account=bool(settings.vtex_account_name),
                has_key=bool(settings.vtex_app_key),
                has_token=bool(settings.vtex_app_token)
            )
            raise CatalogNotConfiguredError()

        return cls(
            base_url=settings.catalog_base_url,
            app_key=settings.vtex_app_key,
            app_token=settings.vtex_app_token,
            timeout=settings.catalog_timeout_seconds,
        )

    # ===================
    # ENDPOINTS
    # ===================

    def get_product_by_ref_id(self, ref_id: str) -> dict:
        return self._get(PRODUCT_BY_REF_ID.format(ref_id=ref_id), "Product", ref_id)

    def get_brand(self, brand_id: int) -> dict:
        return self._get(BRAND_BY_ID.format(brand_id=brand_id), "Brand", brand_id)

    def get_category(self, category_id: int) -> dict:
        return self._get(CATEGORY_BY_ID.format(category_id=category_id), "Category", category_id)

    def get_skus_by_product_id(self, product_id: int) -> list:
        return self._get(SKUS_BY_PRODUCT_ID.format(product_id=product_id), "Skus", product_id)

    def get_images_by_sku_id(self, sku_id: int) -> list:
        return self._get(IMAGES_BY_SKU_ID.format(sku_id=sku_id), "Images", sku_id)

    def get_stock_by_sku_id(self, sku_id: int) -> dict:
        return self._get(STOCK_BY_SKU_ID.format(sku_id=sku_id), "Stock", sku_id)

    def get_product_specifications(self, product_id: int) -> list:
        return self._get(
            SPECIFICATIONS_BY_PRODUCT_ID.format(product_id=product_id),
            "Attributes",
            product_id
        )

    # ===================
    # TRANSPORT
    # ===================

    def _get(self, path: str, resource: str, identifier: Any) -> Any:
        """
        GET one endpoint and decode the JSON body.

        Raises:
            CatalogNotFoundError: On 404
            CatalogRemoteError: On any other non-2xx, or when no response arrived
        """
        url = f"{self.base_url}{path}"
        logger.debug("catalog_request", resource=resource, id=identifier)

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(
                "catalog_request_failed",
                resource=resource,
                id=identifier,
                error=str(e),
                error_type=type(e).__name__
            )
            raise CatalogRemoteError(resource, identifier, reason=str(e)) from e

        if response.status_code == 404:
            logger.info("catalog_not_found", resource=resource, id=identifier)
            raise CatalogNotFoundError(resource, identifier)

        if not response.ok:
            logger.error(
                "catalog_error_response",
                resource=resource,
                id=identifier,
                status=response.status_code
            )
            raise CatalogRemoteError(resource, identifier, status=response.status_code)

        return response.json()


# Singleton instance for convenience
_catalog_client: Optional[CatalogClient] = None

def get_catalog_client() -> CatalogClient:
    """Get or create the shared CatalogClient."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = CatalogClient.from_settings()
    return _catalog_client
