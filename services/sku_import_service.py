"""
SKU import service.

SKUs are fetched by the owning product's remote id and upserted one by one
under their own remote id.
"""

from typing import Any
import structlog

from exceptions import CatalogNotFoundError, CatalogRemoteError, StoreError
from models.catalog import RemoteSku
from models.imports import Stage, CollectionData, CollectionImportResult
from services.base_import_service import BaseImportService

logger = structlog.get_logger(__name__)


class SkuImportService(BaseImportService):
    """Import every SKU of a product."""

    stage = Stage.SKUS
    resource = "Skus"
    table = "skus"

    def _to_row(self, sku: RemoteSku) -> dict[str, Any]:
        return {
            "product_id": sku.product_id,
            "name": sku.name,
            "is_active": sku.is_active,
            "ref_id": sku.ref_id,
            "is_kit": sku.is_kit,
            "height": sku.height,
            "width": sku.width,
            "length": sku.length,
            "weight_kg": sku.weight_kg,
            "commercial_condition_id": sku.commercial_condition_id,
            "reward_value": sku.reward_value,
            "estimated_date_arrival": sku.estimated_date_arrival,
            "measurement_unit": sku.measurement_unit,
            "unit_multiplier": sku.unit_multiplier,
            "manufacturer_code": sku.manufacturer_code,
        }

    def import_by_key(self, product_id: int) -> CollectionImportResult:
        """
        Import the SKUs of one product.

        Args:
            product_id: Remote product id

        Returns:
            CollectionImportResult; data.items lists the SKUs in catalog order
        """
        logger.info("importing_skus", product_id=product_id)

        try:
            payload = self._fetch(self.client.get_skus_by_product_id, product_id)
        except (CatalogNotFoundError, CatalogRemoteError) as e:
            return self._collection_failure(e, product_id)

        skus = [RemoteSku.model_validate(item) for item in payload]

        imported = 0
        updated = 0
        try:
            for sku in skus:
                if self._upsert(self._to_row(sku), {"id": sku.id}):
                    imported += 1
                else:
                    updated += 1
        except StoreError as e:
            return self._collection_failure(e, product_id)

        logger.info(
            "skus_imported",
            product_id=product_id,
            imported=imported,
            updated=updated
        )

        return CollectionImportResult(
            success=True,
            message=f"{imported} SKUs imported, {updated} updated",
            data=CollectionData(
                source_key=product_id,
                imported_count=imported,
                updated_count=updated,
                items=[sku.model_dump() for sku in skus]
            )
        )
