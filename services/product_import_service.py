"""
Product import service.

Products are fetched by reference id (RefId) but stored under the catalog's
numeric product id, so re-importing a reference always hits the same row.
"""

from typing import Any
import structlog

from exceptions import StoreError
from models.catalog import RemoteProduct
from models.imports import Stage, EntityImportResult
from services.base_import_service import EntityImportService

logger = structlog.get_logger(__name__)


class ProductImportService(EntityImportService):
    """Fetch a product by reference and upsert it into products."""

    stage = Stage.PRODUCT
    resource = "Product"
    table = "products"
    payload_model = RemoteProduct

    def _fetch_remote(self, ref_id: str) -> dict:
        return self.client.get_product_by_ref_id(ref_id)

    def _to_row(self, product: RemoteProduct) -> dict[str, Any]:
        return {
            "name": product.name,
            "department_id": product.department_id,
            "category_id": product.category_id,
            "brand_id": product.brand_id,
            "link_id": product.link_id,
            "ref_id": product.ref_id,
            "is_visible": product.is_visible,
            "description": product.description,
            "description_short": product.description_short,
            "release_date": product.release_date,
            "keywords": product.keywords,
            "title": product.title,
            "is_active": product.is_active,
            "tax_code": product.tax_code,
            "meta_tag_description": product.meta_tag_description,
            "supplier_id": product.supplier_id,
            "show_without_stock": product.show_without_stock,
            "adwords_remarketing_code": product.adwords_remarketing_code,
            "lomadee_campaign_code": product.lomadee_campaign_code,
        }

    def import_by_reference(self, ref_id: str) -> EntityImportResult:
        """Import a product by its reference id."""
        return self.import_by_key(ref_id)

    def get_existing_references(self, references: list[str]) -> dict[str, bool]:
        """
        Check which references are already mirrored locally.

        One gated read for the whole list.

        Args:
            references: Reference ids, in caller order

        Returns:
            Mapping of every input reference to whether a products row has it

        Raises:
            StoreError: If the query fails
        """
        if not references:
            return {}

        unique_refs = list(dict.fromkeys(references))
        logger.debug("checking_existing_references", count=len(unique_refs))

        try:
            with self.admission.slot():
                result = (
                    self.db.table(self.table)
                    .select("ref_id")
                    .in_("ref_id", unique_refs)
                    .execute()
                )
        except Exception as e:
            logger.error("check_existing_references_failed", error=str(e))
            raise StoreError("select", self.table, str(e)) from e

        existing = {row["ref_id"] for row in result.data}
        return {ref: ref in existing for ref in references}
