"""
Product attributes (specifications) import service.

Each run fully replaces a product's attribute set: attributes in the fetch
are upserted by (product_id, attribute_id), attributes no longer present are
deleted. "Seller" and "Categoria" are never persisted.
"""

import structlog

from exceptions import CatalogNotFoundError, CatalogRemoteError, StoreError
from models.catalog import RemoteAttribute
from models.imports import Stage, CollectionData, CollectionImportResult
from services.base_import_service import BaseImportService

logger = structlog.get_logger(__name__)

EXCLUDED_ATTRIBUTE_NAMES = frozenset({"Seller", "Categoria"})


class AttributesImportService(BaseImportService):
    """Import the specification values of a product."""

    stage = Stage.ATTRIBUTES
    resource = "Attributes"
    table = "product_attributes"

    def import_by_key(self, product_id: int) -> CollectionImportResult:
        """
        Replace the stored attributes of one product with the catalog's.

        Args:
            product_id: Remote product id

        Returns:
            CollectionImportResult with imported, updated, excluded and removed counts
        """
        logger.info("importing_attributes", product_id=product_id)

        try:
            payload = self._fetch(self.client.get_product_specifications, product_id)
        except (CatalogNotFoundError, CatalogRemoteError) as e:
            return self._collection_failure(e, product_id)

        attributes = [RemoteAttribute.model_validate(item) for item in payload]
        kept = [a for a in attributes if a.name not in EXCLUDED_ATTRIBUTE_NAMES]
        excluded = len(attributes) - len(kept)
        if excluded:
            logger.debug("attributes_excluded", product_id=product_id, count=excluded)

        imported = 0
        updated = 0
        try:
            for attribute in kept:
                row = {
                    "attribute_name": attribute.name,
                    "attribute_values": attribute.value,
                }
                key = {"product_id": product_id, "attribute_id": attribute.id}
                if self._upsert(row, key):
                    imported += 1
                else:
                    updated += 1

            removed = self._remove_stale(product_id, [a.id for a in kept])
        except StoreError as e:
            return self._collection_failure(e, product_id)

        logger.info(
            "attributes_imported",
            product_id=product_id,
            imported=imported,
            updated=updated,
            excluded=excluded,
            removed=removed
        )

        return CollectionImportResult(
            success=True,
            message=(
                f"{imported} attributes imported, {updated} updated, "
                f"{excluded} excluded, {removed} removed"
            ),
            data=CollectionData(
                source_key=product_id,
                imported_count=imported,
                updated_count=updated,
                excluded_count=excluded,
                removed_count=removed,
                items=[a.model_dump() for a in kept]
            )
        )

    def _remove_stale(self, product_id: int, keep_ids: list[int]) -> int:
        """
        Delete attributes of the product whose id is not in keep_ids.

        Returns:
            Number of rows deleted

        Raises:
            StoreError: If the delete fails
        """
        try:
            with self._write_slot():
                query = self.db.table(self.table).delete().eq("product_id", product_id)
                if keep_ids:
                    query = query.not_.in_("attribute_id", keep_ids)
                result = query.execute()
        except Exception as e:
            logger.error("remove_stale_attributes_failed", product_id=product_id, error=str(e))
            raise StoreError("delete", self.table, str(e)) from e

        return len(result.data or [])
