"""
Image import service.

Images are fetched per SKU; each file entry is upserted under its own remote
id. When IMAGE_FILE_LOCATION_PREFIX is set, the stored file_location is the
prefix plus the catalog's FileLocation.
"""

from typing import Any, Optional
import structlog

from config.settings import settings
from exceptions import CatalogNotFoundError, CatalogRemoteError, StoreError
from models.catalog import RemoteImage
from models.imports import Stage, CollectionData, CollectionImportResult
from services.base_import_service import BaseImportService

logger = structlog.get_logger(__name__)


class ImageImportService(BaseImportService):
    """Import every image file of a SKU."""

    stage = Stage.IMAGES
    resource = "Images"
    table = "images"

    def __init__(self, *args, file_location_prefix: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.file_location_prefix = (
            file_location_prefix
            if file_location_prefix is not None
            else settings.image_file_location_prefix
        )

    def _file_location(self, image: RemoteImage) -> Optional[str]:
        if image.file_location and self.file_location_prefix:
            return f"{self.file_location_prefix}{image.file_location}"
        return image.file_location

    def _to_row(self, image: RemoteImage) -> dict[str, Any]:
        return {
            "sku_id": image.sku_id,
            "archive_id": image.archive_id,
            "name": image.name,
            "is_main": image.is_main,
            "label": image.label,
            "text": image.text,
            "url": image.url,
            "file_location": self._file_location(image),
            "position": image.position,
        }

    def import_by_key(self, sku_id: int) -> CollectionImportResult:
        """
        Import the images of one SKU.

        Args:
            sku_id: Remote SKU id

        Returns:
            CollectionImportResult with inserted/updated counts
        """
        logger.debug("importing_images", sku_id=sku_id)

        try:
            payload = self._fetch(self.client.get_images_by_sku_id, sku_id)
        except (CatalogNotFoundError, CatalogRemoteError) as e:
            return self._collection_failure(e, sku_id)

        images = [RemoteImage.model_validate(item) for item in payload]

        imported = 0
        updated = 0
        try:
            for image in images:
                if self._upsert(self._to_row(image), {"id": image.id}):
                    imported += 1
                else:
                    updated += 1
        except StoreError as e:
            return self._collection_failure(e, sku_id)

        if images:
            logger.info("images_imported", sku_id=sku_id, imported=imported, updated=updated)

        return CollectionImportResult(
            success=True,
            message=f"{imported} images imported, {updated} updated",
            data=CollectionData(
                source_key=sku_id,
                imported_count=imported,
                updated_count=updated,
                items=[image.model_dump() for image in images]
            )
        )
