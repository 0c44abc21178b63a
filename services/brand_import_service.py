"""
Brand import service.
"""

from typing import Any

from models.catalog import RemoteBrand
from models.imports import Stage
from services.base_import_service import EntityImportService


class BrandImportService(EntityImportService):
    """Fetch a brand by remote id and upsert it into brands."""

    stage = Stage.BRAND
    resource = "Brand"
    table = "brands"
    payload_model = RemoteBrand

    def _fetch_remote(self, brand_id: int) -> dict:
        return self.client.get_brand(brand_id)

    def _to_row(self, brand: RemoteBrand) -> dict[str, Any]:
        return {
            "name": brand.name,
            "is_active": brand.is_active,
            "title": brand.title,
            "meta_tag_description": brand.meta_tag_description,
            "image_url": brand.image_url,
        }
