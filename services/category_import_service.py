"""
Category import service.
"""

from typing import Any

from models.catalog import RemoteCategory
from models.imports import Stage
from services.base_import_service import EntityImportService


class CategoryImportService(EntityImportService):
    """Fetch a category by remote id and upsert it into categories."""

    stage = Stage.CATEGORY
    resource = "Category"
    table = "categories"
    payload_model = RemoteCategory

    def _fetch_remote(self, category_id: int) -> dict:
        return self.client.get_category(category_id)

    def _to_row(self, category: RemoteCategory) -> dict[str, Any]:
        return {
            "name": category.name,
            "father_category_id": category.father_category_id,
            "title": category.title,
            "description": category.description,
            "keywords": category.keywords,
            "is_active": category.is_active,
            "show_in_store_front": category.show_in_store_front,
            "show_brand_filter": category.show_brand_filter,
            "active_store_front_link": category.active_store_front_link,
            "global_category_id": category.global_category_id,
            "score": category.score,
            "link_id": category.link_id,
            "has_children": category.has_children,
        }
