"""
Import pipeline schemas: configuration, stage results and per-reference results.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field

from config.settings import settings
from models.base import BaseSchema


class Stage(str, Enum):
    """Pipeline stages, in execution order."""
    PRODUCT = "product"
    BRAND = "brand"
    CATEGORY = "category"
    SKUS = "skus"
    IMAGES = "images"
    STOCK = "stock"
    ATTRIBUTES = "attributes"


class ErrorKind(str, Enum):
    """Why a stage failed."""
    NOT_FOUND = "not_found"                    # Catalog answered 404
    REMOTE_ERROR = "remote_error"              # Any other non-2xx, or transport failure
    STORE_ERROR = "store_error"                # Local read/write failed
    DEPENDENCY_MISSING = "dependency_missing"  # Upstream id absent; stage skipped
    CRITICAL = "critical"                      # Unexpected exception for the reference


class StageStatus(str, Enum):
    """Outcome of one stage inside one reference run."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"          # Disabled by config or dependency id missing
    BLOCKED = "blocked"          # A required stage did not succeed
    NOT_EXECUTED = "not_executed"  # Run ended before reaching the stage


class ImportState(str, Enum):
    """Per-reference state machine."""
    START = "start"
    PRODUCT_IMPORTED = "product_imported"
    BRAND_IMPORTED = "brand_imported"
    CATEGORY_IMPORTED = "category_imported"
    SKUS_IMPORTED = "skus_imported"
    IMAGES_AND_STOCK_IMPORTED = "images_and_stock_imported"
    ATTRIBUTES_IMPORTED = "attributes_imported"
    DONE = "done"


# ===================
# STAGE RESULTS
# ===================

class EntityData(BaseSchema):
    """Payload of a single-entity import (product, brand, category)."""
    local_id: int = Field(..., description="Local row id (same as remote id)")
    entity: dict[str, Any] = Field(..., description="Remote entity, snake_case keys")
    inserted: bool = Field(..., description="True on first sighting of the natural key")


class CollectionData(BaseSchema):
    """Payload of a collection import (SKUs, images, stock, attributes)."""
    source_key: Optional[int] = Field(None, description="Key the collection was fetched by")
    imported_count: int = 0
    updated_count: int = 0
    filtered_count: int = 0
    excluded_count: int = 0
    removed_count: int = 0
    items: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def touched_count(self) -> int:
        """Rows inserted or updated."""
        return self.imported_count + self.updated_count


class EntityImportResult(BaseSchema):
    """Result of importing one entity by key."""
    success: bool
    message: str
    error_kind: Optional[ErrorKind] = None
    data: Optional[EntityData] = None


class CollectionImportResult(BaseSchema):
    """Result of importing a collection by key."""
    success: bool
    message: str
    error_kind: Optional[ErrorKind] = None
    data: Optional[CollectionData] = None


class StageError(BaseSchema):
    """One entry of an ImportResult's error list."""
    stage: Optional[Stage] = None
    kind: ErrorKind
    message: str
    key: Optional[str] = Field(None, description="Key the failing call was made with")


# ===================
# CONFIG
# ===================

class ImportConfig(BaseSchema):
    """Which stages run for a reference, and how failures are treated."""
    import_product: bool = True
    import_brand: bool = True
    import_category: bool = True
    import_skus: bool = True
    import_images: bool = True
    import_stock: bool = True
    import_attributes: bool = True
    skip_existing: bool = Field(
        False,
        description="Keep going past a failed stage instead of aborting the reference"
    )
    warehouse_filter: Optional[str] = Field(
        None,
        description="Only persist stock rows whose warehouse id or name matches"
    )

    def is_enabled(self, stage: Stage) -> bool:
        """Check the toggle for a stage."""
        return getattr(self, f"import_{stage.value}")


class FastImportConfig(ImportConfig):
    """ImportConfig plus grouping for the fast orchestrator."""
    batch_size: int = Field(
        default_factory=lambda: settings.fast_import_batch_size,
        ge=1,
        description="References per group; values above 10 are capped at 10"
    )


# ===================
# REFERENCE RESULT
# ===================

class ImportResult(BaseSchema):
    """
    Outcome of importing one catalog reference.

    success is True only when errors is empty. Partial data gathered before
    or after a failing stage is always returned.
    """
    reference: str
    success: bool
    message: str
    state: ImportState = ImportState.START
    product_result: Optional[EntityImportResult] = None
    brand_result: Optional[EntityImportResult] = None
    category_result: Optional[EntityImportResult] = None
    sku_result: Optional[CollectionImportResult] = None
    image_result: Optional[CollectionImportResult] = None
    stock_result: Optional[CollectionImportResult] = None
    attributes_result: Optional[CollectionImportResult] = None
    image_sku_id: Optional[int] = Field(None, description="SKU whose images were imported")
    stage_status: dict[Stage, StageStatus] = Field(default_factory=dict)
    total_time_ms: int = 0
    errors: list[StageError] = Field(default_factory=list)


class ImportBatchSummary(BaseSchema):
    """Counts over a list of ImportResults."""
    total: int
    succeeded: int
    failed: int

    @classmethod
    def from_results(cls, results: list[ImportResult]) -> "ImportBatchSummary":
        succeeded = sum(1 for r in results if r.success)
        return cls(total=len(results), succeeded=succeeded, failed=len(results) - succeeded)


class ProgressStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportProgress(BaseSchema):
    """Progress of a background fast import."""
    progress_id: str
    status: ProgressStatus = ProgressStatus.RUNNING
    total: int
    done: int = 0
    succeeded: int = 0
    failed: int = 0
    current_reference: Optional[str] = None
    error: Optional[str] = None
    results: list[ImportResult] = Field(default_factory=list)


# ===================
# API REQUESTS
# ===================

class ImportRequest(BaseSchema):
    """Body of POST /api/import/batch."""
    references: list[str] = Field(..., min_length=1)
    config: ImportConfig = Field(default_factory=ImportConfig)


class FastImportRequest(BaseSchema):
    """Body of POST /api/import/batch-fast."""
    references: list[str] = Field(..., min_length=1)
    config: Optional[FastImportConfig] = Field(
        default=None,
        description="Omitted: stage defaults with batch_size from settings"
    )


class ExistenceRequest(BaseSchema):
    """Body of POST /api/import/existence."""
    references: list[str] = Field(..., min_length=1)
