"""
Business logic services.

One import service per catalog entity, plus the pipeline and orchestrators
that compose them.
"""

from services.admission_controller import (
    AdmissionController,
    AdmissionStatus,
    get_admission_controller,
)
from services.retry_policy import RetryPolicy
from services.product_import_service import ProductImportService
from services.brand_import_service import BrandImportService
from services.category_import_service import CategoryImportService
from services.sku_import_service import SkuImportService
from services.image_import_service import ImageImportService
from services.stock_import_service import StockImportService
from services.attributes_import_service import AttributesImportService
from services.import_pipeline import IMPORT_PIPELINE, StageSpec, ImportRun, run_pipeline
from services.batch_import_service import BatchImportService, get_batch_import_service
from services.fast_batch_import_service import (
    FastBatchImportService,
    get_fast_batch_import_service,
)

__all__ = [
    "AdmissionController",
    "AdmissionStatus",
    "get_admission_controller",
    "RetryPolicy",
    "ProductImportService",
    "BrandImportService",
    "CategoryImportService",
    "SkuImportService",
    "ImageImportService",
    "StockImportService",
    "AttributesImportService",
    "IMPORT_PIPELINE",
    "StageSpec",
    "ImportRun",
    "run_pipeline",
    "BatchImportService",
    "get_batch_import_service",
    "FastBatchImportService",
    "get_fast_batch_import_service",
]
