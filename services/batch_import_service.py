"""
Sequential batch import.

Runs the full stage chain for one catalog reference at a time and returns
one ImportResult per reference, in submission order. Expected failures
(catalog 404, catalog errors, store errors) are recorded per stage; anything
else turns into a critical result for that reference only.

See services/import_pipeline.py for the stage graph.
"""

from typing import Optional
import time
import structlog

from config.settings import settings
from integrations.catalog_client import CatalogClient
from models.imports import (
    Stage,
    StageStatus,
    ErrorKind,
    ImportConfig,
    ImportResult,
    EntityImportResult,
    CollectionData,
    CollectionImportResult,
    ImportBatchSummary,
)
from services.admission_controller import AdmissionController
from services.retry_policy import RetryPolicy
from services.import_pipeline import ImportRun, run_pipeline
from services.product_import_service import ProductImportService
from services.brand_import_service import BrandImportService
from services.category_import_service import CategoryImportService
from services.sku_import_service import SkuImportService
from services.image_import_service import ImageImportService
from services.stock_import_service import StockImportService
from services.attributes_import_service import AttributesImportService

logger = structlog.get_logger(__name__)


class BatchImportService:
    """
    Orchestrates the seven import services for a reference.

    Import services may be injected individually; any not supplied is built
    from the shared client/db/admission/retry arguments.
    """

    def __init__(
        self,
        client: Optional[CatalogClient] = None,
        db=None,
        admission: Optional[AdmissionController] = None,
        retry_policy: Optional[RetryPolicy] = None,
        product_importer: Optional[ProductImportService] = None,
        brand_importer: Optional[BrandImportService] = None,
        category_importer: Optional[CategoryImportService] = None,
        sku_importer: Optional[SkuImportService] = None,
        image_importer: Optional[ImageImportService] = None,
        stock_importer: Optional[StockImportService] = None,
        attributes_importer: Optional[AttributesImportService] = None
    ):
        shared = {
            "client": client,
            "db": db,
            "admission": admission,
            "retry_policy": retry_policy,
        }
        self.product_importer = product_importer or ProductImportService(**shared)
        self.brand_importer = brand_importer or BrandImportService(**shared)
        self.category_importer = category_importer or CategoryImportService(**shared)
        self.sku_importer = sku_importer or SkuImportService(**shared)
        self.image_importer = image_importer or ImageImportService(**shared)
        self.stock_importer = stock_importer or StockImportService(**shared)
        self.attributes_importer = attributes_importer or AttributesImportService(**shared)

        self._handlers = {
            Stage.PRODUCT: self._run_product,
            Stage.BRAND: self._run_brand,
            Stage.CATEGORY: self._run_category,
            Stage.SKUS: self._run_skus,
            Stage.IMAGES: self._run_images,
            Stage.STOCK: self._run_stock,
            Stage.ATTRIBUTES: self._run_attributes,
        }

    # ===================
    # ENTRY POINTS
    # ===================

    def import_by_reference(
        self,
        reference: str,
        config: Optional[ImportConfig] = None
    ) -> ImportResult:
        """
        Import one reference through every enabled stage.

        Never raises: unexpected exceptions become a critical ImportResult.

        Args:
            reference: Catalog reference id (e.g. "TROMOLM0090L1")
            config: Stage toggles; defaults to every stage enabled

        Returns:
            ImportResult with per-stage results, stage_status and errors
        """
        config = config or ImportConfig()
        started = time.monotonic()
        run = ImportRun(reference=reference, config=config)

        logger.info("reference_import_started", reference=reference)

        try:
            run_pipeline(run, self._handlers)
        except Exception as e:
            return self._critical(run, e, started)

        return self._finish(run, started)

    def import_many(
        self,
        references: list[str],
        config: Optional[ImportConfig] = None
    ) -> list[ImportResult]:
        """
        Import references one at a time, in order.

        Returns:
            One ImportResult per reference, in submission order
        """
        logger.info("batch_import_started", count=len(references))

        results = [self.import_by_reference(reference, config) for reference in references]

        summary = ImportBatchSummary.from_results(results)
        logger.info(
            "batch_import_complete",
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed
        )
        return results

    # ===================
    # RESULT ASSEMBLY
    # ===================

    def _finish(self, run: ImportRun, started: float) -> ImportResult:
        result = run.result
        result.total_time_ms = int((time.monotonic() - started) * 1000)
        result.success = not result.errors

        if run.aborted_by is not None:
            first = run.errors_for(run.aborted_by)
            reason = first[0].message if first else "failed"
            result.message = f"{run.aborted_by.value.capitalize()} stage failed: {reason}"
        elif result.errors:
            result.message = (
                f"Import of {run.reference} completed with {len(result.errors)} errors "
                f"in {result.total_time_ms}ms"
            )
        else:
            result.message = f"Import of {run.reference} completed in {result.total_time_ms}ms"

        log = logger.info if result.success else logger.warning
        log(
            "reference_import_complete",
            reference=run.reference,
            success=result.success,
            errors=len(result.errors),
            state=result.state.value,
            elapsed_ms=result.total_time_ms
        )
        return result

    def _critical(self, run: ImportRun, error: Exception, started: float) -> ImportResult:
        """Report an unexpected exception as a failed reference, keeping partial data."""
        stage = run.current_stage
        logger.error(
            "reference_import_critical",
            reference=run.reference,
            stage=stage.value if stage else None,
            error=str(error),
            error_type=type(error).__name__
        )

        if stage is not None:
            run.mark(stage, StageStatus.FAILED)
        run.add_error(stage, ErrorKind.CRITICAL, f"{type(error).__name__}: {error}")

        result = run.result
        result.success = False
        result.total_time_ms = int((time.monotonic() - started) * 1000)
        result.message = f"Critical failure importing {run.reference}: {error}"
        return result

    # ===================
    # STAGE HANDLERS
    # ===================

    def _record(
        self,
        run: ImportRun,
        stage: Stage,
        result,
        key
    ) -> StageStatus:
        if result.success:
            return StageStatus.SUCCEEDED
        run.add_error(stage, result.error_kind or ErrorKind.REMOTE_ERROR, result.message, key)
        return StageStatus.FAILED

    def _run_product(self, run: ImportRun) -> StageStatus:
        result = self.product_importer.import_by_reference(run.reference)
        run.result.product_result = result
        if result.success:
            run.product = result.data.entity
        return self._record(run, Stage.PRODUCT, result, run.reference)

    def _run_brand(self, run: ImportRun) -> StageStatus:
        brand_id = run.product.get("brand_id")
        if not brand_id:
            logger.warning(
                "brand_id_missing",
                reference=run.reference,
                kind=ErrorKind.DEPENDENCY_MISSING.value
            )
            return StageStatus.SKIPPED

        result = self._import_brand(brand_id)
        run.result.brand_result = result
        return self._record(run, Stage.BRAND, result, brand_id)

    def _run_category(self, run: ImportRun) -> StageStatus:
        category_id = run.product.get("category_id")
        if not category_id:
            logger.warning(
                "category_id_missing",
                reference=run.reference,
                kind=ErrorKind.DEPENDENCY_MISSING.value
            )
            return StageStatus.SKIPPED

        result = self._import_category(category_id)
        run.result.category_result = result
        return self._record(run, Stage.CATEGORY, result, category_id)

    def _import_brand(self, brand_id: int) -> EntityImportResult:
        return self.brand_importer.import_by_key(brand_id)

    def _import_category(self, category_id: int) -> EntityImportResult:
        return self.category_importer.import_by_key(category_id)

    def _run_skus(self, run: ImportRun) -> StageStatus:
        product_id = run.product["id"]
        result = self.sku_importer.import_by_key(product_id)
        run.result.sku_result = result
        if result.success:
            run.skus = result.data.items
        return self._record(run, Stage.SKUS, result, product_id)

    def _run_images(self, run: ImportRun) -> StageStatus:
        """
        Import images from the first SKU that has any.

        SKUs are tried in catalog order. Once one SKU yields images, the
        remaining SKUs are skipped: a product's SKUs normally share the same
        merchandising images in the catalog.
        """
        source_sku_id = None
        data = CollectionData()

        for sku in run.skus:
            sku_id = sku["id"]
            if source_sku_id is not None:
                logger.warning(
                    "image_import_skipped",
                    reference=run.reference,
                    sku_id=sku_id,
                    images_from_sku=source_sku_id
                )
                continue

            result = self.image_importer.import_by_key(sku_id)
            if not result.success:
                if result.error_kind == ErrorKind.NOT_FOUND:
                    logger.debug("sku_has_no_images", reference=run.reference, sku_id=sku_id)
                else:
                    run.add_error(Stage.IMAGES, result.error_kind, result.message, sku_id)
                continue

            if result.data.touched_count > 0:
                source_sku_id = sku_id
                data = result.data

        if source_sku_id is None:
            logger.info("no_images_found", reference=run.reference, skus=len(run.skus))

        stage_errors = run.errors_for(Stage.IMAGES)
        run.result.image_sku_id = source_sku_id
        run.result.image_result = CollectionImportResult(
            success=not stage_errors,
            message=(
                f"{data.imported_count} images imported, {data.updated_count} updated"
                + (f" from SKU {source_sku_id}" if source_sku_id is not None else "")
            ),
            error_kind=stage_errors[0].kind if stage_errors else None,
            data=data
        )
        return StageStatus.FAILED if stage_errors else StageStatus.SUCCEEDED

    def _run_stock(self, run: ImportRun) -> StageStatus:
        """Import stock for every SKU; no short-circuit."""
        warehouse_filter = run.config.warehouse_filter or settings.default_warehouse_filter
        data = CollectionData()

        for sku in run.skus:
            sku_id = sku["id"]
            result = self.stock_importer.import_by_key(sku_id, warehouse_filter)
            if not result.success:
                run.add_error(Stage.STOCK, result.error_kind, result.message, sku_id)
                continue
            data.imported_count += result.data.imported_count
            data.updated_count += result.data.updated_count
            data.filtered_count += result.data.filtered_count
            data.items.extend({**item, "sku_id": sku_id} for item in result.data.items)

        stage_errors = run.errors_for(Stage.STOCK)
        run.result.stock_result = CollectionImportResult(
            success=not stage_errors,
            message=(
                f"{data.imported_count} stock rows imported, {data.updated_count} updated, "
                f"{data.filtered_count} filtered out"
            ),
            error_kind=stage_errors[0].kind if stage_errors else None,
            data=data
        )
        return StageStatus.FAILED if stage_errors else StageStatus.SUCCEEDED

    def _run_attributes(self, run: ImportRun) -> StageStatus:
        product_id = run.product["id"]
        result = self.attributes_importer.import_by_key(product_id)
        run.result.attributes_result = result
        return self._record(run, Stage.ATTRIBUTES, result, product_id)


# Singleton instance for convenience
_batch_import_service: Optional[BatchImportService] = None

def get_batch_import_service() -> BatchImportService:
    """Get or create BatchImportService instance."""
    global _batch_import_service
    if _batch_import_service is None:
        _batch_import_service = BatchImportService()
    return _batch_import_service
