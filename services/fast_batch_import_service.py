"""
Cache-accelerated batch import.

Same per-reference chain as BatchImportService, plus:
    - brand and category results cached by remote id for the lifetime of the
      instance (filled on success only, reset with clear_cache())
    - references processed in groups of at most 10, with a short pause
      between references and a longer one between groups

The caches are guarded by their own lock, and a per-key lock is held while a
miss is fetched, so concurrent callers sharing one instance fetch each brand
or category once.
"""

from typing import Callable, Optional
import threading
import time
import structlog

from config.settings import settings
from models.imports import (
    FastImportConfig,
    ImportResult,
    EntityImportResult,
    ImportBatchSummary,
)
from services.batch_import_service import BatchImportService

logger = structlog.get_logger(__name__)

MAX_BATCH_SIZE = 10

ProgressCallback = Callable[[int, int, ImportResult], None]


def chunk(references: list[str], size: int) -> list[list[str]]:
    """Split references into consecutive groups of at most size."""
    return [references[i:i + size] for i in range(0, len(references), size)]


class FastBatchImportService(BatchImportService):
    """Batch import with brand/category caching and grouped backpressure."""

    def __init__(
        self,
        *args,
        item_pause_seconds: Optional[float] = None,
        group_pause_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        **kwargs
    ):
        super().__init__(*args, **kwargs)
        self.item_pause_seconds = (
            settings.fast_import_item_pause_seconds
            if item_pause_seconds is None else item_pause_seconds
        )
        self.group_pause_seconds = (
            settings.fast_import_group_pause_seconds
            if group_pause_seconds is None else group_pause_seconds
        )
        self._sleep = sleep
        self._cache_lock = threading.Lock()
        self._brand_cache: dict[int, EntityImportResult] = {}
        self._category_cache: dict[int, EntityImportResult] = {}
        self._key_locks: dict[tuple[str, int], threading.Lock] = {}

    # ===================
    # CACHE
    # ===================

    def _cached_import(
        self,
        cache: dict[int, EntityImportResult],
        key: int,
        fetch: Callable[[int], EntityImportResult],
        kind: str
    ) -> EntityImportResult:
        with self._cache_lock:
            key_lock = self._key_locks.setdefault((kind, key), threading.Lock())

        # Callers missing on the same key wait here for the first fetch
        with key_lock:
            with self._cache_lock:
                hit = cache.get(key)
            if hit is not None:
                logger.debug("cache_hit", kind=kind, key=key)
                return hit.model_copy(deep=True)

            result = fetch(key)
            if result.success:
                with self._cache_lock:
                    cache[key] = result.model_copy(deep=True)
            return result

    def _import_brand(self, brand_id: int) -> EntityImportResult:
        return self._cached_import(
            self._brand_cache, brand_id, self.brand_importer.import_by_key, "brand"
        )

    def _import_category(self, category_id: int) -> EntityImportResult:
        return self._cached_import(
            self._category_cache, category_id, self.category_importer.import_by_key, "category"
        )

    def clear_cache(self) -> None:
        """Forget every cached brand and category result."""
        with self._cache_lock:
            brands = len(self._brand_cache)
            categories = len(self._category_cache)
            self._brand_cache.clear()
            self._category_cache.clear()
        logger.info("import_cache_cleared", brands=brands, categories=categories)

    def cache_stats(self) -> dict[str, int]:
        with self._cache_lock:
            return {
                "brands": len(self._brand_cache),
                "categories": len(self._category_cache),
            }

    # ===================
    # ENTRY POINTS
    # ===================

    @staticmethod
    def _notify(on_progress: ProgressCallback, done: int, total: int, result: ImportResult) -> None:
        """Report progress; a failing callback never stops the batch."""
        try:
            on_progress(done, total, result)
        except Exception as e:
            logger.error(
                "progress_callback_failed",
                reference=result.reference,
                done=done,
                total=total,
                error=str(e),
                error_type=type(e).__name__
            )

    def check_existing(self, references: list[str]) -> dict[str, bool]:
        """
        Report which references already exist in the local store.

        Advisory only; import_many does not consult it.
        """
        return self.product_importer.get_existing_references(references)

    def import_many(
        self,
        references: list[str],
        config: Optional[FastImportConfig] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> list[ImportResult]:
        """
        Import references in groups, pausing between references and groups.

        Args:
            references: Catalog references, processed in order
            config: Stage toggles and batch_size (capped at 10)
            on_progress: Called as (done, total, result) after each reference

        Returns:
            One ImportResult per reference, in submission order
        """
        config = config or FastImportConfig()
        batch_size = min(config.batch_size, MAX_BATCH_SIZE)
        groups = chunk(references, batch_size)
        total = len(references)
        started = time.monotonic()

        logger.info(
            "fast_import_started",
            total=total,
            groups=len(groups),
            batch_size=batch_size
        )

        results: list[ImportResult] = []
        for group_index, group in enumerate(groups):
            if group_index > 0:
                self._sleep(self.group_pause_seconds)

            for item_index, reference in enumerate(group):
                if item_index > 0:
                    self._sleep(self.item_pause_seconds)

                result = self.import_by_reference(reference, config)
                results.append(result)
                if on_progress:
                    self._notify(on_progress, len(results), total, result)

            logger.info(
                "fast_import_group_complete",
                group=group_index + 1,
                groups=len(groups),
                done=len(results),
                total=total
            )

        summary = ImportBatchSummary.from_results(results)
        logger.info(
            "fast_import_complete",
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
            elapsed_ms=int((time.monotonic() - started) * 1000),
            **self.cache_stats()
        )
        return results


# Singleton instance for convenience
_fast_batch_import_service: Optional[FastBatchImportService] = None
_singleton_lock = threading.Lock()

def get_fast_batch_import_service() -> FastBatchImportService:
    """Get or create FastBatchImportService instance."""
    global _fast_batch_import_service
    with _singleton_lock:
        if _fast_batch_import_service is None:
            _fast_batch_import_service = FastBatchImportService()
    return _fast_batch_import_service
