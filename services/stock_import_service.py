"""
Stock import service.

One SKU maps to one balance row per warehouse. Rows are keyed by
(sku_id, warehouse_id). An optional warehouse filter keeps only balances
whose warehouse id or name matches; dropped rows are counted in
filtered_count, separately from imported/updated.
"""

from typing import Optional
import structlog

from exceptions import CatalogNotFoundError, CatalogRemoteError, StoreError
from models.catalog import RemoteStock, RemoteStockBalance
from models.imports import Stage, CollectionData, CollectionImportResult
from services.base_import_service import BaseImportService

logger = structlog.get_logger(__name__)


def matches_warehouse(balance: RemoteStockBalance, warehouse_filter: Optional[str]) -> bool:
    """True when no filter is set, or the filter equals the warehouse id or name."""
    if not warehouse_filter:
        return True
    return warehouse_filter in (balance.warehouse_id, balance.warehouse_name)


class StockImportService(BaseImportService):
    """Import warehouse balances of a SKU."""

    stage = Stage.STOCK
    resource = "Stock"
    table = "stock"

    def import_by_key(
        self,
        sku_id: int,
        warehouse_filter: Optional[str] = None
    ) -> CollectionImportResult:
        """
        Import stock for one SKU.

        Args:
            sku_id: Remote SKU id
            warehouse_filter: Warehouse id or name to keep (None keeps all)

        Returns:
            CollectionImportResult with imported/updated/filtered counts
        """
        logger.debug("importing_stock", sku_id=sku_id, warehouse_filter=warehouse_filter)

        try:
            payload = self._fetch(self.client.get_stock_by_sku_id, sku_id)
        except (CatalogNotFoundError, CatalogRemoteError) as e:
            return self._collection_failure(e, sku_id)

        stock = RemoteStock.model_validate(payload)
        kept = [b for b in stock.balance if matches_warehouse(b, warehouse_filter)]
        filtered = len(stock.balance) - len(kept)

        imported = 0
        updated = 0
        try:
            for balance in kept:
                row = {
                    "warehouse_name": balance.warehouse_name,
                    "total_quantity": balance.total_quantity,
                    "reserved_quantity": balance.reserved_quantity,
                    "has_unlimited_quantity": balance.has_unlimited_quantity,
                }
                key = {"sku_id": sku_id, "warehouse_id": balance.warehouse_id}
                if self._upsert(row, key):
                    imported += 1
                else:
                    updated += 1
        except StoreError as e:
            return self._collection_failure(e, sku_id)

        logger.debug(
            "stock_imported",
            sku_id=sku_id,
            imported=imported,
            updated=updated,
            filtered=filtered
        )

        return CollectionImportResult(
            success=True,
            message=f"{imported} stock rows imported, {updated} updated, {filtered} filtered out",
            data=CollectionData(
                source_key=sku_id,
                imported_count=imported,
                updated_count=updated,
                filtered_count=filtered,
                items=[b.model_dump() for b in kept]
            )
        )

    def import_for_skus(
        self,
        sku_ids: list[int],
        warehouse_filter: Optional[str] = None
    ) -> CollectionImportResult:
        """
        Import stock for several SKUs, one at a time.

        A failing SKU does not stop the others; the aggregate succeeds only
        if every SKU did.
        """
        logger.info("importing_stock_for_skus", count=len(sku_ids))

        imported = 0
        updated = 0
        filtered = 0
        failures: list[str] = []

        for sku_id in sku_ids:
            result = self.import_by_key(sku_id, warehouse_filter)
            if result.success and result.data:
                imported += result.data.imported_count
                updated += result.data.updated_count
                filtered += result.data.filtered_count
            else:
                failures.append(f"SKU {sku_id}: {result.message}")

        message = f"{imported} stock rows imported, {updated} updated"
        if failures:
            message += f"; {len(failures)} SKUs failed: " + "; ".join(failures)

        logger.info(
            "stock_for_skus_imported",
            imported=imported,
            updated=updated,
            failed=len(failures)
        )

        return CollectionImportResult(
            success=not failures,
            message=message,
            data=CollectionData(
                imported_count=imported,
                updated_count=updated,
                filtered_count=filtered
            )
        )
