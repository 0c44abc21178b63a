"""
Shared plumbing for the entity import services.

Every import service follows the same contract:
    1. fetch from the catalog (through the retry policy)
    2. 404 -> failure result with ErrorKind.NOT_FOUND, no store access
    3. other non-2xx -> failure result with ErrorKind.REMOTE_ERROR
    4. look the natural key up in the store (one gated read)
    5. update in place if present, insert if absent (one write)
    6. return a success result

Catalog and store errors become failure results. Anything else (a payload
that does not validate, a body that is not JSON) propagates to the caller.
"""

from contextlib import contextmanager, nullcontext
from datetime import datetime, timezone
from typing import Any, Callable, Optional
import structlog

from config import get_supabase_client
from config.settings import settings
from exceptions import (
    AppError,
    CatalogNotFoundError,
    CatalogRemoteError,
    StoreError,
)
from integrations.catalog_client import CatalogClient, get_catalog_client
from models.base import CatalogPayload
from models.imports import (
    Stage,
    ErrorKind,
    EntityData,
    EntityImportResult,
    CollectionImportResult,
)
from services.admission_controller import AdmissionController, get_admission_controller
from services.retry_policy import RetryPolicy

logger = structlog.get_logger(__name__)


def error_kind_for(error: AppError) -> ErrorKind:
    """Map an expected exception to its ErrorKind."""
    if isinstance(error, CatalogNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, StoreError):
        return ErrorKind.STORE_ERROR
    return ErrorKind.REMOTE_ERROR


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BaseImportService:
    """
    Catalog fetch plus store lookup/insert/update helpers.

    Subclasses set stage, resource and table.
    """

    stage: Stage
    resource: str
    table: str

    # Expected failures, downgraded to results
    EXPECTED_ERRORS = (CatalogNotFoundError, CatalogRemoteError, StoreError)

    def __init__(
        self,
        client: Optional[CatalogClient] = None,
        db=None,
        admission: Optional[AdmissionController] = None,
        retry_policy: Optional[RetryPolicy] = None,
        gate_writes: Optional[bool] = None
    ):
        self.client = client or get_catalog_client()
        self.db = db or get_supabase_client()
        self.admission = admission or get_admission_controller()
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self.gate_writes = settings.store_gate_writes if gate_writes is None else gate_writes

    # ===================
    # CATALOG
    # ===================

    def _fetch(self, fetch: Callable[[Any], Any], key: Any) -> Any:
        """Call one catalog endpoint under the retry policy."""
        return self.retry_policy.call(fetch, key)

    # ===================
    # STORE
    # ===================

    @contextmanager
    def _write_slot(self):
        """Writes bypass admission control unless gate_writes is set."""
        with (self.admission.slot() if self.gate_writes else nullcontext()):
            yield

    def _find_existing(
        self,
        key: dict[str, Any],
        columns: str = "id",
        table: Optional[str] = None
    ) -> Optional[dict]:
        """
        Look up a row by natural key.

        Runs inside an admission slot.

        Raises:
            StoreError: If the query fails
        """
        table = table or self.table
        logger.debug("store_lookup", table=table, key=key)

        try:
            with self.admission.slot():
                query = self.db.table(table).select(columns)
                for column, value in key.items():
                    query = query.eq(column, value)
                result = query.limit(1).execute()
        except Exception as e:
            logger.error("store_lookup_failed", table=table, key=key, error=str(e))
            raise StoreError("select", table, str(e)) from e

        return result.data[0] if result.data else None

    def _insert(self, row: dict[str, Any], table: Optional[str] = None) -> None:
        table = table or self.table
        try:
            with self._write_slot():
                self.db.table(table).insert(row).execute()
        except Exception as e:
            logger.error("store_insert_failed", table=table, error=str(e))
            raise StoreError("insert", table, str(e)) from e

    def _update(
        self,
        row: dict[str, Any],
        key: dict[str, Any],
        table: Optional[str] = None
    ) -> None:
        table = table or self.table
        try:
            with self._write_slot():
                query = self.db.table(table).update({**row, "updated_at": utc_now()})
                for column, value in key.items():
                    query = query.eq(column, value)
                query.execute()
        except Exception as e:
            logger.error("store_update_failed", table=table, key=key, error=str(e))
            raise StoreError("update", table, str(e)) from e

    def _upsert(
        self,
        row: dict[str, Any],
        key: dict[str, Any],
        table: Optional[str] = None
    ) -> bool:
        """
        Insert or update one row by natural key.

        Returns:
            True if the row was inserted, False if it was updated
        """
        existing = self._find_existing(key, table=table)
        if existing:
            self._update(row, key, table=table)
            return False
        self._insert({**key, **row}, table=table)
        return True

    # ===================
    # RESULTS
    # ===================

    def _log_failure(self, error: AppError, key: Any) -> None:
        logger.warning(
            "import_stage_failed",
            stage=self.stage.value,
            key=key,
            code=error.code,
            error=error.message
        )

    def _entity_failure(self, error: AppError, key: Any) -> EntityImportResult:
        self._log_failure(error, key)
        return EntityImportResult(
            success=False,
            message=error.message,
            error_kind=error_kind_for(error)
        )

    def _collection_failure(self, error: AppError, key: Any) -> CollectionImportResult:
        self._log_failure(error, key)
        return CollectionImportResult(
            success=False,
            message=error.message,
            error_kind=error_kind_for(error)
        )


class EntityImportService(BaseImportService):
    """
    Import service for a single entity keyed by its remote id.

    Subclasses provide _fetch_remote, payload_model and _to_row.
    """

    payload_model: type[CatalogPayload]

    def _fetch_remote(self, key: Any) -> dict:
        raise NotImplementedError

    def _to_row(self, entity: Any) -> dict[str, Any]:
        raise NotImplementedError

    def import_by_key(self, key: Any) -> EntityImportResult:
        """
        Fetch one entity and upsert it by remote id.

        Returns:
            EntityImportResult; data holds local id and the entity fields
        """
        logger.info("importing_entity", stage=self.stage.value, key=key)

        try:
            payload = self._fetch(self._fetch_remote, key)
        except (CatalogNotFoundError, CatalogRemoteError) as e:
            return self._entity_failure(e, key)

        entity = self.payload_model.model_validate(payload)

        try:
            inserted = self._upsert(self._to_row(entity), {"id": entity.id})
        except StoreError as e:
            return self._entity_failure(e, key)

        action = "imported" if inserted else "updated"
        logger.info(
            "entity_imported",
            stage=self.stage.value,
            key=key,
            local_id=entity.id,
            action=action
        )

        return EntityImportResult(
            success=True,
            message=f"{self.resource} {entity.id} {action}",
            data=EntityData(
                local_id=entity.id,
                entity=entity.model_dump(),
                inserted=inserted
            )
        )
