"""
Progress of background fast imports.
Stores progress records in memory with TTL expiration.
Single-process only; a restart forgets every record.

Every update pushes the expiry back by the record's TTL, so a record only
expires once its import has gone quiet. Updates to a record that is already
gone are logged and dropped; they never interrupt the import feeding them.
"""
import threading
import uuid
from datetime import datetime, timedelta
from typing import Optional

import structlog

from exceptions import ImportProgressNotFoundError
from models.imports import ImportProgress, ImportResult, ProgressStatus

logger = structlog.get_logger(__name__)

# progress_id -> (expires_at, ttl, progress)
_cache: dict[str, tuple[datetime, timedelta, ImportProgress]] = {}
_lock = threading.Lock()
DEFAULT_TTL_MINUTES = 60


def create_progress(total: int, ttl_minutes: int = DEFAULT_TTL_MINUTES) -> ImportProgress:
    """Register a new running import, return its progress record."""
    progress = ImportProgress(progress_id=str(uuid.uuid4()), total=total)
    ttl = timedelta(minutes=ttl_minutes)
    with _lock:
        _cache[progress.progress_id] = (datetime.now() + ttl, ttl, progress)
        _cleanup_expired()
    logger.info("import_progress_created", progress_id=progress.progress_id, total=total)
    return progress


def get_progress(progress_id: str) -> ImportProgress:
    """
    Snapshot of a progress record.

    Raises:
        ImportProgressNotFoundError: If the id is unknown or expired
    """
    with _lock:
        entry = _cache.get(progress_id)
        if entry is None:
            raise ImportProgressNotFoundError(progress_id)
        expires_at, _, progress = entry
        if datetime.now() > expires_at:
            del _cache[progress_id]
            raise ImportProgressNotFoundError(progress_id)
        return progress.model_copy(deep=True)


def _touch(progress_id: str, event: str) -> Optional[ImportProgress]:
    """Live record with its expiry refreshed, or None if it is gone. Caller holds _lock."""
    entry = _cache.get(progress_id)
    if entry is None:
        logger.warning("import_progress_missing", progress_id=progress_id, update=event)
        return None
    _, ttl, progress = entry
    _cache[progress_id] = (datetime.now() + ttl, ttl, progress)
    return progress


def record_result(progress_id: str, result: ImportResult) -> None:
    """Add one finished reference to a running import."""
    with _lock:
        progress = _touch(progress_id, "record_result")
        if progress is None:
            return
        progress.results.append(result)
        progress.done += 1
        if result.success:
            progress.succeeded += 1
        else:
            progress.failed += 1
        progress.current_reference = result.reference


def complete_progress(progress_id: str) -> None:
    with _lock:
        progress = _touch(progress_id, "complete")
        if progress is None:
            return
        progress.status = ProgressStatus.COMPLETED
        progress.current_reference = None
    logger.info("import_progress_completed", progress_id=progress_id)


def fail_progress(progress_id: str, error: str) -> None:
    """Mark an import as aborted by an unexpected error."""
    logger.error("import_progress_failed", progress_id=progress_id, error=error)
    with _lock:
        progress = _touch(progress_id, "fail")
        if progress is None:
            return
        progress.status = ProgressStatus.FAILED
        progress.error = error


def clear_progress() -> None:
    """Forget every record."""
    with _lock:
        _cache.clear()


def _cleanup_expired() -> None:
    """Remove all expired entries. Caller holds _lock."""
    now = datetime.now()
    expired = [k for k, (exp, _, _) in _cache.items() if now > exp]
    for k in expired:
        del _cache[k]
