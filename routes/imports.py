"""
Catalog import API routes.

Thin layer over the batch orchestrators. Heavy endpoints are plain `def` so
FastAPI runs them in its threadpool instead of blocking the event loop.
"""

from fastapi import APIRouter, BackgroundTasks
from fastapi.responses import JSONResponse
import structlog

from models.imports import (
    ImportRequest,
    FastImportRequest,
    ExistenceRequest,
    ImportResult,
    ImportBatchSummary,
)
from services.batch_import_service import get_batch_import_service
from services.fast_batch_import_service import get_fast_batch_import_service
from services.admission_controller import get_admission_controller
from services import import_progress_service
from exceptions import AppError, ImportRequestError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def _clean_references(references: list[str]) -> list[str]:
    cleaned = [r.strip() for r in references if r and r.strip()]
    if not cleaned:
        raise ImportRequestError("At least one non-empty reference is required")
    return cleaned


def _run_fast_import(progress_id: str, references: list[str], config) -> None:
    """Background task body for POST /batch-fast."""
    service = get_fast_batch_import_service()
    try:
        service.import_many(
            references,
            config,
            on_progress=lambda done, total, result: import_progress_service.record_result(
                progress_id, result
            )
        )
    except Exception as e:
        logger.error("fast_import_aborted", progress_id=progress_id, error=str(e))
        import_progress_service.fail_progress(progress_id, str(e))
        return
    import_progress_service.complete_progress(progress_id)


# ===================
# ROUTES
# ===================

@router.post("/batch")
def import_batch(request: ImportRequest):
    """
    Import references sequentially and wait for the results.

    Returns:
        Summary counts plus one ImportResult per reference, in request order
    """
    try:
        references = _clean_references(request.references)
        results: list[ImportResult] = get_batch_import_service().import_many(
            references, request.config
        )
        summary = ImportBatchSummary.from_results(results)
        return {
            "summary": summary.model_dump(),
            "results": [r.model_dump(mode="json") for r in results],
        }
    except Exception as e:
        return handle_error(e)


@router.post("/batch-fast", status_code=202)
async def import_batch_fast(request: FastImportRequest, background_tasks: BackgroundTasks):
    """
    Start a fast import in the background.

    Returns:
        progress_id to poll at GET /progress/{progress_id}
    """
    try:
        references = _clean_references(request.references)
        progress = import_progress_service.create_progress(total=len(references))
        background_tasks.add_task(
            _run_fast_import, progress.progress_id, references, request.config
        )
        logger.info(
            "fast_import_scheduled",
            progress_id=progress.progress_id,
            total=len(references)
        )
        return {"progress_id": progress.progress_id, "total": len(references)}
    except Exception as e:
        return handle_error(e)


@router.get("/progress/{progress_id}")
def get_import_progress(progress_id: str):
    """Poll a background fast import."""
    try:
        progress = import_progress_service.get_progress(progress_id)
        return progress.model_dump(mode="json")
    except Exception as e:
        return handle_error(e)


@router.post("/existence")
def check_existence(request: ExistenceRequest):
    """Report which references already exist in the local store."""
    try:
        references = _clean_references(request.references)
        existing = get_fast_batch_import_service().check_existing(references)
        return {
            "existing": existing,
            "existing_count": sum(1 for v in existing.values() if v),
            "missing_count": sum(1 for v in existing.values() if not v),
        }
    except Exception as e:
        return handle_error(e)


@router.post("/cache/clear")
def clear_import_cache():
    """Drop the fast importer's brand and category caches."""
    try:
        service = get_fast_batch_import_service()
        before = service.cache_stats()
        service.clear_cache()
        return {"cleared": before}
    except Exception as e:
        return handle_error(e)


@router.get("/admission")
async def admission_status():
    """Current in-flight count, queue depth and ceiling of store admission control."""
    return get_admission_controller().status().to_dict()
