"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, CatalogPayload
from models.catalog import (
    RemoteProduct,
    RemoteBrand,
    RemoteCategory,
    RemoteSku,
    RemoteImage,
    RemoteStockBalance,
    RemoteStock,
    RemoteAttribute,
)
from models.imports import (
    Stage,
    ErrorKind,
    StageStatus,
    ImportState,
    EntityData,
    CollectionData,
    EntityImportResult,
    CollectionImportResult,
    StageError,
    ImportConfig,
    FastImportConfig,
    ImportResult,
    ImportBatchSummary,
    ProgressStatus,
    ImportProgress,
    ImportRequest,
    FastImportRequest,
    ExistenceRequest,
)

__all__ = [
    # Base
    "BaseSchema",
    "CatalogPayload",

    # Catalog payloads
    "RemoteProduct",
    "RemoteBrand",
    "RemoteCategory",
    "RemoteSku",
    "RemoteImage",
    "RemoteStockBalance",
    "RemoteStock",
    "RemoteAttribute",

    # Import pipeline
    "Stage",
    "ErrorKind",
    "StageStatus",
    "ImportState",
    "EntityData",
    "CollectionData",
    "EntityImportResult",
    "CollectionImportResult",
    "StageError",
    "ImportConfig",
    "FastImportConfig",
    "ImportResult",
    "ImportBatchSummary",
    "ProgressStatus",
    "ImportProgress",
    "ImportRequest",
    "FastImportRequest",
    "ExistenceRequest",
]
