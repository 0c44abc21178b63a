"""
Per-reference import pipeline.

The dependency graph between stages is declared once in IMPORT_PIPELINE and
walked by run_pipeline(). Orchestrators only supply one handler per stage.

    Product -> {Brand, Category}      (independent of each other)
    Product -> Skus -> {Images, Stock}
    Product -> Attributes

Rules applied by the walker:
    - a stage disabled in ImportConfig is SKIPPED
    - a stage whose required stages did not all succeed is BLOCKED
    - a failed hard stage (Product) ends the run, every later stage is
      NOT_EXECUTED, unless config.skip_existing is set
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional
import structlog

from models.imports import (
    Stage,
    StageStatus,
    ErrorKind,
    ImportState,
    ImportConfig,
    ImportResult,
    StageError,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StageSpec:
    """One node of the pipeline graph."""
    stage: Stage
    requires: tuple[Stage, ...] = ()
    hard: bool = False
    reached: Optional[ImportState] = None  # State entered when the stage succeeds


IMPORT_PIPELINE: tuple[StageSpec, ...] = (
    StageSpec(Stage.PRODUCT, hard=True, reached=ImportState.PRODUCT_IMPORTED),
    StageSpec(Stage.BRAND, requires=(Stage.PRODUCT,), reached=ImportState.BRAND_IMPORTED),
    StageSpec(Stage.CATEGORY, requires=(Stage.PRODUCT,), reached=ImportState.CATEGORY_IMPORTED),
    StageSpec(Stage.SKUS, requires=(Stage.PRODUCT,), reached=ImportState.SKUS_IMPORTED),
    StageSpec(Stage.IMAGES, requires=(Stage.SKUS,)),
    StageSpec(Stage.STOCK, requires=(Stage.SKUS,), reached=ImportState.IMAGES_AND_STOCK_IMPORTED),
    StageSpec(Stage.ATTRIBUTES, requires=(Stage.PRODUCT,), reached=ImportState.ATTRIBUTES_IMPORTED),
)


@dataclass
class ImportRun:
    """
    Mutable state of one reference while the pipeline walks it.

    Stage handlers read upstream outputs (product, skus) from here and write
    their results and errors into result.
    """
    reference: str
    config: ImportConfig
    result: Optional[ImportResult] = None
    product: Optional[dict[str, Any]] = None
    skus: list[dict[str, Any]] = field(default_factory=list)
    current_stage: Optional[Stage] = None
    aborted_by: Optional[Stage] = None

    def __post_init__(self):
        if self.result is None:
            self.result = ImportResult(reference=self.reference, success=False, message="")

    def status_of(self, stage: Stage) -> Optional[StageStatus]:
        return self.result.stage_status.get(stage)

    def mark(self, stage: Stage, status: StageStatus) -> None:
        self.result.stage_status[stage] = status

    def add_error(
        self,
        stage: Optional[Stage],
        kind: ErrorKind,
        message: str,
        key: Any = None
    ) -> None:
        self.result.errors.append(
            StageError(
                stage=stage,
                kind=kind,
                message=message,
                key=str(key) if key is not None else None
            )
        )

    def errors_for(self, stage: Stage) -> list[StageError]:
        return [e for e in self.result.errors if e.stage == stage]


StageHandler = Callable[[ImportRun], StageStatus]


def run_pipeline(
    run: ImportRun,
    handlers: Mapping[Stage, StageHandler],
    pipeline: tuple[StageSpec, ...] = IMPORT_PIPELINE
) -> None:
    """
    Walk the pipeline for one reference.

    Handlers return the stage's StageStatus. Exceptions raised by a handler
    propagate; the caller decides how to report them.
    """
    for index, step in enumerate(pipeline):
        stage = step.stage

        if not run.config.is_enabled(stage):
            run.mark(stage, StageStatus.SKIPPED)
            logger.debug("stage_disabled", reference=run.reference, stage=stage.value)
            continue

        unmet = [s for s in step.requires if run.status_of(s) != StageStatus.SUCCEEDED]
        if unmet:
            run.mark(stage, StageStatus.BLOCKED)
            logger.info(
                "stage_blocked",
                reference=run.reference,
                stage=stage.value,
                waiting_on=[s.value for s in unmet]
            )
            continue

        run.current_stage = stage
        status = handlers[stage](run)
        run.mark(stage, status)

        if status == StageStatus.SUCCEEDED and step.reached:
            run.result.state = step.reached

        if status == StageStatus.FAILED and step.hard and not run.config.skip_existing:
            for remaining in pipeline[index + 1:]:
                run.mark(remaining.stage, StageStatus.NOT_EXECUTED)
            run.aborted_by = stage
            run.current_stage = None
            return

    run.current_stage = None
    run.result.state = ImportState.DONE
