"""
Fast catalog import from the command line.

Usage:
    # References as arguments
    python scripts/fast_import.py TROMOLM0090L1 TROMOLM0090L2

    # References from a file (one per line, # comments allowed)
    python scripts/fast_import.py --file refs.txt --warehouse 13 --skip-images
"""

import argparse
import os
import sys

# Allow imports from the project root when running as a script
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), ".."))

from config import configure_logging, settings
from exceptions import AppError
from models.imports import FastImportConfig, ImportBatchSummary, ImportResult
from services.fast_batch_import_service import FastBatchImportService


def read_references(path: str) -> list[str]:
    """Read one reference per line, ignoring blanks and # comments."""
    with open(path, encoding="utf-8") as f:
        lines = [line.split("#", 1)[0].strip() for line in f]
    return [line for line in lines if line]


def build_config(args: argparse.Namespace) -> FastImportConfig:
    return FastImportConfig(
        batch_size=args.batch_size,
        import_images=not args.skip_images,
        import_stock=not args.skip_stock,
        import_attributes=not args.skip_attributes,
        warehouse_filter=args.warehouse,
    )


def print_progress(done: int, total: int, result: ImportResult) -> None:
    mark = "OK  " if result.success else "FAIL"
    print(f"  [{done}/{total}] {mark} {result.reference}: {result.message}")


def print_summary(results: list[ImportResult]) -> None:
    summary = ImportBatchSummary.from_results(results)
    print("=" * 60)
    print(f"Imported {summary.total} references: "
          f"{summary.succeeded} succeeded, {summary.failed} failed")
    for result in results:
        if result.success:
            continue
        print(f"  {result.reference}")
        for error in result.errors:
            stage = error.stage.value if error.stage else "-"
            print(f"    {stage:<10} {error.kind.value:<14} {error.message}")
    print("=" * 60)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Import catalog references into the local store, in groups."
    )
    parser.add_argument(
        "references",
        nargs="*",
        help="Catalog reference ids",
    )
    parser.add_argument(
        "--file",
        default="",
        help="File with one reference per line",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.fast_import_batch_size,
        help="References per group (max 10)",
    )
    parser.add_argument(
        "--warehouse",
        default=settings.default_warehouse_filter,
        help="Only persist stock for this warehouse id or name",
    )
    parser.add_argument(
        "--skip-images",
        action="store_true",
        help="Do not import images",
    )
    parser.add_argument(
        "--skip-stock",
        action="store_true",
        help="Do not import stock",
    )
    parser.add_argument(
        "--skip-attributes",
        action="store_true",
        help="Do not import attributes",
    )

    args = parser.parse_args(argv)

    references = list(args.references)
    if args.file:
        references.extend(read_references(args.file))
    if not references:
        print("ERROR: no references given (pass them as arguments or with --file).")
        return 1
    if args.batch_size < 1:
        print("ERROR: --batch-size must be at least 1.")
        return 1

    configure_logging()

    print("=" * 60)
    print(f"FAST CATALOG IMPORT: {len(references)} references")
    print("=" * 60)

    try:
        service = FastBatchImportService()
    except AppError as e:
        print(f"ERROR: {e.message}")
        return 1

    results = service.import_many(
        references,
        build_config(args),
        on_progress=print_progress,
    )
    print_summary(results)

    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
