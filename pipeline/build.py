"""Pipeline orchestrator: load -> clean -> export -> validate."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pipeline.clean import clean
from pipeline.errors import PipelineError
from pipeline.export import AGGREGATED_DIR, export
from pipeline.ingest import RAW_DIR, AuditHook, load
from pipeline.models import AuditEntry, Batch
from pipeline.validate import validate

audit_logger = logging.getLogger("pipeline.audit")


def log_audit(entry: AuditEntry) -> None:
    """Default audit sink: one log line per accepted stolen-vehicle record."""
    audit_logger.info("%s vehicle_id=%s %s", entry.timestamp.isoformat(), entry.vehicle_id, entry.message)


def run(
    raw_dir: Path = RAW_DIR,
    out_dir: Path = AGGREGATED_DIR,
    on_vehicle: AuditHook | None = log_audit,
) -> Batch:
    """Load and clean one batch, then export its aggregates.

    Nothing under `out_dir` is written unless the whole batch cleans.
    """
    print("\n── Step 1: Load ──")
    raw = load(raw_dir, on_vehicle=on_vehicle)

    print("\n── Step 2: Clean ──")
    batch = clean(raw)

    print("\n── Step 3: Export ──")
    export(batch, out_dir)
    return batch


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Stolen vehicles batch pipeline")
    parser.add_argument("--raw-dir", type=Path, default=RAW_DIR, help="Directory holding the source CSVs")
    parser.add_argument("--out-dir", type=Path, default=AGGREGATED_DIR, help="Directory for Parquet outputs")
    parser.add_argument("--quiet-audit", action="store_true", help="Do not log per-vehicle audit entries")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(name)s | %(message)s")
    t0 = time.time()

    print("=" * 60)
    print("Stolen Vehicles Pipeline")
    print("=" * 60)

    try:
        run(args.raw_dir, args.out_dir, on_vehicle=None if args.quiet_audit else log_audit)
    except PipelineError as exc:
        print(f"\n  FAIL  batch aborted: {exc}")
        return 1

    print("\n── Step 4: Validate ──")
    issues = validate(args.out_dir)

    elapsed = time.time() - t0
    print(f"\nPipeline complete in {elapsed:.1f}s")
    return 1 if issues else 0


if __name__ == "__main__":
    sys.exit(main())
