"""Build the (region, vehicle_type) theft summary and export aggregates to Parquet."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import duckdb

from pipeline import transform
from pipeline.models import Batch, Location, StolenVehicle, TheftSummaryRow, VehicleMake

AGGREGATED_DIR = Path(__file__).resolve().parent.parent / "data" / "aggregated"


def sql_path(path: Path) -> str:
    """Path text safe to embed in a single-quoted SQL literal."""
    return str(path).replace(chr(39), chr(39) * 2)


SUMMARY_NAME = "vehicle_theft_summary"

THEFT_SUMMARY_SQL = """
    SELECT l.region,
           s.vehicle_type,
           COUNT(s.vehicle_id) AS total_thefts,
           COUNT(DISTINCT s.color) AS color_variety,
           COUNT(DISTINCT m.make_name) AS unique_makes
    FROM vehicles s
    JOIN makes m ON s.make_id = m.make_id
    JOIN locations l ON s.location_id = l.location_id
    GROUP BY l.region, s.vehicle_type
    ORDER BY l.region, s.vehicle_type NULLS LAST
"""

# Output name -> query; every file is rebuilt from the batch on each run
EXPORTS = {
    SUMMARY_NAME: THEFT_SUMMARY_SQL,
    "vehicle_types": transform.VEHICLE_TYPES_SQL,
    "colors": transform.COLORS_SQL,
    "make_types": transform.MAKE_TYPES_SQL,
    "day_types": transform.DAY_TYPES_SQL,
    "region_profile": transform.REGION_PROFILE_SQL,
    "monthly_trends": transform.RISING_TRENDS_SQL,
    "age_segments": transform.SEGMENT_COUNTS_SQL,
}


def theft_summary(
    vehicles: Iterable[StolenVehicle],
    makes: Iterable[VehicleMake],
    locations: Iterable[Location],
) -> list[TheftSummaryRow]:
    """Thefts, distinct colors and distinct makes per (region, vehicle_type)."""
    con = transform.connect(vehicles, makes, locations)
    try:
        rows = con.execute(THEFT_SUMMARY_SQL).fetchall()
    finally:
        con.close()
    return [
        TheftSummaryRow(
            region=region, vehicle_type=vtype, total_thefts=n,
            color_variety=colors_n, unique_makes=makes_n,
        )
        for region, vtype, n, colors_n, makes_n in rows
    ]


def _export(con: duckdb.DuckDBPyConnection, sql: str, path: Path) -> int:
    """Run COPY ... TO parquet ZSTD. Returns row count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    con.execute(f"COPY ({sql}) TO '{sql_path(path)}' (FORMAT PARQUET, COMPRESSION ZSTD)")
    count = con.execute(f"SELECT COUNT(*) FROM '{sql_path(path)}'").fetchone()[0]
    print(f"    {path.name}: {count:,} rows")
    return count


def export(batch: Batch, out_dir: Path = AGGREGATED_DIR) -> dict[str, Path]:
    """Write every aggregate of `batch` under `out_dir`. Returns name -> path."""
    paths: dict[str, Path] = {}
    con = transform.connect(batch.vehicles, batch.makes, batch.locations)
    try:
        for name, sql in EXPORTS.items():
            path = out_dir / f"{name}.parquet"
            _export(con, sql, path)
            paths[name] = path
    finally:
        con.close()
    return paths
