"""Query layer over the exported stolen-vehicle aggregates."""

from __future__ import annotations

import os
from pathlib import Path

import duckdb

from pipeline.export import AGGREGATED_DIR, SUMMARY_NAME, sql_path

AGG_DIR_ENV = "STOLEN_VEHICLES_AGG_DIR"


class MissingAggregateError(FileNotFoundError):
    """An aggregate Parquet file has not been exported yet."""


def _agg_dir() -> Path:
    return Path(os.environ.get(AGG_DIR_ENV, AGGREGATED_DIR))


def _path(name: str) -> str:
    """Quote-safe path of an exported aggregate, for use inside a SQL literal."""
    path = _agg_dir() / f"{name}.parquet"
    if not path.exists():
        raise MissingAggregateError(f"{path.name} not found; run the pipeline first")
    return sql_path(path)


def _run(sql: str, params: list | None = None) -> list[dict]:
    con = duckdb.connect()
    try:
        df = con.execute(sql, params or []).fetchdf()
        # NULL text comes back as NaN under some pandas string dtypes
        return df.astype(object).where(df.notna(), None).to_dict(orient="records")
    finally:
        con.close()


def _where(**filters: str | None) -> tuple[str, list]:
    clauses = [f"{col} = ?" for col, value in filters.items() if value is not None]
    params = [value for value in filters.values() if value is not None]
    if not clauses:
        return "", []
    return "WHERE " + " AND ".join(clauses), params


# ── Filter options ────────────────────────────────────────────────────

def get_filter_options() -> dict:
    """Regions and vehicle types present in the theft summary."""
    summary = _path(SUMMARY_NAME)
    con = duckdb.connect()
    try:
        regions = [r[0] for r in con.execute(
            f"SELECT DISTINCT region FROM '{summary}' ORDER BY region"
        ).fetchall()]
        vehicle_types = [r[0] for r in con.execute(
            f"SELECT DISTINCT vehicle_type FROM '{summary}' "
            "WHERE vehicle_type IS NOT NULL ORDER BY vehicle_type"
        ).fetchall()]
        return {"regions": regions, "vehicle_types": vehicle_types}
    finally:
        con.close()


# ── Theft summary ────────────────────────────────────────────────────

def get_summary(region: str | None = None, vehicle_type: str | None = None) -> list[dict]:
    w, params = _where(region=region, vehicle_type=vehicle_type)
    return _run(f"""
        SELECT region, vehicle_type, total_thefts, color_variety, unique_makes
        FROM '{_path(SUMMARY_NAME)}' {w}
        ORDER BY total_thefts DESC, region, vehicle_type
    """, params)


# ── Regions ──────────────────────────────────────────────────────────

def get_regions() -> list[dict]:
    return _run(f"""
        SELECT region, stolen_count, unique_makes, color_variation,
               avg_population, avg_density
        FROM '{_path("region_profile")}'
        ORDER BY stolen_count DESC, region
    """)


# ── Trends ───────────────────────────────────────────────────────────

def get_trends(region: str | None = None) -> list[dict]:
    w, params = _where(region=region)
    return _run(f"""
        SELECT location_id, region,
               theft_month AS month,
               monthly_thefts AS theft_count,
               next_month_thefts AS next_month_count
        FROM '{_path("monthly_trends")}' {w}
        ORDER BY location_id, theft_month
    """, params)


# ── Simple breakdowns ────────────────────────────────────────────────

def get_vehicle_types() -> list[dict]:
    return _run(f"""
        SELECT vehicle_type AS label, theft_count AS count
        FROM '{_path("vehicle_types")}'
        ORDER BY count DESC, label
    """)


def get_colors() -> list[dict]:
    return _run(f"""
        SELECT color AS label, total_thefts AS count
        FROM '{_path("colors")}'
        ORDER BY count DESC, label NULLS LAST
    """)


def get_make_types() -> list[dict]:
    return _run(f"""
        SELECT make_type AS label, total_stolen AS count
        FROM '{_path("make_types")}'
        ORDER BY count DESC, label
    """)


def get_day_types() -> list[dict]:
    return _run(f"""
        SELECT day_type AS label, theft_count AS count
        FROM '{_path("day_types")}'
        ORDER BY count DESC, label
    """)


def get_segments() -> list[dict]:
    return _run(f"""
        SELECT vehicle_segment AS label, theft_count AS count
        FROM '{_path("age_segments")}'
        ORDER BY count DESC, label
    """)
