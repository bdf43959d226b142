"""Validate the exported stolen-vehicle aggregates."""

from __future__ import annotations

from pathlib import Path

import duckdb

from pipeline.export import AGGREGATED_DIR, EXPORTS, SUMMARY_NAME, sql_path


def _q(sql: str) -> list:
    con = duckdb.connect()
    try:
        return con.execute(sql).fetchall()
    finally:
        con.close()


def _scalar(sql: str):
    rows = _q(sql)
    return rows[0][0] if rows else None


def _header(num: int, title: str) -> None:
    print(f"\n{'─' * 64}")
    print(f"  Check {num}: {title}")
    print(f"{'─' * 64}")


def validate(out_dir: Path = AGGREGATED_DIR) -> int:
    """Run all validation checks. Returns count of issues found."""
    issues = 0
    paths = {name: out_dir / f"{name}.parquet" for name in EXPORTS}
    summary = paths[SUMMARY_NAME]
    day_types = paths["day_types"]
    segments = paths["age_segments"]
    trends = paths["monthly_trends"]

    # ── Check 1: File existence ──
    _header(1, "Aggregation file existence")
    for name, path in paths.items():
        if path.exists():
            count = _scalar(f"SELECT COUNT(*) FROM '{sql_path(path)}'")
            print(f"  PASS  {name}: {count:,} rows")
        else:
            print(f"  FAIL  {name}: NOT FOUND")
            issues += 1

    # ── Check 2: Weekday/weekend split covers every vehicle ──
    _header(2, "Weekday + weekend totals match vehicle total")
    total = None
    if day_types.exists() and segments.exists():
        split = _scalar(f"SELECT COALESCE(SUM(theft_count), 0) FROM '{sql_path(day_types)}'")
        total = _scalar(f"SELECT COALESCE(SUM(theft_count), 0) FROM '{sql_path(segments)}'")
        if split == total:
            print(f"  PASS  {split:,} = {total:,}")
        else:
            print(f"  FAIL  weekday/weekend {split:,} != segments {total:,}")
            issues += 1

    # ── Check 3: Summary is populated ──
    _header(3, "Theft summary row count")
    if summary.exists():
        count = _scalar(f"SELECT COUNT(*) FROM '{sql_path(summary)}'")
        if count:
            print(f"  PASS  {count:,} (region, vehicle_type) rows")
        elif not total:
            print("  INFO  summary is empty (batch has no vehicles)")
        else:
            print(f"  WARN  summary is empty, none of {total:,} vehicles joined to both a make and a location")
            issues += 1

    # ── Check 4: Trend rows strictly increase ──
    _header(4, "Rising trend rows")
    if trends.exists():
        bad = _scalar(f"""
            SELECT COUNT(*) FROM '{sql_path(trends)}'
            WHERE next_month_thefts IS NULL OR monthly_thefts >= next_month_thefts
        """)
        count = _scalar(f"SELECT COUNT(*) FROM '{sql_path(trends)}'")
        if bad == 0:
            print(f"  PASS  {count:,} rising (location, month) rows")
        else:
            print(f"  FAIL  {bad:,} rows are not strictly increasing")
            issues += 1

    # ── Check 5: Joined totals bounded by vehicle total ──
    _header(5, "Summary totals within vehicle total")
    if summary.exists() and total is not None:
        joined = _scalar(f"SELECT COALESCE(SUM(total_thefts), 0) FROM '{sql_path(summary)}'")
        if joined <= total:
            dropped = total - joined
            print(f"  PASS  {joined:,} joined, {dropped:,} dropped by missing make/location")
        else:
            print(f"  FAIL  summary {joined:,} exceeds vehicle total {total:,}")
            issues += 1

    # ── Check 6: Top regions ──
    _header(6, "Top regions by stolen count")
    profile = paths["region_profile"]
    if profile.exists():
        rows = _q(f"""
            SELECT region, stolen_count, avg_population
            FROM '{sql_path(profile)}'
            ORDER BY stolen_count DESC
            LIMIT 5
        """)
        for region, n, pop in rows:
            print(f"  INFO  {region}: {n:,} (avg population {pop:,.0f})")

    # ── Summary ──
    print(f"\n{'=' * 64}")
    if issues == 0:
        print("  All checks passed!")
    else:
        print(f"  {issues} issue(s) found")
    print(f"{'=' * 64}")

    return issues


if __name__ == "__main__":
    validate()
