"""Aggregate statistics and month-over-month trend detection over a cleaned batch.

Every function loads the records it needs into a fresh in-memory duckdb
connection, runs one query, and closes the connection. Joins are INNER, so
vehicles whose make_id or location_id has no parent record drop out.
"""

from __future__ import annotations

from collections.abc import Iterable

import duckdb
import pandas as pd

from pipeline.models import (
    Location,
    MonthlyTrendRecord,
    RegionProfile,
    StolenVehicle,
    VehicleMake,
)

# ── Table definitions ─────────────────────────────────────────────────

_TABLES = {
    "vehicles": (
        StolenVehicle,
        """
        vehicle_id INTEGER,
        vehicle_type VARCHAR,
        make_id INTEGER,
        model_year INTEGER,
        vehicle_desc VARCHAR,
        color VARCHAR,
        date_stolen DATE,
        location_id INTEGER
        """,
    ),
    "makes": (
        VehicleMake,
        """
        make_id INTEGER,
        make_name VARCHAR,
        make_type VARCHAR
        """,
    ),
    "locations": (
        Location,
        """
        location_id INTEGER,
        region VARCHAR,
        country VARCHAR,
        population INTEGER,
        density DOUBLE
        """,
    ),
}

# Age segments by model_year, checked in order; unknown years fall through
_SEGMENT_CASE = """
    CASE
        WHEN model_year BETWEEN 1940 AND 1960 THEN 'vintage_model'
        WHEN model_year BETWEEN 1961 AND 2000 THEN 'oldest_model'
        WHEN model_year BETWEEN 2001 AND 2017 THEN 'mid_range_model'
        ELSE 'latest_model'
    END
"""

_DAY_TYPE_CASE = """
    CASE WHEN ISODOW(date_stolen) IN (6, 7) THEN 'Weekend' ELSE 'Weekday' END
"""

# Shared CTE: one row per vehicle with both parents present
_VEHICLE_PROFILE = """
    vehicle_profile AS (
        SELECT s.vehicle_id, m.make_type, m.make_name, s.vehicle_type,
               s.model_year, s.color, s.date_stolen,
               l.region, l.population, l.density
        FROM vehicles s
        JOIN makes m ON s.make_id = m.make_id
        JOIN locations l ON s.location_id = l.location_id
    )
"""


def connect(
    vehicles: Iterable[StolenVehicle] = (),
    makes: Iterable[VehicleMake] = (),
    locations: Iterable[Location] = (),
) -> duckdb.DuckDBPyConnection:
    """Open an in-memory connection holding the three record tables."""
    con = duckdb.connect()
    for name, records in (("vehicles", vehicles), ("makes", makes), ("locations", locations)):
        model, columns = _TABLES[name]
        con.execute(f"CREATE TABLE {name} ({columns})")
        fields = list(model.model_fields)
        # object dtype keeps None as NULL instead of NaN in nullable int columns
        df = pd.DataFrame([r.model_dump() for r in records], columns=fields, dtype=object)
        if not df.empty:
            con.register(f"{name}_frame", df)
            con.execute(f"INSERT INTO {name} SELECT {', '.join(fields)} FROM {name}_frame")
            con.unregister(f"{name}_frame")
    return con


def _run(sql: str, **records: Iterable) -> list[tuple]:
    con = connect(**records)
    try:
        return con.execute(sql).fetchall()
    finally:
        con.close()


# ── Aggregates ────────────────────────────────────────────────────────

VEHICLE_TYPES_SQL = """
    SELECT vehicle_type, COUNT(vehicle_id) AS theft_count
    FROM vehicles
    WHERE vehicle_type IS NOT NULL AND vehicle_type <> ''
    GROUP BY vehicle_type
    ORDER BY theft_count DESC, vehicle_type
"""

COLORS_SQL = """
    SELECT color, COUNT(*) AS total_thefts
    FROM vehicles
    GROUP BY color
    ORDER BY total_thefts DESC, color NULLS LAST
"""

MAKE_TYPES_SQL = """
    SELECT m.make_type, COUNT(s.vehicle_id) AS total_stolen
    FROM makes m
    JOIN vehicles s ON m.make_id = s.make_id
    GROUP BY m.make_type
    ORDER BY total_stolen DESC, m.make_type
"""

DAY_TYPES_SQL = f"""
    SELECT {_DAY_TYPE_CASE} AS day_type, COUNT(*) AS theft_count
    FROM vehicles
    GROUP BY day_type
    ORDER BY theft_count DESC, day_type
"""

REGION_PROFILE_SQL = f"""
    WITH {_VEHICLE_PROFILE}
    SELECT region,
           COUNT(vehicle_id) AS stolen_count,
           COUNT(DISTINCT make_name) AS unique_makes,
           COUNT(DISTINCT color) AS color_variation,
           AVG(CAST(population AS DOUBLE)) AS avg_population,
           AVG(density) AS avg_density
    FROM vehicle_profile
    GROUP BY region
    ORDER BY stolen_count DESC, region
"""

VEHICLE_SEGMENTS_SQL = f"""
    SELECT vehicle_id, {_SEGMENT_CASE} AS vehicle_segment
    FROM vehicles
    ORDER BY vehicle_id
"""

SEGMENT_COUNTS_SQL = f"""
    SELECT {_SEGMENT_CASE} AS vehicle_segment, COUNT(*) AS theft_count
    FROM vehicles
    GROUP BY vehicle_segment
    ORDER BY theft_count DESC, vehicle_segment
"""


def vehicle_count_by_type(vehicles: Iterable[StolenVehicle]) -> dict[str, int]:
    return dict(_run(VEHICLE_TYPES_SQL, vehicles=vehicles))


def theft_count_by_color(vehicles: Iterable[StolenVehicle]) -> dict[str | None, int]:
    return dict(_run(COLORS_SQL, vehicles=vehicles))


def stolen_count_by_make_type(
    vehicles: Iterable[StolenVehicle], makes: Iterable[VehicleMake]
) -> dict[str, int]:
    return dict(_run(MAKE_TYPES_SQL, vehicles=vehicles, makes=makes))


def weekday_vs_weekend(vehicles: Iterable[StolenVehicle]) -> dict[str, int]:
    """Theft counts bucketed into 'Weekday' and 'Weekend' by date_stolen."""
    return dict(_run(DAY_TYPES_SQL, vehicles=vehicles))


def region_profile(
    vehicles: Iterable[StolenVehicle],
    makes: Iterable[VehicleMake],
    locations: Iterable[Location],
) -> list[RegionProfile]:
    rows = _run(REGION_PROFILE_SQL, vehicles=vehicles, makes=makes, locations=locations)
    return [
        RegionProfile(
            region=region, stolen_count=n, unique_makes=makes_n,
            color_variation=colors_n, avg_population=pop, avg_density=dens,
        )
        for region, n, makes_n, colors_n, pop, dens in rows
    ]


def segment_by_age(vehicles: Iterable[StolenVehicle]) -> dict[int, str]:
    """Map each vehicle_id to its model-year segment."""
    return dict(_run(VEHICLE_SEGMENTS_SQL, vehicles=vehicles))


def segment_counts(vehicles: Iterable[StolenVehicle]) -> dict[str, int]:
    return dict(_run(SEGMENT_COUNTS_SQL, vehicles=vehicles))


# ── Trends ────────────────────────────────────────────────────────────

# Month is month-of-year only: December of one year sits next to January of
# another within the same location.
_MONTHLY_THEFT = """
    monthly_theft AS (
        SELECT s.location_id, l.region,
               MONTH(s.date_stolen) AS theft_month,
               COUNT(s.vehicle_id) AS monthly_thefts
        FROM vehicles s
        JOIN locations l ON s.location_id = l.location_id
        GROUP BY s.location_id, l.region, MONTH(s.date_stolen)
    ),
    trend_check AS (
        SELECT *,
               LEAD(monthly_thefts) OVER (
                   PARTITION BY location_id ORDER BY theft_month
               ) AS next_month_thefts
        FROM monthly_theft
    )
"""

MONTHLY_THEFT_SQL = f"""
    WITH {_MONTHLY_THEFT}
    SELECT location_id, region, theft_month, monthly_thefts, next_month_thefts
    FROM trend_check
    ORDER BY location_id, theft_month
"""

RISING_TRENDS_SQL = f"""
    WITH {_MONTHLY_THEFT}
    SELECT location_id, region, theft_month, monthly_thefts, next_month_thefts
    FROM trend_check
    WHERE monthly_thefts < next_month_thefts
    ORDER BY location_id, theft_month
"""


def _trend_records(rows: list[tuple]) -> list[MonthlyTrendRecord]:
    return [
        MonthlyTrendRecord(
            location_id=loc, region=region, month=month,
            theft_count=n, next_month_count=next_n,
        )
        for loc, region, month, n, next_n in rows
    ]


def monthly_theft_counts(
    vehicles: Iterable[StolenVehicle], locations: Iterable[Location]
) -> list[MonthlyTrendRecord]:
    """Every (location, month) count with the next observed month's count."""
    return _trend_records(_run(MONTHLY_THEFT_SQL, vehicles=vehicles, locations=locations))


def detect_rising_trends(
    vehicles: Iterable[StolenVehicle], locations: Iterable[Location]
) -> list[MonthlyTrendRecord]:
    """(location, month) rows whose theft count rises into the next observed month."""
    return _trend_records(_run(RISING_TRENDS_SQL, vehicles=vehicles, locations=locations))
