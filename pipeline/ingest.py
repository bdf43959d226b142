"""Load the locations, stolen vehicles and make details CSVs as raw records."""

from __future__ import annotations

import csv
from collections.abc import Callable
from pathlib import Path

from pipeline.errors import MalformedInputError
from pipeline.models import (
    AuditEntry,
    RawBatch,
    RawLocation,
    RawStolenVehicle,
    RawVehicleMake,
)

RAW_DIR = Path(__file__).resolve().parent.parent / "data" / "raw"

LOCATIONS_CSV = "locations.csv"
VEHICLES_CSV = "stolen_vehicles.csv"
MAKES_CSV = "make_details.csv"

LOCATION_COLUMNS = ("location_id", "region", "country", "population", "density")
VEHICLE_COLUMNS = (
    "vehicle_id", "vehicle_type", "make_id", "model_year",
    "vehicle_desc", "color", "date_stolen", "location_id",
)
MAKE_COLUMNS = ("make_id", "make_name", "make_type")

AuditHook = Callable[[AuditEntry], None]


def _read_rows(path: Path, columns: tuple[str, ...]) -> list[dict]:
    """Read a headed CSV into dicts keyed by `columns`, plus the source line."""
    rows: list[dict] = []
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.reader(f)
        next(reader, None)  # header
        for fields in reader:
            if not fields:
                continue
            if len(fields) != len(columns):
                raise MalformedInputError(path, reader.line_num, len(columns), len(fields))
            row = {col: value.strip() for col, value in zip(columns, fields)}
            row["line"] = reader.line_num
            rows.append(row)
    return rows


def load_locations(path: Path) -> tuple[RawLocation, ...]:
    return tuple(RawLocation(**r) for r in _read_rows(path, LOCATION_COLUMNS))


def load_makes(path: Path) -> tuple[RawVehicleMake, ...]:
    return tuple(RawVehicleMake(**r) for r in _read_rows(path, MAKE_COLUMNS))


def load_vehicles(
    path: Path, on_vehicle: AuditHook | None = None
) -> tuple[RawStolenVehicle, ...]:
    """Load stolen vehicle rows, calling `on_vehicle` once per accepted row.

    The whole file is shape-checked before any audit entry is emitted, so a
    malformed file produces no audit trail.
    """
    vehicles = tuple(RawStolenVehicle(**r) for r in _read_rows(path, VEHICLE_COLUMNS))
    if on_vehicle is not None:
        for v in vehicles:
            on_vehicle(AuditEntry(vehicle_id=v.vehicle_id))
    return vehicles


def load(raw_dir: Path = RAW_DIR, on_vehicle: AuditHook | None = None) -> RawBatch:
    """Load all three source tables from `raw_dir`."""
    print(f"  reading from {raw_dir}")

    locations = load_locations(raw_dir / LOCATIONS_CSV)
    print(f"    {LOCATIONS_CSV}: {len(locations):,} rows")

    makes = load_makes(raw_dir / MAKES_CSV)
    print(f"    {MAKES_CSV}: {len(makes):,} rows")

    vehicles = load_vehicles(raw_dir / VEHICLES_CSV, on_vehicle=on_vehicle)
    print(f"    {VEHICLES_CSV}: {len(vehicles):,} rows")

    return RawBatch(locations=locations, vehicles=vehicles, makes=makes)
