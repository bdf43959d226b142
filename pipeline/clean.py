"""Repair dates, coerce numeric columns, and commit a cleaned batch.

Cleaning is all-or-nothing: every record of all three tables is converted
before a `Batch` is returned, and the first bad value raises.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import date, datetime

from pipeline.errors import TypeCoercionError, UnparseableDateError
from pipeline.models import (
    Batch,
    Location,
    RawBatch,
    RawLocation,
    RawStolenVehicle,
    RawVehicleMake,
    StolenVehicle,
    VehicleMake,
)

logger = logging.getLogger(__name__)

# Known malformed literals in stolen_vehicles.date_stolen
DATE_REPAIRS: dict[str, str] = {
    "2021/15/10": "2021-10-15",
    "13-02-2022": "2022-02-13",
}

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%Y/%m/%d")

# Integer columns are stored as 32-bit INTEGER
INT_MIN, INT_MAX = -(2**31), 2**31 - 1


def parse_date(value: str) -> date | None:
    """Parse a calendar date under any accepted format, or return None."""
    value = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def repair_date(
    value: str, vehicle_id: str, line: int,
    repairs: Mapping[str, str] = DATE_REPAIRS,
) -> tuple[date, bool]:
    """Return (date, was_repaired) for a raw date_stolen value."""
    parsed = parse_date(value)
    if parsed is not None:
        return parsed, False
    fixed = repairs.get(value.strip())
    if fixed is not None:
        parsed = parse_date(fixed)
        if parsed is not None:
            logger.info("repaired date_stolen %r -> %s (vehicle_id=%s)", value, parsed, vehicle_id)
            return parsed, True
    raise UnparseableDateError(vehicle_id, line, value)


def _to_int(value: str, table: str, field: str, line: int, *, optional: bool = False) -> int | None:
    if not value and optional:
        return None
    try:
        number = int(value)
    except ValueError:
        raise TypeCoercionError(table, field, line, value) from None
    if not INT_MIN <= number <= INT_MAX:
        raise TypeCoercionError(table, field, line, value)
    return number


def _to_float(value: str, table: str, field: str, line: int) -> float:
    try:
        return float(value)
    except ValueError:
        raise TypeCoercionError(table, field, line, value) from None


def _text(value: str) -> str | None:
    return value or None


def clean_location(raw: RawLocation) -> Location:
    population = _to_int(raw.population, "locations", "population", raw.line)
    density = _to_float(raw.density, "locations", "density", raw.line)
    if population < 0:
        raise TypeCoercionError("locations", "population", raw.line, raw.population)
    if density < 0 or not math.isfinite(density):
        raise TypeCoercionError("locations", "density", raw.line, raw.density)
    return Location(
        location_id=_to_int(raw.location_id, "locations", "location_id", raw.line),
        region=raw.region,
        country=raw.country,
        population=population,
        density=density,
    )


def clean_make(raw: RawVehicleMake) -> VehicleMake:
    return VehicleMake(
        make_id=_to_int(raw.make_id, "make_details", "make_id", raw.line),
        make_name=raw.make_name,
        make_type=raw.make_type,
    )


def clean_vehicle(
    raw: RawStolenVehicle, repairs: Mapping[str, str] = DATE_REPAIRS
) -> tuple[StolenVehicle, bool]:
    table = "stolen_vehicles"
    date_stolen, repaired = repair_date(raw.date_stolen, raw.vehicle_id, raw.line, repairs)
    vehicle = StolenVehicle(
        vehicle_id=_to_int(raw.vehicle_id, table, "vehicle_id", raw.line),
        vehicle_type=_text(raw.vehicle_type),
        make_id=_to_int(raw.make_id, table, "make_id", raw.line, optional=True),
        model_year=_to_int(raw.model_year, table, "model_year", raw.line, optional=True),
        vehicle_desc=_text(raw.vehicle_desc),
        color=_text(raw.color),
        date_stolen=date_stolen,
        location_id=_to_int(raw.location_id, table, "location_id", raw.line, optional=True),
    )
    return vehicle, repaired


def clean(raw: RawBatch, repairs: Mapping[str, str] = DATE_REPAIRS) -> Batch:
    """Clean every record of `raw`; raises on the first bad value."""
    locations = tuple(clean_location(r) for r in raw.locations)
    makes = tuple(clean_make(r) for r in raw.makes)

    vehicles: list[StolenVehicle] = []
    repaired = 0
    for r in raw.vehicles:
        vehicle, was_repaired = clean_vehicle(r, repairs)
        vehicles.append(vehicle)
        repaired += was_repaired

    print(f"    cleaned {len(locations):,} locations, {len(makes):,} makes, "
          f"{len(vehicles):,} vehicles ({repaired} dates repaired)")
    return Batch(
        locations=locations,
        vehicles=tuple(vehicles),
        makes=makes,
        repaired_dates=repaired,
    )
