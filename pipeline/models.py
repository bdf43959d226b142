"""Record types passed between pipeline stages."""

from __future__ import annotations

from datetime import date, datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# ── Raw records (loader output, every field as text) ──────────────────

class RawLocation(_Record):
    line: int
    location_id: str
    region: str
    country: str
    population: str
    density: str


class RawVehicleMake(_Record):
    line: int
    make_id: str
    make_name: str
    make_type: str


class RawStolenVehicle(_Record):
    line: int
    vehicle_id: str
    vehicle_type: str
    make_id: str
    model_year: str
    vehicle_desc: str
    color: str
    date_stolen: str
    location_id: str


class RawBatch(_Record):
    locations: tuple[RawLocation, ...] = ()
    vehicles: tuple[RawStolenVehicle, ...] = ()
    makes: tuple[RawVehicleMake, ...] = ()


# ── Cleaned records ───────────────────────────────────────────────────

class Location(_Record):
    location_id: int
    region: str
    country: str
    population: int = Field(ge=0)
    density: float = Field(ge=0, allow_inf_nan=False)


class VehicleMake(_Record):
    make_id: int
    make_name: str
    make_type: str


class StolenVehicle(_Record):
    vehicle_id: int
    vehicle_type: str | None = None
    make_id: int | None = None
    model_year: int | None = None
    vehicle_desc: str | None = None
    color: str | None = None
    date_stolen: date
    location_id: int | None = None


class Batch(_Record):
    """One cleaned, committed set of records."""

    locations: tuple[Location, ...] = ()
    vehicles: tuple[StolenVehicle, ...] = ()
    makes: tuple[VehicleMake, ...] = ()
    repaired_dates: int = 0


# ── Derived rows ──────────────────────────────────────────────────────

class RegionProfile(_Record):
    region: str
    stolen_count: int
    unique_makes: int
    color_variation: int
    avg_population: float
    avg_density: float


class MonthlyTrendRecord(_Record):
    location_id: int
    region: str
    month: int = Field(ge=1, le=12)
    theft_count: int
    next_month_count: int | None = None


class TheftSummaryRow(_Record):
    region: str
    vehicle_type: str | None = None
    total_thefts: int
    color_variety: int
    unique_makes: int


class AuditEntry(_Record):
    vehicle_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    message: str = "New stolen vehicle record inserted."
