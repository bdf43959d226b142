"""Pydantic response models for the API."""

from __future__ import annotations

from pydantic import BaseModel


class FilterOptions(BaseModel):
    regions: list[str]
    vehicle_types: list[str]


class SummaryRow(BaseModel):
    region: str
    vehicle_type: str | None = None
    total_thefts: int
    color_variety: int
    unique_makes: int


class RegionRow(BaseModel):
    region: str
    stolen_count: int
    unique_makes: int
    color_variation: int
    avg_population: float
    avg_density: float


class TrendRow(BaseModel):
    location_id: int
    region: str
    month: int
    theft_count: int
    next_month_count: int


class CountRow(BaseModel):
    label: str | None = None
    count: int
