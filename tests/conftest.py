"""Shared fixtures: a small three-table dataset written as CSVs."""

import csv
from datetime import date

import pytest

from pipeline.clean import clean
from pipeline.ingest import LOCATION_COLUMNS, MAKE_COLUMNS, VEHICLE_COLUMNS, load
from pipeline.models import Location, StolenVehicle

LOCATION_ROWS = [
    ["5", "North", "X", "100000", "250.5"],
    ["6", "South", "X", "50000", "120.0"],
    ["7", "East", "X", "20000", "60.0"],
]

MAKE_ROWS = [
    ["10", "Toyota", "Standard"],
    ["11", "BMW", "Luxury"],
    ["12", "Ford", "Standard"],
]

# Vehicle 6 points at a missing make, vehicle 7 at a missing location.
# Vehicles 1 and 4 carry the two known malformed dates.
VEHICLE_ROWS = [
    ["1", "Saloon", "10", "2015", "Corolla", "Silver", "2021/15/10", "5"],
    ["2", "Saloon", "11", "2020", "3 Series", "Black", "2021-10-16", "5"],
    ["3", "Hatchback", "10", "1999", "Yaris", "Silver", "2021-11-01", "6"],
    ["4", "Stationwagon", "12", "1955", "Falcon", "Blue", "13-02-2022", "6"],
    ["5", "", "10", "", "", "Silver", "2021-11-02", "5"],
    ["6", "Saloon", "99", "2010", "Unknown", "Red", "2021-11-03", "5"],
    ["7", "Saloon", "10", "2001", "Corolla", "White", "11/4/21", "99"],
    ["8", "Saloon", "12", "2018", "Focus", "Black", "2021-11-05", "5"],
]


def _write(path, header, rows):
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


@pytest.fixture
def write_csv():
    return _write


@pytest.fixture
def raw_dir(tmp_path):
    d = tmp_path / "raw"
    d.mkdir()
    _write(d / "locations.csv", LOCATION_COLUMNS, LOCATION_ROWS)
    _write(d / "make_details.csv", MAKE_COLUMNS, MAKE_ROWS)
    _write(d / "stolen_vehicles.csv", VEHICLE_COLUMNS, VEHICLE_ROWS)
    return d


@pytest.fixture
def batch(raw_dir):
    return clean(load(raw_dir))


@pytest.fixture
def make_vehicle():
    """Build a cleaned vehicle with only the fields a test cares about."""
    counter = iter(range(1, 10_000))

    def _make(**fields):
        fields.setdefault("vehicle_id", next(counter))
        fields.setdefault("date_stolen", date(2022, 1, 3))
        return StolenVehicle(**fields)

    return _make


@pytest.fixture
def north():
    return Location(location_id=5, region="North", country="X", population=100000, density=250.5)
