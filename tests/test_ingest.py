"""
Tests for the CSV record loader.
"""

import pytest

from pipeline.errors import MalformedInputError
from pipeline.ingest import VEHICLE_COLUMNS, load, load_locations, load_vehicles


def test_load_reads_every_data_row(raw_dir):
    """The header row is skipped and each table yields one raw record per data row."""
    raw = load(raw_dir)

    assert len(raw.locations) == 3
    assert len(raw.makes) == 3
    assert len(raw.vehicles) == 8


def test_fields_stay_textual(raw_dir):
    """Raw records keep source text, including the malformed date and empty fields."""
    raw = load(raw_dir)

    first = raw.vehicles[0]
    assert first.vehicle_id == "1"
    assert first.date_stolen == "2021/15/10"
    assert first.line == 2

    blank = raw.vehicles[4]
    assert blank.vehicle_type == ""
    assert blank.model_year == ""

    assert raw.locations[0].population == "100000"


def test_wrong_field_count_raises(tmp_path, write_csv):
    """A short row aborts the load and names the file and line."""
    path = write_csv(tmp_path / "locations.csv",
                     ["location_id", "region", "country", "population", "density"],
                     [["1", "North", "X", "100", "1.5"], ["2", "South", "X", "200"]])

    with pytest.raises(MalformedInputError) as excinfo:
        load_locations(path)

    assert excinfo.value.line == 3
    assert excinfo.value.expected == 5
    assert excinfo.value.got == 4
    assert "locations.csv line 3" in str(excinfo.value)


def test_blank_lines_are_skipped(tmp_path):
    path = tmp_path / "locations.csv"
    path.write_text(
        "location_id,region,country,population,density\n"
        "1,North,X,100,1.5\n"
        "\n"
        "2,South,X,200,2.5\n"
    )

    assert [r.location_id for r in load_locations(path)] == ["1", "2"]


def test_audit_hook_called_per_vehicle(raw_dir):
    """Every accepted stolen-vehicle row produces one audit entry."""
    entries = []

    load(raw_dir, on_vehicle=entries.append)

    assert [e.vehicle_id for e in entries] == [str(i) for i in range(1, 9)]
    assert all(e.message == "New stolen vehicle record inserted." for e in entries)
    assert all(e.timestamp.tzinfo is not None for e in entries)


def test_malformed_vehicle_file_emits_no_audit(tmp_path, write_csv):
    """Shape errors are found before any audit entry goes out."""
    path = write_csv(tmp_path / "stolen_vehicles.csv", VEHICLE_COLUMNS, [
        ["1", "Saloon", "10", "2015", "Corolla", "Silver", "2021-10-15", "5"],
        ["2", "Saloon", "10", "2015", "Corolla", "Silver", "2021-10-15", "5", "extra"],
    ])
    entries = []

    with pytest.raises(MalformedInputError):
        load_vehicles(path, on_vehicle=entries.append)

    assert entries == []
