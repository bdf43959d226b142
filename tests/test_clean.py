"""
Tests for date repair, type coercion and atomic cleaning.
"""

from datetime import date

import pytest

from pipeline.clean import DATE_REPAIRS, clean, parse_date, repair_date
from pipeline.errors import TypeCoercionError, UnparseableDateError
from pipeline.models import RawBatch, RawLocation, RawStolenVehicle


def _raw_vehicle(date_stolen="2021-10-15", **fields):
    values = dict(
        line=2, vehicle_id="1", vehicle_type="Saloon", make_id="10",
        model_year="2015", vehicle_desc="Corolla", color="Silver",
        date_stolen=date_stolen, location_id="5",
    )
    values.update(fields)
    return RawStolenVehicle(**values)


def _raw_location(**fields):
    values = dict(line=2, location_id="5", region="North", country="X",
                  population="100000", density="250.5")
    values.update(fields)
    return RawLocation(**values)


@pytest.mark.parametrize("value, expected", [
    ("2021-10-15", date(2021, 10, 15)),
    ("11/5/2021", date(2021, 11, 5)),
    ("11/5/21", date(2021, 11, 5)),
    ("2022/02/13", date(2022, 2, 13)),
])
def test_parse_date_accepted_formats(value, expected):
    assert parse_date(value) == expected


def test_parse_date_rejects_day_first():
    assert parse_date("13-02-2022") is None
    assert parse_date("2021/15/10") is None


@pytest.mark.parametrize("bad, fixed", sorted(DATE_REPAIRS.items()))
def test_known_bad_dates_are_repaired(bad, fixed):
    parsed, repaired = repair_date(bad, "1", 2)

    assert repaired is True
    assert parsed == date.fromisoformat(fixed)


def test_valid_date_is_not_counted_as_repair():
    assert repair_date("2021-10-15", "1", 2) == (date(2021, 10, 15), False)


def test_unknown_bad_date_raises():
    raw = RawBatch(vehicles=(_raw_vehicle(date_stolen="31/31/2021", vehicle_id="42", line=9),))

    with pytest.raises(UnparseableDateError) as excinfo:
        clean(raw)

    assert excinfo.value.vehicle_id == "42"
    assert excinfo.value.line == 9
    assert "31/31/2021" in str(excinfo.value)


def test_custom_repair_table():
    raw = RawBatch(vehicles=(_raw_vehicle(date_stolen="yesterday"),))

    batch = clean(raw, repairs={"yesterday": "2022-01-01"})

    assert batch.vehicles[0].date_stolen == date(2022, 1, 1)
    assert batch.repaired_dates == 1


def test_cleaned_types(batch):
    """Numeric columns become numbers and empty optional text becomes None."""
    north = batch.locations[0]
    assert north.population == 100000
    assert north.density == 250.5

    blank = next(v for v in batch.vehicles if v.vehicle_id == 5)
    assert blank.vehicle_type is None
    assert blank.model_year is None
    assert blank.vehicle_desc is None
    assert blank.make_id == 10

    assert batch.repaired_dates == 2
    assert batch.vehicles[0].date_stolen == date(2021, 10, 15)
    assert batch.vehicles[3].date_stolen == date(2022, 2, 13)
    assert batch.vehicles[6].date_stolen == date(2021, 11, 4)


def test_every_cleaned_date_is_a_date(batch):
    assert all(isinstance(v.date_stolen, date) for v in batch.vehicles)


@pytest.mark.parametrize("field, value", [
    ("population", "lots"),
    ("population", "12.5"),
    ("population", "-1"),
    ("density", "dense"),
    ("density", "-3.0"),
    ("density", "inf"),
    ("density", "nan"),
    ("population", "3000000000"),
    ("location_id", "L5"),
    ("location_id", "-2147483649"),
])
def test_bad_location_numbers_raise(field, value):
    raw = RawBatch(locations=(_raw_location(**{field: value}),))

    with pytest.raises(TypeCoercionError) as excinfo:
        clean(raw)

    assert excinfo.value.table == "locations"
    assert excinfo.value.field == field


def test_bad_model_year_raises():
    raw = RawBatch(vehicles=(_raw_vehicle(model_year="twenty"),))

    with pytest.raises(TypeCoercionError) as excinfo:
        clean(raw)

    assert excinfo.value.field == "model_year"


def test_one_bad_row_fails_whole_batch():
    """A failure late in the vehicle table still produces no batch at all."""
    raw = RawBatch(
        locations=(_raw_location(),),
        vehicles=(
            _raw_vehicle(vehicle_id="1"),
            _raw_vehicle(vehicle_id="2"),
            _raw_vehicle(vehicle_id="3", date_stolen="not a date"),
        ),
    )
    result = None

    with pytest.raises(UnparseableDateError):
        result = clean(raw)

    assert result is None


def test_vehicle_id_beyond_integer_column_raises():
    raw = RawBatch(vehicles=(_raw_vehicle(vehicle_id="2147483648"),))

    with pytest.raises(TypeCoercionError) as excinfo:
        clean(raw)

    assert excinfo.value.field == "vehicle_id"
    assert excinfo.value.value == "2147483648"


def test_integer_column_bounds_are_accepted():
    raw = RawBatch(locations=(_raw_location(population="2147483647"),))

    assert clean(raw).locations[0].population == 2**31 - 1
