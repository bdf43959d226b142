"""Error kinds that abort a batch run."""

from __future__ import annotations

from pathlib import Path


class PipelineError(Exception):
    """Base class for every fatal batch error."""


class MalformedInputError(PipelineError):
    """A CSV row does not have the table's column count."""

    def __init__(self, source: Path | str, line: int, expected: int, got: int) -> None:
        self.source = str(source)
        self.line = line
        self.expected = expected
        self.got = got
        super().__init__(
            f"{Path(self.source).name} line {line}: expected {expected} fields, got {got}"
        )


class UnparseableDateError(PipelineError):
    """A date_stolen value is neither a valid date nor a known repair."""

    def __init__(self, vehicle_id: str, line: int, value: str) -> None:
        self.vehicle_id = vehicle_id
        self.line = line
        self.value = value
        super().__init__(
            f"stolen_vehicles line {line} (vehicle_id={vehicle_id}): "
            f"cannot parse date_stolen {value!r}"
        )


class TypeCoercionError(PipelineError):
    """A numeric column holds text that cannot be converted."""

    def __init__(self, table: str, field: str, line: int, value: str) -> None:
        self.table = table
        self.field = field
        self.line = line
        self.value = value
        super().__init__(f"{table} line {line}: {field}={value!r} is not a valid number")
