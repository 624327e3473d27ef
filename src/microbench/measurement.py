"""
Measurements and Display Units

A Measurement stores only what the timing protocol observed: how many
times the step ran and how long the whole block took. Everything a
report shows is derived from it on demand through a Unit.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Union


@unique
class UnitKind(str, Enum):
    """Whether a unit reads out time per run or items per second."""

    TIME = "time"
    THROUGHPUT = "throughput"


@unique
class Marker(str, Enum):
    """Non-numeric cell values.

    Members:
        ABSENT: The pair was skipped (configuration invalid for the procedure).
        UNDEFINED: The measurement elapsed zero time, so per-run time and
            throughput cannot be computed.
    """

    ABSENT = "absent"
    UNDEFINED = "undefined"


CellValue = Union[float, Marker]


@unique
class Unit(str, Enum):
    """Display units for ResultTable readout.

    Time units scale seconds-per-run up by ``scale``; throughput units
    divide raw items-per-second by ``scale``.

    Members:
        SECONDS, MILLISECONDS, MICROSECONDS, NANOSECONDS: Time per run.
        ITEMS_PER_SECOND: Raw throughput.
        THOUSAND_ITEMS_PER_SECOND, MILLION_ITEMS_PER_SECOND,
        BILLION_ITEMS_PER_SECOND: Scaled throughput.
    """

    SECONDS = "s"
    MILLISECONDS = "ms"
    MICROSECONDS = "us"
    NANOSECONDS = "ns"
    ITEMS_PER_SECOND = "items/s"
    THOUSAND_ITEMS_PER_SECOND = "Kitems/s"
    MILLION_ITEMS_PER_SECOND = "Mitems/s"
    BILLION_ITEMS_PER_SECOND = "Gitems/s"

    @property
    def kind(self) -> UnitKind:
        return _UNIT_TABLE[self][0]

    @property
    def scale(self) -> float:
        return _UNIT_TABLE[self][1]

    @property
    def label(self) -> str:
        """Human-readable title used by reports."""
        return _UNIT_TABLE[self][2]

    @classmethod
    def parse(cls, text: str) -> "Unit":
        """Look up a unit by value ("ms") or member name ("MILLISECONDS").

        Raises:
            ValueError: If text names no unit.
        """
        wanted = text.strip().lower()
        for unit in cls:
            if wanted in (unit.value.lower(), unit.name.lower()):
                return unit
        raise ValueError(
            f"Unknown unit {text!r}; expected one of {[u.value for u in cls]}"
        )


_UNIT_TABLE: dict[Unit, tuple[UnitKind, float, str]] = {
    Unit.SECONDS: (UnitKind.TIME, 1.0, "Time per run [s]"),
    Unit.MILLISECONDS: (UnitKind.TIME, 1e3, "Time per run [ms]"),
    Unit.MICROSECONDS: (UnitKind.TIME, 1e6, "Time per run [us]"),
    Unit.NANOSECONDS: (UnitKind.TIME, 1e9, "Time per run [ns]"),
    Unit.ITEMS_PER_SECOND: (UnitKind.THROUGHPUT, 1.0, "Throughput [items/s]"),
    Unit.THOUSAND_ITEMS_PER_SECOND: (UnitKind.THROUGHPUT, 1e3, "Throughput [thousand items/s]"),
    Unit.MILLION_ITEMS_PER_SECOND: (UnitKind.THROUGHPUT, 1e6, "Throughput [million items/s]"),
    Unit.BILLION_ITEMS_PER_SECOND: (UnitKind.THROUGHPUT, 1e9, "Throughput [billion items/s]"),
}


@dataclass(frozen=True)
class Measurement:
    """Result of timing one (procedure, configuration) pair.

    Attributes:
        repetitions: Number of times the timed step executed.
        elapsed_ns: Total wall-clock time of the repetition loop in nanoseconds.
    """

    repetitions: int
    elapsed_ns: int

    def __post_init__(self) -> None:
        if self.repetitions < 1:
            raise ValueError(f"repetitions must be >= 1, got {self.repetitions}")
        if self.elapsed_ns < 0:
            raise ValueError(f"elapsed_ns must be >= 0, got {self.elapsed_ns}")

    @property
    def elapsed(self) -> float:
        """Total elapsed time in seconds."""
        return self.elapsed_ns / 1e9

    @property
    def seconds_per_run(self) -> float | None:
        """Mean time of one step in seconds, or None if nothing was measured."""
        if self.elapsed_ns == 0:
            return None
        return self.elapsed / self.repetitions

    def items_per_second(self, problem_size: int) -> float | None:
        """Raw throughput for a step processing ``problem_size`` items."""
        if self.elapsed_ns == 0:
            return None
        return self.repetitions * problem_size / self.elapsed

    def convert(self, unit: Unit, problem_size: int = 1) -> CellValue:
        """Read this measurement out in ``unit``.

        Args:
            unit: Display unit.
            problem_size: Items per step, needed for throughput units.

        Returns:
            The converted value, or Marker.UNDEFINED when elapsed is zero.

        Raises:
            ValueError: If problem_size is negative.
        """
        if problem_size < 0:
            raise ValueError(f"problem_size must be >= 0, got {problem_size}")

        if unit.kind is UnitKind.TIME:
            per_run = self.seconds_per_run
            if per_run is None:
                return Marker.UNDEFINED
            return per_run * unit.scale

        raw = self.items_per_second(problem_size)
        if raw is None:
            return Marker.UNDEFINED
        return raw / unit.scale

    def to_dict(self) -> dict[str, Any]:
        """Convert measurement to dictionary."""
        return {"repetitions": self.repetitions, "elapsed_ns": self.elapsed_ns}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Measurement":
        """Create measurement from dictionary."""
        return cls(
            repetitions=int(data["repetitions"]),
            elapsed_ns=int(data["elapsed_ns"]),
        )
