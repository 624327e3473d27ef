"""
microbench Test Fixtures

Reusable procedures and clocks for microbench tests.
"""
from tests.fixtures.procedures import (
    DoubleProcedure,
    FakeClock,
    NoopProcedure,
    RecordingProcedure,
    SleepProcedure,
)

__all__ = [
    # Procedures
    "DoubleProcedure",
    "NoopProcedure",
    "RecordingProcedure",
    "SleepProcedure",
    # Clocks
    "FakeClock",
]
