"""
Result Table

Grid of measurements keyed by (procedure name, configuration), with
unit-converted readout. Row and column order are fixed at construction.
"""
from __future__ import annotations

from typing import Any, Hashable, Iterator, Optional, Sequence, Union

from microbench.exceptions import ConfigurationError, ResultTableError
from microbench.measurement import CellValue, Marker, Measurement, Unit
from microbench.procedure import Procedure, ensure_unique_names

ProcedureKey = Union[str, Procedure]

# Sentinel distinguishing "never written" from "written as absent"
_UNWRITTEN = object()


class ResultTable:
    """Mapping (procedure, configuration) -> Measurement | absent.

    Rows follow the procedure list order and columns follow the
    configuration list order. Every cell is written exactly once, by the
    runner, after which the table is frozen and read-only.

    Example:
        ```python
        table = ResultTable([sqrt_proc, exp_proc], [1024, 4096])
        table.record("sqrt", 1024, Measurement(repetitions=1000, elapsed_ns=10**9))
        table.value("sqrt", 1024, Unit.MICROSECONDS)  # 1000.0
        ```
    """

    def __init__(
        self,
        procedures: Sequence[Procedure],
        configurations: Sequence[Hashable],
    ) -> None:
        """Initialize an empty table.

        Args:
            procedures: Row procedures, in display order.
            configurations: Column configurations, in display order.

        Raises:
            DuplicateProcedureError: If two procedures share a name.
            ConfigurationError: If a configuration appears twice.
        """
        procedures = list(procedures)
        names = ensure_unique_names(procedures)

        configs = tuple(configurations)
        dupes = [c for i, c in enumerate(configs) if c in configs[:i]]
        if dupes:
            raise ConfigurationError(
                f"Duplicate configurations in sweep: {dupes}",
                got=dupes,
            )

        self._procedures: dict[str, Procedure] = dict(zip(names, procedures))
        self._names: tuple[str, ...] = tuple(names)
        self._configurations: tuple[Hashable, ...] = configs
        self._cells: dict[tuple[str, Hashable], Any] = {
            (name, cfg): _UNWRITTEN for name in names for cfg in configs
        }
        self._frozen = False

    @property
    def procedure_names(self) -> tuple[str, ...]:
        """Row keys in display order."""
        return self._names

    @property
    def configurations(self) -> tuple[Hashable, ...]:
        """Column keys in display order."""
        return self._configurations

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def is_complete(self) -> bool:
        """Whether every cell has been written."""
        return all(v is not _UNWRITTEN for v in self._cells.values())

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[tuple[str, Hashable]]:
        """Iterate cell keys in row-major (procedure-major) order."""
        for name in self._names:
            for cfg in self._configurations:
                yield name, cfg

    def procedure(self, name: str) -> Procedure:
        """Look up a row's procedure by name."""
        return self._procedures[name]

    def _key(self, procedure: ProcedureKey, cfg: Hashable) -> tuple[str, Hashable]:
        name = procedure.name() if isinstance(procedure, Procedure) else procedure
        key = (name, cfg)
        if key not in self._cells:
            raise KeyError(f"No cell for procedure {name!r} and configuration {cfg!r}")
        return key

    def record(
        self,
        procedure: ProcedureKey,
        cfg: Hashable,
        measurement: Optional[Measurement],
    ) -> None:
        """Write one cell.

        Args:
            procedure: Procedure (or its name).
            cfg: Configuration.
            measurement: Measurement, or None to record the pair as absent.

        Raises:
            KeyError: If the pair is not part of this table.
            ResultTableError: If the table is frozen or the cell was already written.
        """
        key = self._key(procedure, cfg)

        if self._frozen:
            raise ResultTableError(
                f"Cannot record {key!r}: result table is frozen",
                context={"procedure": key[0], "configuration": cfg},
            )
        if self._cells[key] is not _UNWRITTEN:
            raise ResultTableError(
                f"Cell {key!r} has already been written",
                context={"procedure": key[0], "configuration": cfg},
            )

        self._cells[key] = measurement

    def freeze(self) -> None:
        """Make the table read-only."""
        self._frozen = True

    def get(self, procedure: ProcedureKey, cfg: Hashable) -> Optional[Measurement]:
        """Raw measurement for a cell, or None if absent or unwritten."""
        value = self._cells[self._key(procedure, cfg)]
        if value is _UNWRITTEN:
            return None
        return value

    def value(self, procedure: ProcedureKey, cfg: Hashable, unit: Unit) -> CellValue:
        """Cell readout in ``unit``.

        Returns:
            A float, Marker.ABSENT for skipped pairs, or Marker.UNDEFINED
            when the measurement elapsed zero time.
        """
        key = self._key(procedure, cfg)
        measurement = self.get(*key)
        if measurement is None:
            return Marker.ABSENT

        size = self._procedures[key[0]].problem_size(cfg)
        return measurement.convert(unit, size)

    def row(self, procedure: ProcedureKey, unit: Unit) -> list[CellValue]:
        """All values of one row, in column order."""
        return [self.value(procedure, cfg, unit) for cfg in self._configurations]

    def to_dict(self) -> dict[str, Any]:
        """Convert table to a JSON-friendly dictionary.

        Absent cells are stored as None. Each present cell also carries the
        procedure's problem size so throughput can be recomputed offline.
        """
        rows: dict[str, list[Optional[dict[str, Any]]]] = {}
        for name in self._names:
            cells: list[Optional[dict[str, Any]]] = []
            for cfg in self._configurations:
                measurement = self.get(name, cfg)
                if measurement is None:
                    cells.append(None)
                    continue
                entry = measurement.to_dict()
                entry["problem_size"] = self._procedures[name].problem_size(cfg)
                cells.append(entry)
            rows[name] = cells

        return {
            "procedures": list(self._names),
            "configurations": list(self._configurations),
            "cells": rows,
        }

    def __repr__(self) -> str:
        return (
            f"ResultTable(procedures={list(self._names)!r}, "
            f"configurations={list(self._configurations)!r}, frozen={self._frozen})"
        )
