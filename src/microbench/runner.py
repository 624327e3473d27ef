"""
Benchmark Runner

Implements the adaptive timing protocol for one (procedure, configuration)
pair, and the sequential sweep that fills a ResultTable:

    setup -> warmup (untimed) -> probe (one timed step)
          -> measure (n timed steps as one interval) -> teardown

The repetition count n is chosen so the measure loop lasts roughly the
target duration. The probe assumes per-call cost scales linearly, with no
correction for cache state differing between probe and measure.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Hashable, Optional, Sequence

import torch

from microbench.config import RunConfig, get_config
from microbench.exceptions import (
    MeasurementError,
    SetupError,
    StepError,
    SweepCancelledError,
    TeardownError,
    ValidityCheckError,
)
from microbench.measurement import Measurement
from microbench.procedure import Procedure
from microbench.results import ResultTable

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def repetitions_for(probe_ns: int, target_ns: float, max_repetitions: int) -> int:
    """Number of repetitions expected to fill ``target_ns``.

    Computes ``max(1, round(target_ns / probe_ns))`` clamped to
    ``max_repetitions``. A probe below clock resolution (zero) yields
    the ceiling.

    Args:
        probe_ns: Duration of one probed step in nanoseconds.
        target_ns: Target duration of the measure loop in nanoseconds.
        max_repetitions: Upper bound on the result.

    Returns:
        Repetition count in ``[1, max_repetitions]``.
    """
    if probe_ns <= 0:
        return max_repetitions
    n = max(1, round(target_ns / probe_ns))
    return min(n, max_repetitions)


def time_loop(
    step: Callable[[Hashable, Any], Any],
    cfg: Hashable,
    state: Any,
    repetitions: int,
    clock: Clock = time.perf_counter_ns,
    sync: Optional[Callable[[], None]] = None,
) -> int:
    """Run ``step`` ``repetitions`` times and time the whole block.

    Only loop entry and exit are sampled, so no per-iteration timing
    overhead enters the interval.

    Args:
        step: Bound step callable.
        cfg: Configuration passed to every call.
        state: Run state passed to every call.
        repetitions: Number of calls.
        clock: Monotonic nanosecond clock.
        sync: Called before each clock sample (device synchronization).

    Returns:
        Elapsed nanoseconds.
    """
    if sync is not None:
        sync()
    start = clock()
    for _ in range(repetitions):
        step(cfg, state)
    if sync is not None:
        sync()
    end = clock()
    return end - start


class Runner:
    """Sequential benchmark runner.

    Measures one pair at a time; no two measurements ever overlap.

    Example:
        ```python
        runner = Runner(RunConfig(target_duration_s=0.5))
        table = runner.sweep([sqrt_proc, exp_proc], [1024, 65536])
        print(format_table(table, Unit.MICROSECONDS))
        ```
    """

    def __init__(
        self,
        config: Optional[RunConfig] = None,
        clock: Clock = time.perf_counter_ns,
    ) -> None:
        """Initialize runner.

        Args:
            config: Run configuration. Uses the process default if None.
            clock: Monotonic nanosecond clock.
        """
        self.config = config if config is not None else get_config()
        self._clock = clock

    def _sync(self) -> Optional[Callable[[], None]]:
        if self.config.sync_cuda and torch.cuda.is_available():
            return torch.cuda.synchronize
        return None

    def measure(self, procedure: Procedure, cfg: Hashable) -> Optional[Measurement]:
        """Run the timing protocol for one pair.

        Args:
            procedure: Procedure to measure.
            cfg: Configuration.

        Returns:
            Measurement, or None if the configuration is invalid for the procedure.

        Raises:
            ValidityCheckError: If is_valid raises.
            SetupError: If setup raises.
            StepError: If a step raises during warmup, probe or measure.
            TeardownError: If teardown raises after a clean measurement.
        """
        name = procedure.name()

        try:
            valid = procedure.is_valid(cfg)
        except Exception as e:
            raise ValidityCheckError(name, cfg, "is_valid", e) from e

        if not valid:
            logger.info("Skipping %s @ %r: configuration not valid", name, cfg)
            return None

        try:
            state = procedure.setup(cfg)
        except Exception as e:
            raise SetupError(name, cfg, "setup", e) from e

        sync = self._sync()
        step = procedure.timed_step()
        phase = "warmup"
        try:
            step(cfg, state)

            phase = "probe"
            probe_ns = time_loop(step, cfg, state, 1, self._clock, sync)

            target_ns = self.config.target_duration_ns
            n = repetitions_for(probe_ns, target_ns, self.config.max_repetitions)
            if probe_ns <= 0 or target_ns / probe_ns > self.config.max_repetitions:
                logger.warning(
                    "%s @ %r: probe took %d ns, repetitions clamped to %d",
                    name, cfg, probe_ns, n,
                )
            logger.debug("%s @ %r: probe=%d ns, repetitions=%d", name, cfg, probe_ns, n)

            phase = "measure"
            elapsed_ns = time_loop(step, cfg, state, n, self._clock, sync)
        except Exception as e:
            error = StepError(name, cfg, phase, e)
            self._teardown_after_failure(procedure, cfg, state)
            raise error from e
        except BaseException:
            # Interrupts propagate unchanged once the run state is released
            self._teardown_after_failure(procedure, cfg, state)
            raise

        try:
            procedure.teardown(cfg, state)
        except Exception as e:
            raise TeardownError(name, cfg, "teardown", e) from e

        # Clock steps backwards are not expected from perf_counter_ns
        return Measurement(repetitions=n, elapsed_ns=max(0, elapsed_ns))

    def _teardown_after_failure(self, procedure: Procedure, cfg: Hashable, state: Any) -> None:
        try:
            procedure.teardown(cfg, state)
        except Exception:
            logger.exception(
                "Teardown of %s @ %r failed while handling a step failure",
                procedure.name(), cfg,
            )

    def sweep(
        self,
        procedures: Sequence[Procedure],
        configurations: Sequence[Hashable],
        progress_callback: Optional[Callable[[int, int], None]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResultTable:
        """Measure every (procedure, configuration) pair.

        Pairs run in procedure-major order: each procedure is swept across
        all configurations before the next one starts.

        Args:
            procedures: Procedures to measure (row order).
            configurations: Configurations to sweep (column order).
            progress_callback: Called with (done, total) after each pair.
            cancel_event: Checked before each pair; when set, the sweep stops.

        Returns:
            Complete, frozen ResultTable.

        Raises:
            MeasurementError: On the first failing pair; the sweep is aborted.
            SweepCancelledError: If cancel_event is set before the sweep finishes.
        """
        table = ResultTable(procedures, configurations)
        total = len(table)
        done = 0

        logger.info(
            "Starting sweep: %d procedures x %d configurations, target %.3f s",
            len(table.procedure_names), len(table.configurations),
            self.config.target_duration_s,
        )

        for name, cfg in table:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Sweep cancelled after %d of %d measurements", done, total)
                raise SweepCancelledError(done, total, pending=(name, cfg))

            try:
                measurement = self.measure(table.procedure(name), cfg)
            except MeasurementError:
                logger.error("Sweep aborted at %s @ %r", name, cfg)
                raise

            table.record(name, cfg, measurement)
            done += 1

            if measurement is not None:
                logger.info(
                    "%s @ %r: %d repetitions in %.6f s",
                    name, cfg, measurement.repetitions, measurement.elapsed,
                )
            if progress_callback is not None:
                progress_callback(done, total)

        table.freeze()
        return table


def sweep(
    procedures: Sequence[Procedure],
    configurations: Sequence[Hashable],
    config: Optional[RunConfig] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ResultTable:
    """Convenience function for running a full sweep.

    Args:
        procedures: Procedures to measure.
        configurations: Configurations to sweep.
        config: Run configuration (uses the process default if None).
        progress_callback: Called with (done, total) after each pair.
        cancel_event: Checked before each pair.

    Returns:
        Complete, frozen ResultTable.
    """
    runner = Runner(config)
    return runner.sweep(
        procedures,
        configurations,
        progress_callback=progress_callback,
        cancel_event=cancel_event,
    )
