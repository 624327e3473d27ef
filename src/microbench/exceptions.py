"""
microbench Exception Hierarchy

Custom exceptions raised by the harness while configuring, running
and recording benchmark sweeps.
"""
from __future__ import annotations

from typing import Any, Hashable, Optional, Sequence


class MicrobenchError(Exception):
    """Base exception for all microbench errors.

    All microbench-specific exceptions inherit from this class,
    allowing callers to catch every harness error with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        context: Optional dict of additional context for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize MicrobenchError.

        Args:
            message: Error message.
            context: Optional context dict.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        ctx_str = f", context={self.context}" if self.context else ""
        return f"{self.__class__.__name__}({self.message!r}{ctx_str})"


class ConfigurationError(MicrobenchError):
    """Raised when a run configuration is invalid.

    This occurs when:
    - A RunConfig field is out of range
    - A YAML config file does not hold a mapping
    - The same configuration value appears twice in a sweep
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[Any] = None,
        got: Optional[Any] = None,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Error message.
            config_key: The configuration key with the error.
            expected: Expected value or type.
            got: Actual value received.
        """
        self.config_key = config_key
        self.expected = expected
        self.got = got

        super().__init__(
            message,
            context={
                "config_key": config_key,
                "expected": expected,
                "got": got,
            },
        )


class DuplicateProcedureError(MicrobenchError):
    """Raised when two procedures in one run share a name.

    Procedure names key the rows of a ResultTable, so they must be
    distinct within a run.

    Attributes:
        name: The duplicated procedure name.
    """

    def __init__(self, name: str, *, message: Optional[str] = None) -> None:
        self.name = name

        if message is None:
            message = f"Procedure name '{name}' is used more than once in this run"

        super().__init__(message, context={"name": name})


class ResultTableError(MicrobenchError):
    """Raised when a ResultTable cell is written illegally.

    Each cell is written exactly once, and never after the table
    has been frozen.
    """


class MeasurementError(MicrobenchError):
    """Raised when a (procedure, configuration) measurement fails.

    Wraps the original exception from the procedure with the pair
    and the protocol phase that failed. Subclasses name the failing
    stage of the contract.

    Attributes:
        procedure: Name of the procedure that failed.
        configuration: Configuration the procedure was run under.
        phase: Protocol phase ("setup", "warmup", "probe", "measure", "teardown").
        original_error: The underlying exception.
    """

    stage = "measurement"

    def __init__(
        self,
        procedure: str,
        configuration: Hashable,
        phase: str,
        original_error: BaseException,
        *,
        message: Optional[str] = None,
    ) -> None:
        """Initialize MeasurementError.

        Args:
            procedure: Procedure name.
            configuration: Configuration value.
            phase: Phase in which the error was raised.
            original_error: The original exception.
            message: Optional custom message.
        """
        self.procedure = procedure
        self.configuration = configuration
        self.phase = phase
        self.original_error = original_error

        if message is None:
            message = (
                f"{self.stage.capitalize()} failed for procedure '{procedure}' "
                f"with configuration {configuration!r} during {phase}: "
                f"{type(original_error).__name__}: {original_error}"
            )

        super().__init__(
            message,
            context={
                "procedure": procedure,
                "configuration": configuration,
                "phase": phase,
                "error_type": type(original_error).__name__,
                "error_message": str(original_error),
            },
        )
        self.__cause__ = original_error


class ValidityCheckError(MeasurementError):
    """Raised when a procedure's is_valid check itself raises."""

    stage = "validity check"


class SetupError(MeasurementError):
    """Raised when a procedure's setup fails."""

    stage = "setup"


class StepError(MeasurementError):
    """Raised when a procedure's step fails during warmup, probe or measure."""

    stage = "step"


class TeardownError(MeasurementError):
    """Raised when a procedure's teardown fails after a clean measurement."""

    stage = "teardown"


class SweepCancelledError(MicrobenchError):
    """Raised when a sweep is cancelled between two pairs.

    Attributes:
        completed: Number of pairs finished before cancellation.
        total: Total number of pairs in the sweep.
        pending: The (procedure, configuration) pair that was not started.
    """

    def __init__(
        self,
        completed: int,
        total: int,
        *,
        pending: Optional[Sequence[Any]] = None,
        message: Optional[str] = None,
    ) -> None:
        self.completed = completed
        self.total = total
        self.pending = tuple(pending) if pending else ()

        if message is None:
            message = f"Sweep cancelled after {completed} of {total} measurements"

        super().__init__(
            message,
            context={"completed": completed, "total": total},
        )
