"""
Procedure Contract

Defines the capability interface every benchmarked routine implements.
The harness only ever talks to procedures through this interface, so
setup and teardown cost can never leak into the timed step.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Hashable, Iterable, Optional

from microbench.exceptions import DuplicateProcedureError


class Procedure(ABC):
    """Abstract base class for benchmarked procedures.

    A procedure is immutable once constructed. Its behaviour (which
    variant of the computation it performs) is fixed by its class and
    constructor arguments; the configuration passed to each method
    selects the problem size.

    Subclasses must implement ``name``, ``problem_size``, ``setup`` and
    ``step``. ``is_valid`` defaults to accepting every configuration and
    ``teardown`` defaults to a no-op.

    Example:
        ```python
        class Sum(Procedure):
            def name(self) -> str:
                return "sum"

            def problem_size(self, cfg: int) -> int:
                return cfg

            def setup(self, cfg: int) -> list[float]:
                return [1.0] * cfg

            def step(self, cfg: int, state: list[float]) -> None:
                sum(state)
        ```
    """

    __slots__ = ()

    @abstractmethod
    def name(self) -> str:
        """Stable, human-readable identifier, unique within a run."""

    @abstractmethod
    def problem_size(self, cfg: Hashable) -> int:
        """Number of elementary items one ``step`` processes under ``cfg``.

        Used only for throughput conversion, never for timing control.
        """

    def is_valid(self, cfg: Hashable) -> bool:
        """Whether this procedure can run under ``cfg``.

        Invalid pairs are recorded as absent and never set up.
        """
        return True

    @abstractmethod
    def setup(self, cfg: Hashable) -> Any:
        """Allocate everything ``step`` needs. Not timed."""

    @abstractmethod
    def step(self, cfg: Hashable, state: Any) -> None:
        """Execute exactly one unit of timed work.

        Must be safe to call repeatedly with the same state.
        """

    def timed_step(self) -> Callable[[Hashable, Any], Any]:
        """Callable the runner times, resolved once before the loop.

        Defaults to the bound ``step``. Adapters override it to hand out
        the wrapped callable so no extra frame enters the timed loop.
        """
        return self.step

    def teardown(self, cfg: Hashable, state: Any) -> None:
        """Release resources acquired in ``setup``. Not timed."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name()!r})"


class FunctionProcedure(Procedure):
    """Procedure assembled from plain callables.

    Handy for one-off comparisons where writing a subclass per variant
    is overkill.

    Example:
        ```python
        proc = FunctionProcedure(
            "list_sort",
            step=lambda cfg, data: sorted(data),
            setup=lambda cfg: list(range(cfg, 0, -1)),
            problem_size=lambda cfg: cfg,
        )
        ```
    """

    __slots__ = ("_name", "_step", "_setup", "_teardown", "_problem_size", "_is_valid")

    def __init__(
        self,
        name: str,
        step: Callable[[Hashable, Any], Any],
        *,
        setup: Optional[Callable[[Hashable], Any]] = None,
        teardown: Optional[Callable[[Hashable, Any], Any]] = None,
        problem_size: Optional[Callable[[Hashable], int]] = None,
        is_valid: Optional[Callable[[Hashable], bool]] = None,
    ) -> None:
        """Initialize FunctionProcedure.

        Args:
            name: Procedure name.
            step: Timed callable, called as ``step(cfg, state)``.
            setup: Builds the run state from ``cfg``. Defaults to ``None`` state.
            teardown: Releases the run state.
            problem_size: Items per step. Defaults to 1.
            is_valid: Configuration filter. Defaults to accepting all.
        """
        if not name:
            raise ValueError("Procedure name must be a non-empty string")
        self._name = name
        self._step = step
        self._setup = setup
        self._teardown = teardown
        self._problem_size = problem_size
        self._is_valid = is_valid

    def name(self) -> str:
        return self._name

    def problem_size(self, cfg: Hashable) -> int:
        if self._problem_size is None:
            return 1
        return self._problem_size(cfg)

    def is_valid(self, cfg: Hashable) -> bool:
        if self._is_valid is None:
            return True
        return bool(self._is_valid(cfg))

    def setup(self, cfg: Hashable) -> Any:
        if self._setup is None:
            return None
        return self._setup(cfg)

    def step(self, cfg: Hashable, state: Any) -> None:
        self._step(cfg, state)

    def timed_step(self) -> Callable[[Hashable, Any], Any]:
        return self._step

    def teardown(self, cfg: Hashable, state: Any) -> None:
        if self._teardown is not None:
            self._teardown(cfg, state)


def ensure_unique_names(procedures: Iterable[Procedure]) -> list[str]:
    """Collect procedure names, rejecting duplicates.

    Args:
        procedures: Procedures taking part in one run.

    Returns:
        Names in the given order.

    Raises:
        DuplicateProcedureError: If two procedures share a name.
    """
    names: list[str] = []
    seen: set[str] = set()

    for procedure in procedures:
        name = procedure.name()
        if name in seen:
            raise DuplicateProcedureError(name)
        seen.add(name)
        names.append(name)

    return names
