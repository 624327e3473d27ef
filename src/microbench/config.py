"""Run configuration for benchmark sweeps.

This module provides:
- RunConfig: Immutable settings passed once for a whole sweep
- configure() / get_config(): Process-wide default configuration
- load_config(): Load configuration from a YAML file
"""
from __future__ import annotations

import os
import threading
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Optional

import yaml

from microbench.exceptions import ConfigurationError


@dataclass(frozen=True)
class RunConfig:
    """Configuration for a benchmark sweep.

    Attributes:
        target_duration_s: Wall-clock time each measure loop should fill.
        max_repetitions: Ceiling on repetitions of a single measure loop.
            Applied when the probe is faster than the clock can resolve.
        sync_cuda: Whether to synchronize CUDA around timed intervals.

    Example:
        config = RunConfig(target_duration_s=0.25, sync_cuda=True)
    """

    DEFAULT_TARGET_DURATION_S: ClassVar[float] = 1.0
    DEFAULT_MAX_REPETITIONS: ClassVar[int] = 10_000_000

    target_duration_s: float = 1.0
    max_repetitions: int = 10_000_000
    sync_cuda: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if isinstance(self.target_duration_s, bool) or not isinstance(self.target_duration_s, (int, float)):
            raise ConfigurationError(
                "target_duration_s must be a number",
                config_key="target_duration_s",
                expected="float",
                got=self.target_duration_s,
            )
        if not self.target_duration_s > 0:
            raise ConfigurationError(
                "target_duration_s must be positive",
                config_key="target_duration_s",
                expected="> 0",
                got=self.target_duration_s,
            )
        if isinstance(self.max_repetitions, bool) or not isinstance(self.max_repetitions, int):
            raise ConfigurationError(
                "max_repetitions must be an integer",
                config_key="max_repetitions",
                expected="int",
                got=self.max_repetitions,
            )
        if self.max_repetitions < 1:
            raise ConfigurationError(
                "max_repetitions must be at least 1",
                config_key="max_repetitions",
                expected=">= 1",
                got=self.max_repetitions,
            )
        if not isinstance(self.sync_cuda, bool):
            raise ConfigurationError(
                "sync_cuda must be a boolean",
                config_key="sync_cuda",
                expected="bool",
                got=self.sync_cuda,
            )

    @property
    def target_duration_ns(self) -> float:
        """Target duration in nanoseconds."""
        return self.target_duration_s * 1e9

    @classmethod
    def from_env(cls) -> "RunConfig":
        """Create config from environment variables.

        Environment variables:
            MICROBENCH_TARGET_DURATION_S: Target measure duration in seconds
            MICROBENCH_MAX_REPETITIONS: Repetition ceiling
            MICROBENCH_SYNC_CUDA: "1" or "true" to synchronize CUDA

        Returns:
            RunConfig with values from environment.
        """
        duration_str = os.environ.get("MICROBENCH_TARGET_DURATION_S")
        duration = float(duration_str) if duration_str else cls.DEFAULT_TARGET_DURATION_S

        max_reps_str = os.environ.get("MICROBENCH_MAX_REPETITIONS")
        max_reps = int(max_reps_str) if max_reps_str else cls.DEFAULT_MAX_REPETITIONS

        sync_str = os.environ.get("MICROBENCH_SYNC_CUDA", "0")
        sync_cuda = sync_str.lower() in ("1", "true", "yes")

        return cls(
            target_duration_s=duration,
            max_repetitions=max_reps,
            sync_cuda=sync_cuda,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "target_duration_s": self.target_duration_s,
            "max_repetitions": self.max_repetitions,
            "sync_cuda": self.sync_cuda,
        }


# Module-level default, shared by sweeps that don't pass a config
_default_config = RunConfig()
_config_lock = threading.Lock()


def configure(
    target_duration_s: Optional[float] = None,
    max_repetitions: Optional[int] = None,
    sync_cuda: Optional[bool] = None,
    reset: bool = False,
) -> RunConfig:
    """Update the process-wide default configuration.

    Args:
        target_duration_s: Target measure duration in seconds.
        max_repetitions: Repetition ceiling.
        sync_cuda: Whether to synchronize CUDA around timed intervals.
        reset: If True, reset all settings to defaults first.

    Returns:
        The new default configuration.

    Example:
        >>> import microbench
        >>> _ = microbench.configure(target_duration_s=0.1)
        >>> microbench.get_config().target_duration_s
        0.1
    """
    global _default_config

    updates: dict[str, Any] = {}
    if target_duration_s is not None:
        updates["target_duration_s"] = target_duration_s
    if max_repetitions is not None:
        updates["max_repetitions"] = max_repetitions
    if sync_cuda is not None:
        updates["sync_cuda"] = sync_cuda

    with _config_lock:
        base = RunConfig() if reset else _default_config
        # replace() re-runs validation, so a bad value leaves the default untouched
        _default_config = replace(base, **updates)
        return _default_config


def get_config() -> RunConfig:
    """Get the current process-wide default configuration."""
    with _config_lock:
        return _default_config


def load_config(path: str) -> RunConfig:
    """Load configuration from a YAML file and make it the default.

    Args:
        path: Path to YAML configuration file.

    Returns:
        The new default configuration.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If config file is invalid.

    YAML format::

        target_duration_s: 0.5
        max_repetitions: 1000000
        sync_cuda: false
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config file format: {path}", expected="mapping")

    unknown = set(data) - {"target_duration_s", "max_repetitions", "sync_cuda"}
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in config file {path}: {sorted(unknown)}",
            got=sorted(unknown),
        )

    return configure(
        target_duration_s=data.get("target_duration_s"),
        max_repetitions=data.get("max_repetitions"),
        sync_cuda=data.get("sync_cuda"),
    )
