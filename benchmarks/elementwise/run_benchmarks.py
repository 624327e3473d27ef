#!/usr/bin/env python3
"""
microbench Elementwise Benchmark Runner

Sweeps elementwise tensor ops over a list of sizes and prints a result
table in the requested unit.

Usage:
    # Run all ops over the default sizes
    python -m benchmarks.elementwise.run_benchmarks

    # Pick ops, sizes and unit
    python -m benchmarks.elementwise.run_benchmarks --ops sqrt exp --sizes 1024 1048576 --unit Mitems/s

    # Shorter measurements
    python -m benchmarks.elementwise.run_benchmarks --duration 0.1

    # Save CSV and JSON
    python -m benchmarks.elementwise.run_benchmarks --csv results.csv --output results.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any

import torch

from microbench import (
    ELEMENTWISE_OPS,
    MicrobenchError,
    ResultTable,
    RunConfig,
    Runner,
    Unit,
    elementwise_procedures,
    format_table,
    load_config,
    write_csv,
)
from microbench.system import get_system_info

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

DEFAULT_SIZES = [16, 256, 4096, 65536, 1048576]


@dataclass(slots=True)
class RunnerOptions:
    """Options for the benchmark script.

    Attributes:
        ops: Elementwise ops to benchmark.
        sizes: Tensor sizes (configurations).
        unit: Display unit.
        run_config: Timing protocol configuration.
        dtype: Tensor dtype.
        device: Tensor device.
        output_csv: Path to save the table as CSV.
        output_json: Path to save results and system info as JSON.
        verbose: Verbose output.
    """
    ops: list[str] = field(default_factory=lambda: list(ELEMENTWISE_OPS))
    sizes: list[int] = field(default_factory=lambda: list(DEFAULT_SIZES))
    unit: Unit = Unit.MICROSECONDS
    run_config: RunConfig = field(default_factory=RunConfig)
    dtype: str = "float32"
    device: str = "cpu"
    output_csv: Path | None = None
    output_json: Path | None = None
    verbose: bool = False


def save_results(table: ResultTable, options: RunnerOptions, output_path: Path) -> None:
    """Save results to JSON file.

    Args:
        table: Completed result table.
        options: Script options.
        output_path: Path to save JSON.
    """
    results: dict[str, Any] = {
        "benchmark_run": {
            "timestamp": datetime.now().isoformat(),
            "config": options.run_config.to_dict(),
            "dtype": options.dtype,
            "device": options.device,
            "system_info": get_system_info(),
        },
        "results": table.to_dict(),
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(results, f, indent=2)

    print(f"\nResults saved to: {output_path}")


def save_csv(table: ResultTable, options: RunnerOptions, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wb") as f:
        write_csv(table, options.unit, f)

    print(f"CSV saved to: {output_path}")


def parse_args(argv: list[str] | None = None) -> RunnerOptions:
    """Parse command-line arguments into RunnerOptions."""
    parser = argparse.ArgumentParser(
        description="microbench Elementwise Benchmark Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--ops",
        nargs="+",
        choices=list(ELEMENTWISE_OPS),
        default=list(ELEMENTWISE_OPS),
        help="Ops to benchmark (default: all)",
    )
    parser.add_argument(
        "--sizes",
        nargs="+",
        type=int,
        default=DEFAULT_SIZES,
        help=f"Tensor sizes (default: {DEFAULT_SIZES})",
    )
    parser.add_argument(
        "--unit",
        type=Unit.parse,
        default=Unit.MICROSECONDS,
        help="Display unit: s, ms, us, ns, items/s, Kitems/s, Mitems/s, Gitems/s (default: us)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Target measurement duration in seconds (default: 1.0)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with run configuration",
    )
    parser.add_argument(
        "--dtype",
        choices=["float16", "bfloat16", "float32", "float64"],
        default="float32",
        help="Tensor dtype (default: float32)",
    )
    parser.add_argument(
        "--device",
        type=str,
        default="cpu",
        help="Tensor device (default: cpu)",
    )
    parser.add_argument("--csv", type=str, default=None, help="Output CSV file path")
    parser.add_argument("--output", type=str, default=None, help="Output JSON file path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    run_config = load_config(args.config) if args.config else RunConfig.from_env()
    if args.duration is not None:
        run_config = replace(run_config, target_duration_s=args.duration)
    if args.device.startswith("cuda") and not run_config.sync_cuda:
        run_config = replace(run_config, sync_cuda=True)

    return RunnerOptions(
        ops=args.ops,
        sizes=args.sizes,
        unit=args.unit,
        run_config=run_config,
        dtype=args.dtype,
        device=args.device,
        output_csv=Path(args.csv) if args.csv else None,
        output_json=Path(args.output) if args.output else None,
        verbose=args.verbose,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for benchmark runner.

    Returns:
        Exit code (0 for success).
    """
    options = parse_args(argv)

    if options.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    print("\n" + "=" * 70)
    print("MICROBENCH ELEMENTWISE BENCHMARKS")
    print("=" * 70)
    print("\nConfiguration:")
    print(f"  Ops:             {', '.join(options.ops)}")
    print(f"  Sizes:           {options.sizes}")
    print(f"  Target duration: {options.run_config.target_duration_s} s")
    print(f"  Dtype / device:  {options.dtype} / {options.device}")

    sys_info = get_system_info()
    print("\nSystem Information:")
    print(f"  Platform:     {sys_info['platform']}")
    print(f"  Python:       {sys_info['python_version']}")
    print(f"  Torch:        {sys_info['torch_version']}")
    print(f"  CPU Count:    {sys_info['cpu_count']}")
    print(f"  Memory:       {sys_info['memory_gb']:.1f} GB")

    procedures = elementwise_procedures(
        options.ops,
        dtype=getattr(torch, options.dtype),
        device=options.device,
    )
    runner = Runner(options.run_config)

    def report_progress(done: int, total: int) -> None:
        logger.debug("Progress: %d/%d", done, total)

    try:
        table = runner.sweep(procedures, options.sizes, progress_callback=report_progress)
    except MicrobenchError as e:
        logger.error("Benchmark failed: %s", e)
        return 1

    print()
    print(format_table(table, options.unit))

    if options.output_csv:
        save_csv(table, options, options.output_csv)
    if options.output_json:
        save_results(table, options, options.output_json)

    return 0


if __name__ == "__main__":
    sys.exit(main())
