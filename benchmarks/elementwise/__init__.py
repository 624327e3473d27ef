"""
Elementwise Kernel Benchmarks

Sweeps the elementwise tensor payloads (sqrt, exp, log, double) over
tensor sizes and reports time per run or throughput.

- run_benchmarks.py: Command-line runner
"""
from __future__ import annotations
