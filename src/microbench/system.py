"""System information captured alongside benchmark results."""
from __future__ import annotations

import os
import platform
from datetime import datetime
from typing import Any

import psutil
import torch


def get_system_info() -> dict[str, Any]:
    """Collect system information for reproducibility.

    Returns:
        Dictionary with platform, CPU, memory and torch details.
    """
    info: dict[str, Any] = {
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "processor": platform.processor(),
        "machine": platform.machine(),
        "cpu_count": os.cpu_count(),
        "timestamp": datetime.now().isoformat(),
        "torch_version": torch.__version__,
        "cuda_available": torch.cuda.is_available(),
        "memory_gb": psutil.virtual_memory().total / (1024**3),
    }

    # cpu_freq() returns None on platforms that don't expose it
    cpu_freq = psutil.cpu_freq()
    if cpu_freq:
        info["cpu_freq_mhz"] = {
            "current": cpu_freq.current,
            "min": cpu_freq.min,
            "max": cpu_freq.max,
        }

    if info["cuda_available"]:
        info["cuda_device"] = torch.cuda.get_device_name(0)

    return info
