"""Tests for system information capture."""
from __future__ import annotations

import json

from microbench.system import get_system_info


class TestSystemInfo:
    """Tests for get_system_info()."""

    def test_required_keys(self) -> None:
        """Core reproducibility fields are present."""
        info = get_system_info()

        for key in (
            "platform",
            "python_version",
            "cpu_count",
            "timestamp",
            "torch_version",
            "cuda_available",
            "memory_gb",
        ):
            assert key in info

        assert info["memory_gb"] > 0

    def test_json_serializable(self) -> None:
        """Info can be embedded in JSON result files."""
        json.dumps(get_system_info())
