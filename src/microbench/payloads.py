"""
Elementwise Tensor Payloads

Illustrative procedures for comparing elementwise kernels across
tensor sizes. The configuration is the number of elements.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import torch

from microbench.procedure import Procedure

# Ops run out-of-place into a preallocated output so step never allocates
ELEMENTWISE_OPS: dict[str, Callable[..., torch.Tensor]] = {
    "sqrt": torch.sqrt,
    "exp": torch.exp,
    "log": torch.log,
    "double": lambda x, out: torch.mul(x, 2.0, out=out),
}


@dataclass
class TensorState:
    """Input and output buffers for one elementwise run."""

    inputs: torch.Tensor
    output: torch.Tensor


class ElementwiseProcedure(Procedure):
    """Apply one elementwise op to a 1-D tensor of ``cfg`` elements.

    Args:
        op: Key of ELEMENTWISE_OPS.
        dtype: Element dtype.
        device: Device the buffers live on.
        max_elements: Largest valid configuration; larger sizes are skipped.
    """

    __slots__ = ("_op", "_fn", "_dtype", "_device", "_max_elements")

    def __init__(
        self,
        op: str,
        dtype: torch.dtype = torch.float32,
        device: str = "cpu",
        max_elements: int | None = None,
    ) -> None:
        if op not in ELEMENTWISE_OPS:
            raise ValueError(f"Unknown op {op!r}; expected one of {sorted(ELEMENTWISE_OPS)}")
        self._op = op
        self._fn = ELEMENTWISE_OPS[op]
        self._dtype = dtype
        self._device = torch.device(device)
        self._max_elements = max_elements

    def name(self) -> str:
        suffix = str(self._dtype).replace("torch.", "")
        if self._device.type != "cpu":
            suffix = f"{suffix}.{self._device.type}"
        return f"{self._op}.{suffix}"

    def problem_size(self, cfg: int) -> int:
        return cfg

    def is_valid(self, cfg: int) -> bool:
        if isinstance(cfg, bool) or not isinstance(cfg, int) or cfg < 1:
            return False
        if self._max_elements is not None and cfg > self._max_elements:
            return False
        if self._device.type == "cuda" and not torch.cuda.is_available():
            return False
        return True

    def setup(self, cfg: int) -> TensorState:
        # Uniform on [1, 2) keeps sqrt/log/exp finite
        inputs = torch.rand(cfg, dtype=self._dtype, device=self._device) + 1.0
        output = torch.empty_like(inputs)
        return TensorState(inputs=inputs, output=output)

    def step(self, cfg: int, state: TensorState) -> None:
        self._fn(state.inputs, out=state.output)

    def teardown(self, cfg: int, state: TensorState) -> None:
        del state.inputs
        del state.output


def elementwise_procedures(
    ops: list[str] | None = None,
    dtype: torch.dtype = torch.float32,
    device: str = "cpu",
) -> list[ElementwiseProcedure]:
    """Build one procedure per op, in ELEMENTWISE_OPS order by default."""
    if ops is None:
        ops = list(ELEMENTWISE_OPS)
    return [ElementwiseProcedure(op, dtype=dtype, device=device) for op in ops]
