"""
Discrete factor algebra on flat mixed-radix tensors.

A factor over variables with state counts ``states = (s0, s1, ..., sk-1)`` is
stored as a single 1-D tensor of ``s0 * s1 * ... * sk-1`` values. The first
variable varies fastest (column-major order), so the flat offset of the
assignment ``(x0, x1, ..., xk-1)`` is::

    x0 + s0 * (x1 + s1 * (x2 + ...))
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence, Tuple

import torch

from .ops import Op
from .variable import Variable


class Factor:
    """Dense potential over several discrete variables, stored flat."""

    def __init__(self, states: Sequence[int], values, dtype=torch.float64):
        """
        Args:
            states: Number of states of each variable, in factor order
            values: Flat values in column-major order (list, array or tensor)
            dtype: Data type for factor values (default: torch.float64)
        """
        states = tuple(int(s) for s in states)
        if not states:
            raise ValueError("A factor needs at least one variable.")
        if any(s < 1 for s in states):
            raise ValueError(f"State counts must be positive, got {states}.")
        flat = torch.as_tensor(values, dtype=dtype)
        if flat.dim() > 1:
            # callers flatten multi-dimensional tables column-major themselves
            raise ValueError(f"Factor values must be 1-D, got shape {tuple(flat.shape)}.")
        flat = flat.flatten().clone()
        expected = math.prod(states)
        if flat.numel() != expected:
            raise ValueError(
                f"Factor size mismatch for states {states}: "
                f"expected {expected} values, got {flat.numel()}."
            )
        self._states = states
        self._values = flat
        self._keys: Dict[int, torch.Tensor] = {}

    @property
    def states(self) -> Tuple[int, ...]:
        return self._states

    @property
    def arity(self) -> int:
        return len(self._states)

    @property
    def dtype(self) -> torch.dtype:
        return self._values.dtype

    def __len__(self) -> int:
        return self._values.numel()

    def __repr__(self):
        return f"Factor(states={self._states}, length={len(self)})"

    def length(self, var_pos: Optional[int] = None) -> int:
        """Total flat size, or the number of states of the variable at ``var_pos``."""
        if var_pos is None:
            return len(self)
        if not 0 <= var_pos < self.arity:
            raise IndexError(f"Variable position {var_pos} out of range for arity {self.arity}.")
        return self._states[var_pos]

    def value_at(self, indices: Sequence[int]) -> float:
        """
        Value at a multi-index.

        Args:
            indices: One state index per variable, in factor order

        Returns:
            The factor value at that assignment
        """
        indices = [int(i) for i in indices]
        if len(indices) != self.arity:
            raise IndexError(f"Expected {self.arity} indices, got {len(indices)}.")
        for pos, (index, card) in enumerate(zip(indices, self._states)):
            if not 0 <= index < card:
                raise IndexError(
                    f"Index {index} out of range for variable {pos} with {card} states."
                )
        offset = indices[-1]
        for i in range(self.arity - 1, 0, -1):
            offset = indices[i - 1] + self._states[i - 1] * offset
        return float(self._values[offset])

    def _check_position(self, var_pos: int) -> None:
        if not 0 <= var_pos < self.arity:
            raise ValueError(
                f"Variable position must be in [0, {self.arity}), got {var_pos}."
            )

    def _check_message(self, message: Variable, var_pos: int) -> None:
        self._check_position(var_pos)
        if self._states[var_pos] != message.size:
            raise ValueError(
                f"Number of states for variable {var_pos} ({self._states[var_pos]}) "
                f"and message size ({message.size}) must be equal."
            )

    def _group_keys(self, var_pos: int) -> torch.Tensor:
        """State of the variable at ``var_pos`` for every flat offset."""
        keys = self._keys.get(var_pos)
        if keys is None:
            stride = math.prod(self._states[:var_pos])
            offsets = torch.arange(len(self), device=self._values.device)
            keys = torch.div(offsets, stride, rounding_mode="floor") % self._states[var_pos]
            self._keys[var_pos] = keys
        return keys

    def _sum_by_state(self, contributions: torch.Tensor, var_pos: int) -> Variable:
        result = torch.zeros(self._states[var_pos], dtype=contributions.dtype,
                             device=contributions.device)
        result.index_add_(0, self._group_keys(var_pos), contributions)
        return Variable(result, dtype=result.dtype)

    def marginalize(self, var_pos: int) -> Variable:
        """
        Sum out every variable except the one at ``var_pos``.

        Args:
            var_pos: Position of the kept variable in the factor

        Returns:
            Message of size ``states[var_pos]``
        """
        self._check_position(var_pos)
        return self._sum_by_state(self._values, var_pos)

    def combine(self, message: Variable, var_pos: int, op) -> Factor:
        """
        Combine every entry with the message entry of its ``var_pos`` state.

        Args:
            message: Message over the variable at ``var_pos``
            var_pos: Position of the variable in the factor
            op: ``Op`` member or its name

        Returns:
            New factor of the same shape
        """
        op = Op(op)
        self._check_message(message, var_pos)
        broadcast = message._values.to(self.dtype)[self._group_keys(var_pos)]
        return Factor(self._states, op.apply(self._values, broadcast), dtype=self.dtype)

    def product(self, message: Variable, var_pos: int) -> Factor:
        return self.combine(message, var_pos, Op.PRODUCT)

    def division(self, message: Variable, var_pos: int) -> Factor:
        return self.combine(message, var_pos, Op.DIVISION)

    def combine_and_marginalize(self, message: Variable, var_pos: int, op) -> Variable:
        """``combine`` followed by ``marginalize`` on the same position, in one pass."""
        op = Op(op)
        self._check_message(message, var_pos)
        keys = self._group_keys(var_pos)
        broadcast = message._values.to(self.dtype)[keys]
        return self._sum_by_state(op.apply(self._values, broadcast), var_pos)

    def marginal_of_product(self, message: Variable, var_pos: int) -> Variable:
        return self.combine_and_marginalize(message, var_pos, Op.PRODUCT)

    def marginal_of_division(self, message: Variable, var_pos: int) -> Variable:
        return self.combine_and_marginalize(message, var_pos, Op.DIVISION)

    def snapshot_values(self) -> torch.Tensor:
        """Detached copy of the flat values."""
        return self._values.clone()
