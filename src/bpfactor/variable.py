"""
Messages and beliefs over the states of a single discrete variable.
"""

from __future__ import annotations

from typing import Callable

import torch

from .ops import Op


class Variable:
    """Real-valued function of one variable's states, stored as a 1-D tensor."""

    def __init__(self, values, dtype=torch.float64):
        """
        Args:
            values: One value per state (list, array or tensor)
            dtype: Data type for message values (default: torch.float64)
        """
        values = torch.as_tensor(values, dtype=dtype)
        if values.dim() > 1:
            raise ValueError(f"Message values must be 1-D, got shape {tuple(values.shape)}.")
        self._values = values.flatten().clone()

    @classmethod
    def fill(cls, size: int, generator: Callable[[], float], dtype=torch.float64) -> Variable:
        """
        Build a message by calling ``generator`` once per state.

        Args:
            size: Number of states
            generator: Zero-argument callable producing each value
            dtype: Data type for message values

        Returns:
            New message of the given size
        """
        if size < 0:
            raise ValueError(f"Message size must be non-negative, got {size}.")
        return cls([float(generator()) for _ in range(size)], dtype=dtype)

    @classmethod
    def uniform(cls, size: int, dtype=torch.float64) -> Variable:
        """All-ones message, the usual first-iteration message."""
        if size < 0:
            raise ValueError(f"Message size must be non-negative, got {size}.")
        return cls(torch.ones(size, dtype=dtype), dtype=dtype)

    @property
    def size(self) -> int:
        return self._values.numel()

    @property
    def dtype(self) -> torch.dtype:
        return self._values.dtype

    def __len__(self) -> int:
        return self.size

    def __repr__(self):
        return f"Variable(size={self.size}, values=[{self.render(', ')}])"

    def state(self, index: int) -> float:
        if not 0 <= index < self.size:
            raise IndexError(f"State {index} out of range for message of size {self.size}.")
        return float(self._values[index])

    def combine(self, other: Variable, op) -> Variable:
        """
        Elementwise ``op`` of two messages over the same variable.

        Args:
            other: Message of the same size
            op: ``Op`` member or its name

        Returns:
            New message
        """
        op = Op(op)
        if self.size != other.size:
            raise ValueError(
                f"Message sizes must be equal, got {self.size} and {other.size}."
            )
        return Variable(op.apply(self._values, other._values.to(self.dtype)), dtype=self.dtype)

    def product(self, other: Variable) -> Variable:
        return self.combine(other, Op.PRODUCT)

    def divide(self, other: Variable) -> Variable:
        return self.combine(other, Op.DIVISION)

    def normalized(self) -> Variable:
        """Message scaled to sum to one; unchanged when the sum is not positive."""
        total = self._values.sum()
        if total > 0:
            return Variable(self._values / total, dtype=self.dtype)
        return Variable(self._values, dtype=self.dtype)

    def render(self, separator: str) -> str:
        return separator.join(str(v) for v in self._values.tolist())

    def snapshot_values(self) -> torch.Tensor:
        """Detached copy of the values."""
        return self._values.clone()
