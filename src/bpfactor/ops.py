"""Elementwise operations used to combine factors and messages."""

from enum import Enum

import torch


class Op(Enum):
    """Elementwise operation between two values; built from a member or its name."""

    PRODUCT = "product"
    DIVISION = "division"

    def apply(self, x: torch.Tensor, y: torch.Tensor) -> torch.Tensor:
        # IEEE semantics: division by zero yields inf/nan
        if self is Op.PRODUCT:
            return torch.mul(x, y)
        return torch.div(x, y)
