"""
bpfactor: discrete factor algebra for belief propagation.

This package provides flat mixed-radix factors, single-variable messages and
the vertex/edge payloads a message-passing engine needs to run sum-product
belief propagation over a factor graph.
"""

from bpfactor.ops import Op
from bpfactor.factor import Factor
from bpfactor.variable import Variable
from bpfactor.graph import (
    NOT_FOUND,
    FGVertex,
    Messages,
    NamedFactor,
    NamedVariable,
    build_named_factor,
)

__version__ = "0.1.0"
__all__ = [
    "Op",
    "Factor",
    "Variable",
    "NOT_FOUND",
    "FGVertex",
    "Messages",
    "NamedFactor",
    "NamedVariable",
    "build_named_factor",
]
