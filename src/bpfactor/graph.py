"""
Vertex and edge payloads for a bipartite factor graph.

An external message-passing engine creates one ``NamedFactor`` per factor node
and one ``NamedVariable`` per variable node, carries ``Messages`` along the
edges, and replaces beliefs with ``with_belief`` after each update.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import torch

from .factor import Factor
from .variable import Variable

logger = logging.getLogger(__name__)

# Returned by probes for a variable id the factor does not involve.
NOT_FOUND = -1


@dataclass(frozen=True)
class FGVertex:
    """Factor-graph vertex; the id is its only link to the graph."""

    id: int


@dataclass(frozen=True)
class NamedFactor(FGVertex):
    """Factor vertex: identity, variable ids, fixed potential and current belief."""

    variables: Tuple[int, ...]
    potential: Factor
    belief: Factor

    def __post_init__(self):
        variables = tuple(int(v) for v in self.variables)
        object.__setattr__(self, "variables", variables)
        if len(set(variables)) != len(variables):
            raise ValueError(f"Duplicate variable ids in factor {self.id}: {variables}.")
        if len(variables) != self.potential.arity:
            raise ValueError(
                f"Factor {self.id} lists {len(variables)} variables "
                f"but its potential has arity {self.potential.arity}."
            )
        if self.belief.states != self.potential.states:
            raise ValueError(
                f"Belief states {self.belief.states} do not match "
                f"potential states {self.potential.states} for factor {self.id}."
            )

    @classmethod
    def reset(cls, other: NamedFactor) -> NamedFactor:
        """Same vertex with its belief reset to a fresh copy of the potential."""
        potential = other.potential
        belief = Factor(potential.states, potential.snapshot_values(), dtype=potential.dtype)
        return cls(other.id, other.variables, potential, belief)

    def position_of(self, var_id: int) -> int:
        for pos, candidate in enumerate(self.variables):
            if candidate == var_id:
                return pos
        return NOT_FOUND

    def length(self, var_id: int) -> int:
        """Number of states of ``var_id``, or ``NOT_FOUND``."""
        pos = self.position_of(var_id)
        if pos == NOT_FOUND:
            return NOT_FOUND
        return self.potential.length(pos)

    def marginalize(self, var_id: int) -> Variable:
        """
        Marginal of the potential onto one of its variables.

        Args:
            var_id: Id of a variable of this factor

        Returns:
            Message over the states of ``var_id``
        """
        pos = self.position_of(var_id)
        if pos == NOT_FOUND:
            raise ValueError(f"Variable {var_id} is not in factor {self.id} {self.variables}.")
        return self.potential.marginalize(pos)

    def with_belief(self, belief: Factor) -> NamedFactor:
        return NamedFactor(self.id, self.variables, self.potential, belief)


@dataclass(frozen=True)
class NamedVariable(FGVertex):
    """Variable vertex: identity and current marginal estimate."""

    belief: Variable

    @classmethod
    def uniform(cls, id: int, size: int) -> NamedVariable:
        return cls(id, Variable.uniform(size))

    def with_belief(self, belief: Variable) -> NamedVariable:
        if belief.size != self.belief.size:
            raise ValueError(
                f"Belief size {belief.size} does not match "
                f"{self.belief.size} states of variable {self.id}."
            )
        return NamedVariable(self.id, belief)


@dataclass(frozen=True)
class Messages:
    """The two directional messages carried on one edge."""

    to_dst: Variable
    to_src: Variable

    @classmethod
    def uniform(cls, size: int) -> Messages:
        return cls(Variable.uniform(size), Variable.uniform(size))


def build_named_factor(
    id: int,
    variables: Sequence[int],
    states: Sequence[int],
    nonzero_count: int,
    entries: Iterable[Tuple[int, float]],
    *,
    check_nonzero: bool = False,
    dtype=torch.float64,
) -> NamedFactor:
    """
    Build a factor vertex from a sparse (libDAI-style) description.

    Unlisted entries are zero. When a flat index is listed more than once the
    last value wins.

    Args:
        id: Factor id
        variables: Variable ids, in factor order
        states: Number of states of each variable
        nonzero_count: Declared number of sparse entries
        entries: ``(flat_index, value)`` pairs, flat index in column-major order
        check_nonzero: Raise when ``nonzero_count`` differs from the entry count
        dtype: Data type for factor values (default: torch.float64)

    Returns:
        NamedFactor whose potential and belief are independent copies
    """
    states = tuple(int(s) for s in states)
    size = math.prod(states)
    values = torch.zeros(size, dtype=dtype)
    count = 0
    for flat_index, value in entries:
        flat_index = int(flat_index)
        if not 0 <= flat_index < size:
            raise ValueError(
                f"Flat index {flat_index} out of range for factor {id} of size {size}."
            )
        values[flat_index] = value
        count += 1

    if count != nonzero_count:
        if check_nonzero:
            raise ValueError(
                f"Factor {id} declares {nonzero_count} nonzero entries, got {count}."
            )
        logger.warning(
            "Factor %s declares %d nonzero entries, got %d", id, nonzero_count, count
        )

    potential = Factor(states, values, dtype=dtype)
    belief = Factor(states, values, dtype=dtype)
    logger.debug("Built factor %s over %s with states %s", id, tuple(variables), states)
    return NamedFactor(id, tuple(variables), potential, belief)
