"""
Two-variable sum-product walkthrough.

A unary prior on variable 1 and a pairwise factor over variables (1, 2),
both given in the sparse (flat_index, value) form. One factor-to-variable
pass is enough on this tree.

Run with: python examples/simple_example.py
"""

import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bpfactor import Messages, NamedVariable, build_named_factor


def main():
    logging.basicConfig(level=logging.DEBUG)

    prior = build_named_factor(0, [1], [2], 2, [(0, 0.6), (1, 0.4)])
    pair = build_named_factor(
        1, [1, 2], [2, 2], 4, [(0, 0.9), (1, 0.2), (2, 0.1), (3, 0.8)]
    )

    # variable 1 -> pair carries the prior, variable 2 -> pair is uniform
    to_pair = {1: prior.marginalize(1), 2: Messages.uniform(2).to_dst}

    belief = pair.potential
    for var_id, message in to_pair.items():
        belief = belief.product(message, pair.position_of(var_id))
    pair = pair.with_belief(belief)

    for var_id in (1, 2):
        pos = pair.position_of(var_id)
        marginal = belief.marginal_of_division(to_pair[var_id], pos)
        if var_id == 1:
            marginal = marginal.product(prior.marginalize(1))
        vertex = NamedVariable.uniform(var_id, pair.length(var_id)).with_belief(
            marginal.normalized()
        )
        print(f"Variable {vertex.id} marginal: {vertex.belief.render(' ')}")


if __name__ == "__main__":
    main()
