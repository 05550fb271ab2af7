"""
Delta-Bar-Delta: per-parameter adaptive step sizes for gradient descent.

Implementation of the learning rate adaptation heuristic of Jacobs (1988).

This implementation provides:
1. DeltaBarDeltaUpdate - Hyperparameter holder, reconfigurable between runs
2. DeltaBarDeltaPolicy - Run-scoped state updating a parameter tensor in place
3. DeltaBarDelta - PyTorch optimizer built on the same update

Key concepts:
- Agreement: gradient and its running average share a sign, step size grows by kappa
- Disagreement: signs differ, step size shrinks by a fraction phi
- Floor: no step size drops below min_step_size
"""

__version__ = "0.1.0"

from delta_bar_delta.optimizers import (
    DeltaBarDeltaUpdate,
    DeltaBarDeltaPolicy,
    DeltaBarDelta,
    delta_bar_delta_,
)

__all__ = [
    "DeltaBarDeltaUpdate",
    "DeltaBarDeltaPolicy",
    "DeltaBarDelta",
    "delta_bar_delta_",
]
