"""
Delta-Bar-Delta optimizers.

Key classes:
- DeltaBarDeltaUpdate: Hyperparameters, mutable between runs
- DeltaBarDeltaPolicy: Per-run state (gradient average and step sizes)
- DeltaBarDelta: torch.optim.Optimizer applying the same rule to nn.Parameters
"""

from .update import DeltaBarDeltaUpdate, DeltaBarDeltaPolicy
from .delta_bar_delta import DeltaBarDelta
from .functional import delta_bar_delta_

__all__ = [
    "DeltaBarDeltaUpdate",
    "DeltaBarDeltaPolicy",
    "DeltaBarDelta",
    "delta_bar_delta_",
]
