"""
Delta-Bar-Delta update policy.

A heuristic that accelerates gradient descent by adapting the step size of
every parameter individually (Jacobs, 1988, "Increased Rates of Convergence
Through Learning Rate Adaptation", Neural Networks 1(4)).

- If the current gradient and the exponential average of past gradients
  (delta-bar) have the same sign, the step size is incremented by kappa.
- If they have opposite signs, the step size is decreased by a proportion phi
  of its current value.

Additive increase, multiplicative decrease: step sizes grow slowly along
directions that keep descending and shrink fast when the gradient oscillates.

``min_step_size`` bounds the step size from below so it cannot underflow to
zero. Tasks that need extreme fine-tuning may have to lower it below its
default of 1e-8.

Usage:
    update = DeltaBarDeltaUpdate(initial_step_size=0.9, kappa=0.001, phi=0.2, theta=0.5)
    policy = update.policy(rows, cols, dtype=torch.float64)

    for _ in range(max_iterations):
        gradient = f_grad(x)
        policy.update(x, step_size, gradient)
"""

import logging
from dataclasses import dataclass
from typing import Optional

import torch

from .functional import delta_bar_delta_

LOGGER = logging.getLogger(__name__)


@dataclass
class DeltaBarDeltaUpdate:
    """
    Hyperparameters of the Delta-Bar-Delta update.

    Fields may be changed between runs. A run captures them when its policy is
    created, so changes never reach a policy that already exists.

    Args:
        initial_step_size: Step size every parameter starts with
        kappa: Constant increment applied when gradient signs persist
        phi: Proportional decrement factor when gradient signs flip
        theta: Decay rate for the exponential average (delta-bar)
        min_step_size: Minimum allowed step size for any parameter (default: 1e-8)
    """

    initial_step_size: float
    kappa: float
    phi: float
    theta: float
    min_step_size: float = 1e-8

    def __post_init__(self):
        if self.initial_step_size <= 0.0:
            raise ValueError(f"Invalid initial step size: {self.initial_step_size}")
        if self.kappa < 0.0:
            raise ValueError(f"Invalid kappa value: {self.kappa}")
        if not 0.0 <= self.phi <= 1.0:
            raise ValueError(f"Invalid phi value: {self.phi}")
        if not 0.0 <= self.theta < 1.0:
            raise ValueError(f"Invalid theta value: {self.theta}")
        if self.min_step_size < 0.0:
            raise ValueError(f"Invalid minimum step size: {self.min_step_size}")

    def policy(
        self,
        *size: int,
        dtype: Optional[torch.dtype] = None,
        device=None,
    ) -> "DeltaBarDeltaPolicy":
        """Create the state for one optimization run over tensors of ``size``."""
        return DeltaBarDeltaPolicy(self, *size, dtype=dtype, device=device)


class DeltaBarDeltaPolicy:
    """
    Per-run state of the Delta-Bar-Delta update.

    Holds the exponential average of past gradients (``delta_bar``) and the
    current step size of each parameter (``epsilon``). The parent's
    hyperparameters are converted once to the run's dtype and kept as 0-dim
    tensors.

    One policy belongs to one run. Independent runs, including concurrent ones
    sharing a ``DeltaBarDeltaUpdate``, must each create their own.
    """

    def __init__(
        self,
        parent: DeltaBarDeltaUpdate,
        *size: int,
        dtype: Optional[torch.dtype] = None,
        device=None,
    ):
        """
        Args:
            parent: Hyperparameters to snapshot
            size: Shape of the parameters, usually ``rows, cols``
            dtype: Element type of the run (default: torch default dtype)
            device: Device holding the state
        """
        if dtype is None:
            dtype = torch.get_default_dtype()

        def convert(value):
            return torch.tensor(value, dtype=dtype, device=device)

        self._kappa = convert(parent.kappa)
        self._phi = convert(parent.phi)
        self._theta = convert(parent.theta)
        self._min_step_size = convert(parent.min_step_size)

        self._delta_bar = torch.zeros(*size, dtype=dtype, device=device)
        self._epsilon = torch.full(
            self._delta_bar.shape, parent.initial_step_size, dtype=dtype, device=device
        )

        LOGGER.debug(
            "Created Delta-Bar-Delta policy: shape=%s dtype=%s initial_step_size=%g",
            tuple(self._delta_bar.shape), dtype, parent.initial_step_size,
        )

    @property
    def shape(self) -> torch.Size:
        return self._delta_bar.shape

    @property
    def dtype(self) -> torch.dtype:
        return self._delta_bar.dtype

    @property
    def delta_bar(self) -> torch.Tensor:
        """Exponential average of past gradients."""
        return self._delta_bar

    @property
    def epsilon(self) -> torch.Tensor:
        """Current step size of each parameter."""
        return self._epsilon

    @property
    def kappa(self) -> torch.Tensor:
        return self._kappa

    @property
    def phi(self) -> torch.Tensor:
        return self._phi

    @property
    def theta(self) -> torch.Tensor:
        return self._theta

    @property
    def min_step_size(self) -> torch.Tensor:
        return self._min_step_size

    def update(self, iterate: torch.Tensor, step_size: float, gradient: torch.Tensor) -> None:
        """
        Update step for gradient descent.

        Args:
            iterate: Parameters being optimized, modified in place
            step_size: Step size chosen by the driver. Not used: the adaptive
                per-parameter step sizes take its place.
            gradient: Gradient at ``iterate``
        """
        if iterate.shape != self.shape:
            raise ValueError(
                f"Parameter shape {tuple(iterate.shape)} does not match state shape {tuple(self.shape)}"
            )
        if gradient.shape != self.shape:
            raise ValueError(
                f"Gradient shape {tuple(gradient.shape)} does not match state shape {tuple(self.shape)}"
            )

        delta_bar_delta_(
            iterate,
            gradient,
            self._delta_bar,
            self._epsilon,
            kappa=self._kappa,
            phi=self._phi,
            theta=self._theta,
            min_step_size=self._min_step_size,
        )
