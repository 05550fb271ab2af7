"""
Delta-Bar-Delta Optimizer

Gradient descent where every parameter carries its own adaptive step size:

    delta_bar_{t+1} = theta * delta_bar_t + (1 - theta) * g_t
    epsilon_{t+1}   = epsilon_t + kappa            if g_t * delta_bar_t > 0
                    = (1 - phi) * epsilon_t        if g_t * delta_bar_t < 0
                    = epsilon_t                    otherwise
    W_{t+1}         = W_t - epsilon_{t+1} * g_t

with epsilon bounded below by min_step_size.
"""

import logging

import torch
from torch.optim import Optimizer

from .functional import delta_bar_delta_
from .update import DeltaBarDeltaUpdate

LOGGER = logging.getLogger(__name__)


class DeltaBarDelta(Optimizer):
    """
    Delta-Bar-Delta optimizer.

    The hyperparameters of a parameter group are read once, when the state of
    each parameter is first created. Changing a group afterwards has no effect
    until ``reset_state()`` is called. In particular, learning rate schedulers
    have no effect on a running optimizer; call ``reset_state()`` after
    changing ``lr`` to restart with the new initial step size.

    Args:
        params: Iterable of parameters to optimize
        lr: Initial step size of every parameter (default: 1e-3)
        kappa: Step size increment when gradient signs persist (default: 1e-4)
        phi: Proportional step size decrement when signs flip (default: 0.2)
        theta: Decay rate of the gradient average (default: 0.5)
        min_step_size: Lower bound of every step size (default: 1e-8)
    """

    def __init__(
        self,
        params,
        lr=1e-3,
        kappa=1e-4,
        phi=0.2,
        theta=0.5,
        min_step_size=1e-8,
    ):
        # Raises ValueError on out-of-range values.
        DeltaBarDeltaUpdate(
            initial_step_size=lr,
            kappa=kappa,
            phi=phi,
            theta=theta,
            min_step_size=min_step_size,
        )

        defaults = dict(
            lr=lr,
            kappa=kappa,
            phi=phi,
            theta=theta,
            min_step_size=min_step_size,
        )
        super(DeltaBarDelta, self).__init__(params, defaults)

    def _init_state(self, p, group):
        state = self.state[p]

        def convert(value):
            return torch.tensor(value, dtype=p.dtype, device=p.device)

        state['step'] = 0
        state['delta_bar'] = torch.zeros_like(p, memory_format=torch.preserve_format)
        state['epsilon'] = torch.full_like(p, group['lr'], memory_format=torch.preserve_format)
        state['kappa'] = convert(group['kappa'])
        state['phi'] = convert(group['phi'])
        state['theta'] = convert(group['theta'])
        state['min_step_size'] = convert(group['min_step_size'])

        LOGGER.debug(
            "Initialized Delta-Bar-Delta state for parameter of shape %s (%s)",
            tuple(p.shape), p.dtype,
        )
        return state

    @torch.no_grad()
    def step(self, closure=None):
        """Performs a single optimization step."""
        loss = None
        if closure is not None:
            with torch.enable_grad():
                loss = closure()

        for group in self.param_groups:
            for p in group['params']:
                if p.grad is None:
                    continue

                grad = p.grad
                if grad.is_sparse:
                    raise RuntimeError("DeltaBarDelta does not support sparse gradients")

                state = self.state[p]
                if len(state) == 0:
                    state = self._init_state(p, group)

                state['step'] += 1

                delta_bar_delta_(
                    p,
                    grad,
                    state['delta_bar'],
                    state['epsilon'],
                    kappa=state['kappa'],
                    phi=state['phi'],
                    theta=state['theta'],
                    min_step_size=state['min_step_size'],
                )

        return loss

    def reset_state(self):
        """
        Discard all per-parameter state.

        The next ``step()`` starts a fresh run: step sizes return to ``lr``,
        gradient averages to zero, and the groups' current hyperparameters are
        captured again.
        """
        LOGGER.debug("Resetting Delta-Bar-Delta state of %d parameters", len(self.state))
        self.state.clear()

    def get_step_size_stats(self):
        """
        Summarize the adaptive step sizes across all initialized parameters.

        Returns:
            Dictionary with 'num_params', 'min', 'max' and 'mean'. The
            statistics are None before the first step.
        """
        epsilons = [
            state['epsilon'].detach().flatten().double()
            for state in self.state.values()
            if 'epsilon' in state
        ]
        stats = {'num_params': len(epsilons), 'min': None, 'max': None, 'mean': None}

        if epsilons:
            all_eps = torch.cat([e.cpu() for e in epsilons])
            if all_eps.numel() > 0:
                stats['min'] = float(all_eps.min())
                stats['max'] = float(all_eps.max())
                stats['mean'] = float(all_eps.mean())

        return stats
