"""
Functional form of the Delta-Bar-Delta update.

Operates in place on caller-owned tensors so that both the run-scoped policy
and the torch optimizer share one implementation of the rule:

    s       = sign(g * delta_bar)
    epsilon = epsilon + kappa            where s == +1
    epsilon = epsilon - phi * epsilon    where s == -1
    epsilon = max(epsilon, min_step_size)
    delta_bar = theta * delta_bar + (1 - theta) * g
    x       = x - epsilon * g
"""

import torch


@torch.no_grad()
def delta_bar_delta_(
    iterate: torch.Tensor,
    gradient: torch.Tensor,
    delta_bar: torch.Tensor,
    epsilon: torch.Tensor,
    *,
    kappa,
    phi,
    theta,
    min_step_size,
) -> None:
    """
    Apply one Delta-Bar-Delta step in place.

    Args:
        iterate: Parameters, updated in place
        gradient: Gradient for this iteration, same shape as ``iterate``
        delta_bar: Exponential average of past gradients, updated in place
        epsilon: Per-parameter step sizes, updated in place
        kappa: Additive increment when gradient and average agree in sign
        phi: Proportional decrement when they disagree
        theta: Decay rate of the exponential average
        min_step_size: Lower bound for every entry of ``epsilon``

    The hyperparameters may be Python numbers or 0-dim tensors of the
    state's dtype.
    """
    sign = torch.sign(gradient * delta_bar)
    same_sign = (sign == 1).to(epsilon.dtype)
    diff_sign = (sign == -1).to(epsilon.dtype)

    # Additive increase, multiplicative decrease. The masks are disjoint.
    epsilon.add_(same_sign * kappa)
    epsilon.sub_(diff_sign * phi * epsilon)
    epsilon.clamp_(min=min_step_size)

    delta_bar.mul_(theta)
    delta_bar.add_((1 - theta) * gradient)

    iterate.sub_(epsilon * gradient)
