#!/usr/bin/env python3
"""
Simple example demonstrating Delta-Bar-Delta.

This script shows:
1. How to drive the update policy directly on a tensor
2. How to train a model with the DeltaBarDelta optimizer
"""

import logging

import torch
import torch.nn as nn

from delta_bar_delta import DeltaBarDeltaUpdate, DeltaBarDelta


def example_1_update_policy():
    """Example 1: Minimizing a quadratic with the update policy."""
    print("=" * 60)
    print("Example 1: Update Policy")
    print("=" * 60)

    # f(x) = ||A x - b||^2 with a badly scaled A
    A = torch.diag(torch.tensor([10.0, 1.0, 0.1], dtype=torch.float64))
    b = torch.tensor([1.0, 2.0, 3.0], dtype=torch.float64)
    x = torch.zeros(3, 1, dtype=torch.float64)

    update = DeltaBarDeltaUpdate(initial_step_size=0.001, kappa=0.01, phi=0.2, theta=0.5)
    policy = update.policy(3, 1, dtype=torch.float64)

    for iteration in range(500):
        residual = A @ x - b.unsqueeze(1)
        gradient = 2 * A.T @ residual
        policy.update(x, 0.001, gradient)

        if (iteration + 1) % 100 == 0:
            print(f"  Iteration {iteration+1}: f(x) = {float((residual ** 2).sum()):.6e}")

    print(f"Final step sizes: {policy.epsilon.flatten().tolist()}\n")


def example_2_optimizer():
    """Example 2: Linear regression with the DeltaBarDelta optimizer."""
    print("=" * 60)
    print("Example 2: DeltaBarDelta Optimizer")
    print("=" * 60)

    # Simple regression task
    true_weights = torch.randn(10, 5)
    X = torch.randn(100, 10)
    y = X @ true_weights + 0.1 * torch.randn(100, 5)

    model = nn.Linear(10, 5, bias=False)

    optimizer = DeltaBarDelta(
        model.parameters(),
        lr=0.01,
        kappa=0.001,
        phi=0.2,
        theta=0.5,
    )

    print("Training with Delta-Bar-Delta...")

    for epoch in range(50):
        pred = model(X)
        loss = nn.functional.mse_loss(pred, y)

        optimizer.zero_grad()
        loss.backward()
        optimizer.step()

        if (epoch + 1) % 10 == 0:
            stats = optimizer.get_step_size_stats()
            print(f"  Epoch {epoch+1}: Loss = {loss.item():.6f}, mean step size = {stats['mean']:.4f}")

    print(f"Final loss: {loss.item():.6f}\n")


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    example_1_update_policy()
    example_2_optimizer()
