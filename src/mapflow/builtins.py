"""
Random number generators registered in the default resolution scope.

They make mapping and dispatch examples runnable out of the box:

    create().invoke_map(
        ["uniform_random", "normal_random", "poisson_random"],
        [{"min": -1, "max": 1}, {"sd": 5}, {"lambda": 10}],
        shared={"n": 5},
    )
"""

import math
import random

from mapflow.domain.port import register

__all__ = [
    "seed",
    "uniform_random",
    "normal_random",
    "poisson_random",
]

_rng = random.Random()

# Largest exponent applied at once when drawing Poisson values, keeps exp() finite
_POISSON_STEP = 500.0


def seed(value: int | None = None) -> None:
    """Reseeds the generator shared by all built-in random functions."""
    _rng.seed(value)


def _check_count(n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValueError(f"n must be a non-negative integer, got {n!r}")


@register("uniform_random")
def uniform_random(n: int, min: float = 0.0, max: float = 1.0) -> list[float]:
    """Draws n values uniformly distributed between min and max."""
    _check_count(n)
    if min > max:
        raise ValueError(f"min ({min}) must not be greater than max ({max})")
    return [_rng.uniform(min, max) for _ in range(n)]


@register("normal_random")
def normal_random(n: int, mean: float = 0.0, sd: float = 1.0) -> list[float]:
    """Draws n values from a normal distribution."""
    _check_count(n)
    if sd < 0:
        raise ValueError(f"sd must be non-negative, got {sd}")
    return [_rng.gauss(mean, sd) for _ in range(n)]


def _poisson(lam: float) -> int:
    # Knuth's multiplication method, applying exp(lam) in bounded steps
    remaining = lam
    k = 0
    p = 1.0
    while True:
        k += 1
        p *= _rng.random()
        while p < 1 and remaining > 0:
            step = min(remaining, _POISSON_STEP)
            p *= math.exp(step)
            remaining -= step
        if p <= 1:
            return k - 1


@register("poisson_random")
def poisson_random(n: int, lambda_: float = 1.0) -> list[int]:
    """Draws n counts from a Poisson distribution with rate lambda_.

    Dispatched calls may pass the rate as `lambda`.
    """
    _check_count(n)
    if lambda_ < 0:
        raise ValueError(f"lambda must be non-negative, got {lambda_}")
    return [_poisson(lambda_) for _ in range(n)]
