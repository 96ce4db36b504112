"""
PURPOSE: Uniform and standard-normal random sources for the Monte Carlo engine.

RESPONSIBILITIES:
- Deterministic uniform source (Mulberry32) for seeded, reproducible runs
- Non-deterministic uniform source (numpy Generator) for unseeded runs
- Standard normal variates via the Box-Muller transform
- Single responsibility: only sampling, no aggregation
"""

import math
from typing import Callable, Optional

import numpy as np

UniformSource = Callable[[], float]

_MASK32 = 0xFFFFFFFF
_TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


class Mulberry32:
    """
    Small counter-based 32-bit PRNG.

    Each call advances the counter by a fixed odd increment and mixes it
    into a 32-bit output, so the same seed always yields the same stream.
    """

    def __init__(self, seed: int):
        self._state = int(seed) & _MASK32

    def __call__(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        x = _imul(t ^ (t >> 15), 1 | t)
        x ^= (x + _imul(x ^ (x >> 7), 61 | x)) & _MASK32
        return ((x ^ (x >> 14)) & _MASK32) / _TWO_POW_32


def normalize_seed(seed) -> int:
    """Map any numeric seed onto the unsigned 32-bit range."""
    try:
        seed = float(seed)
    except OverflowError:
        return 0
    if not math.isfinite(seed):
        return 0
    return int(seed) & _MASK32


def system_uniform_source() -> UniformSource:
    """Uniform source backed by OS entropy."""
    rng = np.random.default_rng()
    return lambda: float(rng.random())


class Sampler:
    """
    Draws standard-normal variates from an injected uniform source.

    The uniform source is fixed at construction: a seeded Mulberry32 stream
    when a seed is given, a system-entropy stream otherwise.
    """

    def __init__(self, uniform: Optional[UniformSource] = None, seed=None):
        if uniform is not None and seed is not None:
            raise ValueError("pass either uniform or seed, not both")
        if uniform is None:
            uniform = Mulberry32(normalize_seed(seed)) if seed is not None else system_uniform_source()
        self._uniform = uniform

    @classmethod
    def from_seed(cls, seed=None) -> "Sampler":
        return cls(seed=seed)

    def next_uniform(self) -> float:
        return self._uniform()

    def next_normal(self) -> float:
        """
        Box-Muller transform.

        Draws u and v in (0, 1), re-drawing zeros to keep log() finite, and
        returns sqrt(-2 ln u) * cos(2 pi v).
        """
        u = 0.0
        v = 0.0
        while u == 0.0:
            u = self._uniform()
        while v == 0.0:
            v = self._uniform()
        return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
