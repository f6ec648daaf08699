"""
Deterministic random number generation for match simulation.

Every simulation owns its own Rng stream. Given the same seed the stream
yields the same sequence on every platform, so whole tournaments can be
replayed bit-for-bit.
"""

import time

import numpy as np

MASK64 = 0xFFFFFFFFFFFFFFFF
GOLDEN_GAMMA = 0x9E3779B97F4A7C15
XORSHIFT_MULTIPLIER = 0x2545F4914F6CDD1D


def splitmix64(x: int) -> int:
    """
    SplitMix64 finaliser used both for seeding and for seed derivation.

    Args:
        x: Any integer, interpreted modulo 2**64

    Returns:
        int: Well-mixed 64-bit value
    """
    x = (x + GOLDEN_GAMMA) & MASK64
    z = x
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & MASK64
    return z ^ (z >> 31)


def derive_seed(base_seed: int, salt: int) -> int:
    """
    Derive an independent 64-bit seed from a base seed and an integer salt.

    Args:
        base_seed: Root seed of a session
        salt: Per-instance salt (instance id + 1 by convention)

    Returns:
        int: New 64-bit seed
    """
    scaled = (salt * GOLDEN_GAMMA) & MASK64
    return splitmix64((base_seed & MASK64) ^ scaled)


class Rng:
    """
    Xorshift64* generator.

    Fast and fully reproducible; not suitable for anything cryptographic.
    """

    def __init__(self, seed: int):
        seed &= MASK64
        if seed == 0:
            seed = GOLDEN_GAMMA
        self.state = splitmix64(seed)

    @classmethod
    def from_time(cls) -> 'Rng':
        """Create a generator seeded from the wall clock (CLI use only)."""
        return cls(time.time_ns() or 0xA5A5A5A5A5A5A5A5)

    def next_u64(self) -> int:
        x = self.state
        x ^= x >> 12
        x ^= (x << 25) & MASK64
        x ^= x >> 27
        self.state = x
        return (x * XORSHIFT_MULTIPLIER) & MASK64

    def next_f64(self) -> float:
        """Uniform float in [0, 1) built from the top 53 bits."""
        return (self.next_u64() >> 11) * (1.0 / (1 << 53))

    def chance(self, p: float) -> bool:
        """Bernoulli draw; p is clamped to [0, 1]."""
        return self.next_f64() < float(np.clip(p, 0.0, 1.0))

    def range(self, upper_exclusive: int) -> int:
        """
        Integer in [0, upper_exclusive) by modulo reduction.

        Returns 0 without consuming the stream when upper_exclusive <= 1.
        """
        if upper_exclusive <= 1:
            return 0
        return self.next_u64() % upper_exclusive
