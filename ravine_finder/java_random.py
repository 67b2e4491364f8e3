"""
JavaRandom - the 48-bit linear congruential generator used by the game.

Mirrors java.util.Random (and cubiomes' rng.h) draw for draw, so that every
carver decision made from a seed matches the game exactly.
"""

import numpy as np

MULTIPLIER = 0x5DEECE66D
ADDEND = 0xB
MASK_48 = (1 << 48) - 1
MASK_64 = (1 << 64) - 1

_FLOAT_UNIT = np.float32(1 << 24)


def to_int32(value: int) -> int:
    """Wrap an integer to a signed 32-bit value, as Java int arithmetic does."""
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


class JavaRandom:
    """
    Explicit generator handle.

    Every caller owns its own instance; there is no shared or module-level
    state, so independent instances can run in separate processes.
    """

    __slots__ = ("state",)

    def __init__(self, seed: int = 0):
        self.state = 0
        self.set_seed(seed)

    def set_seed(self, seed: int) -> None:
        """Reset the stream from a seed (any int, taken modulo 2**64)."""
        self.state = ((seed & MASK_64) ^ MULTIPLIER) & MASK_48

    def _next(self, bits: int) -> int:
        self.state = (self.state * MULTIPLIER + ADDEND) & MASK_48
        return to_int32(self.state >> (48 - bits))

    def next_long(self) -> int:
        """
        Advance the stream and return a 64-bit value.

        Returns:
            Unsigned 64-bit integer in [0, 2**64)
        """
        high = self._next(32)
        low = self._next(32)
        return ((high << 32) + low) & MASK_64

    def next_int(self, bound: int) -> int:
        """
        Advance the stream and return a uniform integer in [0, bound).

        Args:
            bound: Exclusive upper bound, must be positive

        Returns:
            Drawn integer
        """
        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")

        # Powers of two take the high bits directly
        if (bound & -bound) == bound:
            return (bound * self._next(31)) >> 31

        while True:
            bits = self._next(31)
            value = bits % bound
            if to_int32(bits - value + (bound - 1)) >= 0:
                return value

    def next_float(self) -> np.float32:
        """Advance the stream and return a single-precision value in [0, 1)."""
        return np.float32(self._next(24)) / _FLOAT_UNIT

    def __repr__(self) -> str:
        return f"JavaRandom(state={self.state:#014x})"
