"""Rabin fingerprints over GF(2) with a sliding window of fixed width."""

from functools import lru_cache
from typing import List

from common.constants import RABIN_POLY64


def poly_mod(value: int, polynomial: int) -> int:
    """
    Reduce a GF(2) polynomial modulo another.

    Args:
        value: Dividend, bit i is the coefficient of x^i
        polynomial: Divisor, degree >= 1

    Returns:
        Remainder, of degree lower than the divisor
    """
    degree = polynomial.bit_length() - 1
    while value.bit_length() - 1 >= degree:
        value ^= polynomial << (value.bit_length() - 1 - degree)
    return value


class RabinTable:
    """
    Precomputed push/pop tables for one polynomial and window width.

    push[t] is (t * x^degree) mod P, used to fold back the byte shifted out of
    the top of the fingerprint. pop[b] is (b * x^(8 * window)) mod P, the
    contribution of the byte leaving the window once the new byte is in.
    """

    def __init__(self, polynomial: int, window: int):
        degree = polynomial.bit_length() - 1
        if degree < 8:
            raise ValueError(f"polynomial degree must be >= 8, got {degree}")
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")

        self.polynomial = polynomial
        self.window = window
        self.degree = degree
        self.shift = degree - 8
        self.mask = (1 << degree) - 1
        self.push: List[int] = [poly_mod(i << degree, polynomial) for i in range(256)]
        self.pop: List[int] = [poly_mod(i << (8 * window), polynomial) for i in range(256)]


@lru_cache(maxsize=16)
def get_table(window: int, polynomial: int = RABIN_POLY64) -> RabinTable:
    """Return the shared, read-only table for a window width."""
    return RabinTable(polynomial, window)


class RollingHash:
    """
    Fingerprint of the last `window` bytes rolled through it.

    The window starts zero-filled, so after at least `window` bytes the value
    equals poly_mod(int.from_bytes(last_window_bytes, "big"), polynomial).
    """

    def __init__(self, table: RabinTable):
        self._table = table
        self._window = bytearray(table.window)
        self._pos = 0
        self.value = 0

    def roll(self, byte: int) -> int:
        table = self._table
        old = self._window[self._pos]
        self._window[self._pos] = byte
        self._pos += 1
        if self._pos == table.window:
            self._pos = 0

        value = self.value
        value = (((value << 8) | byte) & table.mask) ^ table.push[value >> table.shift]
        self.value = value ^ table.pop[old]
        return self.value

    def reset(self) -> None:
        """Zero the window; the chunker calls this at every cut."""
        self._window = bytearray(self._table.window)
        self._pos = 0
        self.value = 0
