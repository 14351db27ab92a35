"""Injectable deterministic pseudo-random sources.

Every stochastic step in firerisk draws from an explicit RandomSource
instead of the global ``random`` module, so that a given seed (or polygon)
always reproduces the same cells, fuel grids and burn sequences.

All arithmetic is done on unsigned 32-bit integers.
"""

from __future__ import annotations

import math
from typing import Protocol, Sequence

_MASK32 = 0xFFFFFFFF
_TWO_32 = 4294967296.0

_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619
_EMPTY_SEED = 123456789


class RandomSource(Protocol):
    """Anything that yields uniform floats in [0, 1)."""

    def next(self) -> float: ...


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


class LcgRandom:
    """Numerical Recipes linear congruential generator.

    Used by the risk analyzer, seeded from a polygon hash.
    """

    def __init__(self, seed: int):
        state = seed & _MASK32
        self._state = state if state != 0 else _EMPTY_SEED

    def next(self) -> float:
        self._state = (self._state * 1664525 + 1013904223) & _MASK32
        return self._state / _TWO_32


class Mulberry32:
    """Mulberry32 generator used by the spread simulator."""

    def __init__(self, seed: int = _EMPTY_SEED):
        self._state = seed & _MASK32

    def next(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / _TWO_32


def hash_seed(coords: Sequence[tuple[float, float]]) -> int:
    """32-bit FNV-style mix over quantized (lat, lon) pairs.

    Identical polygons always hash to the same seed; vertex order matters.
    """
    if not coords:
        return _EMPTY_SEED
    seed = _FNV_OFFSET
    for idx, (lat, lon) in enumerate(coords):
        lat_int = math.floor((lat + 90.0) * 1e6) & _MASK32
        lon_int = math.floor((lon + 180.0) * 1e6) & _MASK32
        seed ^= (lat_int + idx) & _MASK32
        seed = _imul(seed, _FNV_PRIME)
        seed ^= (lon_int + idx * 101) & _MASK32
        seed = _imul(seed, _FNV_PRIME)
    return seed & _MASK32
