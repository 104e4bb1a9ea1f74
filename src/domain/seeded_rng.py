"""Deterministic randomness keyed by a string seed.

``seeded_random(seed, index)`` is a pure function: the same seed and index
always give the same float in [0, 1). The value is derived from a SHA-256
digest of the pair, finalised with the splitmix64 mixer.
"""

from __future__ import annotations

import hashlib
import secrets
from typing import Sequence, TypeVar

T = TypeVar("T")

_MASK64 = 0xFFFFFFFFFFFFFFFF
_TWO_POW_53 = float(1 << 53)


def _splitmix64(value: int) -> int:
    value = (value + 0x9E3779B97F4A7C15) & _MASK64
    value = ((value ^ (value >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    value = ((value ^ (value >> 27)) * 0x94D049BB133111EB) & _MASK64
    return value ^ (value >> 31)


def seeded_random(seed: str, index: int) -> float:
    digest = hashlib.sha256(f"{seed}\x1f{index}".encode("utf-8")).digest()
    mixed = _splitmix64(int.from_bytes(digest[:8], "big"))
    # Top 53 bits give an evenly spaced double in [0, 1).
    return (mixed >> 11) / _TWO_POW_53


def seeded_shuffle(items: Sequence[T], seed: str) -> list[T]:
    """Fisher-Yates shuffle driven by ``seeded_random``. Input is not modified."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = int(seeded_random(seed, i) * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def generate_seed(prefix: str = "CARD") -> str:
    return f"{prefix}-{secrets.token_hex(6)}"
