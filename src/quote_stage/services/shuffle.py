"""Reproducible permutation used by the ``default`` feed sort.

Given the same seed string, the ordering matches the one produced by
earlier deployments bit for bit: a 32-bit rolling string hash of the filter
parameters seeds a sine-based fractional generator, which drives a
Fisher-Yates shuffle over rows ordered by id. Identical filter parameters
over an unchanged set always yield the same permutation. Seed strings are
built from resolved filter parameters, so an author value is hashed after
trimming.

This generator is not cryptographic and must not be used where
unpredictability matters.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from typing import TypeVar

T = TypeVar("T")

_INT32_MODULUS = 1 << 32
_INT32_MAX = (1 << 31) - 1


def _to_int32(value: int) -> int:
    value %= _INT32_MODULUS
    return value - _INT32_MODULUS if value > _INT32_MAX else value


def seed_string(params: Mapping[str, str]) -> str:
    """Serialize filter parameters into the seed string.

    Key order is insertion order and the JSON is compact, so
    ``{"filterType": "all"}`` becomes ``'{"filterType":"all"}'``.
    """
    return json.dumps(dict(params), separators=(",", ":"), ensure_ascii=False)


def string_hash(text: str) -> int:
    """Fold ``text`` into a signed 32-bit integer (``h = h * 31 + code``).

    Characters outside the Basic Multilingual Plane contribute their two
    UTF-16 code units, as the historical implementation did.
    """
    value = 0
    encoded = text.encode("utf-16-le")
    for index in range(0, len(encoded), 2):
        code_unit = encoded[index] | (encoded[index + 1] << 8)
        value = _to_int32(value * 31 + code_unit)
    return value


def seeded_random(seed: int, position: int) -> float:
    """Return the pseudo-random fraction in ``[0, 1)`` for ``position``."""
    return math.fmod(abs(math.sin(seed + position) * 10000), 1)


def shuffle(items: Sequence[T], seed: int) -> list[T]:
    """Return a new list holding ``items`` in the seeded permutation."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = math.floor(seeded_random(seed, i) * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def permutation(items: Sequence[T], params: Mapping[str, str]) -> list[T]:
    """Shuffle ``items`` with the seed derived from filter ``params``."""
    return shuffle(items, string_hash(seed_string(params)))
