from __future__ import annotations

import random
from typing import List, MutableSequence, Sequence, TypeVar

T = TypeVar("T")

MASK64 = (1 << 64) - 1

# Additive stride between sibling streams (64-bit golden ratio constant).
# Changing it changes every generated batch.
STREAM_STRIDE = 0x9E3779B97F4A7C15

# Stride between the per-domain batch seeds of one content bundle. Must differ
# from STREAM_STRIDE or domain batches would share object seeds.
DOMAIN_STRIDE = 0xD1B54A32D192ED03

# Salt indices for streams nested under one object's seed.
INVENTORY_SALT = 1
REWARD_SALT = 2
SPAWN_SALT = 3


def normalize_seed(seed: int) -> int:
    return int(seed) & MASK64


def derive_seed(seed: int, index: int, stride: int = STREAM_STRIDE) -> int:
    """Seed of object ``index`` in a batch rooted at ``seed``.

    Depends only on ``(seed, index)`` so that objects never shift when the
    batch size changes.
    """
    return (int(seed) + int(index) * stride) & MASK64


def derive_seeds(seed: int, count: int, stride: int = STREAM_STRIDE) -> List[int]:
    return [derive_seed(seed, index, stride) for index in range(max(count, 0))]


def weighted_pick(roll: float, weights: Sequence[float]) -> int:
    """Index selected by subtracting weights from ``roll`` in order until negative."""
    if not weights:
        raise ValueError("weighted_pick requires at least one weight.")
    remaining = roll
    for index, weight in enumerate(weights):
        remaining -= weight
        if remaining < 0:
            return index
    # Floating residue when weights sum to slightly under the roll.
    return len(weights) - 1


class SeededRandom:
    def __init__(self, seed: int) -> None:
        self.seed = normalize_seed(seed)
        self._random = random.Random(self.seed)

    def unit(self) -> float:
        return self._random.random()

    def between(self, low: float, high: float) -> float:
        if high <= low:
            return float(low)
        return low + self._random.random() * (high - low)

    def randint(self, low: int, high: int) -> int:
        if high <= low:
            return low
        return self._random.randint(low, high)

    def chance(self, probability: float) -> bool:
        return self._random.random() < probability

    def choice(self, options: Sequence[T]) -> T:
        if not options:
            raise ValueError("Cannot choose from an empty sequence.")
        return options[self._random.randrange(len(options))]

    def shuffle(self, values: MutableSequence[T]) -> None:
        self._random.shuffle(values)

    def weighted_pick(self, weights: Sequence[float]) -> int:
        return weighted_pick(self._random.random(), weights)

    def weighted_choice(self, options: Sequence[T], weights: Sequence[float]) -> T:
        if len(options) != len(weights):
            raise ValueError("Options and weights must have the same length.")
        return options[self.weighted_pick(weights)]
