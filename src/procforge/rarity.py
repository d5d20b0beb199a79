from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator, Optional, Tuple

from .config import DEFAULT_TUNING, TIER_NAMES, TuningConfig
from .seeds import SeededRandom, weighted_pick


class RarityTier(IntEnum):
    COMMON = 0
    UNCOMMON = 1
    RARE = 2
    EPIC = 3
    LEGENDARY = 4

    @property
    def label(self) -> str:
        return TIER_NAMES[self.value]

    @classmethod
    def parse(cls, value: str) -> "RarityTier":
        try:
            return cls(TIER_NAMES.index(value.strip().lower()))
        except ValueError:
            raise ValueError(f"Unknown rarity tier '{value}'.") from None

    def __str__(self) -> str:
        return self.label


if len(RarityTier) != len(TIER_NAMES):  # pragma: no cover - import-time guard
    raise RuntimeError("RarityTier and TIER_NAMES are out of sync.")


@dataclass(frozen=True)
class RarityDistribution:
    weights: Tuple[float, ...]

    def weight(self, tier: RarityTier) -> float:
        return self.weights[tier]

    def as_dict(self) -> Dict[RarityTier, float]:
        return {tier: self.weights[tier] for tier in RarityTier}

    def expected_counts(self, total: int) -> Dict[RarityTier, float]:
        return {tier: self.weights[tier] * total for tier in RarityTier}

    def __iter__(self) -> Iterator[Tuple[RarityTier, float]]:
        for tier in RarityTier:
            yield tier, self.weights[tier]


class RarityEngine:
    """Turns (depth, difficulty) into rarity odds and stat budgets.

    Inputs outside the valid range are clamped rather than rejected, so
    every call succeeds.
    """

    def __init__(self, tuning: Optional[TuningConfig] = None) -> None:
        self._tuning = tuning if tuning is not None else DEFAULT_TUNING
        self._tuning.validate()

    @property
    def tuning(self) -> TuningConfig:
        return self._tuning

    def clamp(self, depth: int, difficulty: float) -> Tuple[int, float]:
        max_depth = self._tuning.rarity.max_depth
        clamped_depth = min(max(int(depth), 0), max_depth)
        if difficulty != difficulty:  # NaN
            clamped_difficulty = 0.0
        else:
            clamped_difficulty = min(max(float(difficulty), 0.0), 1.0)
        return clamped_depth, clamped_difficulty

    def progress(self, depth: int) -> float:
        depth, _ = self.clamp(depth, 0.0)
        return 1.0 - math.exp(-depth / self._tuning.rarity.depth_scale)

    def pressure(self, depth: int, difficulty: float) -> float:
        depth, difficulty = self.clamp(depth, difficulty)
        curve = self._tuning.rarity
        return curve.depth_weight * self.progress(depth) + curve.difficulty_weight * difficulty

    def distribution(self, depth: int, difficulty: float) -> RarityDistribution:
        curve = self._tuning.rarity
        pressure = self.pressure(depth, difficulty)
        raw = [base * (1.0 + shift * pressure) for base, shift in zip(curve.base_weights, curve.shifts)]
        total = sum(raw)
        return RarityDistribution(weights=tuple(value / total for value in raw))

    def draw(self, rng: SeededRandom, distribution: RarityDistribution) -> RarityTier:
        return RarityTier(weighted_pick(rng.unit(), distribution.weights))

    def roll_rarity(self, rng: SeededRandom, depth: int, difficulty: float) -> RarityTier:
        return self.draw(rng, self.distribution(depth, difficulty))

    def budget(self, depth: int, difficulty: float, tier: RarityTier) -> float:
        depth, difficulty = self.clamp(depth, difficulty)
        budget = self._tuning.budget
        depth_factor = 1.0 + budget.depth_gain * (1.0 - math.exp(-depth / budget.depth_scale))
        difficulty_factor = budget.difficulty_floor + budget.difficulty_span * difficulty
        return depth_factor * difficulty_factor * budget.tier_multipliers[tier]

    def required_level(
        self,
        depth: int,
        tier: RarityTier,
        levels_per_depth: float = 0.5,
        levels_per_tier: int = 1,
    ) -> int:
        depth, _ = self.clamp(depth, 0.0)
        return 1 + int(depth * levels_per_depth) + int(tier) * levels_per_tier

    @staticmethod
    def roll_float(rng: SeededRandom, budget: float, low: float, high: float) -> float:
        return max(rng.between(low, high) * budget, 0.0)

    @staticmethod
    def roll_int(rng: SeededRandom, budget: float, low: float, high: float) -> int:
        value = rng.between(low, high) * budget
        return max(int(math.floor(value + 0.5)), 0)
