from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from .rarity import RarityDistribution, RarityEngine, RarityTier


@dataclass
class RarityReport:
    total: int
    counts: Dict[RarityTier, int]
    observed: Dict[RarityTier, float]
    expected: Dict[RarityTier, float]
    max_deviation: float
    total_variation: float

    def within(self, tolerance: float) -> bool:
        return self.max_deviation <= tolerance


def rarity_histogram(collection: Iterable[object]) -> Dict[RarityTier, int]:
    counts = {tier: 0 for tier in RarityTier}
    for obj in collection:
        counts[RarityTier(getattr(obj, "rarity"))] += 1
    return counts


def compare_to_distribution(counts: Mapping[RarityTier, int], distribution: RarityDistribution) -> RarityReport:
    total = sum(counts.values())
    denominator = max(total, 1)
    observed = {tier: counts.get(tier, 0) / denominator for tier in RarityTier}
    expected = distribution.as_dict()
    deviations = [abs(observed[tier] - expected[tier]) for tier in RarityTier]
    return RarityReport(
        total=total,
        counts={tier: counts.get(tier, 0) for tier in RarityTier},
        observed=observed,
        expected=expected,
        max_deviation=max(deviations),
        total_variation=sum(deviations) / 2,
    )


def analyze_rarity(
    collection: Iterable[object],
    depth: int,
    difficulty: float,
    engine: Optional[RarityEngine] = None,
) -> RarityReport:
    engine = engine if engine is not None else RarityEngine()
    return compare_to_distribution(rarity_histogram(collection), engine.distribution(depth, difficulty))
