from types import SimpleNamespace

import pytest

from procforge.analysis import analyze_rarity, compare_to_distribution, rarity_histogram
from procforge.config import GenerationParams
from procforge.items import ItemGenerator
from procforge.rarity import RarityDistribution, RarityTier
from procforge.spells import SpellGenerator


class TestRarityHistogram:
    """Tier counting."""

    def test_counts_every_tier(self):
        """Missing tiers count as zero."""
        objects = [SimpleNamespace(rarity=RarityTier.RARE), SimpleNamespace(rarity=RarityTier.RARE)]
        counts = rarity_histogram(objects)
        assert counts[RarityTier.RARE] == 2
        assert counts[RarityTier.COMMON] == 0
        assert len(counts) == 5

    def test_compare(self):
        """Deviations are measured per tier."""
        counts = {RarityTier.COMMON: 3, RarityTier.UNCOMMON: 1}
        dist = RarityDistribution(weights=(0.5, 0.5, 0.0, 0.0, 0.0))
        report = compare_to_distribution(counts, dist)
        assert report.total == 4
        assert report.observed[RarityTier.COMMON] == 0.75
        assert report.max_deviation == pytest.approx(0.25)
        assert report.total_variation == pytest.approx(0.25)
        assert report.within(0.25)
        assert not report.within(0.2)

    def test_empty_collection(self):
        """An empty collection reports zero observations."""
        report = compare_to_distribution({}, RarityDistribution(weights=(1.0, 0.0, 0.0, 0.0, 0.0)))
        assert report.total == 0
        assert report.max_deviation == pytest.approx(1.0)


class TestGeneratedRarity:
    """Generated batches follow the rarity curve."""

    def test_twenty_fantasy_items(self, registry, engine):
        """A small batch is valid, reproducible and roughly on the curve."""
        generator = ItemGenerator(registry=registry, engine=engine)
        params = GenerationParams(depth=5, difficulty=0.5, genre_id="fantasy", count=20)
        items = generator.generate(12345, params)
        assert len(items) == 20
        generator.validate(items)
        assert items == generator.generate(12345, params)
        report = analyze_rarity(items, 5, 0.5, engine)
        assert report.total == 20
        assert report.max_deviation <= 0.35

    def test_large_item_sample(self, registry, engine):
        """Large item samples match the expected distribution closely."""
        generator = ItemGenerator(registry=registry, engine=engine)
        items = generator.generate(2024, GenerationParams(depth=5, difficulty=0.5, count=2000))
        assert analyze_rarity(items, 5, 0.5, engine).within(0.05)

    def test_large_spell_sample_deep(self, registry, engine):
        """Spells follow the curve at depth too."""
        generator = SpellGenerator(registry=registry, engine=engine)
        items = generator.generate(99, GenerationParams(depth=40, difficulty=0.9, count=1500))
        assert analyze_rarity(items, 40, 0.9, engine).within(0.05)
