import dataclasses

import pytest

from procforge.config import DEFAULT_TUNING, GenerationParams, load_tuning, parse_tuning


class TestGenerationParams:
    """Per-call generation parameters."""

    def test_defaults(self):
        """Defaults target the fantasy genre at the surface."""
        params = GenerationParams()
        assert params.depth == 0
        assert params.difficulty == 0.5
        assert params.genre_id == "fantasy"
        assert params.count is None
        assert params.type_filter is None

    def test_frozen(self):
        """Params cannot be mutated in place."""
        params = GenerationParams()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.depth = 3

    def test_extra_is_read_only(self):
        """The escape-hatch mapping is read-only."""
        params = GenerationParams(extra={"inventory_size": 4})
        assert params.extra["inventory_size"] == 4
        with pytest.raises(TypeError):
            params.extra["inventory_size"] = 5

    def test_with_options_copies(self):
        """with_options returns a modified copy."""
        params = GenerationParams(depth=2)
        deeper = params.with_options(depth=9, count=3)
        assert params.depth == 2
        assert deeper.depth == 9
        assert deeper.count == 3

    def test_resolved_count(self):
        """Missing counts use the default; negative counts become zero."""
        assert GenerationParams().resolved_count(10) == 10
        assert GenerationParams(count=4).resolved_count(10) == 4
        assert GenerationParams(count=-3).resolved_count(10) == 0


class TestTuningLoading:
    """TOML tuning tables."""

    def test_shipped_file_matches_defaults(self, tuning_path):
        """config/tuning.toml holds the built-in defaults."""
        assert load_tuning(tuning_path) == DEFAULT_TUNING

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Tuning file not found"):
            load_tuning(tmp_path / "absent.toml")

    def test_partial_file_keeps_defaults(self, tmp_path):
        """Keys left out fall back to their defaults."""
        path = tmp_path / "tuning.toml"
        path.write_text("[budget]\ndepth_gain = 2.0\n", encoding="utf-8")
        tuning = load_tuning(path)
        assert tuning.budget.depth_gain == 2.0
        assert tuning.rarity == DEFAULT_TUNING.rarity

    def test_missing_tier(self):
        """Tier tables must name every tier."""
        raw = {"rarity": {"base_weights": {"common": 0.7, "uncommon": 0.3}}}
        with pytest.raises(ValueError, match="missing tiers: rare, epic, legendary"):
            parse_tuning(raw)

    def test_unknown_tier(self):
        """Unknown tier names are rejected."""
        raw = {
            "rarity": {
                "shifts": {"common": 0, "uncommon": 0, "rare": 0, "epic": 0, "legendary": 0, "mythic": 1},
            }
        }
        with pytest.raises(ValueError, match="unknown tiers: mythic"):
            parse_tuning(raw)

    def test_list_length_checked(self):
        """Tier lists must have one value per tier."""
        with pytest.raises(ValueError, match="must list 5 values"):
            parse_tuning({"budget": {"tier_multipliers": [1.0, 2.0]}})

    def test_section_must_be_table(self):
        """Sections must be TOML tables."""
        with pytest.raises(ValueError, match=r"\[rarity\] must be a table"):
            parse_tuning({"rarity": 3})

    def test_pressure_weights_bounded(self):
        """Depth and difficulty weights may not exceed 1 together."""
        with pytest.raises(ValueError, match="must not exceed 1"):
            parse_tuning({"rarity": {"depth_weight": 0.8, "difficulty_weight": 0.5}})

    def test_tier_multipliers_non_decreasing(self):
        """Higher tiers never get a smaller budget multiplier."""
        with pytest.raises(ValueError, match="non-decreasing"):
            parse_tuning({"budget": {"tier_multipliers": [1.0, 2.0, 1.5, 3.0, 4.0]}})
