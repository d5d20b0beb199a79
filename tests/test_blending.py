import pytest

from procforge.blending import (
    PRESET_BLENDS,
    BlendedGenre,
    GenreBlender,
    blended_description,
    blended_name,
)
from procforge.errors import GenreLookupError, PresetLookupError


@pytest.fixture
def blender(registry):
    return GenreBlender(registry)


class TestBlend:
    """Two-genre blending."""

    def test_deterministic(self, blender):
        """The same inputs give the same blend."""
        assert blender.blend("scifi", "horror", 0.4, 9) == blender.blend("scifi", "horror", 0.4, 9)

    def test_weight_zero_is_primary(self, blender, registry):
        """At weight 0 every drawn attribute comes from the primary."""
        fantasy = registry.require("fantasy")
        for seed in range(10):
            blended = blender.blend("fantasy", "scifi", 0.0, seed)
            assert blended.color_palette() == fantasy.color_palette()
            assert blended.entity_prefix == fantasy.entity_prefix
            assert blended.item_prefix == fantasy.item_prefix
            assert blended.location_prefix == fantasy.location_prefix

    def test_weight_one_is_secondary(self, blender, registry):
        """At weight 1 every drawn attribute comes from the secondary."""
        scifi = registry.require("scifi")
        for seed in range(10):
            blended = blender.blend("fantasy", "scifi", 1.0, seed)
            assert blended.color_palette() == scifi.color_palette()
            assert blended.entity_prefix == scifi.entity_prefix
            assert blended.item_prefix == scifi.item_prefix
            assert blended.location_prefix == scifi.location_prefix

    def test_colors_are_convex(self, blender, registry):
        """Blended colors lie between the source colors."""
        horror, cyber = registry.require("horror"), registry.require("cyberpunk")
        blended = blender.blend("horror", "cyberpunk", 0.35, 2)
        for mixed, a, b in zip(blended.color_palette(), horror.color_palette(), cyber.color_palette()):
            for component, low, high in zip(mixed, a, b):
                assert min(low, high) - 1e-9 <= component <= max(low, high) + 1e-9

    def test_themes(self, blender, registry):
        """Themes are a deduplicated subset of both sources, at most six."""
        blended = blender.blend("fantasy", "horror", 0.5, 3)
        sources = set(registry.require("fantasy").themes) | set(registry.require("horror").themes)
        assert len(blended.themes) == 6
        assert len(set(blended.themes)) == len(blended.themes)
        assert set(blended.themes) <= sources

    def test_metadata(self, blender):
        """Blends record their sources and weight verbatim."""
        blended = blender.blend("scifi", "horror", 0.42, 1)
        assert isinstance(blended, BlendedGenre)
        assert blended.is_blended()
        assert (blended.primary_id, blended.secondary_id, blended.blend_weight) == ("scifi", "horror", 0.42)
        assert blended.id == "horror-scifi-58"

    def test_complementary_blends_share_id(self, blender):
        """Swapping the sources and complementing the weight keeps the id."""
        assert blender.blend("scifi", "horror", 0.25, 1).id == blender.blend("horror", "scifi", 0.75, 1).id

    def test_complementary_blends_share_colors(self, blender):
        """Swapping the sources and complementing the weight keeps the colors."""
        first = blender.blend("fantasy", "cyberpunk", 0.3, 1).color_palette()
        second = blender.blend("cyberpunk", "fantasy", 0.7, 1).color_palette()
        for a, b in zip(first, second):
            assert tuple(a) == pytest.approx(tuple(b), abs=1e-9)

    def test_base_genres_are_registry_definitions(self, blender, registry):
        """Base genres are the registry's own objects."""
        primary, secondary = blender.blend("postapoc", "fantasy", 0.6, 5).get_base_genres()
        assert primary is registry.require("postapoc")
        assert secondary is registry.require("fantasy")

    def test_blend_validates(self, blender):
        """Blends are valid genre definitions."""
        blender.blend("cyberpunk", "postapoc", 0.5, 8).validate()


class TestBlendErrors:
    """Rejected blends."""

    def test_unknown_genre(self, blender):
        """Unknown source ids raise a lookup error."""
        with pytest.raises(GenreLookupError):
            blender.blend("fantasy", "steampunk", 0.5, 1)

    @pytest.mark.parametrize("weight", [-0.1, 1.5, float("nan")])
    def test_bad_weight(self, blender, weight):
        """Weights outside [0, 1] are rejected."""
        with pytest.raises(ValueError, match="Blend weight must be between 0.0 and 1.0"):
            blender.blend("fantasy", "scifi", weight, 1)

    def test_self_blend(self, blender):
        """A genre cannot be blended with itself."""
        with pytest.raises(ValueError, match="with itself"):
            blender.blend("horror", "horror", 0.5, 1)


class TestPresets:
    """Preset blends."""

    @pytest.mark.parametrize("name", sorted(PRESET_BLENDS))
    def test_preset_equals_direct_blend(self, blender, name):
        """A preset is the direct blend of its stored triple."""
        preset = PRESET_BLENDS[name]
        assert blender.create_preset_blend(name, 12) == blender.blend(preset.primary, preset.secondary, preset.weight, 12)

    def test_dark_fantasy(self):
        """Dark fantasy leans towards fantasy."""
        assert PRESET_BLENDS["dark-fantasy"] == ("fantasy", "horror", 0.3)

    def test_unknown_preset(self, blender):
        """Unknown preset names raise."""
        with pytest.raises(PresetLookupError, match="Unknown preset blend 'space-western'"):
            blender.create_preset_blend("space-western", 1)


class TestBlendText:
    """Composed names and descriptions."""

    def test_names(self, registry):
        """The dominant genre is named first."""
        fantasy, horror = registry.require("fantasy"), registry.require("horror")
        assert blended_name(fantasy, horror, 0.3) == "Fantasy-Horror"
        assert blended_name(fantasy, horror, 0.7) == "Horror-Fantasy"
        assert blended_name(fantasy, horror, 0.5) == "Fantasy/Horror"

    def test_descriptions(self, registry):
        """Lopsided blends reuse the dominant description."""
        fantasy, horror = registry.require("fantasy"), registry.require("horror")
        assert blended_description(fantasy, horror, 0.1).startswith(fantasy.description)
        assert blended_description(fantasy, horror, 0.9).startswith(horror.description)
        assert blended_description(fantasy, horror, 0.5) == "A blend of fantasy and horror themes"
