from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, NamedTuple, Optional, Sequence, Tuple

from .errors import PresetLookupError
from .genres import GenreDefinition, GenreRegistry, default_registry
from .logging_config import get_logger
from .seeds import SeededRandom

logger = get_logger(__name__)

BLENDED_THEME_COUNT = 6


@dataclass(frozen=True)
class BlendedGenre(GenreDefinition):
    primary_id: str = ""
    secondary_id: str = ""
    blend_weight: float = 0.0
    registry: Optional[GenreRegistry] = field(default=None, repr=False, compare=False)

    def is_blended(self) -> bool:
        return bool(self.primary_id and self.secondary_id)

    def get_base_genres(self) -> Tuple[GenreDefinition, GenreDefinition]:
        registry = self.registry if self.registry is not None else default_registry()
        return registry.require(self.primary_id), registry.require(self.secondary_id)


class PresetBlend(NamedTuple):
    primary: str
    secondary: str
    weight: float


PRESET_BLENDS: Mapping[str, PresetBlend] = MappingProxyType(
    {
        "sci-fi-horror": PresetBlend("scifi", "horror", 0.5),
        "dark-fantasy": PresetBlend("fantasy", "horror", 0.3),
        "post-apoc-scifi": PresetBlend("postapoc", "scifi", 0.5),
        "cyber-horror": PresetBlend("cyberpunk", "horror", 0.4),
        "wasteland-fantasy": PresetBlend("postapoc", "fantasy", 0.6),
    }
)


def blended_id(primary: GenreDefinition, secondary: GenreDefinition, weight: float) -> str:
    # Alphabetical order so that (a, b, w) and (b, a, 1 - w) share an id.
    if primary.id > secondary.id:
        primary, secondary = secondary, primary
        weight = 1.0 - weight
    return f"{primary.id}-{secondary.id}-{int(round(weight * 100))}"


def blended_name(primary: GenreDefinition, secondary: GenreDefinition, weight: float) -> str:
    if weight < 0.5:
        return f"{primary.name}-{secondary.name}"
    if weight > 0.5:
        return f"{secondary.name}-{primary.name}"
    return f"{primary.name}/{secondary.name}"


def blended_description(primary: GenreDefinition, secondary: GenreDefinition, weight: float) -> str:
    if weight < 0.33:
        return f"{primary.description} with elements of {secondary.name.lower()}"
    if weight > 0.67:
        return f"{secondary.description} with elements of {primary.name.lower()}"
    return f"A blend of {primary.name.lower()} and {secondary.name.lower()} themes"


def blend_themes(
    primary: Sequence[str],
    secondary: Sequence[str],
    rng: SeededRandom,
    limit: int = BLENDED_THEME_COUNT,
) -> Tuple[str, ...]:
    merged: List[str] = []
    for theme in list(primary) + list(secondary):
        if theme not in merged:
            merged.append(theme)
    rng.shuffle(merged)
    return tuple(merged[:limit])


def select_prefix(primary: str, secondary: str, weight: float, rng: SeededRandom) -> str:
    return rng.weighted_choice((primary, secondary), (1.0 - weight, weight))


class GenreBlender:
    def __init__(self, registry: Optional[GenreRegistry] = None) -> None:
        self._registry = registry if registry is not None else default_registry()

    @property
    def registry(self) -> GenreRegistry:
        return self._registry

    def blend(self, primary_id: str, secondary_id: str, weight: float, seed: int) -> BlendedGenre:
        primary = self._registry.require(primary_id)
        secondary = self._registry.require(secondary_id)
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"Blend weight must be between 0.0 and 1.0, got {weight}.")
        if primary.id == secondary.id:
            raise ValueError(f"Cannot blend genre '{primary.id}' with itself.")

        rng = SeededRandom(seed)
        # Draw order is part of the reproducibility contract: themes, then
        # entity, item and location prefixes.
        themes = blend_themes(primary.themes, secondary.themes, rng)
        entity_prefix = select_prefix(primary.entity_prefix, secondary.entity_prefix, weight, rng)
        item_prefix = select_prefix(primary.item_prefix, secondary.item_prefix, weight, rng)
        location_prefix = select_prefix(primary.location_prefix, secondary.location_prefix, weight, rng)

        blended = BlendedGenre(
            id=blended_id(primary, secondary, weight),
            name=blended_name(primary, secondary, weight),
            description=blended_description(primary, secondary, weight),
            themes=themes,
            primary_color=primary.primary_color.lerp(secondary.primary_color, weight),
            secondary_color=primary.secondary_color.lerp(secondary.secondary_color, weight),
            accent_color=primary.accent_color.lerp(secondary.accent_color, weight),
            entity_prefix=entity_prefix,
            item_prefix=item_prefix,
            location_prefix=location_prefix,
            primary_id=primary.id,
            secondary_id=secondary.id,
            blend_weight=weight,
            registry=self._registry,
        )
        logger.debug("genre blended", genre_id=blended.id, primary=primary.id, secondary=secondary.id, seed=seed)
        return blended

    def create_preset_blend(self, preset_name: str, seed: int) -> BlendedGenre:
        preset = PRESET_BLENDS.get(preset_name)
        if preset is None:
            raise PresetLookupError(preset_name)
        return self.blend(preset.primary, preset.secondary, preset.weight, seed)
