from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, NamedTuple, Optional, Sequence, Tuple

from .errors import GenreLookupError


class Color(NamedTuple):
    r: float
    g: float
    b: float

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        raw = value.strip().lstrip("#")
        if len(raw) != 6:
            raise ValueError(f"Expected a #RRGGBB color, got '{value}'.")
        try:
            return cls(float(int(raw[0:2], 16)), float(int(raw[2:4], 16)), float(int(raw[4:6], 16)))
        except ValueError:
            raise ValueError(f"Expected a #RRGGBB color, got '{value}'.") from None

    @property
    def hex(self) -> str:
        return "#" + "".join(f"{max(0, min(255, int(round(c)))):02X}" for c in self)

    def lerp(self, other: "Color", weight: float) -> "Color":
        keep = 1.0 - weight
        return Color(
            self.r * keep + other.r * weight,
            self.g * keep + other.g * weight,
            self.b * keep + other.b * weight,
        )


@dataclass(frozen=True)
class GenreDefinition:
    id: str
    name: str
    description: str
    themes: Tuple[str, ...]
    primary_color: Color
    secondary_color: Color
    accent_color: Color
    entity_prefix: str
    item_prefix: str
    location_prefix: str

    def color_palette(self) -> Tuple[Color, Color, Color]:
        return (self.primary_color, self.secondary_color, self.accent_color)

    def has_theme(self, theme: str) -> bool:
        return theme in self.themes

    def validate(self) -> None:
        if not self.id:
            raise ValueError("Genre id cannot be empty.")
        if not self.name:
            raise ValueError(f"Genre '{self.id}' has an empty name.")
        if not self.description:
            raise ValueError(f"Genre '{self.id}' has an empty description.")
        if not self.themes:
            raise ValueError(f"Genre '{self.id}' must have at least one theme.")
        for color in self.color_palette():
            if any(not 0.0 <= component <= 255.0 for component in color):
                raise ValueError(f"Genre '{self.id}' has a color component outside 0-255.")


class GenreRegistry:
    """Read-only catalogue of genre definitions, ordered by registration."""

    def __init__(self, definitions: Iterable[GenreDefinition]) -> None:
        genres: Dict[str, GenreDefinition] = {}
        for definition in definitions:
            definition.validate()
            if definition.id in genres:
                raise ValueError(f"Genre '{definition.id}' registered twice.")
            genres[definition.id] = definition
        self._genres = MappingProxyType(genres)

    def extend(self, definitions: Iterable[GenreDefinition]) -> "GenreRegistry":
        """New registry holding these genres followed by ``definitions``."""
        return GenreRegistry(tuple(self._genres.values()) + tuple(definitions))

    def get(self, genre_id: str) -> Optional[GenreDefinition]:
        return self._genres.get(genre_id)

    def require(self, genre_id: str) -> GenreDefinition:
        genre = self._genres.get(genre_id)
        if genre is None:
            raise GenreLookupError(genre_id)
        return genre

    def all(self) -> Tuple[GenreDefinition, ...]:
        return tuple(self._genres.values())

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._genres)

    def __contains__(self, genre_id: object) -> bool:
        return genre_id in self._genres

    def __iter__(self) -> Iterator[GenreDefinition]:
        return iter(self._genres.values())

    def __len__(self) -> int:
        return len(self._genres)


def _genre(
    genre_id: str,
    name: str,
    description: str,
    themes: Sequence[str],
    colors: Tuple[str, str, str],
    prefixes: Tuple[str, str, str],
) -> GenreDefinition:
    return GenreDefinition(
        id=genre_id,
        name=name,
        description=description,
        themes=tuple(themes),
        primary_color=Color.from_hex(colors[0]),
        secondary_color=Color.from_hex(colors[1]),
        accent_color=Color.from_hex(colors[2]),
        entity_prefix=prefixes[0],
        item_prefix=prefixes[1],
        location_prefix=prefixes[2],
    )


BASE_GENRES: Tuple[GenreDefinition, ...] = (
    _genre(
        "fantasy",
        "Fantasy",
        "Traditional medieval fantasy with magic, dragons, and ancient mysteries",
        ("medieval", "magic", "dragons", "knights", "wizards", "dungeons"),
        ("#8B4513", "#DAA520", "#4169E1"),
        ("Ancient", "Enchanted", "The"),
    ),
    _genre(
        "scifi",
        "Sci-Fi",
        "Science fiction with advanced technology, space exploration, and alien encounters",
        ("technology", "space", "aliens", "robots", "lasers", "future"),
        ("#00CED1", "#7B68EE", "#00FF00"),
        ("Prototype", "Advanced", "Station"),
    ),
    _genre(
        "horror",
        "Horror",
        "Dark, atmospheric horror with supernatural threats and psychological terror",
        ("dark", "supernatural", "undead", "cursed", "twisted", "nightmare"),
        ("#8B0000", "#2F4F4F", "#9370DB"),
        ("Cursed", "Twisted", "The Haunted"),
    ),
    _genre(
        "cyberpunk",
        "Cyberpunk",
        "High-tech dystopian future with cybernetic enhancements and corporate dominance",
        ("cybernetic", "neon", "corporate", "hacker", "augmented", "dystopian"),
        ("#FF1493", "#00FFFF", "#FFD700"),
        ("Augmented", "Cyber", "Neo"),
    ),
    _genre(
        "postapoc",
        "Post-Apocalyptic",
        "Wasteland survival in a world devastated by catastrophe",
        ("wasteland", "survival", "scavenged", "mutated", "ruined", "barren"),
        ("#CD853F", "#696969", "#FF6347"),
        ("Mutated", "Salvaged", "Ruins of"),
    ),
)


@lru_cache(maxsize=None)
def default_registry() -> GenreRegistry:
    return GenreRegistry(BASE_GENRES)
