from __future__ import annotations

import math
from enum import Enum
from typing import Any, Generic, List, Mapping, Optional, Protocol, Sequence, Type, TypeVar, runtime_checkable

from .blending import BlendedGenre
from .config import DEFAULT_GENRE, GenerationParams, TuningConfig
from .errors import ValidationError
from .genres import GenreDefinition, GenreRegistry, default_registry
from .logging_config import get_logger
from .rarity import RarityEngine, RarityTier
from .seeds import SeededRandom, derive_seed

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
E = TypeVar("E", bound=Enum)


@runtime_checkable
class Generator(Protocol[T_co]):
    """What ContentGenerator needs from each domain generator."""

    def generate(self, seed: int, params: Optional[GenerationParams] = None) -> List[T_co]:
        ...

    def generate_one(self, seed: int, params: Optional[GenerationParams] = None) -> T_co:
        ...

    def validate(self, collection: Sequence[Any]) -> None:
        ...


class BaseGenerator(Generic[T]):
    """Shared plumbing for the domain generators.

    Object ``i`` of a batch is built from its own stream seeded with
    ``derive_seed(seed, i)``, so ``generate_one(obj.seed, params)`` rebuilds
    any object on its own. Subclasses implement ``_build`` and
    ``_validate_one``.
    """

    kind = "object"
    default_count = 10

    def __init__(
        self,
        registry: Optional[GenreRegistry] = None,
        tuning: Optional[TuningConfig] = None,
        engine: Optional[RarityEngine] = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry()
        self._engine = engine if engine is not None else RarityEngine(tuning)
        self._log = get_logger(type(self).__module__).bind(generator=self.kind)

    @property
    def registry(self) -> GenreRegistry:
        return self._registry

    @property
    def engine(self) -> RarityEngine:
        return self._engine

    def generate(self, seed: int, params: Optional[GenerationParams] = None) -> List[T]:
        params = params if params is not None else GenerationParams()
        genre = self._resolve_genre(params.genre_id)
        count = params.resolved_count(self.default_count)
        self._log.debug(
            "generation started",
            seed=seed,
            genre=genre.id,
            depth=params.depth,
            difficulty=params.difficulty,
            count=count,
        )
        results = [self._build(SeededRandom(derive_seed(seed, index)), genre, params) for index in range(count)]
        self._log.info("generation complete", seed=seed, genre=genre.id, count=len(results))
        return results

    def generate_one(self, seed: int, params: Optional[GenerationParams] = None) -> T:
        params = params if params is not None else GenerationParams()
        genre = self._resolve_genre(params.genre_id)
        return self._build(SeededRandom(seed), genre, params)

    def validate(self, collection: Sequence[T]) -> None:
        if not collection:
            raise ValidationError(f"{self.kind} collection is empty")
        for index, obj in enumerate(collection):
            self._validate_one(index, obj)

    def _build(self, rng: SeededRandom, genre: GenreDefinition, params: GenerationParams) -> T:
        raise NotImplementedError

    def _validate_one(self, index: int, obj: T) -> None:
        raise NotImplementedError

    def _resolve_genre(self, genre_id: str) -> GenreDefinition:
        return self._registry.require(genre_id)

    def _roll_rarity(self, rng: SeededRandom, params: GenerationParams) -> RarityTier:
        return self._engine.roll_rarity(rng, params.depth, params.difficulty)

    def _parse_filter(self, params: GenerationParams, enum_type: Type[E]) -> Optional[E]:
        raw = params.type_filter
        if raw is None:
            return None
        if isinstance(raw, enum_type):
            return raw
        value = str(raw).strip().lower()
        for member in enum_type:
            if member.value == value:
                return member
        self._log.warning("unknown type filter ignored", type_filter=raw, kind=self.kind)
        return None


def template_key(genre: GenreDefinition, catalogue: Mapping[str, Any]) -> str:
    """Catalogue key for ``genre``, falling back to the default genre.

    Blended genres use the catalogue of the source that dominates the blend.
    """
    if genre.id in catalogue:
        return genre.id
    if isinstance(genre, BlendedGenre) and genre.is_blended():
        dominant = genre.secondary_id if genre.blend_weight > 0.5 else genre.primary_id
        other = genre.primary_id if dominant == genre.secondary_id else genre.secondary_id
        for candidate in (dominant, other):
            if candidate in catalogue:
                return candidate
    return DEFAULT_GENRE


def check_name(index: int, name: str) -> None:
    if not name or not name.strip():
        raise ValidationError("name is empty", index=index, name=name)


def check_rarity(index: int, name: str, rarity: Any) -> None:
    if not isinstance(rarity, RarityTier):
        raise ValidationError(f"rarity {rarity!r} is not a rarity tier", index=index, name=name)


def check_non_negative(index: int, name: str, fields: Mapping[str, float]) -> None:
    for field_name, value in fields.items():
        if isinstance(value, float) and math.isnan(value):
            raise ValidationError(f"{field_name} is NaN", index=index, name=name)
        if value < 0:
            raise ValidationError(f"{field_name} is negative ({value})", index=index, name=name)
