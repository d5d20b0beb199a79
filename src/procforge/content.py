from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import GenerationParams, TuningConfig
from .entities import Entity, EntityGenerator
from .generator import Generator
from .genres import GenreRegistry, default_registry
from .items import Item, ItemGenerator
from .logging_config import get_logger
from .merchants import Merchant, MerchantGenerator
from .quests import Quest, QuestGenerator
from .rarity import RarityEngine
from .seeds import DOMAIN_STRIDE, derive_seed
from .spells import Spell, SpellGenerator

logger = get_logger(__name__)

# Domain order fixes each domain's batch seed; append new domains at the end.
DOMAINS: Tuple[str, ...] = ("items", "entities", "merchants", "quests", "spells")


@dataclass
class ContentBundle:
    seed: int
    genre_id: str
    items: List[Item] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    merchants: List[Merchant] = field(default_factory=list)
    quests: List[Quest] = field(default_factory=list)
    spells: List[Spell] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {domain: len(getattr(self, domain)) for domain in DOMAINS}


def domain_seed(seed: int, domain: str) -> int:
    return derive_seed(seed, DOMAINS.index(domain), DOMAIN_STRIDE)


class ContentGenerator:
    """Every domain generator wired to one registry and one rarity engine."""

    def __init__(self, registry: Optional[GenreRegistry] = None, tuning: Optional[TuningConfig] = None) -> None:
        self._registry = registry if registry is not None else default_registry()
        self._engine = RarityEngine(tuning)
        self.items = ItemGenerator(self._registry, engine=self._engine)
        self.entities = EntityGenerator(self._registry, engine=self._engine)
        self.merchants = MerchantGenerator(self._registry, engine=self._engine, items=self.items)
        self.quests = QuestGenerator(self._registry, engine=self._engine, items=self.items)
        self.spells = SpellGenerator(self._registry, engine=self._engine)

    @property
    def engine(self) -> RarityEngine:
        return self._engine

    @property
    def registry(self) -> GenreRegistry:
        return self._registry

    def generate(
        self,
        seed: int,
        params: Optional[GenerationParams] = None,
        counts: Optional[Mapping[str, int]] = None,
    ) -> ContentBundle:
        """Generate every domain for ``seed``.

        ``counts`` overrides the per-domain defaults; ``params.count`` and
        ``params.type_filter`` are ignored since they are domain specific.
        """
        params = params if params is not None else GenerationParams()
        counts = counts or {}
        unknown = set(counts) - set(DOMAINS)
        if unknown:
            raise ValueError(f"Unknown content domains: {', '.join(sorted(unknown))}.")
        self._registry.require(params.genre_id)

        bundle = ContentBundle(seed=seed, genre_id=params.genre_id)
        for domain in DOMAINS:
            generator: Generator[Any] = getattr(self, domain)
            domain_params = params.with_options(count=counts.get(domain), type_filter=None)
            setattr(bundle, domain, generator.generate(domain_seed(seed, domain), domain_params))
        logger.info("content bundle generated", seed=seed, genre=params.genre_id, **bundle.counts())
        return bundle

    def validate(self, bundle: ContentBundle) -> None:
        for domain in DOMAINS:
            collection = getattr(bundle, domain)
            if collection:
                validator: Generator[Any] = getattr(self, domain)
                validator.validate(collection)
