from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

from .config import GenerationParams, TuningConfig
from .entities import (
    Entity,
    EntitySize,
    EntityStats,
    EntityTemplate,
    EntityType,
    entity_templates,
    roll_entity_stats,
    validate_entity,
)
from .errors import ValidationError
from .generator import BaseGenerator, template_key
from .genres import GenreDefinition, GenreRegistry
from .items import Item, ItemGenerator, ItemType, validate_item
from .naming import personal_name
from .rarity import RarityEngine, RarityTier
from .seeds import INVENTORY_SALT, SPAWN_SALT, SeededRandom, derive_seed


class MerchantType(Enum):
    FIXED = "fixed"
    NOMADIC = "nomadic"


BASE_PRICE_MULTIPLIER: Dict[MerchantType, float] = {
    MerchantType.FIXED: 1.5,
    MerchantType.NOMADIC: 1.8,
}
MERCHANT_TYPE_WEIGHTS = (0.7, 0.3)
BASE_BUY_BACK = 0.5
# Share of the buy-back lost at full depth progress.
BUY_BACK_DEPTH_DISCOUNT = 0.2
INVENTORY_SIZE_RANGE = (15, 24)
# Stock mix: consumables, then weapons/armor, remainder is quality stock.
CONSUMABLE_SHARE = 0.6
EQUIPMENT_SHARE = 0.3
QUALITY_DIFFICULTY = 0.8
SPAWN_JITTER = 100.0
SAFE_ZONE_COUNT = 5

SHOP_NAME_TEMPLATES: Dict[str, Tuple[str, ...]] = {
    "fantasy": ("{name} the Trader", "{name}'s Goods", "{name}'s Supplies", "{name} the Merchant", "{name}'s Wares"),
    "scifi": ("{name}'s Tech Exchange", "{name}'s Quantum Supplies", "Nexus Trader {name}", "{name}'s Orbital Hub"),
    "horror": ("{name} the Bone Trader", "{name}'s Cursed Goods", "{name}'s Shadow Market", "Widow {name}'s Wares"),
    "cyberpunk": ("{name}'s Chrome Exchange", "{name}'s Neural Market", "{name} the Fence", "Data Broker {name}"),
    "postapoc": ("{name}'s Salvage", "{name} the Junk Dealer", "{name}'s Scrap Exchange", "{name}'s Survivor Supplies"),
}


class SpawnPoint(NamedTuple):
    x: float
    y: float


@dataclass
class Merchant(Entity):
    merchant_type: MerchantType = MerchantType.FIXED
    price_multiplier: float = 1.5
    buy_back_percentage: float = BASE_BUY_BACK
    inventory: List[Item] = field(default_factory=list)
    spawn: SpawnPoint = SpawnPoint(0.0, 0.0)

    def sell_price(self, item: Item) -> int:
        return int(item.condition_value() * self.price_multiplier)

    def buy_price(self, item: Item) -> int:
        return int(item.condition_value() * self.buy_back_percentage)


def merchant_spawn_points(
    world_seed: int,
    width: int,
    height: int,
    merchant_type: MerchantType,
    count: int,
) -> List[SpawnPoint]:
    """Deterministic spawn locations inside a ``width`` x ``height`` world.

    Fixed merchants cycle through five safe zones (center and the four
    quarter points) with up to ``SPAWN_JITTER / 2`` of jitter; nomadic
    merchants may appear anywhere.
    """
    _check_bounds(width, height)
    rng = SeededRandom(world_seed)
    if merchant_type is MerchantType.FIXED:
        return [_zone_point(rng, index % SAFE_ZONE_COUNT, width, height) for index in range(max(count, 0))]
    return [_anywhere(rng, width, height) for _ in range(max(count, 0))]


def merchant_spawn(seed: int, width: int, height: int, merchant_type: MerchantType) -> SpawnPoint:
    """Spawn point of a single merchant, drawn from its own ``seed``.

    Fixed merchants pick one of the safe zones at random so that merchants
    of one batch spread over the zones without knowing their batch index.
    """
    _check_bounds(width, height)
    rng = SeededRandom(seed)
    if merchant_type is MerchantType.FIXED:
        return _zone_point(rng, rng.randint(0, SAFE_ZONE_COUNT - 1), width, height)
    return _anywhere(rng, width, height)


def safe_zones(width: int, height: int) -> List[Tuple[float, float]]:
    """Center first, then the four quarter points."""
    return [
        (width * 0.5, height * 0.5),
        (width * 0.25, height * 0.25),
        (width * 0.75, height * 0.25),
        (width * 0.25, height * 0.75),
        (width * 0.75, height * 0.75),
    ]


def _check_bounds(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"World bounds must be positive, got {width}x{height}.")


def _zone_point(rng: SeededRandom, zone: int, width: int, height: int) -> SpawnPoint:
    zone_x, zone_y = safe_zones(width, height)[zone]
    x = zone_x + (rng.unit() - 0.5) * SPAWN_JITTER
    y = zone_y + (rng.unit() - 0.5) * SPAWN_JITTER
    return SpawnPoint(min(max(x, 0.0), float(width)), min(max(y, 0.0), float(height)))


def _anywhere(rng: SeededRandom, width: int, height: int) -> SpawnPoint:
    return SpawnPoint(float(rng.randint(0, width - 1)), float(rng.randint(0, height - 1)))


class MerchantGenerator(BaseGenerator[Merchant]):
    kind = "merchant"
    default_count = 1

    def __init__(
        self,
        registry: Optional[GenreRegistry] = None,
        tuning: Optional[TuningConfig] = None,
        engine: Optional[RarityEngine] = None,
        items: Optional[ItemGenerator] = None,
    ) -> None:
        super().__init__(registry, tuning, engine)
        self._items = items if items is not None else ItemGenerator(self._registry, engine=self._engine)

    def _build(self, rng: SeededRandom, genre: GenreDefinition, params: GenerationParams) -> Merchant:
        merchant_type = self._parse_filter(params, MerchantType)
        if merchant_type is None:
            merchant_type = rng.weighted_choice((MerchantType.FIXED, MerchantType.NOMADIC), MERCHANT_TYPE_WEIGHTS)

        key = template_key(genre, SHOP_NAME_TEMPLATES)
        owner = personal_name(rng, key)
        name = rng.choice(SHOP_NAME_TEMPLATES[key]).format(name=owner)

        npc = next(t for t in entity_templates(genre) if t.entity_type is EntityType.NPC)
        stats = self._entity_stats(rng, npc, params)

        inventory_size = self._inventory_size(rng, params)
        inventory = self._stock(derive_seed(rng.seed, INVENTORY_SALT), genre, params, inventory_size)

        spawn = SpawnPoint(0.0, 0.0)
        width = params.extra.get("world_width")
        height = params.extra.get("world_height")
        if width is not None and height is not None:
            spawn = merchant_spawn(derive_seed(rng.seed, SPAWN_SALT), int(width), int(height), merchant_type)

        return Merchant(
            name=name,
            entity_type=EntityType.MERCHANT,
            size=EntitySize.MEDIUM,
            rarity=RarityTier.COMMON,
            stats=stats,
            seed=rng.seed,
            genre_id=genre.id,
            hostile=EntityType.MERCHANT.hostile,
            tags=("merchant", "friendly", "trader", merchant_type.value, genre.id),
            description=f"A {merchant_type.value} merchant dealing in {genre.name.lower()} goods.",
            merchant_type=merchant_type,
            price_multiplier=self._price_multiplier(merchant_type, params),
            buy_back_percentage=self._buy_back(params),
            inventory=inventory,
            spawn=spawn,
        )

    def _entity_stats(self, rng: SeededRandom, template: EntityTemplate, params: GenerationParams) -> EntityStats:
        # Merchants are level 1 non-combatants.
        stats = roll_entity_stats(self._engine, rng, template, RarityTier.COMMON, params, level=1)
        stats.damage = 0
        return stats

    def _inventory_size(self, rng: SeededRandom, params: GenerationParams) -> int:
        requested = params.extra.get("inventory_size")
        if requested is None:
            return rng.randint(*INVENTORY_SIZE_RANGE)
        return max(int(requested), 0)

    def _price_multiplier(self, merchant_type: MerchantType, params: GenerationParams) -> float:
        depth, difficulty = self._engine.clamp(params.depth, params.difficulty)
        return BASE_PRICE_MULTIPLIER[merchant_type] * (1.0 + 0.25 * self._engine.progress(depth)) * (0.9 + 0.2 * difficulty)

    def _buy_back(self, params: GenerationParams) -> float:
        depth, difficulty = self._engine.clamp(params.depth, params.difficulty)
        depth_factor = 1.0 - BUY_BACK_DEPTH_DISCOUNT * self._engine.progress(depth)
        return min(max(BASE_BUY_BACK * (1.2 - 0.4 * difficulty) * depth_factor, 0.0), 1.0)

    def _stock(self, seed: int, genre: GenreDefinition, params: GenerationParams, size: int) -> List[Item]:
        _, difficulty = self._engine.clamp(params.depth, params.difficulty)
        quality_params = params.with_options(difficulty=max(difficulty, QUALITY_DIFFICULTY))
        inventory: List[Item] = []
        for slot in range(size):
            slot_rng = SeededRandom(derive_seed(seed, slot))
            roll = slot_rng.unit()
            if roll < CONSUMABLE_SHARE:
                item = self._items.build_item(slot_rng, genre, params, ItemType.CONSUMABLE)
            elif roll < CONSUMABLE_SHARE + EQUIPMENT_SHARE:
                kind = slot_rng.choice((ItemType.WEAPON, ItemType.ARMOR))
                item = self._items.build_item(slot_rng, genre, params, kind)
            else:
                item = self._items.build_item(slot_rng, genre, quality_params, min_rarity=RarityTier.UNCOMMON)
            inventory.append(item)
        return inventory

    def _validate_one(self, index: int, merchant: Merchant) -> None:
        validate_entity(index, merchant)
        if not isinstance(merchant.merchant_type, MerchantType):
            raise ValidationError(f"merchant type {merchant.merchant_type!r} is unknown", index=index, name=merchant.name)
        if not merchant.price_multiplier > 0:
            raise ValidationError(
                f"price multiplier must be positive ({merchant.price_multiplier})", index=index, name=merchant.name
            )
        if not 0.0 <= merchant.buy_back_percentage <= 1.0:
            raise ValidationError(
                f"buy-back percentage must be within [0, 1] ({merchant.buy_back_percentage})",
                index=index,
                name=merchant.name,
            )
        for slot, item in enumerate(merchant.inventory):
            try:
                validate_item(slot, item)
            except ValidationError as exc:
                raise ValidationError(f"inventory {exc}", index=index, name=merchant.name) from exc
