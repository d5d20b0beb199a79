from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .config import GenerationParams
from .errors import ValidationError
from .generator import BaseGenerator, check_name, check_non_negative, check_rarity, template_key
from .genres import GenreDefinition
from .naming import compose_name
from .rarity import RarityTier
from .seeds import SeededRandom


class ItemType(Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    CONSUMABLE = "consumable"
    ACCESSORY = "accessory"


class WeaponType(Enum):
    SWORD = "sword"
    AXE = "axe"
    BOW = "bow"
    STAFF = "staff"
    DAGGER = "dagger"
    SPEAR = "spear"


class ArmorType(Enum):
    HELMET = "helmet"
    CHEST = "chest"
    LEGS = "legs"
    BOOTS = "boots"
    GLOVES = "gloves"
    SHIELD = "shield"


class ConsumableType(Enum):
    POTION = "potion"
    SCROLL = "scroll"
    FOOD = "food"
    BOMB = "bomb"


class AccessoryType(Enum):
    RING = "ring"
    AMULET = "amulet"
    CHARM = "charm"


ITEM_TYPE_WEIGHTS: Tuple[Tuple[ItemType, float], ...] = (
    (ItemType.WEAPON, 0.40),
    (ItemType.ARMOR, 0.35),
    (ItemType.CONSUMABLE, 0.20),
    (ItemType.ACCESSORY, 0.05),
)

RARITY_NAME_PREFIXES: Dict[RarityTier, Tuple[str, ...]] = {
    RarityTier.EPIC: ("Masterwork", "Superior", "Exquisite", "Prime"),
    RarityTier.LEGENDARY: ("Legendary", "Mythic", "Ancient", "Divine"),
}

DURABILITY_PER_TIER = 20
ATTACK_SPEED_PER_TIER = 0.05


@dataclass
class ItemStats:
    damage: int = 0
    attack_speed: float = 0.0
    defense: int = 0
    value: int = 0
    weight: float = 0.0
    required_level: int = 1
    durability: int = 0
    durability_max: int = 0


@dataclass
class Item:
    name: str
    item_type: ItemType
    rarity: RarityTier
    stats: ItemStats
    seed: int
    genre_id: str
    weapon_type: Optional[WeaponType] = None
    armor_type: Optional[ArmorType] = None
    consumable_type: Optional[ConsumableType] = None
    accessory_type: Optional[AccessoryType] = None
    tags: Tuple[str, ...] = ()
    description: str = ""

    @property
    def sub_type(self) -> Optional[Enum]:
        return {
            ItemType.WEAPON: self.weapon_type,
            ItemType.ARMOR: self.armor_type,
            ItemType.CONSUMABLE: self.consumable_type,
            ItemType.ACCESSORY: self.accessory_type,
        }[self.item_type]

    def is_equippable(self) -> bool:
        return self.item_type in (ItemType.WEAPON, ItemType.ARMOR, ItemType.ACCESSORY)

    def is_consumable(self) -> bool:
        return self.item_type is ItemType.CONSUMABLE

    def condition_value(self) -> int:
        """Value scaled by remaining durability."""
        if self.stats.durability_max <= 0:
            return self.stats.value
        condition = self.stats.durability / self.stats.durability_max
        return int(self.stats.value * condition)


@dataclass(frozen=True)
class ItemTemplate:
    item_type: ItemType
    sub_type: Enum
    prefixes: Tuple[str, ...]
    suffixes: Tuple[str, ...]
    tags: Tuple[str, ...] = ()
    damage: Tuple[float, float] = (0, 0)
    attack_speed: Tuple[float, float] = (0.0, 0.0)
    defense: Tuple[float, float] = (0, 0)
    value: Tuple[float, float] = (1, 1)
    weight: Tuple[float, float] = (0.1, 0.1)
    durability: Tuple[int, int] = (0, 0)


def _weapon(sub_type, prefixes, suffixes, tags, damage, speed, value, weight, durability) -> ItemTemplate:
    return ItemTemplate(
        ItemType.WEAPON, sub_type, prefixes, suffixes, tags,
        damage=damage, attack_speed=speed, value=value, weight=weight, durability=durability,
    )


def _armor(sub_type, prefixes, suffixes, tags, defense, value, weight, durability) -> ItemTemplate:
    return ItemTemplate(
        ItemType.ARMOR, sub_type, prefixes, suffixes, tags,
        defense=defense, value=value, weight=weight, durability=durability,
    )


def _consumable(sub_type, prefixes, suffixes, tags, value, weight) -> ItemTemplate:
    return ItemTemplate(ItemType.CONSUMABLE, sub_type, prefixes, suffixes, tags, value=value, weight=weight)


def _accessory(sub_type, prefixes, suffixes, tags, defense, value, weight, durability) -> ItemTemplate:
    return ItemTemplate(
        ItemType.ACCESSORY, sub_type, prefixes, suffixes, tags,
        defense=defense, value=value, weight=weight, durability=durability,
    )


ITEM_TEMPLATES: Dict[str, Dict[ItemType, Tuple[ItemTemplate, ...]]] = {
    "fantasy": {
        ItemType.WEAPON: (
            _weapon(WeaponType.SWORD, ("Iron", "Steel", "Silver", "Elven", "Dwarven"),
                    ("Sword", "Blade", "Saber", "Longsword", "Cutlass"), ("balanced", "versatile"),
                    (8, 15), (1.0, 1.2), (50, 200), (3.0, 5.0), (80, 120)),
            _weapon(WeaponType.AXE, ("Battle", "War", "Great", "Heavy", "Brutal"),
                    ("Axe", "Hammer", "Mace", "Cleaver"), ("heavy", "powerful", "slow"),
                    (12, 20), (0.7, 0.9), (60, 250), (6.0, 10.0), (100, 150)),
            _weapon(WeaponType.BOW, ("Hunter's", "Ranger's", "Composite", "Long", "Elven"),
                    ("Bow", "Longbow", "Shortbow", "Crossbow"), ("ranged", "precise"),
                    (6, 12), (1.2, 1.5), (40, 180), (2.0, 4.0), (60, 100)),
            _weapon(WeaponType.STAFF, ("Wizard's", "Arcane", "Mystic", "Elder", "Ancient"),
                    ("Staff", "Rod", "Wand", "Scepter"), ("magical", "casting"),
                    (5, 10), (0.8, 1.0), (80, 300), (1.5, 3.0), (50, 80)),
            _weapon(WeaponType.DAGGER, ("Sharp", "Quick", "Silent", "Poison", "Shadow"),
                    ("Dagger", "Knife", "Stiletto", "Dirk"), ("fast", "stealth", "light"),
                    (4, 8), (1.5, 2.0), (30, 150), (0.5, 1.5), (40, 70)),
            _weapon(WeaponType.SPEAR, ("Ash", "Barbed", "Knight's", "Long", "Iron"),
                    ("Spear", "Pike", "Halberd", "Lance"), ("reach", "piercing"),
                    (9, 16), (0.9, 1.1), (45, 190), (4.0, 7.0), (70, 110)),
        ),
        ItemType.ARMOR: (
            _armor(ArmorType.CHEST, ("Leather", "Chain", "Plate", "Scale", "Dragon"),
                   ("Armor", "Cuirass", "Breastplate", "Mail"), ("protection", "heavy"),
                   (10, 30), (100, 400), (8.0, 20.0), (120, 200)),
            _armor(ArmorType.HELMET, ("Iron", "Steel", "Knight's", "Great", "Horned"),
                   ("Helmet", "Helm", "Crown", "Cap"), ("protection", "head"),
                   (5, 15), (50, 200), (2.0, 5.0), (80, 120)),
            _armor(ArmorType.SHIELD, ("Wooden", "Iron", "Steel", "Tower", "Kite"),
                   ("Shield", "Buckler", "Guard"), ("block", "defense"),
                   (8, 20), (40, 180), (4.0, 12.0), (100, 150)),
            _armor(ArmorType.BOOTS, ("Leather", "Traveler's", "Iron", "Swift"),
                   ("Boots", "Greaves", "Sabatons"), ("protection", "feet"),
                   (3, 10), (30, 140), (1.5, 4.0), (60, 100)),
        ),
        ItemType.CONSUMABLE: (
            _consumable(ConsumableType.POTION, ("Minor", "Lesser", "Greater", "Superior", "Ultimate"),
                        ("Health Potion", "Mana Potion", "Stamina Potion"), ("healing", "consumable"),
                        (10, 100), (0.1, 0.3)),
            _consumable(ConsumableType.SCROLL, ("Scroll of", "Ancient", "Mystic"),
                        ("Fireball", "Lightning", "Ice", "Protection"), ("magical", "spell", "consumable"),
                        (20, 150), (0.1, 0.2)),
            _consumable(ConsumableType.FOOD, ("Hearty", "Travel", "Elven", "Spiced"),
                        ("Bread", "Stew", "Rations", "Waybread"), ("food", "consumable"),
                        (5, 40), (0.2, 0.8)),
        ),
        ItemType.ACCESSORY: (
            _accessory(AccessoryType.RING, ("Gold", "Silver", "Runed", "Jeweled"),
                       ("Ring", "Band", "Signet"), ("jewelry", "enchanted"),
                       (1, 4), (120, 450), (0.05, 0.1), (150, 250)),
            _accessory(AccessoryType.AMULET, ("Sacred", "Moonstone", "Warding", "Elder"),
                       ("Amulet", "Pendant", "Talisman"), ("jewelry", "warding"),
                       (2, 5), (150, 500), (0.1, 0.3), (150, 250)),
        ),
    },
    "scifi": {
        ItemType.WEAPON: (
            _weapon(WeaponType.SWORD, ("Plasma", "Energy", "Photon", "Quantum", "Nano"),
                    ("Blade", "Saber", "Cutter", "Sword"), ("energy", "melee"),
                    (10, 18), (1.2, 1.5), (150, 500), (1.0, 2.0), (200, 300)),
            _weapon(WeaponType.BOW, ("Laser", "Pulse", "Plasma", "Rail", "Ion"),
                    ("Rifle", "Pistol", "Cannon", "Blaster"), ("energy", "ranged"),
                    (8, 15), (1.5, 2.0), (200, 600), (2.0, 5.0), (150, 250)),
        ),
        ItemType.ARMOR: (
            _armor(ArmorType.CHEST, ("Combat", "Battle", "Tactical", "Power", "Nano"),
                   ("Suit", "Armor", "Exosuit", "Vest"), ("powered", "armored"),
                   (15, 35), (300, 800), (5.0, 15.0), (200, 350)),
            _armor(ArmorType.HELMET, ("Combat", "Battle", "Tactical", "HUD", "Neural"),
                   ("Helmet", "Visor", "Interface"), ("hud", "scanning"),
                   (8, 18), (150, 400), (1.0, 3.0), (150, 250)),
        ),
        ItemType.CONSUMABLE: (
            _consumable(ConsumableType.POTION, ("Med", "Nano", "Combat", "Trauma"),
                        ("Stim", "Injector", "Hypo"), ("healing", "consumable"),
                        (20, 120), (0.1, 0.2)),
            _consumable(ConsumableType.BOMB, ("Frag", "EMP", "Plasma", "Cryo"),
                        ("Grenade", "Charge", "Mine"), ("explosive", "consumable"),
                        (40, 180), (0.4, 1.0)),
        ),
        ItemType.ACCESSORY: (
            _accessory(AccessoryType.CHARM, ("Neural", "Quantum", "Shield", "Targeting"),
                       ("Implant", "Chip", "Module"), ("cybernetic", "augment"),
                       (1, 5), (250, 700), (0.05, 0.2), (250, 400)),
        ),
    },
}

_DESCRIPTIONS: Dict[ItemType, Tuple[str, ...]] = {
    ItemType.WEAPON: (
        "A finely crafted weapon.",
        "This weapon has seen many battles.",
        "The edge gleams with deadly intent.",
        "A reliable tool for any warrior.",
    ),
    ItemType.ARMOR: (
        "Sturdy protection for the weary traveler.",
        "This armor has saved many lives.",
        "Well-crafted and dependable.",
        "A solid piece of defensive equipment.",
    ),
    ItemType.CONSUMABLE: (
        "This should prove useful in a pinch.",
        "A valuable resource for any adventurer.",
        "Use wisely, supplies are limited.",
    ),
    ItemType.ACCESSORY: (
        "A small trinket humming with quiet power.",
        "Worn close, it sharpens the senses.",
    ),
}

_RARITY_DESCRIPTIONS: Dict[RarityTier, Tuple[str, ...]] = {
    RarityTier.EPIC: ("An exceptional piece of craftsmanship.", "The work of a true master."),
    RarityTier.LEGENDARY: ("Legends speak of this item's power.", "Few have wielded such a treasure."),
}


class ItemGenerator(BaseGenerator[Item]):
    kind = "item"
    default_count = 10

    def _build(self, rng: SeededRandom, genre: GenreDefinition, params: GenerationParams) -> Item:
        return self.build_item(rng, genre, params, self._parse_filter(params, ItemType))

    def build_item(
        self,
        rng: SeededRandom,
        genre: GenreDefinition,
        params: GenerationParams,
        item_type: Optional[ItemType] = None,
        min_rarity: RarityTier = RarityTier.COMMON,
    ) -> Item:
        # Draw order: kind, template, rarity, name, stats, description.
        if item_type is None:
            item_type = rng.weighted_choice(
                [kind for kind, _ in ITEM_TYPE_WEIGHTS], [weight for _, weight in ITEM_TYPE_WEIGHTS]
            )
        catalogue = ITEM_TEMPLATES[template_key(genre, ITEM_TEMPLATES)]
        templates = catalogue.get(item_type) or ITEM_TEMPLATES["fantasy"][item_type]
        template = rng.choice(templates)

        rarity = max(self._roll_rarity(rng, params), min_rarity)
        name = self._name(rng, template, rarity)
        stats = self._stats(rng, template, rarity, params)

        return Item(
            name=name,
            item_type=item_type,
            rarity=rarity,
            stats=stats,
            seed=rng.seed,
            genre_id=genre.id,
            weapon_type=template.sub_type if item_type is ItemType.WEAPON else None,
            armor_type=template.sub_type if item_type is ItemType.ARMOR else None,
            consumable_type=template.sub_type if item_type is ItemType.CONSUMABLE else None,
            accessory_type=template.sub_type if item_type is ItemType.ACCESSORY else None,
            tags=template.tags + (genre.id, rarity.label),
            description=self._description(rng, item_type, rarity),
        )

    def _name(self, rng: SeededRandom, template: ItemTemplate, rarity: RarityTier) -> str:
        prefix = rng.choice(template.prefixes)
        suffix = rng.choice(template.suffixes)
        rarity_prefix = ""
        if rarity in RARITY_NAME_PREFIXES:
            rarity_prefix = rng.choice(RARITY_NAME_PREFIXES[rarity])
        return compose_name(rarity_prefix, prefix, suffix)

    def _stats(self, rng: SeededRandom, template: ItemTemplate, rarity: RarityTier, params: GenerationParams) -> ItemStats:
        engine = self._engine
        budget = engine.budget(params.depth, params.difficulty, rarity)
        stats = ItemStats(required_level=engine.required_level(params.depth, rarity))
        if template.damage[1] > 0:
            stats.damage = max(engine.roll_int(rng, budget, *template.damage), 1)
            stats.attack_speed = rng.between(*template.attack_speed) + int(rarity) * ATTACK_SPEED_PER_TIER
        if template.defense[1] > 0:
            stats.defense = max(engine.roll_int(rng, budget, *template.defense), 1)
        stats.value = engine.roll_int(rng, budget, *template.value)
        stats.weight = rng.between(*template.weight)
        if template.durability[1] > 0:
            stats.durability_max = rng.randint(*template.durability) + int(rarity) * DURABILITY_PER_TIER
            stats.durability = stats.durability_max
        return stats

    def _description(self, rng: SeededRandom, item_type: ItemType, rarity: RarityTier) -> str:
        options: List[str] = list(_DESCRIPTIONS[item_type])
        options.extend(_RARITY_DESCRIPTIONS.get(rarity, ()))
        return rng.choice(options)

    def _validate_one(self, index: int, item: Item) -> None:
        validate_item(index, item)


def validate_item(index: int, item: Item) -> None:
    check_name(index, item.name)
    check_rarity(index, item.name, item.rarity)
    stats = item.stats
    check_non_negative(
        index,
        item.name,
        {
            "damage": stats.damage,
            "attack_speed": stats.attack_speed,
            "defense": stats.defense,
            "value": stats.value,
            "weight": stats.weight,
            "required_level": stats.required_level,
            "durability": stats.durability,
            "durability_max": stats.durability_max,
        },
    )
    if stats.durability > stats.durability_max:
        raise ValidationError("durability exceeds durability_max", index=index, name=item.name)
    if item.item_type is ItemType.WEAPON:
        if not isinstance(item.weapon_type, WeaponType):
            raise ValidationError("weapon has no weapon type", index=index, name=item.name)
        if stats.damage <= 0:
            raise ValidationError(f"weapon damage must be positive ({stats.damage})", index=index, name=item.name)
    if item.item_type is ItemType.ARMOR:
        if not isinstance(item.armor_type, ArmorType):
            raise ValidationError("armor has no armor type", index=index, name=item.name)
        if stats.defense <= 0:
            raise ValidationError(f"armor defense must be positive ({stats.defense})", index=index, name=item.name)
