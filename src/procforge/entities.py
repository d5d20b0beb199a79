from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from .config import GenerationParams
from .errors import ValidationError
from .generator import BaseGenerator, check_name, check_non_negative, check_rarity, template_key
from .genres import GenreDefinition
from .naming import compose_name, personal_name
from .rarity import RarityEngine, RarityTier
from .seeds import SeededRandom

BOSS_PROMOTION_DEPTH = 10
BOSS_PROMOTION_CHANCE = 0.1
NAME_SUFFIX_CHANCE = 0.7
LEVEL_VARIANCE = 0.2
SPEED_PER_TIER = 0.05


class EntityType(Enum):
    MONSTER = "monster"
    BOSS = "boss"
    MINION = "minion"
    NPC = "npc"
    MERCHANT = "merchant"

    @property
    def hostile(self) -> bool:
        return self in (EntityType.MONSTER, EntityType.BOSS, EntityType.MINION)


class EntitySize(Enum):
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"


THREAT_MULTIPLIERS: Dict[EntityType, float] = {
    EntityType.BOSS: 3.0,
    EntityType.MONSTER: 2.0,
    EntityType.MINION: 0.5,
    EntityType.NPC: 1.0,
    EntityType.MERCHANT: 1.0,
}


@dataclass
class EntityStats:
    level: int = 1
    health: int = 0
    max_health: int = 0
    damage: int = 0
    defense: int = 0
    speed: float = 0.0


@dataclass
class Entity:
    name: str
    entity_type: EntityType
    size: EntitySize
    rarity: RarityTier
    stats: EntityStats
    seed: int
    genre_id: str
    hostile: bool = False
    tags: Tuple[str, ...] = ()
    description: str = ""

    def is_boss(self) -> bool:
        return self.entity_type is EntityType.BOSS

    def threat_level(self) -> int:
        """Combat danger on a 0-100 scale."""
        stats = self.stats
        base = stats.health / 10 + stats.damage * 5 + stats.defense * 2
        threat = int(base * THREAT_MULTIPLIERS[self.entity_type] * stats.level * 0.1)
        return min(max(threat, 0), 100)


@dataclass(frozen=True)
class EntityTemplate:
    entity_type: EntityType
    size: EntitySize
    prefixes: Tuple[str, ...]
    suffixes: Tuple[str, ...]
    tags: Tuple[str, ...]
    health: Tuple[float, float]
    damage: Tuple[float, float]
    defense: Tuple[float, float]
    speed: Tuple[float, float]


def _t(entity_type, size, prefixes, suffixes, tags, health, damage, defense, speed) -> EntityTemplate:
    return EntityTemplate(entity_type, size, prefixes, suffixes, tags, health, damage, defense, speed)


MINION, MONSTER, BOSS, NPC = EntityType.MINION, EntityType.MONSTER, EntityType.BOSS, EntityType.NPC
SMALL, MEDIUM, LARGE, HUGE = EntitySize.SMALL, EntitySize.MEDIUM, EntitySize.LARGE, EntitySize.HUGE

ENTITY_TEMPLATES: Dict[str, Tuple[EntityTemplate, ...]] = {
    "fantasy": (
        _t(MINION, SMALL, ("Goblin", "Kobold", "Imp", "Sprite"), ("Scout", "Warrior", "Shaman", "Raider"),
           ("weak", "fast", "group"), (10, 30), (2, 8), (0, 3), (1.2, 1.5)),
        _t(MONSTER, MEDIUM, ("Orc", "Skeleton", "Zombie", "Ghoul"), ("Warrior", "Brute", "Hunter", "Berserker"),
           ("medium", "balanced"), (40, 80), (8, 15), (3, 8), (0.8, 1.0)),
        _t(MONSTER, LARGE, ("Ogre", "Troll", "Minotaur", "Golem"), ("Crusher", "Smasher", "Guardian", "Destroyer"),
           ("tough", "slow", "powerful"), (100, 200), (15, 30), (8, 15), (0.5, 0.7)),
        _t(BOSS, HUGE, ("Ancient", "Elder", "Lord", "King"), ("Dragon", "Demon", "Lich", "Wyrm"),
           ("boss", "elite", "legendary"), (300, 500), (30, 60), (15, 30), (0.6, 0.9)),
        _t(NPC, MEDIUM, ("Smith", "Guard", "Priest", "Wizard"), ("Elder", "Scholar", "Keeper", "Healer"),
           ("friendly", "quest"), (50, 100), (5, 10), (5, 10), (1.0, 1.0)),
    ),
    "scifi": (
        _t(MINION, SMALL, ("Scout", "Drone", "Bot", "Probe"), ("MK-I", "Alpha", "Beta", "Unit"),
           ("robotic", "fast", "scout"), (15, 35), (3, 10), (1, 4), (1.3, 1.6)),
        _t(MONSTER, MEDIUM, ("Combat", "Security", "War", "Battle"), ("Android", "Cyborg", "Mech", "Trooper"),
           ("armored", "tactical"), (50, 90), (10, 18), (5, 10), (0.9, 1.1)),
        _t(BOSS, HUGE, ("Titan", "Colossus", "Omega", "Prime"), ("Mech", "Destroyer", "Sentinel", "Core"),
           ("boss", "mechanical", "heavy"), (350, 550), (35, 65), (20, 35), (0.5, 0.8)),
        _t(NPC, MEDIUM, ("Engineer", "Pilot", "Medic", "Officer"), ("Chief", "Specialist", "Liaison"),
           ("friendly", "crew"), (50, 90), (4, 9), (5, 10), (1.0, 1.0)),
    ),
    "horror": (
        _t(MINION, SMALL, ("Creeping", "Twisted", "Cursed", "Vile"), ("Wraith", "Shadow", "Corpse", "Thing"),
           ("undead", "horrifying", "fast"), (20, 40), (5, 12), (1, 5), (1.2, 1.5)),
        _t(MONSTER, MEDIUM, ("Rotten", "Shambling", "Ghastly", "Bloated"),
           ("Zombie", "Ghoul", "Revenant", "Abomination"), ("undead", "resilient"), (60, 100), (8, 16), (3, 8), (0.7, 0.9)),
        _t(BOSS, LARGE, ("Ancient", "Nightmare", "Eldritch", "Dread"), ("Horror", "Terror", "Lord", "Entity"),
           ("boss", "horrifying", "powerful"), (400, 600), (40, 70), (15, 30), (0.6, 0.9)),
        _t(NPC, MEDIUM, ("Gravedigger", "Vicar", "Widow", "Hermit"), ("Survivor", "Witness", "Keeper"),
           ("frightened", "quest"), (40, 80), (3, 8), (3, 8), (1.0, 1.0)),
    ),
    "cyberpunk": (
        _t(MINION, SMALL, ("Street", "Corpo", "Gang", "Hack"), ("Runner", "Goon", "Agent", "Merc"),
           ("augmented", "fast", "human"), (25, 45), (6, 14), (2, 6), (1.1, 1.4)),
        _t(MONSTER, MEDIUM, ("Cyber", "Enhanced", "Corp", "Military"), ("Enforcer", "Assassin", "Operative", "Soldier"),
           ("augmented", "tactical", "human"), (55, 95), (12, 20), (6, 12), (1.0, 1.2)),
        _t(BOSS, LARGE, ("Corporate", "Syndicate", "Elite", "Mega"), ("Boss", "Executive", "Commander", "Director"),
           ("boss", "augmented", "powerful"), (380, 580), (38, 68), (18, 32), (0.7, 1.0)),
        _t(NPC, MEDIUM, ("Fixer", "Netrunner", "Ripperdoc", "Bartender"), ("Contact", "Broker", "Insider"),
           ("friendly", "contact"), (45, 85), (4, 9), (4, 9), (1.0, 1.0)),
    ),
    "postapoc": (
        _t(MINION, SMALL, ("Feral", "Rabid", "Mutated", "Irradiated"), ("Scavenger", "Rat", "Dog", "Crawler"),
           ("mutant", "fast", "wild"), (18, 38), (4, 11), (1, 4), (1.3, 1.6)),
        _t(MONSTER, MEDIUM, ("Wasteland", "Raider", "Mutant", "Savage"), ("Marauder", "Brute", "Berserker", "Hunter"),
           ("mutant", "aggressive", "human"), (65, 105), (11, 19), (4, 9), (0.8, 1.0)),
        _t(BOSS, HUGE, ("Radiation", "Apex", "Warlord", "Mutant"), ("Beast", "King", "Overlord", "Titan"),
           ("boss", "mutant", "massive"), (420, 620), (42, 72), (16, 28), (0.5, 0.7)),
        _t(NPC, MEDIUM, ("Settler", "Mechanic", "Doc", "Drifter"), ("Elder", "Lookout", "Tinker"),
           ("friendly", "survivor"), (50, 95), (5, 10), (4, 9), (1.0, 1.0)),
    ),
}

_DESCRIPTIONS: Dict[EntityType, Tuple[str, ...]] = {
    EntityType.MINION: ("It rarely hunts alone.", "Weak on its own, dangerous in numbers."),
    EntityType.MONSTER: ("It prowls these halls for prey.", "A seasoned killer of the deep."),
    EntityType.BOSS: ("Its presence darkens the whole level.", "Few who face it live to tell the tale."),
    EntityType.NPC: ("A familiar face for weary travelers.", "Always willing to share rumors."),
    EntityType.MERCHANT: ("Coin speaks louder than words here.", "Everything has a price."),
}


def entity_templates(genre: GenreDefinition) -> Tuple[EntityTemplate, ...]:
    return ENTITY_TEMPLATES[template_key(genre, ENTITY_TEMPLATES)]


def roll_level(rng: SeededRandom, depth: int, difficulty: float) -> int:
    base = max(depth, 1)
    variance = max(int(base * LEVEL_VARIANCE), 1)
    level = base + rng.randint(-variance, variance)
    return max(int(level * (0.5 + difficulty)), 1)


class EntityGenerator(BaseGenerator[Entity]):
    kind = "entity"
    default_count = 10

    def _build(self, rng: SeededRandom, genre: GenreDefinition, params: GenerationParams) -> Entity:
        templates = entity_templates(genre)
        wanted = self._parse_filter(params, EntityType)
        candidates: List[EntityTemplate] = list(templates)
        if wanted is not None:
            candidates = [template for template in templates if template.entity_type is wanted]
            if not candidates:
                self._log.warning("no templates for type filter", type_filter=wanted.value, genre=genre.id)
                candidates = list(templates)
                wanted = None

        template = rng.choice(candidates)
        if wanted is None and params.depth > BOSS_PROMOTION_DEPTH and rng.chance(BOSS_PROMOTION_CHANCE):
            bosses = [candidate for candidate in templates if candidate.entity_type is EntityType.BOSS]
            if bosses:
                template = bosses[0]

        rarity = self._roll_rarity(rng, params)
        if template.entity_type is EntityType.BOSS:
            rarity = max(rarity, RarityTier.RARE)
        elif template.entity_type is EntityType.MINION:
            rarity = min(rarity, RarityTier.UNCOMMON)

        name = self._name(rng, template, genre)
        depth, difficulty = self._engine.clamp(params.depth, params.difficulty)
        level = roll_level(rng, depth, difficulty)
        stats = roll_entity_stats(self._engine, rng, template, rarity, params, level)
        return Entity(
            name=name,
            entity_type=template.entity_type,
            size=template.size,
            rarity=rarity,
            stats=stats,
            seed=rng.seed,
            genre_id=genre.id,
            hostile=template.entity_type.hostile,
            tags=template.tags + (genre.id,),
            description=rng.choice(_DESCRIPTIONS[template.entity_type]),
        )

    def _name(self, rng: SeededRandom, template: EntityTemplate, genre: GenreDefinition) -> str:
        if template.entity_type is EntityType.NPC:
            return compose_name(personal_name(rng, template_key(genre, ENTITY_TEMPLATES)), "the", rng.choice(template.prefixes))
        prefix = rng.choice(template.prefixes)
        if template.suffixes and rng.chance(NAME_SUFFIX_CHANCE):
            return compose_name(prefix, rng.choice(template.suffixes))
        return prefix

    def _validate_one(self, index: int, entity: Entity) -> None:
        validate_entity(index, entity)


def roll_entity_stats(
    engine: RarityEngine,
    rng: SeededRandom,
    template: EntityTemplate,
    rarity: RarityTier,
    params: GenerationParams,
    level: int,
) -> EntityStats:
    budget = engine.budget(params.depth, params.difficulty, rarity)
    max_health = max(engine.roll_int(rng, budget, *template.health), 1)
    return EntityStats(
        level=level,
        health=max_health,
        max_health=max_health,
        damage=engine.roll_int(rng, budget, *template.damage),
        defense=engine.roll_int(rng, budget, *template.defense),
        speed=rng.between(*template.speed) * (1.0 + int(rarity) * SPEED_PER_TIER),
    )


def validate_entity(index: int, entity: Entity) -> None:
    check_name(index, entity.name)
    check_rarity(index, entity.name, entity.rarity)
    stats = entity.stats
    check_non_negative(
        index,
        entity.name,
        {
            "level": stats.level,
            "health": stats.health,
            "max_health": stats.max_health,
            "damage": stats.damage,
            "defense": stats.defense,
            "speed": stats.speed,
        },
    )
    if not isinstance(entity.entity_type, EntityType):
        raise ValidationError(f"entity type {entity.entity_type!r} is unknown", index=index, name=entity.name)
    if stats.level < 1:
        raise ValidationError(f"level must be at least 1 ({stats.level})", index=index, name=entity.name)
    if stats.max_health <= 0:
        raise ValidationError(f"max_health must be positive ({stats.max_health})", index=index, name=entity.name)
    if stats.health > stats.max_health:
        raise ValidationError("health exceeds max_health", index=index, name=entity.name)
    if stats.speed <= 0:
        raise ValidationError(f"speed must be positive ({stats.speed})", index=index, name=entity.name)
