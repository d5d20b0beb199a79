from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .config import GenerationParams
from .errors import ValidationError
from .generator import BaseGenerator, check_name, check_non_negative, check_rarity, template_key
from .genres import GenreDefinition
from .naming import compose_name
from .rarity import RarityTier
from .seeds import SeededRandom


class SpellType(Enum):
    OFFENSIVE = "offensive"
    DEFENSIVE = "defensive"
    UTILITY = "utility"
    HEALING = "healing"
    BUFF = "buff"
    DEBUFF = "debuff"
    SUMMON = "summon"


class Element(Enum):
    NONE = "none"
    FIRE = "fire"
    ICE = "ice"
    LIGHTNING = "lightning"
    EARTH = "earth"
    WIND = "wind"
    LIGHT = "light"
    DARK = "dark"
    ARCANE = "arcane"


class TargetType(Enum):
    SELF = "self"
    SINGLE = "single"
    AREA = "area"
    CONE = "cone"
    LINE = "line"
    ALL_ALLIES = "all_allies"
    ALL_ENEMIES = "all_enemies"


RARITY_NAME_PREFIXES: Dict[RarityTier, str] = {
    RarityTier.RARE: "Greater",
    RarityTier.EPIC: "Superior",
    RarityTier.LEGENDARY: "Ultimate",
}

POWER_MULTIPLIERS: Dict[RarityTier, float] = {
    RarityTier.COMMON: 1.0,
    RarityTier.UNCOMMON: 1.2,
    RarityTier.RARE: 1.5,
    RarityTier.EPIC: 2.0,
    RarityTier.LEGENDARY: 3.0,
}

ACTIONS: Dict[SpellType, str] = {
    SpellType.OFFENSIVE: "Unleashes",
    SpellType.DEFENSIVE: "Creates",
    SpellType.UTILITY: "Manifests",
    SpellType.HEALING: "Channels",
    SpellType.BUFF: "Grants",
    SpellType.DEBUFF: "Inflicts",
    SpellType.SUMMON: "Summons",
}

ELEMENT_PHRASES: Dict[Element, str] = {
    Element.NONE: "raw power",
    Element.FIRE: "searing flames",
    Element.ICE: "freezing cold",
    Element.LIGHTNING: "crackling lightning",
    Element.EARTH: "crushing stone",
    Element.WIND: "howling winds",
    Element.LIGHT: "radiant light",
    Element.DARK: "shadowy darkness",
    Element.ARCANE: "pure magical energy",
}

TARGET_PHRASES: Dict[TargetType, str] = {
    TargetType.SELF: "upon the caster",
    TargetType.SINGLE: "at a target",
    TargetType.AREA: "in an area",
    TargetType.CONE: "in a cone",
    TargetType.LINE: "in a line",
    TargetType.ALL_ALLIES: "upon all allies",
    TargetType.ALL_ENEMIES: "upon all enemies",
}


@dataclass
class SpellStats:
    damage: int = 0
    healing: int = 0
    mana_cost: int = 0
    cooldown: float = 0.0
    cast_time: float = 0.0
    range: float = 0.0
    area_size: float = 0.0
    duration: float = 0.0
    required_level: int = 1


@dataclass
class Spell:
    name: str
    spell_type: SpellType
    element: Element
    target: TargetType
    rarity: RarityTier
    stats: SpellStats
    seed: int
    genre_id: str
    tags: Tuple[str, ...] = ()
    description: str = ""

    def is_offensive(self) -> bool:
        return self.spell_type in (SpellType.OFFENSIVE, SpellType.DEBUFF)

    def is_support(self) -> bool:
        return self.spell_type in (SpellType.HEALING, SpellType.BUFF, SpellType.DEFENSIVE)

    def power_level(self) -> int:
        """Stat block reduced to a 0-100 score, normalized by mana cost."""
        stats = self.stats
        base = 0
        if stats.damage > 0:
            base += stats.damage * 2
        if stats.healing > 0:
            base += stats.healing * 2
        if stats.duration > 0:
            base += int(stats.duration * 3)
        if stats.area_size > 0:
            base += int(stats.area_size * 5)
        if stats.mana_cost > 0:
            base = base * 100 // stats.mana_cost
        power = int(base * POWER_MULTIPLIERS[self.rarity])
        return min(max(power, 0), 100)


@dataclass(frozen=True)
class SpellTemplate:
    spell_type: SpellType
    element: Element
    target: TargetType
    prefixes: Tuple[str, ...]
    suffixes: Tuple[str, ...]
    tags: Tuple[str, ...]
    damage: Tuple[float, float] = (0, 0)
    healing: Tuple[float, float] = (0, 0)
    mana_cost: Tuple[float, float] = (0, 0)
    cooldown: Tuple[float, float] = (0.0, 0.0)
    cast_time: Tuple[float, float] = (0.0, 0.0)
    range: Tuple[float, float] = (0.0, 0.0)
    area_size: Tuple[float, float] = (0.0, 0.0)
    duration: Tuple[float, float] = (0.0, 0.0)


SPELL_TEMPLATES: Dict[str, Tuple[SpellTemplate, ...]] = {
    "fantasy": (
        SpellTemplate(
            SpellType.OFFENSIVE, Element.FIRE, TargetType.SINGLE,
            ("Fire", "Flame", "Inferno", "Blaze", "Burning"), ("Bolt", "Strike", "Blast", "Arrow", "Ray"),
            ("fire", "damage", "burn"),
            damage=(20, 50), mana_cost=(15, 30), cooldown=(2.0, 5.0), cast_time=(0.5, 1.5), range=(10.0, 25.0),
        ),
        SpellTemplate(
            SpellType.OFFENSIVE, Element.ICE, TargetType.AREA,
            ("Ice", "Frost", "Frozen", "Glacial", "Arctic"), ("Storm", "Nova", "Explosion", "Wave", "Blast"),
            ("ice", "area", "slow"),
            damage=(30, 80), mana_cost=(30, 60), cooldown=(5.0, 10.0), cast_time=(1.0, 2.0), range=(5.0, 15.0),
            area_size=(5.0, 10.0),
        ),
        SpellTemplate(
            SpellType.OFFENSIVE, Element.LIGHTNING, TargetType.LINE,
            ("Lightning", "Thunder", "Shock", "Electric", "Volt"), ("Bolt", "Strike", "Chain", "Beam", "Arc"),
            ("lightning", "chain", "fast"),
            damage=(25, 60), mana_cost=(20, 40), cooldown=(3.0, 6.0), cast_time=(0.3, 1.0), range=(15.0, 30.0),
        ),
        SpellTemplate(
            SpellType.OFFENSIVE, Element.EARTH, TargetType.SINGLE,
            ("Stone", "Rock", "Boulder", "Earth", "Granite"), ("Throw", "Spike", "Fist", "Lance", "Barrage"),
            ("earth", "physical", "stun"),
            damage=(35, 70), mana_cost=(20, 35), cooldown=(4.0, 7.0), cast_time=(0.8, 1.5), range=(8.0, 20.0),
        ),
        SpellTemplate(
            SpellType.OFFENSIVE, Element.DARK, TargetType.CONE,
            ("Shadow", "Dark", "Void", "Curse", "Doom"), ("Bolt", "Wave", "Beam", "Touch", "Blast"),
            ("dark", "curse", "fear"),
            damage=(28, 65), mana_cost=(25, 45), cooldown=(4.0, 8.0), cast_time=(0.7, 1.8), range=(8.0, 15.0),
            area_size=(3.0, 8.0),
        ),
        SpellTemplate(
            SpellType.HEALING, Element.LIGHT, TargetType.SINGLE,
            ("Heal", "Cure", "Mend", "Restore", "Divine"), ("Touch", "Light", "Grace", "Blessing", "Aid"),
            ("healing", "light", "holy"),
            healing=(30, 80), mana_cost=(20, 40), cooldown=(3.0, 8.0), cast_time=(0.5, 1.5), range=(5.0, 15.0),
        ),
        SpellTemplate(
            SpellType.DEFENSIVE, Element.ARCANE, TargetType.SELF,
            ("Mana", "Magic", "Arcane", "Mystic", "Energy"), ("Shield", "Barrier", "Ward", "Protection", "Armor"),
            ("defense", "shield", "protection"),
            mana_cost=(15, 35), cooldown=(10.0, 20.0), cast_time=(0.5, 1.0), duration=(15.0, 45.0),
        ),
        SpellTemplate(
            SpellType.BUFF, Element.WIND, TargetType.SINGLE,
            ("Haste", "Swift", "Quick", "Speed", "Rush"), ("Blessing", "Enchantment", "Boost", "Enhancement"),
            ("buff", "speed", "haste"),
            mana_cost=(10, 25), cooldown=(15.0, 30.0), cast_time=(0.3, 0.8), range=(5.0, 10.0),
            duration=(20.0, 60.0),
        ),
        SpellTemplate(
            SpellType.DEBUFF, Element.DARK, TargetType.SINGLE,
            ("Weakness", "Slow", "Curse", "Hex", "Bane"), ("Touch", "Affliction", "Plague", "Spell"),
            ("debuff", "curse", "weaken"),
            damage=(5, 15), mana_cost=(12, 28), cooldown=(8.0, 15.0), cast_time=(0.5, 1.2), range=(8.0, 20.0),
            duration=(10.0, 30.0),
        ),
    ),
    "scifi": (
        SpellTemplate(
            SpellType.OFFENSIVE, Element.LIGHTNING, TargetType.SINGLE,
            ("Plasma", "Ion", "Photon", "Laser", "Particle"), ("Beam", "Burst", "Lance", "Cannon", "Pulse"),
            ("energy", "tech", "precision"),
            damage=(25, 60), mana_cost=(18, 35), cooldown=(2.5, 6.0), cast_time=(0.3, 1.2), range=(15.0, 40.0),
        ),
        SpellTemplate(
            SpellType.OFFENSIVE, Element.FIRE, TargetType.AREA,
            ("Fusion", "Quantum", "Nuclear", "Thermal", "Explosive"),
            ("Blast", "Detonation", "Missile", "Grenade", "Bomb"),
            ("explosive", "area", "tech"),
            damage=(35, 90), mana_cost=(35, 65), cooldown=(6.0, 12.0), cast_time=(1.2, 2.5), range=(10.0, 25.0),
            area_size=(6.0, 12.0),
        ),
        SpellTemplate(
            SpellType.OFFENSIVE, Element.ICE, TargetType.SINGLE,
            ("Cryo", "Freeze", "Stasis", "Zero", "Cold"), ("Beam", "Ray", "Field", "Shot", "Blast"),
            ("cryo", "freeze", "slow"),
            damage=(22, 55), mana_cost=(20, 38), cooldown=(3.5, 7.0), cast_time=(0.5, 1.3), range=(12.0, 28.0),
        ),
        SpellTemplate(
            SpellType.HEALING, Element.LIGHT, TargetType.SINGLE,
            ("Nano", "Medical", "Bio", "Regen", "Heal"), ("Injection", "Field", "Spray", "Boost", "Pack"),
            ("medical", "healing", "tech"),
            healing=(35, 90), mana_cost=(22, 42), cooldown=(4.0, 10.0), cast_time=(0.4, 1.2), range=(5.0, 18.0),
        ),
        SpellTemplate(
            SpellType.DEFENSIVE, Element.ARCANE, TargetType.SELF,
            ("Energy", "Quantum", "Force", "Kinetic", "Shield"), ("Barrier", "Field", "Shield", "Matrix", "Wall"),
            ("defense", "shield", "tech"),
            mana_cost=(18, 40), cooldown=(12.0, 25.0), cast_time=(0.4, 1.0), duration=(18.0, 50.0),
        ),
        SpellTemplate(
            SpellType.BUFF, Element.LIGHTNING, TargetType.ALL_ALLIES,
            ("Combat", "Tactical", "Battle", "War", "System"),
            ("Stimulant", "Boost", "Enhancement", "Override", "Protocol"),
            ("buff", "combat", "tech"),
            mana_cost=(25, 50), cooldown=(20.0, 40.0), cast_time=(0.5, 1.5), duration=(25.0, 70.0),
        ),
    ),
}


def describe_spell(spell_type: SpellType, element: Element, target: TargetType) -> str:
    return f"{ACTIONS[spell_type]} {ELEMENT_PHRASES[element]} {TARGET_PHRASES[target]}."


class SpellGenerator(BaseGenerator[Spell]):
    kind = "spell"
    default_count = 10

    def _build(self, rng: SeededRandom, genre: GenreDefinition, params: GenerationParams) -> Spell:
        templates = SPELL_TEMPLATES[template_key(genre, SPELL_TEMPLATES)]
        wanted = self._parse_filter(params, SpellType)
        candidates = [template for template in templates if wanted is None or template.spell_type is wanted]
        if not candidates:
            self._log.warning("no templates for type filter", type_filter=wanted.value, genre=genre.id)
            candidates = list(templates)
        template = rng.choice(candidates)

        rarity = self._roll_rarity(rng, params)
        name = compose_name(RARITY_NAME_PREFIXES.get(rarity, ""), rng.choice(template.prefixes), rng.choice(template.suffixes))
        stats = self._stats(rng, template, rarity, params)
        return Spell(
            name=name,
            spell_type=template.spell_type,
            element=template.element,
            target=template.target,
            rarity=rarity,
            stats=stats,
            seed=rng.seed,
            genre_id=genre.id,
            tags=template.tags + (genre.id, rarity.label),
            description=describe_spell(template.spell_type, template.element, template.target),
        )

    def _stats(self, rng: SeededRandom, template: SpellTemplate, rarity: RarityTier, params: GenerationParams) -> SpellStats:
        engine = self._engine
        budget = engine.budget(params.depth, params.difficulty, rarity)
        scale = 1.0 + int(rarity) * 0.25
        depth, _ = engine.clamp(params.depth, params.difficulty)
        stats = SpellStats(required_level=engine.required_level(depth, rarity, levels_per_depth=1.0, levels_per_tier=2))
        # Only ranges the template defines consume draws.
        if template.damage[1] > 0:
            stats.damage = max(engine.roll_int(rng, budget, *template.damage), 1)
        if template.healing[1] > 0:
            stats.healing = max(engine.roll_int(rng, budget, *template.healing), 1)
        if template.mana_cost[1] > 0:
            stats.mana_cost = int(rng.between(*template.mana_cost) * scale)
        if template.cooldown[1] > 0:
            stats.cooldown = rng.between(*template.cooldown) / scale
        if template.cast_time[1] > 0:
            stats.cast_time = rng.between(*template.cast_time) / (1.0 + scale * 0.1)
        if template.range[1] > 0:
            stats.range = rng.between(*template.range) * (1.0 + scale * 0.1)
        if template.area_size[1] > 0:
            stats.area_size = rng.between(*template.area_size) * (1.0 + scale * 0.15)
        if template.duration[1] > 0:
            stats.duration = rng.between(*template.duration) * (1.0 + scale * 0.2)
        return stats

    def _validate_one(self, index: int, spell: Spell) -> None:
        check_name(index, spell.name)
        check_rarity(index, spell.name, spell.rarity)
        for value, enum_type in ((spell.spell_type, SpellType), (spell.element, Element), (spell.target, TargetType)):
            if not isinstance(value, enum_type):
                raise ValidationError(f"{value!r} is not a valid {enum_type.__name__}", index=index, name=spell.name)
        stats = spell.stats
        check_non_negative(
            index,
            spell.name,
            {
                "damage": stats.damage,
                "healing": stats.healing,
                "mana_cost": stats.mana_cost,
                "cooldown": stats.cooldown,
                "cast_time": stats.cast_time,
                "range": stats.range,
                "area_size": stats.area_size,
                "duration": stats.duration,
            },
        )
        if stats.required_level < 1:
            raise ValidationError(f"required level must be at least 1 ({stats.required_level})", index=index, name=spell.name)
        if spell.is_offensive() and stats.damage <= 0:
            raise ValidationError("offensive spell has no damage", index=index, name=spell.name)
        if spell.spell_type is SpellType.HEALING and stats.healing <= 0:
            raise ValidationError("healing spell has no healing", index=index, name=spell.name)
