from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Tuple

from .config import GenerationParams, TuningConfig
from .errors import ValidationError
from .generator import BaseGenerator, check_name, check_non_negative, check_rarity, template_key
from .genres import GenreDefinition, GenreRegistry
from .items import ItemGenerator
from .rarity import RarityEngine, RarityTier
from .seeds import REWARD_SALT, SeededRandom, derive_seed

GIVER_NAMES = ("Elder", "Captain", "Merchant", "Wizard", "Guard", "Scout", "Leader")
REWARD_VALUE_WEIGHTS = {"xp": 1, "gold": 2, "item": 100, "skill_point": 500}


class QuestType(Enum):
    KILL = "kill"
    COLLECT = "collect"
    ESCORT = "escort"
    EXPLORE = "explore"
    TALK = "talk"
    BOSS = "boss"


class QuestStatus(Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETE = "complete"
    TURNED_IN = "turned_in"
    FAILED = "failed"


class QuestDifficulty(IntEnum):
    TRIVIAL = 0
    EASY = 1
    NORMAL = 2
    HARD = 3
    ELITE = 4
    LEGENDARY = 5

    def __str__(self) -> str:
        return self.name.lower()


@dataclass
class Objective:
    description: str
    target: str
    required: int
    current: int = 0

    def is_complete(self) -> bool:
        return self.current >= self.required

    def progress(self) -> float:
        if self.required <= 0:
            return 1.0
        return min(self.current / self.required, 1.0)


@dataclass
class Reward:
    xp: int = 0
    gold: int = 0
    items: List[str] = field(default_factory=list)
    skill_points: int = 0


@dataclass
class Quest:
    name: str
    quest_type: QuestType
    rarity: RarityTier
    difficulty: QuestDifficulty
    description: str
    objectives: List[Objective]
    reward: Reward
    required_level: int
    seed: int
    genre_id: str
    status: QuestStatus = QuestStatus.NOT_STARTED
    tags: Tuple[str, ...] = ()
    giver: str = ""
    location: str = ""

    def is_complete(self) -> bool:
        return bool(self.objectives) and all(objective.is_complete() for objective in self.objectives)

    def progress(self) -> float:
        if not self.objectives:
            return 1.0
        return sum(objective.progress() for objective in self.objectives) / len(self.objectives)

    def reward_value(self) -> int:
        reward = self.reward
        return (
            reward.xp * REWARD_VALUE_WEIGHTS["xp"]
            + reward.gold * REWARD_VALUE_WEIGHTS["gold"]
            + len(reward.items) * REWARD_VALUE_WEIGHTS["item"]
            + reward.skill_points * REWARD_VALUE_WEIGHTS["skill_point"]
        )


@dataclass(frozen=True)
class QuestTemplate:
    quest_type: QuestType
    prefixes: Tuple[str, ...]
    suffixes: Tuple[str, ...]
    descriptions: Tuple[str, ...]
    objective: str
    tags: Tuple[str, ...]
    targets: Tuple[str, ...]
    required: Tuple[int, int]
    xp: Tuple[int, int]
    gold: Tuple[int, int]
    item_chance: float = 0.0
    skill_point_chance: float = 0.0


QUEST_TEMPLATES: Dict[str, Tuple[QuestTemplate, ...]] = {
    "fantasy": (
        QuestTemplate(
            QuestType.KILL,
            ("Slay", "Hunt", "Cull", "Exterminate", "Eliminate"),
            ("the Undead", "the Goblins", "the Bandits", "the Monsters", "the Beasts"),
            (
                "{target}s have been terrorizing the area. Defeat {count} of them.",
                "The local settlement is under attack by {target}s. Eliminate {count} to protect the people.",
                "A horde of {target}s threatens the region. Hunt down {count} of these creatures.",
            ),
            "Defeat {count} {target}",
            ("combat", "kill"),
            ("Goblin", "Skeleton", "Orc", "Wolf", "Bandit", "Zombie", "Spider"),
            (5, 20), (50, 200), (10, 50), item_chance=0.3,
        ),
        QuestTemplate(
            QuestType.COLLECT,
            ("Gather", "Collect", "Retrieve", "Find", "Acquire"),
            ("Herbs", "Crystals", "Artifacts", "Resources", "Components"),
            (
                "I need {count} {target} for my research. Can you gather them?",
                "The town needs {count} {target}. Search the area and bring them back.",
                "Ancient {target} pieces are scattered throughout the region. Collect {count} of them.",
            ),
            "Collect {count} {target}",
            ("gather", "explore"),
            ("Moonflower", "Mana Crystal", "Ancient Rune", "Dragon Scale", "Phoenix Feather"),
            (3, 15), (30, 150), (15, 60), item_chance=0.4,
        ),
        QuestTemplate(
            QuestType.BOSS,
            ("Defeat", "Vanquish", "Slay", "Destroy", "Conquer"),
            ("the Dragon Lord", "the Lich King", "the Dark Sorcerer", "the Demon Prince", "the Ancient Wyrm"),
            (
                "The {target} has awakened and threatens the realm. You must defeat this powerful foe.",
                "Legends speak of the {target}. Only the bravest hero can face this challenge.",
                "The kingdom's survival depends on stopping the {target}. This will be your greatest battle.",
            ),
            "Defeat the {target}",
            ("boss", "challenge", "epic"),
            ("Dragon Lord", "Lich King", "Dark Sorcerer", "Demon Prince", "Ancient Wyrm"),
            (1, 1), (500, 2000), (200, 1000), item_chance=0.9, skill_point_chance=0.5,
        ),
        QuestTemplate(
            QuestType.EXPLORE,
            ("Explore", "Discover", "Scout", "Survey", "Map"),
            ("the Ancient Ruins", "the Dark Forest", "the Forgotten Temple", "the Mountain Pass", "the Lost City"),
            (
                "We need someone to explore the {target}. Report back what you find.",
                "Strange reports come from the {target}. Investigate the area.",
                "Ancient maps mention the {target}. Discover this location's secrets.",
            ),
            "Discover the {target}",
            ("exploration", "adventure"),
            ("Ancient Ruins", "Dark Forest", "Forgotten Temple", "Mountain Pass", "Lost City"),
            (1, 1), (40, 180), (20, 80), item_chance=0.35,
        ),
        QuestTemplate(
            QuestType.ESCORT,
            ("Escort", "Protect", "Guide", "Shepherd"),
            ("the Caravan", "the Pilgrim", "the Envoy", "the Healer"),
            (
                "The {target} must reach the next town alive. Keep them safe on the road.",
                "Bandits prey on travelers. See the {target} through the pass.",
            ),
            "Escort the {target} safely",
            ("escort", "protect"),
            ("Merchant Caravan", "Pilgrim", "Royal Envoy", "Wandering Healer"),
            (1, 1), (80, 250), (30, 120), item_chance=0.25,
        ),
        QuestTemplate(
            QuestType.TALK,
            ("Seek", "Consult", "Petition", "Visit"),
            ("the Oracle", "the Hermit", "the Sage", "the Chieftain"),
            (
                "Only the {target} knows the way forward. Seek them out.",
                "The {target} has sent word. Hear what they have to say.",
            ),
            "Speak with the {target}",
            ("dialogue", "lore"),
            ("Oracle", "Hermit", "Sage", "Chieftain"),
            (1, 1), (20, 90), (0, 30), item_chance=0.1,
        ),
    ),
    "scifi": (
        QuestTemplate(
            QuestType.KILL,
            ("Terminate", "Eliminate", "Neutralize", "Destroy", "Eradicate"),
            ("the Rogue Bots", "the Alien Hostiles", "the Mutants", "the Pirates", "the Drones"),
            (
                "Hostile {target} units detected in sector. Eliminate {count}.",
                "Security breach: {target} units are compromising the facility. Neutralize {count} threats.",
                "Combat protocol initiated. Destroy {count} {target} units to secure the area.",
            ),
            "Destroy {count} {target}",
            ("combat", "tactical"),
            ("Combat Drone", "Alien Warrior", "Mutant", "Space Pirate", "Rogue AI"),
            (5, 20), (50, 200), (10, 50), item_chance=0.3,
        ),
        QuestTemplate(
            QuestType.COLLECT,
            ("Salvage", "Recover", "Extract", "Retrieve", "Collect"),
            ("Data Cores", "Power Cells", "Tech Modules", "Mineral Samples", "Alien Artifacts"),
            (
                "Mission: Acquire {count} {target} units from the field. Return to base for debriefing.",
                "Scanning systems detected {target} signatures nearby. Collect {count} units.",
                "Research requires {count} {target} units. Locate and extract them from the area.",
            ),
            "Recover {count} {target}",
            ("salvage", "exploration"),
            ("Data Core", "Power Cell", "Tech Module", "Mineral Sample", "Alien Artifact"),
            (3, 15), (30, 150), (15, 60), item_chance=0.4,
        ),
        QuestTemplate(
            QuestType.BOSS,
            ("Eliminate", "Terminate", "Neutralize", "Destroy", "Defeat"),
            ("the Titan Mech", "the Alien Queen", "the AI Overlord", "the Warlord", "the Omega Unit"),
            (
                "Priority target identified: {target}. Engage with extreme caution.",
                "Threat level maximum. The {target} must be neutralized immediately.",
                "All units: the {target} is the primary objective. Eliminate this threat.",
            ),
            "Neutralize the {target}",
            ("boss", "critical", "priority"),
            ("Titan Mech", "Alien Queen", "AI Overlord", "Warlord", "Omega Unit"),
            (1, 1), (500, 2000), (200, 1000), item_chance=0.9, skill_point_chance=0.5,
        ),
        QuestTemplate(
            QuestType.ESCORT,
            ("Escort", "Extract", "Convoy", "Evacuate"),
            ("the Scientist", "the Diplomat", "the Survivors", "the Cargo"),
            (
                "The {target} must reach the shuttle bay. Hostiles expected en route.",
                "Convoy duty: keep the {target} alive until extraction.",
            ),
            "Escort the {target} to extraction",
            ("escort", "protect"),
            ("Lead Scientist", "Diplomat", "Colonist Group", "Prototype Cargo"),
            (1, 1), (80, 250), (30, 120), item_chance=0.25,
        ),
    ),
}

_REPORT_BACK_TYPES = {QuestType.KILL, QuestType.COLLECT}


def quest_grade(rng: SeededRandom, depth: int, difficulty: float) -> QuestDifficulty:
    level = depth // 3 + int(difficulty * 2) + rng.randint(-1, 1)
    return QuestDifficulty(min(max(level, QuestDifficulty.TRIVIAL), QuestDifficulty.LEGENDARY))


def required_amount(rng: SeededRandom, bounds: Tuple[int, int], depth: int, difficulty: float) -> int:
    difficulty_scale = 0.7 + difficulty * 0.6
    depth_scale = 1.0 + depth * 0.15
    low = max(int(bounds[0] * difficulty_scale), 1)
    high = max(int(bounds[1] * difficulty_scale * depth_scale), low)
    return rng.randint(low, high)


class QuestGenerator(BaseGenerator[Quest]):
    kind = "quest"
    default_count = 5

    def __init__(
        self,
        registry: Optional[GenreRegistry] = None,
        tuning: Optional[TuningConfig] = None,
        engine: Optional[RarityEngine] = None,
        items: Optional[ItemGenerator] = None,
    ) -> None:
        super().__init__(registry, tuning, engine)
        self._items = items if items is not None else ItemGenerator(self._registry, engine=self._engine)

    def _build(self, rng: SeededRandom, genre: GenreDefinition, params: GenerationParams) -> Quest:
        templates = QUEST_TEMPLATES[template_key(genre, QUEST_TEMPLATES)]
        wanted = self._parse_filter(params, QuestType)
        candidates = [template for template in templates if wanted is None or template.quest_type is wanted]
        if not candidates:
            self._log.warning("no templates for type filter", type_filter=wanted.value, genre=genre.id)
            candidates = list(templates)
        template = rng.choice(candidates)

        depth, difficulty = self._engine.clamp(params.depth, params.difficulty)
        rarity = self._roll_rarity(rng, params)
        grade = quest_grade(rng, depth, difficulty)
        name = f"{rng.choice(template.prefixes)} {rng.choice(template.suffixes)}"
        target = rng.choice(template.targets)
        count = required_amount(rng, template.required, depth, difficulty)
        description = rng.choice(template.descriptions).format(target=target, count=count)
        giver = rng.choice(GIVER_NAMES) if template.quest_type is not QuestType.EXPLORE else ""

        objectives = [Objective(template.objective.format(target=target, count=count), target, count)]
        if rarity >= RarityTier.RARE and template.quest_type in _REPORT_BACK_TYPES:
            objectives.append(Objective(f"Report back to the {giver}", giver, 1))

        reward = self._reward(rng, template, params, rarity, grade, len(objectives), genre)
        location = target if template.quest_type in (QuestType.EXPLORE, QuestType.BOSS) else ""
        return Quest(
            name=name,
            quest_type=template.quest_type,
            rarity=rarity,
            difficulty=grade,
            description=description,
            objectives=objectives,
            reward=reward,
            required_level=self._engine.required_level(depth, rarity),
            seed=rng.seed,
            genre_id=genre.id,
            tags=template.tags + (genre.id, str(grade)),
            giver=giver,
            location=location,
        )

    def _reward(
        self,
        rng: SeededRandom,
        template: QuestTemplate,
        params: GenerationParams,
        rarity: RarityTier,
        grade: QuestDifficulty,
        objective_count: int,
        genre: GenreDefinition,
    ) -> Reward:
        scale = self._engine.budget(params.depth, params.difficulty, rarity)
        scale *= (1.0 + 0.3 * int(grade)) * (1.0 + 0.25 * (objective_count - 1))
        reward = Reward(
            xp=max(rng.randint(int(template.xp[0] * scale), int(template.xp[1] * scale)), 1),
            gold=rng.randint(int(template.gold[0] * scale), int(template.gold[1] * scale)),
        )
        if rng.chance(template.item_chance):
            reward_seed = derive_seed(rng.seed, REWARD_SALT)
            for index in range(rng.randint(1, 2)):
                item_rng = SeededRandom(derive_seed(reward_seed, index))
                reward.items.append(self._items.build_item(item_rng, genre, params, min_rarity=rarity).name)
        if rng.chance(template.skill_point_chance):
            reward.skill_points = rng.randint(1, 2)
        return reward

    def _validate_one(self, index: int, quest: Quest) -> None:
        check_name(index, quest.name)
        check_rarity(index, quest.name, quest.rarity)
        if not isinstance(quest.difficulty, QuestDifficulty):
            raise ValidationError(f"difficulty {quest.difficulty!r} is not a quest grade", index=index, name=quest.name)
        if not quest.description:
            raise ValidationError("description is empty", index=index, name=quest.name)
        if not quest.objectives:
            raise ValidationError("quest has no objectives", index=index, name=quest.name)
        for position, objective in enumerate(quest.objectives):
            if not objective.description:
                raise ValidationError(f"objective {position} has no description", index=index, name=quest.name)
            if objective.required <= 0:
                raise ValidationError(
                    f"objective {position} requires {objective.required}, expected > 0", index=index, name=quest.name
                )
            check_non_negative(index, quest.name, {f"objective {position} current": objective.current})
        reward = quest.reward
        check_non_negative(
            index,
            quest.name,
            {
                "xp": reward.xp,
                "gold": reward.gold,
                "skill_points": reward.skill_points,
                "required_level": quest.required_level,
            },
        )
        if reward.xp <= 0:
            raise ValidationError("xp reward must be positive", index=index, name=quest.name)
