import dataclasses

import pytest

from procforge.errors import ValidationError
from procforge.quests import (
    Objective,
    Quest,
    QuestDifficulty,
    QuestGenerator,
    QuestType,
    Reward,
    quest_grade,
    required_amount,
)
from procforge.rarity import RarityTier
from procforge.seeds import SeededRandom


@pytest.fixture
def generator(registry, engine):
    return QuestGenerator(registry=registry, engine=engine)


def _quest(objectives=None, reward=None):
    return Quest(
        name="Slay the Goblins",
        quest_type=QuestType.KILL,
        rarity=RarityTier.COMMON,
        difficulty=QuestDifficulty.NORMAL,
        description="Goblins have been terrorizing the area.",
        objectives=objectives if objectives is not None else [Objective("Defeat 5 Goblin", "Goblin", 5)],
        reward=reward if reward is not None else Reward(xp=100, gold=20),
        required_level=1,
        seed=1,
        genre_id="fantasy",
    )


class TestQuestGeneration:
    """Quest generation."""

    def test_default_count(self, generator):
        """Five quests by default."""
        assert len(generator.generate(1)) == 5

    def test_deterministic(self, generator, params):
        """Same inputs give the same quests."""
        assert generator.generate(33, params) == generator.generate(33, params)

    def test_generate_one_reproduces_quest(self, generator, deep_params):
        """Quests, reward items included, rebuild from their seed."""
        for quest in generator.generate(33, deep_params.with_options(count=8)):
            assert generator.generate_one(quest.seed, deep_params) == quest

    def test_batch_validates(self, generator, deep_params):
        """Generated quests pass validation."""
        generator.validate(generator.generate(3, deep_params.with_options(count=40)))

    def test_objectives_and_xp(self, generator, params):
        """Every quest has an objective and a positive xp reward."""
        for quest in generator.generate(3, params.with_options(count=30)):
            assert quest.objectives
            assert all(objective.required > 0 for objective in quest.objectives)
            assert quest.reward.xp > 0
            assert quest.required_level >= 1

    def test_explore_has_no_giver(self, generator, params):
        """Exploration quests have a location and no giver."""
        quests = generator.generate(3, params.with_options(count=10, type_filter="explore"))
        for quest in quests:
            assert quest.quest_type is QuestType.EXPLORE
            assert quest.giver == ""
            assert quest.location

    def test_report_back_on_rare_kill_quests(self, generator, deep_params):
        """Rare or better kill and collect quests end with a report-back objective."""
        quests = generator.generate(3, deep_params.with_options(count=60, type_filter="kill"))
        for quest in quests:
            if quest.rarity >= RarityTier.RARE:
                assert quest.objectives[-1].description == f"Report back to the {quest.giver}"
            else:
                assert len(quest.objectives) == 1

    def test_filter_missing_from_genre(self, generator, params):
        """A quest type the genre lacks falls back to every template."""
        quests = generator.generate(3, params.with_options(genre_id="scifi", type_filter="talk"))
        assert quests == generator.generate(3, params.with_options(genre_id="scifi"))

    def test_horror_uses_fallback_catalogue(self, generator, params):
        """Genres without quest templates still produce valid quests."""
        quests = generator.generate(3, params.with_options(genre_id="horror"))
        assert all(quest.genre_id == "horror" for quest in quests)
        generator.validate(quests)

    def test_tags_include_grade(self, generator, params):
        """Tags end with the genre and difficulty grade."""
        for quest in generator.generate(3, params):
            assert quest.tags[-2:] == ("fantasy", str(quest.difficulty))


class TestQuestHelpers:
    """Grades, amounts and progress."""

    def test_grade_bounds(self):
        """Grades clamp to the defined range."""
        rng = SeededRandom(1)
        assert all(quest_grade(rng, 0, 0.0) <= QuestDifficulty.EASY for _ in range(20))
        assert all(quest_grade(rng, 90, 1.0) is QuestDifficulty.LEGENDARY for _ in range(20))

    def test_required_amount_positive(self):
        """Required amounts are at least 1."""
        rng = SeededRandom(2)
        assert all(required_amount(rng, (1, 1), 0, 0.0) >= 1 for _ in range(20))

    def test_reward_value(self):
        """Reward value weights xp, gold, items and skill points."""
        quest = _quest(reward=Reward(xp=100, gold=50, items=["Iron Sword"], skill_points=1))
        assert quest.reward_value() == 100 + 100 + 100 + 500

    def test_progress(self):
        """Progress averages objective completion."""
        quest = _quest(
            objectives=[Objective("Defeat 4 Goblin", "Goblin", 4, current=2), Objective("Report back", "Elder", 1)]
        )
        assert quest.progress() == pytest.approx(0.25)
        assert not quest.is_complete()
        for objective in quest.objectives:
            objective.current = objective.required
        assert quest.is_complete()
        assert quest.progress() == 1.0

    def test_grade_string(self):
        """Grades print in lowercase."""
        assert str(QuestDifficulty.ELITE) == "elite"


class TestQuestValidation:
    """Structural validation."""

    def test_valid(self, generator):
        """A well-formed quest passes."""
        generator.validate([_quest()])

    def test_no_objectives(self, generator):
        """Quests need at least one objective."""
        with pytest.raises(ValidationError, match="quest has no objectives"):
            generator.validate([_quest(objectives=[])])

    def test_zero_required(self, generator):
        """Objectives must require something."""
        with pytest.raises(ValidationError, match="objective 0 requires 0"):
            generator.validate([_quest(objectives=[Objective("Defeat", "Goblin", 0)])])

    def test_zero_xp(self, generator):
        """Quests must grant xp."""
        with pytest.raises(ValidationError, match="xp reward must be positive"):
            generator.validate([_quest(reward=Reward(xp=0, gold=10))])

    def test_negative_gold(self, generator):
        """Negative gold is rejected."""
        with pytest.raises(ValidationError, match="gold is negative"):
            generator.validate([_quest(reward=Reward(xp=10, gold=-1))])

    def test_empty_description(self, generator):
        """Descriptions are required."""
        with pytest.raises(ValidationError, match="description is empty"):
            generator.validate([dataclasses.replace(_quest(), description="")])
