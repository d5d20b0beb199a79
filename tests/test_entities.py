import pytest

from procforge.entities import (
    Entity,
    EntityGenerator,
    EntitySize,
    EntityStats,
    EntityType,
    roll_level,
)
from procforge.errors import ValidationError
from procforge.rarity import RarityTier
from procforge.seeds import SeededRandom


@pytest.fixture
def generator(registry, engine):
    return EntityGenerator(registry=registry, engine=engine)


def _entity(entity_type=EntityType.MONSTER, **stats):
    values = dict(level=3, health=40, max_health=40, damage=8, defense=4, speed=1.0)
    values.update(stats)
    return Entity(
        name="Orc Brute",
        entity_type=entity_type,
        size=EntitySize.MEDIUM,
        rarity=RarityTier.COMMON,
        stats=EntityStats(**values),
        seed=1,
        genre_id="fantasy",
        hostile=entity_type.hostile,
    )


class TestEntityGeneration:
    """Creature and NPC generation."""

    def test_deterministic(self, generator, params):
        """The same inputs give the same entities."""
        assert generator.generate(11, params) == generator.generate(11, params)

    def test_generate_one_reproduces_entity(self, generator, deep_params):
        """Each entity can be rebuilt from its seed."""
        for entity in generator.generate(11, deep_params):
            assert generator.generate_one(entity.seed, deep_params) == entity

    def test_batch_validates(self, generator, deep_params):
        """Deep batches pass validation."""
        generator.validate(generator.generate(5, deep_params.with_options(count=60)))

    def test_hostility_follows_type(self, generator, params):
        """Hostility is derived from the entity type."""
        for entity in generator.generate(4, params.with_options(count=40)):
            assert entity.hostile == entity.entity_type.hostile

    def test_threat_level_in_range(self, generator, deep_params):
        """Threat always lands on the 0-100 scale."""
        for entity in generator.generate(4, deep_params.with_options(count=40)):
            assert 0 <= entity.threat_level() <= 100

    @pytest.mark.parametrize("genre_id", ["fantasy", "scifi", "horror", "cyberpunk", "postapoc"])
    def test_every_base_genre(self, generator, params, genre_id):
        """Every base genre has entity templates."""
        entities = generator.generate(6, params.with_options(genre_id=genre_id))
        assert all(entity.genre_id == genre_id for entity in entities)
        generator.validate(entities)


class TestEntityTypes:
    """Type-specific rules."""

    def test_boss_filter(self, generator, params):
        """Bosses are at least rare."""
        bosses = generator.generate(8, params.with_options(count=25, type_filter="boss"))
        assert all(entity.is_boss() for entity in bosses)
        assert all(entity.rarity >= RarityTier.RARE for entity in bosses)

    def test_minions_capped(self, generator, deep_params):
        """Minions are at most uncommon, even deep down."""
        minions = generator.generate(8, deep_params.with_options(count=25, type_filter="minion"))
        assert all(entity.entity_type is EntityType.MINION for entity in minions)
        assert all(entity.rarity <= RarityTier.UNCOMMON for entity in minions)

    def test_npcs_are_friendly(self, generator, params):
        """NPCs are never hostile and carry a personal name."""
        npcs = generator.generate(8, params.with_options(count=10, type_filter="npc"))
        assert all(not entity.hostile for entity in npcs)
        assert all(" the " in entity.name for entity in npcs)

    def test_filter_without_templates_ignored(self, generator, params):
        """Filtering on a type no template provides falls back to all templates."""
        assert generator.generate(8, params.with_options(type_filter="merchant")) == generator.generate(8, params)

    def test_hostile_types(self):
        """Only combat types are hostile."""
        assert EntityType.BOSS.hostile
        assert EntityType.MINION.hostile
        assert not EntityType.NPC.hostile
        assert not EntityType.MERCHANT.hostile


class TestThreatLevel:
    """Threat scoring."""

    def test_formula(self):
        """Threat combines stats, type multiplier and level."""
        entity = _entity(level=2, health=100, damage=4, defense=5)
        # (10 + 20 + 10) * 2.0 * 2 * 0.1
        assert entity.threat_level() == 16

    def test_capped_at_hundred(self):
        """Huge stats still cap at 100."""
        assert _entity(EntityType.BOSS, level=50, health=5000, max_health=5000, damage=200).threat_level() == 100


class TestRollLevel:
    """Level rolls."""

    def test_level_at_least_one(self):
        """Levels never drop below 1."""
        rng = SeededRandom(3)
        assert all(roll_level(rng, 0, 0.0) >= 1 for _ in range(50))

    def test_level_grows_with_depth(self):
        """Deep levels roll higher than shallow ones."""
        assert roll_level(SeededRandom(3), 50, 0.5) > roll_level(SeededRandom(3), 2, 0.5)


class TestEntityValidation:
    """Structural validation."""

    def test_valid(self, generator):
        """A well-formed entity passes."""
        generator.validate([_entity()])

    def test_health_above_max(self, generator):
        """Health may not exceed max health."""
        with pytest.raises(ValidationError, match="health exceeds max_health"):
            generator.validate([_entity(health=50)])

    def test_level_zero(self, generator):
        """Level must be at least 1."""
        with pytest.raises(ValidationError, match="level must be at least 1"):
            generator.validate([_entity(level=0)])

    def test_negative_defense(self, generator):
        """Negative stats are rejected."""
        with pytest.raises(ValidationError, match=r"#0 \(Orc Brute\): defense is negative"):
            generator.validate([_entity(defense=-2)])
