import pytest

from procforge.blending import GenreBlender
from procforge.config import GenerationParams
from procforge.content import DOMAINS, ContentGenerator, domain_seed
from procforge.errors import GenreLookupError, ValidationError
from procforge.generator import Generator


@pytest.fixture
def content(registry):
    return ContentGenerator(registry)


class TestContentBundle:
    """Whole-world content generation."""

    def test_default_counts(self, content, params):
        """Each domain uses its generator's default count."""
        bundle = content.generate(12345, params)
        assert bundle.counts() == {"items": 10, "entities": 10, "merchants": 1, "quests": 5, "spells": 10}

    def test_count_overrides(self, content, params):
        """Per-domain counts override the defaults."""
        bundle = content.generate(1, params, counts={"items": 3, "spells": 0})
        assert len(bundle.items) == 3
        assert bundle.spells == []
        assert len(bundle.quests) == 5

    def test_unknown_domain(self, content, params):
        """Unknown domain names are rejected."""
        with pytest.raises(ValueError, match="Unknown content domains: relics"):
            content.generate(1, params, counts={"relics": 2})

    def test_unknown_genre(self, content):
        """An unknown genre fails before anything is generated."""
        with pytest.raises(GenreLookupError):
            content.generate(1, GenerationParams(genre_id="steampunk"))

    def test_deterministic(self, content, params):
        """The same seed gives the same bundle."""
        assert content.generate(77, params) == content.generate(77, params)

    def test_matches_domain_generators(self, content, params):
        """Each domain is the generator's batch for that domain's seed."""
        bundle = content.generate(77, params)
        assert bundle.items == content.items.generate(domain_seed(77, "items"), params)
        assert bundle.quests == content.quests.generate(domain_seed(77, "quests"), params)

    def test_domains_use_distinct_seeds(self):
        """No two domains share a batch seed."""
        seeds = {domain_seed(5, domain) for domain in DOMAINS}
        assert len(seeds) == len(DOMAINS)

    def test_type_filter_not_applied(self, content, params):
        """Domain-specific filters are dropped for bundles."""
        assert content.generate(3, params.with_options(type_filter="weapon")) == content.generate(3, params)

    @pytest.mark.parametrize("domain", DOMAINS)
    def test_domain_generators_satisfy_protocol(self, content, domain):
        """Every domain generator offers generate, generate_one and validate."""
        assert isinstance(getattr(content, domain), Generator)

    def test_shared_engine(self, content):
        """All domain generators share one rarity engine."""
        assert content.items.engine is content.engine
        assert content.quests.engine is content.engine

    def test_bundle_validates(self, content, deep_params):
        """Generated bundles pass validation, empty domains included."""
        content.validate(content.generate(9, deep_params, counts={"merchants": 0}))

    def test_validation_reports_domain(self, content, params):
        """Broken objects in a bundle are reported."""
        bundle = content.generate(9, params)
        bundle.quests[0].reward.xp = 0
        with pytest.raises(ValidationError, match="xp reward must be positive"):
            content.validate(bundle)

    def test_blended_bundle(self, registry, params):
        """Bundles can be generated for a registered blend."""
        blend = GenreBlender(registry).create_preset_blend("wasteland-fantasy", seed=2)
        content = ContentGenerator(registry.extend([blend]))
        bundle = content.generate(4, params.with_options(genre_id=blend.id))
        assert bundle.genre_id == blend.id
        content.validate(bundle)
