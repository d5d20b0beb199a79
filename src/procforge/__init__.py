"""Deterministic procedural content for RPGs: items, creatures, merchants, quests, spells and genres."""

from .analysis import RarityReport, analyze_rarity, rarity_histogram
from .blending import PRESET_BLENDS, BlendedGenre, GenreBlender
from .config import GenerationParams, TuningConfig, load_tuning
from .content import ContentBundle, ContentGenerator
from .entities import Entity, EntityGenerator, EntitySize, EntityType
from .errors import GenreLookupError, PresetLookupError, ProcForgeError, ValidationError
from .generator import BaseGenerator, Generator
from .genres import Color, GenreDefinition, GenreRegistry, default_registry
from .items import Item, ItemGenerator, ItemType
from .logging_config import configure_logging
from .merchants import Merchant, MerchantGenerator, MerchantType, merchant_spawn, merchant_spawn_points
from .quests import Quest, QuestGenerator, QuestType
from .rarity import RarityDistribution, RarityEngine, RarityTier
from .seeds import SeededRandom, derive_seed
from .spells import Spell, SpellGenerator, SpellType

__all__ = [
    "BaseGenerator",
    "BlendedGenre",
    "Color",
    "ContentBundle",
    "ContentGenerator",
    "Entity",
    "EntityGenerator",
    "EntitySize",
    "EntityType",
    "GenerationParams",
    "Generator",
    "GenreBlender",
    "GenreDefinition",
    "GenreLookupError",
    "GenreRegistry",
    "Item",
    "ItemGenerator",
    "ItemType",
    "Merchant",
    "MerchantGenerator",
    "MerchantType",
    "PRESET_BLENDS",
    "PresetLookupError",
    "ProcForgeError",
    "Quest",
    "QuestGenerator",
    "QuestType",
    "RarityDistribution",
    "RarityEngine",
    "RarityReport",
    "RarityTier",
    "SeededRandom",
    "Spell",
    "SpellGenerator",
    "SpellType",
    "TuningConfig",
    "ValidationError",
    "analyze_rarity",
    "configure_logging",
    "default_registry",
    "derive_seed",
    "load_tuning",
    "merchant_spawn",
    "merchant_spawn_points",
    "rarity_histogram",
]
