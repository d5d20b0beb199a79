from pathlib import Path

import pytest

from procforge.config import GenerationParams
from procforge.genres import default_registry
from procforge.logging_config import configure_logging
from procforge.rarity import RarityEngine

configure_logging("WARNING")

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def engine():
    return RarityEngine()


@pytest.fixture
def params():
    return GenerationParams(depth=5, difficulty=0.5, genre_id="fantasy")


@pytest.fixture
def deep_params():
    return GenerationParams(depth=40, difficulty=0.9, genre_id="fantasy")


@pytest.fixture
def tuning_path():
    return REPO_ROOT / "config" / "tuning.toml"
