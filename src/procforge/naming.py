from __future__ import annotations

from collections import defaultdict
from functools import lru_cache
from typing import Dict, List, Sequence, Tuple

from .seeds import SeededRandom

NAME_CORPORA: Dict[str, Tuple[str, ...]] = {
    "fantasy": (
        "Aldric", "Branwen", "Cedric", "Dorian", "Elowen", "Faelan", "Gareth", "Halvard",
        "Isolde", "Jorund", "Kaelen", "Lysandra", "Maelis", "Norrin", "Orla", "Perrin",
        "Rowena", "Soren", "Thalia", "Ulric", "Vesna", "Wendel", "Yselda", "Zoran",
    ),
    "scifi": (
        "Axton", "Brix", "Cassia", "Dax", "Elara", "Jaxon", "Kira", "Lyra",
        "Nova", "Orion", "Quill", "Rhea", "Soren", "Talon", "Vega", "Xander",
        "Zephyr", "Corvin", "Mira", "Tycho",
    ),
    "horror": (
        "Abigail", "Bartholomew", "Cornelius", "Delphine", "Ezekiel", "Hester", "Ichabod", "Josiah",
        "Lavinia", "Mordecai", "Obadiah", "Prudence", "Silas", "Temperance", "Ursula", "Wilhelmina",
    ),
    "cyberpunk": (
        "Blaze", "Chrome", "Dex", "Echo", "Flux", "Glitch", "Hex", "Jinx",
        "Kenji", "Lux", "Mako", "Neon", "Raze", "Shiro", "Vex", "Zero",
    ),
    "postapoc": (
        "Ash", "Bolt", "Cinder", "Dusty", "Flint", "Grit", "Hawk", "Jericho",
        "Kestrel", "Rook", "Rust", "Sable", "Scrap", "Slate", "Tank", "Wren",
    ),
}


class MarkovNameGenerator:
    """Character-level Markov chain trained on a name corpus."""

    def __init__(self, names: Sequence[str], n: int = 3) -> None:
        if not names:
            raise ValueError("MarkovNameGenerator needs at least one training name.")
        if n < 2:
            raise ValueError("Markov order n must be at least 2.")
        self.n = n
        self._names = tuple(names)
        self._model: Dict[str, List[str]] = defaultdict(list)
        self._train(names)

    def _train(self, names: Sequence[str]) -> None:
        for name in names:
            padded = "~" * (self.n - 1) + name.lower() + "$"
            for i in range(len(padded) - self.n + 1):
                prefix = padded[i : i + self.n - 1]
                self._model[prefix].append(padded[i + self.n - 1])

    def generate(self, rng: SeededRandom, min_len: int = 4, max_len: int = 10, attempts: int = 25) -> str:
        for _ in range(attempts):
            prefix = "~" * (self.n - 1)
            result = ""
            while len(result) < max_len:
                next_char = rng.choice(self._model[prefix])
                if next_char == "$":
                    break
                result += next_char
                prefix = (prefix + next_char)[-(self.n - 1) :]
            if len(result) >= min_len:
                return result.capitalize()
        # Short corpora can keep ending early; fall back to a training name.
        return rng.choice(self._names)


@lru_cache(maxsize=None)
def name_model(genre_key: str) -> MarkovNameGenerator:
    return MarkovNameGenerator(NAME_CORPORA.get(genre_key, NAME_CORPORA["fantasy"]))


def personal_name(rng: SeededRandom, genre_key: str) -> str:
    return name_model(genre_key).generate(rng)


def compose_name(*parts: str) -> str:
    """Join non-empty name parts with single spaces."""
    return " ".join(part.strip() for part in parts if part and part.strip())
