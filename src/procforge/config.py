from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for 3.10
    import tomli as tomllib  # type: ignore[no-redef]

# Canonical tier order shared by every per-tier table.
TIER_NAMES: Tuple[str, ...] = ("common", "uncommon", "rare", "epic", "legendary")

DEFAULT_GENRE = "fantasy"


@dataclass(frozen=True)
class GenerationParams:
    depth: int = 0
    difficulty: float = 0.5
    genre_id: str = DEFAULT_GENRE
    count: Optional[int] = None
    type_filter: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def with_options(self, **changes: Any) -> "GenerationParams":
        return replace(self, **changes)

    def resolved_count(self, default: int) -> int:
        if self.count is None:
            return default
        return max(int(self.count), 0)


@dataclass(frozen=True)
class RarityCurveConfig:
    base_weights: Tuple[float, ...] = (0.60, 0.25, 0.10, 0.04, 0.01)
    shifts: Tuple[float, ...] = (-0.60, 0.20, 1.50, 3.00, 5.00)
    depth_scale: float = 20.0
    depth_weight: float = 0.75
    difficulty_weight: float = 0.25
    max_depth: int = 100


@dataclass(frozen=True)
class BudgetConfig:
    depth_gain: float = 4.0
    depth_scale: float = 25.0
    difficulty_floor: float = 0.8
    difficulty_span: float = 0.4
    tier_multipliers: Tuple[float, ...] = (1.0, 1.25, 1.6, 2.2, 3.5)


@dataclass(frozen=True)
class TuningConfig:
    rarity: RarityCurveConfig = field(default_factory=RarityCurveConfig)
    budget: BudgetConfig = field(default_factory=BudgetConfig)

    def validate(self) -> None:
        rarity = self.rarity
        _check_tier_table("rarity.base_weights", rarity.base_weights)
        _check_tier_table("rarity.shifts", rarity.shifts)
        if any(weight < 0 for weight in rarity.base_weights) or sum(rarity.base_weights) <= 0:
            raise ValueError("rarity.base_weights must be non-negative with a positive sum.")
        if any(shift < -1.0 for shift in rarity.shifts):
            raise ValueError("rarity.shifts must be >= -1 so weights stay non-negative.")
        if rarity.depth_scale <= 0:
            raise ValueError("rarity.depth_scale must be positive.")
        if rarity.depth_weight < 0 or rarity.difficulty_weight < 0:
            raise ValueError("rarity pressure weights must be non-negative.")
        if rarity.depth_weight + rarity.difficulty_weight > 1.0 + 1e-9:
            raise ValueError("rarity.depth_weight + rarity.difficulty_weight must not exceed 1.")
        if rarity.max_depth < 0:
            raise ValueError("rarity.max_depth must be non-negative.")

        budget = self.budget
        _check_tier_table("budget.tier_multipliers", budget.tier_multipliers)
        if any(b < a for a, b in zip(budget.tier_multipliers, budget.tier_multipliers[1:])):
            raise ValueError("budget.tier_multipliers must be non-decreasing.")
        if budget.tier_multipliers[0] <= 0:
            raise ValueError("budget.tier_multipliers must be positive.")
        if budget.depth_gain < 0:
            raise ValueError("budget.depth_gain must be non-negative.")
        if budget.depth_scale <= 0:
            raise ValueError("budget.depth_scale must be positive.")
        if budget.difficulty_floor <= 0 or budget.difficulty_span < 0:
            raise ValueError("budget difficulty factor must stay positive.")


DEFAULT_TUNING = TuningConfig()


def _check_tier_table(name: str, values: Sequence[float]) -> None:
    if len(values) != len(TIER_NAMES):
        raise ValueError(f"{name} must define exactly {len(TIER_NAMES)} tiers.")


def _parse_tier_table(section: str, key: str, raw: Any, default: Tuple[float, ...]) -> Tuple[float, ...]:
    if raw is None:
        return default
    if isinstance(raw, Mapping):
        unknown = set(raw) - set(TIER_NAMES)
        if unknown:
            raise ValueError(f"[{section}.{key}] has unknown tiers: {', '.join(sorted(unknown))}.")
        missing = [tier for tier in TIER_NAMES if tier not in raw]
        if missing:
            raise ValueError(f"[{section}.{key}] is missing tiers: {', '.join(missing)}.")
        return tuple(float(raw[tier]) for tier in TIER_NAMES)
    if isinstance(raw, list):
        if len(raw) != len(TIER_NAMES):
            raise ValueError(f"{section}.{key} must list {len(TIER_NAMES)} values.")
        return tuple(float(value) for value in raw)
    raise ValueError(f"{section}.{key} must be a table keyed by tier or a list.")


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name, {})
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ValueError(f"[{name}] must be a table if provided.")
    return section


def parse_tuning(raw: Mapping[str, Any]) -> TuningConfig:
    rarity_raw = _section(raw, "rarity")
    defaults = RarityCurveConfig()
    rarity = RarityCurveConfig(
        base_weights=_parse_tier_table("rarity", "base_weights", rarity_raw.get("base_weights"), defaults.base_weights),
        shifts=_parse_tier_table("rarity", "shifts", rarity_raw.get("shifts"), defaults.shifts),
        depth_scale=float(rarity_raw.get("depth_scale", defaults.depth_scale)),
        depth_weight=float(rarity_raw.get("depth_weight", defaults.depth_weight)),
        difficulty_weight=float(rarity_raw.get("difficulty_weight", defaults.difficulty_weight)),
        max_depth=int(rarity_raw.get("max_depth", defaults.max_depth)),
    )

    budget_raw = _section(raw, "budget")
    budget_defaults = BudgetConfig()
    budget = BudgetConfig(
        depth_gain=float(budget_raw.get("depth_gain", budget_defaults.depth_gain)),
        depth_scale=float(budget_raw.get("depth_scale", budget_defaults.depth_scale)),
        difficulty_floor=float(budget_raw.get("difficulty_floor", budget_defaults.difficulty_floor)),
        difficulty_span=float(budget_raw.get("difficulty_span", budget_defaults.difficulty_span)),
        tier_multipliers=_parse_tier_table(
            "budget", "tier_multipliers", budget_raw.get("tier_multipliers"), budget_defaults.tier_multipliers
        ),
    )

    tuning = TuningConfig(rarity=rarity, budget=budget)
    tuning.validate()
    return tuning


def load_tuning(path: str | Path) -> TuningConfig:
    tuning_path = Path(path)
    if not tuning_path.exists():
        raise FileNotFoundError(f"Tuning file not found: {tuning_path}")
    with tuning_path.open("rb") as handle:
        raw = tomllib.load(handle)
    return parse_tuning(raw)
