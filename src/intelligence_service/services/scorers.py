"""Dimension scorers.

Four pure functions, each mapping (CatalogItem, PreferenceQuery) to a score
in [0, 100]. Missing catalog attributes never raise; they score as the least
favorable value for the sub-component that needs them.

Use-case fit
------------
Each use case blends normalized attribute sub-scores with fixed weights
(see ``USE_CASE_PROFILES``, every row sums to 1.0):

==============  ===================================================================
edc             runtime_medium .25, weight .25, lumens .15, length .10,
                durability .10, tag_match .15
tactical        candela .30, impact .20, runtime_high .15, lumens .10,
                durability .10, tag_match .15
law-enforcement candela .25, impact .20, runtime_high .20, lumens .10,
                durability .10, tag_match .15
camping         runtime_medium .30, lumens .25, durability .15, weight .15,
                tag_match .15
search-rescue   beam .35, candela .25, runtime_high .15, durability .10,
                tag_match .15
weapon-mount    candela .30, impact .25, length .15, weight .15, tag_match .15
keychain        weight .35, length .30, lumens .10, runtime_medium .10,
                tag_match .15
==============  ===================================================================
"""

import math
import re

from intelligence_service.models import (
    BatteryPreference,
    CatalogItem,
    PreferenceQuery,
    SizeConstraint,
    UseCase,
)
from shared.constants import SIZE_BUCKETS_MM

# Scores for items whose attributes are unknown
UNKNOWN_PRICE_SCORE = 0.0
UNKNOWN_BATTERY_SCORE = 20.0
UNKNOWN_LENGTH_SCORE = 0.0

# Battery partial credit for a different but usable cell
COMPATIBLE_BATTERY_SCORE = 40.0

# Outside the requested size bucket: ceiling minus a per-millimetre penalty
SIZE_OUTSIDE_CEILING = 90.0
SIZE_DECAY_PER_MM = 1.5

USE_CASE_PROFILES: dict[UseCase, dict[str, float]] = {
    UseCase.EDC: {
        "runtime_medium": 0.25,
        "weight": 0.25,
        "lumens": 0.15,
        "length": 0.10,
        "durability": 0.10,
        "tag_match": 0.15,
    },
    UseCase.TACTICAL: {
        "candela": 0.30,
        "impact": 0.20,
        "runtime_high": 0.15,
        "lumens": 0.10,
        "durability": 0.10,
        "tag_match": 0.15,
    },
    UseCase.LAW_ENFORCEMENT: {
        "candela": 0.25,
        "impact": 0.20,
        "runtime_high": 0.20,
        "lumens": 0.10,
        "durability": 0.10,
        "tag_match": 0.15,
    },
    UseCase.CAMPING: {
        "runtime_medium": 0.30,
        "lumens": 0.25,
        "durability": 0.15,
        "weight": 0.15,
        "tag_match": 0.15,
    },
    UseCase.SEARCH_RESCUE: {
        "beam": 0.35,
        "candela": 0.25,
        "runtime_high": 0.15,
        "durability": 0.10,
        "tag_match": 0.15,
    },
    UseCase.WEAPON_MOUNT: {
        "candela": 0.30,
        "impact": 0.25,
        "length": 0.15,
        "weight": 0.15,
        "tag_match": 0.15,
    },
    UseCase.KEYCHAIN: {
        "weight": 0.35,
        "length": 0.30,
        "lumens": 0.10,
        "runtime_medium": 0.10,
        "tag_match": 0.15,
    },
}

# Ingress protection rating -> durability base component
_IP_COMPONENT = {
    "IPX4": 55.0,
    "IP54": 55.0,
    "IP64": 55.0,
    "IPX6": 70.0,
    "IP66": 70.0,
    "IPX7": 85.0,
    "IP67": 85.0,
    "IPX8": 95.0,
    "IP68": 95.0,
}
_IP_UNRATED = 30.0

# Lights built for these cells can also run the preferred one
# (21700 tubes take 18650 with a sleeve, 18650 tubes take 2x CR123A)
_COMPATIBLE_CELLS = {
    "18650": {"21700"},
    "21700": set(),
    "cr123a": {"18650", "16340", "rcr123a"},
    "proprietary": set(),
}


# =============================================================================
# Normalization helpers
# =============================================================================


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def normalize_higher_linear(value: float | None, floor: float, cap: float) -> float:
    """Linear 0-100 where larger is better. Missing -> 0."""
    if value is None or value <= 0 or cap <= floor:
        return 0.0
    return clamp((value - floor) / (cap - floor) * 100)


def normalize_higher_log(value: float | None, floor: float, cap: float) -> float:
    """Log-scaled 0-100 where larger is better. Missing -> 0."""
    if value is None or value <= 0 or floor <= 0 or cap <= floor:
        return 0.0
    ratio = (math.log(value) - math.log(floor)) / (math.log(cap) - math.log(floor))
    return clamp(ratio * 100)


def normalize_lower_linear(value: float | None, best: float, worst: float) -> float:
    """Linear 0-100 where smaller is better. Missing -> 0."""
    if value is None or value <= 0 or worst <= best:
        return 0.0
    return clamp((1 - (value - best) / (worst - best)) * 100)


def durability_score(waterproof_rating: str | None, impact_m: float | None) -> float:
    ip = _IP_COMPONENT.get((waterproof_rating or "").strip().upper(), _IP_UNRATED)
    impact = normalize_higher_linear(impact_m, 1, 3)
    return ip * 0.65 + impact * 0.35


def _tag_match(item: CatalogItem, use: UseCase) -> float:
    labels = {t.strip().lower() for t in item.tags}
    labels.add(item.category.strip().lower())
    return 100.0 if use.value in labels else 0.0


def attribute_scores(item: CatalogItem, use: UseCase) -> dict[str, float]:
    """Normalized 0-100 sub-scores for every attribute a use case can weigh."""
    return {
        "lumens": normalize_higher_log(item.max_lumens, 100, 5000),
        "candela": normalize_higher_log(item.max_candela, 1000, 120000),
        "beam": normalize_higher_log(item.beam_distance_m, 60, 700),
        "runtime_high": normalize_higher_log(item.runtime_high_min, 20, 300),
        "runtime_medium": normalize_higher_log(item.runtime_medium_min, 60, 900),
        "impact": normalize_higher_linear(item.impact_resistance_m, 1, 3),
        "durability": durability_score(item.waterproof_rating, item.impact_resistance_m),
        "weight": normalize_lower_linear(item.weight_g, 20, 400),
        "length": normalize_lower_linear(item.length_mm, 50, 250),
        "tag_match": _tag_match(item, use),
    }


# =============================================================================
# Dimension scorers
# =============================================================================


def use_case_score(item: CatalogItem, query: PreferenceQuery) -> float:
    weights = USE_CASE_PROFILES[query.intended_use]
    subs = attribute_scores(item, query.intended_use)
    return clamp(sum(subs[name] * weight for name, weight in weights.items()))


def budget_score(item: CatalogItem, query: PreferenceQuery) -> float:
    price = item.price_usd
    if price is None or not math.isfinite(price) or price <= 0:
        return UNKNOWN_PRICE_SCORE
    budget = float(query.budget_usd)
    if price <= budget:
        return 100.0
    return clamp(100 * budget / price)


# Cell formats inside labels such as "2x CR123A" or "1x 21700 (included)"
_CELL_TOKEN = re.compile(r"r?cr123a|(?<!\d)\d{5}(?!\d)|proprietary")


def _cell_codes(raw: str) -> set[str]:
    label = raw.lower().replace("-", "")
    found = set(_CELL_TOKEN.findall(label))
    return found or {"".join(ch for ch in label if ch.isalnum())}


def battery_match_score(item: CatalogItem, query: PreferenceQuery) -> float:
    preference = query.battery_preference
    if preference is BatteryPreference.ANY:
        return 100.0
    cells: set[str] = set()
    for label in item.battery_types:
        if label and label.strip():
            cells |= _cell_codes(label)
    if not cells:
        return UNKNOWN_BATTERY_SCORE
    if preference.value in cells:
        return 100.0
    if cells & _COMPATIBLE_CELLS[preference.value]:
        return COMPATIBLE_BATTERY_SCORE
    return 0.0


def size_fit_score(item: CatalogItem, query: PreferenceQuery) -> float:
    constraint = query.size_constraint
    if constraint is SizeConstraint.ANY:
        return 100.0
    length = item.length_mm
    if length is None or not math.isfinite(length) or length <= 0:
        return UNKNOWN_LENGTH_SCORE
    low, high = SIZE_BUCKETS_MM[constraint.value]
    if low <= length < high:
        return 100.0
    distance = low - length if length < low else length - high
    return clamp(SIZE_OUTSIDE_CEILING - SIZE_DECAY_PER_MM * distance)
