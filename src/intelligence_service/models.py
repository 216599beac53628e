"""Domain models for preference-matched recommendation runs.

All models are frozen: catalog items are read-only snapshots of the
external catalog, and runs never change once persisted.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from shared.constants import RANKING_PROFILES

# =============================================================================
# Enums
# =============================================================================


class UseCase(str, PyEnum):
    """Intended use the buyer is shopping for."""

    EDC = "edc"
    TACTICAL = "tactical"
    LAW_ENFORCEMENT = "law-enforcement"
    CAMPING = "camping"
    SEARCH_RESCUE = "search-rescue"
    WEAPON_MOUNT = "weapon-mount"
    KEYCHAIN = "keychain"


class BatteryPreference(str, PyEnum):
    """Preferred cell format."""

    ANY = "any"
    B18650 = "18650"
    B21700 = "21700"
    CR123A = "cr123a"
    PROPRIETARY = "proprietary"


class SizeConstraint(str, PyEnum):
    """Preferred size bucket."""

    ANY = "any"
    POCKET = "pocket"
    COMPACT = "compact"
    FULL_SIZE = "full-size"


# =============================================================================
# Catalog
# =============================================================================


class CatalogItem(BaseModel):
    """A flashlight as published by the catalog service.

    The catalog exposes per-profile scores as sparse top-level fields
    (``tactical_score``, ``edc_score``, ...). They are folded into
    ``profile_scores`` on input.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: int
    brand: str
    name: str
    model: str | None = Field(None, validation_alias=AliasChoices("model", "model_code"))
    category: str = "general"
    tags: tuple[str, ...] = Field((), validation_alias=AliasChoices("tags", "use_case_tags"))
    image_url: str | None = None
    amazon_url: str | None = None

    price_usd: float | None = None
    weight_g: float | None = None
    length_mm: float | None = None
    battery_types: tuple[str, ...] = ()

    max_lumens: float | None = None
    max_candela: float | None = None
    beam_distance_m: float | None = None
    runtime_high_min: float | None = None
    runtime_medium_min: float | None = None
    waterproof_rating: str | None = None
    impact_resistance_m: float | None = None

    profile_scores: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def collect_profile_scores(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        scores = dict(data.get("profile_scores") or {})
        for profile in RANKING_PROFILES:
            value = data.get(f"{profile}_score")
            if value is not None:
                scores[profile] = value
        data = {k: v for k, v in data.items() if not k.endswith("_score")}
        data["profile_scores"] = scores
        return data


# =============================================================================
# Preferences and results
# =============================================================================


class PreferenceQuery(BaseModel):
    """Canonical, validated buyer intent."""

    model_config = ConfigDict(frozen=True)

    intended_use: UseCase = UseCase.EDC
    budget_usd: Decimal = Decimal("80.00")
    battery_preference: BatteryPreference = BatteryPreference.ANY
    size_constraint: SizeConstraint = SizeConstraint.ANY


class ScoredCandidate(BaseModel):
    """A catalog item with its four dimension scores and overall score."""

    model_config = ConfigDict(frozen=True)

    item: CatalogItem
    use_case_score: float = Field(..., ge=0, le=100)
    budget_score: float = Field(..., ge=0, le=100)
    battery_match_score: float = Field(..., ge=0, le=100)
    size_fit_score: float = Field(..., ge=0, le=100)
    overall_score: float = Field(..., ge=0, le=100)

    @property
    def item_id(self) -> int:
        return self.item.id


class RankedResult(BaseModel):
    """A ranked flashlight as published on a run."""

    model_id: int
    brand: str
    name: str
    model: str | None = None
    category: str
    image_url: str | None = None
    amazon_url: str | None = None
    price_usd: float | None = None
    max_lumens: float | None = None
    max_candela: float | None = None
    beam_distance_m: float | None = None
    runtime_high_min: float | None = None
    runtime_medium_min: float | None = None
    weight_g: float | None = None
    length_mm: float | None = None
    waterproof_rating: str | None = None
    battery_types: list[str] = Field(default_factory=list)
    profile_scores: dict[str, float] = Field(default_factory=dict)
    overall_score: float
    use_case_score: float
    budget_score: float
    battery_match_score: float
    size_fit_score: float

    @classmethod
    def from_candidate(cls, candidate: ScoredCandidate) -> "RankedResult":
        item = candidate.item
        return cls(
            model_id=item.id,
            brand=item.brand,
            name=item.name,
            model=item.model,
            category=item.category,
            image_url=item.image_url,
            amazon_url=item.amazon_url,
            price_usd=item.price_usd,
            max_lumens=item.max_lumens,
            max_candela=item.max_candela,
            beam_distance_m=item.beam_distance_m,
            runtime_high_min=item.runtime_high_min,
            runtime_medium_min=item.runtime_medium_min,
            weight_g=item.weight_g,
            length_mm=item.length_mm,
            waterproof_rating=item.waterproof_rating,
            battery_types=list(item.battery_types),
            profile_scores=dict(item.profile_scores),
            overall_score=candidate.overall_score,
            use_case_score=candidate.use_case_score,
            budget_score=candidate.budget_score,
            battery_match_score=candidate.battery_match_score,
            size_fit_score=candidate.size_fit_score,
        )


class Run(BaseModel):
    """Persisted, immutable record of one recommendation computation.

    ``top_results`` is the published result payload exactly as it was
    stored. It is rendered once through ``RankedResult`` at creation and
    never re-validated, so later model changes cannot alter old runs.
    """

    model_config = ConfigDict(frozen=True)

    run_id: int
    created_at: datetime
    query: PreferenceQuery
    algorithm_version: str
    top_results: tuple[dict[str, Any], ...] = ()