"""Unit tests for the dimension scorers."""

from decimal import Decimal
from typing import Any

import pytest

from intelligence_service.models import CatalogItem, PreferenceQuery, UseCase
from intelligence_service.services.scorers import (
    COMPATIBLE_BATTERY_SCORE,
    UNKNOWN_BATTERY_SCORE,
    UNKNOWN_LENGTH_SCORE,
    UNKNOWN_PRICE_SCORE,
    USE_CASE_PROFILES,
    attribute_scores,
    battery_match_score,
    budget_score,
    durability_score,
    normalize_higher_linear,
    normalize_higher_log,
    normalize_lower_linear,
    size_fit_score,
    use_case_score,
)


def make_item(**overrides: Any) -> CatalogItem:
    data: dict[str, Any] = {"id": 1, "brand": "Acme", "name": "Test Light"}
    data.update(overrides)
    return CatalogItem(**data)


def make_query(**overrides: Any) -> PreferenceQuery:
    return PreferenceQuery(**overrides)


class TestNormalization:
    """Attribute normalization helpers."""

    def test_higher_log_bounds(self) -> None:
        assert normalize_higher_log(5000, 100, 5000) == pytest.approx(100)
        assert normalize_higher_log(100, 100, 5000) == pytest.approx(0)
        assert normalize_higher_log(50_000, 100, 5000) == 100
        assert normalize_higher_log(10, 100, 5000) == 0

    def test_higher_log_is_monotonic(self) -> None:
        assert normalize_higher_log(500, 100, 5000) < normalize_higher_log(1500, 100, 5000)

    def test_higher_linear_midpoint(self) -> None:
        assert normalize_higher_linear(2, 1, 3) == pytest.approx(50)

    def test_lower_linear(self) -> None:
        assert normalize_lower_linear(20, 20, 400) == pytest.approx(100)
        assert normalize_lower_linear(210, 20, 400) == pytest.approx(50)
        assert normalize_lower_linear(800, 20, 400) == 0

    @pytest.mark.parametrize("value", [None, 0, -3])
    def test_missing_values_score_zero(self, value: float | None) -> None:
        assert normalize_higher_log(value, 100, 5000) == 0
        assert normalize_higher_linear(value, 1, 3) == 0
        assert normalize_lower_linear(value, 20, 400) == 0

    def test_durability_blends_ip_rating_and_impact(self) -> None:
        assert durability_score("IPX8", 3) == pytest.approx(96.75)
        assert durability_score("ip67", None) == pytest.approx(85 * 0.65)
        assert durability_score(None, None) == pytest.approx(30 * 0.65)


class TestUseCaseScore:
    """Use-case fit from weighted attribute sub-scores."""

    def test_profiles_cover_every_use_case(self) -> None:
        assert set(USE_CASE_PROFILES) == set(UseCase)

    @pytest.mark.parametrize("use", list(UseCase))
    def test_profile_weights_sum_to_one(self, use: UseCase) -> None:
        assert sum(USE_CASE_PROFILES[use].values()) == pytest.approx(1.0)

    @pytest.mark.parametrize("use", list(UseCase))
    def test_profile_only_weighs_known_attributes(self, use: UseCase) -> None:
        known = set(attribute_scores(make_item(), use))
        assert set(USE_CASE_PROFILES[use]) <= known

    def test_tag_match_uses_tags_and_category(self) -> None:
        tagged = make_item(tags=["tactical"])
        categorized = make_item(category="Tactical")
        plain = make_item()
        assert attribute_scores(tagged, UseCase.TACTICAL)["tag_match"] == 100
        assert attribute_scores(categorized, UseCase.TACTICAL)["tag_match"] == 100
        assert attribute_scores(plain, UseCase.TACTICAL)["tag_match"] == 0

    def test_bare_item_scores_in_range(self) -> None:
        for use in UseCase:
            score = use_case_score(make_item(), make_query(intended_use=use))
            assert 0 <= score <= 100

    def test_throw_beats_flood_for_search_rescue(self) -> None:
        thrower = make_item(id=1, max_candela=110_000, beam_distance_m=660, runtime_high_min=150)
        flooder = make_item(id=2, max_candela=4_000, beam_distance_m=120, runtime_high_min=150)
        query = make_query(intended_use="search-rescue")
        assert use_case_score(thrower, query) > use_case_score(flooder, query)

    def test_light_short_item_wins_for_keychain(self) -> None:
        small = make_item(id=1, weight_g=25, length_mm=60)
        large = make_item(id=2, weight_g=300, length_mm=200)
        query = make_query(intended_use="keychain")
        assert use_case_score(small, query) > use_case_score(large, query)


class TestBudgetScore:
    """Budget fit."""

    def test_within_budget_scores_full(self) -> None:
        item = make_item(price_usd=45)
        assert budget_score(item, make_query(budget_usd=Decimal("50.00"))) == 100

    def test_price_equal_to_budget_scores_full(self) -> None:
        item = make_item(price_usd=50)
        assert budget_score(item, make_query(budget_usd=Decimal("50.00"))) == 100

    def test_over_budget_scales_down(self) -> None:
        item = make_item(price_usd=100)
        assert budget_score(item, make_query(budget_usd=Decimal("50.00"))) == pytest.approx(50)

    def test_unknown_price(self) -> None:
        assert budget_score(make_item(), make_query()) == UNKNOWN_PRICE_SCORE

    @pytest.mark.parametrize("price", [10, 45, 80, 150, 999])
    def test_lowering_budget_never_raises_score(self, price: float) -> None:
        item = make_item(price_usd=price)
        budgets = [Decimal(b) for b in ("500.00", "120.00", "80.00", "50.00", "5.00", "0.01")]
        scores = [budget_score(item, make_query(budget_usd=b)) for b in budgets]
        assert scores == sorted(scores, reverse=True)


class TestBatteryMatchScore:
    """Battery preference fit."""

    def test_any_preference_scores_full(self) -> None:
        for item in (make_item(), make_item(battery_types=["proprietary"])):
            assert battery_match_score(item, make_query(battery_preference="any")) == 100

    def test_direct_support(self) -> None:
        item = make_item(battery_types=["18650", "CR123A"])
        assert battery_match_score(item, make_query(battery_preference="cr123a")) == 100

    def test_cell_codes_ignore_case_and_punctuation(self) -> None:
        item = make_item(battery_types=["CR-123A"])
        assert battery_match_score(item, make_query(battery_preference="cr123a")) == 100

    @pytest.mark.parametrize(
        ("label", "preference"),
        [
            ("2x CR123A", "cr123a"),
            ("18650 Li-ion", "18650"),
            ("1x 21700 (included)", "21700"),
            ("21700 / 18650", "18650"),
            ("Proprietary pack", "proprietary"),
        ],
    )
    def test_cell_found_inside_descriptive_label(self, label: str, preference: str) -> None:
        item = make_item(battery_types=[label])
        assert battery_match_score(item, make_query(battery_preference=preference)) == 100

    def test_adjacent_numbers_do_not_form_a_cell(self) -> None:
        item = make_item(battery_types=["1 18650"])
        assert battery_match_score(item, make_query(battery_preference="18650")) == 100
        assert battery_match_score(item, make_query(battery_preference="21700")) == 0

    def test_compatible_cell_in_descriptive_label(self) -> None:
        item = make_item(battery_types=["1x 21700 (included)"])
        query = make_query(battery_preference="18650")
        assert battery_match_score(item, query) == COMPATIBLE_BATTERY_SCORE

    def test_compatible_cell_gets_partial_credit(self) -> None:
        item = make_item(battery_types=["21700"])
        query = make_query(battery_preference="18650")
        assert battery_match_score(item, query) == COMPATIBLE_BATTERY_SCORE

    def test_smaller_cell_is_not_compatible(self) -> None:
        item = make_item(battery_types=["18650"])
        assert battery_match_score(item, make_query(battery_preference="21700")) == 0

    def test_known_types_excluding_preference(self) -> None:
        item = make_item(battery_types=["AA"])
        assert battery_match_score(item, make_query(battery_preference="proprietary")) == 0

    def test_unknown_battery_types(self) -> None:
        query = make_query(battery_preference="21700")
        assert battery_match_score(make_item(), query) == UNKNOWN_BATTERY_SCORE
        assert battery_match_score(make_item(battery_types=[" "]), query) == UNKNOWN_BATTERY_SCORE


class TestSizeFitScore:
    """Size bucket fit."""

    def test_any_constraint_scores_full(self) -> None:
        assert size_fit_score(make_item(), make_query(size_constraint="any")) == 100

    @pytest.mark.parametrize(
        ("length", "constraint"),
        [(110, "pocket"), (119.9, "pocket"), (120, "compact"), (149, "compact"), (150, "full-size"), (240, "full-size")],
    )
    def test_inside_bucket_scores_full(self, length: float, constraint: str) -> None:
        item = make_item(length_mm=length)
        assert size_fit_score(item, make_query(size_constraint=constraint)) == 100

    def test_outside_bucket_decays_with_distance(self) -> None:
        query = make_query(size_constraint="pocket")
        assert size_fit_score(make_item(length_mm=130), query) == pytest.approx(75)
        assert size_fit_score(make_item(length_mm=150), query) == pytest.approx(45)
        assert size_fit_score(make_item(length_mm=200), query) == 0

    def test_shorter_than_bucket_also_decays(self) -> None:
        query = make_query(size_constraint="compact")
        assert size_fit_score(make_item(length_mm=100), query) == pytest.approx(60)

    def test_unknown_length(self) -> None:
        query = make_query(size_constraint="pocket")
        assert size_fit_score(make_item(), query) == UNKNOWN_LENGTH_SCORE
