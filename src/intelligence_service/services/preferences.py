"""Preference normalization.

Turns raw query-string or form input into a canonical PreferenceQuery.
Invalid or missing values are replaced with defaults; this never raises.
"""

import math
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

import structlog

from intelligence_service.models import (
    BatteryPreference,
    PreferenceQuery,
    SizeConstraint,
    UseCase,
)
from shared.constants import DEFAULT_BUDGET_USD, MAX_BUDGET_USD

logger = structlog.get_logger()

E = TypeVar("E", bound=Enum)

CENTS = Decimal("0.01")


def _coerce_enum(raw: Any, enum_cls: type[E], default: E) -> E:
    if raw is None:
        return default
    value = str(raw).strip().lower()
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _coerce_budget(raw: Any) -> Decimal:
    default = Decimal(DEFAULT_BUDGET_USD)
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = float(str(raw).strip())
    except ValueError:
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    if value > float(MAX_BUDGET_USD):
        return Decimal(MAX_BUDGET_USD)
    try:
        budget = Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return default
    # Sub-cent budgets round to zero
    if budget <= 0:
        return default
    return budget


def normalize_preferences(raw: Mapping[str, Any] | None) -> PreferenceQuery:
    """Build a PreferenceQuery from untyped caller input."""
    raw = raw or {}
    query = PreferenceQuery(
        intended_use=_coerce_enum(raw.get("intended_use"), UseCase, UseCase.EDC),
        budget_usd=_coerce_budget(raw.get("budget_usd")),
        battery_preference=_coerce_enum(
            raw.get("battery_preference"), BatteryPreference, BatteryPreference.ANY
        ),
        size_constraint=_coerce_enum(
            raw.get("size_constraint"), SizeConstraint, SizeConstraint.ANY
        ),
    )

    substituted = [
        key
        for key, value in (
            ("intended_use", query.intended_use.value),
            ("battery_preference", query.battery_preference.value),
            ("size_constraint", query.size_constraint.value),
        )
        if raw.get(key) is not None and str(raw.get(key)).strip().lower() != value
    ]
    if substituted:
        logger.debug("Preference defaults substituted", fields=substituted)

    return query
