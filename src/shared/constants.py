"""Shared constants across the application."""

# Dimension weights for the overall score (must sum to 1.0)
DIMENSION_WEIGHTS = {
    "use_case": 0.55,
    "budget": 0.20,
    "battery": 0.15,
    "size": 0.10,
}

# Catalog-wide ranking profiles published by the catalog service
RANKING_PROFILES = [
    "tactical",
    "edc",
    "value",
    "throw",
    "flood",
]

# Default budget applied when the caller's budget is missing or invalid
DEFAULT_BUDGET_USD = "80.00"

# Larger budgets are clamped; no catalog item comes near it
MAX_BUDGET_USD = "100000.00"

# Result limits
DEFAULT_TOP_RESULTS = 5
MAX_TOP_RESULTS = 20

# Size buckets in millimetres, lower bound inclusive, upper bound exclusive
SIZE_BUCKETS_MM = {
    "pocket": (0.0, 120.0),
    "compact": (120.0, 150.0),
    "full-size": (150.0, float("inf")),
}

# Version tag pinned on every run
ALGORITHM_VERSION = "v2"
