"""
Runtime configuration for the recommender and the API.

Values come from environment variables so deployments can point the API
at a different catalog without code changes.
"""

import os

# =============================================================================
# Catalog
# =============================================================================
DATABASE_URL = os.environ.get("FILM_QUIZ_DATABASE_URL", "sqlite:///data/movies.db")

# When true, a failing catalog query yields an empty candidate list instead of
# raising StoreUnavailable. The API keeps it off so faults surface as HTTP 500.
STORE_FAIL_SOFT = os.environ.get("FILM_QUIZ_STORE_FAIL_SOFT", "false").lower() == "true"

POLISH_COUNTRY_CODE = "PL"
MAX_KEYWORDS = 10

# =============================================================================
# Recommendation
# =============================================================================
DEFAULT_QUERY_LIMIT = 100  # store result cap when criteria leave it unset
SINGLE_PICK_POOL = 200  # candidates fetched for single-pick mode
OVERSAMPLE_FACTOR = 10  # batch mode fetches count * factor candidates
TOP_K = 10  # single pick draws from this many best-scored candidates

RANDOM_PICK_POOL = 100
RANDOM_PICK_MIN_RATING = 6.5

# =============================================================================
# API
# =============================================================================
DEFAULT_COUNT = int(os.environ.get("FILM_QUIZ_DEFAULT_COUNT", "10"))
MAX_COUNT = int(os.environ.get("FILM_QUIZ_MAX_COUNT", "50"))
