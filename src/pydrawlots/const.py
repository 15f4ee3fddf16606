"""Constants for the restaurant service and the draw policy."""

DEFAULT_API_URI = "api"
RESTAURANTS_ENDPOINT = "/restaurants"

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "pydrawlots",
}

RESTAURANTS_FILENAME = "restaurants.json"
HISTORY_FILENAME = "history.json"

TIERS = (1, 2, 3)
DRAW_MIN = 1
DRAW_MAX = 100
# Inclusive upper bounds of the draw value for tiers 1 and 2; tier 3 takes the rest.
TIER_1_MAX_DRAW = 85
TIER_2_MAX_DRAW = 95
