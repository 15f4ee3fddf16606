"""Tier-weighted random selection of a restaurant."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from .const import DRAW_MAX, DRAW_MIN, TIER_1_MAX_DRAW, TIER_2_MAX_DRAW, TIERS
from .exceptions import ValidationError
from .models import Restaurant, Selection
from .store import RestaurantStore

_LOGGER = logging.getLogger(__name__)


def tier_for_draw(value: int) -> int:
    """Map a draw in [1, 100] to its target tier (85/10/5 split)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Draw must be an integer.")
    if not DRAW_MIN <= value <= DRAW_MAX:
        raise ValidationError(f"Draw must be between {DRAW_MIN} and {DRAW_MAX}.")
    if value <= TIER_1_MAX_DRAW:
        return 1
    if value <= TIER_2_MAX_DRAW:
        return 2
    return 3


def choose_restaurant(
    restaurants: Sequence[Restaurant],
    draw: int,
    rng: random.Random,
) -> Restaurant | None:
    """Pick among the restaurants of the drawn tier, or among all if none match."""
    if not restaurants:
        return None
    target = tier_for_draw(draw)
    candidates = [restaurant for restaurant in restaurants if restaurant.rating == target]
    return rng.choice(candidates or list(restaurants))


def tier_distribution(restaurants: Sequence[Restaurant]) -> dict[int, float]:
    """Long-run probability of picking each tier from this list.

    Draw mass for a missing tier falls back to a uniform pick over the whole
    list, so it is spread by each tier's share of restaurants.
    """
    if not restaurants:
        return {tier: 0.0 for tier in TIERS}
    span = DRAW_MAX - DRAW_MIN + 1
    weights = {
        1: (TIER_1_MAX_DRAW - DRAW_MIN + 1) / span,
        2: (TIER_2_MAX_DRAW - TIER_1_MAX_DRAW) / span,
        3: (DRAW_MAX - TIER_2_MAX_DRAW) / span,
    }
    counts = {tier: 0 for tier in TIERS}
    for restaurant in restaurants:
        counts[restaurant.rating] += 1
    total = len(restaurants)
    missing_mass = sum(weights[tier] for tier in TIERS if counts[tier] == 0)
    return {
        tier: (weights[tier] if counts[tier] else 0.0) + missing_mass * counts[tier] / total
        for tier in TIERS
    }


class SelectionEngine:
    """Draws restaurants from a store and records each pick in its history."""

    def __init__(self, store: RestaurantStore, *, rng: random.Random | None = None) -> None:
        self._store = store
        self._rng = rng or random.Random()

    async def select(self) -> Selection | None:
        """Draw one restaurant and record it.

        Returns ``None`` when the store has no restaurants.
        """
        restaurants = self._store.restaurants
        if not restaurants:
            _LOGGER.debug("No restaurants available for selection")
            return None
        draw = self._rng.randint(DRAW_MIN, DRAW_MAX)
        restaurant = choose_restaurant(restaurants, draw, self._rng)
        record = await self._store.record_selection(restaurant)
        _LOGGER.debug("Draw %s selected restaurant %s", draw, restaurant.id)
        return Selection(
            restaurant=restaurant,
            record=record,
            draw=draw,
            target_tier=tier_for_draw(draw),
        )
