"""
Game variants and table settings.

- Pool: players are eliminated once their running total goes past the pool
  limit (101, 201 or 250); last one standing wins.
- Points: a single round; losers pay their points times the point value.
- Deals: a fixed number of rounds; lowest running total wins.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Variant(str, Enum):
    POOL = "pool"
    POINTS = "points"
    DEALS = "deals"


POOL_LIMITS = (101, 201, 250)


@dataclass
class GameConfig:
    """Rules for one game; penalties are in points."""

    variant: Variant = Variant.POOL
    pool_limit: int = 101
    number_of_deals: int = 2
    point_value: float = 1.0
    first_drop_penalty: int = 25
    middle_drop_penalty: int = 50
    invalid_declaration_penalty: int = 80
    max_round_points: int = 80

    def __post_init__(self) -> None:
        self.variant = Variant(self.variant)
        if self.variant == Variant.POOL and self.pool_limit <= 0:
            raise ValueError(f"pool_limit must be positive, got {self.pool_limit}")
        if self.variant == Variant.DEALS and self.number_of_deals < 1:
            raise ValueError(f"number_of_deals must be at least 1, got {self.number_of_deals}")

    @classmethod
    def pool(cls, limit: int = 101) -> "GameConfig":
        return cls(variant=Variant.POOL, pool_limit=limit)

    @classmethod
    def points(cls, point_value: float = 1.0) -> "GameConfig":
        return cls(variant=Variant.POINTS, point_value=point_value)

    @classmethod
    def deals(cls, number_of_deals: int = 2) -> "GameConfig":
        return cls(variant=Variant.DEALS, number_of_deals=number_of_deals)
