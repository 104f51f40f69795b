"""User progression state models"""
import math
from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from habit_progression.models.enums import ActivityCategory, StatType

MIN_STAT_VALUE = 1.0


def default_stats() -> dict[StatType, float]:
    """All six stats at the floor"""
    return {stat: MIN_STAT_VALUE for stat in StatType}


class UserState(BaseModel):
    """
    Progression snapshot for one user

    Engines never mutate an instance they are given; they return a copy.
    """
    level: int = Field(default=1, ge=1)
    current_exp: Decimal = Field(default=Decimal(0), ge=0)
    stats: dict[StatType, float] = Field(default_factory=default_stats)
    last_activity_date: dict[ActivityCategory, date] = Field(default_factory=dict)

    @field_validator('stats')
    @classmethod
    def fill_missing_stats(cls, v: dict[StatType, float]) -> dict[StatType, float]:
        """Ensure every stat type is present and no stored value is corrupted"""
        for stat, value in v.items():
            if not math.isfinite(value):
                raise ValueError(f"{stat.value} must be finite, got {value!r}")
            if value < MIN_STAT_VALUE:
                raise ValueError(f"{stat.value} must be at least {MIN_STAT_VALUE}, got {value!r}")
        filled = default_stats()
        filled.update(v)
        return filled

    @classmethod
    def initial(cls, stats: Optional[dict[StatType, float]] = None) -> "UserState":
        """Fresh state: level 1, no EXP, stats at floor (or onboarding values)"""
        return cls(stats=stats or default_stats())

    def get_stat(self, stat: StatType) -> float:
        return self.stats.get(stat, MIN_STAT_VALUE)
