"""Read-only outcome models reported to UI/notification collaborators"""
from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from habit_progression.models.activity import ActivityDescriptor
from habit_progression.models.enums import (
    ActivityCategory,
    ActivityType,
    DegradationSeverity,
    StatType,
)
from habit_progression.models.user import UserState


class LevelTransition(BaseModel):
    """Result of applying an EXP delta"""
    leveled_up: bool = False
    leveled_down: bool = False
    levels_changed: int = Field(default=0, ge=0)
    final_level: int = Field(ge=1)
    final_exp: Decimal = Field(ge=0)


class ReversalOutcome(BaseModel):
    """Result of undoing one activity"""
    leveled_down: bool
    levels_lost: int = Field(ge=0)
    stat_deltas: dict[StatType, float]
    exp_removed: Decimal = Decimal(0)


class DegradationWarning(BaseModel):
    """
    Decay status for one category

    Recomputed on demand from last_activity_date; it has no identity of its
    own. penalty_applied is 0 while decay has not started yet.
    """
    category: ActivityCategory
    days_missed: int = Field(ge=0)
    penalty_applied: float = Field(le=0)
    affected_stats: list[StatType] = Field(default_factory=list)
    is_active: bool = False

    @property
    def severity(self) -> DegradationSeverity:
        if self.days_missed >= 10:
            return DegradationSeverity.CRITICAL
        if self.days_missed >= 6:
            return DegradationSeverity.HIGH
        if self.is_active:
            return DegradationSeverity.MEDIUM
        return DegradationSeverity.LOW

    @property
    def message(self) -> str:
        name = self.category.value.capitalize()
        if self.is_active:
            return f"{name}: {self.days_missed} days without activity - stats degrading!"
        return f"{name}: {self.days_missed} days without activity - degradation starts tomorrow!"


class GainPreview(BaseModel):
    """Expected gains for an activity, for display before logging"""
    activity_type: ActivityType
    duration_minutes: int
    stat_gains: dict[StatType, float]
    exp_gained: Decimal
    primary_stat: Optional[StatType] = None

    @property
    def affected_stats(self) -> list[StatType]:
        return [stat for stat, gain in self.stat_gains.items() if gain > 0]

    def gain_text(self, stat: StatType) -> str:
        gain = self.stat_gains.get(stat)
        if not gain:
            return ""
        return f"+{gain:.2f}"


class ActivityResult(BaseModel):
    """Result of logging an activity"""
    state: UserState
    activity: ActivityDescriptor
    transition: LevelTransition

    @property
    def leveled_up(self) -> bool:
        return self.transition.leveled_up


class ReversalResult(BaseModel):
    """Result of deleting (undoing) an activity"""
    state: UserState
    outcome: ReversalOutcome


class DegradationResult(BaseModel):
    """Result of applying degradation for one evaluation date"""
    state: UserState
    warnings: list[DegradationWarning]
    penalties: dict[StatType, float] = Field(default_factory=dict)
    evaluated_on: date


class StatValidationResult(BaseModel):
    """Outcome of checking stats against the safety envelope"""
    is_valid: bool
    has_warnings: bool = False
    message: str = ""
    sanitized_stats: dict[StatType, float] = Field(default_factory=dict)
    issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
