"""Pydantic models for progression state and outcomes"""

from habit_progression.models.enums import (
    ActivityCategory,
    ActivityType,
    DegradationMode,
    DegradationSeverity,
    StatType,
)
from habit_progression.models.user import MIN_STAT_VALUE, UserState
from habit_progression.models.activity import ActivityDescriptor
from habit_progression.models.progression import (
    ActivityResult,
    DegradationResult,
    DegradationWarning,
    GainPreview,
    LevelTransition,
    ReversalOutcome,
    ReversalResult,
    StatValidationResult,
)

__all__ = [
    "ActivityCategory",
    "ActivityType",
    "DegradationMode",
    "DegradationSeverity",
    "StatType",
    "MIN_STAT_VALUE",
    "UserState",
    "ActivityDescriptor",
    "ActivityResult",
    "DegradationResult",
    "DegradationWarning",
    "GainPreview",
    "LevelTransition",
    "ReversalOutcome",
    "ReversalResult",
    "StatValidationResult",
]
