"""Enumerations shared by the progression models"""
from enum import Enum


class ActivityCategory(str, Enum):
    """Activity categories (only workout and study degrade)"""
    WORKOUT = "workout"
    STUDY = "study"
    OTHER = "other"


class StatType(str, Enum):
    """The six progression attributes"""
    STRENGTH = "strength"
    AGILITY = "agility"
    ENDURANCE = "endurance"
    INTELLIGENCE = "intelligence"
    FOCUS = "focus"
    CHARISMA = "charisma"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class ActivityType(str, Enum):
    """Loggable activity types"""
    WORKOUT_WEIGHTS = "workout_weights"
    WORKOUT_CARDIO = "workout_cardio"
    WORKOUT_YOGA = "workout_yoga"
    STUDY_SERIOUS = "study_serious"
    STUDY_CASUAL = "study_casual"
    MEDITATION = "meditation"
    SOCIALIZING = "socializing"
    QUIT_BAD_HABIT = "quit_bad_habit"
    SLEEP_TRACKING = "sleep_tracking"
    DIET_HEALTHY = "diet_healthy"

    @property
    def display_name(self) -> str:
        return _ACTIVITY_DISPLAY_NAMES[self]

    @property
    def category(self) -> ActivityCategory:
        return _ACTIVITY_CATEGORIES.get(self, ActivityCategory.OTHER)


class DegradationMode(str, Enum):
    """Weekend handling when counting days missed"""
    STRICT = "strict"    # weekends count like any other day
    RELAXED = "relaxed"  # Saturdays and Sundays are skipped


class DegradationSeverity(str, Enum):
    """Severity of a degradation warning"""
    LOW = "low"            # decay starts tomorrow
    MEDIUM = "medium"      # decay just started
    HIGH = "high"          # decaying for several days
    CRITICAL = "critical"  # long-term neglect


_ACTIVITY_DISPLAY_NAMES = {
    ActivityType.WORKOUT_WEIGHTS: "Workout - Weights",
    ActivityType.WORKOUT_CARDIO: "Workout - Cardio",
    ActivityType.WORKOUT_YOGA: "Workout - Yoga/Flexibility",
    ActivityType.STUDY_SERIOUS: "Study - Serious",
    ActivityType.STUDY_CASUAL: "Study - Casual",
    ActivityType.MEDITATION: "Meditation/Mindfulness",
    ActivityType.SOCIALIZING: "Socializing",
    ActivityType.QUIT_BAD_HABIT: "Quit Bad Habit",
    ActivityType.SLEEP_TRACKING: "Sleep Tracking",
    ActivityType.DIET_HEALTHY: "Diet/Healthy Eating",
}

_ACTIVITY_CATEGORIES = {
    ActivityType.WORKOUT_WEIGHTS: ActivityCategory.WORKOUT,
    ActivityType.WORKOUT_CARDIO: ActivityCategory.WORKOUT,
    ActivityType.WORKOUT_YOGA: ActivityCategory.WORKOUT,
    ActivityType.STUDY_SERIOUS: ActivityCategory.STUDY,
    ActivityType.STUDY_CASUAL: ActivityCategory.STUDY,
}
