"""
Stat Degradation System

Decays workout and study stats when those categories are neglected.

Rules:
- Active: fewer than 3 days since the last activity, no penalty
- Decaying: -0.01 per full 3-day period missed, capped at -0.05 per
  application (the cap is per call, not cumulative)
- Workout decays Strength, Agility, Endurance; Study decays Intelligence,
  Focus. Charisma never decays. EXP and level never decay.
- Stats never drop below 1.0
- Strict mode counts every calendar day; relaxed mode skips weekends
- A warning is raised one day before decay begins

Everything here is a pure function of (today, last activity dates, mode).
Calling twice with the same inputs gives the same answer; recording that a
penalty was already applied for the current window (e.g. by refreshing the
last activity date) is the caller's job.
"""

from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Tuple, Union
import logging

from habit_progression import config
from habit_progression.models.enums import (
    ActivityCategory,
    ActivityType,
    DegradationMode,
    StatType,
)
from habit_progression.models.progression import DegradationWarning
from habit_progression.models.user import MIN_STAT_VALUE, UserState
from habit_progression.utils.datetime_helpers import (
    DateLike,
    add_weekdays,
    days_between,
    to_date,
    weekdays_between,
)

logger = logging.getLogger(__name__)

DEGRADATION_THRESHOLD_DAYS = 3
DEGRADATION_PER_PERIOD = -0.01
MAX_DEGRADATION_PER_APPLICATION = -0.05

CATEGORY_STATS: Dict[ActivityCategory, Tuple[StatType, ...]] = {
    ActivityCategory.WORKOUT: (StatType.STRENGTH, StatType.AGILITY, StatType.ENDURANCE),
    ActivityCategory.STUDY: (StatType.INTELLIGENCE, StatType.FOCUS),
    ActivityCategory.OTHER: (),
}

DEGRADING_CATEGORIES = (ActivityCategory.WORKOUT, ActivityCategory.STUDY)

ModeLike = Union[DegradationMode, str, None]


def resolve_mode(mode: ModeLike = None) -> DegradationMode:
    """Use the given mode, or DEGRADATION_MODE from config"""
    if mode is None:
        mode = config.DEGRADATION_MODE
    return DegradationMode(mode)


def days_since_last_activity(
    last_activity: DateLike,
    today: DateLike,
    mode: ModeLike = None
) -> int:
    """
    Calendar days missed since the last activity

    Args:
        last_activity: Date of the last qualifying activity
        today: Evaluation date
        mode: strict (all days) or relaxed (weekdays only)

    Returns:
        Days missed (0 if the activity is today or in the future)
    """
    if resolve_mode(mode) == DegradationMode.RELAXED:
        return weekdays_between(last_activity, today)
    return days_between(last_activity, today)


def calculate_penalty(days_missed: int) -> float:
    """
    Penalty per affected stat for a given number of days missed

    Returns:
        0.0 below the threshold, else max(-0.01 * floor(days / 3), -0.05)
    """
    if days_missed < DEGRADATION_THRESHOLD_DAYS:
        return 0.0

    periods_missed = days_missed // DEGRADATION_THRESHOLD_DAYS
    raw_penalty = round(DEGRADATION_PER_PERIOD * periods_missed, 2)
    return max(raw_penalty, MAX_DEGRADATION_PER_APPLICATION)


def affected_stats_for(category: ActivityCategory) -> List[StatType]:
    return list(CATEGORY_STATS[ActivityCategory(category)])


def evaluate_degradation(
    last_activity_date: Mapping[ActivityCategory, DateLike],
    today: DateLike,
    mode: ModeLike = None
) -> List[DegradationWarning]:
    """
    Degradation status for every decaying category

    Logic:
    - No recorded activity for a category: nothing to warn about
    - 2 days missed: warning only (decay starts tomorrow), penalty 0
    - 3+ days missed: active warning carrying the penalty

    Returns:
        List of DegradationWarning (workout first, then study)
    """
    warnings = []

    for category in DEGRADING_CATEGORIES:
        last_date = last_activity_date.get(category)
        if last_date is None:
            continue

        days_missed = days_since_last_activity(last_date, today, mode)
        if days_missed < DEGRADATION_THRESHOLD_DAYS - 1:
            continue

        warnings.append(DegradationWarning(
            category=category,
            days_missed=days_missed,
            penalty_applied=calculate_penalty(days_missed),
            affected_stats=affected_stats_for(category),
            is_active=days_missed >= DEGRADATION_THRESHOLD_DAYS,
        ))

    return warnings


def calculate_all_degradation(
    state: UserState,
    today: DateLike,
    mode: ModeLike = None
) -> Dict[StatType, float]:
    """
    Penalty per stat for a user state

    Returns:
        {stat: penalty} for every stat that should decay (empty if none)
    """
    penalties: Dict[StatType, float] = {}
    for warning in evaluate_degradation(state.last_activity_date, today, mode):
        if warning.penalty_applied < 0:
            for stat in warning.affected_stats:
                penalties[stat] = warning.penalty_applied
    return penalties


def apply_degradation(
    state: UserState,
    today: DateLike,
    mode: ModeLike = None
) -> Tuple[UserState, List[DegradationWarning]]:
    """
    Apply decay to a state

    Leaves level, EXP and last_activity_date untouched.

    Args:
        state: Current state (not modified)
        today: Evaluation date
        mode: Weekend handling (defaults to config)

    Returns:
        (new_state, warnings)
    """
    warnings = evaluate_degradation(state.last_activity_date, today, mode)
    stats = dict(state.stats)
    decayed = False

    for warning in warnings:
        if warning.penalty_applied >= 0:
            continue

        for stat in warning.affected_stats:
            current = stats.get(stat, MIN_STAT_VALUE)
            stats[stat] = max(MIN_STAT_VALUE, current + warning.penalty_applied)
        decayed = True

        logger.info(
            f"{warning.category.value.capitalize()} degradation: {warning.days_missed} days missed, "
            f"{warning.penalty_applied} to {', '.join(s.value for s in warning.affected_stats)}"
        )

    if not decayed:
        return state, warnings

    return state.model_copy(update={"stats": stats}), warnings


def has_pending_degradation(
    state: UserState,
    today: DateLike,
    mode: ModeLike = None
) -> bool:
    return bool(calculate_all_degradation(state, today, mode))


def next_degradation_date(
    last_activity_date: Mapping[ActivityCategory, DateLike],
    category: ActivityCategory,
    mode: ModeLike = None
) -> Optional[date]:
    """
    First date on which the category starts decaying

    Returns:
        Date, or None when the category has no recorded activity
    """
    last_date = last_activity_date.get(ActivityCategory(category))
    if last_date is None:
        return None

    if resolve_mode(mode) == DegradationMode.RELAXED:
        return add_weekdays(last_date, DEGRADATION_THRESHOLD_DAYS)
    return to_date(last_date) + timedelta(days=DEGRADATION_THRESHOLD_DAYS)


def refresh_last_activity(
    state: UserState,
    activity_type: ActivityType,
    activity_date: DateLike
) -> UserState:
    """
    Reset the degradation timer for an activity's category

    Only workout and study are tracked. An older date never replaces a
    newer one (back-dated logs do not rewind the timer).

    Returns:
        New state (or the same one if nothing changed)
    """
    category = ActivityType(activity_type).category
    if category not in DEGRADING_CATEGORIES:
        return state

    new_date = to_date(activity_date)
    current = state.last_activity_date.get(category)
    if current is not None and to_date(current) >= new_date:
        return state

    dates = dict(state.last_activity_date)
    dates[category] = new_date
    return state.model_copy(update={"last_activity_date": dates})
