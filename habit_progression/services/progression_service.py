"""
ProgressionService - Progression Business Logic

Composes the EXP, stat, degradation and reversal engines into the flows a
host application calls: log an activity, delete one, preview gains, run
degradation, migrate legacy records, reset.

Storage is not handled here. Callers load a UserState, pass it in, and
persist the returned state (plus each activity's recorded gains and EXP)
unchanged. Only one call per user should be in flight at a time.
"""

import logging
from datetime import datetime
from typing import List, Optional

from habit_progression import config
from habit_progression.exceptions import InvalidDuration, ProgressionError
from habit_progression.gamification.degradation_system import (
    ModeLike,
    apply_degradation,
    evaluate_degradation,
    refresh_last_activity,
)
from habit_progression.gamification.reversal import ReversalCoordinator
from habit_progression.gamification.stat_formulas import (
    DEFAULT_FORMULA_TABLE,
    StatFormulaTable,
)
from habit_progression.gamification.stat_system import StatEngine
from habit_progression.gamification.xp_system import apply_exp_delta, calculate_exp_gain
from habit_progression.models.activity import ActivityDescriptor
from habit_progression.models.enums import ActivityType, StatType
from habit_progression.models.progression import (
    ActivityResult,
    DegradationResult,
    DegradationWarning,
    GainPreview,
    ReversalResult,
)
from habit_progression.models.user import UserState
from habit_progression.observability import metrics
from habit_progression.utils.datetime_helpers import DateLike, to_date

logger = logging.getLogger(__name__)


class ProgressionService:
    """
    Service for progression features.

    Responsibilities:
    - Activity logging (stat gains + EXP + level-ups)
    - Activity deletion (exact reversal, level-downs)
    - Gain previews
    - Degradation evaluation and application
    - Legacy activity migration and progress reset
    """

    def __init__(
        self,
        table: StatFormulaTable = DEFAULT_FORMULA_TABLE,
        degradation_mode: ModeLike = None,
        max_activity_minutes: Optional[int] = None
    ):
        """
        Initialize ProgressionService.

        Args:
            table: Formula table (custom increments go here)
            degradation_mode: strict/relaxed (defaults to DEGRADATION_MODE)
            max_activity_minutes: Upper duration bound (defaults to MAX_ACTIVITY_MINUTES)
        """
        self.table = table
        self.stat_engine = StatEngine(table)
        self.reversal = ReversalCoordinator(self.stat_engine)
        self.degradation_mode = degradation_mode
        self.max_activity_minutes = max_activity_minutes or config.MAX_ACTIVITY_MINUTES
        logger.debug("ProgressionService initialized")

    def validate_duration(self, duration_minutes: int) -> None:
        """
        Validate user-entered duration

        Raises:
            InvalidDuration: not in (0, max_activity_minutes]
        """
        if duration_minutes <= 0:
            raise InvalidDuration(
                message="Duration must be greater than 0 minutes",
                duration_minutes=duration_minutes,
                operation="validate_duration"
            )
        if duration_minutes > self.max_activity_minutes:
            raise InvalidDuration(
                message=(
                    f"Duration cannot exceed {self.max_activity_minutes // 60} hours "
                    f"({self.max_activity_minutes} minutes)"
                ),
                duration_minutes=duration_minutes,
                operation="validate_duration"
            )

    def preview_gains(self, activity_type: ActivityType, duration_minutes: int) -> GainPreview:
        """Expected stat gains and EXP, without changing anything"""
        self.validate_duration(duration_minutes)
        activity_type = ActivityType(activity_type)

        return GainPreview(
            activity_type=activity_type,
            duration_minutes=duration_minutes,
            stat_gains=self.stat_engine.compute_gains(activity_type, duration_minutes),
            exp_gained=calculate_exp_gain(activity_type, duration_minutes, self.table),
            primary_stat=self.stat_engine.primary_stat(activity_type),
        )

    def log_activity(
        self,
        state: UserState,
        activity_type: ActivityType,
        duration_minutes: int,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None
    ) -> ActivityResult:
        """
        Apply an activity to a user state.

        Args:
            state: Current state (not modified)
            activity_type: Type of activity
            duration_minutes: Duration in minutes
            timestamp: When the activity happened (defaults to now)
            notes: Optional user notes

        Returns:
            ActivityResult with the new state, the activity record to
            persist (with recorded gains and EXP) and the level transition

        Raises:
            InvalidDuration, InvalidStatValue, InvalidDelta: nothing applied
        """
        activity_type = ActivityType(activity_type)
        timestamp = timestamp or datetime.now()

        try:
            self.validate_duration(duration_minutes)

            stat_gains = self.stat_engine.compute_gains(activity_type, duration_minutes)
            exp_gain = calculate_exp_gain(activity_type, duration_minutes, self.table)

            state_after_stats = self.stat_engine.apply_gains(state, stat_gains)
            state_after_exp, transition = apply_exp_delta(state_after_stats, exp_gain)
            new_state = refresh_last_activity(state_after_exp, activity_type, timestamp)
        except ProgressionError as e:
            metrics.track_error(type(e).__name__)
            raise

        activity = ActivityDescriptor(
            activity_type=activity_type,
            duration_minutes=duration_minutes,
            recorded_stat_gains=stat_gains,
            recorded_exp=exp_gain,
            timestamp=timestamp,
            notes=notes,
        )

        metrics.track_activity_logged(activity_type.value)
        metrics.track_level_change("up", transition.levels_changed)

        logger.info(
            f"Logged {activity_type.value} ({duration_minutes} min): +{exp_gain} EXP, "
            f"level {state.level} -> {new_state.level}"
        )

        return ActivityResult(state=new_state, activity=activity, transition=transition)

    def delete_activity(self, state: UserState, activity: ActivityDescriptor) -> ReversalResult:
        """
        Undo a previously logged activity.

        last_activity_date is left alone: deleting an activity does not
        restart a degradation window.

        Raises:
            IrreversibleActivity: nothing applied
        """
        try:
            new_state, outcome = self.reversal.undo_activity(state, activity)
        except ProgressionError as e:
            metrics.track_error(type(e).__name__)
            raise

        metrics.track_activity_reversed(activity.activity_type.value)
        metrics.track_level_change("down", outcome.levels_lost)

        return ReversalResult(state=new_state, outcome=outcome)

    def get_degradation_warnings(self, state: UserState, today: DateLike) -> List[DegradationWarning]:
        """Warnings for the UI; does not change the state"""
        return evaluate_degradation(state.last_activity_date, today, self.degradation_mode)

    def apply_degradation(self, state: UserState, today: DateLike) -> DegradationResult:
        """
        Apply decay for the evaluation date.

        Calling this twice for the same window double-applies the penalty;
        the caller records that the window has been handled.
        """
        new_state, warnings = apply_degradation(state, today, self.degradation_mode)

        penalties = {}
        for warning in warnings:
            if warning.penalty_applied < 0:
                metrics.track_degradation(warning.category.value)
                for stat in warning.affected_stats:
                    penalties[stat] = warning.penalty_applied

        return DegradationResult(
            state=new_state,
            warnings=warnings,
            penalties=penalties,
            evaluated_on=to_date(today),
        )

    def migrate_activity(self, activity: ActivityDescriptor) -> ActivityDescriptor:
        """
        Fill in recorded gains and EXP for a legacy activity record

        Uses the current formulas, so the result is only as accurate as
        those formulas are for the time the activity was logged.
        """
        if not activity.needs_migration:
            return activity

        update = {}
        if activity.needs_stat_gain_migration:
            update["recorded_stat_gains"] = self.stat_engine.compute_reversal(
                activity.activity_type,
                activity.duration_minutes
            )
        if not activity.has_stored_exp:
            update["recorded_exp"] = calculate_exp_gain(
                activity.activity_type,
                activity.duration_minutes,
                self.stat_engine.table
            )

        logger.info(f"Migrated {', '.join(update)} for legacy activity {activity.id}")
        return activity.model_copy(update=update)

    def sanitize_state(self, state: UserState) -> UserState:
        """Clamp every stat into the safety envelope (storage/export boundary)"""
        return state.model_copy(update={"stats": self.stat_engine.sanitize_stats(state.stats)})

    def reset_progress(self, stats: Optional[dict[StatType, float]] = None) -> UserState:
        """Back to level 1, 0 EXP, stats at the floor (or the given ones)"""
        logger.info("Progress reset")
        return UserState.initial(stats)
