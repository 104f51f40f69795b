"""
Activity Reversal

Undoes the combined stat and EXP effect of one logged activity.

Order of operations:
1. Work out the stat and EXP reversal (recorded values, or recomputed for
   legacy records)
2. Validate both against the loaded state; fail before touching anything
3. Subtract the stats (floor 1.0)
4. Subtract the EXP, cascading down levels as needed (floor level 1, 0 EXP)

Once step 2 passes, steps 3 and 4 cannot fail for finite inputs, so a
caller never sees a half-reversed state.
"""

from typing import Tuple
import logging

from habit_progression.exceptions import (
    InvalidDelta,
    InvalidDuration,
    InvalidStatValue,
    IrreversibleActivity,
)
from habit_progression.gamification.stat_system import StatEngine, negate
from habit_progression.gamification.xp_system import apply_exp_delta, calculate_exp_gain, to_exp
from habit_progression.models.activity import ActivityDescriptor
from habit_progression.models.progression import ReversalOutcome
from habit_progression.models.user import UserState

logger = logging.getLogger(__name__)


class ReversalCoordinator:
    """Composes the stat and level engines to undo an activity"""

    def __init__(self, stat_engine: StatEngine):
        self.stat_engine = stat_engine

    def undo_activity(
        self,
        state: UserState,
        activity: ActivityDescriptor
    ) -> Tuple[UserState, ReversalOutcome]:
        """
        Reverse one activity's stats and EXP

        Args:
            state: Current state (not modified)
            activity: The activity being deleted, with its recorded gains

        Returns:
            (new_state, ReversalOutcome)

        Raises:
            IrreversibleActivity: the reversal is not computable or not
                finite; nothing has been applied
        """
        activity_type = activity.activity_type.value

        try:
            stat_reversal = self.stat_engine.compute_reversal(
                activity.activity_type,
                activity.duration_minutes,
                activity.recorded_stat_gains
            )
        except InvalidDuration as e:
            raise IrreversibleActivity(
                message=f"Cannot recompute gains for legacy activity {activity.id}",
                activity_type=activity_type,
                reason="invalid_duration",
                operation="undo_activity",
                cause=e
            ) from e

        if not self.stat_engine.validate_reversal(state, stat_reversal):
            raise IrreversibleActivity(
                message=f"Stat reversal for activity {activity.id} is not valid",
                activity_type=activity_type,
                reason="invalid_stat_reversal",
                operation="undo_activity"
            )

        recorded_exp = activity.recorded_exp
        if recorded_exp is None:
            logger.warning(
                f"No recorded EXP for {activity_type} activity {activity.id} "
                f"({activity.duration_minutes} min), recomputing from current formulas"
            )
            recorded_exp = calculate_exp_gain(
                activity.activity_type,
                activity.duration_minutes,
                self.stat_engine.table
            )

        try:
            exp_to_remove = to_exp(recorded_exp)
        except InvalidDelta as e:
            raise IrreversibleActivity(
                message=f"Recorded EXP for activity {activity.id} is not finite",
                activity_type=activity_type,
                reason="invalid_exp",
                operation="undo_activity",
                cause=e
            ) from e

        if exp_to_remove < 0:
            raise IrreversibleActivity(
                message=f"Recorded EXP for activity {activity.id} is negative",
                activity_type=activity_type,
                reason="invalid_exp",
                operation="undo_activity"
            )

        try:
            state_after_stats = self.stat_engine.apply_gains(state, negate(stat_reversal))
        except InvalidStatValue as e:
            raise IrreversibleActivity(
                message=f"Stats for activity {activity.id} cannot be reversed from the loaded state",
                activity_type=activity_type,
                reason="invalid_state",
                operation="undo_activity",
                cause=e
            ) from e

        stats = dict(state_after_stats.stats)
        for stat in stat_reversal:
            stats[stat] = self.stat_engine.sanitize(stats[stat])
        state_after_stats = state_after_stats.model_copy(update={"stats": stats})

        state_after_exp, transition = apply_exp_delta(state_after_stats, exp_to_remove.copy_negate())

        outcome = ReversalOutcome(
            leveled_down=transition.leveled_down,
            levels_lost=transition.levels_changed if transition.leveled_down else 0,
            stat_deltas=stat_reversal,
            exp_removed=exp_to_remove,
        )

        logger.info(
            f"Reversed {activity_type} activity {activity.id}: "
            f"-{exp_to_remove} EXP, level {state.level} -> {state_after_exp.level}"
        )

        return state_after_exp, outcome
