"""
Stat Progression System

Computes stat gains for logged activities, applies them, and undoes them.

Rules:
- Gains come from the injected StatFormulaTable (per hour, or fixed)
- No upper bound on growth, but every stored value must stay finite
- Reversal subtracts the recorded gains and never goes below the 1.0 floor
- sanitize() clamps to [1.0, SAFE_MAX] and is meant for storage, display
  and export boundaries, not for the growth formula itself
"""

import math
from typing import Dict, Iterable, List, Mapping, Optional
import logging

from habit_progression import config
from habit_progression.exceptions import InvalidDuration, InvalidStatValue
from habit_progression.gamification.stat_formulas import (
    DEFAULT_FORMULA_TABLE,
    StatFormulaTable,
)
from habit_progression.models.activity import ActivityDescriptor
from habit_progression.models.enums import ActivityType, StatType
from habit_progression.models.progression import StatValidationResult
from habit_progression.models.user import MIN_STAT_VALUE, UserState

logger = logging.getLogger(__name__)

LARGE_VALUE_WARNING = 100000.0

StatMap = Dict[StatType, float]


def negate(deltas: Mapping[StatType, float]) -> StatMap:
    """Flip the sign of every delta"""
    return {StatType(stat): -value for stat, value in deltas.items()}


class StatEngine:
    """
    Stat gain, sanitization and reversal logic

    Stateless apart from its formula table and safety limit, so one
    instance can serve any number of users.
    """

    def __init__(
        self,
        table: StatFormulaTable = DEFAULT_FORMULA_TABLE,
        safe_max: Optional[float] = None
    ):
        """
        Initialize StatEngine.

        Args:
            table: Formula table to compute gains from
            safe_max: Sanitizer upper bound (defaults to STAT_SAFE_MAX)
        """
        self.table = table
        self.safe_max = safe_max if safe_max is not None else config.STAT_SAFE_MAX

    # ==========================================
    # Gains
    # ==========================================

    def compute_gains(self, activity_type: ActivityType, duration_minutes: int) -> StatMap:
        """
        Calculate stat gains for an activity

        Args:
            activity_type: Type of activity
            duration_minutes: Duration; must be > 0 unless every rate of the
                activity is a fixed amount, in which case >= 0

        Returns:
            {stat: gain}

        Raises:
            InvalidDuration: duration out of range for this activity
        """
        activity_type = ActivityType(activity_type)
        formula = self.table[activity_type]

        if formula.is_fixed_amount:
            if duration_minutes < 0:
                raise InvalidDuration(
                    message="Duration must be non-negative",
                    duration_minutes=duration_minutes,
                    operation="compute_gains"
                )
        elif duration_minutes <= 0:
            raise InvalidDuration(
                message="Duration must be greater than 0 minutes",
                duration_minutes=duration_minutes,
                operation="compute_gains"
            )

        duration_hours = duration_minutes / 60.0
        gains: StatMap = {}
        for stat_rate in formula.rates:
            amount = stat_rate.rate if stat_rate.is_fixed_amount else stat_rate.rate * duration_hours
            gains[stat_rate.stat] = gains.get(stat_rate.stat, 0.0) + amount

        return gains

    def apply_gains(self, state: UserState, gains: Mapping[StatType, float]) -> UserState:
        """
        Add gains (or negative deltas) to a state's stats

        Args:
            state: Current state (not modified)
            gains: {stat: delta}

        Returns:
            New state with updated stats

        Raises:
            InvalidStatValue: a resulting value would be NaN or infinite;
                the caller's state keeps its last good values
        """
        stats = dict(state.stats)

        for stat, gain in gains.items():
            stat = StatType(stat)
            current = stats.get(stat, MIN_STAT_VALUE)
            new_value = current + gain

            if not math.isfinite(new_value):
                raise InvalidStatValue(
                    message=f"Applying {gain!r} to {stat.value}={current!r} gives a non-finite value",
                    stat=stat.value,
                    value=current,
                    operation="apply_gains"
                )

            stats[stat] = new_value

        return state.model_copy(update={"stats": stats})

    def total_gains(self, activities: Iterable[ActivityDescriptor]) -> StatMap:
        """Sum the gains of several activities (recorded gains preferred)"""
        totals: StatMap = {}
        for activity in activities:
            gains = self.compute_reversal(
                activity.activity_type,
                activity.duration_minutes,
                activity.recorded_stat_gains
            )
            for stat, gain in gains.items():
                totals[stat] = totals.get(stat, 0.0) + gain
        return totals

    # ==========================================
    # Formula introspection
    # ==========================================

    def gain_rates(self, activity_type: ActivityType) -> StatMap:
        """Gains for one hour of the activity"""
        return self.compute_gains(activity_type, 60)

    def affected_stats(self, activity_type: ActivityType) -> List[StatType]:
        return list(self.gain_rates(activity_type).keys())

    def primary_stat(self, activity_type: ActivityType) -> Optional[StatType]:
        """Stat with the highest one-hour gain"""
        primary = None
        max_gain = 0.0
        for stat, gain in self.gain_rates(activity_type).items():
            if gain > max_gain:
                max_gain = gain
                primary = stat
        return primary

    # ==========================================
    # Safety envelope
    # ==========================================

    def sanitize(self, value: float) -> float:
        """
        Clamp a stat value to [1.0, SAFE_MAX]

        NaN maps to 1.0, +inf to SAFE_MAX, -inf to 1.0.
        """
        if math.isnan(value):
            logger.error(f"NaN stat value detected, using minimum: {MIN_STAT_VALUE}")
            return MIN_STAT_VALUE

        if math.isinf(value):
            logger.error("Infinite stat value detected, clamping")
            return MIN_STAT_VALUE if value < 0 else self.safe_max

        if value < MIN_STAT_VALUE:
            return MIN_STAT_VALUE

        if value > self.safe_max:
            logger.warning(f"Extremely large stat value: {value}, clamping to {self.safe_max}")
            return self.safe_max

        return value

    def sanitize_stats(self, stats: Mapping[StatType, float]) -> StatMap:
        """Sanitize every stat, filling missing ones with the floor"""
        return {
            stat: self.sanitize(stats.get(stat, MIN_STAT_VALUE))
            for stat in StatType
        }

    def validate_stats(self, stats: Mapping[StatType, float]) -> StatValidationResult:
        """
        Check stats against the safety envelope

        NaN/infinite values are issues (invalid); values outside
        [1.0, SAFE_MAX] or above LARGE_VALUE_WARNING are warnings.
        """
        if not stats:
            return StatValidationResult(is_valid=False, message="Stats map is empty")

        issues: List[str] = []
        warnings: List[str] = []
        sanitized: StatMap = {}

        for stat, value in stats.items():
            stat = StatType(stat)
            if math.isnan(value):
                issues.append(f"{stat.value} has NaN value")
            elif math.isinf(value):
                issues.append(f"{stat.value} has infinite value")
            elif value < MIN_STAT_VALUE:
                warnings.append(f"{stat.value} below minimum ({value:.2f})")
            elif value > self.safe_max:
                warnings.append(f"{stat.value} extremely large ({value:.0f})")
            sanitized[stat] = self.sanitize(value)

        if max(sanitized.values()) > LARGE_VALUE_WARNING:
            warnings.append("Very large stat values may impact performance")

        if issues:
            return StatValidationResult(
                is_valid=False,
                has_warnings=bool(warnings),
                message=f"Critical validation issues: {', '.join(issues)}",
                sanitized_stats=sanitized,
                issues=issues,
                warnings=warnings,
            )

        return StatValidationResult(
            is_valid=True,
            has_warnings=bool(warnings),
            message=f"Validation warnings: {', '.join(warnings)}" if warnings else "",
            sanitized_stats=sanitized,
            warnings=warnings,
        )

    # ==========================================
    # Reversal
    # ==========================================

    def compute_reversal(
        self,
        activity_type: ActivityType,
        duration_minutes: int,
        recorded_gains: Optional[Mapping[StatType, float]] = None
    ) -> StatMap:
        """
        Stat amounts to take back when an activity is deleted

        Recorded gains are returned unchanged. Legacy records without them
        are recomputed from the current formulas, which can differ from
        what was actually granted if the formulas changed since.
        """
        if recorded_gains:
            return {StatType(stat): gain for stat, gain in recorded_gains.items()}

        logger.warning(
            f"No recorded gains for {ActivityType(activity_type).value} "
            f"({duration_minutes} min), recomputing from current formulas"
        )
        return self.compute_gains(activity_type, duration_minutes)

    def apply_reversal(self, state: UserState, reversal: Mapping[StatType, float]) -> UserState:
        """Subtract a reversal from the stats, flooring each at 1.0"""
        stats = dict(state.stats)
        for stat, amount in reversal.items():
            stat = StatType(stat)
            stats[stat] = max(MIN_STAT_VALUE, stats.get(stat, MIN_STAT_VALUE) - amount)
        return state.model_copy(update={"stats": stats})

    def validate_reversal(self, state: UserState, reversal: Mapping[StatType, float]) -> bool:
        """
        Check that a reversal can be applied

        False when any amount is NaN/infinite, or when the state has no
        finite value for a stat the reversal references.
        """
        for stat, amount in reversal.items():
            try:
                stat = StatType(stat)
            except ValueError:
                logger.warning(f"Reversal references unknown stat {stat!r}")
                return False

            if not isinstance(amount, (int, float)) or not math.isfinite(amount):
                logger.warning(f"Reversal amount for {stat.value} is not finite: {amount!r}")
                return False

            if stat not in state.stats:
                logger.warning(f"State has no {stat.value} stat to reverse")
                return False

            if not math.isfinite(state.stats[stat]):
                logger.warning(f"State value for {stat.value} is not finite: {state.stats[stat]!r}")
                return False

        return True
