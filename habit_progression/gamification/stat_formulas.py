"""
Stat Formula Table

Maps every activity type to the stats it grows and the EXP it grants.

Default ruleset (per hour unless marked fixed):
- Workout - Weights:  Strength 0.06, Endurance 0.04
- Workout - Cardio:   Agility 0.06, Endurance 0.04
- Workout - Yoga:     Agility 0.05, Focus 0.03
- Study - Serious:    Intelligence 0.06, Focus 0.04
- Study - Casual:     Intelligence 0.04, Charisma 0.03
- Meditation:         Focus 0.05
- Socializing:        Charisma 0.05, Focus 0.02
- Sleep Tracking:     Endurance 0.02
- Diet/Healthy:       Endurance 0.03
- Quit Bad Habit:     Focus 0.03 (fixed, duration ignored)

EXP: 1 per minute, except Quit Bad Habit which grants a fixed 60.

Tables are immutable. Alternate rulesets (e.g. user-defined increments)
are built with with_overrides(), which returns a new table.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple
import logging

from habit_progression.models.enums import ActivityType, StatType

logger = logging.getLogger(__name__)

EXP_PER_MINUTE = Decimal(1)
QUIT_BAD_HABIT_EXP = Decimal(60)


@dataclass(frozen=True)
class StatRate:
    """One stat grown by an activity"""
    stat: StatType
    rate: float
    is_fixed_amount: bool = False


@dataclass(frozen=True)
class ActivityFormula:
    """All stat rates plus the EXP rule for one activity type"""
    rates: Tuple[StatRate, ...]
    exp_per_minute: Decimal = EXP_PER_MINUTE
    fixed_exp: Optional[Decimal] = None

    @property
    def is_fixed_amount(self) -> bool:
        """True when no rate depends on duration"""
        return all(rate.is_fixed_amount for rate in self.rates)


class StatFormulaTable:
    """Read-only lookup from activity type to its formula"""

    def __init__(self, formulas: Mapping[ActivityType, ActivityFormula]):
        missing = [activity for activity in ActivityType if activity not in formulas]
        if missing:
            raise ValueError(f"Formula table is missing activity types: {missing}")
        self._formulas = MappingProxyType(dict(formulas))

    def __getitem__(self, activity_type: ActivityType) -> ActivityFormula:
        return self._formulas[ActivityType(activity_type)]

    def __iter__(self):
        return iter(self._formulas)

    def __len__(self) -> int:
        return len(self._formulas)

    def rates_for(self, activity_type: ActivityType) -> Tuple[StatRate, ...]:
        return self[activity_type].rates

    def with_overrides(
        self,
        overrides: Dict[Tuple[ActivityType, StatType], float]
    ) -> "StatFormulaTable":
        """
        Build a new table with custom increments

        Args:
            overrides: {(activity_type, stat): rate}. Overriding a stat the
                activity does not grow adds it, using the activity's
                fixed/per-hour mode.

        Returns:
            New StatFormulaTable; this table is unchanged
        """
        formulas = dict(self._formulas)
        for (activity_type, stat), rate in overrides.items():
            activity_type = ActivityType(activity_type)
            stat = StatType(stat)
            formula = formulas[activity_type]
            rates = list(formula.rates)

            for index, existing in enumerate(rates):
                if existing.stat == stat:
                    rates[index] = replace(existing, rate=rate)
                    break
            else:
                rates.append(StatRate(stat, rate, formula.is_fixed_amount))

            formulas[activity_type] = replace(formula, rates=tuple(rates))
            logger.debug(f"Custom increment for {activity_type.value}/{stat.value}: {rate}")

        return StatFormulaTable(formulas)


_DEFAULT_FORMULAS = {
    ActivityType.WORKOUT_WEIGHTS: ActivityFormula(
        rates=(StatRate(StatType.STRENGTH, 0.06), StatRate(StatType.ENDURANCE, 0.04)),
    ),
    ActivityType.WORKOUT_CARDIO: ActivityFormula(
        rates=(StatRate(StatType.AGILITY, 0.06), StatRate(StatType.ENDURANCE, 0.04)),
    ),
    ActivityType.WORKOUT_YOGA: ActivityFormula(
        rates=(StatRate(StatType.AGILITY, 0.05), StatRate(StatType.FOCUS, 0.03)),
    ),
    ActivityType.STUDY_SERIOUS: ActivityFormula(
        rates=(StatRate(StatType.INTELLIGENCE, 0.06), StatRate(StatType.FOCUS, 0.04)),
    ),
    ActivityType.STUDY_CASUAL: ActivityFormula(
        rates=(StatRate(StatType.INTELLIGENCE, 0.04), StatRate(StatType.CHARISMA, 0.03)),
    ),
    ActivityType.MEDITATION: ActivityFormula(
        rates=(StatRate(StatType.FOCUS, 0.05),),
    ),
    ActivityType.SOCIALIZING: ActivityFormula(
        rates=(StatRate(StatType.CHARISMA, 0.05), StatRate(StatType.FOCUS, 0.02)),
    ),
    ActivityType.SLEEP_TRACKING: ActivityFormula(
        rates=(StatRate(StatType.ENDURANCE, 0.02),),
    ),
    ActivityType.DIET_HEALTHY: ActivityFormula(
        rates=(StatRate(StatType.ENDURANCE, 0.03),),
    ),
    ActivityType.QUIT_BAD_HABIT: ActivityFormula(
        rates=(StatRate(StatType.FOCUS, 0.03, is_fixed_amount=True),),
        fixed_exp=QUIT_BAD_HABIT_EXP,
    ),
}

DEFAULT_FORMULA_TABLE = StatFormulaTable(_DEFAULT_FORMULAS)
