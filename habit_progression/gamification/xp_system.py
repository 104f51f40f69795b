"""
EXP and Leveling System

Manages level thresholds, EXP deltas and multi-level cascades.

Leveling Curve:
- EXP to complete level n: 1000 * 1.2^(n-1)
- Level 1: 1000, level 2: 1200, level 3: 1440, level 4: 1728, ...

EXP Award Rules:
- Standard activities: 1 EXP per minute
- Quit Bad Habit: fixed 60 EXP regardless of duration

Thresholds have a finite decimal expansion (1000 * 12^(n-1) / 10^(n-1)), so
EXP is kept as Decimal and every sum runs in a context wide enough to hold
its operands exactly. Applying +d and then -d returns the exact
(level, current_exp) pair that was there before, at any level.
"""

from decimal import MAX_EMAX, MIN_EMIN, Context, Decimal, Inexact, InvalidOperation, Overflow
from functools import lru_cache
from typing import Tuple, Union
import logging

from habit_progression.exceptions import InvalidDelta, InvalidLevel
from habit_progression.gamification.stat_formulas import (
    DEFAULT_FORMULA_TABLE,
    StatFormulaTable,
)
from habit_progression.models.enums import ActivityType
from habit_progression.models.progression import LevelTransition
from habit_progression.models.user import UserState

logger = logging.getLogger(__name__)

THRESHOLD_BASE = 1000
# growth factor 1.2 as 12 / 10
THRESHOLD_GROWTH_NUMERATOR = 12

Number = Union[int, float, Decimal]


def calculate_exp_threshold(level: int) -> Decimal:
    """
    EXP required to complete the given level

    Args:
        level: Level (>= 1)

    Returns:
        1000 * 1.2^(level-1), exact

    Raises:
        InvalidLevel: level < 1
    """
    if isinstance(level, bool) or not isinstance(level, int) or level < 1:
        raise InvalidLevel(
            message=f"Level must be greater than 0, got {level!r}",
            level=level if isinstance(level, int) else None,
            operation="calculate_exp_threshold"
        )
    return _threshold(level)


@lru_cache(maxsize=4096)
def _threshold(level: int) -> Decimal:
    # 1000 * 1.2^(n-1) == (1000 * 12^(n-1)) * 10^-(n-1), built digit for digit
    coefficient = Decimal(THRESHOLD_BASE * THRESHOLD_GROWTH_NUMERATOR ** (level - 1))
    return Decimal((0, coefficient.as_tuple().digits, -(level - 1)))


def _exact_context(precision: int) -> Context:
    """Context that raises instead of rounding"""
    return Context(
        prec=max(precision, 28),
        Emax=MAX_EMAX,
        Emin=MIN_EMIN,
        traps=[InvalidOperation, Overflow, Inexact],
    )


def exp_add(a: Decimal, b: Decimal) -> Decimal:
    """
    a + b with no rounding

    Precision is sized to span both operands' most and least significant
    digits, plus one for a carry.
    """
    top = max(a.adjusted(), b.adjusted())
    bottom = min(a.as_tuple().exponent, b.as_tuple().exponent)
    return _exact_context(top - bottom + 2).add(a, b)


def exp_subtract(a: Decimal, b: Decimal) -> Decimal:
    """a - b with no rounding"""
    return exp_add(a, b.copy_negate())


def exp_multiply(a: Decimal, b: Decimal) -> Decimal:
    """a * b with no rounding"""
    precision = len(a.as_tuple().digits) + len(b.as_tuple().digits)
    return _exact_context(precision).multiply(a, b)


def to_exp(value: Number) -> Decimal:
    """
    Convert an EXP amount to Decimal

    Floats go through their shortest repr so 0.1 becomes Decimal('0.1').

    Raises:
        InvalidDelta: NaN, infinity, or a non-numeric value
    """
    if isinstance(value, bool):
        raise InvalidDelta(message="EXP delta must be a number", delta=value, operation="to_exp")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    else:
        raise InvalidDelta(message="EXP delta must be a number", delta=value, operation="to_exp")

    if not amount.is_finite():
        raise InvalidDelta(
            message=f"EXP delta must be finite, got {value!r}",
            delta=value,
            operation="to_exp"
        )
    return amount


def apply_exp_delta(state: UserState, delta: Number) -> Tuple[UserState, LevelTransition]:
    """
    Apply an EXP gain (delta > 0) or reversal (delta < 0)

    Logic:
    - Gain: add delta; while EXP >= threshold(level), subtract the
      threshold and go up a level
    - Reversal: subtract; while EXP < 0, go down a level and add that
      level's threshold back
    - Level 1 is the floor: a deficit there clamps to level 1, 0 EXP

    Leveling never touches stats.

    Args:
        state: Current user state (not modified)
        delta: EXP change

    Returns:
        (new_state, LevelTransition)

    Raises:
        InvalidDelta: delta is NaN or infinite
    """
    amount = to_exp(delta)
    old_level = state.level
    level = state.level
    exp = exp_add(state.current_exp, amount)

    if amount >= 0:
        threshold = calculate_exp_threshold(level)
        while exp >= threshold:
            exp = exp_subtract(exp, threshold)
            level += 1
            threshold = calculate_exp_threshold(level)
    else:
        while exp < 0:
            if level == 1:
                logger.info(
                    f"EXP reversal of {amount} hit the level 1 floor, clamping to 0 EXP"
                )
                exp = Decimal(0)
                break
            level -= 1
            exp = exp_add(exp, calculate_exp_threshold(level))

    transition = LevelTransition(
        leveled_up=level > old_level,
        leveled_down=level < old_level,
        levels_changed=abs(level - old_level),
        final_level=level,
        final_exp=exp,
    )

    if transition.leveled_up:
        logger.info(f"Leveled up from {old_level} to {level} ({transition.levels_changed} levels)")
    elif transition.leveled_down:
        logger.info(f"Leveled down from {old_level} to {level} ({transition.levels_changed} levels)")

    new_state = state.model_copy(update={"level": level, "current_exp": exp})
    return new_state, transition


def calculate_exp_gain(
    activity_type: ActivityType,
    duration_minutes: int,
    table: StatFormulaTable = DEFAULT_FORMULA_TABLE
) -> Decimal:
    """
    EXP granted for an activity

    Args:
        activity_type: Type of activity
        duration_minutes: Duration (ignored for fixed-EXP activities)
        table: Formula table to read the EXP rule from

    Returns:
        EXP amount to award
    """
    formula = table[activity_type]
    if formula.fixed_exp is not None:
        return formula.fixed_exp
    return exp_multiply(formula.exp_per_minute, Decimal(max(duration_minutes, 0)))


def calculate_exp_progress(state: UserState) -> float:
    """Fraction of the current level completed, clamped to [0, 1]"""
    threshold = calculate_exp_threshold(state.level)
    progress = float(state.current_exp / threshold)
    return min(max(progress, 0.0), 1.0)


def exp_needed_for_next_level(state: UserState) -> Decimal:
    """EXP still missing before the next level-up"""
    threshold = calculate_exp_threshold(state.level)
    remaining = exp_subtract(threshold, state.current_exp)
    return min(max(remaining, Decimal(0)), threshold)


def is_valid_exp_state(level: int, current_exp: Decimal) -> bool:
    """Check the level/EXP invariant: level >= 1 and 0 <= EXP < threshold(level)"""
    if isinstance(level, bool) or not isinstance(level, int) or level < 1:
        return False
    if not isinstance(current_exp, Decimal) or not current_exp.is_finite():
        return False
    return Decimal(0) <= current_exp < calculate_exp_threshold(level)
