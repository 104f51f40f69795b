"""Unit tests for EXP and Leveling System (habit_progression/gamification/xp_system.py)"""
import math
import pytest
from decimal import Decimal
from fractions import Fraction

from habit_progression.exceptions import InvalidDelta, InvalidLevel
from habit_progression.gamification.xp_system import (
    apply_exp_delta,
    calculate_exp_gain,
    calculate_exp_progress,
    calculate_exp_threshold,
    exp_add,
    exp_multiply,
    exp_needed_for_next_level,
    exp_subtract,
    is_valid_exp_state,
    to_exp,
)
from habit_progression.models.enums import ActivityType, StatType
from habit_progression.models.user import UserState


# ============================================================================
# Threshold Tests
# ============================================================================

def test_threshold_first_levels():
    """Test the first thresholds of the 1000 * 1.2^(n-1) curve"""
    assert calculate_exp_threshold(1) == Decimal(1000)
    assert calculate_exp_threshold(2) == Decimal(1200)
    assert calculate_exp_threshold(3) == Decimal(1440)
    assert calculate_exp_threshold(4) == Decimal(1728)
    assert calculate_exp_threshold(5) == Decimal("2073.6")


def test_threshold_strictly_increasing():
    """Test that every level costs more than the one before"""
    previous = calculate_exp_threshold(1)
    for level in range(2, 201):
        current = calculate_exp_threshold(level)
        assert current > previous
        previous = current


@pytest.mark.parametrize("level", [60, 925, 2000])
def test_threshold_is_exact(level):
    """Test that thresholds keep their full decimal expansion at any level"""
    threshold = calculate_exp_threshold(level)

    # 1000 * 1.2^(n-1) == 1000 * 12^(n-1) / 10^(n-1)
    assert Fraction(threshold) == Fraction(1000 * 12 ** (level - 1), 10 ** (level - 1))


@pytest.mark.parametrize("level", [0, -1, -100])
def test_threshold_rejects_levels_below_one(level):
    """Test that levels below 1 raise InvalidLevel"""
    with pytest.raises(InvalidLevel) as exc_info:
        calculate_exp_threshold(level)

    assert exc_info.value.level == level


@pytest.mark.parametrize("level", [True, 1.5, "2", None])
def test_threshold_rejects_non_integer_levels(level):
    """Test that non-integer levels raise InvalidLevel"""
    with pytest.raises(InvalidLevel):
        calculate_exp_threshold(level)


# ============================================================================
# Exact Arithmetic Tests
# ============================================================================

def test_exp_add_keeps_every_digit():
    """Test that sums far wider than the default precision are not rounded"""
    big = Decimal("1e300")
    small = Decimal("0.000001")

    total = exp_add(big, small)

    assert exp_subtract(total, big) == small
    assert Fraction(total) == Fraction(10 ** 300) + Fraction(1, 10 ** 6)


def test_exp_multiply_keeps_every_digit():
    a = Decimal("123456789.123456789123456789")
    b = Decimal("987654321.987654321987654321")

    assert Fraction(exp_multiply(a, b)) == Fraction(a) * Fraction(b)


# ============================================================================
# EXP Gain Tests
# ============================================================================

def test_gain_within_level(fresh_state):
    """Test a gain that does not reach the threshold"""
    new_state, transition = apply_exp_delta(fresh_state, 999)

    assert new_state.level == 1
    assert new_state.current_exp == Decimal(999)
    assert transition.leveled_up is False
    assert transition.levels_changed == 0


def test_gain_exactly_threshold(fresh_state):
    """Test that reaching the threshold exactly levels up with 0 EXP left"""
    new_state, transition = apply_exp_delta(fresh_state, 1000)

    assert new_state.level == 2
    assert new_state.current_exp == Decimal(0)
    assert transition.leveled_up is True
    assert transition.levels_changed == 1


def test_gain_single_level_up(fresh_state):
    """Test level 1 / 0 EXP + 1500 -> level 2 / 500 EXP"""
    new_state, transition = apply_exp_delta(fresh_state, 1500)

    assert new_state.level == 2
    assert new_state.current_exp == Decimal(500)
    assert transition.leveled_up is True
    assert transition.leveled_down is False
    assert transition.levels_changed == 1
    assert transition.final_level == 2
    assert transition.final_exp == Decimal(500)


def test_gain_multi_level_cascade(fresh_state):
    """Test one large gain crossing several levels"""
    # 5000 - 1000 - 1200 - 1440 = 1360 < 1728
    new_state, transition = apply_exp_delta(fresh_state, 5000)

    assert new_state.level == 4
    assert new_state.current_exp == Decimal(1360)
    assert transition.levels_changed == 3


def test_gain_does_not_touch_stats(seasoned_state):
    """Test that leveling up leaves stats unchanged"""
    new_state, _ = apply_exp_delta(seasoned_state, 10000)

    assert new_state.stats == seasoned_state.stats
    assert new_state.last_activity_date == seasoned_state.last_activity_date


def test_gain_does_not_mutate_input(fresh_state):
    """Test that the input state is left as it was"""
    apply_exp_delta(fresh_state, 1500)

    assert fresh_state.level == 1
    assert fresh_state.current_exp == Decimal(0)


def test_zero_delta_is_noop(seasoned_state):
    """Test that a zero delta changes nothing"""
    new_state, transition = apply_exp_delta(seasoned_state, 0)

    assert new_state.level == seasoned_state.level
    assert new_state.current_exp == seasoned_state.current_exp
    assert transition.leveled_up is False
    assert transition.leveled_down is False


# ============================================================================
# EXP Reversal Tests
# ============================================================================

def test_reversal_within_level():
    """Test a reversal that stays on the same level"""
    state = UserState(level=2, current_exp=Decimal(500))
    new_state, transition = apply_exp_delta(state, -200)

    assert new_state.level == 2
    assert new_state.current_exp == Decimal(300)
    assert transition.leveled_down is False


def test_reversal_single_level_down():
    """Test level 2 / 500 EXP - 1500 -> level 1 / 0 EXP"""
    state = UserState(level=2, current_exp=Decimal(500))
    new_state, transition = apply_exp_delta(state, -1500)

    assert new_state.level == 1
    assert new_state.current_exp == Decimal(0)
    assert transition.leveled_down is True
    assert transition.levels_changed == 1


def test_reversal_multi_level_down():
    """Test a reversal cascading down several levels"""
    state = UserState(level=4, current_exp=Decimal(1360))
    new_state, transition = apply_exp_delta(state, -5000)

    assert new_state.level == 1
    assert new_state.current_exp == Decimal(0)
    assert transition.levels_changed == 3


def test_reversal_clamps_at_level_one():
    """Test that a deficit at level 1 clamps to 0 EXP without a level-down"""
    state = UserState(level=1, current_exp=Decimal(100))
    new_state, transition = apply_exp_delta(state, -500)

    assert new_state.level == 1
    assert new_state.current_exp == Decimal(0)
    assert transition.leveled_down is False
    assert transition.levels_changed == 0


def test_reversal_past_level_one_clamps():
    """Test that a deficit larger than all EXP ever earned floors at level 1"""
    state = UserState(level=3, current_exp=Decimal(10))
    new_state, transition = apply_exp_delta(state, -1000000)

    assert new_state.level == 1
    assert new_state.current_exp == Decimal(0)
    assert transition.leveled_down is True
    assert transition.levels_changed == 2


# ============================================================================
# Round-Trip Tests
# ============================================================================

def test_round_trip_across_levels_is_exact(seasoned_state):
    """Test that +d then -d restores level and EXP exactly"""
    delta = Decimal("5000.5")

    gained, up = apply_exp_delta(seasoned_state, delta)
    restored, down = apply_exp_delta(gained, delta.copy_negate())

    assert gained.level == 6
    assert up.levels_changed == 3
    assert down.levels_changed == 3
    assert restored.level == seasoned_state.level
    assert restored.current_exp == seasoned_state.current_exp


def test_round_trip_with_float_delta_is_exact():
    """Test that float deltas round-trip exactly too"""
    state = UserState(level=2, current_exp=Decimal("0.3"))

    gained, _ = apply_exp_delta(state, 0.1)
    assert gained.current_exp == Decimal("0.4")

    restored, _ = apply_exp_delta(gained, -0.1)
    assert restored.current_exp == Decimal("0.3")


def test_round_trip_deep_cascade(fresh_state):
    """Test a cascade to level 50 and back"""
    total = Decimal(0)
    for level in range(1, 50):
        total = exp_add(total, calculate_exp_threshold(level))

    gained, up = apply_exp_delta(fresh_state, total)
    assert gained.level == 50
    assert gained.current_exp == Decimal(0)
    assert up.levels_changed == 49

    restored, down = apply_exp_delta(gained, total.copy_negate())
    assert restored.level == 1
    assert restored.current_exp == Decimal(0)
    assert down.levels_changed == 49


@pytest.mark.parametrize("delta", [Decimal("1e100"), 1e150, Decimal("1e200"), 1e300])
@pytest.mark.parametrize("state", [
    UserState.initial(),
    UserState(level=3, current_exp=Decimal(250)),
    UserState(level=40, current_exp=Decimal("123.456")),
], ids=["fresh", "level_3", "level_40"])
def test_round_trip_huge_delta(state, delta):
    """Test that deltas climbing thousands of levels still round-trip exactly"""
    gained, up = apply_exp_delta(state, delta)
    assert up.leveled_up
    assert gained.level > 1000
    assert is_valid_exp_state(gained.level, gained.current_exp)

    restored, down = apply_exp_delta(gained, to_exp(delta).copy_negate())

    assert down.levels_changed == up.levels_changed
    assert restored.level == state.level
    assert restored.current_exp == state.current_exp


def test_huge_delta_lands_on_expected_level(fresh_state):
    """Test the level reached by +1e100 from a fresh user"""
    gained, _ = apply_exp_delta(fresh_state, Decimal("1e100"))

    # sum of thresholds for levels 1..L-1 is 5000 * (1.2^(L-1) - 1)
    reached = Fraction(5000) * (Fraction(6, 5) ** (gained.level - 1) - 1)
    assert reached <= Fraction(10 ** 100)
    assert reached + Fraction(calculate_exp_threshold(gained.level)) > Fraction(10 ** 100)
    assert Fraction(gained.current_exp) == Fraction(10 ** 100) - reached


# ============================================================================
# Invalid Delta Tests
# ============================================================================

@pytest.mark.parametrize("delta", [math.nan, math.inf, -math.inf, Decimal("NaN"), Decimal("Infinity")])
def test_non_finite_delta_rejected(fresh_state, delta):
    """Test that NaN and infinite deltas raise InvalidDelta"""
    with pytest.raises(InvalidDelta):
        apply_exp_delta(fresh_state, delta)


@pytest.mark.parametrize("delta", ["100", None, True])
def test_non_numeric_delta_rejected(delta):
    """Test that non-numeric deltas raise InvalidDelta"""
    with pytest.raises(InvalidDelta):
        to_exp(delta)


def test_to_exp_uses_shortest_float_repr():
    """Test that floats convert through their repr"""
    assert to_exp(0.1) == Decimal("0.1")
    assert to_exp(60) == Decimal(60)
    assert to_exp(Decimal("12.5")) == Decimal("12.5")


# ============================================================================
# EXP Award Tests
# ============================================================================

def test_exp_gain_one_per_minute():
    """Test that standard activities grant 1 EXP per minute"""
    assert calculate_exp_gain(ActivityType.WORKOUT_WEIGHTS, 60) == Decimal(60)
    assert calculate_exp_gain(ActivityType.STUDY_SERIOUS, 45) == Decimal(45)
    assert calculate_exp_gain(ActivityType.MEDITATION, 1) == Decimal(1)


@pytest.mark.parametrize("duration", [1, 60, 500])
def test_exp_gain_quit_bad_habit_fixed(duration):
    """Test that Quit Bad Habit always grants 60 EXP"""
    assert calculate_exp_gain(ActivityType.QUIT_BAD_HABIT, duration) == Decimal(60)


# ============================================================================
# Progress Helper Tests
# ============================================================================

def test_exp_progress_fraction():
    """Test progress through the current level"""
    state = UserState(level=2, current_exp=Decimal(600))

    assert calculate_exp_progress(state) == pytest.approx(0.5)
    assert exp_needed_for_next_level(state) == Decimal(600)


def test_exp_progress_fresh_user(fresh_state):
    """Test progress for a brand new user"""
    assert calculate_exp_progress(fresh_state) == 0.0
    assert exp_needed_for_next_level(fresh_state) == Decimal(1000)


def test_is_valid_exp_state():
    """Test the level/EXP invariant check"""
    assert is_valid_exp_state(1, Decimal(0)) is True
    assert is_valid_exp_state(1, Decimal(999)) is True
    assert is_valid_exp_state(1, Decimal(1000)) is False
    assert is_valid_exp_state(0, Decimal(0)) is False
    assert is_valid_exp_state(2, Decimal(-1)) is False
    assert is_valid_exp_state(2, Decimal("NaN")) is False


def test_stats_untouched_by_level_down():
    """Test that leveling down leaves stats unchanged"""
    state = UserState(
        level=3,
        current_exp=Decimal(0),
        stats={StatType.STRENGTH: 4.2},
    )
    new_state, _ = apply_exp_delta(state, -100)

    assert new_state.level == 2
    assert new_state.get_stat(StatType.STRENGTH) == 4.2
