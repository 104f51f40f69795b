"""Global test fixtures and utilities for progression engine tests"""
import pytest
from datetime import date, datetime
from decimal import Decimal

from habit_progression.gamification.stat_system import StatEngine
from habit_progression.gamification.reversal import ReversalCoordinator
from habit_progression.models.enums import ActivityCategory, StatType
from habit_progression.models.user import UserState
from habit_progression.services.progression_service import ProgressionService


# ============================================================================
# User State Fixtures
# ============================================================================

@pytest.fixture
def fresh_state():
    """Brand new user: level 1, 0 EXP, all stats 1.0"""
    return UserState.initial()


@pytest.fixture
def seasoned_state():
    """User a few weeks in"""
    return UserState(
        level=3,
        current_exp=Decimal("250"),
        stats={
            StatType.STRENGTH: 2.5,
            StatType.AGILITY: 1.8,
            StatType.ENDURANCE: 3.1,
            StatType.INTELLIGENCE: 2.2,
            StatType.FOCUS: 1.5,
            StatType.CHARISMA: 1.3,
        },
        last_activity_date={
            ActivityCategory.WORKOUT: date(2024, 1, 10),
            ActivityCategory.STUDY: date(2024, 1, 15),
        },
    )


# ============================================================================
# Date Fixtures
# ============================================================================

@pytest.fixture
def today():
    """Fixed evaluation date (Wednesday)"""
    return date(2024, 1, 17)


@pytest.fixture
def now():
    """Fixed activity timestamp on the evaluation date"""
    return datetime(2024, 1, 17, 18, 30)


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def stat_engine():
    """StatEngine with the default formula table"""
    return StatEngine()


@pytest.fixture
def reversal_coordinator(stat_engine):
    """ReversalCoordinator over the default StatEngine"""
    return ReversalCoordinator(stat_engine)


@pytest.fixture
def progression_service():
    """ProgressionService in strict degradation mode"""
    return ProgressionService(degradation_mode="strict")
