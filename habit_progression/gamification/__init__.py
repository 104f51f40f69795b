"""
Progression engines

This module implements the deterministic game rules:
- EXP thresholds and level cascades (up and down)
- Per-activity stat growth from a formula table
- Stat degradation from neglect
- Exact reversal of logged activities
"""

from habit_progression.gamification.xp_system import (
    apply_exp_delta,
    calculate_exp_gain,
    calculate_exp_threshold,
)
from habit_progression.gamification.stat_formulas import DEFAULT_FORMULA_TABLE, StatFormulaTable
from habit_progression.gamification.stat_system import StatEngine
from habit_progression.gamification.degradation_system import apply_degradation, evaluate_degradation
from habit_progression.gamification.reversal import ReversalCoordinator

__all__ = [
    "apply_exp_delta",
    "calculate_exp_gain",
    "calculate_exp_threshold",
    "DEFAULT_FORMULA_TABLE",
    "StatFormulaTable",
    "StatEngine",
    "apply_degradation",
    "evaluate_degradation",
    "ReversalCoordinator",
]
