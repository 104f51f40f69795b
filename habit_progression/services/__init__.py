"""
Service Layer Package

Business logic services that sit between host applications (UI, storage)
and the progression engines.

Core Services:
- ProgressionService: activity logging and deletion, gain previews,
  degradation, legacy migration, reset
"""

from habit_progression.services.progression_service import ProgressionService

__all__ = [
    "ProgressionService",
]
