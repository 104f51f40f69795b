"""Activity record models"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field

from habit_progression.models.enums import ActivityType, StatType


class ActivityDescriptor(BaseModel):
    """
    A logged activity

    recorded_stat_gains and recorded_exp are filled in when the activity is
    applied and persisted verbatim, so deleting the activity later reverses
    exactly what was granted. Records written before gains were stored have
    an empty recorded_stat_gains and/or recorded_exp=None.
    """
    id: str = Field(default_factory=lambda: f"activity_{uuid4().hex}")
    activity_type: ActivityType
    duration_minutes: int
    recorded_stat_gains: dict[StatType, float] = Field(default_factory=dict)
    recorded_exp: Optional[Decimal] = None
    timestamp: datetime = Field(default_factory=datetime.now)
    notes: Optional[str] = None

    @property
    def has_stored_stat_gains(self) -> bool:
        return bool(self.recorded_stat_gains)

    @property
    def has_stored_exp(self) -> bool:
        return self.recorded_exp is not None

    @property
    def needs_stat_gain_migration(self) -> bool:
        return not self.has_stored_stat_gains

    @property
    def needs_migration(self) -> bool:
        return self.needs_stat_gain_migration or not self.has_stored_exp
