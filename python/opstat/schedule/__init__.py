"""Fork-aware gas cost resolution."""

from opstat.schedule.fees import FeeSchedule, FeeTable, ScheduleVersion

__all__ = ["FeeSchedule", "FeeTable", "ScheduleVersion"]
