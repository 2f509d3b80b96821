"""Schedule topologies and the derived Slot value.

A project carries exactly one of three schedule shapes. The wire document keeps
the shape of the stored JSON (``{"oneTime": {...}}``, ``{"multiDay": [...]}`` or
``{"sameDayMultiArea": {...}}``) with camelCase keys and ``HH:MM`` times; the
models below accept either camelCase or snake_case on input.
"""
import datetime as dt
from dataclasses import dataclass
from datetime import time
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

ONE_TIME_SCHEDULE_ID = "oneTime"


class _ScheduleModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")


class SlotTimes(_ScheduleModel):
    """Start/end in the project's timezone plus the number of volunteers wanted."""

    start_time: time = Field(alias="startTime")
    end_time: time = Field(alias="endTime")
    volunteers: int = Field(ge=1)

    @model_validator(mode="after")
    def check_end_after_start(self):
        # Slots never cross midnight
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self

    @field_serializer("start_time", "end_time")
    def serialize_hhmm(self, value: time) -> str:
        return value.strftime("%H:%M")


class OneTimeSchedule(SlotTimes):
    date: dt.date


class MultiDaySlot(SlotTimes):
    pass


class MultiDayScheduleDay(_ScheduleModel):
    date: dt.date
    slots: list[MultiDaySlot] = Field(min_length=1)


class MultiDaySchedule(_ScheduleModel):
    days: list[MultiDayScheduleDay] = Field(min_length=1)

    @field_validator("days")
    @classmethod
    def check_unique_dates(cls, days):
        dates = [d.date for d in days]
        if len(dates) != len(set(dates)):
            raise ValueError("multiDay dates must be unique")
        return days


class SameDayMultiAreaRole(SlotTimes):
    name: str = Field(min_length=1, max_length=255)


class SameDayMultiAreaSchedule(_ScheduleModel):
    date: dt.date
    overall_start: Optional[time] = Field(default=None, alias="overallStart")
    overall_end: Optional[time] = Field(default=None, alias="overallEnd")
    roles: list[SameDayMultiAreaRole] = Field(min_length=1)

    @field_validator("roles")
    @classmethod
    def check_unique_role_names(cls, roles):
        names = [r.name for r in roles]
        if len(names) != len(set(names)):
            raise ValueError("role names must be unique within a project")
        return roles

    @field_serializer("overall_start", "overall_end")
    def serialize_hhmm(self, value: Optional[time]) -> Optional[str]:
        return value.strftime("%H:%M") if value is not None else None


Schedule = Union[OneTimeSchedule, MultiDaySchedule, SameDayMultiAreaSchedule]


@dataclass(frozen=True)
class Slot:
    """One reservable unit, derived from a schedule and never stored on its own."""

    schedule_id: str
    date: dt.date
    start_time: time
    end_time: time
    capacity: int
