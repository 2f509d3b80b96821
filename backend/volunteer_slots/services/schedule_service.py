"""Schedule model: parse the stored schedule document, enumerate and resolve slots.

Slot identifiers are part of the public contract (they appear in URLs):
- oneTime: the constant ``"oneTime"``
- multiDay: ``"{YYYY-MM-DD}-{index}"``, zero-based index within that day
- sameDayMultiArea: the role name
"""
import logging
from datetime import datetime, timezone
from typing import Any

import pytz
from pydantic import ValidationError

from volunteer_slots.errors import InvalidSchedule, SlotNotFound
from volunteer_slots.models.project import EventType
from volunteer_slots.schemas.schedule import (
    ONE_TIME_SCHEDULE_ID,
    MultiDaySchedule,
    OneTimeSchedule,
    SameDayMultiAreaSchedule,
    Schedule,
    Slot,
)

logger = logging.getLogger(__name__)

_VARIANTS = {
    EventType.one_time: OneTimeSchedule,
    EventType.multi_day: MultiDaySchedule,
    EventType.same_day_multi_area: SameDayMultiAreaSchedule,
}


def parse_schedule(event_type: EventType | str, document: dict[str, Any]) -> Schedule:
    """Validate a stored schedule document into the variant named by ``event_type``."""
    try:
        event_type = EventType(event_type)
    except ValueError:
        raise InvalidSchedule(f"Unknown event type: {event_type}")

    raw = (document or {}).get(event_type.value)
    if raw is None:
        raise InvalidSchedule(f"Schedule has no '{event_type.value}' section")

    model = _VARIANTS[event_type]
    try:
        if event_type == EventType.multi_day:
            return model.model_validate({"days": raw})
        return model.model_validate(raw)
    except ValidationError as exc:
        raise InvalidSchedule(f"Invalid {event_type.value} schedule: {exc.errors()[0]['msg']}")


def schedule_document(schedule: Schedule) -> dict[str, Any]:
    """Inverse of parse_schedule: the JSON document stored on the project."""
    if isinstance(schedule, OneTimeSchedule):
        return {EventType.one_time.value: schedule.model_dump(mode="json", by_alias=True)}
    if isinstance(schedule, MultiDaySchedule):
        return {EventType.multi_day.value: schedule.model_dump(mode="json", by_alias=True)["days"]}
    return {
        EventType.same_day_multi_area.value: schedule.model_dump(mode="json", by_alias=True, exclude_none=True)
    }


def event_type_of(schedule: Schedule) -> EventType:
    for event_type, model in _VARIANTS.items():
        if isinstance(schedule, model):
            return event_type
    raise InvalidSchedule(f"Unsupported schedule type: {type(schedule).__name__}")


def enumerate_slots(schedule: Schedule) -> list[Slot]:
    """Every slot of the schedule in a deterministic order.

    multiDay slots come out chronologically (days by date, then slot index);
    roles keep their declaration order.
    """
    if isinstance(schedule, OneTimeSchedule):
        return [Slot(
            schedule_id=ONE_TIME_SCHEDULE_ID,
            date=schedule.date,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            capacity=schedule.volunteers,
        )]

    if isinstance(schedule, MultiDaySchedule):
        slots = []
        for day in sorted(schedule.days, key=lambda d: d.date):
            for index, slot in enumerate(day.slots):
                slots.append(Slot(
                    schedule_id=f"{day.date.isoformat()}-{index}",
                    date=day.date,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    capacity=slot.volunteers,
                ))
        return slots

    if isinstance(schedule, SameDayMultiAreaSchedule):
        return [
            Slot(
                schedule_id=role.name,
                date=schedule.date,
                start_time=role.start_time,
                end_time=role.end_time,
                capacity=role.volunteers,
            )
            for role in schedule.roles
        ]

    raise InvalidSchedule(f"Unsupported schedule type: {type(schedule).__name__}")


def resolve_slot(schedule: Schedule, schedule_id: str) -> Slot:
    """Find the slot named by ``schedule_id`` or raise SlotNotFound."""
    if isinstance(schedule, MultiDaySchedule):
        return _resolve_multi_day(schedule, schedule_id)

    for slot in enumerate_slots(schedule):
        if slot.schedule_id == schedule_id:
            return slot
    raise SlotNotFound(f"Unknown schedule slot: {schedule_id}")


def _resolve_multi_day(schedule: MultiDaySchedule, schedule_id: str) -> Slot:
    # Dates contain "-", so only the last segment is the index
    date_part, sep, index_part = (schedule_id or "").rpartition("-")
    if (
        not sep
        or not date_part
        or not (index_part.isascii() and index_part.isdigit())
        or index_part != str(int(index_part))  # "-00" is not the canonical id of slot 0
    ):
        logger.debug("Malformed multiDay schedule id %r", schedule_id)
        raise SlotNotFound(f"Unknown schedule slot: {schedule_id}")

    day = next((d for d in schedule.days if d.date.isoformat() == date_part), None)
    index = int(index_part)
    if day is None or index >= len(day.slots):
        raise SlotNotFound(f"Unknown schedule slot: {schedule_id}")

    slot = day.slots[index]
    return Slot(
        schedule_id=f"{day.date.isoformat()}-{index}",
        date=day.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        capacity=slot.volunteers,
    )


def ensure_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values (as SQLite returns them) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_timezone(name: str):
    """pytz timezone for an IANA name; unknown names are a schedule error."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise InvalidSchedule(f"Unknown timezone: {name}")


def slot_bounds(slot: Slot, tz_name: str) -> tuple[datetime, datetime]:
    """Start and end instants of a slot, localized in the project timezone."""
    tz = get_timezone(tz_name)
    starts_at = tz.localize(datetime.combine(slot.date, slot.start_time))
    ends_at = tz.localize(datetime.combine(slot.date, slot.end_time))
    return starts_at, ends_at


def is_slot_time_elapsed(slot: Slot, now: datetime, tz_name: str) -> bool:
    """True once ``now`` is past the slot's end in the project timezone."""
    _, ends_at = slot_bounds(slot, tz_name)
    return ensure_utc(now) > ends_at
