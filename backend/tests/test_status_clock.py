"""Tests for lifecycle status derivation and the cancellation guard window."""
from datetime import date, datetime, timedelta, timezone

import pytest

from volunteer_slots.errors import InvalidSchedule
from volunteer_slots.models.project import ProjectStatus
from volunteer_slots.services.schedule_service import parse_schedule
from volunteer_slots.services.status_clock import (
    accepts_signups,
    can_cancel,
    derive_status,
    project_bounds,
    time_until_start,
)
from tests.conftest import multi_area_schedule, multi_day_schedule, one_time_schedule

DAY = date(2024, 6, 1)


def _at(hour, minute=0, day=DAY):
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


class TestDeriveStatus:
    """upcoming -> in_progress -> completed, by the clock alone."""

    def setup_method(self):
        self.schedule = parse_schedule("oneTime", one_time_schedule(day=DAY))

    def test_upcoming_before_start(self):
        assert derive_status(self.schedule, "oneTime", None, None, _at(8, 59)) == ProjectStatus.upcoming

    def test_in_progress_between_bounds(self):
        assert derive_status(self.schedule, "oneTime", None, None, _at(9)) == ProjectStatus.in_progress
        assert derive_status(self.schedule, "oneTime", None, None, _at(12)) == ProjectStatus.in_progress

    def test_completed_after_end(self):
        assert derive_status(self.schedule, "oneTime", None, None, _at(12, 1)) == ProjectStatus.completed

    def test_cancelled_overrides_clock(self):
        for now in (_at(6), _at(10), _at(20)):
            assert derive_status(self.schedule, "oneTime", None, _at(1), now) == ProjectStatus.cancelled

    def test_project_timezone_shifts_bounds(self):
        # 09:00 in New York is 13:00 UTC
        assert derive_status(self.schedule, "oneTime", None, None, _at(12), "America/New_York") == ProjectStatus.upcoming
        assert derive_status(self.schedule, "oneTime", None, None, _at(14), "America/New_York") == ProjectStatus.in_progress

    def test_created_at_does_not_move_boundaries(self):
        early = derive_status(self.schedule, "oneTime", _at(0, day=date(2024, 1, 1)), None, _at(8))
        late = derive_status(self.schedule, "oneTime", _at(7), None, _at(8))
        assert early == late == ProjectStatus.upcoming

    def test_event_type_mismatch(self):
        with pytest.raises(InvalidSchedule):
            derive_status(self.schedule, "multiDay", None, None, _at(8))

    def test_multi_day_in_progress_between_days(self):
        schedule = parse_schedule("multiDay", multi_day_schedule(first_day=DAY, days=2))
        # Overnight gap between day one and day two is still in progress
        assert derive_status(schedule, "multiDay", None, None, _at(23)) == ProjectStatus.in_progress
        assert derive_status(schedule, "multiDay", None, None, _at(18, day=date(2024, 6, 2))) == ProjectStatus.completed

    def test_multi_area_uses_role_bounds(self):
        schedule = parse_schedule("sameDayMultiArea", multi_area_schedule(day=DAY))
        start, end = project_bounds(schedule)
        assert start == _at(8)
        assert end == _at(18)


class TestCancellationGuard:
    """Cancellation allowed only while the start is more than 24h away."""

    def setup_method(self):
        self.schedule = parse_schedule("oneTime", one_time_schedule(day=DAY))
        self.start = _at(9)

    def test_time_until_start(self):
        assert time_until_start(self.schedule, self.start - timedelta(hours=30)) == timedelta(hours=30)
        assert time_until_start(self.schedule, self.start + timedelta(hours=1)) == timedelta(hours=-1)

    def test_can_cancel_well_ahead(self):
        assert can_cancel(self.schedule, self.start - timedelta(hours=25), guard_hours=24)

    def test_exactly_at_guard_boundary_is_refused(self):
        assert not can_cancel(self.schedule, self.start - timedelta(hours=24), guard_hours=24)

    def test_inside_guard_window(self):
        assert not can_cancel(self.schedule, self.start - timedelta(hours=2), guard_hours=24)


class TestAcceptsSignups:

    @pytest.mark.parametrize("status,expected", [
        (ProjectStatus.upcoming, True),
        (ProjectStatus.in_progress, True),
        (ProjectStatus.completed, False),
        (ProjectStatus.cancelled, False),
    ])
    def test_open_statuses(self, status, expected):
        assert accepts_signups(status) is expected
