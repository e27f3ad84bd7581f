"""Pure gathering domain logic - no I/O dependencies."""

import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime

from .kiosk import default_end_time
from .schedule import (
    DEFAULT_HORIZON_WEEKS,
    WEEKDAY_INDEX,
    CustomSchedule,
    NextOccurrence,
    RecurrenceDefinition,
    parse_custom_schedule,
    resolve_next_occurrence,
)

logger = logging.getLogger(__name__)

FREQUENCIES = ("weekly", "biweekly", "monthly")
ATTENDANCE_TYPES = ("standard", "headcount")

_TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


class GatheringError(ValueError):
    """A gathering payload that cannot be used at all."""


@dataclass
class Gathering:
    """A recurring church gathering as configured in the attendance app."""

    id: int
    name: str
    day_of_week: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    frequency: str = "weekly"
    attendance_type: str = "standard"
    custom_schedule: CustomSchedule | None = None
    kiosk_enabled: bool = False
    kiosk_end_time: str | None = None
    kiosk_message: str | None = None
    is_active: bool = True

    @property
    def recurrence(self) -> RecurrenceDefinition:
        return RecurrenceDefinition(
            day_of_week=self.day_of_week,
            frequency=self.frequency,
            custom_schedule=self.custom_schedule,
        )

    def next_occurrence(
        self,
        today: date | datetime | str,
        horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
    ) -> NextOccurrence:
        return resolve_next_occurrence(self.recurrence, today, horizon_weeks)

    def kiosk_times(self) -> tuple[str, str] | None:
        """
        (start, end) kiosk window as HH:MM strings.

        The end is kiosk_end_time when configured, otherwise one hour after
        start. None when the gathering has no usable start time.
        """
        if not self.start_time:
            return None
        start = self.start_time[:5]
        try:
            end = self.kiosk_end_time[:5] if self.kiosk_end_time else default_end_time(start)
        except ValueError:
            return None
        return start, end

    @classmethod
    def from_api(cls, data: dict) -> "Gathering":
        """Create Gathering from the attendance API's camelCase payload."""
        if not isinstance(data, dict):
            raise GatheringError(f"Gathering must be an object, got {type(data).__name__}")
        if data.get("id") is None or not data.get("name"):
            raise GatheringError("Gathering requires an id and a name")

        try:
            gathering_id = int(data["id"])
        except (TypeError, ValueError):
            raise GatheringError(f"Invalid gathering id: {data['id']!r}")

        return cls(
            id=gathering_id,
            name=data["name"],
            day_of_week=data.get("dayOfWeek") or None,
            start_time=data.get("startTime") or None,
            end_time=data.get("endTime") or None,
            frequency=data.get("frequency") or "weekly",
            attendance_type=data.get("attendanceType") or "standard",
            custom_schedule=_custom_schedule_from_api(data.get("customSchedule"), data["name"]),
            kiosk_enabled=bool(data.get("kioskEnabled", False)),
            kiosk_end_time=data.get("kioskEndTime") or None,
            kiosk_message=data.get("kioskMessage") or None,
            is_active=bool(data.get("isActive", True)),
        )


def _custom_schedule_from_api(raw, name: str) -> CustomSchedule | None:
    # Stored as a JSON column, so it may arrive as a string.
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable custom schedule for {name!r}: {e}")
            return None
    if not raw:
        return None
    try:
        return parse_custom_schedule(raw)
    except (ValueError, TypeError) as e:
        logger.warning(f"Ignoring invalid custom schedule for {name!r}: {e}")
        return None


def validate_gathering(data: dict) -> list[str]:
    """
    Check a gathering payload against the rules used when creating one.

    Returns a list of error messages; empty when the payload is valid.
    """
    errors = []

    name = str(data.get("name") or "").strip()
    if not 1 <= len(name) <= 255:
        errors.append("Gathering name is required and must be less than 255 characters")

    day_of_week = data.get("dayOfWeek")
    if day_of_week is not None and day_of_week not in WEEKDAY_INDEX:
        errors.append("Valid day of week is required")

    start_time = data.get("startTime")
    if start_time is not None and not _TIME_PATTERN.match(str(start_time)):
        errors.append("Valid start time is required (HH:MM format)")

    frequency = data.get("frequency")
    if frequency is not None and frequency not in FREQUENCIES:
        errors.append("Valid frequency is required")

    attendance_type = data.get("attendanceType")
    if attendance_type not in ATTENDANCE_TYPES:
        errors.append("Valid attendance type is required")

    custom = data.get("customSchedule")
    if custom:
        if not isinstance(custom, dict) or custom.get("type") not in ("one_off", "recurring"):
            errors.append("Custom schedule must have valid type")
        else:
            if not custom.get("startDate"):
                errors.append("Custom schedule must have startDate")
            if custom["type"] == "recurring" and not custom.get("endDate"):
                errors.append("Recurring schedule must have endDate")

    has_basic = bool(day_of_week and start_time and frequency)
    if attendance_type == "standard" and not has_basic:
        errors.append("Standard gatherings require day of week, start time, and frequency")
    if attendance_type == "headcount" and not custom and not has_basic:
        errors.append("Headcount gatherings require either a custom schedule or basic schedule fields")

    return errors


def kiosk_gatherings(gatherings: list[Gathering]) -> list[Gathering]:
    """Active standard gatherings with the kiosk enabled."""
    return [
        g
        for g in gatherings
        if g.is_active and g.kiosk_enabled and g.attendance_type == "standard"
    ]


def describe_days_away(days_away: int) -> str:
    """Human-readable distance to an occurrence."""
    if days_away == 0:
        return "today"
    if days_away == 1:
        return "tomorrow"
    return f"in {days_away} days"
