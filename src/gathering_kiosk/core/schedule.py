"""Pure gathering schedule logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

WEEKDAY_INDEX = {
    "Sunday": 0,
    "Monday": 1,
    "Tuesday": 2,
    "Wednesday": 3,
    "Thursday": 4,
    "Friday": 5,
    "Saturday": 6,
}

DEFAULT_HORIZON_WEEKS = 8


class PatternFrequency(Enum):
    """How a recurring custom schedule repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class RecurrencePattern:
    """Repeat rule of a recurring custom schedule."""

    frequency: PatternFrequency
    interval: int = 1
    days_of_week: tuple[str, ...] = ()
    day_of_month: int | None = None
    custom_dates: tuple[date, ...] = ()


@dataclass(frozen=True)
class OneOffSchedule:
    """A gathering that happens on a single calendar date."""

    start_date: date


@dataclass(frozen=True)
class RecurringSchedule:
    """A pattern-based schedule between start_date and end_date (exclusive)."""

    start_date: date
    pattern: RecurrencePattern | None = None
    end_date: date | None = None

    def effective_end_date(self, horizon_weeks: int = DEFAULT_HORIZON_WEEKS) -> date:
        """
        End date, or start_date plus the expansion horizon when open-ended.

        Clamped to date.max for start dates near the end of the calendar.
        """
        if self.end_date:
            return self.end_date
        try:
            return self.start_date + timedelta(weeks=horizon_weeks)
        except OverflowError:
            return date.max


CustomSchedule = OneOffSchedule | RecurringSchedule


@dataclass(frozen=True)
class RecurrenceDefinition:
    """
    How a gathering repeats.

    A custom schedule, when present, takes precedence over the simple
    day_of_week. The frequency tag is advisory and never changes the
    date arithmetic of the simple form.
    """

    day_of_week: str | None = None
    frequency: str = "weekly"
    custom_schedule: CustomSchedule | None = None


@dataclass(frozen=True)
class NextOccurrence:
    """The resolved next date of a gathering."""

    date: date
    days_away: int

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "daysAway": self.days_away}


def to_date(value: date | datetime | str) -> date:
    """
    Normalize a date-ish value to a calendar day.

    Accepts date, datetime (time-of-day dropped) or an ISO string whose first
    ten characters are YYYY-MM-DD. Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Not a date: {value!r}")


def sunday_weekday(d: date) -> int:
    """Weekday index with Sunday=0 .. Saturday=6."""
    return (d.weekday() + 1) % 7


def start_of_week(d: date) -> date:
    """The Sunday on or before d."""
    return d - timedelta(days=sunday_weekday(d))


def _shift(d: date, days: int) -> date | None:
    """d plus days, or None when that falls outside the calendar."""
    try:
        return d + timedelta(days=days)
    except OverflowError:
        return None


def _month_day(year: int, month: int, day: int) -> date | None:
    # Days past the end of the month roll into the next one (Feb 31 -> Mar 2/3).
    return _shift(date(year, month, 1), day - 1)


def _cursor(start: date, end: date, step: timedelta):
    """Yield start, start + step, ... while before end, never stepping past date.max."""
    current = start
    while current < end:
        yield current
        if end - current <= step:
            return
        current += step


def _daily_dates(pattern: RecurrencePattern, start: date, end: date) -> list[date]:
    if pattern.custom_dates:
        return list(pattern.custom_dates)

    if start >= end:
        return []
    interval = max(pattern.interval or 1, 1)
    if interval > (end - start).days:
        return [start]
    return list(_cursor(start, end, timedelta(days=interval)))


def _weekly_dates(pattern: RecurrencePattern, start: date, end: date) -> list[date]:
    targets = [
        WEEKDAY_INDEX[d] for d in pattern.days_of_week if isinstance(d, str) and d in WEEKDAY_INDEX
    ]
    if not targets:
        return []

    biweekly = pattern.frequency is PatternFrequency.BIWEEKLY
    dates = []
    for week, current in enumerate(_cursor(start, end, timedelta(weeks=1))):
        if biweekly and week % 2:
            continue
        week_start = _shift(current, -sunday_weekday(current))
        if week_start is None:
            continue
        for offset in targets:
            candidate = _shift(week_start, offset)
            if candidate is not None and start <= candidate < end:
                dates.append(candidate)
    return dates


def _monthly_dates(pattern: RecurrencePattern, start: date, end: date) -> list[date]:
    if not pattern.day_of_month or pattern.day_of_month < 1:
        return []

    dates = []
    # Four weeks, not one calendar month: drifts against day_of_month.
    for current in _cursor(start, end, timedelta(weeks=4)):
        candidate = _month_day(current.year, current.month, pattern.day_of_month)
        if candidate is not None and start <= candidate < end:
            dates.append(candidate)
    return dates


def expand_occurrences(
    schedule: CustomSchedule,
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
) -> list[date]:
    """
    All candidate dates of a custom schedule, sorted ascending.

    Pure function - no I/O.

    Args:
        schedule: One-off or recurring custom schedule
        horizon_weeks: Expansion window for recurring schedules without an end date

    Returns:
        Sorted list of dates (may contain duplicates for monthly patterns)
    """
    if isinstance(schedule, OneOffSchedule):
        return [schedule.start_date]

    pattern = schedule.pattern
    if pattern is None:
        return []

    start = schedule.start_date
    end = schedule.effective_end_date(horizon_weeks)

    match pattern.frequency:
        case PatternFrequency.DAILY:
            dates = _daily_dates(pattern, start, end)
        case PatternFrequency.WEEKLY | PatternFrequency.BIWEEKLY:
            dates = _weekly_dates(pattern, start, end)
        case PatternFrequency.MONTHLY:
            dates = _monthly_dates(pattern, start, end)
        case _:
            dates = []

    return sorted(dates)


def _occurrence(target: date, today: date) -> NextOccurrence:
    return NextOccurrence(date=target, days_away=max((target - today).days, 0))


def next_weekday_occurrence(day_of_week: str | None, today: date) -> NextOccurrence:
    """
    Next date (today included) falling on the named weekday.

    Unknown or missing weekday names resolve to today, as does a weekday that
    would fall past date.max.
    """
    target = WEEKDAY_INDEX.get(day_of_week) if isinstance(day_of_week, str) else None
    if target is None:
        return NextOccurrence(date=today, days_away=0)

    days_until = (target - sunday_weekday(today)) % 7
    upcoming = _shift(today, days_until)
    if upcoming is None:
        return NextOccurrence(date=today, days_away=0)
    return NextOccurrence(date=upcoming, days_away=days_until)


def resolve_next_occurrence(
    definition: RecurrenceDefinition,
    today: date | datetime | str,
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
) -> NextOccurrence:
    """
    Resolve the next occurrence of a gathering relative to today.

    Pure function - no I/O. Never raises for a well-typed definition:
    incomplete schedules degrade to a best-effort date.

    Order of precedence:
        1. One-off custom schedule: its start date.
        2. Recurring custom schedule: first candidate on or after today,
           else the latest candidate.
        3. Simple weekly form: next matching weekday.
    """
    today = to_date(today)
    custom = definition.custom_schedule

    if isinstance(custom, OneOffSchedule):
        return _occurrence(custom.start_date, today)

    if isinstance(custom, RecurringSchedule):
        candidates = expand_occurrences(custom, horizon_weeks)
        if candidates:
            upcoming = next((d for d in candidates if d >= today), candidates[-1])
            return _occurrence(upcoming, today)

    return next_weekday_occurrence(definition.day_of_week, today)


def parse_custom_schedule(data: dict) -> CustomSchedule:
    """
    Build a custom schedule from the backend's camelCase payload.

    Raises ValueError when the payload has no usable type or start date.
    """
    if not isinstance(data, dict):
        raise ValueError("Custom schedule must be an object")

    kind = data.get("type")
    if kind not in ("one_off", "recurring"):
        raise ValueError(f"Custom schedule must have valid type, got {kind!r}")
    if not data.get("startDate"):
        raise ValueError("Custom schedule must have startDate")

    start = to_date(data["startDate"])
    if kind == "one_off":
        return OneOffSchedule(start_date=start)

    end = to_date(data["endDate"]) if data.get("endDate") else None
    pattern = None
    if data.get("pattern"):
        pattern = parse_pattern(data["pattern"])
    return RecurringSchedule(start_date=start, pattern=pattern, end_date=end)


def parse_pattern(data: dict) -> RecurrencePattern:
    """Build a recurrence pattern; unknown frequencies raise ValueError."""
    if not isinstance(data, dict):
        raise ValueError("Recurrence pattern must be an object")
    frequency = PatternFrequency(data.get("frequency"))

    custom_dates = []
    for raw in data.get("customDates") or []:
        try:
            custom_dates.append(to_date(raw))
        except ValueError:
            continue

    days_of_week = data.get("daysOfWeek") or ()
    if isinstance(days_of_week, str):
        days_of_week = [days_of_week]

    day_of_month = int(data["dayOfMonth"]) if data.get("dayOfMonth") else None
    if day_of_month is not None and not 1 <= day_of_month <= 31:
        raise ValueError(f"Day of month must be between 1 and 31, got {day_of_month}")

    return RecurrencePattern(
        frequency=frequency,
        interval=int(data.get("interval") or 1),
        days_of_week=tuple(d for d in days_of_week if isinstance(d, str)),
        day_of_month=day_of_month,
        custom_dates=tuple(custom_dates),
    )
