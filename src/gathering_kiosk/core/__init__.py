"""Functional core - pure business logic with no I/O."""

from .schedule import (
    NextOccurrence,
    OneOffSchedule,
    PatternFrequency,
    RecurrenceDefinition,
    RecurrencePattern,
    RecurringSchedule,
    expand_occurrences,
    resolve_next_occurrence,
)
from .kiosk import KioskLock, KioskMode, KioskModeMachine, compute_default_mode, default_end_time
from .gatherings import Gathering, GatheringError, kiosk_gatherings, validate_gathering

__all__ = [
    # Schedule
    "NextOccurrence",
    "OneOffSchedule",
    "PatternFrequency",
    "RecurrenceDefinition",
    "RecurrencePattern",
    "RecurringSchedule",
    "expand_occurrences",
    "resolve_next_occurrence",
    # Kiosk
    "KioskLock",
    "KioskMode",
    "KioskModeMachine",
    "compute_default_mode",
    "default_end_time",
    # Gatherings
    "Gathering",
    "GatheringError",
    "kiosk_gatherings",
    "validate_gathering",
]
