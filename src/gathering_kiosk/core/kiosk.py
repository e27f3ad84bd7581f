"""Pure kiosk mode logic - no I/O dependencies."""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_CHECKOUT_LEAD = timedelta(minutes=15)


class KioskMode(Enum):
    """Whether the kiosk is signing people in or out."""

    CHECKIN = "checkin"
    CHECKOUT = "checkout"

    @property
    def label(self) -> str:
        return "Check-in" if self is KioskMode.CHECKIN else "Check-out"


def parse_hhmm(value: str) -> time:
    """Parse an 'HH:MM' (or 'HH:MM:SS') string. Raises ValueError."""
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time: {value!r}")
    return time(int(parts[0]), int(parts[1]))


def default_end_time(start_time: str) -> str:
    """Kiosk end time when only a start is known: one hour later, wrapping at midnight."""
    start = parse_hhmm(start_time)
    return f"{(start.hour + 1) % 24:02d}:{start.minute:02d}"


def compute_default_mode(
    end_time: str,
    now: datetime,
    checkout_lead: timedelta = DEFAULT_CHECKOUT_LEAD,
) -> KioskMode:
    """
    Automatic kiosk mode for a moment in time.

    Pure function - no I/O. The kiosk switches to check-out once now reaches
    end_time (on now's date) minus checkout_lead. An unparseable end time keeps
    the kiosk in check-in.
    """
    try:
        end = datetime.combine(now.date(), parse_hhmm(end_time), tzinfo=now.tzinfo)
    except ValueError:
        logger.warning(f"Invalid kiosk end time: {end_time!r}")
        return KioskMode.CHECKIN

    if now >= end - checkout_lead:
        return KioskMode.CHECKOUT
    return KioskMode.CHECKIN


@dataclass
class KioskModeMachine:
    """
    Check-in/check-out state of one kiosk screen.

    evaluate() applies the time-based rule and clears any manual override, so
    an operator's toggle lasts only until the next scheduled evaluation.
    """

    start_time: str
    end_time: str
    checkout_lead: timedelta = DEFAULT_CHECKOUT_LEAD
    mode: KioskMode = KioskMode.CHECKIN
    overridden: bool = False

    def evaluate(self, now: datetime) -> KioskMode:
        self.mode = compute_default_mode(self.end_time, now, self.checkout_lead)
        self.overridden = False
        return self.mode

    def override(self, mode: KioskMode) -> KioskMode:
        self.mode = mode
        self.overridden = True
        return self.mode

    def toggle(self) -> KioskMode:
        other = KioskMode.CHECKOUT if self.mode is KioskMode.CHECKIN else KioskMode.CHECKIN
        return self.override(other)


@dataclass
class KioskLock:
    """PIN lock of the kiosk screen. Held in memory only."""

    is_locked: bool = False
    pin: str | None = None
    gathering_id: int | None = None
    gathering_name: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    custom_message: str | None = None

    def lock(
        self,
        pin: str,
        gathering_id: int,
        gathering_name: str,
        start_time: str,
        end_time: str,
        custom_message: str = "",
    ) -> None:
        if not pin:
            raise ValueError("A PIN is required to lock the kiosk")
        self.is_locked = True
        self.pin = pin
        self.gathering_id = gathering_id
        self.gathering_name = gathering_name
        self.start_time = start_time
        self.end_time = end_time
        self.custom_message = custom_message

    def unlock(self, pin: str) -> bool:
        """Unlock if pin matches. Returns whether the kiosk was unlocked."""
        if self.pin and pin == self.pin:
            self.force_unlock()
            return True
        return False

    def force_unlock(self) -> None:
        self.is_locked = False
        self.pin = None
        self.gathering_id = None
        self.gathering_name = None
        self.start_time = None
        self.end_time = None
        self.custom_message = None
