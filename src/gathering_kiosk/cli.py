"""Gathering kiosk CLI."""

import json
import logging
import sys
import time
from datetime import date, datetime, timedelta

import click

from .adapters.file_gatherings import FileGatheringRepository
from .adapters.system_clock import SystemClock
from .config import Config, load_config
from .core.gatherings import (
    Gathering,
    GatheringError,
    describe_days_away,
    kiosk_gatherings,
    validate_gathering,
)
from .core.kiosk import (
    KioskLock,
    KioskMode,
    KioskModeMachine,
    compute_default_mode,
    default_end_time,
    parse_hhmm,
)
from .core.schedule import OneOffSchedule, expand_occurrences, to_date
from .kiosk_session import KioskSession

logger = logging.getLogger(__name__)


def _parse_today(ctx, param, value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return to_date(value)
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD")


def _parse_time(ctx, param, value: str | None) -> str | None:
    if value is None:
        return None
    try:
        parse_hhmm(value)
    except ValueError:
        raise click.BadParameter("expected HH:MM")
    return value


def _repository(config: Config, path: str | None) -> FileGatheringRepository:
    return FileGatheringRepository(path or config.gatherings_path)


def _load_gatherings(config: Config, path: str | None) -> list[Gathering]:
    try:
        return _repository(config, path).list_gatherings()
    except GatheringError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _find_gathering(config: Config, path: str | None, gathering_id: int) -> Gathering:
    try:
        gathering = _repository(config, path).get_gathering(gathering_id)
    except GatheringError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if gathering is None:
        click.echo(f"Error: no gathering with id {gathering_id}", err=True)
        sys.exit(1)
    return gathering


file_option = click.option(
    "--file",
    "gatherings_file",
    type=click.Path(dir_okay=False),
    help="Gatherings JSON file (defaults to GATHERINGS_FILE from kiosk.conf)",
)
today_option = click.option(
    "--today",
    callback=_parse_today,
    help="Resolve relative to this date (YYYY-MM-DD) instead of the clock",
)


@click.group()
@click.version_option(package_name="gathering-kiosk")
def main():
    """Gathering kiosk - schedule resolver and kiosk mode tools."""
    pass


@main.command("next")
@file_option
@today_option
@click.option("--kiosk-only", is_flag=True, help="Only gatherings enabled for the kiosk")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def next_gatherings(gatherings_file: str | None, today: date | None, kiosk_only: bool, as_json: bool):
    """Show the next date of each gathering."""
    config = load_config()
    today = today or SystemClock(config.timezone or None).today()

    gatherings = _load_gatherings(config, gatherings_file)
    if kiosk_only:
        gatherings = kiosk_gatherings(gatherings)

    resolved = [
        (g, g.next_occurrence(today, config.schedule_horizon_weeks)) for g in gatherings
    ]

    if as_json:
        click.echo(
            json.dumps(
                [{"id": g.id, "name": g.name, **occurrence.to_dict()} for g, occurrence in resolved],
                indent=2,
            )
        )
        return

    if not resolved:
        click.echo("No gatherings.")
        return

    for gathering, occurrence in resolved:
        when = describe_days_away(occurrence.days_away)
        click.echo(f"{gathering.name:30} {occurrence.date.strftime('%a %Y-%m-%d')} ({when})")


@main.command()
@click.argument("gathering_id", type=int)
@file_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def occurrences(gathering_id: int, gatherings_file: str | None, as_json: bool):
    """List the dates a custom-scheduled gathering expands to."""
    config = load_config()
    gathering = _find_gathering(config, gatherings_file, gathering_id)

    if gathering.custom_schedule is None:
        click.echo(f"{gathering.name} has no custom schedule.", err=True)
        sys.exit(1)

    dates = expand_occurrences(gathering.custom_schedule, config.schedule_horizon_weeks)

    if as_json:
        click.echo(json.dumps([d.isoformat() for d in dates], indent=2))
        return

    kind = "One-off" if isinstance(gathering.custom_schedule, OneOffSchedule) else "Recurring"
    click.echo(f"### {gathering.name} ({kind})")
    if not dates:
        click.echo("No occurrences in range.")
    for d in dates:
        click.echo(f"  {d.strftime('%A, %B %d %Y')}")


@main.command()
@click.option("--start", "start_time", callback=_parse_time, help="Kiosk start time (HH:MM)")
@click.option("--end", "end_time", callback=_parse_time, help="Kiosk end time (HH:MM)")
@click.option("--at", "at_time", callback=_parse_time, help="Evaluate at this time today (HH:MM)")
def mode(start_time: str | None, end_time: str | None, at_time: str | None):
    """Show whether the kiosk should be checking people in or out."""
    config = load_config()
    start_time = start_time or config.kiosk_start_time
    end_time = end_time or config.kiosk_end_time
    if not end_time:
        if not start_time:
            click.echo("Error: a start or end time is required", err=True)
            sys.exit(1)
        try:
            end_time = default_end_time(start_time)
        except ValueError:
            click.echo(f"Error: invalid start time {start_time!r}", err=True)
            sys.exit(1)

    now = SystemClock(config.timezone or None).now()
    if at_time:
        now = datetime.combine(now.date(), parse_hhmm(at_time), tzinfo=now.tzinfo)

    lead = config.kiosk_checkout_lead_minutes
    result = compute_default_mode(end_time, now, checkout_lead=timedelta(minutes=lead))
    click.echo(f"{now.strftime('%H:%M')} -> {result.label} (check-out from {lead} min before {end_time})")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def validate(path: str):
    """Check a gatherings JSON file against the gathering rules."""
    try:
        payloads = FileGatheringRepository(path).load_raw()
    except GatheringError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    failures = 0
    for i, payload in enumerate(payloads):
        if isinstance(payload, dict):
            label = payload.get("name") or f"#{i}"
            errors = validate_gathering(payload)
        else:
            label = f"#{i}"
            errors = ["Gathering must be an object"]
        if errors:
            failures += 1
            click.echo(f"✗ {label}")
            for error in errors:
                click.echo(f"    {error}")
        else:
            click.echo(f"✓ {label}")

    if failures:
        click.echo(f"{failures} of {len(payloads)} gatherings invalid.", err=True)
        sys.exit(1)


@main.command()
@click.argument("gathering_id", type=int, required=False)
@file_option
@click.option("--start", "start_time", callback=_parse_time, help="Kiosk start time (HH:MM)")
@click.option("--end", "end_time", callback=_parse_time, help="Kiosk end time (HH:MM)")
@click.option("--pin", prompt=True, hide_input=True, confirmation_prompt=True, help="PIN to unlock the kiosk")
def run(
    gathering_id: int | None,
    gatherings_file: str | None,
    start_time: str | None,
    end_time: str | None,
    pin: str,
):
    """Run the kiosk mode loop for a gathering until unlocked with the PIN (Ctrl-C)."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = load_config()
    gathering_id = gathering_id if gathering_id is not None else config.kiosk_gathering_id
    if gathering_id is None:
        click.echo("Error: no gathering id given and KIOSK_GATHERING_ID not configured", err=True)
        sys.exit(1)

    gathering = _find_gathering(config, gatherings_file, gathering_id)
    clock = SystemClock(config.timezone or None)
    occurrence = gathering.next_occurrence(clock.today(), config.schedule_horizon_weeks)

    times = gathering.kiosk_times()
    start_time = start_time or config.kiosk_start_time or (times[0] if times else "")
    end_time = end_time or config.kiosk_end_time or (times[1] if times else "")
    if not end_time and start_time:
        try:
            end_time = default_end_time(start_time)
        except ValueError:
            click.echo(f"Error: invalid start time {start_time!r}", err=True)
            sys.exit(1)
    if not end_time:
        click.echo(f"Error: {gathering.name} has no start time; pass --start/--end", err=True)
        sys.exit(1)

    lock = KioskLock()
    lock.lock(pin, gathering.id, gathering.name, start_time, end_time, gathering.kiosk_message or "")

    click.echo(
        f"Kiosk for {gathering.name} on {occurrence.date.isoformat()} "
        f"({describe_days_away(occurrence.days_away)}), {start_time}-{end_time}"
    )
    if occurrence.days_away:
        logger.warning(f"{gathering.name} is not on today; attendance will be recorded for {occurrence.date}")

    def announce(mode: KioskMode) -> None:
        click.echo(f"[{clock.now().strftime('%H:%M')}] Mode: {mode.label}")

    machine = KioskModeMachine(
        start_time=start_time,
        end_time=end_time,
        checkout_lead=timedelta(minutes=config.kiosk_checkout_lead_minutes),
    )
    session = KioskSession(
        machine,
        clock=clock,
        interval_minutes=config.kiosk_mode_interval_minutes,
        on_mode=announce,
    )

    with session:
        while lock.is_locked:
            try:
                time.sleep(1)
            except KeyboardInterrupt:
                entered = click.prompt("\nPIN to unlock", hide_input=True, default="", show_default=False)
                if not lock.unlock(entered):
                    click.echo("Incorrect PIN.")
    click.echo("Kiosk unlocked.")
