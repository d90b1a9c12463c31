"""Cadence CLI - session scheduling and suggestions."""

import json
import logging
import sys

import click

from .config import load_config
from .core.calendar import DAY_NAMES
from .core.models import Session, parse_timestamp
from .core.sessions import (
    format_session_time,
    group_sessions_by_day,
    today_sessions,
    upcoming_sessions,
    week_sessions,
)
from .errors import CadenceError, ConflictError
from .workflows import (
    complete_session,
    create_availability_window,
    create_session,
    create_session_type,
    delete_availability_window,
    delete_session,
    delete_session_type,
    get_progress,
    get_store,
    get_suggestions,
    get_suggestions_for_all,
    list_sessions,
    seed_session_types,
    update_session,
    update_session_type,
)

EXIT_ERROR = 1
EXIT_CONFLICT = 2


def _fail(e: Exception) -> None:
    """Report a caller-facing error and exit."""
    click.echo(f"Error: {e}", err=True)
    if isinstance(e, ConflictError):
        for s in e.conflicts:
            if isinstance(s, Session):
                click.echo(
                    f"  conflicts with {s.session_type.name} "
                    f"{s.start_time.isoformat()} - {s.end_time.isoformat()} ({s.id})",
                    err=True,
                )
            else:
                click.echo(f"  conflicts with {s}", err=True)
        sys.exit(EXIT_CONFLICT)
    sys.exit(EXIT_ERROR)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """Cadence - schedule recurring sessions around your availability."""
    config = load_config()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else getattr(logging, config.log_level, logging.WARNING),
    )
    ctx.obj = config


# ============== Session types ==============


@main.group()
def types():
    """Manage session types."""
    pass


@types.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def types_list(config, as_json: bool):
    """List session types."""
    try:
        session_types = get_store(config).list_session_types()
    except RuntimeError as e:
        _fail(e)

    if as_json:
        _echo_json([t.to_dict() for t in session_types])
        return

    if not session_types:
        click.echo("No session types. Add one with 'cadence types add' or run 'cadence seed'.")
        return

    for t in session_types:
        click.echo(f"[{'!' * t.priority:5}] {t.name} ({t.category})  {t.id}")


@types.command("add")
@click.argument("name")
@click.option("--category", "-c", required=True, help="Category, e.g. Work")
@click.option("--priority", "-p", type=int, default=3, show_default=True, help="Priority 1-5")
@click.pass_obj
def types_add(config, name: str, category: str, priority: int):
    """Create a session type."""
    try:
        t = create_session_type(get_store(config), name, category, priority)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"Created {t.name} ({t.id})")


@types.command("edit")
@click.argument("session_type_id")
@click.option("--name", default=None)
@click.option("--category", "-c", default=None)
@click.option("--priority", "-p", type=int, default=None)
@click.pass_obj
def types_edit(config, session_type_id: str, name: str | None, category: str | None, priority: int | None):
    """Update a session type."""
    try:
        t = update_session_type(get_store(config), session_type_id, name, category, priority)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"Updated {t.name} ({t.id})")


@types.command("rm")
@click.argument("session_type_id")
@click.pass_obj
def types_rm(config, session_type_id: str):
    """Delete a session type with no sessions."""
    try:
        delete_session_type(get_store(config), session_type_id)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"Deleted {session_type_id}")


# ============== Availability ==============


def _parse_day(value: str) -> int:
    """Accept 0-6 (Sunday=0) or a day name / prefix."""
    if value.isdigit():
        return int(value)
    for i, name in enumerate(DAY_NAMES):
        if name.lower().startswith(value.lower()) and len(value) >= 2:
            return i
    raise click.BadParameter(f"Unknown day: {value}")


@main.group()
def availability():
    """Manage weekly availability windows."""
    pass


@availability.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def availability_list(config, as_json: bool):
    """List availability windows."""
    try:
        windows = get_store(config).list_availability_windows()
    except RuntimeError as e:
        _fail(e)

    if as_json:
        _echo_json([w.to_dict() for w in windows])
        return

    if not windows:
        click.echo("No availability windows. Suggestions will use 06:00-22:00.")
        return

    for w in windows:
        click.echo(f"{DAY_NAMES[w.day_of_week]:10} {w.start_time}-{w.end_time}  {w.id}")


@availability.command("add")
@click.argument("day")
@click.argument("start_time")
@click.argument("end_time")
@click.pass_obj
def availability_add(config, day: str, start_time: str, end_time: str):
    """Add a window, e.g. 'cadence availability add monday 09:00 17:00'."""
    try:
        w = create_availability_window(get_store(config), _parse_day(day), start_time, end_time)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"Added {DAY_NAMES[w.day_of_week]} {w.start_time}-{w.end_time} ({w.id})")


@availability.command("rm")
@click.argument("window_id")
@click.pass_obj
def availability_rm(config, window_id: str):
    """Delete an availability window."""
    try:
        delete_availability_window(get_store(config), window_id)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"Deleted {window_id}")


# ============== Sessions ==============


@main.group()
def sessions():
    """Manage scheduled sessions."""
    pass


@sessions.command("list")
@click.option("--completed/--pending", default=None, help="Filter by completion")
@click.option("--from", "start", default=None, help="Earliest start (ISO-8601)")
@click.option("--to", "end", default=None, help="Latest start (ISO-8601)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def sessions_list(config, completed: bool | None, start: str | None, end: str | None, as_json: bool):
    """List sessions by date."""
    try:
        found = list_sessions(get_store(config), completed, start, end)
    except (CadenceError, RuntimeError) as e:
        _fail(e)

    if as_json:
        _echo_json([s.to_dict() for s in found])
        return

    if not found:
        click.echo("No sessions.")
        return

    now = config.now()
    current_date = None
    for s in found:
        session_date = s.start_time.astimezone(now.tzinfo).date()
        if session_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {session_date.strftime('%A, %B %d')}")
            current_date = session_date
        mark = "x" if s.completed else " "
        click.echo(f"  [{mark}] {format_session_time(s, now):20} {s.session_type.name}  {s.id}")


@sessions.command("week")
@click.pass_obj
def sessions_week(config):
    """Show this week's sessions (Sunday to Saturday) and what is left."""
    now = config.now()
    try:
        all_sessions = get_store(config).list_sessions()
    except RuntimeError as e:
        _fail(e)

    for day, day_sessions in group_sessions_by_day(week_sessions(all_sessions, now), now).items():
        click.echo(f"{day}:")
        if not day_sessions:
            click.echo("  -")
        for s in day_sessions:
            mark = "x" if s.completed else " "
            click.echo(f"  [{mark}] {format_session_time(s, now):20} {s.session_type.name}")

    click.echo(f"\nToday: {len(today_sessions(all_sessions, now))}  Upcoming: {len(upcoming_sessions(all_sessions, now))}")


@sessions.command("add")
@click.argument("session_type_id")
@click.argument("start_time")
@click.argument("end_time")
@click.pass_obj
def sessions_add(config, session_type_id: str, start_time: str, end_time: str):
    """Schedule a session. Times are ISO-8601; naive times are UTC."""
    try:
        s = create_session(get_store(config), session_type_id, start_time, end_time)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"Scheduled {s.session_type.name} at {s.start_time.isoformat()} ({s.id})")


@sessions.command("edit")
@click.argument("session_id")
@click.option("--start", "start_time", default=None, help="New start (ISO-8601)")
@click.option("--end", "end_time", default=None, help="New end (ISO-8601)")
@click.option("--completed/--pending", default=None)
@click.pass_obj
def sessions_edit(config, session_id: str, start_time: str | None, end_time: str | None, completed: bool | None):
    """Reschedule a session or change its completion."""
    try:
        s = update_session(get_store(config), session_id, completed, start_time, end_time)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"Updated {s.session_type.name} at {s.start_time.isoformat()} ({s.id})")


@sessions.command("done")
@click.argument("session_id")
@click.option("--undo", is_flag=True, help="Mark as not completed")
@click.pass_obj
def sessions_done(config, session_id: str, undo: bool):
    """Mark a session completed."""
    try:
        s = complete_session(get_store(config), session_id, completed=not undo)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"{'✓' if s.completed else '○'} {s.session_type.name} at {s.start_time.isoformat()}")


@sessions.command("rm")
@click.argument("session_id")
@click.pass_obj
def sessions_rm(config, session_id: str):
    """Delete a session."""
    try:
        delete_session(get_store(config), session_id)
    except (CadenceError, RuntimeError) as e:
        _fail(e)
    click.echo(f"Deleted {session_id}")


# ============== Suggestions & progress ==============


@main.command()
@click.argument("session_type_id", required=False)
@click.option("--all", "all_types", is_flag=True, help="Best slots across every session type")
@click.option("--duration", "-d", type=int, default=None, help="Session length in minutes")
@click.option("--days", type=int, default=None, help="Days to look ahead")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def suggest(config, session_type_id: str | None, all_types: bool, duration: int | None, days: int | None, as_json: bool):
    """Suggest time slots for a session type."""
    if not session_type_id and not all_types:
        raise click.UsageError("Give a SESSION_TYPE_ID or --all")

    store = get_store(config)
    try:
        if all_types:
            suggestions = get_suggestions_for_all(store, None, duration, days, config=config)
        else:
            suggestions = get_suggestions(store, session_type_id, duration, days, config=config)
        names = {t.id: t.name for t in store.list_session_types()}
    except (CadenceError, RuntimeError) as e:
        _fail(e)

    if as_json:
        _echo_json(suggestions)
        return

    if not suggestions:
        click.echo("No suitable slots found.")
        return

    tz = config.tzinfo()
    for s in suggestions:
        start = parse_timestamp(s["startTime"]).astimezone(tz)
        end = parse_timestamp(s["endTime"]).astimezone(tz)
        label = f" {names.get(s['sessionTypeId'], '')}" if all_types else ""
        click.echo(f"[{s['score']:3}] {start.strftime('%a %b %d %H:%M')}-{end.strftime('%H:%M')}{label}")
        click.echo(f"      {s['reason']}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def progress(config, as_json: bool):
    """Show completion statistics."""
    try:
        stats = get_progress(get_store(config))
    except RuntimeError as e:
        _fail(e)

    if as_json:
        _echo_json(stats)
        return

    click.echo(f"Scheduled:  {stats['totalScheduled']}")
    click.echo(f"Completed:  {stats['totalCompleted']} ({stats['completionRate']}%)")
    click.echo(f"Avg spacing: {stats['averageSpacing']} days")
    if stats["sessionsByType"]:
        click.echo("\nBy type:")
        for t in stats["sessionsByType"]:
            click.echo(f"  {t['count']:4}  {t['sessionTypeName']}")


@main.command()
@click.pass_obj
def seed(config):
    """Add the default session types to an empty store."""
    try:
        created = seed_session_types(get_store(config))
    except RuntimeError as e:
        _fail(e)

    if not created:
        click.echo("Session types already exist. Skipping seed.")
        return
    for t in created:
        click.echo(f"✓ Created session type: {t.name}")


if __name__ == "__main__":
    main()
