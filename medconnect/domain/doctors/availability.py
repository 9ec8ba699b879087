"""
Weekly availability template and slot checks.

A template is seven day entries, Monday first:
    {"day": "Monday", "startTime": "09:00", "endTime": "17:00", "isAvailable": True}

Times are wall-clock only, no timezone is attached.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

DEFAULT_TIMINGS = [
    {"day": day, "startTime": "09:00", "endTime": "17:00", "isAvailable": True}
    for day in WEEKDAYS[:5]
] + [
    {"day": day, "startTime": "09:00", "endTime": "14:00", "isAvailable": False}
    for day in WEEKDAYS[5:]
]


def default_timings() -> list[dict]:
    return [dict(entry) for entry in DEFAULT_TIMINGS]


def parse_clock(value: str) -> time:
    """Parse "HH:MM" (24h) or "H:MM AM" (12h) into a time"""
    raw = (value or "").strip().upper()
    # Try 24h format first
    for fmt in ("%H:%M", "%I:%M %p", "%I:%M%p"):
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time '{value}'. Expected HH:MM or H:MM AM/PM")


def format_slot(t: time) -> str:
    """Format a time as the display slot used on bookings, e.g. "9:30 AM" """
    period = "AM" if t.hour < 12 else "PM"
    display_hour = t.hour if t.hour <= 12 else t.hour - 12
    if display_hour == 0:
        display_hour = 12
    return f"{display_hour}:{t.minute:02d} {period}"


def normalize_slot(value: str) -> str:
    return format_slot(parse_clock(value))


def format_clock(t: time) -> str:
    return t.strftime("%H:%M")


def normalize_timings(entries: Iterable[dict]) -> list[dict]:
    """
    Validate a weekly template and return it in Monday..Sunday order.

    Raises:
        ValueError: unless there is exactly one entry per weekday and every
        available day has start < end
    """
    by_day: dict[str, dict] = {}
    for entry in entries:
        day = str(entry.get("day", "")).strip().capitalize()
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown day '{entry.get('day')}'")
        if day in by_day:
            raise ValueError(f"Duplicate entry for {day}")

        start = parse_clock(entry.get("startTime", ""))
        end = parse_clock(entry.get("endTime", ""))
        is_available = bool(entry.get("isAvailable", False))
        if is_available and start >= end:
            raise ValueError(f"{day}: start time must be before end time")

        by_day[day] = {
            "day": day,
            "startTime": format_clock(start),
            "endTime": format_clock(end),
            "isAvailable": is_available,
        }

    missing = [day for day in WEEKDAYS if day not in by_day]
    if missing:
        raise ValueError(f"Timings must cover all seven days; missing {', '.join(missing)}")

    return [by_day[day] for day in WEEKDAYS]


def day_entry(timings: list[dict], on_date: date) -> Optional[dict]:
    weekday = WEEKDAYS[on_date.weekday()]
    for entry in timings or []:
        if entry.get("day") == weekday:
            return entry
    return None


def working_window(timings: list[dict], on_date: date) -> Optional[tuple[time, time]]:
    """(start, end) for the date's weekday, or None when the doctor is off"""
    entry = day_entry(timings, on_date)
    if not entry or not entry.get("isAvailable"):
        return None
    return parse_clock(entry["startTime"]), parse_clock(entry["endTime"])


def is_slot_offered(timings: list[dict], on_date: date, slot: time) -> bool:
    """True when the weekday is available and start <= slot < end"""
    window = working_window(timings, on_date)
    if window is None:
        return False
    start, end = window
    return start <= slot < end


def offered_slots(timings: list[dict], on_date: date, step_minutes: int) -> list[str]:
    """Every slot start in the day's window, stepping by step_minutes"""
    if step_minutes < 1:
        raise ValueError(f"Slot length must be a positive number of minutes, got {step_minutes}")

    window = working_window(timings, on_date)
    if window is None:
        return []

    start, end = window
    current = datetime.combine(on_date, start)
    end_dt = datetime.combine(on_date, end)
    step = timedelta(minutes=step_minutes)

    slots = []
    while current < end_dt:
        slots.append(format_slot(current.time()))
        current += step
    return slots
