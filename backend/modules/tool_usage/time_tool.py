"""
modules/tool_usage/time_tool.py
--------------------------------
Clock arithmetic and opening-hours feasibility.

All scheduling maths works on integer minutes since midnight; conversion to
``datetime.time`` only happens at the item boundary.

Opening-hours rules:
  opening_hours is None          → always open
  weekday missing from the table → open all day
  is_closed                      → closed all day
  close < open                   → window runs past midnight (close + 1440)
  feasible                       → start >= open and end <= close
"""

from __future__ import annotations
from datetime import date, time, timedelta
from typing import Optional

from schemas.location import WEEKDAYS, Location

MINUTES_PER_DAY = 1440


def parse_hhmm(value: str) -> int:
    """'HH:MM' → minutes since midnight."""
    hh, mm = str(value).split(":")[:2]
    return int(hh) * 60 + int(mm)


def t2m(t: time) -> int:
    """datetime.time → minutes since midnight."""
    return t.hour * 60 + t.minute


def m2t(minutes: int) -> time:
    """Minutes since midnight → datetime.time (clamped to 23:59)."""
    minutes = max(0, min(int(minutes), MINUTES_PER_DAY - 1))
    return time(minutes // 60, minutes % 60)


def m2hhmm(minutes: int) -> str:
    return m2t(minutes).strftime("%H:%M")


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def trip_day_date(start_date: Optional[date], day_number: int) -> Optional[date]:
    """Calendar date of trip day N (1-based), or None when the trip is undated."""
    if start_date is None:
        return None
    return start_date + timedelta(days=day_number - 1)


class TimeTool:
    """Opening-hours checks against catalog Locations."""

    def window(self, location: Location, weekday: str) -> Optional[tuple[int, int]]:
        """
        Return (open, close) minutes for a weekday, or None when closed.
        A location without a table, or without an entry for this weekday,
        is open all day.
        """
        hours = location.opening_hours
        if not hours:
            return (0, MINUTES_PER_DAY)
        entry = hours.get(weekday)
        if entry is None:
            return (0, MINUTES_PER_DAY)
        if entry.is_closed:
            return None
        open_m = parse_hhmm(entry.open)
        close_m = parse_hhmm(entry.close)
        if close_m < open_m:
            close_m += MINUTES_PER_DAY
        return (open_m, close_m)

    def is_within_window(
        self,
        location: Location,
        start_min: int,
        end_min: int,
        day: Optional[date] = None,
    ) -> bool:
        """
        True when a visit [start_min, end_min] fits the location's hours.
        Undated trips accept a visit that fits any open weekday.
        """
        if not location.opening_hours:
            return True
        weekdays = [weekday_name(day)] if day is not None else list(WEEKDAYS)
        for wd in weekdays:
            win = self.window(location, wd)
            if win is None:
                continue
            if start_min >= win[0] and end_min <= win[1]:
                return True
        return False

