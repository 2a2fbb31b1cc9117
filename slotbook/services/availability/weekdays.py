# ===== slotbook/services/availability/weekdays.py =====
"""
Two day-of-week numberings exist in this codebase:

- storage numbering, used by availability_rules.day_of_week and the public
  day-name formatter: 0=Sunday, 1=Monday .. 6=Saturday
- date key numbering, used when resolving a calendar date: 1=Monday ..
  6=Saturday, 7=Sunday (ISO weekday)

Only storage_day_for_key converts between them.
"""
from datetime import date

DAY_NAMES = {
    0: "Sunday",
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
}


def day_name(day_of_week: int) -> str:
    """Display name for a storage day number"""
    return DAY_NAMES.get(day_of_week, "Unknown")


def day_key_for_date(value: date) -> int:
    """Date key for a calendar date, Sunday=7"""
    return value.isoweekday()


def storage_day_for_key(day_key: int) -> int:
    """Map a date key (Sunday=7) to the storage numbering (Sunday=0)"""
    if not 1 <= day_key <= 7:
        raise ValueError(f"Invalid day key: {day_key}")
    return day_key % 7
