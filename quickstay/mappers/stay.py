"""Pure functions for stay arithmetic: overlap, nights and price.

No I/O, no side effects. Stays are half-open date intervals
[check_in, check_out): the check-out day is free for the next guest.
"""

import math
from datetime import date, timedelta

ONE_DAY = timedelta(days=1)


def is_valid_stay(check_in: date, check_out: date) -> bool:
    return check_out > check_in


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return a_start < b_end and a_end > b_start


def count_nights(check_in: date, check_out: date) -> int:
    """Nights between two dates, rounded up, never below 1."""
    return max(1, math.ceil((check_out - check_in) / ONE_DAY))


def occupied_nights(check_in: date, check_out: date) -> list[date]:
    """Every night a stay holds the room, check-in night included."""
    return [check_in + ONE_DAY * offset for offset in range((check_out - check_in).days)]


def total_price(price_per_night: float, nights: int) -> float:
    return price_per_night * nights


def to_minor_units(amount: float) -> int:
    """Convert an amount in a 2-decimal currency to its minor unit (cents)."""
    return int(round(amount * 100))
