MAX_RECENT_SEARCHES = 3


def push_recent_city(
    cities: list[str], city: str, limit: int = MAX_RECENT_SEARCHES
) -> list[str]:
    """Append *city*, evicting the oldest entries once *limit* is reached.

    Returns a new list; the input is left untouched.
    """
    updated = list(cities) + [city]
    return updated[-limit:] if limit > 0 else []
