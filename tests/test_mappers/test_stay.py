from datetime import date

from quickstay.mappers.stay import (
    count_nights,
    is_valid_stay,
    occupied_nights,
    overlaps,
    to_minor_units,
    total_price,
)


def test_valid_stay_requires_checkout_after_checkin():
    assert is_valid_stay(date(2025, 1, 1), date(2025, 1, 2))
    assert not is_valid_stay(date(2025, 1, 2), date(2025, 1, 2))
    assert not is_valid_stay(date(2025, 1, 3), date(2025, 1, 2))


def test_overlapping_stays():
    # [01-01, 01-05) vs [01-04, 01-06)
    assert overlaps(date(2025, 1, 1), date(2025, 1, 5), date(2025, 1, 4), date(2025, 1, 6))
    assert overlaps(date(2025, 1, 4), date(2025, 1, 6), date(2025, 1, 1), date(2025, 1, 5))


def test_contained_stay_overlaps():
    assert overlaps(date(2025, 1, 1), date(2025, 1, 10), date(2025, 1, 3), date(2025, 1, 4))


def test_back_to_back_stays_do_not_overlap():
    assert not overlaps(date(2025, 1, 1), date(2025, 1, 5), date(2025, 1, 5), date(2025, 1, 7))
    assert not overlaps(date(2025, 1, 5), date(2025, 1, 7), date(2025, 1, 1), date(2025, 1, 5))


def test_count_nights():
    assert count_nights(date(2025, 1, 1), date(2025, 1, 3)) == 2
    assert count_nights(date(2025, 1, 31), date(2025, 2, 2)) == 2


def test_count_nights_never_below_one():
    assert count_nights(date(2025, 1, 1), date(2025, 1, 1)) == 1


def test_occupied_nights_exclude_checkout_day():
    nights = occupied_nights(date(2025, 1, 30), date(2025, 2, 2))
    assert nights == [date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1)]


def test_total_price():
    assert total_price(100.0, 2) == 200.0
    assert total_price(89.5, 3) == 268.5


def test_to_minor_units():
    assert to_minor_units(200.0) == 20000
    assert to_minor_units(19.99) == 1999
    assert to_minor_units(0.1 + 0.2) == 30
