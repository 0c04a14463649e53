from datetime import date, datetime

import pytest

from engine.dates import add_days, as_date, days_between, week_start


@pytest.mark.parametrize('value, expected', [
    (date(2024, 2, 29), date(2024, 2, 29)),
    (datetime(2024, 2, 29, 23, 59), date(2024, 2, 29)),
    ('2024-02-29', date(2024, 2, 29)),
    ('2024-02-29T08:30:00Z', date(2024, 2, 29)),
    ('', None),
    ('   ', None),
    ('not a date', None),
    ('2023-02-29', None),
    (None, None),
])
def test_as_date(value, expected):
    assert as_date(value) == expected


def test_days_between_is_signed():
    assert days_between(date(2024, 1, 1), date(2024, 1, 10)) == 9
    assert days_between(date(2024, 1, 10), date(2024, 1, 1)) == -9
    assert days_between(date(2024, 2, 28), date(2024, 3, 1)) == 2


def test_week_start_is_monday():
    assert week_start(date(2024, 3, 15)) == date(2024, 3, 11)
    assert week_start(date(2024, 3, 11)) == date(2024, 3, 11)
    assert add_days(date(2024, 12, 31), 1) == date(2025, 1, 1)
