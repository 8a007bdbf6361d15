from datetime import date

import pandas as pd
import pytest

from core.dates import (
    add_months,
    calendar_days,
    end_of_month,
    month_name,
    shift_period,
    start_of_month,
    to_day,
    trailing_months,
    within,
)


def test_to_day_normalizes_inputs():
    assert to_day("2024-03-10") == date(2024, 3, 10)
    assert to_day(pd.Timestamp("2024-03-10 18:30")) == date(2024, 3, 10)
    with pytest.raises(ValueError):
        to_day("10 de marzo")


def test_month_bounds():
    assert start_of_month(date(2024, 2, 17)) == date(2024, 2, 1)
    assert end_of_month(date(2024, 2, 17)) == date(2024, 2, 29)
    assert end_of_month(date(2023, 12, 1)) == date(2023, 12, 31)


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)
    assert add_months(date(2024, 3, 1), 12) == date(2025, 3, 1)


def test_within_is_inclusive():
    assert within(date(2024, 3, 31), date(2024, 3, 1), date(2024, 3, 31))
    assert not within(date(2024, 4, 1), date(2024, 3, 1), date(2024, 3, 31))


def test_trailing_months_oldest_first():
    months = trailing_months(date(2024, 3, 20), 12)
    assert len(months) == 12
    assert months[0] == date(2023, 4, 1)
    assert months[-1] == date(2024, 3, 1)


def test_calendar_month_view_starts_monday():
    # marzo 2024 empieza viernes y termina domingo
    days = calendar_days(date(2024, 3, 15), "month")
    assert days[0] == date(2024, 2, 26)
    assert days[-1] == date(2024, 3, 31)
    assert days[0].weekday() == 0
    assert len(days) % 7 == 0


def test_calendar_week_view():
    days = calendar_days(date(2024, 3, 13), "week")
    assert days == [date(2024, 3, d) for d in range(11, 18)]


def test_shift_period():
    assert shift_period(date(2024, 3, 13), "month", 1) == date(2024, 4, 13)
    assert shift_period(date(2024, 3, 13), "week", -1) == date(2024, 3, 6)


def test_month_name():
    assert month_name(date(2024, 3, 1)) == "marzo 2024"
