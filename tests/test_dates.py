"""Tests for month roll-forward helpers."""

from datetime import date

import pytest

from finanai.dates import (
    add_months,
    days_until,
    month_bounds,
    month_key,
    shift_months,
    sync_window_start,
)


class TestAddMonths:
    """Tests for add_months."""

    def test_simple_step(self) -> None:
        assert add_months(2024, 0, 15, 1) == "2024-02-15"

    def test_clamps_to_leap_february(self) -> None:
        assert add_months(2024, 0, 31, 1) == "2024-02-29"

    def test_clamps_to_common_february(self) -> None:
        assert add_months(2023, 0, 31, 1) == "2023-02-28"

    def test_year_rollover(self) -> None:
        assert add_months(2024, 11, 10, 1) == "2025-01-10"

    def test_zero_delta(self) -> None:
        assert add_months(2024, 4, 31, 0) == "2024-05-31"

    def test_negative_delta(self) -> None:
        assert add_months(2024, 2, 31, -1) == "2024-02-29"

    @pytest.mark.parametrize("delta", [1, 2, 5, 11, 12, 13, 25])
    def test_day_never_exceeds_original(self, delta: int) -> None:
        result = date.fromisoformat(add_months(2023, 0, 31, delta))
        assert result.day <= 31


class TestShiftMonths:
    """Tests for shift_months and friends."""

    def test_offsets_from_start_do_not_drift(self) -> None:
        start = date(2024, 1, 31)
        assert shift_months(start, 1) == date(2024, 2, 29)
        assert shift_months(start, 2) == date(2024, 3, 31)

    def test_month_bounds(self) -> None:
        assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(date(2023, 12, 31)) == (date(2023, 12, 1), date(2023, 12, 31))

    def test_month_key(self) -> None:
        assert month_key(date(2024, 3, 5)) == "2024-03"

    def test_days_until(self) -> None:
        assert days_until(date(2024, 5, 17), date(2024, 5, 15)) == 2
        assert days_until(date(2024, 5, 10), date(2024, 5, 15)) == -5

    def test_sync_window_start(self) -> None:
        assert sync_window_start(date(2024, 5, 15), 2) == date(2024, 3, 1)
        assert sync_window_start(date(2024, 1, 31), 2) == date(2023, 11, 1)
