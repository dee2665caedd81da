from datetime import date

import pytest

from rentroll.core.exceptions import ValidationError
from rentroll.services.rent_period_validator import (
    validate_contract_window,
    validate_rent_periods,
)

from conftest import tier

START = date(2024, 1, 1)
END = date(2025, 1, 1)


def test_contiguous_tiers_are_returned_sorted():
    second = tier(date(2024, 7, 1), END, 120)
    first = tier(START, date(2024, 7, 1), 100)

    ordered = validate_rent_periods([second, first], START, END)

    assert ordered == [first, second]
    assert ordered[0].start_date == START
    assert ordered[-1].end_date == END
    assert all(a.end_date == b.start_date for a, b in zip(ordered, ordered[1:]))


def test_single_tier_covering_window():
    only = tier(START, END, 500)
    assert validate_rent_periods([only], START, END) == [only]


def test_empty_tier_list_rejected():
    with pytest.raises(ValidationError, match="at least one rent period required"):
        validate_rent_periods([], START, END)


def test_gap_between_tiers_rejected():
    periods = [
        tier(date(2024, 1, 1), date(2024, 6, 1), 100),
        tier(date(2024, 7, 1), date(2025, 1, 1), 120),
    ]
    with pytest.raises(ValidationError, match="periods must be continuous without gaps or overlaps"):
        validate_rent_periods(periods, START, END)


def test_overlapping_tiers_rejected():
    periods = [
        tier(START, date(2024, 8, 1), 100),
        tier(date(2024, 7, 1), END, 120),
    ]
    with pytest.raises(ValidationError, match="continuous"):
        validate_rent_periods(periods, START, END)


def test_first_tier_must_start_at_window_start():
    with pytest.raises(ValidationError, match="first period must start at window start"):
        validate_rent_periods([tier(date(2024, 2, 1), END, 100)], START, END)


def test_last_tier_must_end_at_window_end():
    with pytest.raises(ValidationError, match="last period must end at window end"):
        validate_rent_periods([tier(START, date(2024, 12, 1), 100)], START, END)


@pytest.mark.parametrize("rent", [0, -50, float("nan"), float("inf")])
def test_non_positive_rent_rejected(rent):
    periods = [
        tier(START, date(2024, 7, 1), 100),
        tier(date(2024, 7, 1), END, rent),
    ]
    with pytest.raises(ValidationError, match="rent amount must be positive"):
        validate_rent_periods(periods, START, END)


def test_zero_length_tier_rejected():
    periods = [
        tier(START, START, 100),
        tier(START, END, 120),
    ]
    with pytest.raises(ValidationError, match="period end must be after period start"):
        validate_rent_periods(periods, START, END)


def test_error_carries_detail():
    with pytest.raises(ValidationError) as exc_info:
        validate_rent_periods([tier(START, date(2024, 12, 1), 100)], START, END)
    assert exc_info.value.detail["window_end"] == "2025-01-01"
    assert exc_info.value.status_code == 400


def test_window_must_be_ordered():
    validate_contract_window(START, END)
    with pytest.raises(ValidationError, match="end date must be after start date"):
        validate_contract_window(END, START)
    with pytest.raises(ValidationError):
        validate_contract_window(START, START)
