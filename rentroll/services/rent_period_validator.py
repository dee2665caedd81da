"""
Rent Period Validator
Checks that the pricing tiers of one rental space exactly tile the contract
window: sorted by start, the first tier starts at the window start, each tier
ends where the next begins, and the last tier ends at the window end.
"""
import logging
import math
from datetime import date
from typing import List, Protocol, Sequence, TypeVar

from rentroll.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class PeriodLike(Protocol):
    start_date: date
    end_date: date
    rent_amount: float


P = TypeVar("P", bound=PeriodLike)


def validate_contract_window(start_date: date, end_date: date) -> None:
    if start_date >= end_date:
        raise ValidationError(
            "end date must be after start date",
            detail={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )


def validate_rent_periods(
    periods: Sequence[P],
    window_start: date,
    window_end: date,
) -> List[P]:
    """
    Validate *periods* against ``[window_start, window_end]``.

    Returns the tiers sorted by start date (input order kept on ties), which
    is the order period_order is assigned in.
    """
    if not periods:
        raise ValidationError("at least one rent period required")

    ordered = sorted(periods, key=lambda p: p.start_date)

    if ordered[0].start_date != window_start:
        raise ValidationError(
            "first period must start at window start",
            detail={
                "window_start": window_start.isoformat(),
                "first_period_start": ordered[0].start_date.isoformat(),
            },
        )

    if ordered[-1].end_date != window_end:
        raise ValidationError(
            "last period must end at window end",
            detail={
                "window_end": window_end.isoformat(),
                "last_period_end": ordered[-1].end_date.isoformat(),
            },
        )

    for current, following in zip(ordered, ordered[1:]):
        if current.end_date != following.start_date:
            raise ValidationError(
                "periods must be continuous without gaps or overlaps",
                detail={
                    "period_end": current.end_date.isoformat(),
                    "next_period_start": following.start_date.isoformat(),
                },
            )

    # Contiguity alone still admits zero-length or inverted tiers
    for period in ordered:
        if period.end_date <= period.start_date:
            raise ValidationError(
                "period end must be after period start",
                detail={
                    "start_date": period.start_date.isoformat(),
                    "end_date": period.end_date.isoformat(),
                },
            )

    for period in periods:
        if (
            period.rent_amount is None
            or not math.isfinite(period.rent_amount)
            or period.rent_amount <= 0
        ):
            raise ValidationError(
                "rent amount must be positive",
                detail={"rent_amount": str(period.rent_amount)},
            )

    return ordered
