"""
Contract Unit Manager
Turns rental-space requests into ContractUnit rows and their RentPeriod tiers.

Planning is pure and runs for every space before anything is written, so a
bad tier in the last space still leaves the database untouched. Persisting
happens inside the caller's unit of work.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from rentroll.core.exceptions import ValidationError
from rentroll.models.contract import ContractUnit, RentPeriod
from rentroll.schemas.contract import RentalSpaceIn, RentPeriodIn
from rentroll.services.rent_period_validator import validate_rent_periods

logger = logging.getLogger(__name__)


@dataclass
class SpacePlan:
    """A validated rental space with its tiers in period_order."""
    space: RentalSpaceIn
    periods: List[RentPeriodIn]


def plan_spaces(
    spaces: Sequence[RentalSpaceIn],
    window_start: date,
    window_end: date,
) -> List[SpacePlan]:
    if not spaces:
        raise ValidationError("at least one rental space required")

    plans = []
    for index, space in enumerate(spaces):
        try:
            ordered = validate_rent_periods(space.rent_periods, window_start, window_end)
        except ValidationError as exc:
            exc.detail = {**(exc.detail or {}), "rental_space": index}
            logger.warning(f"[CONTRACT] Rental space {index} rejected: {exc.message}")
            raise
        plans.append(SpacePlan(space=space, periods=ordered))
    return plans


class ContractUnitManager:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_space(self, contract_id: uuid.UUID, plan: SpacePlan) -> ContractUnit:
        unit = ContractUnit(
            contract_id=contract_id,
            building_id=plan.space.building_id,
            floor=plan.space.floor,
            area_sqm=plan.space.area_sqm,
        )
        self.session.add(unit)
        await self.session.flush()

        self.session.add_all([
            RentPeriod(
                contract_unit_id=unit.id,
                start_date=period.start_date,
                end_date=period.end_date,
                rent_amount=period.rent_amount,
                service_fee=period.service_fee,
                period_order=order,
            )
            for order, period in enumerate(plan.periods, start=1)
        ])
        await self.session.flush()
        return unit

    async def create_spaces(
        self, contract_id: uuid.UUID, plans: Sequence[SpacePlan]
    ) -> List[ContractUnit]:
        return [await self.create_space(contract_id, plan) for plan in plans]
