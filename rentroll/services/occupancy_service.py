"""
Occupancy & Revenue Aggregator

Point-in-time rent resolution for rental spaces, plus the company and
building roll-ups consumed by the report routes, the alert check and the
contract read model.

Current rent resolution: the tier whose [start, end] contains the date
wins (first match in stored order). When no tier covers the date the first
stored tier is used instead. That fallback is kept on purpose; callers that
need "no rent in force" must compare the date against the tiers themselves.
"""
import logging
import math
import uuid
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from rentroll.core.clock import Clock, system_clock
from rentroll.core.config import settings
from rentroll.core.exceptions import NotFound, ValidationError
from rentroll.db.session import read_session
from rentroll.models.building import Building
from rentroll.models.contract import ContractStatus, ContractUnit, RentContract, RentPeriod
from rentroll.models.customer import Customer
from rentroll.schemas.report import (
    BuildingOccupancy,
    BuildingRevenue,
    CustomerRevenue,
    ExpiringContractItem,
    MonthlyRevenue,
    OccupancySummary,
    RevenueReport,
)
from rentroll.services.contract_repository import ContractRepository

logger = logging.getLogger(__name__)

TOP_CUSTOMER_LIMIT = 10
TREND_MONTHS = 12


# ─────────────────────── Current rent ───────────────────────

def current_period(space: ContractUnit, as_of: date) -> Optional[RentPeriod]:
    periods = list(space.rent_periods or [])
    if not periods:
        return None
    for period in periods:
        if period.start_date <= as_of <= period.end_date:
            return period
    return periods[0]


def current_rent(space: ContractUnit, as_of: date) -> float:
    period = current_period(space, as_of)
    return float(period.rent_amount) if period else 0.0


def current_service_fee(space: ContractUnit, as_of: date) -> float:
    period = current_period(space, as_of)
    return float(period.service_fee or 0) if period else 0.0


def contract_monthly_rent(contract: RentContract, as_of: date) -> float:
    return sum(current_rent(space, as_of) for space in contract.contract_units)


def occupancy_rate(rented: float, total: float) -> int:
    """Whole percent, halves rounded up; 0 for a building with no area."""
    if not total:
        return 0
    return int(math.floor(rented / total * 100 + 0.5))


def space_label(space: ContractUnit) -> str:
    building = space.building.name if space.building is not None else "Unassigned"
    return f"{building} - Floor {space.floor}" if space.floor else building


def _month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def _trailing_months(today: date, count: int) -> List[date]:
    """First day of each of the *count* months ending with today's month, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


class OccupancyService:
    def __init__(self, session_factory: async_sessionmaker, clock: Clock = system_clock):
        self.session_factory = session_factory
        self.clock = clock

    # ─────────────────────── Occupancy ───────────────────────

    async def get_occupancy(
        self,
        company_id: uuid.UUID,
        building_id: Optional[uuid.UUID] = None,
        as_of: Optional[date] = None,
    ) -> OccupancySummary:
        as_of = as_of or self.clock.today()

        async with read_session(self.session_factory) as session:
            stmt = (
                select(Building)
                .where(Building.company_id == company_id)
                .where(Building.deleted_at.is_(None))
                .order_by(Building.name)
            )
            if building_id is not None:
                stmt = stmt.where(Building.id == building_id)
            buildings = list((await session.execute(stmt)).scalars().all())

            if building_id is not None and not buildings:
                raise NotFound("Building not found", detail={"building_id": str(building_id)})

            rented_stmt = (
                select(ContractUnit.building_id, func.coalesce(func.sum(ContractUnit.area_sqm), 0))
                .join(RentContract, ContractUnit.contract_id == RentContract.id)
                .where(RentContract.company_id == company_id)
                .where(RentContract.status == ContractStatus.ACTIVE)
                .where(RentContract.deleted_at.is_(None))
                .where(RentContract.start_date <= as_of)
                .where(RentContract.end_date >= as_of)
                .where(ContractUnit.building_id.in_([b.id for b in buildings]))
                .group_by(ContractUnit.building_id)
            )
            rented_by_building: Dict[uuid.UUID, float] = {
                row[0]: float(row[1]) for row in (await session.execute(rented_stmt)).all()
            }

        rows = []
        for building in buildings:
            total = float(building.rentable_area or 0)
            rented = rented_by_building.get(building.id, 0.0)
            if rented > total:
                logger.warning(
                    f"[REPORT] Building {building.code}: leased area {rented} exceeds "
                    f"rentable area {total}; capping"
                )
                rented = total
            rows.append(BuildingOccupancy(
                building_id=building.id,
                building_name=building.name,
                code=building.code,
                total_floors=building.total_floors or 0,
                total_area=total,
                rented_area=rented,
                vacant_area=max(0.0, total - rented),
                occupancy_rate=occupancy_rate(rented, total),
            ))

        total_area = sum(r.total_area for r in rows)
        rented_area = sum(r.rented_area for r in rows)
        return OccupancySummary(
            as_of=as_of,
            total_area=total_area,
            rented_area=rented_area,
            vacant_area=sum(r.vacant_area for r in rows),
            occupancy_rate=occupancy_rate(rented_area, total_area),
            buildings=rows,
        )

    # ─────────────────────── Revenue ───────────────────────

    async def get_revenue_report(
        self, company_id: uuid.UUID, start_date: date, end_date: date
    ) -> RevenueReport:
        if end_date < start_date:
            raise ValidationError(
                "end date must not be before start date",
                detail={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )
        today = self.clock.today()
        months = _trailing_months(today, TREND_MONTHS)
        trend_end = (months[-1] + timedelta(days=32)).replace(day=1)

        async with read_session(self.session_factory) as session:
            tier_stmt = (
                select(
                    RentPeriod.rent_amount,
                    RentContract.id,
                    RentContract.customer_id,
                    ContractUnit.building_id,
                )
                .join(ContractUnit, RentPeriod.contract_unit_id == ContractUnit.id)
                .join(RentContract, ContractUnit.contract_id == RentContract.id)
                .where(RentContract.company_id == company_id)
                .where(RentContract.status == ContractStatus.ACTIVE)
                .where(RentContract.deleted_at.is_(None))
                .where(RentPeriod.start_date <= end_date)
                .where(RentPeriod.end_date >= start_date)
            )
            tiers = (await session.execute(tier_stmt)).all()

            trend_stmt = (
                select(RentPeriod.start_date, RentPeriod.rent_amount)
                .join(ContractUnit, RentPeriod.contract_unit_id == ContractUnit.id)
                .join(RentContract, ContractUnit.contract_id == RentContract.id)
                .where(RentContract.company_id == company_id)
                .where(RentContract.deleted_at.is_(None))
                .where(RentPeriod.start_date >= months[0])
                .where(RentPeriod.start_date < trend_end)
            )
            trend_rows = (await session.execute(trend_stmt)).all()

            buildings = list((await session.execute(
                select(Building)
                .where(Building.company_id == company_id)
                .where(Building.deleted_at.is_(None))
            )).scalars().all())

            customer_ids = {row[2] for row in tiers}
            customers = {}
            if customer_ids:
                customers = {
                    c.id: c for c in (await session.execute(
                        select(Customer).where(Customer.id.in_(customer_ids))
                    )).scalars().all()
                }

        total_revenue = sum(float(row[0]) for row in tiers)
        contract_ids = {row[1] for row in tiers}
        active_count = len(contract_ids)

        rent_by_building: Dict[uuid.UUID, float] = defaultdict(float)
        contracts_by_building: Dict[uuid.UUID, set] = defaultdict(set)
        rent_by_customer: Dict[uuid.UUID, float] = defaultdict(float)
        contracts_by_customer: Dict[uuid.UUID, set] = defaultdict(set)
        for rent, contract_id, customer_id, building_id in tiers:
            rent_by_building[building_id] += float(rent)
            contracts_by_building[building_id].add(contract_id)
            rent_by_customer[customer_id] += float(rent)
            contracts_by_customer[customer_id].add(contract_id)

        by_building = sorted(
            (
                BuildingRevenue(
                    building_id=b.id,
                    building_name=b.name,
                    total_rent=rent_by_building.get(b.id, 0.0),
                    contract_count=len(contracts_by_building.get(b.id, ())),
                )
                for b in buildings
            ),
            key=lambda r: (-r.total_rent, r.building_name),
        )

        top_customers = sorted(
            (
                CustomerRevenue(
                    customer_id=customer_id,
                    customer_name=customers[customer_id].name if customer_id in customers else "",
                    total_rent=rent,
                    contract_count=len(contracts_by_customer[customer_id]),
                )
                for customer_id, rent in rent_by_customer.items()
            ),
            key=lambda r: (-r.total_rent, r.customer_name),
        )[:TOP_CUSTOMER_LIMIT]

        return RevenueReport(
            start_date=start_date,
            end_date=end_date,
            total_revenue=total_revenue,
            active_contract_count=active_count,
            average_rent=total_revenue / active_count if active_count else 0.0,
            revenue_by_building=by_building,
            monthly_trend=self._monthly_trend(months, trend_rows),
            top_customers=top_customers,
        )

    @staticmethod
    def _monthly_trend(months: List[date], rows: Iterable) -> List[MonthlyRevenue]:
        buckets = {_month_key(m): 0.0 for m in months}
        for start, rent in rows:
            key = _month_key(start)
            if key in buckets:
                buckets[key] += float(rent)
        return [MonthlyRevenue(month=key, revenue=value) for key, value in buckets.items()]

    # ─────────────────────── Expiring ───────────────────────

    async def get_expiring_report(
        self, company_id: uuid.UUID, days: Optional[int] = None
    ) -> List[ExpiringContractItem]:
        days = settings.DEFAULT_EXPIRING_DAYS if days is None else days
        if days < 0:
            raise ValidationError("days must not be negative", detail={"days": days})
        today = self.clock.today()

        async with read_session(self.session_factory) as session:
            contracts = await ContractRepository(session).ending_between(
                company_id, today, today + timedelta(days=days)
            )

        return [
            ExpiringContractItem(
                id=c.id,
                contract_no=c.contract_no,
                start_date=c.start_date,
                end_date=c.end_date,
                days_remaining=(c.end_date - today).days,
                customer_name=c.customer.name if c.customer else None,
                customer_phone=c.customer.phone if c.customer else None,
                spaces=", ".join(space_label(s) for s in c.contract_units),
                total_rent=contract_monthly_rent(c, today),
            )
            for c in contracts
        ]
