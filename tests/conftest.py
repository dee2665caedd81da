import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import List, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rentroll.core.actor import Actor
from rentroll.core.exceptions import StorageError
from rentroll.db.base import Base
from rentroll.models import Building, Company, Customer, CustomerType, User, UserRole
from rentroll.schemas.contract import ContractCreate, RentalSpaceIn, RentPeriodIn
from rentroll.services.alert_service import AlertService
from rentroll.services.contract_service import ContractService
from rentroll.services.occupancy_service import OccupancyService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SCENARIO_TODAY = date(2024, 8, 1)


class FixedClock:
    def __init__(self, today: date):
        self.current = today

    def now(self) -> datetime:
        return datetime.combine(self.current, time(12, 0), tzinfo=timezone.utc)

    def today(self) -> date:
        return self.current


class FakeStorage:
    """In-memory document storage."""

    def __init__(self):
        self.objects = {}

    async def upload(self, content, mime_type, original_name, folder):
        path = f"{folder}/{len(self.objects) + 1}-{original_name}"
        self.objects[path] = (content, mime_type)
        return path

    async def signed_url(self, path, ttl):
        return f"https://storage.test/{path}?ttl={ttl}"


class FailingStorage(FakeStorage):
    async def upload(self, content, mime_type, original_name, folder):
        raise StorageError(f"upload failed for '{original_name}'")


@dataclass
class Tenant:
    company: Company
    user: User
    building: Building
    customer: Customer

    @property
    def actor(self) -> Actor:
        return Actor(user_id=self.user.id, company_id=self.company.id)


async def _seed_tenant(session_factory, suffix: str, rentable_area: float = 1000.0) -> Tenant:
    async with session_factory() as session:
        async with session.begin():
            company = Company(name=f"Company {suffix}")
            session.add(company)
            await session.flush()

            user = User(
                company_id=company.id,
                email=f"admin-{suffix}@example.com",
                full_name=f"Admin {suffix}",
                role=UserRole.ADMIN,
            )
            building = Building(
                company_id=company.id,
                name=f"Tower {suffix}",
                code=f"T{suffix}",
                total_floors=10,
                rentable_area=rentable_area,
            )
            customer = Customer(
                company_id=company.id,
                type=CustomerType.CORPORATE,
                name=f"Customer {suffix}",
                phone="021234567",
            )
            session.add_all([user, building, customer])
        return Tenant(company=company, user=user, building=building, customer=customer)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def tenant(session_factory) -> Tenant:
    return await _seed_tenant(session_factory, "A")


@pytest.fixture
async def other_tenant(session_factory) -> Tenant:
    return await _seed_tenant(session_factory, "B")


@pytest.fixture
def clock():
    return FixedClock(SCENARIO_TODAY)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def contract_service(session_factory, storage, clock):
    return ContractService(session_factory, storage=storage, clock=clock)


@pytest.fixture
def occupancy_service(session_factory, clock):
    return OccupancyService(session_factory, clock=clock)


@pytest.fixture
def alert_service(session_factory, contract_service, clock):
    return AlertService(session_factory, contract_service, clock=clock, thresholds=[90, 60, 30])


def tier(start: date, end: date, rent: float, fee: float = 0.0) -> RentPeriodIn:
    return RentPeriodIn(start_date=start, end_date=end, rent_amount=rent, service_fee=fee)


@pytest.fixture
def make_spec(tenant):
    """Builds a ContractCreate for the seeded tenant; defaults to the 400 sqm two-tier scenario."""

    def _make(
        contract_no: str = "RC-001",
        start: date = date(2024, 1, 1),
        end: date = date(2025, 1, 1),
        area: float = 400.0,
        periods: Optional[List[RentPeriodIn]] = None,
        building_id: Optional[uuid.UUID] = None,
        customer_id: Optional[uuid.UUID] = None,
        floor: str = "5",
    ) -> ContractCreate:
        if periods is None:
            periods = [
                tier(start, date(2024, 7, 1), 1000.0, 100.0),
                tier(date(2024, 7, 1), end, 1200.0, 100.0),
            ]
        return ContractCreate(
            customer_id=customer_id or tenant.customer.id,
            contract_no=contract_no,
            start_date=start,
            end_date=end,
            deposit_amount=3000.0,
            rental_spaces=[
                RentalSpaceIn(
                    building_id=building_id or tenant.building.id,
                    floor=floor,
                    area_sqm=area,
                    rent_periods=periods,
                )
            ],
        )

    return _make


@pytest.fixture
def create_active(contract_service, tenant):
    """Create a contract from *spec* and activate it."""

    async def _create(spec: ContractCreate):
        contract = await contract_service.create_contract(spec, tenant.actor)
        return await contract_service.activate_contract(contract.id, tenant.company.id)

    return _create
