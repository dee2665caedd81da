"""
Contract Aggregate Repository
Company-scoped queries over contracts and the reference rows they point at.

Every read path filters out soft-deleted rows, and every lookup is keyed by
company_id so one tenant can never reach another tenant's data.
"""
import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rentroll.core.exceptions import NotFound
from rentroll.models.building import Building
from rentroll.models.contract import (
    ContractDocument,
    ContractStatus,
    ContractUnit,
    RentContract,
)
from rentroll.models.customer import Customer

logger = logging.getLogger(__name__)


def aggregate_options():
    """Eager loads for the full aggregate (no lazy IO under asyncio)."""
    return (
        selectinload(RentContract.customer),
        selectinload(RentContract.contract_units).selectinload(ContractUnit.building),
        selectinload(RentContract.contract_units).selectinload(ContractUnit.rent_periods),
        selectinload(RentContract.documents),
    )


class ContractRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _scoped(self, company_id: uuid.UUID):
        return (
            select(RentContract)
            .where(RentContract.company_id == company_id)
            .where(RentContract.deleted_at.is_(None))
        )

    # ─────────────────────── Contracts ───────────────────────

    async def get(
        self,
        contract_id: uuid.UUID,
        company_id: uuid.UUID,
        *,
        with_aggregate: bool = True,
    ) -> RentContract:
        stmt = self._scoped(company_id).where(RentContract.id == contract_id)
        if with_aggregate:
            stmt = stmt.options(*aggregate_options())
        contract = (await self.session.execute(stmt)).scalar_one_or_none()
        if contract is None:
            raise NotFound("Contract not found", detail={"contract_id": str(contract_id)})
        return contract

    async def list(
        self,
        company_id: uuid.UUID,
        *,
        status: Optional[ContractStatus] = None,
        customer_id: Optional[uuid.UUID] = None,
        building_id: Optional[uuid.UUID] = None,
    ) -> List[RentContract]:
        stmt = self._scoped(company_id).options(*aggregate_options())

        if status is not None:
            stmt = stmt.where(RentContract.status == status)
        if customer_id is not None:
            stmt = stmt.where(RentContract.customer_id == customer_id)
        if building_id is not None:
            in_building = select(ContractUnit.contract_id).where(
                ContractUnit.building_id == building_id
            )
            stmt = stmt.where(RentContract.id.in_(in_building))

        stmt = stmt.order_by(RentContract.created_at.desc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def ending_between(
        self, company_id: uuid.UUID, start: date, end: date
    ) -> List[RentContract]:
        """Active contracts with end_date in [start, end], soonest first."""
        stmt = (
            self._scoped(company_id)
            .options(*aggregate_options())
            .where(RentContract.status == ContractStatus.ACTIVE)
            .where(RentContract.end_date >= start)
            .where(RentContract.end_date <= end)
            .order_by(RentContract.end_date.asc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def ending_on(
        self, end: date, company_id: Optional[uuid.UUID] = None
    ) -> List[RentContract]:
        """Active contracts ending exactly on *end*; every company unless *company_id* is given."""
        stmt = (
            select(RentContract)
            .options(selectinload(RentContract.customer))
            .where(RentContract.deleted_at.is_(None))
            .where(RentContract.status == ContractStatus.ACTIVE)
            .where(RentContract.end_date == end)
        )
        if company_id is not None:
            stmt = stmt.where(RentContract.company_id == company_id)
        return list((await self.session.execute(stmt)).scalars().all())

    async def overdue(
        self, as_of: date, company_id: Optional[uuid.UUID] = None
    ) -> List[RentContract]:
        """Active contracts whose end_date is strictly before *as_of*."""
        stmt = (
            select(RentContract)
            .where(RentContract.deleted_at.is_(None))
            .where(RentContract.status == ContractStatus.ACTIVE)
            .where(RentContract.end_date < as_of)
            .order_by(RentContract.end_date.asc())
        )
        if company_id is not None:
            stmt = stmt.where(RentContract.company_id == company_id)
        return list((await self.session.execute(stmt)).scalars().all())

    async def add(self, contract: RentContract) -> RentContract:
        self.session.add(contract)
        await self.session.flush()
        return contract

    async def get_document(
        self, contract_id: uuid.UUID, document_id: uuid.UUID
    ) -> ContractDocument:
        stmt = (
            select(ContractDocument)
            .where(ContractDocument.id == document_id)
            .where(ContractDocument.contract_id == contract_id)
        )
        document = (await self.session.execute(stmt)).scalar_one_or_none()
        if document is None:
            raise NotFound("Document not found", detail={"document_id": str(document_id)})
        return document

    # ─────────────────────── Reference rows ───────────────────────

    async def require_customer(self, company_id: uuid.UUID, customer_id: uuid.UUID) -> Customer:
        stmt = (
            select(Customer)
            .where(Customer.id == customer_id)
            .where(Customer.company_id == company_id)
            .where(Customer.deleted_at.is_(None))
        )
        customer = (await self.session.execute(stmt)).scalar_one_or_none()
        if customer is None:
            raise NotFound("Customer not found", detail={"customer_id": str(customer_id)})
        return customer

    async def require_buildings(
        self, company_id: uuid.UUID, building_ids: List[uuid.UUID]
    ) -> List[Building]:
        wanted = set(building_ids)
        if not wanted:
            return []
        stmt = (
            select(Building)
            .where(Building.id.in_(wanted))
            .where(Building.company_id == company_id)
            .where(Building.deleted_at.is_(None))
        )
        found = list((await self.session.execute(stmt)).scalars().all())
        missing = wanted - {b.id for b in found}
        if missing:
            raise NotFound(
                "Building not found",
                detail={"building_ids": sorted(str(m) for m in missing)},
            )
        return found
