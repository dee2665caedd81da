"""
Contract Service
The write and read paths of the contract aggregate.

Every operation opens its own unit of work from the session factory and runs
under the configured deadline. Creation writes contract -> spaces -> tiers ->
documents in one transaction; any failure (validation, storage, database)
leaves nothing behind.
"""
import logging
import uuid
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rentroll.core.actor import Actor
from rentroll.core.clock import Clock, system_clock
from rentroll.core.config import settings
from rentroll.core.exceptions import StorageError, ValidationError
from rentroll.db.session import read_session, unit_of_work, with_deadline
from rentroll.models.contract import ContractDocument, ContractStatus, RentContract
from rentroll.schemas.contract import ContractCreate
from rentroll.services.contract_lifecycle import (
    check_version,
    ensure_renewable,
    transition,
)
from rentroll.services.contract_repository import ContractRepository
from rentroll.services.contract_unit_manager import (
    ContractUnitManager,
    SpacePlan,
    plan_spaces,
)
from rentroll.services.rent_period_validator import validate_contract_window
from rentroll.services.storage_service import DocumentStorage, UploadedDocument

logger = logging.getLogger(__name__)


def _plan(spec: ContractCreate) -> List[SpacePlan]:
    validate_contract_window(spec.start_date, spec.end_date)
    return plan_spaces(spec.rental_spaces, spec.start_date, spec.end_date)


class ContractService:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        storage: Optional[DocumentStorage] = None,
        clock: Clock = system_clock,
        timeout: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.storage = storage
        self.clock = clock
        self.timeout = settings.UNIT_OF_WORK_TIMEOUT_SECONDS if timeout is None else timeout

    # ─────────────────────── Reads ───────────────────────

    async def get_contract(self, contract_id: uuid.UUID, company_id: uuid.UUID) -> RentContract:
        async def work():
            async with read_session(self.session_factory) as session:
                return await ContractRepository(session).get(contract_id, company_id)

        return await with_deadline(work(), self.timeout)

    async def list_contracts(
        self,
        company_id: uuid.UUID,
        status: Optional[ContractStatus] = None,
        customer_id: Optional[uuid.UUID] = None,
        building_id: Optional[uuid.UUID] = None,
    ) -> List[RentContract]:
        async def work():
            async with read_session(self.session_factory) as session:
                return await ContractRepository(session).list(
                    company_id, status=status, customer_id=customer_id, building_id=building_id
                )

        return await with_deadline(work(), self.timeout)

    async def get_expiring_contracts(
        self, company_id: uuid.UUID, within_days: Optional[int] = None
    ) -> List[RentContract]:
        days = settings.DEFAULT_EXPIRING_DAYS if within_days is None else within_days
        if days < 0:
            raise ValidationError("days must not be negative", detail={"days": days})
        today = self.clock.today()

        async def work():
            async with read_session(self.session_factory) as session:
                return await ContractRepository(session).ending_between(
                    company_id, today, today + timedelta(days=days)
                )

        return await with_deadline(work(), self.timeout)

    async def document_url(
        self, contract_id: uuid.UUID, document_id: uuid.UUID, company_id: uuid.UUID
    ) -> str:
        async def work():
            async with read_session(self.session_factory) as session:
                repo = ContractRepository(session)
                await repo.get(contract_id, company_id, with_aggregate=False)
                document = await repo.get_document(contract_id, document_id)
                return document.file_path

        path = await with_deadline(work(), self.timeout)

        return await self._require_storage().signed_url(path, settings.SIGNED_URL_TTL_SECONDS)

    # ─────────────────────── Creation ───────────────────────

    async def create_contract(
        self,
        spec: ContractCreate,
        actor: Actor,
        documents: Sequence[UploadedDocument] = (),
    ) -> RentContract:
        plans = _plan(spec)

        async def work():
            async with unit_of_work(self.session_factory) as session:
                contract = await self._insert_aggregate(session, spec, actor, plans, documents)
                return contract.id

        contract_id = await with_deadline(work(), self.timeout)
        logger.info(
            f"[CONTRACT] Created {spec.contract_no} ({contract_id}) with "
            f"{len(plans)} space(s), {len(documents)} document(s)"
        )
        return await self.get_contract(contract_id, actor.company_id)

    async def _insert_aggregate(
        self,
        session: AsyncSession,
        spec: ContractCreate,
        actor: Actor,
        plans: List[SpacePlan],
        documents: Sequence[UploadedDocument],
        previous: Optional[RentContract] = None,
    ) -> RentContract:
        repo = ContractRepository(session)
        await repo.require_customer(actor.company_id, spec.customer_id)
        await repo.require_buildings(actor.company_id, [p.space.building_id for p in plans])

        contract = await repo.add(RentContract(
            company_id=actor.company_id,
            customer_id=spec.customer_id,
            contract_no=spec.contract_no,
            start_date=spec.start_date,
            end_date=spec.end_date,
            deposit_amount=spec.deposit_amount or 0.0,
            status=ContractStatus.DRAFT,
            previous_contract_id=previous.id if previous else None,
            renewal_count=previous.renewal_count + 1 if previous else 0,
            created_by=actor.user_id,
            notes=spec.notes,
        ))

        await ContractUnitManager(session).create_spaces(contract.id, plans)
        await self._attach_documents(session, contract, documents)
        return contract

    async def _attach_documents(
        self,
        session: AsyncSession,
        contract: RentContract,
        documents: Sequence[UploadedDocument],
    ) -> None:
        if not documents:
            return
        storage = self._require_storage()
        folder = f"contracts/{contract.id}"

        for doc in documents:
            try:
                path = await storage.upload(doc.content, doc.content_type, doc.file_name, folder)
            except StorageError:
                logger.error(
                    f"[CONTRACT] Upload of '{doc.file_name}' failed; "
                    f"rolling back contract {contract.contract_no}"
                )
                raise
            session.add(ContractDocument(
                contract_id=contract.id,
                file_name=doc.file_name,
                file_path=path,
                file_size=doc.size,
                file_type=doc.content_type,
            ))
            await session.flush()

    def _require_storage(self) -> DocumentStorage:
        if self.storage is None:
            raise StorageError("document storage is not configured")
        return self.storage

    # ─────────────────────── Lifecycle ───────────────────────

    async def _transition(
        self,
        contract_id: uuid.UUID,
        company_id: uuid.UUID,
        target: ContractStatus,
        expected_version: Optional[int],
    ) -> RentContract:
        async def work():
            async with unit_of_work(self.session_factory) as session:
                contract = await ContractRepository(session).get(
                    contract_id, company_id, with_aggregate=False
                )
                check_version(contract, expected_version)
                transition(contract, target)

        await with_deadline(work(), self.timeout)
        return await self.get_contract(contract_id, company_id)

    async def activate_contract(
        self, contract_id: uuid.UUID, company_id: uuid.UUID, expected_version: Optional[int] = None
    ) -> RentContract:
        return await self._transition(contract_id, company_id, ContractStatus.ACTIVE, expected_version)

    async def terminate_contract(
        self, contract_id: uuid.UUID, company_id: uuid.UUID, expected_version: Optional[int] = None
    ) -> RentContract:
        return await self._transition(
            contract_id, company_id, ContractStatus.TERMINATED, expected_version
        )

    async def cancel_contract(
        self, contract_id: uuid.UUID, company_id: uuid.UUID, expected_version: Optional[int] = None
    ) -> RentContract:
        return await self._transition(
            contract_id, company_id, ContractStatus.CANCELLED, expected_version
        )

    async def renew_contract(
        self,
        contract_id: uuid.UUID,
        spec: ContractCreate,
        actor: Actor,
        documents: Sequence[UploadedDocument] = (),
        expected_version: Optional[int] = None,
    ) -> RentContract:
        """
        Create the successor contract and expire *contract_id* in one transaction.

        The successor starts in draft with previous_contract_id pointing back
        and renewal_count one higher than its predecessor.
        """
        async def work():
            async with unit_of_work(self.session_factory) as session:
                old = await ContractRepository(session).get(
                    contract_id, actor.company_id, with_aggregate=False
                )
                check_version(old, expected_version)
                ensure_renewable(old)
                plans = _plan(spec)

                successor = await self._insert_aggregate(
                    session, spec, actor, plans, documents, previous=old
                )
                transition(old, ContractStatus.EXPIRED)
                return successor.id

        new_id = await with_deadline(work(), self.timeout)
        logger.info(f"[CONTRACT] Renewed {contract_id} as {new_id}")
        return await self.get_contract(new_id, actor.company_id)

    async def delete_contract(
        self, contract_id: uuid.UUID, company_id: uuid.UUID, expected_version: Optional[int] = None
    ) -> None:
        """Soft delete. Spaces, tiers and documents are only reachable through the contract."""
        async def work():
            async with unit_of_work(self.session_factory) as session:
                contract = await ContractRepository(session).get(
                    contract_id, company_id, with_aggregate=False
                )
                check_version(contract, expected_version)
                contract.deleted_at = self.clock.now()

        await with_deadline(work(), self.timeout)
        logger.info(f"[CONTRACT] Soft-deleted contract {contract_id}")

    # ─────────────────────── Expiry sweep ───────────────────────

    async def expire_overdue(
        self,
        as_of: Optional[date] = None,
        company_id: Optional[uuid.UUID] = None,
        on_expired: Optional[Callable[[AsyncSession, List[RentContract]], None]] = None,
    ) -> List[RentContract]:
        """
        Move every active contract that ended before *as_of* to expired.

        *on_expired* runs inside the same transaction with the expired rows,
        so whatever it writes commits or rolls back together with the sweep.

        Only rows still in active are selected, so re-running with the same
        date is a no-op.
        """
        as_of = as_of or self.clock.today()

        async def work():
            async with unit_of_work(self.session_factory) as session:
                overdue = await ContractRepository(session).overdue(as_of, company_id)
                for contract in overdue:
                    transition(contract, ContractStatus.EXPIRED)
                if overdue and on_expired is not None:
                    on_expired(session, overdue)
                return overdue

        expired = await with_deadline(work(), self.timeout)
        logger.info(f"[SWEEP] {len(expired)} contract(s) expired as of {as_of}")
        return expired

    async def run_expiry_sweep(
        self, as_of: Optional[date] = None, company_id: Optional[uuid.UUID] = None
    ) -> int:
        return len(await self.expire_overdue(as_of, company_id))
