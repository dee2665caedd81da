"""
Alert Service
Raises expiry alerts at the configured day thresholds, records an alert for
every contract the expiry sweep moves to expired, and serves the alert inbox.
"""
import logging
import uuid
from datetime import date, timedelta
from typing import List, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rentroll.core.clock import Clock, system_clock
from rentroll.core.config import settings
from rentroll.core.exceptions import NotFound
from rentroll.db.session import read_session, unit_of_work
from rentroll.models.alert import Alert, AlertType
from rentroll.models.contract import RentContract
from rentroll.schemas.alert import ExpiryCheckResult
from rentroll.services.contract_repository import ContractRepository
from rentroll.services.contract_service import ContractService

logger = logging.getLogger(__name__)

ALERT_LIST_LIMIT = 100

_THRESHOLD_TYPES = {
    90: AlertType.EXPIRY_90,
    60: AlertType.EXPIRY_60,
    30: AlertType.EXPIRY_30,
}


def alert_type_for(days: int) -> AlertType:
    try:
        return _THRESHOLD_TYPES[days]
    except KeyError:
        raise ValueError(f"no alert type for a {days}-day threshold") from None


def _record_expired(session: AsyncSession, expired: List[RentContract]) -> None:
    session.add_all([
        Alert(
            company_id=contract.company_id,
            contract_id=contract.id,
            type=AlertType.EXPIRED,
            title=f"Contract {contract.contract_no} has expired",
            message=f"Ended on {contract.end_date.isoformat()}.",
        )
        for contract in expired
    ])


class AlertService:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        contracts: ContractService,
        clock: Clock = system_clock,
        thresholds: Optional[Sequence[int]] = None,
    ):
        self.session_factory = session_factory
        self.contracts = contracts
        self.clock = clock
        self.thresholds = list(settings.EXPIRY_ALERT_THRESHOLDS if thresholds is None else thresholds)

    async def check_expiring_contracts(
        self, as_of: Optional[date] = None, company_id: Optional[uuid.UUID] = None
    ) -> ExpiryCheckResult:
        """
        Daily job body: threshold alerts first, then the expiry sweep.

        With *company_id* only that company's contracts are alerted and
        expired; the scheduler passes None to cover every company. The
        expired alerts are written in the sweep's own transaction.
        """
        as_of = as_of or self.clock.today()
        created = 0

        async with unit_of_work(self.session_factory) as session:
            repo = ContractRepository(session)
            for days in self.thresholds:
                alert_type = alert_type_for(days)
                for contract in await repo.ending_on(as_of + timedelta(days=days), company_id):
                    already = await session.scalar(
                        select(func.count(Alert.id))
                        .where(Alert.contract_id == contract.id)
                        .where(Alert.type == alert_type)
                    )
                    if already:
                        continue
                    customer = contract.customer.name if contract.customer else "customer"
                    session.add(Alert(
                        company_id=contract.company_id,
                        contract_id=contract.id,
                        type=alert_type,
                        title=f"Contract {contract.contract_no} expires in {days} days",
                        message=(
                            f"The contract with {customer} ends on "
                            f"{contract.end_date.isoformat()}."
                        ),
                    ))
                    created += 1

        expired = await self.contracts.expire_overdue(
            as_of, company_id, on_expired=_record_expired
        )
        created += len(expired)

        logger.info(
            f"[ALERT] Expiry check for {as_of}: {created} alert(s), "
            f"{len(expired)} contract(s) expired"
        )
        return ExpiryCheckResult(
            as_of=as_of, alerts_created=created, contracts_expired=len(expired)
        )

    async def list_alerts(self, company_id: uuid.UUID, unread_only: bool = False) -> List[Alert]:
        stmt = select(Alert).where(Alert.company_id == company_id)
        if unread_only:
            stmt = stmt.where(Alert.is_read.is_(False))
        stmt = stmt.order_by(Alert.created_at.desc()).limit(ALERT_LIST_LIMIT)
        async with read_session(self.session_factory) as session:
            return list((await session.execute(stmt)).scalars().all())

    async def unread_count(self, company_id: uuid.UUID) -> int:
        async with read_session(self.session_factory) as session:
            count = await session.scalar(
                select(func.count(Alert.id))
                .where(Alert.company_id == company_id)
                .where(Alert.is_read.is_(False))
            )
        return int(count or 0)

    async def mark_as_read(self, alert_id: uuid.UUID, company_id: uuid.UUID) -> Alert:
        async with unit_of_work(self.session_factory) as session:
            alert = await session.scalar(
                select(Alert).where(Alert.id == alert_id).where(Alert.company_id == company_id)
            )
            if alert is None:
                raise NotFound("Alert not found", detail={"alert_id": str(alert_id)})
            alert.is_read = True
        return alert

    async def mark_all_as_read(self, company_id: uuid.UUID) -> int:
        async with unit_of_work(self.session_factory) as session:
            result = await session.execute(
                update(Alert)
                .where(Alert.company_id == company_id)
                .where(Alert.is_read.is_(False))
                .values(is_read=True)
            )
        return result.rowcount or 0
