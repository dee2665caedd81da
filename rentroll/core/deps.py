from functools import lru_cache
from typing import Optional
import logging
import uuid

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import async_sessionmaker

from rentroll.core.actor import Actor
from rentroll.core.clock import Clock, system_clock
from rentroll.core.config import settings
from rentroll.database import get_session_factory
from rentroll.services.alert_service import AlertService
from rentroll.services.contract_service import ContractService
from rentroll.services.occupancy_service import OccupancyService
from rentroll.services.storage_service import DocumentStorage, SupabaseDocumentStorage

logger = logging.getLogger(__name__)


def _parse_header(value: Optional[str], name: str) -> uuid.UUID:
    if not value:
        logger.warning(f"Request missing {name} header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {name} header",
        )
    try:
        return uuid.UUID(value)
    except ValueError:
        logger.warning(f"Malformed {name} header: {value!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid {name} header",
        )


async def get_actor(
    x_user_id: Optional[str] = Header(default=None),
    x_company_id: Optional[str] = Header(default=None),
) -> Actor:
    """
    Acting user and company, as forwarded by the upstream gateway.
    The company is never inferred; both headers are required.
    """
    return Actor(
        user_id=_parse_header(x_user_id, "X-User-Id"),
        company_id=_parse_header(x_company_id, "X-Company-Id"),
    )


@lru_cache()
def get_document_storage() -> Optional[DocumentStorage]:
    if not settings.storage_configured:
        logger.warning("[STORAGE] SUPABASE_URL/SUPABASE_KEY not set; document uploads disabled")
        return None
    return SupabaseDocumentStorage()


def get_clock() -> Clock:
    return system_clock


def get_contract_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    storage: Optional[DocumentStorage] = Depends(get_document_storage),
    clock: Clock = Depends(get_clock),
) -> ContractService:
    return ContractService(session_factory, storage=storage, clock=clock)


def get_occupancy_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
) -> OccupancyService:
    return OccupancyService(session_factory, clock=clock)


def get_alert_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    contracts: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
) -> AlertService:
    return AlertService(session_factory, contracts, clock=clock)
