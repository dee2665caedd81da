"""
Rental Contract Routes
Thin adapters over ContractService; the acting company comes from the gateway headers.

  POST   /api/contracts/                              – create draft (multipart: data + documents)
  GET    /api/contracts/                              – list (status, customer_id, building_id)
  GET    /api/contracts/expiring                      – active contracts ending within ?days
  POST   /api/contracts/expiry-sweep                  – expire overdue active contracts
  GET    /api/contracts/{id}                          – contract aggregate
  POST   /api/contracts/{id}/activate                 – draft -> active
  POST   /api/contracts/{id}/terminate                – active -> terminated
  POST   /api/contracts/{id}/cancel                   – draft -> cancelled
  POST   /api/contracts/{id}/renew                    – successor contract, predecessor expired
  DELETE /api/contracts/{id}                          – soft delete
  GET    /api/contracts/{id}/documents/{doc_id}/url   – signed download URL
"""
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from rentroll.core.actor import Actor
from rentroll.core.clock import Clock
from rentroll.core.config import settings
from rentroll.core.deps import get_actor, get_clock, get_contract_service
from rentroll.models.contract import ContractStatus, RentContract
from rentroll.schemas.contract import (
    ContractCreate,
    ContractDocumentOut,
    ContractOut,
    CustomerBrief,
    DocumentUrlOut,
    RentalSpaceOut,
    RentPeriodOut,
    BuildingBrief,
    SweepResult,
)
from rentroll.services.contract_service import ContractService
from rentroll.services.occupancy_service import current_rent, current_service_fee
from rentroll.services.storage_service import UploadedDocument

logger = logging.getLogger(__name__)

router = APIRouter()


def _contract_to_out(contract: RentContract, today: date) -> ContractOut:
    """Serialise a loaded contract aggregate, resolving rent in force on *today*."""
    spaces = []
    for unit in contract.contract_units:
        spaces.append(RentalSpaceOut(
            id=unit.id,
            building_id=unit.building_id,
            floor=unit.floor,
            area_sqm=unit.area_sqm,
            building=BuildingBrief.model_validate(unit.building) if unit.building else None,
            rent_periods=[RentPeriodOut.model_validate(p) for p in unit.rent_periods],
            current_rent=current_rent(unit, today),
            current_service_fee=current_service_fee(unit, today),
        ))

    return ContractOut(
        id=contract.id,
        company_id=contract.company_id,
        customer_id=contract.customer_id,
        contract_no=contract.contract_no,
        start_date=contract.start_date,
        end_date=contract.end_date,
        deposit_amount=contract.deposit_amount or 0.0,
        status=ContractStatus(contract.status).value,
        previous_contract_id=contract.previous_contract_id,
        renewal_count=contract.renewal_count,
        created_by=contract.created_by,
        notes=contract.notes,
        version=contract.version,
        created_at=contract.created_at,
        updated_at=contract.updated_at,
        customer=CustomerBrief.model_validate(contract.customer) if contract.customer else None,
        rental_spaces=spaces,
        documents=[ContractDocumentOut.model_validate(d) for d in contract.documents],
        total_area=sum(s.area_sqm for s in spaces),
        current_monthly_rent=sum(s.current_rent for s in spaces),
    )


def _parse_spec(data: str) -> ContractCreate:
    try:
        return ContractCreate.model_validate_json(data)
    except PydanticValidationError as e:
        logger.warning(f"[CONTRACT] Rejected payload: {e.error_count()} error(s)")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        )


async def _read_documents(files: List[UploadFile]) -> List[UploadedDocument]:
    documents = []
    for f in files or []:
        if not f.filename:
            continue
        documents.append(UploadedDocument(
            file_name=f.filename,
            content=await f.read(),
            content_type=f.content_type,
        ))
    return documents


@router.post("/", response_model=ContractOut, status_code=status.HTTP_201_CREATED)
async def create_contract(
    data: str = Form(..., description="ContractCreate as JSON"),
    documents: List[UploadFile] = File(default=[]),
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    spec = _parse_spec(data)
    contract = await service.create_contract(spec, actor, await _read_documents(documents))
    return _contract_to_out(contract, clock.today())


@router.get("/", response_model=List[ContractOut])
async def list_contracts(
    status_filter: Optional[ContractStatus] = Query(default=None, alias="status"),
    customer_id: Optional[UUID] = None,
    building_id: Optional[UUID] = None,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    contracts = await service.list_contracts(
        actor.company_id, status=status_filter, customer_id=customer_id, building_id=building_id
    )
    today = clock.today()
    return [_contract_to_out(c, today) for c in contracts]


@router.get("/expiring", response_model=List[ContractOut])
async def expiring_contracts(
    days: int = Query(default=settings.DEFAULT_EXPIRING_DAYS, ge=0),
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    contracts = await service.get_expiring_contracts(actor.company_id, days)
    today = clock.today()
    return [_contract_to_out(c, today) for c in contracts]


@router.post("/expiry-sweep", response_model=SweepResult)
async def expiry_sweep(
    as_of: Optional[date] = None,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    as_of = as_of or clock.today()
    count = await service.run_expiry_sweep(as_of, company_id=actor.company_id)
    return SweepResult(as_of=as_of, transitioned=count)


@router.get("/{contract_id}", response_model=ContractOut)
async def get_contract(
    contract_id: UUID,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    contract = await service.get_contract(contract_id, actor.company_id)
    return _contract_to_out(contract, clock.today())


@router.post("/{contract_id}/activate", response_model=ContractOut)
async def activate_contract(
    contract_id: UUID,
    version: Optional[int] = None,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    contract = await service.activate_contract(contract_id, actor.company_id, version)
    return _contract_to_out(contract, clock.today())


@router.post("/{contract_id}/terminate", response_model=ContractOut)
async def terminate_contract(
    contract_id: UUID,
    version: Optional[int] = None,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    contract = await service.terminate_contract(contract_id, actor.company_id, version)
    return _contract_to_out(contract, clock.today())


@router.post("/{contract_id}/cancel", response_model=ContractOut)
async def cancel_contract(
    contract_id: UUID,
    version: Optional[int] = None,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    contract = await service.cancel_contract(contract_id, actor.company_id, version)
    return _contract_to_out(contract, clock.today())


@router.post("/{contract_id}/renew", response_model=ContractOut, status_code=status.HTTP_201_CREATED)
async def renew_contract(
    contract_id: UUID,
    data: str = Form(..., description="ContractCreate for the successor, as JSON"),
    documents: List[UploadFile] = File(default=[]),
    version: Optional[int] = None,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
    clock: Clock = Depends(get_clock),
):
    spec = _parse_spec(data)
    contract = await service.renew_contract(
        contract_id, spec, actor, await _read_documents(documents), expected_version=version
    )
    return _contract_to_out(contract, clock.today())


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contract(
    contract_id: UUID,
    version: Optional[int] = None,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
):
    await service.delete_contract(contract_id, actor.company_id, version)


@router.get("/{contract_id}/documents/{document_id}/url", response_model=DocumentUrlOut)
async def document_url(
    contract_id: UUID,
    document_id: UUID,
    actor: Actor = Depends(get_actor),
    service: ContractService = Depends(get_contract_service),
):
    url = await service.document_url(contract_id, document_id, actor.company_id)
    return DocumentUrlOut(
        document_id=document_id, url=url, expires_in=settings.SIGNED_URL_TTL_SECONDS
    )
