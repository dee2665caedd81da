"""
Report Routes
  GET /api/reports/occupancy   – leased vs rentable area per building (?building_id, ?as_of)
  GET /api/reports/revenue     – rent from tiers overlapping [start_date, end_date]
  GET /api/reports/expiring    – active contracts ending within ?days
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from rentroll.core.actor import Actor
from rentroll.core.config import settings
from rentroll.core.deps import get_actor, get_occupancy_service
from rentroll.schemas.report import ExpiringContractItem, OccupancySummary, RevenueReport
from rentroll.services.occupancy_service import OccupancyService

router = APIRouter()


@router.get("/occupancy", response_model=OccupancySummary)
async def occupancy_report(
    building_id: Optional[UUID] = None,
    as_of: Optional[date] = None,
    actor: Actor = Depends(get_actor),
    service: OccupancyService = Depends(get_occupancy_service),
):
    return await service.get_occupancy(actor.company_id, building_id=building_id, as_of=as_of)


@router.get("/revenue", response_model=RevenueReport)
async def revenue_report(
    start_date: date,
    end_date: date,
    actor: Actor = Depends(get_actor),
    service: OccupancyService = Depends(get_occupancy_service),
):
    return await service.get_revenue_report(actor.company_id, start_date, end_date)


@router.get("/expiring", response_model=List[ExpiringContractItem])
async def expiring_report(
    days: int = Query(default=settings.DEFAULT_EXPIRING_DAYS, ge=0),
    actor: Actor = Depends(get_actor),
    service: OccupancyService = Depends(get_occupancy_service),
):
    return await service.get_expiring_report(actor.company_id, days)
