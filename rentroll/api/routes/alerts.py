"""
Alert Routes
  GET  /api/alerts/               – newest alerts for the company (?unread_only)
  GET  /api/alerts/unread-count   – number of unread alerts
  POST /api/alerts/{id}/read      – mark one alert read
  POST /api/alerts/read-all       – mark every alert read
  POST /api/alerts/check          – run the expiry check now for the company
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from rentroll.core.actor import Actor
from rentroll.core.deps import get_actor, get_alert_service
from rentroll.schemas.alert import AlertOut, ExpiryCheckResult, UnreadCount
from rentroll.services.alert_service import AlertService

router = APIRouter()


@router.get("/", response_model=List[AlertOut])
async def list_alerts(
    unread_only: bool = False,
    actor: Actor = Depends(get_actor),
    service: AlertService = Depends(get_alert_service),
):
    return await service.list_alerts(actor.company_id, unread_only=unread_only)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    actor: Actor = Depends(get_actor),
    service: AlertService = Depends(get_alert_service),
):
    return UnreadCount(unread=await service.unread_count(actor.company_id))


@router.post("/read-all")
async def mark_all_read(
    actor: Actor = Depends(get_actor),
    service: AlertService = Depends(get_alert_service),
):
    updated = await service.mark_all_as_read(actor.company_id)
    return {"success": True, "updated": updated}


@router.post("/check", response_model=ExpiryCheckResult)
async def run_check(
    as_of: Optional[date] = None,
    actor: Actor = Depends(get_actor),
    service: AlertService = Depends(get_alert_service),
):
    return await service.check_expiring_contracts(as_of, company_id=actor.company_id)


@router.post("/{alert_id}/read", response_model=AlertOut)
async def mark_read(
    alert_id: UUID,
    actor: Actor = Depends(get_actor),
    service: AlertService = Depends(get_alert_service),
):
    return await service.mark_as_read(alert_id, actor.company_id)
