import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class AlertOut(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    contract_id: Optional[uuid.UUID]
    type: str
    title: str
    message: Optional[str]
    is_read: bool
    created_at: datetime

    @field_validator("type", mode="before")
    @classmethod
    def _enum_value(cls, v):
        return getattr(v, "value", v)

    class Config:
        from_attributes = True


class UnreadCount(BaseModel):
    unread: int


class ExpiryCheckResult(BaseModel):
    as_of: date
    alerts_created: int
    contracts_expired: int
