"""
Contract Schemas
Pydantic v2 models for contract creation payloads and the contract read model.

Structural checks (types, non-negative numbers) live here; the temporal and
business rules are enforced by the service layer so they surface as domain
ValidationErrors.
"""
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ─────────────────────── Input ───────────────────────

class RentPeriodIn(BaseModel):
    """One pricing tier as submitted for a rental space."""
    start_date: date
    end_date: date
    rent_amount: float
    service_fee: float = Field(default=0.0, ge=0)


class RentalSpaceIn(BaseModel):
    building_id: uuid.UUID
    floor: str = Field(..., max_length=20)
    area_sqm: float = Field(..., ge=0)
    rent_periods: List[RentPeriodIn] = []


class ContractCreate(BaseModel):
    """Payload for creating (or renewing into) a contract."""
    customer_id: uuid.UUID
    contract_no: str = Field(..., min_length=1, max_length=50)
    start_date: date
    end_date: date
    deposit_amount: Optional[float] = Field(default=None, ge=0)
    rental_spaces: List[RentalSpaceIn] = []
    notes: Optional[str] = None

    @field_validator("contract_no", mode="before")
    @classmethod
    def _strip_contract_no(cls, v):
        return v.strip() if isinstance(v, str) else v


# ─────────────────────── Output ───────────────────────

class RentPeriodOut(BaseModel):
    id: uuid.UUID
    start_date: date
    end_date: date
    rent_amount: float
    service_fee: float
    period_order: int
    total_monthly: float

    class Config:
        from_attributes = True


class BuildingBrief(BaseModel):
    id: uuid.UUID
    name: str
    code: str

    class Config:
        from_attributes = True


class CustomerBrief(BaseModel):
    id: uuid.UUID
    name: str
    type: str
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _enum_value(cls, v):
        return getattr(v, "value", v)

    class Config:
        from_attributes = True


class RentalSpaceOut(BaseModel):
    id: uuid.UUID
    building_id: Optional[uuid.UUID]
    floor: Optional[str]
    area_sqm: float
    building: Optional[BuildingBrief] = None
    rent_periods: List[RentPeriodOut] = []

    # Point-in-time values, populated by the route
    current_rent: float = 0.0
    current_service_fee: float = 0.0


class ContractDocumentOut(BaseModel):
    id: uuid.UUID
    file_name: str
    file_path: str
    file_size: int
    file_type: Optional[str]
    uploaded_at: Optional[datetime]

    class Config:
        from_attributes = True


class ContractOut(BaseModel):
    """Full contract aggregate."""
    id: uuid.UUID
    company_id: uuid.UUID
    customer_id: uuid.UUID
    contract_no: str
    start_date: date
    end_date: date
    deposit_amount: float
    status: str
    previous_contract_id: Optional[uuid.UUID]
    renewal_count: int
    created_by: uuid.UUID
    notes: Optional[str]
    version: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    customer: Optional[CustomerBrief] = None
    rental_spaces: List[RentalSpaceOut] = []
    documents: List[ContractDocumentOut] = []

    total_area: float = 0.0
    current_monthly_rent: float = 0.0


class SweepResult(BaseModel):
    as_of: date
    transitioned: int


class DocumentUrlOut(BaseModel):
    document_id: uuid.UUID
    url: str
    expires_in: int
