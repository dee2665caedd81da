"""
Report Schemas
Shapes returned by the occupancy and revenue aggregator.
"""
import uuid
from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class BuildingOccupancy(BaseModel):
    building_id: uuid.UUID
    building_name: str
    code: str
    total_floors: int
    total_area: float
    rented_area: float
    vacant_area: float
    occupancy_rate: int


class OccupancySummary(BaseModel):
    as_of: date
    total_area: float
    rented_area: float
    vacant_area: float
    occupancy_rate: int
    buildings: List[BuildingOccupancy] = []


class BuildingRevenue(BaseModel):
    building_id: uuid.UUID
    building_name: str
    total_rent: float
    contract_count: int


class MonthlyRevenue(BaseModel):
    month: str  # YYYY-MM
    revenue: float


class CustomerRevenue(BaseModel):
    customer_id: uuid.UUID
    customer_name: str
    total_rent: float
    contract_count: int


class RevenueReport(BaseModel):
    start_date: date
    end_date: date
    total_revenue: float
    active_contract_count: int
    average_rent: float
    revenue_by_building: List[BuildingRevenue] = []
    monthly_trend: List[MonthlyRevenue] = []
    top_customers: List[CustomerRevenue] = []


class ExpiringContractItem(BaseModel):
    id: uuid.UUID
    contract_no: str
    start_date: date
    end_date: date
    days_remaining: int
    customer_name: Optional[str]
    customer_phone: Optional[str]
    spaces: str
    total_rent: float
