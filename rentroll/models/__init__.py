# Import all models in dependency order so string relationships resolve
from rentroll.models.company import Company, User, UserRole
from rentroll.models.building import Building
from rentroll.models.customer import Customer, CustomerType
from rentroll.models.contract import (
    RentContract, ContractUnit, RentPeriod, ContractDocument, ContractStatus,
)
from rentroll.models.alert import Alert, AlertType

__all__ = [
    "Company",
    "User",
    "UserRole",
    "Building",
    "Customer",
    "CustomerType",
    "RentContract",
    "ContractUnit",
    "RentPeriod",
    "ContractDocument",
    "ContractStatus",
    "Alert",
    "AlertType",
]
