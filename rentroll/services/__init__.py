from rentroll.services.alert_service import AlertService
from rentroll.services.contract_service import ContractService
from rentroll.services.occupancy_service import OccupancyService
from rentroll.services.storage_service import (
    DocumentStorage,
    SupabaseDocumentStorage,
    UploadedDocument,
)

__all__ = [
    "AlertService",
    "ContractService",
    "OccupancyService",
    "DocumentStorage",
    "SupabaseDocumentStorage",
    "UploadedDocument",
]
