from rentroll.api.routes.contracts import router as contracts_router
from rentroll.api.routes.reports import router as reports_router
from rentroll.api.routes.alerts import router as alerts_router

__all__ = [
    "contracts_router",
    "reports_router",
    "alerts_router",
]
