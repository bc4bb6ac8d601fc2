"""API router package for endpoint composition."""

from .health import api_create_health_router
from .ledger import api_create_ledger_router
from .workflow import api_create_workflow_router

__all__ = ["api_create_health_router", "api_create_ledger_router", "api_create_workflow_router"]
