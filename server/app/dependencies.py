from fastapi import Depends, HTTPException, Request, status

from .config import get_settings
from .core.services.compliance_aggregator import ComplianceAggregator
from .core.services.hierarchy_handler import HierarchyRequestHandler
from .core.services.proxy_signature import verify_signature
from .warehouse import BigQueryWarehouse


def get_warehouse(request: Request) -> BigQueryWarehouse:
    """The process-wide warehouse built during startup."""
    warehouse = getattr(request.app.state, "warehouse", None)
    if warehouse is None:
        raise RuntimeError("Warehouse not initialized. Start the app through its lifespan.")
    return warehouse


def get_aggregator(warehouse: BigQueryWarehouse = Depends(get_warehouse)) -> ComplianceAggregator:
    return ComplianceAggregator(warehouse)


def get_hierarchy_handler(
    aggregator: ComplianceAggregator = Depends(get_aggregator),
) -> HierarchyRequestHandler:
    settings = get_settings()
    return HierarchyRequestHandler(aggregator, include_details=not settings.is_production)


async def verify_proxy_request(request: Request) -> None:
    """Reject App Proxy requests whose signature does not match."""
    secret = get_settings().shopify_proxy_secret
    if not verify_signature(request.query_params.multi_items(), secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
