from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from ...dependencies import get_hierarchy_handler
from ..services.hierarchy_handler import HierarchyRequestHandler

router = APIRouter()


@router.get("")
async def get_hierarchy(
    level: Optional[str] = Query(None),
    parent_id: Optional[str] = Query(None, alias="parentId"),
    parent_type: Optional[str] = Query(None, alias="parentType"),
    handler: HierarchyRequestHandler = Depends(get_hierarchy_handler),
):
    """States, counties of a state, or cities of a state/county with rolled-up compliance data."""
    outcome = await handler.handle(level, parent_id, parent_type)
    return JSONResponse(outcome.body, status_code=outcome.status_code)


@router.options("")
async def hierarchy_preflight():
    return Response(status_code=200)
