import logging
import os
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse

from ...config import get_settings
from ...dependencies import verify_proxy_request
from ..models.directory import StateDirectory
from ..services.directory_transformer import compute_stats, transform
from ..services.state_directory import DataUnavailable, find_state_by_slug, load_state_directory

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_proxy_request)])


class DirectoryAction(str, Enum):
    list = "list"
    state = "state"
    data = "data"
    stats = "stats"
    state_page = "state-page"


PAGE_FILES = {
    DirectoryAction.list: ("greywater-directory.html", "Directory page not found"),
    DirectoryAction.state_page: ("state-detail.html", "State detail page not found"),
}


def _load_directory() -> StateDirectory:
    try:
        return load_state_directory(get_settings().state_directory_path)
    except DataUnavailable:
        raise HTTPException(status_code=500, detail="Failed to load state data")


def _serve_page(action: DirectoryAction) -> FileResponse:
    filename, missing_message = PAGE_FILES[action]
    path = os.path.join(get_settings().pages_dir, filename)
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail=missing_message)
    return FileResponse(path, media_type="text/html")


def _dispatch(directory: StateDirectory, raw_action: str, state_name: Optional[str]):
    try:
        action = DirectoryAction(raw_action)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid action")

    if action in PAGE_FILES:
        return _serve_page(action)

    if action == DirectoryAction.data:
        records = transform(directory.states)
        return {
            "metadata": directory.metadata,
            "states": [record.model_dump(by_alias=True, mode="json") for record in records],
        }

    if action == DirectoryAction.state:
        if not state_name:
            raise HTTPException(status_code=400, detail="State parameter required")
        info = directory.states.get(state_name)
        if info is None:
            raise HTTPException(status_code=404, detail="State not found")
        return {"state": state_name, **info.model_dump(by_alias=True, exclude_unset=True)}

    if action == DirectoryAction.stats:
        return compute_stats(transform(directory.states)).model_dump()

    raise AssertionError(f"Unhandled directory action: {action}")


@router.get("")
async def greywater_directory(
    action: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
):
    """Shopify App Proxy entry point for the greywater directory."""
    return _dispatch(_load_directory(), action or DirectoryAction.list.value, state)


@router.get("/{state_slug}")
async def greywater_directory_state(
    state_slug: str,
    action: Optional[str] = Query(None),
):
    """Same as the entry point, with the state named by a URL slug (e.g. new-mexico)."""
    directory = _load_directory()
    state_name = find_state_by_slug(directory, state_slug)
    if state_name is None:
        raise HTTPException(status_code=404, detail="State not found")
    logger.debug("Resolved state slug %s to %s", state_slug, state_name)
    return _dispatch(directory, action or DirectoryAction.state.value, state_name)
