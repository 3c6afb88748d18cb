"""Apps router -- dashboard queries over the application registry."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from apprepo.exceptions import NoSuchApplicationError
from apprepo.registry.repo import AppRegistry
from apprepo.storage import default_data_dir

from web.backend.app.models.apps import (
    ExternalViewResponse,
    InstalledByResponse,
    StateRequest,
    StateResponse,
)

router = APIRouter(prefix="/api/apps", tags=["apps"])


def _get_registry() -> AppRegistry:
    """Return a registry for the configured data directory.

    ``APPREPO_DATA_DIR`` is read on every request.
    """
    return AppRegistry.open(str(default_data_dir()))


@router.get(
    "",
    response_model=list[ExternalViewResponse],
    response_model_by_alias=True,
    response_model_exclude_none=True,
    summary="List installed applications",
)
async def list_apps():
    """List every installed application as a dashboard view."""
    reg = _get_registry()
    return [ExternalViewResponse(**view.to_dict()) for view in reg.list()]


@router.delete("", summary="Remove an installed application")
async def remove_app(key: str = Query(..., description="Launch URL the app is installed under")):
    """Remove the application stored under ``key``."""
    reg = _get_registry()
    try:
        reg.remove(key)
    except NoSuchApplicationError as exc:
        raise HTTPException(status_code=404, detail=exc.to_dict()["error"])
    return {"removed": key}


@router.get(
    "/installed",
    response_model=list[dict],
    summary="Applications that run at an origin",
)
async def installed_at(origin: str = Query(..., description="scheme://host[:port]")):
    reg = _get_registry()
    return reg.get_installed(origin)


@router.get(
    "/installed-by",
    response_model=list[InstalledByResponse],
    response_model_by_alias=True,
    summary="Applications installed by an origin",
)
async def installed_by(origin: str = Query(..., description="scheme://host[:port]")):
    reg = _get_registry()
    return [InstalledByResponse(**item.to_dict()) for item in reg.get_installed_by(origin)]


@router.get("/state/{state_id}", response_model=StateResponse, summary="Load app state")
async def load_state(state_id: str):
    reg = _get_registry()
    return StateResponse(id=state_id, state=reg.load_state(state_id))


@router.put("/state/{state_id}", response_model=StateResponse, summary="Save app state")
async def save_state(state_id: str, body: StateRequest):
    """Store ``body.state``; a null state clears it."""
    reg = _get_registry()
    reg.save_state(state_id, body.state)
    return StateResponse(id=state_id, state=body.state)


@router.delete("/state/{state_id}", summary="Delete app state")
async def delete_state(state_id: str):
    reg = _get_registry()
    reg.save_state(state_id, None)
    return {"deleted": state_id}
