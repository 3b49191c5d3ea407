"""Simulation control API - start a run, toggle accidents."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from loguru import logger
from pydantic import BaseModel, Field

from viewer.link import LinkNotReady

router = APIRouter(prefix="/api", tags=["simulation"])


class StartRequest(BaseModel):
    customer_count: int = Field(..., ge=1)


def _get_link(request: Request):
    link = getattr(request.app.state, "link", None)
    if link is None:
        raise HTTPException(503, "Simulation link not configured")
    return link


def _get_accidents(request: Request):
    accidents = getattr(request.app.state, "accidents", None)
    if accidents is None:
        raise HTTPException(503, "Accident control not available")
    return accidents


@router.post("/simulation/start")
async def start_simulation(body: StartRequest, request: Request):
    """Send the start command, then clear every customer from the previous run."""
    link = _get_link(request)
    engine = getattr(request.app.state, "viewer", None)
    try:
        message = await link.send_start(body.customer_count)
    except LinkNotReady as e:
        logger.warning(f"Start rejected: {e}")
        raise HTTPException(503, str(e))
    except ValueError as e:
        raise HTTPException(422, str(e))

    if engine is not None:
        engine.reset()
    return {"status": "started", "sent": message}


def _accident_response(result):
    if not result.ok:
        raise HTTPException(502, f"Simulation server error: {result.message}")
    return result.to_dict()


@router.post("/accidents/start")
async def start_accidents(request: Request):
    return _accident_response(await _get_accidents(request).start())


@router.post("/accidents/stop")
async def stop_accidents(request: Request):
    return _accident_response(await _get_accidents(request).stop())


@router.post("/accidents/toggle")
async def toggle_accidents(request: Request):
    """Start accidents if stopped, stop them if running."""
    return _accident_response(await _get_accidents(request).toggle())


@router.get("/accidents")
async def accident_status(request: Request):
    return {"active": _get_accidents(request).active}
