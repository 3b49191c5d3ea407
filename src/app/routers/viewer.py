"""Viewer API - engine state, hover queries, surface snapshots and MJPEG streams.

Endpoints:
    GET /api/viewer/state                     - Tracked customers + stats
    GET /api/viewer/hover?x=&y=               - Tooltip for the customer under the pointer
    GET /api/viewer/surfaces                  - Surface names and sizes
    GET /api/viewer/surfaces/{name}/snapshot  - Single JPEG frame
    GET /api/viewer/surfaces/{name}/mjpeg     - MJPEG streaming response
"""

from __future__ import annotations

import asyncio
from typing import AsyncGenerator

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response, StreamingResponse

from app.config import settings

router = APIRouter(prefix="/api/viewer", tags=["viewer"])


def _get_engine(request: Request):
    """Retrieve the ViewerEngine from app state."""
    engine = getattr(request.app.state, "viewer", None)
    if engine is None:
        raise HTTPException(503, "Viewer engine not available")
    return engine


def _get_surface(engine, name: str):
    try:
        return engine.surface(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Surface '{name}' not found")


@router.get("/state")
async def get_state(request: Request):
    """Current tracked customers, latest snapshot summary and link status."""
    engine = _get_engine(request)
    state = engine.get_state()
    link = getattr(request.app.state, "link", None)
    state["link"] = link.stats if link is not None else None
    return state


@router.get("/hover")
async def hover(request: Request, x: float = Query(...), y: float = Query(...)):
    """Hit-test the pointer against the latest snapshot."""
    engine = _get_engine(request)
    info = engine.hover(x, y)
    if info is None:
        return {"visible": False}
    return info.to_dict()


@router.get("/surfaces")
async def list_surfaces(request: Request):
    engine = _get_engine(request)
    return [
        {"name": s.name, "width": s.width, "height": s.height}
        for s in engine.surfaces.values()
    ]


@router.get("/surfaces/{name}/snapshot")
async def surface_snapshot(name: str, request: Request):
    """Current frame of one surface as JPEG."""
    engine = _get_engine(request)
    _get_surface(engine, name)
    jpeg = engine.get_jpeg(name, quality=settings.jpeg_quality)
    return Response(content=jpeg, media_type="image/jpeg")


async def _mjpeg_frames(engine, name: str, fps: int) -> AsyncGenerator[bytes, None]:
    """Yield MJPEG-formatted frames, encoded on the event loop."""
    interval = 1.0 / max(1, fps)
    while True:
        jpeg = engine.get_jpeg(name, quality=settings.jpeg_quality)
        yield (
            b"--frame\r\n"
            b"Content-Type: image/jpeg\r\n"
            b"Content-Length: " + str(len(jpeg)).encode() + b"\r\n"
            b"\r\n" + jpeg + b"\r\n"
        )
        await asyncio.sleep(interval)


@router.get("/surfaces/{name}/mjpeg")
async def surface_mjpeg(name: str, request: Request):
    """MJPEG stream of one surface."""
    engine = _get_engine(request)
    _get_surface(engine, name)
    return StreamingResponse(
        _mjpeg_frames(engine, name, settings.stream_fps),
        media_type="multipart/x-mixed-replace; boundary=frame",
    )
