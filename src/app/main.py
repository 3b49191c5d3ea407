"""STORE-VIEWER - live visualization client for the store simulation.

Main FastAPI application.

Run with:
    python -m uvicorn app.main:app --app-dir src --port 8000
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers import simulation_router, viewer_router


# ---------------------------------------------------------------------------
# Subsystem startup helpers
# ---------------------------------------------------------------------------

def _create_viewer_engine():
    """Create the ViewerEngine bound to the running event loop."""
    from viewer import StoreLayout, ViewerEngine, load_layout

    layout = load_layout(settings.layout_path) if settings.layout_path else StoreLayout()

    engine = ViewerEngine(
        layout=layout,
        speed=settings.animation_speed,
        frame_interval=1.0 / max(1, settings.frame_rate),
        hover_radius=settings.hover_radius,
        clock=asyncio.get_running_loop(),
        store_size=(settings.store_width, settings.store_height),
        panel_size=(settings.panel_width, settings.panel_height),
        font_path=settings.font_path or None,
    )
    logger.info(
        f"Viewer engine created ({len(layout.zones)} zones, "
        f"{settings.frame_rate} fps, speed={settings.animation_speed})"
    )
    return engine


def _start_simulation_link(engine):
    """Create the upstream link and start its receive loop. Returns (link, task)."""
    from viewer import SimulationLink

    link = SimulationLink(
        settings.upstream_url,
        on_message=engine.handle_message,
        reconnect_delay=settings.upstream_reconnect_delay,
    )
    if not settings.upstream_enabled:
        logger.info("Simulation link disabled (UPSTREAM_ENABLED=false)")
        return link, None

    task = asyncio.create_task(link.run(), name="simulation-link")
    logger.info(f"Simulation link started ({settings.upstream_url})")
    return link, task


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    from viewer import AccidentControl

    logger.info("=" * 60)
    logger.info("  STORE-VIEWER v0.1.0 - INITIALIZING")
    logger.info("=" * 60)

    engine = _create_viewer_engine()
    app.state.viewer = engine

    link, link_task = _start_simulation_link(engine)
    app.state.link = link

    accidents = AccidentControl(settings.upstream_http_url, timeout=settings.accident_timeout)
    app.state.accidents = accidents

    logger.info("=" * 60)
    logger.info("  STORE-VIEWER ONLINE")
    logger.info("=" * 60)

    yield

    logger.info("Stopping simulation link...")
    await link.stop()
    if link_task is not None:
        link_task.cancel()
        try:
            await link_task
        except asyncio.CancelledError:
            pass
    engine.reset()
    await accidents.aclose()
    logger.info("STORE-VIEWER shutting down...")


# Create FastAPI app
app = FastAPI(
    title="STORE-VIEWER",
    description="Live visualization client for the store simulation",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(viewer_router)
app.include_router(simulation_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": "0.1.0",
        "system": "STORE-VIEWER",
    }


@app.get("/api/status")
async def status():
    """System status endpoint."""
    link = getattr(app.state, "link", None)
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "upstream_url": settings.upstream_url,
        "upstream_connected": link.connected if link is not None else False,
    }
