"""Store viewer - snapshot reconciliation and animation for the store simulation."""
from .accidents import AccidentControl, AccidentResult
from .animator import DEFAULT_FRAME_INTERVAL, DEFAULT_SPEED, MotionAnimator
from .engine import ViewerEngine
from .interaction import HoverInfo, describe_hover, hit_test
from .layout import DEFAULT_ZONES, EXIT_POSITION, StoreLayout, Zone, load_layout
from .link import LinkNotReady, SimulationLink, validate_customer_count
from .proxies import MarkerProxy, ProxyLayer
from .registry import EntityRegistry, TrackedEntity
from .snapshot import Entity, Snapshot, decode_message
from .surfaces import Surface, render_concurrency, render_log, render_stats, render_store

__all__ = [
    "AccidentControl",
    "AccidentResult",
    "DEFAULT_FRAME_INTERVAL",
    "DEFAULT_SPEED",
    "DEFAULT_ZONES",
    "EXIT_POSITION",
    "Entity",
    "EntityRegistry",
    "HoverInfo",
    "LinkNotReady",
    "MarkerProxy",
    "MotionAnimator",
    "ProxyLayer",
    "SimulationLink",
    "Snapshot",
    "StoreLayout",
    "Surface",
    "TrackedEntity",
    "ViewerEngine",
    "Zone",
    "decode_message",
    "describe_hover",
    "hit_test",
    "load_layout",
    "render_concurrency",
    "render_log",
    "render_stats",
    "render_store",
    "validate_customer_count",
]
