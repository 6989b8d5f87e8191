"""HTTP API (FastAPI routers)."""

from mealscan.api.analyze import router as analyze_router

__all__ = [
    "analyze_router",
]
