"""HTTP API routers."""

from .runs import router as runs_router

__all__ = ["runs_router"]
