"""Version 1 HTTP routers, mounted under ``/api``."""

from fastapi import APIRouter

from . import auth, goals, health

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(goals.router)
api_router.include_router(health.router)

__all__ = ["api_router"]
