"""
Mounts the attendance, settings and health routers under one v1 router.
"""

from fastapi import APIRouter

from schoolhub.api.v1.endpoints import attendance, health, settings

api_router = APIRouter()

# Punches, events, summaries
api_router.include_router(attendance.router)

# Per-org attendance settings
api_router.include_router(settings.router)

# Liveness
api_router.include_router(health.router)
