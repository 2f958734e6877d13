"""Liveness payload served by the public health route."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    db: bool
    version: str
