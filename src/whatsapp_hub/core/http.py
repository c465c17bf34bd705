"""Common HTTP response models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    version: str
    cache: Literal["up", "down", "disabled"] = "disabled"
