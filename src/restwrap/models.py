"""Typed response envelopes for use with ``Reply.json(into=...)``."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class RestwrapModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ApiStdRes(RestwrapModel):
    """The common ``{"code": ..., "message": ..., "data": ...}`` API envelope."""

    code: int = 0
    message: str = ""
    data: Any = None
