# thepass/schemas/base.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Strict request models: forbid unknown fields.

    Untyped JSON bodies are rejected at the boundary instead of being
    half-read by the handler.
    """

    model_config = ConfigDict(extra="forbid")


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)
