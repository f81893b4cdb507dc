"""Pydantic schemas for rate limiter administration."""

from pydantic import BaseModel, Field


class SweepResponse(BaseModel):
    """Result of pruning idle callers from the rate limiter."""

    removed: int = Field(..., description="Identifiers dropped because all their requests expired.")
    tracked_identifiers: int = Field(..., description="Identifiers still tracked after the sweep.")
