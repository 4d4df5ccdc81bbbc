"""
Interface definitions for quote resolution.

Defines Protocols for the upstream transport and Pydantic models for the
pipeline's typed outcomes.
"""

from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict

from .models import Exchange, Instrument, Quote


class JsonFetcher(Protocol):
    """Protocol for anything that can GET a URL and return decoded JSON"""

    async def fetch_json(self, url: str, params: dict[str, Any] | None = None) -> Any: ...


class Success(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    instrument: Instrument
    exchange: Exchange
    quotes: list[Quote]

    @property
    def found(self) -> bool:
        return True


class NotFound(BaseModel):
    """Nothing matched: unknown ISIN, missing listing or unsupported type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: Literal["not_found"] = "not_found"
    reason: str
    error: Exception | None = None

    @property
    def found(self) -> bool:
        return False


class TransientFailure(BaseModel):
    """Upstream errored or answered with something unusable."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: Literal["failure"] = "failure"
    reason: str
    error: Exception | None = None

    @property
    def found(self) -> bool:
        return False


Outcome = Success | NotFound | TransientFailure
