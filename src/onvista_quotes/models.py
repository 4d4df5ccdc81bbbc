import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Epoch seconds from 1970-01-01 to 9999-12-31 UTC
MIN_EPOCH_SECONDS = 0
MAX_EPOCH_SECONDS = 253402300799


class InstrumentType(str, Enum):
    DERIVATIVE = "DERIVATIVE"
    STOCK = "STOCK"
    FUND = "FUND"
    BOND = "BOND"
    INDEX = "INDEX"


class Instrument(BaseModel):
    model_config = ConfigDict(frozen=True)

    isin: str
    id: str = Field(..., description="Opaque upstream id used in history URLs")
    type: str = Field(..., description="Upstream entity type, e.g. DERIVATIVE")


class Exchange(BaseModel):
    """A single listing of an instrument: venue code plus notation id."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code_exchange: str = Field(..., alias="codeExchange")
    id_notation: int = Field(..., alias="idNotation")
    name: str | None = None


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    close: float
    low: float
    high: float


class QuoteWindow(BaseModel):
    """How far back to request history, and the matching range token."""

    model_config = ConfigDict(frozen=True)

    months: int = Field(3, ge=1)
    range_token: str | None = None

    @property
    def range(self) -> str:
        return self.range_token or f"M{self.months}"


# Upstream payloads


class SearchCandidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    isin: str | None = None
    entity_value: str | None = Field(None, alias="entityValue")
    entity_type: str | None = Field(None, alias="entityType")

    @field_validator("entity_value", mode="before")
    @classmethod
    def coerce_entity_value(cls, v):
        # Upstream sometimes sends numeric ids
        if isinstance(v, int):
            return str(v)
        return v


class SearchResponse(BaseModel):
    candidates: list[SearchCandidate] = Field(default_factory=list, alias="list")


class SnapshotEntry(BaseModel):
    market: Exchange


class SnapshotQuoteList(BaseModel):
    entries: list[SnapshotEntry] = Field(default_factory=list, alias="list")


class Snapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    quote_list: SnapshotQuoteList = Field(default_factory=SnapshotQuoteList, alias="quoteList")

    @property
    def exchanges(self) -> list[Exchange]:
        return [entry.market for entry in self.quote_list.entries]


class EodHistory(BaseModel):
    """Parallel arrays of end-of-day values, timestamps in epoch seconds."""

    model_config = ConfigDict(populate_by_name=True)

    datetime_last: list[int] = Field(..., alias="datetimeLast")
    last: list[float]
    low: list[float]
    high: list[float]

    @field_validator("datetime_last")
    @classmethod
    def check_timestamps(cls, v: list[int]) -> list[int]:
        for ts in v:
            if not MIN_EPOCH_SECONDS <= ts <= MAX_EPOCH_SECONDS:
                raise ValueError(f"Timestamp {ts} is not in epoch seconds")
        return v

    @model_validator(mode="after")
    def check_lengths(self) -> "EodHistory":
        lengths = {
            "datetimeLast": len(self.datetime_last),
            "last": len(self.last),
            "low": len(self.low),
            "high": len(self.high),
        }
        if len(set(lengths.values())) != 1:
            detail = ", ".join(f"{k}={v}" for k, v in lengths.items())
            raise ValueError(f"Array lengths differ: {detail}")
        return self
