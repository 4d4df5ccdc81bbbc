from .config import Settings, load_settings
from .errors import (
    ExchangeNotFoundError,
    HttpError,
    InstrumentNotFoundError,
    MalformedResponseError,
    NoExchangeError,
    NotFoundError,
    QuoteResolutionError,
    UnsupportedTypeError,
)
from .interfaces import NotFound, Outcome, Success, TransientFailure
from .models import Exchange, Instrument, Quote, QuoteWindow
from .resolver import (
    ExchangeResolver,
    InstrumentResolver,
    QuoteFetcher,
    QuoteResolver,
    resolve,
)

__all__ = [
    "Exchange",
    "ExchangeNotFoundError",
    "ExchangeResolver",
    "HttpError",
    "Instrument",
    "InstrumentNotFoundError",
    "InstrumentResolver",
    "MalformedResponseError",
    "NoExchangeError",
    "NotFound",
    "NotFoundError",
    "Outcome",
    "Quote",
    "QuoteFetcher",
    "QuoteResolutionError",
    "QuoteResolver",
    "QuoteWindow",
    "Settings",
    "Success",
    "TransientFailure",
    "UnsupportedTypeError",
    "load_settings",
    "resolve",
]
