import asyncio
import logging
from datetime import date, datetime
from typing import Any, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from .config import Settings, load_settings
from .dates import date_from_epoch, format_iso_date, months_ago
from .errors import (
    ExchangeNotFoundError,
    HttpError,
    InstrumentNotFoundError,
    MalformedResponseError,
    NoExchangeError,
    NotFoundError,
    UnsupportedTypeError,
)
from .http import HttpJsonClient
from .interfaces import JsonFetcher, NotFound, Outcome, Success, TransientFailure
from .models import (
    EodHistory,
    Exchange,
    Instrument,
    InstrumentType,
    Quote,
    QuoteWindow,
    SearchResponse,
    Snapshot,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Upstream errors that end a request without meaning "absent"
TRANSIENT_ERRORS = (HttpError, MalformedResponseError, aiohttp.ClientError, asyncio.TimeoutError)


def _parse(model: type[ModelT], payload: Any, url: str) -> ModelT:
    """Validates an untyped JSON payload into `model`."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponseError(url, str(e)) from e


class InstrumentResolver:
    def __init__(self, fetcher: JsonFetcher, settings: Settings):
        self.fetcher = fetcher
        self.settings = settings

    async def search(self, isin: str) -> Instrument:
        """
        Finds the instrument whose ISIN equals `isin` exactly.
        Raises InstrumentNotFoundError if no search candidate matches.
        """
        if not isin:
            raise ValueError("ISIN must not be empty")

        url = self.settings.url("instruments/query")
        payload = await self.fetcher.fetch_json(
            url, params={"limit": self.settings.search.limit, "searchValue": isin}
        )
        results = _parse(SearchResponse, payload, url)

        match = next((c for c in results.candidates if c.isin == isin), None)
        if match is None:
            raise InstrumentNotFoundError(isin)
        if not match.entity_value or not match.entity_type:
            raise MalformedResponseError(
                url, f"Search result for {isin} lacks entityValue or entityType"
            )

        return Instrument(isin=match.isin, id=match.entity_value, type=match.entity_type)


class ExchangeResolver:
    # Snapshot endpoint per instrument type
    SNAPSHOT_PATHS = {
        InstrumentType.DERIVATIVE.value: "derivatives/ISIN:{isin}/snapshot",
    }

    def __init__(self, fetcher: JsonFetcher, settings: Settings):
        self.fetcher = fetcher
        self.settings = settings

    def snapshot_url(self, instrument: Instrument) -> str:
        path = self.SNAPSHOT_PATHS.get(instrument.type)
        if path is None:
            raise UnsupportedTypeError(instrument.type)
        return self.settings.url(path.format(isin=instrument.isin))

    async def list_exchanges(self, instrument: Instrument) -> list[Exchange]:
        """Returns all listings of `instrument` in upstream order."""
        url = self.snapshot_url(instrument)
        snapshot = _parse(Snapshot, await self.fetcher.fetch_json(url), url)

        exchanges = snapshot.exchanges
        if not exchanges:
            raise NoExchangeError(instrument.isin)
        return exchanges

    async def find_exchange_config(
        self, instrument: Instrument, exchange_code: str | None = None
    ) -> Exchange:
        """
        Selects the listing to fetch prices from.

        With `exchange_code`, the first listing with that exact code wins.
        Without it, the first listing in upstream order is used; upstream does
        not guarantee that order, so the default exchange may change between
        calls.
        """
        exchanges = await self.list_exchanges(instrument)

        if not exchange_code:
            return exchanges[0]

        for exchange in exchanges:
            if exchange.code_exchange == exchange_code:
                return exchange

        raise ExchangeNotFoundError(exchange_code, [e.code_exchange for e in exchanges])


class QuoteFetcher:
    def __init__(self, fetcher: JsonFetcher, settings: Settings):
        self.fetcher = fetcher
        self.settings = settings

    async def fetch_quotes(
        self,
        instrument_id: str,
        id_notation: int,
        window: QuoteWindow | None = None,
        now: date | datetime | None = None,
    ) -> list[Quote]:
        """
        Fetches end-of-day quotes for one listing, starting `window.months`
        months before `now`. Quotes keep the upstream order.
        """
        window = window or self.settings.window
        start_date = format_iso_date(months_ago(window.months, now))

        url = self.settings.url(f"instruments/FUND/{instrument_id}/eod_history")
        payload = await self.fetcher.fetch_json(
            url,
            params={"idNotation": id_notation, "range": window.range, "startDate": start_date},
        )
        history = _parse(EodHistory, payload, url)

        return [
            Quote(date=date_from_epoch(ts), close=close, low=low, high=high)
            for ts, close, low, high in zip(
                history.datetime_last, history.last, history.low, history.high
            )
        ]


class QuoteResolver:
    """
    Runs search, listing selection and history fetch in sequence.

    resolve() never raises for resolution failures; it returns Success,
    NotFound or TransientFailure.
    """

    def __init__(self, fetcher: JsonFetcher, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.instruments = InstrumentResolver(fetcher, self.settings)
        self.exchanges = ExchangeResolver(fetcher, self.settings)
        self.quotes = QuoteFetcher(fetcher, self.settings)

    async def resolve(
        self,
        isin: str,
        exchange_code: str | None = None,
        window: QuoteWindow | None = None,
    ) -> Outcome:
        if not isin:
            logger.error("Search failed: no ISIN given")
            return NotFound(reason="No ISIN given")

        stage = f"Search for ISIN {isin}"
        try:
            instrument = await self.instruments.search(isin)

            stage = f"Search for exchange {exchange_code or '(default)'} of ISIN {isin}"
            exchange = await self.exchanges.find_exchange_config(instrument, exchange_code)

            stage = f"Fetching quotes for ISIN {isin} on {exchange.code_exchange}"
            quotes = await self.quotes.fetch_quotes(instrument.id, exchange.id_notation, window)
        except (NotFoundError, UnsupportedTypeError) as e:
            logger.error(f"{stage} failed: {e}")
            return NotFound(reason=str(e), error=e)
        except TRANSIENT_ERRORS as e:
            logger.error(f"{stage} failed: {e!r}")
            return TransientFailure(reason=str(e) or type(e).__name__, error=e)

        return Success(instrument=instrument, exchange=exchange, quotes=quotes)


async def resolve(
    isin: str,
    exchange_code: str | None = None,
    *,
    settings: Settings | None = None,
    window: QuoteWindow | None = None,
) -> Outcome:
    """Resolves quotes for `isin` over a client session of its own."""
    settings = settings or load_settings()
    async with HttpJsonClient(timeout=settings.http.timeout) as client:
        return await QuoteResolver(client, settings).resolve(isin, exchange_code, window)
