"""
Exception hierarchy for quote resolution.

Every failure raised by a pipeline stage derives from QuoteResolutionError so
the pipeline boundary can convert it into an outcome.
"""


class QuoteResolutionError(Exception):
    """Base class for all resolution failures."""


class ConfigError(QuoteResolutionError):
    """Raised when configuration cannot be loaded or validated."""


class NotFoundError(QuoteResolutionError):
    """Nothing matched the user's input. User-correctable."""


class InstrumentNotFoundError(NotFoundError):
    def __init__(self, isin: str):
        self.isin = isin
        super().__init__(f"Did not find instrument with ISIN {isin}")


class NoExchangeError(NotFoundError):
    def __init__(self, isin: str):
        self.isin = isin
        super().__init__(f"No exchange found for ISIN {isin}")


class ExchangeNotFoundError(NotFoundError):
    def __init__(self, requested_code: str, available_codes: list[str]):
        self.requested_code = requested_code
        self.available_codes = list(available_codes)
        super().__init__(
            f"Exchange {requested_code} does not exist. "
            f"Available exchanges: {', '.join(self.available_codes)}"
        )


class UnsupportedTypeError(QuoteResolutionError):
    """The instrument type has no known listing endpoint."""

    def __init__(self, instrument_type: str):
        self.instrument_type = instrument_type
        super().__init__(f"type '{instrument_type}' not implemented.")


class HttpError(QuoteResolutionError):
    def __init__(self, url: str, status: int, body: str):
        self.url = url
        self.status = status
        self.body = body
        super().__init__(f"Failed to get {url} (HTTP {status}). {body}")


class MalformedResponseError(QuoteResolutionError):
    """Upstream payload does not have the expected shape."""

    def __init__(self, url: str, detail: str):
        self.url = url
        self.detail = detail
        super().__init__(f"Malformed response from {url}: {detail}")
