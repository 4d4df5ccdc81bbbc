from unittest.mock import AsyncMock

import pytest

from onvista_quotes.config import Settings

BASE_URL = "https://api.example.test/api/v1"


def make_fetcher(routes: dict):
    """
    AsyncMock standing in for HttpJsonClient.fetch_json.

    `routes` maps a URL path (relative to BASE_URL) to a payload, or to an
    exception instance to raise.
    """

    async def route(url, params=None):
        path = url[len(BASE_URL) + 1 :]
        if path not in routes:
            raise AssertionError(f"Unexpected request to {url}")
        result = routes[path]
        if isinstance(result, Exception):
            raise result
        return result

    fetcher = AsyncMock()
    fetcher.fetch_json.side_effect = route
    return fetcher


@pytest.fixture
def settings():
    return Settings(base_url=BASE_URL)


@pytest.fixture
def search_payload():
    return {
        "list": [
            {"isin": "DE0001", "entityValue": "123", "entityType": "DERIVATIVE"},
        ]
    }


@pytest.fixture
def snapshot_payload():
    return {
        "quoteList": {
            "list": [
                {"market": {"codeExchange": "FRA", "idNotation": 1, "name": "Frankfurt"}},
                {"market": {"codeExchange": "XETR", "idNotation": 2, "name": "Xetra"}},
            ]
        }
    }


@pytest.fixture
def history_payload():
    return {
        "datetimeLast": [1700000000],
        "last": [10.5],
        "high": [11.0],
        "low": [9.8],
    }


@pytest.fixture
def routes(search_payload, snapshot_payload, history_payload):
    return {
        "instruments/query": search_payload,
        "derivatives/ISIN:DE0001/snapshot": snapshot_payload,
        "instruments/FUND/123/eod_history": history_payload,
    }


@pytest.fixture
def fetcher(routes):
    return make_fetcher(routes)
