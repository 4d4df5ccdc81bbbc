import asyncio
import os

import pytest

from onvista_quotes import resolve


@pytest.mark.skipif(not os.getenv("ONVISTA_QUOTES_LIVE"), reason="live API call")
def test_smoke():
    print("Smoke test starting...")
    result = asyncio.run(resolve("DE000VU5ZLS4"))

    # Either outcome is fine, resolve must not raise
    print(f"Outcome: {result.status}")
    if result.found:
        print(f"{result.exchange.code_exchange}: {len(result.quotes)} quotes")
    else:
        print(f"Reason: {result.reason}")

    print("Smoke test passed.")


if __name__ == "__main__":
    test_smoke()
