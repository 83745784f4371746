import asyncio
from typing import Any

import httpx
import pytest
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_none

from fantasy_football_manager.exceptions import ProviderError
from fantasy_football_manager.rankings.ffc_source import FantasyFootballCalculatorSource

_NO_WAIT_RETRY = retry(
    stop=stop_after_attempt(3),
    wait=wait_none(),
    retry=retry_if_exception_type((httpx.TransportError, httpx.HTTPStatusError)),
    reraise=True,
)

_PAYLOAD: dict[str, Any] = {
    "status": "Success",
    "players": [
        {"name": "Bijan Robinson", "position": "RB", "team": "ATL", "adp": 2.4},
        {"name": "Ja'Marr Chase", "position": "WR", "team": "CIN", "adp": 1.2},
        {"name": "Justin Tucker", "position": "PK", "team": "BAL", "adp": 140.0},
        {"name": "Sam LaPorta", "position": "TE", "team": "DET", "adp": 30.1},
    ],
}


def _source(handler: Any) -> tuple[FantasyFootballCalculatorSource, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FantasyFootballCalculatorSource(season=2025, teams=12, client=client, retry=_NO_WAIT_RETRY), client


class TestFantasyFootballCalculatorSource:
    def test_parses_sorts_and_filters(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=_PAYLOAD)

        source, _ = _source(handler)
        pool = asyncio.run(source.fetch_pool("dynasty", 10))

        assert [e.name for e in pool.entries] == ["Ja'Marr Chase", "Bijan Robinson", "Sam LaPorta"]
        assert requests[0].url.path.endswith("/adp/dynasty")
        assert requests[0].url.params["teams"] == "12"
        assert requests[0].url.params["year"] == "2025"

    def test_redraft_maps_to_ppr(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json=_PAYLOAD)

        source, _ = _source(handler)
        asyncio.run(source.fetch_pool("redraft", 10))
        assert paths == ["/api/v1/adp/ppr"]

    def test_size_limits_entries(self) -> None:
        source, _ = _source(lambda request: httpx.Response(200, json=_PAYLOAD))
        pool = asyncio.run(source.fetch_pool("dynasty", 1))
        assert [e.name for e in pool.entries] == ["Ja'Marr Chase"]

    def test_retries_server_errors(self) -> None:
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts < 3:
                return httpx.Response(503)
            return httpx.Response(200, json=_PAYLOAD)

        source, _ = _source(handler)
        pool = asyncio.run(source.fetch_pool("dynasty", 10))
        assert attempts == 3
        assert len(pool.entries) == 3

    def test_persistent_failure_raises_provider_error(self) -> None:
        source, _ = _source(lambda request: httpx.Response(500))
        with pytest.raises(ProviderError, match="ffc"):
            asyncio.run(source.fetch_pool("dynasty", 10))

    def test_error_status_payload_raises_provider_error(self) -> None:
        source, _ = _source(lambda request: httpx.Response(200, json={"status": "Error", "errors": ["bad"]}))
        with pytest.raises(ProviderError, match="Unexpected ADP response"):
            asyncio.run(source.fetch_pool("dynasty", 10))
