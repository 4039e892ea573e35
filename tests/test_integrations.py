"""Tests for the SWAPI transport."""

import httpx
import pytest

from starcache.errors import UpstreamError
from starcache.integrations.swapi import SwapiClient

from conftest import BASE


class TestSwapiClient:
    @pytest.mark.asyncio
    async def test_fetch_success(self, httpx_mock, death_star):
        url = f"{BASE}/starships/9/"
        httpx_mock.add_response(url=url, json=death_star)
        client = SwapiClient()
        data = await client.fetch(url)
        assert data["name"] == "Death Star"

    @pytest.mark.asyncio
    async def test_fetch_collection(self, httpx_mock):
        url = f"{BASE}/starships/?page=1"
        httpx_mock.add_response(url=url, json={"count": 0, "results": []})
        data = await SwapiClient().fetch(url)
        assert data == {"count": 0, "results": []}

    @pytest.mark.asyncio
    async def test_server_error(self, httpx_mock):
        httpx_mock.add_response(status_code=500, text="Internal Server Error")
        with pytest.raises(UpstreamError) as excinfo:
            await SwapiClient().fetch(f"{BASE}/starships/9/")
        assert excinfo.value.status_code == 500
        assert "500" in excinfo.value.reason

    @pytest.mark.asyncio
    async def test_not_found_status(self, httpx_mock):
        httpx_mock.add_response(status_code=404, json={"detail": "Not found"})
        with pytest.raises(UpstreamError) as excinfo:
            await SwapiClient().fetch(f"{BASE}/starships/999/")
        assert excinfo.value.status_code == 404

    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock):
        httpx_mock.add_exception(httpx.TimeoutException("timeout"))
        with pytest.raises(UpstreamError) as excinfo:
            await SwapiClient(timeout=1).fetch(f"{BASE}/starships/9/")
        assert excinfo.value.reason == "timeout"

    @pytest.mark.asyncio
    async def test_connection_error(self, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))
        with pytest.raises(UpstreamError) as excinfo:
            await SwapiClient().fetch(f"{BASE}/starships/9/")
        assert "connection refused" in excinfo.value.reason

    @pytest.mark.asyncio
    async def test_malformed_body(self, httpx_mock):
        httpx_mock.add_response(text="<html>maintenance</html>")
        with pytest.raises(UpstreamError) as excinfo:
            await SwapiClient().fetch(f"{BASE}/starships/9/")
        assert excinfo.value.reason == "malformed JSON body"

    @pytest.mark.asyncio
    async def test_non_object_body(self, httpx_mock):
        httpx_mock.add_response(json=["not", "an", "object"])
        with pytest.raises(UpstreamError):
            await SwapiClient().fetch(f"{BASE}/starships/9/")
