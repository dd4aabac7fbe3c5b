"""
tests/unit/test_token_list.py - Token catalog parsing and download.
"""

import asyncio

import httpx
import pytest

from core.exceptions import RouterError, ValidationError
from dex.token_list import fetch_token_catalog, parse_token_catalog

SOL = {
    "chainId": 101,
    "address": "So11111111111111111111111111111111111111112",
    "symbol": "SOL",
    "name": "Wrapped SOL",
    "decimals": 9,
    "logoURI": "",
    "tags": [],
}


class TestParseTokenCatalog:
    def test_indexed_by_address(self):
        catalog = parse_token_catalog([SOL])
        assert catalog[SOL["address"]].symbol == "SOL"

    def test_malformed_entries_skipped(self):
        catalog = parse_token_catalog([SOL, {"symbol": "BAD"}, "junk"])
        assert list(catalog) == [SOL["address"]]

    def test_bad_chain_id_and_tags_skipped(self):
        bad_chain = {**SOL, "address": "Bad1111111111111111111111111111111111111111", "chainId": None}
        bad_tags = {**SOL, "address": "Bad2222222222222222222222222222222222222222", "tags": "community"}
        catalog = parse_token_catalog([SOL, bad_chain, bad_tags])
        assert list(catalog) == [SOL["address"]]

    def test_first_occurrence_wins(self):
        catalog = parse_token_catalog([SOL, {**SOL, "symbol": "WSOL"}])
        assert catalog[SOL["address"]].symbol == "SOL"

    def test_not_a_list(self):
        with pytest.raises(ValidationError):
            parse_token_catalog({"tokens": []})


class TestFetchTokenCatalog:
    def client(self, handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    def test_download(self):
        client = self.client(lambda r: httpx.Response(200, json=[SOL]))
        catalog = asyncio.run(fetch_token_catalog("https://tokens.test/strict", client=client))
        assert len(catalog) == 1

    def test_http_error_is_router_error(self):
        client = self.client(lambda r: httpx.Response(503))
        with pytest.raises(RouterError):
            asyncio.run(fetch_token_catalog("https://tokens.test/strict", client=client))

    def test_non_json_is_validation_error(self):
        client = self.client(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(ValidationError):
            asyncio.run(fetch_token_catalog("https://tokens.test/strict", client=client))
