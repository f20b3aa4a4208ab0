# ============================================================================
# SCHEMA DRAFTER CLIENT TESTS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Tests - HTTP client for the drafting endpoint
# PURPOSE: Verify request shape and error mapping of HttpSchemaDrafter
# CREATED: 19 OCT 2026
# ============================================================================
"""
HttpSchemaDrafter Tests

Uses unittest.mock to patch httpx.AsyncClient; no real HTTP traffic.

Run with:
    pytest tests/test_drafter_client.py -v
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from core.config import reset_defaults
from infrastructure.drafter_client import DrafterError, HttpSchemaDrafter


def _mock_response(status_code=200, json_data=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = json_data
    resp.text = text
    return resp


def _mock_client(mock_client_cls, response=None, error=None):
    mock_client = MagicMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client.post = AsyncMock(return_value=response, side_effect=error)
    mock_client_cls.return_value = mock_client
    return mock_client


class TestHttpSchemaDrafter:
    """HttpSchemaDrafter.__call__()."""

    @patch("infrastructure.drafter_client.httpx.AsyncClient")
    def test_happy_path(self, mock_client_cls):
        mock_client = _mock_client(
            mock_client_cls, _mock_response(200, {"text": "entity A {\n  id: ID\n}\n"})
        )

        drafter = HttpSchemaDrafter(base_url="http://drafter:9000/draft/")
        text = asyncio.run(drafter("add A", "entity B {\n}\n"))

        assert text == "entity A {\n  id: ID\n}\n"
        mock_client.post.assert_awaited_once()
        call_args = mock_client.post.call_args
        assert call_args[0][0] == "http://drafter:9000/draft"
        assert call_args[1]["json"] == {
            "instructions": "add A",
            "current_schema": "entity B {\n}\n",
        }

    @patch("infrastructure.drafter_client.httpx.AsyncClient")
    def test_connection_error(self, mock_client_cls):
        _mock_client(mock_client_cls, error=httpx.ConnectError("Connection refused"))

        drafter = HttpSchemaDrafter(base_url="http://drafter:9000")
        with pytest.raises(DrafterError, match="unreachable"):
            asyncio.run(drafter("add A", None))

    @patch("infrastructure.drafter_client.httpx.AsyncClient")
    def test_timeout(self, mock_client_cls):
        _mock_client(mock_client_cls, error=httpx.ReadTimeout("Read timed out"))

        drafter = HttpSchemaDrafter(base_url="http://drafter:9000")
        with pytest.raises(DrafterError, match="timed out"):
            asyncio.run(drafter("add A", None))

    @patch("infrastructure.drafter_client.httpx.AsyncClient")
    def test_error_status(self, mock_client_cls):
        _mock_client(mock_client_cls, _mock_response(500, {"detail": "boom"}, text="boom"))

        drafter = HttpSchemaDrafter(base_url="http://drafter:9000")
        with pytest.raises(DrafterError) as exc_info:
            asyncio.run(drafter("add A", None))

        assert exc_info.value.status_code == 500

    @pytest.mark.parametrize("json_data", [
        {"schema": "entity A {}"},
        {"text": 42},
        ValueError("not json"),
    ])
    @patch("infrastructure.drafter_client.httpx.AsyncClient")
    def test_response_without_text(self, mock_client_cls, json_data):
        _mock_client(mock_client_cls, _mock_response(200, json_data))

        drafter = HttpSchemaDrafter(base_url="http://drafter:9000")
        with pytest.raises(DrafterError, match="no text"):
            asyncio.run(drafter("add A", None))


class TestConfiguration:
    """URL and timeout resolution."""

    def test_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("SDL_DRAFTER_URL", "http://env-drafter/")
        monkeypatch.setenv("SDL_DRAFTER_TIMEOUT_S", "5")
        reset_defaults()

        drafter = HttpSchemaDrafter()

        assert drafter._url == "http://env-drafter"
        assert drafter._timeout.read == 5.0

    def test_missing_url(self, monkeypatch):
        monkeypatch.delenv("SDL_DRAFTER_URL", raising=False)
        reset_defaults()

        with pytest.raises(ValueError, match="SDL_DRAFTER_URL"):
            HttpSchemaDrafter()
