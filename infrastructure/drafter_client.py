# ============================================================================
# SCHEMA DRAFTER HTTP CLIENT
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Infrastructure - Async HTTP client for the text generator
# PURPOSE: Turn natural-language instructions into SDL text
# CREATED: 19 OCT 2026
# ============================================================================
"""
Schema Drafter HTTP Client

Async httpx client for an external drafting endpoint. The endpoint takes
the user's instructions and the current SDL text and answers with a
complete replacement document:

    POST {base_url}
    {"instructions": "...", "current_schema": "entity A {...}" | null}

    200 {"text": "entity A {...}"}

Instances are callables matching services.schema_service.SchemaDrafter.
Every failure is raised as DrafterError; the service records it in the
chat history and answers 502.
"""

import logging
from typing import Optional

import httpx

from core.config import get_defaults

logger = logging.getLogger(__name__)


class DrafterError(Exception):
    """The drafting endpoint failed or answered something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class HttpSchemaDrafter:
    """Async HTTP client for the schema drafting endpoint."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        drafter_defaults = get_defaults().drafter
        url = base_url or drafter_defaults.url
        if not url:
            raise ValueError("Schema drafter URL is not configured (SDL_DRAFTER_URL)")
        self._url = url.rstrip("/")
        # Generation is slow; connecting should not be
        self._timeout = httpx.Timeout(
            timeout if timeout is not None else drafter_defaults.timeout_s, connect=10.0
        )

    async def __call__(self, instructions: str, current_text: Optional[str]) -> str:
        body = {"instructions": instructions, "current_schema": current_text}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json=body)
        except httpx.ConnectError as e:
            logger.error(f"Cannot reach schema drafter at {self._url}: {e}")
            raise DrafterError(f"Schema drafter unreachable: {e}") from e
        except httpx.TimeoutException as e:
            logger.error(f"Schema drafter timeout: {self._url}: {e}")
            raise DrafterError(f"Schema drafter timed out: {e}") from e

        if resp.status_code >= 400:
            logger.error(f"Schema drafter error {resp.status_code}: {resp.text[:200]}")
            raise DrafterError(
                f"Schema drafter answered {resp.status_code}", status_code=resp.status_code
            )

        try:
            text = resp.json()["text"]
        except (ValueError, KeyError, TypeError) as e:
            raise DrafterError("Schema drafter response has no text") from e
        if not isinstance(text, str):
            raise DrafterError("Schema drafter response has no text")
        return text


__all__ = ["HttpSchemaDrafter", "DrafterError"]
