"""Async HTTP client for rewording text with the Anthropic Messages API.

WHY: The reword command's one slow step is the language model call. This
module wraps it behind the BaseTransformer interface so the dispatcher
sees a single ``await reword(text)``.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. The client can be used
as an async context manager (one connection pool for many calls), or
called directly, in which case each reword() opens and closes its own
pool. The model is chosen per message by prompts.select_model().

RULES:
- The API key is resolved lazily; a missing key raises ConfigurationError
  from reword(), not at server start-up
- Non-2xx responses raise TransformError with the status code
- A response with no text content raises TransformError
- Network failures raise TransformError wrapping the httpx error
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from slack_reword.config import (
    ANTHROPIC_BASE_URL,
    ANTHROPIC_VERSION,
    REWORD_MAX_TOKENS,
    load_api_key,
)
from slack_reword.errors import TransformError
from slack_reword.transform.base import BaseTransformer
from slack_reword.transform.prompts import (
    REWORD_SYSTEM_PROMPT,
    create_reword_user_prompt,
    select_model,
)

logger = logging.getLogger(__name__)

_HTTP_TIMEOUT = httpx.Timeout(60.0, connect=10.0)
# Upstream error bodies can be long; keep log lines and user messages short
_ERROR_BODY_MAX_CHARS = 200


class AnthropicRewordClient(BaseTransformer):
    """Rewords messages through the Anthropic Messages API.

    RULES:
    - Use as: async with AnthropicRewordClient() as client: ...
      or call reword() directly for a one-shot request
    - api_key defaults to load_api_key() at first use
    - base_url defaults to ANTHROPIC_BASE_URL from config
    - model, when given, overrides length-based model selection
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = REWORD_MAX_TOKENS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = (base_url or ANTHROPIC_BASE_URL).rstrip("/")
        self._model = model
        self._max_tokens = max_tokens
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "anthropic"

    async def __aenter__(self) -> AnthropicRewordClient:
        self._client = self._open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _open(self) -> httpx.AsyncClient:
        api_key = self._api_key or load_api_key()
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "x-api-key": api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
            timeout=_HTTP_TIMEOUT,
            transport=self._transport,
        )

    async def reword(self, text: str) -> str:
        """Reword ``text`` and return the model's reply.

        Raises:
            TransformError: the API failed, was unreachable, or returned
                no text.
            ConfigurationError: no API key is configured.
        """
        if self._client is not None:
            return await self._reword(self._client, text)
        async with self._open() as client:
            return await self._reword(client, text)

    async def _reword(self, client: httpx.AsyncClient, text: str) -> str:
        model = self._model or select_model(len(text))
        body = {
            "model": model,
            "max_tokens": self._max_tokens,
            "system": REWORD_SYSTEM_PROMPT,
            "messages": [
                {"role": "user", "content": create_reword_user_prompt(text)},
            ],
        }

        logger.info("ai_call model=%s msg_len=%d", model, len(text))
        t0 = time.monotonic()
        try:
            resp = await client.post("/messages", json=body)
        except httpx.HTTPError as exc:
            raise TransformError("Could not reach the model API: {}".format(exc)) from exc

        if resp.status_code != 200:
            raise TransformError(resp.text[:_ERROR_BODY_MAX_CHARS], status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise TransformError("Model API returned invalid JSON") from exc

        reworded = _extract_text(data)
        logger.info("ai_done model=%s ms=%d", model, int((time.monotonic() - t0) * 1000))
        return reworded


def _extract_text(data: Any) -> str:
    """Join the text blocks of a Messages API response.

    RULES:
    - Non-text content blocks are skipped
    - Raises TransformError if the joined text is empty
    """
    if not isinstance(data, dict):
        raise TransformError("Model API returned an unexpected response")
    parts = [
        block.get("text", "")
        for block in data.get("content") or []
        if isinstance(block, dict) and block.get("type") == "text"
    ]
    text = "".join(parts).strip()
    if not text:
        raise TransformError(
            "Model returned no text (stop_reason: {})".format(data.get("stop_reason", "unknown"))
        )
    return text
