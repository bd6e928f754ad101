"""Best-effort delivery of messages to Slack response_url callbacks.

WHY: The deferred result of a command reaches the user only through the
one-time response_url in the original payload. By the time it is posted
the HTTP request is long finished, so a delivery failure has nowhere to
go except the logs.

HOW: CallbackPoster.post() sends the message as a JSON POST with a short
timeout, opening a fresh httpx.AsyncClient per call. Failures are raised
internally as DeliveryError and logged at the boundary.

RULES:
- post() never raises; it returns True on a 2xx response, False otherwise
- No retries: response_url is short-lived and delivery is best-effort
- An empty URL is a delivery failure, not an exception
- URLs are truncated to 50 characters in logs
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from slack_reword.config import CALLBACK_TIMEOUT_S
from slack_reword.errors import DeliveryError

logger = logging.getLogger(__name__)

_LOG_URL_MAX_CHARS = 50
_LOG_BODY_MAX_CHARS = 200


class CallbackPoster:
    """Posts JSON messages to Slack response_url callbacks.

    RULES:
    - transport is for tests (httpx.MockTransport); production leaves it None
    - Each post() is independent; nothing is shared between requests
    """

    def __init__(
        self,
        timeout_s: float = CALLBACK_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._transport = transport

    async def post(self, url: str, body: Dict[str, Any], request_id: str = "") -> bool:
        """POST ``body`` as JSON to ``url``, logging any failure.

        Returns:
            True if Slack accepted the message (2xx), else False.
        """
        logger.info("[%s] posting url=%s", request_id, url[:_LOG_URL_MAX_CHARS])
        try:
            status = await self._send(url, body)
        except DeliveryError as exc:
            logger.error("[%s] post_error %s", request_id, exc)
            return False
        except Exception:
            logger.exception("[%s] post_error unexpected failure", request_id)
            return False
        logger.info("[%s] posted status=%d", request_id, status)
        return True

    async def _send(self, url: str, body: Dict[str, Any]) -> int:
        if not url:
            raise DeliveryError("No response_url to deliver to")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, json=body)
        except httpx.HTTPError as exc:
            raise DeliveryError("POST to response_url failed: {}".format(exc)) from exc

        if not resp.is_success:
            raise DeliveryError(
                "response_url answered {}: {}".format(
                    resp.status_code, resp.text[:_LOG_BODY_MAX_CHARS]
                )
            )
        return resp.status_code
