"""Slack request signature verification (HMAC-SHA256, v0 scheme).

WHY: The webhook URL is public. Only requests signed with the app's
signing secret may trigger work, and a captured request must not be
replayable later. Slack signs every request with HMAC-SHA256 over
"v0:{timestamp}:{body}" and sends the result in X-Slack-Signature.

HOW: slack_sdk.signature.SignatureVerifier does the signing, the
five-minute replay check, and the constant-time comparison. This module
binds an injected secret to it, pins its clock when a caller supplies
``now``, and turns every failure into a plain False.

RULES:
- Missing signature or timestamp → False
- Non-integer timestamp → False
- |now - timestamp| > 300 seconds → False (both directions)
- Any exception while verifying → False, never raised
- The raw request body bytes are what Slack signed; never re-encode a
  parsed form
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from slack_sdk.signature import Clock
from slack_sdk.signature import SignatureVerifier as SlackSignatureVerifier

logger = logging.getLogger(__name__)

Body = Union[bytes, str]


@dataclass(frozen=True)
class SignedRequest:
    """The three request parts the signature covers.

    Constructed once per inbound request and consumed only by the verifier.
    Headers are None when absent.
    """

    raw_body: bytes
    signature: Optional[str]
    timestamp: Optional[str]


class _FixedClock(Clock):
    """A slack_sdk clock that always reports the same instant."""

    def __init__(self, now: float) -> None:
        self._now = now

    def now(self) -> float:
        return self._now


def _slack_verifier(secret: str, now: Optional[float] = None) -> SlackSignatureVerifier:
    clock = Clock() if now is None else _FixedClock(now)
    return SlackSignatureVerifier(signing_secret=secret, clock=clock)


def compute_slack_signature(secret: str, timestamp: str, body: Body) -> str:
    """Compute the expected X-Slack-Signature value for a request."""
    signature = _slack_verifier(secret).generate_signature(timestamp=timestamp, body=body)
    return signature or ""


def verify_slack_request(
    secret: str,
    signature: Optional[str],
    timestamp: Optional[str],
    body: Body,
    now: Optional[float] = None,
) -> bool:
    """Return True if the request was signed by Slack with ``secret``.

    Args:
        secret: The Slack app's signing secret.
        signature: Value of the X-Slack-Signature header, or None.
        timestamp: Value of the X-Slack-Request-Timestamp header, or None.
        body: The raw request body exactly as received.
        now: Current epoch seconds; defaults to the wall clock.

    Returns:
        True only for a fresh, correctly signed request.
    """
    if not signature or not timestamp:
        return False
    try:
        return _slack_verifier(secret, now).is_valid(
            body=body,
            timestamp=timestamp,
            signature=signature,
        )
    except Exception:
        # Non-integer timestamps, undecodable bodies and non-ASCII headers
        logger.debug("Signature verification raised; treating as invalid", exc_info=True)
        return False


class SignatureVerifier:
    """Verifies SignedRequests against one injected signing secret.

    WHY: The secret is process configuration. Binding it at construction
    keeps the verify call pure and lets tests use arbitrary secrets
    without mutating the environment.

    RULES:
    - The secret is read-only after construction
    - verify() never raises
    """

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def verify(self, request: SignedRequest, now: Optional[float] = None) -> bool:
        return verify_slack_request(
            self._secret,
            request.signature,
            request.timestamp,
            request.raw_body,
            now=now,
        )
