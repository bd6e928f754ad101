"""Shared test fixtures for the slack_reword test suite.

WHY: The verifier, dispatcher, and HTTP tests all need correctly signed
Slack bodies, a transformer that never touches the network, and a poster
that records what would have been sent to Slack.

HOW: sign_body() computes real v0 signatures with TEST_SECRET.
FakeTransformer returns a canned rewording (or raises / sleeps on
request). RecordingPoster subclasses CallbackPoster and keeps every post
in memory instead of sending it.

RULES:
- No test performs real network I/O
- Signatures are computed independently of the code under test
  (hashlib/hmac directly)
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import time
from typing import Any, Dict, List, Optional, Tuple

import pytest

from slack_reword.dispatch.callback import CallbackPoster
from slack_reword.transform.base import BaseTransformer

TEST_SECRET = "test-signing-secret"
RESPONSE_URL = "https://hooks.slack.com/commands/T123/456/abc"


def make_signature(secret: str, timestamp: str, body: bytes) -> str:
    """Slack's v0 signature, computed without slack_reword code."""
    basestring = b"v0:" + timestamp.encode("utf-8") + b":" + body
    return "v0=" + hmac.new(secret.encode("utf-8"), basestring, hashlib.sha256).hexdigest()


def sign_body(
    body: str,
    secret: str = TEST_SECRET,
    timestamp: Optional[str] = None,
) -> Dict[str, str]:
    """Headers for a correctly signed form-encoded Slack request."""
    ts = timestamp or str(int(time.time()))
    return {
        "Content-Type": "application/x-www-form-urlencoded",
        "X-Slack-Request-Timestamp": ts,
        "X-Slack-Signature": make_signature(secret, ts, body.encode("utf-8")),
    }


class FakeTransformer(BaseTransformer):
    """Transformer double: canned reply, optional error, optional delay."""

    def __init__(
        self,
        reply: str = "Could you please help with this when you have a moment?",
        error: Optional[Exception] = None,
        delay_s: float = 0.0,
        echo: bool = False,
    ) -> None:
        self.reply = reply
        self.error = error
        self.delay_s = delay_s
        self.echo = echo
        self.calls: List[str] = []

    @property
    def name(self) -> str:
        return "fake"

    async def reword(self, text: str) -> str:
        self.calls.append(text)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        if self.echo:
            return "friendly: {}".format(text)
        return self.reply


class RecordingPoster(CallbackPoster):
    """CallbackPoster that records posts instead of sending them."""

    def __init__(self, succeed: bool = True) -> None:
        super().__init__()
        self.succeed = succeed
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def post(self, url: str, body: Dict[str, Any], request_id: str = "") -> bool:
        self.calls.append((url, body))
        return self.succeed


@pytest.fixture
def transformer():
    return FakeTransformer()


@pytest.fixture
def poster():
    return RecordingPoster()
