"""Tests for Slack request signature verification.

WHY: Verification is the only thing standing between the public webhook
URL and the model API. A false positive lets anyone trigger work; a
false negative breaks the command for everyone.

HOW: Signatures are computed independently in conftest.make_signature
and checked against verify_slack_request(), with ``now`` pinned where
the replay window matters.

RULES:
- Every mutation of signature, body, or timestamp must be rejected
- Malformed input returns False, never raises
"""

from __future__ import annotations

import time

import pytest
from slack_sdk.signature import SignatureVerifier as SlackSignatureVerifier

from slack_reword.slack.verification import (
    SignatureVerifier,
    SignedRequest,
    compute_slack_signature,
    verify_slack_request,
)
from tests.conftest import TEST_SECRET, make_signature

BODY = b"text=test&user_id=U123"
NOW = 1_700_000_000


def _flip_bit(data: bytes, index: int, bit: int) -> bytes:
    mutated = bytearray(data)
    mutated[index] ^= 1 << bit
    return bytes(mutated)


# ---------------------------------------------------------------------------
# compute_slack_signature
# ---------------------------------------------------------------------------


class TestComputeSignature:
    def test_matches_independent_hmac(self):
        ts = str(NOW)
        assert compute_slack_signature(TEST_SECRET, ts, BODY) == make_signature(TEST_SECRET, ts, BODY)

    def test_accepts_str_body(self):
        ts = str(NOW)
        assert compute_slack_signature(TEST_SECRET, ts, BODY.decode()) == make_signature(TEST_SECRET, ts, BODY)

    def test_has_v0_prefix_and_hex_digest(self):
        sig = compute_slack_signature(TEST_SECRET, str(NOW), BODY)
        assert sig.startswith("v0=")
        assert len(sig) == 3 + 64
        int(sig[3:], 16)


# ---------------------------------------------------------------------------
# verify_slack_request
# ---------------------------------------------------------------------------


class TestVerifySlackRequest:
    def test_accepts_valid_signature(self):
        ts = str(int(time.time()))
        sig = make_signature(TEST_SECRET, ts, BODY)
        assert verify_slack_request(TEST_SECRET, sig, ts, BODY) is True

    def test_accepts_str_body(self):
        ts = str(NOW)
        sig = make_signature(TEST_SECRET, ts, BODY)
        assert verify_slack_request(TEST_SECRET, sig, ts, BODY.decode(), now=NOW) is True

    def test_accepts_empty_body(self):
        ts = str(NOW)
        sig = make_signature(TEST_SECRET, ts, b"")
        assert verify_slack_request(TEST_SECRET, sig, ts, b"", now=NOW) is True

    def test_rejects_invalid_signature(self):
        assert verify_slack_request(TEST_SECRET, "v0=invalid", str(NOW), BODY, now=NOW) is False

    def test_rejects_missing_signature(self):
        assert verify_slack_request(TEST_SECRET, None, str(NOW), BODY, now=NOW) is False
        assert verify_slack_request(TEST_SECRET, "", str(NOW), BODY, now=NOW) is False

    def test_rejects_missing_timestamp(self):
        sig = make_signature(TEST_SECRET, str(NOW), BODY)
        assert verify_slack_request(TEST_SECRET, sig, None, BODY, now=NOW) is False
        assert verify_slack_request(TEST_SECRET, sig, "", BODY, now=NOW) is False

    def test_rejects_non_integer_timestamp(self):
        sig = make_signature(TEST_SECRET, "abc", BODY)
        assert verify_slack_request(TEST_SECRET, sig, "abc", BODY, now=NOW) is False

    def test_rejects_wrong_secret(self):
        ts = str(NOW)
        sig = make_signature("another-secret", ts, BODY)
        assert verify_slack_request(TEST_SECRET, sig, ts, BODY, now=NOW) is False

    def test_rejects_wrong_version_prefix(self):
        ts = str(NOW)
        sig = "v1=" + make_signature(TEST_SECRET, ts, BODY)[3:]
        assert verify_slack_request(TEST_SECRET, sig, ts, BODY, now=NOW) is False

    def test_rejects_tampered_body(self):
        ts = str(NOW)
        sig = make_signature(TEST_SECRET, ts, b"text=test&user_id=U123")
        assert verify_slack_request(TEST_SECRET, sig, ts, b"text=hacked&user_id=U123", now=NOW) is False

    def test_rejects_truncated_and_extended_signatures(self):
        ts = str(NOW)
        sig = make_signature(TEST_SECRET, ts, BODY)
        assert verify_slack_request(TEST_SECRET, sig[:-1], ts, BODY, now=NOW) is False
        assert verify_slack_request(TEST_SECRET, sig + "0", ts, BODY, now=NOW) is False

    def test_non_ascii_signature_returns_false(self):
        ts = str(NOW)
        sig = make_signature(TEST_SECRET, ts, BODY)
        weird = sig[:-1] + "é"
        assert verify_slack_request(TEST_SECRET, weird, ts, BODY, now=NOW) is False

    def test_non_string_header_returns_false(self):
        assert verify_slack_request(TEST_SECRET, 12345, str(NOW), BODY, now=NOW) is False


class TestReplayWindow:
    @pytest.mark.parametrize("offset", [0, 1, 200, 299, 300, -200, -300])
    def test_accepts_within_five_minutes(self, offset):
        ts = str(NOW + offset)
        sig = make_signature(TEST_SECRET, ts, BODY)
        assert verify_slack_request(TEST_SECRET, sig, ts, BODY, now=NOW) is True

    @pytest.mark.parametrize("offset", [301, 400, 600, 86400, -301, -600, -86400])
    def test_rejects_outside_five_minutes(self, offset):
        ts = str(NOW + offset)
        sig = make_signature(TEST_SECRET, ts, BODY)
        assert verify_slack_request(TEST_SECRET, sig, ts, BODY, now=NOW) is False

    def test_uses_wall_clock_by_default(self):
        old = str(int(time.time()) - 600)
        sig = make_signature(TEST_SECRET, old, BODY)
        assert verify_slack_request(TEST_SECRET, sig, old, BODY) is False


class TestSingleBitMutations:
    """Flipping any single bit of the signed material must fail verification."""

    def test_every_signature_bit(self):
        ts = str(NOW)
        sig = make_signature(TEST_SECRET, ts, BODY).encode("ascii")
        for index in range(len(sig)):
            for bit in range(7):
                mutated = _flip_bit(sig, index, bit).decode("ascii")
                assert verify_slack_request(TEST_SECRET, mutated, ts, BODY, now=NOW) is False

    def test_every_body_bit(self):
        ts = str(NOW)
        sig = make_signature(TEST_SECRET, ts, BODY)
        for index in range(len(BODY)):
            for bit in range(8):
                mutated = _flip_bit(BODY, index, bit)
                assert verify_slack_request(TEST_SECRET, sig, ts, mutated, now=NOW) is False

    def test_every_timestamp_bit(self):
        ts = str(NOW)
        sig = make_signature(TEST_SECRET, ts, BODY)
        raw = ts.encode("ascii")
        for index in range(len(raw)):
            for bit in range(7):
                mutated = _flip_bit(raw, index, bit).decode("ascii")
                assert verify_slack_request(TEST_SECRET, sig, mutated, BODY, now=NOW) is False


# ---------------------------------------------------------------------------
# SignatureVerifier
# ---------------------------------------------------------------------------


class TestSignatureVerifier:
    def test_verifies_with_injected_secret(self):
        ts = str(NOW)
        request = SignedRequest(raw_body=BODY, signature=make_signature("s3cret", ts, BODY), timestamp=ts)
        assert SignatureVerifier("s3cret").verify(request, now=NOW) is True
        assert SignatureVerifier(TEST_SECRET).verify(request, now=NOW) is False

    def test_pinned_clock_controls_replay_window(self):
        ts = str(NOW - 100)
        request = SignedRequest(raw_body=BODY, signature=make_signature(TEST_SECRET, ts, BODY), timestamp=ts)
        assert SignatureVerifier(TEST_SECRET).verify(request, now=NOW) is True
        assert SignatureVerifier(TEST_SECRET).verify(request, now=NOW + 201) is False

    def test_missing_headers(self):
        request = SignedRequest(raw_body=BODY, signature=None, timestamp=None)
        assert SignatureVerifier(TEST_SECRET).verify(request, now=NOW) is False

    def test_undecodable_body_returns_false(self):
        body = b"text=\xff\xfe"
        ts = str(NOW)
        request = SignedRequest(raw_body=body, signature=make_signature(TEST_SECRET, ts, body), timestamp=ts)
        assert SignatureVerifier(TEST_SECRET).verify(request, now=NOW) is False


class TestSlackSdkAgreement:
    def test_slack_sdk_accepts_our_signature(self):
        ts = str(NOW)
        sdk = SlackSignatureVerifier(signing_secret=TEST_SECRET)
        assert sdk.generate_signature(timestamp=ts, body=BODY) == compute_slack_signature(TEST_SECRET, ts, BODY)
