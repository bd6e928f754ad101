"""Slack protocol layer: signature verification, payload parsing, messages.

WHY: Everything that knows Slack's wire formats lives here, so the
dispatcher and server deal in typed payloads and ready-made message dicts.

RULES:
- No module in this package performs I/O
- Verification is pure apart from reading the wall clock
"""

from slack_reword.slack.payloads import (
    InteractionKind,
    InteractionPayload,
    SlashCommandPayload,
    parse_interaction,
    parse_slash_command,
)
from slack_reword.slack.verification import (
    SignatureVerifier,
    SignedRequest,
    verify_slack_request,
)

__all__ = [
    "InteractionKind",
    "InteractionPayload",
    "SignatureVerifier",
    "SignedRequest",
    "SlashCommandPayload",
    "parse_interaction",
    "parse_slash_command",
    "verify_slack_request",
]
