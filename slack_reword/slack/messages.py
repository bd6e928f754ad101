"""Response payload builders for the reword command.

WHY: The command answers in two places, the synchronous HTTP response
and the asynchronous response_url, and both expect Slack message
payloads. Centralizing the builders keeps the handler and dispatcher free
of Block Kit details.

HOW: Each function returns a plain dict ready to be serialized as JSON.
The success payload uses Block Kit blocks; acknowledgments and errors are
single-text messages.

RULES:
- Every payload has response_type "ephemeral" (only the invoker sees it)
- Reworded text and original text never share a block; a divider
  separates them and the original lives in a context block
- Block texts are cut to Slack's 3000-character limit; the top-level
  fallback text keeps the full rewording
- build_error_response() always contains the message verbatim after
  ":warning: "
- action_id values must match the handler's copy-button prefix
"""

from __future__ import annotations

from typing import Any, Dict, List

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RESPONSE_TYPE_EPHEMERAL = "ephemeral"

# Copy buttons use this prefix; the interactive endpoint matches on it
ACTION_COPY_PREFIX = "copy_"
ACTION_COPY_REWORDED = ACTION_COPY_PREFIX + "reworded"

ACKNOWLEDGMENT_TEXT = ":hourglass_flowing_sand: Rewording your message..."
SHORTCUT_ACKNOWLEDGMENT_TEXT = ":hourglass_flowing_sand: Rewording message..."
EMPTY_INPUT_MESSAGE = (
    "Please provide a message to reword. Usage: /reword <your message>"
)
NO_SHORTCUT_TEXT_MESSAGE = "Could not extract message text."

# Slack rejects button values longer than this
_BUTTON_VALUE_MAX_CHARS = 2000
# Slack rejects section and context texts longer than this
_BLOCK_TEXT_MAX_CHARS = 3000
_ORIGINAL_TEMPLATE = "_Original: {}_"
_ELLIPSIS = "..."
_ORIGINAL_MAX_CHARS = _BLOCK_TEXT_MAX_CHARS - len(_ORIGINAL_TEMPLATE.format(""))


# ---------------------------------------------------------------------------
# Synchronous responses
# ---------------------------------------------------------------------------


def build_acknowledgment() -> Dict[str, Any]:
    """The immediate "working on it" reply to an accepted command."""
    return {
        "response_type": RESPONSE_TYPE_EPHEMERAL,
        "text": ACKNOWLEDGMENT_TEXT,
    }


def build_shortcut_acknowledgment() -> Dict[str, Any]:
    """The immediate reply to an accepted message shortcut."""
    return {
        "response_type": RESPONSE_TYPE_EPHEMERAL,
        "text": SHORTCUT_ACKNOWLEDGMENT_TEXT,
    }


def build_copy_response(text: str) -> Dict[str, Any]:
    """Reply to a copy button click with the text ready to select.

    HOW: replace_original is False so the reworded message stays in place
    and the copyable text is added beneath it.
    """
    return {
        "response_type": RESPONSE_TYPE_EPHEMERAL,
        "replace_original": False,
        "text": ":clipboard: *Ready to copy:*\n\n```{}```\n\n_Select and copy the text above._".format(
            text
        ),
    }


# ---------------------------------------------------------------------------
# Deferred results
# ---------------------------------------------------------------------------


def _truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[:limit - len(_ELLIPSIS)] + _ELLIPSIS


def build_success_response(original: str, reworded: str) -> Dict[str, Any]:
    """Build the Block Kit message carrying a reworded message.

    HOW: A label section, the reworded text in its own section, a copy
    button, a divider, then the original text in a context block.
    The top-level text is the notification fallback.
    """
    blocks = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*Your reworded message:*",
            },
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": _truncate(reworded, _BLOCK_TEXT_MAX_CHARS),
            },
        },
    ]  # type: List[Dict[str, Any]]

    if len(reworded) <= _BUTTON_VALUE_MAX_CHARS:
        blocks.append({
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Copy"},
                    "action_id": ACTION_COPY_REWORDED,
                    "value": reworded,
                }
            ],
        })

    blocks.extend([
        {"type": "divider"},
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": _ORIGINAL_TEMPLATE.format(_truncate(original, _ORIGINAL_MAX_CHARS)),
                }
            ],
        },
    ])

    return {
        "response_type": RESPONSE_TYPE_EPHEMERAL,
        "text": reworded,
        "blocks": blocks,
    }


def build_error_response(message: str) -> Dict[str, Any]:
    """Build an ephemeral warning message containing ``message`` verbatim."""
    return {
        "response_type": RESPONSE_TYPE_EPHEMERAL,
        "text": ":warning: {}".format(message),
    }
