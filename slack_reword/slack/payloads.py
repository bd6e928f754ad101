"""Parsers for Slack slash-command and interactivity payloads.

WHY: Slack posts slash commands as url-encoded forms and interactivity
events (shortcuts, button clicks) as a url-encoded ``payload`` field that
holds JSON. The handler needs typed, read-only views of both so it never
pokes at raw dicts.

HOW: parse_slash_command() reads a fixed set of form keys into a frozen
dataclass. parse_interaction() decodes the JSON payload once into a
closed tagged variant keyed by InteractionKind.

RULES:
- parse_slash_command() never raises; missing keys default to ""
- Unknown form fields are ignored
- Unknown interaction types map to InteractionKind.UNKNOWN
- parse_interaction() returns None when there is no usable payload
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qs

logger = logging.getLogger(__name__)

Body = Union[bytes, str]


# ---------------------------------------------------------------------------
# Slash commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SlashCommandPayload:
    """Fields Slack sends with every slash command invocation.

    RULES:
    - text and response_url drive the command; the rest is for logging
    - Every field is a str, "" when Slack omitted it
    """

    token: str = ""
    team_id: str = ""
    team_domain: str = ""
    channel_id: str = ""
    channel_name: str = ""
    user_id: str = ""
    user_name: str = ""
    command: str = ""
    text: str = ""
    response_url: str = ""
    trigger_id: str = ""

    @property
    def callback_url(self) -> str:
        """The one-time URL the deferred result is posted to."""
        return self.response_url


_SLASH_COMMAND_FIELDS = (
    "token",
    "team_id",
    "team_domain",
    "channel_id",
    "channel_name",
    "user_id",
    "user_name",
    "command",
    "text",
    "response_url",
    "trigger_id",
)


def _decode_form(body: Body) -> Dict[str, List[str]]:
    """Decode an application/x-www-form-urlencoded body, never raising."""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    try:
        return parse_qs(body, keep_blank_values=True)
    except ValueError:
        logger.warning("Could not decode form body (%d chars)", len(body))
        return {}


def parse_slash_command(body: Body) -> SlashCommandPayload:
    """Parse a slash command form body into a SlashCommandPayload.

    Whether the payload is usable (e.g. non-empty text) is for the caller
    to judge.
    """
    form = _decode_form(body)
    values = {}
    for name in _SLASH_COMMAND_FIELDS:
        found = form.get(name)
        values[name] = found[0] if found else ""
    return SlashCommandPayload(**values)


# ---------------------------------------------------------------------------
# Interactivity (shortcuts and button clicks)
# ---------------------------------------------------------------------------


class InteractionKind(str, enum.Enum):
    """The interaction payload types this app understands.

    UNKNOWN is the explicit default for every other Slack type.
    """

    MESSAGE_ACTION = "message_action"
    SHORTCUT = "shortcut"
    BLOCK_ACTIONS = "block_actions"
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, raw_type: str) -> "InteractionKind":
        for kind in cls:
            if kind is not cls.UNKNOWN and kind.value == raw_type:
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class BlockAction:
    """One element of a block_actions payload's ``actions`` list."""

    action_id: str
    value: str


@dataclass(frozen=True)
class InteractionPayload:
    """A parsed interactivity payload.

    RULES:
    - text is the shortcut's message text ("" for other kinds)
    - actions is empty for every kind except BLOCK_ACTIONS
    """

    kind: InteractionKind
    raw_type: str = ""
    callback_id: str = ""
    text: str = ""
    response_url: str = ""
    user_id: str = ""
    actions: Tuple[BlockAction, ...] = field(default_factory=tuple)

    @property
    def first_action(self) -> Optional[BlockAction]:
        return self.actions[0] if self.actions else None


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _parse_actions(raw_actions: Any) -> Tuple[BlockAction, ...]:
    if not isinstance(raw_actions, list):
        return ()
    actions = []
    for raw in raw_actions:
        if not isinstance(raw, dict):
            continue
        actions.append(BlockAction(
            action_id=_as_str(raw.get("action_id")),
            value=_as_str(raw.get("value")),
        ))
    return tuple(actions)


def parse_interaction(body: Body) -> Optional[InteractionPayload]:
    """Parse the ``payload`` field of an interactivity request.

    Returns:
        An InteractionPayload, or None when the field is missing or does
        not hold a JSON object.
    """
    form = _decode_form(body)
    raw = form.get("payload")
    if not raw or not raw[0]:
        return None

    try:
        data = json.loads(raw[0])
    except ValueError:
        logger.warning("Interaction payload is not valid JSON")
        return None
    if not isinstance(data, dict):
        return None

    raw_type = _as_str(data.get("type"))
    kind = InteractionKind.from_type(raw_type)

    text = ""
    actions = ()  # type: Tuple[BlockAction, ...]
    if kind in (InteractionKind.MESSAGE_ACTION, InteractionKind.SHORTCUT):
        message = data.get("message")
        if isinstance(message, dict):
            text = _as_str(message.get("text"))
        text = text or _as_str(data.get("text"))
    elif kind is InteractionKind.BLOCK_ACTIONS:
        actions = _parse_actions(data.get("actions"))

    user = data.get("user")
    user_id = _as_str(user.get("id")) if isinstance(user, dict) else ""

    return InteractionPayload(
        kind=kind,
        raw_type=raw_type,
        callback_id=_as_str(data.get("callback_id")),
        text=text,
        response_url=_as_str(data.get("response_url")),
        user_id=user_id,
        actions=actions,
    )
