"""Configuration constants, model defaults, and .env loading.

WHY: Centralizes every tunable value in one place so deployments can
override them without touching logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read from the environment with defaults. Secrets
are read through loader functions so callers decide how to fail.

RULES:
- Secrets are never hardcoded and never logged
- load_signing_secret() returns "" when unset; the handler answers 500
- load_api_key() raises ConfigurationError when unset
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from slack_reword.errors import ConfigurationError

# Load .env from the project root (where the server is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Slack request verification
# ---------------------------------------------------------------------------

SIGNATURE_HEADER = "x-slack-signature"
TIMESTAMP_HEADER = "x-slack-request-timestamp"

# ---------------------------------------------------------------------------
# Text transform (Anthropic Messages API)
# ---------------------------------------------------------------------------

ANTHROPIC_BASE_URL = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1")
ANTHROPIC_VERSION = "2023-06-01"

REWORD_FAST_MODEL = os.getenv("REWORD_FAST_MODEL", "claude-sonnet-4-20250514")
REWORD_QUALITY_MODEL = os.getenv("REWORD_QUALITY_MODEL", "claude-opus-4-20250514")
SHORT_MESSAGE_THRESHOLD = int(os.getenv("REWORD_SHORT_MESSAGE_THRESHOLD", "50"))
REWORD_MAX_TOKENS = int(os.getenv("REWORD_MAX_TOKENS", "500"))

# ---------------------------------------------------------------------------
# Deferred dispatch
# ---------------------------------------------------------------------------

TRANSFORM_TIMEOUT_S = float(os.getenv("REWORD_TRANSFORM_TIMEOUT_S", "25"))
CALLBACK_TIMEOUT_S = float(os.getenv("REWORD_CALLBACK_TIMEOUT_S", "10"))
EXECUTION_HOST = os.getenv("REWORD_EXECUTION_HOST", "auto")

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

DEFAULT_HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "3000"))


def load_signing_secret() -> str:
    """Load the Slack signing secret from the environment.

    WHY: The secret authenticates every inbound webhook. A missing secret
    is a deployment error that must surface as HTTP 500 on each request,
    not crash the process at import time.

    RULES:
    - Returns "" if SLACK_SIGNING_SECRET is missing or blank
    - Surrounding whitespace is stripped
    """
    return os.getenv("SLACK_SIGNING_SECRET", "").strip()


def load_api_key() -> str:
    """Load the Anthropic API key from the environment.

    RULES:
    - Raises ConfigurationError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("ANTHROPIC_API_KEY", "").strip()
    if not key:
        raise ConfigurationError(
            "Anthropic API key not configured. "
            "Add ANTHROPIC_API_KEY to the environment or the .env file."
        )
    return key
