"""Error taxonomy for the reword service.

WHY: Each failure class is resolved at a different boundary. Config and
signature errors end the HTTP request, transform errors become a failure
message on the callback URL, and delivery errors can only be logged. Typed
exceptions make those boundaries explicit.

HOW: A single RewordError base with one subclass per failure class.
TransformError carries the upstream status code when there is one.

RULES:
- No exception defined here may escape the request handler or the
  dispatcher; they are caught and converted where they occur
- User-visible failures always carry a human-readable message
"""

from __future__ import annotations

from typing import Optional


class RewordError(Exception):
    """Base class for all reword service errors."""


class ConfigurationError(RewordError):
    """Raised when required server configuration is missing or invalid.

    RULES:
    - Answered with HTTP 500 by the handler
    - Not retryable without fixing the deployment's environment
    """


class AuthenticationError(RewordError):
    """Raised when a request's Slack signature or timestamp is invalid."""


class ValidationError(RewordError):
    """Raised when a verified command carries no usable text.

    Not a system failure: the handler answers it with guidance, HTTP 200.
    """


class TransformError(RewordError):
    """Raised when the text transform capability fails.

    WHY: Callers need to tell model-provider failures apart from network
    errors and from bugs in the dispatcher.

    RULES:
    - status_code is the provider's HTTP status, or None for non-HTTP failures
    - str(exc) is shown to the user after "Error: ", so keep it readable
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is not None:
            super().__init__("Transform API error {}: {}".format(status_code, message))
        else:
            super().__init__(message)


class TransformTimeoutError(TransformError):
    """Raised when the transform call exceeds its time budget."""


class DeliveryError(RewordError):
    """Raised when posting to a Slack response_url fails.

    Only ever logged: the synchronous response channel is already closed.
    """
