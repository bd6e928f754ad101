"""Slack Reword: a /reword slash command that softens blunt messages.

WHY: Slack gives a slash command three seconds to answer, but a language
model rewording a message can take much longer. This package verifies the
signed webhook, acknowledges it immediately, and delivers the reworded
message later through the one-time response_url Slack supplies.

HOW: Four layers: slack (verify, parse, format), transform (the model
call), dispatch (deferred execution and callback delivery), and server
(the FastAPI composition root). Each layer is independently testable.

RULES:
- Only the server layer knows about HTTP requests and responses
- The dispatcher never raises; every accepted command gets exactly one
  terminal message on its response_url
- The signing secret is injected, never read ad hoc from the environment
"""

__version__ = "0.1.0"
