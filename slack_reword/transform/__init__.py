"""Text transform package: the slow, external step of the reword command.

WHY: Rewording is delegated to a language model behind an abstract
interface, so the dispatcher can be tested with fakes and the provider
can change without touching the protocol code.

RULES:
- All model HTTP calls go through AnthropicRewordClient
- Everything the dispatcher needs is BaseTransformer.reword()
"""

from slack_reword.transform.base import BaseTransformer
from slack_reword.transform.client import AnthropicRewordClient

__all__ = ["AnthropicRewordClient", "BaseTransformer"]
