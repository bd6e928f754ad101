"""Abstract text transform capability.

WHY: The dispatcher only needs "turn this text into friendlier text". It
must not care which model provider does the work, and tests must be able
to substitute a fake without network access.

HOW: BaseTransformer is an ABC with two requirements: a ``name``
property and an async ``reword()`` method.

RULES:
- reword() returns the transformed text, stripped of surrounding whitespace
- reword() signals failure by raising; the dispatcher converts any
  exception into a failure message for the user
- Implementations must be safe to call concurrently for different texts
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseTransformer(ABC):
    """Abstract base for text transform implementations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable transformer name, used in logs."""

    @abstractmethod
    async def reword(self, text: str) -> str:
        """Return a friendlier rewording of ``text``.

        Args:
            text: The user's original message, already stripped.

        Returns:
            The reworded message.
        """
