"""Prompt text and model selection for the reword transform."""

from __future__ import annotations

from slack_reword.config import (
    REWORD_FAST_MODEL,
    REWORD_QUALITY_MODEL,
    SHORT_MESSAGE_THRESHOLD,
)

REWORD_SYSTEM_PROMPT = """You are an expert workplace communication coach. Your job is to transform blunt, direct, or potentially harsh messages into warm, professional, and effective communication that maintains positive relationships.

Guidelines:
- Keep the core message and urgency level intact
- Sound natural and human, not robotic or overly formal
- Match the appropriate level of formality for workplace Slack
- Be concise - don't over-explain or add fluff
- Use a warm but professional tone

Techniques to apply:
- Replace demands with requests ("I need" -> "Would you be able to")
- Add brief context or appreciation where natural
- Use softening phrases ("I was wondering if", "When you have a moment")
- Frame problems as collaborative ("we" language)
- For urgent items, convey importance without being aggressive
- Leave @mentions, links, and code exactly as written

Output ONLY the reworded message, nothing else."""


def create_reword_user_prompt(message: str) -> str:
    """Wrap the user's message in the reword instruction."""
    return (
        "Reword this message to be friendlier while keeping the same "
        'meaning and urgency:\n\n"{}"'.format(message)
    )


def select_model(message_length: int) -> str:
    """Pick the model for a message of ``message_length`` characters.

    Short messages go to the faster model; longer ones, which have more
    tone to get right, go to the stronger model.
    """
    if message_length < SHORT_MESSAGE_THRESHOLD:
        return REWORD_FAST_MODEL
    return REWORD_QUALITY_MODEL
