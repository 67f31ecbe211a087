# src/chatmock/reply.py
"""Reply text for every completion.

A placeholder for a real model: the message history is accepted so a
generating implementation can replace this without touching callers.
"""

from collections.abc import Sequence

from chatmock.models import ChatMessage

REPLY_TEXT = "who are you? and what are you doing here? and what is your purpose?"


def generate_reply(messages: Sequence[ChatMessage]) -> str:
    """Return the reply for a conversation (always the same sentence)."""
    return REPLY_TEXT
