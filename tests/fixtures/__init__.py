# tests/fixtures/__init__.py
"""Shared pytest fixtures for chatmock tests.

Available fixtures:
- chatmock_server: chatmock fake chat server for testing
"""

from tests.fixtures.chatmock import ChatMockFixture, chatmock_server

__all__ = [
    "ChatMockFixture",
    "chatmock_server",
]
