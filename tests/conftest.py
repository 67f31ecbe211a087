# tests/conftest.py
"""Shared test fixtures and helpers.

chatmock server fixture:
- chatmock_server: in-process server on a Starlette TestClient, configured
  via @pytest.mark.chatmock(...) (see tests/fixtures/chatmock.py)

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from tests.fixtures.chatmock import ChatMockFixture, chatmock_server
from tests.fixtures.chatmock import pytest_configure as _chatmock_pytest_configure

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    _chatmock_pytest_configure(config)


# Re-export for convenient import
__all__ = [
    "ChatMockFixture",
    "chatmock_server",
]
