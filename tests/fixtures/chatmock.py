# tests/fixtures/chatmock.py
"""Pytest fixture for chatmock fake chat server testing.

This module provides the `chatmock_server` fixture which creates an in-process
chatmock server using Starlette's TestClient. Sleeping is replaced by a fake
that records the requested durations, so paced streams and injected delays
cost nothing in wall-clock time.

Usage:
    # Basic usage with defaults
    def test_client(chatmock_server):
        response = chatmock_server.post_completion()
        assert response.status_code == 200

    # Override specific settings via marker
    @pytest.mark.chatmock(failure_pct=100.0)
    def test_always_fails(chatmock_server):
        response = chatmock_server.post_completion(route=RAND_FAIL_PATH)
        assert response.status_code == 500

    # Script the random source for exact fault decisions
    @pytest.mark.chatmock(random_values=[0.9])
    def test_lucky_request(chatmock_server):
        ...
"""

from __future__ import annotations

import json
import random
from collections.abc import Generator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pytest
from starlette.testclient import TestClient

from chatmock.config import ChatMockConfig, load_config
from chatmock.server import COMPLETIONS_PATH, ChatMockServer

if TYPE_CHECKING:
    import httpx

RAND_SLEEP_PATH = f"/rand_sleep{COMPLETIONS_PATH}"
RAND_FAIL_PATH = f"/rand_fail{COMPLETIONS_PATH}"
RAND_ALL_PATH = f"/rand_all{COMPLETIONS_PATH}"
ALL_COMPLETION_PATHS = (COMPLETIONS_PATH, RAND_SLEEP_PATH, RAND_FAIL_PATH, RAND_ALL_PATH)

FIXED_NOW = 1_700_000_000.0


class ScriptedRandom(random.Random):
    """A Random instance that replays scripted values before falling back to a seeded stream.

    random() returns the scripted floats in order, randrange() the scripted
    integers. Once a script is exhausted the seeded generator takes over.
    """

    def __init__(
        self,
        random_values: Sequence[float] = (),
        randrange_values: Sequence[int] = (),
        seed: int = 0,
    ) -> None:
        super().__init__(seed)
        self._random_values = list(random_values)
        self._randrange_values = list(randrange_values)

    def random(self) -> float:
        if self._random_values:
            return self._random_values.pop(0)
        return super().random()

    def randrange(self, *args: Any, **kwargs: Any) -> int:
        if self._randrange_values:
            return self._randrange_values.pop(0)
        return super().randrange(*args, **kwargs)


def parse_frames(body: str) -> list[str]:
    """Split an event-stream body into frame payloads (without the "data: " prefix)."""
    frames = []
    for block in body.split("\n\n"):
        if not block:
            continue
        assert block.startswith("data: "), f"unexpected frame: {block!r}"
        frames.append(block.removeprefix("data: "))
    return frames


def decode_chunks(frames: Sequence[str]) -> list[dict[str, Any]]:
    """JSON-decode every frame except the [DONE] sentinel."""
    return [json.loads(frame) for frame in frames if frame != "[DONE]"]


@dataclass
class ChatMockFixture:
    """Pytest fixture object for the chatmock server.

    Attributes:
        client: Starlette TestClient for making HTTP requests
        server: ChatMockServer instance under test
        sleeps: Durations (seconds) passed to the fake sleep, in call order
    """

    client: TestClient
    server: ChatMockServer
    sleeps: list[float] = field(default_factory=list)

    def post_completion(
        self,
        messages: list[dict[str, str]] | None = None,
        model: str = "gpt-4",
        *,
        route: str = COMPLETIONS_PATH,
        stream: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """Convenience method to post a chat completion request.

        Args:
            messages: List of message dicts (default: single user message)
            model: Model name
            route: Completions path to post to
            stream: Ask for an event-stream response
            **kwargs: Additional request body fields

        Returns:
            httpx Response object (Starlette TestClient uses httpx)
        """
        if messages is None:
            messages = [{"role": "user", "content": "Hello"}]

        body = {"model": model, "messages": messages, "stream": stream, **kwargs}
        return self.client.post(route, json=body)

    def stream_completion(self, **kwargs: Any) -> list[str]:
        """Post a streaming request and return its frame payloads."""
        response = self.post_completion(stream=True, **kwargs)
        assert response.status_code == 200, response.text
        return parse_frames(response.text)


def _build_config_from_marker(marker: pytest.Mark | None) -> ChatMockConfig:
    """Build ChatMockConfig from the @pytest.mark.chatmock marker and defaults."""
    if marker is None:
        return ChatMockConfig()

    overrides: dict[str, Any] = {}

    stream_overrides = {key: marker.kwargs[key] for key in ("chunk_chars", "interval_ms", "fingerprint") if key in marker.kwargs}
    if stream_overrides:
        overrides["stream"] = stream_overrides

    fault_overrides = {
        key: marker.kwargs[key] for key in ("max_delay_ms", "failure_pct", "combined_failure_pct") if key in marker.kwargs
    }
    if fault_overrides:
        overrides["faults"] = fault_overrides

    return load_config(cli_overrides=overrides)


@pytest.fixture
def chatmock_server(request: pytest.FixtureRequest) -> Generator[ChatMockFixture, None, None]:
    """Create a chatmock fake chat server for testing.

    Marker usage:
        @pytest.mark.chatmock(interval_ms=0)
        @pytest.mark.chatmock(failure_pct=100.0, seed=3)
        @pytest.mark.chatmock(random_values=[0.1, 0.7], randrange_values=[1234])

    Available marker parameters:
        chunk_chars, interval_ms, fingerprint: Stream settings
        max_delay_ms, failure_pct, combined_failure_pct: Fault settings
        random_values: Scripted results of rng.random()
        randrange_values: Scripted results of rng.randrange()
        seed: Seed for the random stream after the scripts run out

    The clock is pinned to FIXED_NOW.
    """
    marker = request.node.get_closest_marker("chatmock")
    config = _build_config_from_marker(marker)
    kwargs = marker.kwargs if marker is not None else {}

    rng = ScriptedRandom(
        random_values=kwargs.get("random_values", ()),
        randrange_values=kwargs.get("randrange_values", ()),
        seed=kwargs.get("seed", 0),
    )
    sleeps: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    server = ChatMockServer(config, rng=rng, sleep=fake_sleep, time_func=lambda: FIXED_NOW)
    client = TestClient(server.app)

    yield ChatMockFixture(client=client, server=server, sleeps=sleeps)

    client.close()


# Register the marker so pytest doesn't warn about unknown markers
def pytest_configure(config: pytest.Config) -> None:
    """Register the chatmock marker."""
    config.addinivalue_line(
        "markers",
        "chatmock(**kwargs): Configure the chatmock server for the test. "
        "Keyword args override stream and fault settings or script the random source.",
    )
