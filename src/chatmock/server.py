# src/chatmock/server.py
"""Starlette ASGI application for the chatmock fake chat server.

Provides an OpenAI compatible chat completions endpoint plus three
fault-injecting variants of it:

    /v1/chat/completions              plain
    /rand_sleep/v1/chat/completions   random delay, then plain
    /rand_fail/v1/chat/completions    random 500, otherwise plain
    /rand_all/v1/chat/completions     random 500 or random delay

Alongside the four completion routes, GET /health reports the active
stream and fault settings for readiness checks.

Usage:
    from chatmock.server import create_app, ChatMockServer
    from chatmock.config import ChatMockConfig

    app = create_app(ChatMockConfig())

    # Or use the server class for more control (deterministic rng, fake sleep)
    server = ChatMockServer(config, rng=random.Random(7))
    app = server.app
"""

import asyncio
import random as random_module
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from starlette.routing import Route, Router

from chatmock.config import ChatMockConfig
from chatmock.errors import ChatMockError, InjectedFailure
from chatmock.fault_injector import FaultDecision, FaultInjector, FaultMode
from chatmock.logging_config import get_logger
from chatmock.request_decoder import decode_request
from chatmock.responders import NonStreamingResponder, SleepFunc, StreamingResponder

logger = get_logger(__name__)

COMPLETIONS_PATH = "/v1/chat/completions"

# Path -> fault behavior. Static; the router is built from this once.
COMPLETION_ROUTES: tuple[tuple[str, FaultMode], ...] = (
    (COMPLETIONS_PATH, FaultMode.NONE),
    (f"/rand_sleep{COMPLETIONS_PATH}", FaultMode.SLEEP),
    (f"/rand_fail{COMPLETIONS_PATH}", FaultMode.FAIL),
    (f"/rand_all{COMPLETIONS_PATH}", FaultMode.ALL),
)

_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

type Endpoint = Callable[[Request], Awaitable[Response]]


class ChatMockServer:
    """Main chatmock server class.

    Owns the fault injector and both responders. All of them draw from one
    injected random source, so a scripted Random makes ids, delays and
    failures reproducible.

    Attributes:
        app: The Starlette ASGI application, built from build_router()
    """

    def __init__(
        self,
        config: ChatMockConfig,
        *,
        rng: random_module.Random | None = None,
        sleep: SleepFunc | None = None,
        time_func: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the chatmock server.

        Args:
            config: Server configuration
            rng: Random source for ids and fault decisions (default: new Random)
            sleep: Async sleep used for injected delays and stream pacing
                   (default: asyncio.sleep)
            time_func: Wall clock for "created" timestamps (default: time.time)
        """
        self._config = config
        self._rng = rng if rng is not None else random_module.Random()
        self._sleep = sleep if sleep is not None else asyncio.sleep
        self._fault_injector = FaultInjector(config.faults, rng=self._rng)
        self._non_streaming = NonStreamingResponder(rng=self._rng, time_func=time_func)
        self._streaming = StreamingResponder(
            config.stream,
            rng=self._rng,
            time_func=time_func,
            sleep=self._sleep,
        )

        self._app = Starlette(debug=False, routes=build_router(self).routes)

    @property
    def app(self) -> Starlette:
        """Get the Starlette ASGI application."""
        return self._app

    @property
    def config(self) -> ChatMockConfig:
        return self._config

    # === Endpoint handlers ===

    async def health_endpoint(self, request: Request) -> JSONResponse:
        """Handle GET /health."""
        return JSONResponse(
            {
                "status": "healthy",
                "stream": self._config.stream.model_dump(),
                "faults": self._config.faults.model_dump(),
            }
        )

    def completion_endpoint(self, mode: FaultMode) -> Endpoint:
        """Build the POST handler for one completions route."""

        async def endpoint(request: Request) -> Response:
            return await self._handle_completion_request(request, mode)

        return endpoint

    # === Request handling ===

    async def _apply_fault(self, decision: FaultDecision) -> None:
        if decision.fail:
            logger.info("fault_injected", kind="failure")
            raise InjectedFailure()
        if decision.delay_ms > 0:
            logger.info("fault_injected", kind="delay", delay_ms=decision.delay_ms)
            await self._sleep(decision.delay_sec)

    async def _handle_completion_request(self, request: Request, mode: FaultMode) -> Response:
        """Handle a chat completion request.

        Request flow:
        1. Decide and apply fault injection for the route
        2. Decode the (optionally gzip-compressed) body
        3. Respond with one JSON envelope or an event stream
        """
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=str(uuid.uuid4()), route=mode.value)

        try:
            await self._apply_fault(self._fault_injector.decide(mode))
            chat_request = decode_request(
                await request.body(),
                request.headers.get("content-encoding"),
            )
        except ChatMockError as e:
            logger.warning("request_rejected", status_code=e.status_code, error=str(e))
            return PlainTextResponse(e.message, status_code=e.status_code)

        logger.info(
            "chat_completion_request",
            model=chat_request.model,
            stream=chat_request.stream,
            message_count=len(chat_request.messages),
        )

        if chat_request.stream:
            return StreamingResponse(
                self._streaming.stream(chat_request),
                media_type="text/event-stream",
                headers=_STREAM_HEADERS,
            )

        completion = self._non_streaming.respond(chat_request)
        return JSONResponse(completion.to_dict())


def build_router(server: ChatMockServer) -> Router:
    """Build the route table for a server (POST only on completion routes).

    Non-POST requests to a completions path are answered 405 by the router
    itself, before fault injection or decoding.
    """
    routes = [Route("/health", server.health_endpoint, methods=["GET"])]
    for path, mode in COMPLETION_ROUTES:
        routes.append(Route(path, server.completion_endpoint(mode), methods=["POST"], name=mode.value))
    return Router(routes=routes)


def create_app(config: ChatMockConfig) -> Starlette:
    """Create a Starlette ASGI application from config.

    This is a convenience function for simple use cases. For control over
    randomness and sleeping, use the ChatMockServer class directly.

    Args:
        config: chatmock configuration

    Returns:
        Starlette ASGI application
    """
    return ChatMockServer(config).app
