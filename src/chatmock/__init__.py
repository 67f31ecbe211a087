# src/chatmock/__init__.py
"""chatmock: fake chat-completion server for client resilience testing.

chatmock provides:
- An OpenAI-compatible ``/v1/chat/completions`` endpoint (JSON or streamed)
- Event-stream output paced frame by frame, flushed after every frame
- Fault-injecting route variants (random delay, random failure, both)

Usage:
    # CLI - Start server on port 5000
    chatmock serve

    # In-process
    from chatmock import ChatMockConfig, create_app

    app = create_app(ChatMockConfig())
"""

from chatmock.config import (
    ChatMockConfig,
    FaultConfig,
    LoggingConfig,
    ServerConfig,
    StreamConfig,
    load_config,
)
from chatmock.errors import ChatMockError, DecodingError, InjectedFailure
from chatmock.fault_injector import FaultDecision, FaultInjector, FaultMode
from chatmock.models import ChatCompletion, ChatCompletionChunk, ChatMessage, ChatRequest
from chatmock.reply import generate_reply
from chatmock.request_decoder import decode_request
from chatmock.responders import NonStreamingResponder, StreamingResponder
from chatmock.server import ChatMockServer, build_router, create_app

__version__ = "0.1.0"

__all__ = [
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatMessage",
    "ChatMockConfig",
    "ChatMockError",
    "ChatMockServer",
    "ChatRequest",
    "DecodingError",
    "FaultConfig",
    "FaultDecision",
    "FaultInjector",
    "FaultMode",
    "InjectedFailure",
    "LoggingConfig",
    "NonStreamingResponder",
    "ServerConfig",
    "StreamConfig",
    "StreamingResponder",
    "build_router",
    "create_app",
    "decode_request",
    "generate_reply",
    "load_config",
]
