# src/chatmock/responders.py
"""Non-streaming and streaming responders.

The NonStreamingResponder wraps the reply in one ChatCompletion. The
StreamingResponder emits the reply as event-stream frames:

    START      -> one role frame, delta {"role": "assistant"}
    EMITTING   -> one frame per chunk_chars code points, then a pause
    DONE       -> one terminal frame (finish_reason "stop"), then "data: [DONE]"

Grouping works on code points (Python str indexing), never on encoded
bytes, so multi-byte characters are not split across frames.
"""

import asyncio
import json
import random as random_module
import string
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator, Sequence

from chatmock.config import StreamConfig
from chatmock.logging_config import get_logger
from chatmock.models import (
    ASSISTANT_ROLE,
    ChatCompletion,
    ChatCompletionChunk,
    ChatMessage,
    ChatRequest,
    Choice,
    ChunkChoice,
    Delta,
)
from chatmock.reply import generate_reply

logger = get_logger(__name__)

COMPLETION_ID_PREFIX = "chatcmpl-"
COMPLETION_ID_LENGTH = 10
_ID_ALPHABET = string.ascii_letters + string.digits

FINISH_REASON_STOP = "stop"
DONE_FRAME = b"data: [DONE]\n\n"

type ReplyFunc = Callable[[Sequence[ChatMessage]], str]
type SleepFunc = Callable[[float], Awaitable[None]]


def new_completion_id(rng: random_module.Random) -> str:
    """Build an opaque completion id: fixed prefix + random alphanumerics."""
    return COMPLETION_ID_PREFIX + "".join(rng.choices(_ID_ALPHABET, k=COMPLETION_ID_LENGTH))


def encode_frame(chunk: ChatCompletionChunk) -> bytes:
    """Serialize a chunk as one event-stream frame."""
    payload = json.dumps(chunk.to_dict(), ensure_ascii=False, separators=(",", ":"))
    return f"data: {payload}\n\n".encode()


class NonStreamingResponder:
    """Builds the single ChatCompletion envelope for a request."""

    def __init__(
        self,
        *,
        rng: random_module.Random | None = None,
        time_func: Callable[[], float] | None = None,
        reply_func: ReplyFunc = generate_reply,
    ) -> None:
        self._rng = rng if rng is not None else random_module.Random()
        self._time_func = time_func if time_func is not None else time.time
        self._reply_func = reply_func

    def respond(self, request: ChatRequest) -> ChatCompletion:
        return ChatCompletion(
            id=new_completion_id(self._rng),
            created=int(self._time_func()),
            model=request.model,
            choices=(Choice(content=self._reply_func(request.messages)),),
        )


class StreamingResponder:
    """Emits a reply as a paced sequence of event-stream frames.

    Every frame is yielded separately; the ASGI server sends (and flushes)
    each yielded frame before the generator resumes, so a client observes
    the reply arriving chunk by chunk.

    Usage:
        responder = StreamingResponder(StreamConfig())
        async for frame in responder.stream(request):
            await send(frame)
    """

    def __init__(
        self,
        config: StreamConfig,
        *,
        rng: random_module.Random | None = None,
        time_func: Callable[[], float] | None = None,
        sleep: SleepFunc | None = None,
        reply_func: ReplyFunc = generate_reply,
    ) -> None:
        """Initialize the streaming responder.

        Args:
            config: Chunk size, pacing and fingerprint
            rng: Random instance used for completion ids
            time_func: Time function for testing (default: time.time)
            sleep: Async sleep for testing (default: asyncio.sleep)
            reply_func: Reply generator (default: the fixed reply)
        """
        self._config = config
        self._rng = rng if rng is not None else random_module.Random()
        self._time_func = time_func if time_func is not None else time.time
        self._sleep = sleep if sleep is not None else asyncio.sleep
        self._reply_func = reply_func

    @property
    def interval_sec(self) -> float:
        return self._config.interval_ms / 1000.0

    def iter_chunks(
        self,
        reply: str,
        *,
        completion_id: str,
        created: int,
        model: str,
    ) -> Iterator[ChatCompletionChunk]:
        """Yield the chunks for a reply, in emission order, without any I/O."""

        def make_chunk(delta: Delta, finish_reason: str = "") -> ChatCompletionChunk:
            return ChatCompletionChunk(
                id=completion_id,
                created=created,
                model=model,
                system_fingerprint=self._config.fingerprint,
                choices=(ChunkChoice(delta=delta, finish_reason=finish_reason),),
            )

        yield make_chunk(Delta(role=ASSISTANT_ROLE))

        size = self._config.chunk_chars
        for start in range(0, len(reply), size):
            yield make_chunk(Delta(content=reply[start : start + size]))

        yield make_chunk(Delta(), finish_reason=FINISH_REASON_STOP)

    async def stream(self, request: ChatRequest) -> AsyncIterator[bytes]:
        """Yield the encoded frames for a request, pausing after content frames.

        If the consumer stops early (client disconnect), nothing further is
        written and the abort is logged; the stream can not be resumed.
        """
        chunks = self.iter_chunks(
            self._reply_func(request.messages),
            completion_id=new_completion_id(self._rng),
            created=int(self._time_func()),
            model=request.model,
        )

        frames_written = 0
        completed = False
        try:
            for chunk in chunks:
                yield encode_frame(chunk)
                frames_written += 1
                logger.debug("stream_chunk_written", chunk=chunk.to_dict())
                if chunk.delta.content:
                    await self._sleep(self.interval_sec)

            yield DONE_FRAME
            completed = True
        finally:
            if not completed:
                logger.warning("stream_aborted", frames_written=frames_written)
