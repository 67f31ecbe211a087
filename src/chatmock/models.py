# src/chatmock/models.py
"""Wire types for the chat completion API.

The request side is a frozen Pydantic model so decoding doubles as shape
validation. The response side uses small frozen dataclasses, one per wire
entity, each rendering its own JSON fragment via ``to_dict()``.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, StrictBool, StrictStr, ValidationInfo, field_validator, model_validator

ASSISTANT_ROLE = "assistant"
COMPLETION_OBJECT = "chat.completion"
CHUNK_OBJECT = "chat.completion.chunk"


class ChatMessage(BaseModel):
    """One message of the conversation history.

    Missing or null fields read as empty strings.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    role: StrictStr = ""
    content: StrictStr = ""

    @model_validator(mode="before")
    @classmethod
    def null_as_empty_message(cls, data: Any) -> Any:
        return {} if data is None else data

    @field_validator("role", "content", mode="before")
    @classmethod
    def null_as_empty_string(cls, v: Any) -> Any:
        return "" if v is None else v


class ChatRequest(BaseModel):
    """Decoded body of a chat completion request.

    Missing or null fields take their zero values, and a body of ``null``
    is the zero request. Unknown fields are ignored. Non-null values of the
    wrong JSON type are rejected.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    model: StrictStr = ""
    messages: tuple[ChatMessage, ...] = ()
    stream: StrictBool = False

    @model_validator(mode="before")
    @classmethod
    def null_as_empty_request(cls, data: Any) -> Any:
        return {} if data is None else data

    @field_validator("model", "messages", "stream", mode="before")
    @classmethod
    def null_as_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Replace a JSON null with the field's zero value."""
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


@dataclass(frozen=True, slots=True)
class Choice:
    """A complete choice in a non-streaming response."""

    content: str
    index: int = 0
    role: str = ASSISTANT_ROLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "message": {"role": self.role, "content": self.content},
        }


@dataclass(frozen=True, slots=True)
class ChatCompletion:
    """Non-streaming response envelope."""

    id: str
    created: int
    model: str
    choices: tuple[Choice, ...]
    object: str = COMPLETION_OBJECT

    @property
    def content(self) -> str:
        """Content of the first choice."""
        return self.choices[0].content

    def to_dict(self) -> dict[str, Any]:
        """Convert to OpenAI API response format."""
        return {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "model": self.model,
            "choices": [choice.to_dict() for choice in self.choices],
        }


@dataclass(frozen=True, slots=True)
class Delta:
    """Incremental message fragment carried by one chunk.

    Empty fields are left out of the JSON, so the role frame renders as
    ``{"role": "assistant"}`` and the terminal frame as ``{}``.
    """

    role: str = ""
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.role:
            data["role"] = self.role
        if self.content:
            data["content"] = self.content
        return data


@dataclass(frozen=True, slots=True)
class ChunkChoice:
    """The single choice inside a streamed chunk."""

    delta: Delta = field(default_factory=Delta)
    finish_reason: str = ""
    index: int = 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "index": self.index,
            "delta": self.delta.to_dict(),
            "logprobs": None,
        }
        if self.finish_reason:
            data["finish_reason"] = self.finish_reason
        return data


@dataclass(frozen=True, slots=True)
class ChatCompletionChunk:
    """One event-stream chunk of a streamed response."""

    id: str
    created: int
    model: str
    system_fingerprint: str
    choices: tuple[ChunkChoice, ...]
    object: str = CHUNK_OBJECT

    @property
    def delta(self) -> Delta:
        return self.choices[0].delta

    @property
    def finish_reason(self) -> str:
        return self.choices[0].finish_reason

    def to_dict(self) -> dict[str, Any]:
        """Convert to OpenAI API chunk format."""
        return {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "model": self.model,
            "system_fingerprint": self.system_fingerprint,
            "choices": [choice.to_dict() for choice in self.choices],
        }
