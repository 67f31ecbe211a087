# src/chatmock/errors.py
"""Exceptions raised while handling a chat completion request.

Each exception maps to exactly one HTTP status with a plain-text body.
They are terminal for the request that raised them and never leak into
other requests.
"""


class ChatMockError(Exception):
    """Base class for request-level errors.

    Attributes:
        status_code: HTTP status the server answers with
        message: Plain-text response body
    """

    status_code: int = 500
    message: str = "Internal server error"


class DecodingError(ChatMockError):
    """Raised when a request body can not be turned into a ChatRequest.

    Attributes:
        reason: Either "bad compression" or "malformed body"
    """

    status_code = 400

    def __init__(self, reason: str) -> None:
        self.reason = reason
        if reason == "bad compression":
            self.message = "Failed to decompress request body"
        else:
            self.message = "Invalid request body"
        super().__init__(f"{self.message} ({reason})")


class InjectedFailure(ChatMockError):
    """Synthetic server error raised by fault injection.

    Used solely to exercise client retry logic; nothing is actually broken.
    """

    status_code = 500
    message = "Random error"

    def __init__(self) -> None:
        super().__init__(self.message)
