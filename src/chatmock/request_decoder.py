# src/chatmock/request_decoder.py
"""Turn a raw request body into a ChatRequest.

Bodies may be gzip-compressed, signalled by ``Content-Encoding: gzip``.
Decoding never validates model names or message contents.
"""

import gzip
import zlib

from pydantic import ValidationError

from chatmock.errors import DecodingError
from chatmock.models import ChatRequest


def _is_gzip(content_encoding: str | None) -> bool:
    if content_encoding is None:
        return False
    return content_encoding.strip().lower() == "gzip"


def decode_request(body: bytes, content_encoding: str | None = None) -> ChatRequest:
    """Decode a (possibly compressed) JSON body.

    Args:
        body: Raw request body
        content_encoding: Value of the Content-Encoding header, if any

    Returns:
        The decoded, immutable ChatRequest

    Raises:
        DecodingError: reason "bad compression" if gzip decompression fails,
            reason "malformed body" if the JSON is invalid or has the wrong shape
    """
    if _is_gzip(content_encoding):
        try:
            body = gzip.decompress(body)
        except (OSError, EOFError, zlib.error) as e:
            raise DecodingError("bad compression") from e

    try:
        return ChatRequest.model_validate_json(body)
    except ValidationError as e:
        raise DecodingError("malformed body") from e
