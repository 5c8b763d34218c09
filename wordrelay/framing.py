"""Length-prefixed framing and the JSON-over-HTTP message format."""

from __future__ import annotations

import json
import struct
from dataclasses import dataclass
from typing import Any

from wordrelay.http_message import ParseResult, Response
from wordrelay.response_parser import HttpResponseParser

_LENGTH = struct.Struct("<I")


class SocketError(Exception):
    """Raised when a socket operation fails or is used in the wrong state."""


@dataclass
class Endpoint:
    """An IPv4 address and port."""

    ip: str = ""
    port: int = 0


def encode_frame(payload: bytes) -> bytes:
    """Prefix ``payload`` with its length as a 4-byte unsigned integer."""
    if len(payload) > 0xFFFFFFFF:
        raise ValueError("frame payload too large")
    return _LENGTH.pack(len(payload)) + bytes(payload)


def split_frames(data: bytes | bytearray) -> tuple[list[bytes], bytes]:
    """Split ``data`` into complete frame payloads and the unconsumed tail."""
    view = memoryview(bytes(data))
    frames: list[bytes] = []
    offset = 0
    while offset < len(view):
        if len(view) - offset < _LENGTH.size:
            break
        (length,) = _LENGTH.unpack_from(view, offset)
        start = offset + _LENGTH.size
        if start + length > len(view):
            break
        frames.append(bytes(view[start : start + length]))
        offset = start + length
    return frames, bytes(view[offset:])


def json_http_message(obj: Any) -> bytes:
    """Wrap ``obj`` as JSON in an ``HTTP/1.1 200 OK`` message."""
    body = json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    head = (
        "HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
        f"Content-Length: {len(body)}\r\n\r\n"
    ).encode("ascii")
    return head + body


def read_json_http(payload: bytes | bytearray) -> Any:
    """Parse an HTTP message and return its JSON body.

    Raises ValueError if the message is not a complete HTTP response or its
    body is not valid JSON.
    """
    response = Response()
    if HttpResponseParser().parse(response, payload) is not ParseResult.COMPLETED:
        raise ValueError("cant parse http, it contains error")
    return json.loads(bytes(response.content).decode("utf-8"))