"""Incremental byte-level parser for HTTP requests."""

from __future__ import annotations

from enum import Enum, auto
from typing import Callable, Optional

from wordrelay.http_message import HeaderItem, ParseResult, Request
from wordrelay.response_parser import (
    _CR,
    _LF,
    _SIZE_MASK,
    _SP,
    _TAB,
    _atoi,
    _is_alnum,
    _is_alpha,
    _is_control,
    _is_digit,
    _is_token,
    _parse_hex,
)

_BODY_METHODS = frozenset({"POST", "PUT"})


class _State(Enum):
    METHOD_START = auto()
    METHOD = auto()
    URI_START = auto()
    URI = auto()
    VERSION_H = auto()
    VERSION_HT = auto()
    VERSION_HTT = auto()
    VERSION_HTTP = auto()
    VERSION_SLASH = auto()
    VERSION_MAJOR_START = auto()
    VERSION_MAJOR = auto()
    VERSION_MINOR_START = auto()
    VERSION_MINOR = auto()
    REQUEST_LINE_NEWLINE = auto()
    HEADER_LINE_START = auto()
    HEADER_LWS = auto()
    HEADER_NAME = auto()
    SPACE_BEFORE_HEADER_VALUE = auto()
    HEADER_VALUE = auto()
    EXPECTING_NEWLINE_2 = auto()
    EXPECTING_NEWLINE_3 = auto()
    BODY = auto()
    CHUNK_SIZE = auto()
    CHUNK_EXTENSION_NAME = auto()
    CHUNK_EXTENSION_VALUE = auto()
    CHUNK_SIZE_NEWLINE = auto()
    CHUNK_SIZE_NEWLINE_2 = auto()
    CHUNK_SIZE_NEWLINE_3 = auto()
    CHUNK_TRAILER_NAME = auto()
    CHUNK_TRAILER_VALUE = auto()
    CHUNK_DATA_NEWLINE_1 = auto()
    CHUNK_DATA_NEWLINE_2 = auto()
    CHUNK_DATA = auto()


_Handler = Callable[[Request, int], Optional[ParseResult]]


class HttpRequestParser:
    """Parses an HTTP request fed in one or more pieces.

    The parser keeps its state between calls, so a message may be split
    across any number of :meth:`parse` calls. Use a fresh parser per message.
    """

    def __init__(self) -> None:
        self._state = _State.METHOD_START
        self._content_size = 0
        self._chunk_size_text = ""
        self._chunk_size = 0
        self._chunked = False
        self._handlers: dict[_State, _Handler] = {
            _State.METHOD_START: self._on_method_start,
            _State.METHOD: self._on_method,
            _State.URI_START: self._on_uri_start,
            _State.URI: self._on_uri,
            _State.VERSION_H: self._expect(ord("H"), _State.VERSION_HT),
            _State.VERSION_HT: self._expect(ord("T"), _State.VERSION_HTT),
            _State.VERSION_HTT: self._expect(ord("T"), _State.VERSION_HTTP),
            _State.VERSION_HTTP: self._expect(ord("P"), _State.VERSION_SLASH),
            _State.VERSION_SLASH: self._on_version_slash,
            _State.VERSION_MAJOR_START: self._on_version_major_start,
            _State.VERSION_MAJOR: self._on_version_major,
            _State.VERSION_MINOR_START: self._on_version_minor_start,
            _State.VERSION_MINOR: self._on_version_minor,
            _State.REQUEST_LINE_NEWLINE: self._expect(_LF, _State.HEADER_LINE_START),
            _State.HEADER_LINE_START: self._on_header_line_start,
            _State.HEADER_LWS: self._on_header_lws,
            _State.HEADER_NAME: self._on_header_name,
            _State.SPACE_BEFORE_HEADER_VALUE: self._expect(_SP, _State.HEADER_VALUE),
            _State.HEADER_VALUE: self._on_header_value,
            _State.EXPECTING_NEWLINE_2: self._expect(_LF, _State.HEADER_LINE_START),
            _State.EXPECTING_NEWLINE_3: self._on_headers_end,
            _State.BODY: self._on_body,
            _State.CHUNK_SIZE: self._on_chunk_size,
            _State.CHUNK_EXTENSION_NAME: self._on_chunk_extension_name,
            _State.CHUNK_EXTENSION_VALUE: self._on_chunk_extension_value,
            _State.CHUNK_SIZE_NEWLINE: self._on_chunk_size_newline,
            _State.CHUNK_SIZE_NEWLINE_2: self._on_chunk_size_newline_2,
            _State.CHUNK_SIZE_NEWLINE_3: self._on_chunk_size_newline_3,
            _State.CHUNK_TRAILER_NAME: self._on_chunk_trailer_name,
            _State.CHUNK_TRAILER_VALUE: self._on_chunk_trailer_value,
            _State.CHUNK_DATA: self._on_chunk_data,
            _State.CHUNK_DATA_NEWLINE_1: self._expect(_CR, _State.CHUNK_DATA_NEWLINE_2),
            _State.CHUNK_DATA_NEWLINE_2: self._expect(_LF, _State.CHUNK_SIZE),
        }

    def parse(self, request: Request, data: bytes | bytearray | memoryview) -> ParseResult:
        """Feed ``data`` into ``request``; report whether the message is done."""
        for c in bytes(data):
            result = self._handlers[self._state](request, c)
            if result is not None:
                return result
        return ParseResult.INCOMPLETE

    def _expect(self, wanted: int, next_state: _State) -> _Handler:
        def handler(request: Request, c: int) -> Optional[ParseResult]:
            if c != wanted:
                return ParseResult.ERROR
            self._state = next_state
            return None

        return handler

    def _on_method_start(self, request: Request, c: int) -> Optional[ParseResult]:
        if not _is_token(c):
            return ParseResult.ERROR
        request.method += chr(c)
        self._state = _State.METHOD
        return None

    def _on_method(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == _SP:
            self._state = _State.URI_START
        elif not _is_token(c):
            return ParseResult.ERROR
        else:
            request.method += chr(c)
        return None

    def _on_uri_start(self, request: Request, c: int) -> Optional[ParseResult]:
        if _is_control(c):
            return ParseResult.ERROR
        request.uri += chr(c)
        self._state = _State.URI
        return None

    def _on_uri(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == _SP:
            self._state = _State.VERSION_H
        elif c == _CR:
            request.version_major = 0
            request.version_minor = 9
            return ParseResult.COMPLETED
        elif _is_control(c):
            return ParseResult.ERROR
        else:
            request.uri += chr(c)
        return None

    def _on_version_slash(self, request: Request, c: int) -> Optional[ParseResult]:
        if c != ord("/"):
            return ParseResult.ERROR
        request.version_major = 0
        request.version_minor = 0
        self._state = _State.VERSION_MAJOR_START
        return None

    def _on_version_major_start(self, request: Request, c: int) -> Optional[ParseResult]:
        if not _is_digit(c):
            return ParseResult.ERROR
        request.version_major = c - ord("0")
        self._state = _State.VERSION_MAJOR
        return None

    def _on_version_major(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == ord("."):
            self._state = _State.VERSION_MINOR_START
        elif _is_digit(c):
            request.version_major = request.version_major * 10 + c - ord("0")
        else:
            return ParseResult.ERROR
        return None

    def _on_version_minor_start(self, request: Request, c: int) -> Optional[ParseResult]:
        if not _is_digit(c):
            return ParseResult.ERROR
        request.version_minor = c - ord("0")
        self._state = _State.VERSION_MINOR
        return None

    def _on_version_minor(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == _CR:
            self._state = _State.REQUEST_LINE_NEWLINE
        elif _is_digit(c):
            request.version_minor = request.version_minor * 10 + c - ord("0")
        else:
            return ParseResult.ERROR
        return None

    def _on_header_line_start(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == _CR:
            self._state = _State.EXPECTING_NEWLINE_3
        elif request.headers and c in (_SP, _TAB):
            self._state = _State.HEADER_LWS
        elif not _is_token(c):
            return ParseResult.ERROR
        else:
            request.headers.append(HeaderItem(name=chr(c)))
            self._state = _State.HEADER_NAME
        return None

    def _on_header_lws(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == _CR:
            self._state = _State.EXPECTING_NEWLINE_2
        elif c in (_SP, _TAB):
            pass
        elif _is_control(c):
            return ParseResult.ERROR
        else:
            self._state = _State.HEADER_VALUE
            request.headers[-1].value += chr(c)
        return None

    def _on_header_name(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == ord(":"):
            self._state = _State.SPACE_BEFORE_HEADER_VALUE
        elif not _is_token(c):
            return ParseResult.ERROR
        else:
            request.headers[-1].name += chr(c)
        return None

    def _on_header_value(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == _CR:
            if request.method in _BODY_METHODS:
                header = request.headers[-1]
                name = header.name.lower()
                if name == "content-length":
                    self._content_size = _atoi(header.value) & _SIZE_MASK
                elif name == "transfer-encoding" and header.value.lower() == "chunked":
                    self._chunked = True
            self._state = _State.EXPECTING_NEWLINE_2
        elif _is_control(c):
            return ParseResult.ERROR
        else:
            request.headers[-1].value += chr(c)
        return None

    def _on_headers_end(self, request: Request, c: int) -> Optional[ParseResult]:
        connection = next(
            (h for h in request.headers if h.name.lower() == "connection"), None
        )
        if connection is not None:
            request.keep_alive = connection.value.lower() == "keep-alive"
        elif request.version_major > 1 or (
            request.version_major == 1 and request.version_minor == 1
        ):
            request.keep_alive = True

        if self._chunked:
            self._state = _State.CHUNK_SIZE
        elif self._content_size == 0:
            return ParseResult.COMPLETED if c == _LF else ParseResult.ERROR
        else:
            self._state = _State.BODY
        return None

    def _on_body(self, request: Request, c: int) -> Optional[ParseResult]:
        self._content_size -= 1
        request.content.append(c)
        if self._content_size == 0:
            return ParseResult.COMPLETED
        return None

    def _on_chunk_size(self, request: Request, c: int) -> Optional[ParseResult]:
        if _is_alnum(c):
            self._chunk_size_text += chr(c)
        elif c == ord(";"):
            self._state = _State.CHUNK_EXTENSION_NAME
        elif c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_extension_name(self, request: Request, c: int) -> Optional[ParseResult]:
        if _is_alnum(c) or c == _SP:
            pass
        elif c == ord("="):
            self._state = _State.CHUNK_EXTENSION_VALUE
        elif c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_extension_value(self, request: Request, c: int) -> Optional[ParseResult]:
        if _is_alnum(c) or c == _SP:
            pass
        elif c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_size_newline(self, request: Request, c: int) -> Optional[ParseResult]:
        if c != _LF:
            return ParseResult.ERROR
        self._chunk_size = _parse_hex(self._chunk_size_text)
        self._chunk_size_text = ""
        self._state = _State.CHUNK_SIZE_NEWLINE_2 if self._chunk_size == 0 else _State.CHUNK_DATA
        return None

    def _on_chunk_size_newline_2(self, request: Request, c: int) -> Optional[ParseResult]:
        if c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE_3
        elif _is_alpha(c):
            self._state = _State.CHUNK_TRAILER_NAME
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_size_newline_3(self, request: Request, c: int) -> Optional[ParseResult]:
        return ParseResult.COMPLETED if c == _LF else ParseResult.ERROR

    def _on_chunk_trailer_name(self, request: Request, c: int) -> Optional[ParseResult]:
        if _is_alnum(c):
            pass
        elif c == ord(":"):
            self._state = _State.CHUNK_TRAILER_VALUE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_trailer_value(self, request: Request, c: int) -> Optional[ParseResult]:
        if _is_alnum(c) or c == _SP:
            pass
        elif c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_data(self, request: Request, c: int) -> Optional[ParseResult]:
        request.content.append(c)
        self._chunk_size -= 1
        if self._chunk_size == 0:
            self._state = _State.CHUNK_DATA_NEWLINE_1
        return None