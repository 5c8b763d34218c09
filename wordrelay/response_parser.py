"""Incremental byte-level parser for HTTP responses."""

from __future__ import annotations

from enum import Enum, auto
from typing import Callable, Optional

from wordrelay.http_message import HeaderItem, ParseResult, Response

_SPECIAL = frozenset(b'()<>@,;:\\"/[]?={} \t')
_CR = ord("\r")
_LF = ord("\n")
_SP = ord(" ")
_TAB = ord("\t")
_SIZE_MASK = (1 << 64) - 1


def _is_char(c: int) -> bool:
    return c <= 127


def _is_control(c: int) -> bool:
    return c <= 31 or c == 127


def _is_special(c: int) -> bool:
    return c in _SPECIAL


def _is_digit(c: int) -> bool:
    return ord("0") <= c <= ord("9")


def _is_alnum(c: int) -> bool:
    return c < 128 and chr(c).isalnum()


def _is_alpha(c: int) -> bool:
    return c < 128 and chr(c).isalpha()


def _is_token(c: int) -> bool:
    return _is_char(c) and not _is_control(c) and not _is_special(c)


def _atoi(text: str) -> int:
    """Leading decimal integer of ``text``, 0 when there is none."""
    stripped = text.lstrip(" \t\n\r\f\v")
    sign = 1
    if stripped[:1] in ("+", "-"):
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    digits = ""
    for ch in stripped:
        if not ("0" <= ch <= "9"):
            break
        digits += ch
    return sign * int(digits) if digits else 0


def _parse_hex(text: str) -> int:
    """Leading hexadecimal integer of ``text``, 0 when there is none."""
    lowered = text.lower()
    if lowered.startswith("0x") and len(lowered) > 2 and lowered[2] in "0123456789abcdef":
        lowered = lowered[2:]
    digits = ""
    for ch in lowered:
        if ch not in "0123456789abcdef":
            break
        digits += ch
    return int(digits, 16) if digits else 0


class _State(Enum):
    STATUS_START = auto()
    VERSION_HT = auto()
    VERSION_HTT = auto()
    VERSION_HTTP = auto()
    VERSION_SLASH = auto()
    VERSION_MAJOR_START = auto()
    VERSION_MAJOR = auto()
    VERSION_MINOR_START = auto()
    VERSION_MINOR = auto()
    STATUS_CODE_START = auto()
    STATUS_CODE = auto()
    STATUS_TEXT_START = auto()
    STATUS_TEXT = auto()
    STATUS_NEWLINE = auto()
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


_Handler = Callable[[Response, int], Optional[ParseResult]]


class HttpResponseParser:
    """Parses an HTTP response fed in one or more pieces.

    The parser keeps its state between calls, so a message may be split
    across any number of :meth:`parse` calls. Use a fresh parser per message.
    """

    def __init__(self) -> None:
        self._state = _State.STATUS_START
        self._content_size = 0
        self._chunk_size_text = ""
        self._chunk_size = 0
        self._chunked = False
        self._handlers: dict[_State, _Handler] = {
            _State.STATUS_START: self._expect(ord("H"), _State.VERSION_HT),
            _State.VERSION_HT: self._expect(ord("T"), _State.VERSION_HTT),
            _State.VERSION_HTT: self._expect(ord("T"), _State.VERSION_HTTP),
            _State.VERSION_HTTP: self._expect(ord("P"), _State.VERSION_SLASH),
            _State.VERSION_SLASH: self._on_version_slash,
            _State.VERSION_MAJOR_START: self._on_version_major_start,
            _State.VERSION_MAJOR: self._on_version_major,
            _State.VERSION_MINOR_START: self._on_version_minor_start,
            _State.VERSION_MINOR: self._on_version_minor,
            _State.STATUS_CODE_START: self._on_status_code_start,
            _State.STATUS_CODE: self._on_status_code,
            _State.STATUS_TEXT_START: self._on_status_text_start,
            _State.STATUS_TEXT: self._on_status_text,
            _State.STATUS_NEWLINE: self._expect(_LF, _State.HEADER_LINE_START),
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

    def parse(self, response: Response, data: bytes | bytearray | memoryview) -> ParseResult:
        """Feed ``data`` into ``response``; report whether the message is done."""
        for c in bytes(data):
            result = self._handlers[self._state](response, c)
            if result is not None:
                return result
        return ParseResult.INCOMPLETE

    def _expect(self, wanted: int, next_state: _State) -> _Handler:
        def handler(response: Response, c: int) -> Optional[ParseResult]:
            if c != wanted:
                return ParseResult.ERROR
            self._state = next_state
            return None

        return handler

    def _on_version_slash(self, response: Response, c: int) -> Optional[ParseResult]:
        if c != ord("/"):
            return ParseResult.ERROR
        response.version_major = 0
        response.version_minor = 0
        self._state = _State.VERSION_MAJOR_START
        return None

    def _on_version_major_start(self, response: Response, c: int) -> Optional[ParseResult]:
        if not _is_digit(c):
            return ParseResult.ERROR
        response.version_major = c - ord("0")
        self._state = _State.VERSION_MAJOR
        return None

    def _on_version_major(self, response: Response, c: int) -> Optional[ParseResult]:
        if c == ord("."):
            self._state = _State.VERSION_MINOR_START
        elif _is_digit(c):
            response.version_major = response.version_major * 10 + c - ord("0")
        else:
            return ParseResult.ERROR
        return None

    def _on_version_minor_start(self, response: Response, c: int) -> Optional[ParseResult]:
        if not _is_digit(c):
            return ParseResult.ERROR
        response.version_minor = c - ord("0")
        self._state = _State.VERSION_MINOR
        return None

    def _on_version_minor(self, response: Response, c: int) -> Optional[ParseResult]:
        if c == _SP:
            self._state = _State.STATUS_CODE_START
            response.status_code = 0
        elif _is_digit(c):
            response.version_minor = response.version_minor * 10 + c - ord("0")
        else:
            return ParseResult.ERROR
        return None

    def _on_status_code_start(self, response: Response, c: int) -> Optional[ParseResult]:
        if not _is_digit(c):
            return ParseResult.ERROR
        response.status_code = c - ord("0")
        self._state = _State.STATUS_CODE
        return None

    def _on_status_code(self, response: Response, c: int) -> Optional[ParseResult]:
        if _is_digit(c):
            response.status_code = response.status_code * 10 + c - ord("0")
        elif not 100 <= response.status_code <= 999:
            return ParseResult.ERROR
        elif c == _SP:
            self._state = _State.STATUS_TEXT_START
        else:
            return ParseResult.ERROR
        return None

    def _on_status_text_start(self, response: Response, c: int) -> Optional[ParseResult]:
        if not _is_char(c):
            return ParseResult.ERROR
        response.status += chr(c)
        self._state = _State.STATUS_TEXT
        return None

    def _on_status_text(self, response: Response, c: int) -> Optional[ParseResult]:
        if c == _CR:
            self._state = _State.STATUS_NEWLINE
        elif _is_char(c):
            response.status += chr(c)
        else:
            return ParseResult.ERROR
        return None

    def _on_header_line_start(self, response: Response, c: int) -> Optional[ParseResult]:
        if c == _CR:
            self._state = _State.EXPECTING_NEWLINE_3
        elif response.headers and c in (_SP, _TAB):
            self._state = _State.HEADER_LWS
        elif not _is_token(c):
            return ParseResult.ERROR
        else:
            response.headers.append(HeaderItem(name=chr(c)))
            self._state = _State.HEADER_NAME
        return None

    def _on_header_lws(self, response: Response, c: int) -> Optional[ParseResult]:
        if c == _CR:
            self._state = _State.EXPECTING_NEWLINE_2
        elif c in (_SP, _TAB):
            pass
        elif _is_control(c):
            return ParseResult.ERROR
        else:
            self._state = _State.HEADER_VALUE
            response.headers[-1].value += chr(c)
        return None

    def _on_header_name(self, response: Response, c: int) -> Optional[ParseResult]:
        if c == ord(":"):
            self._state = _State.SPACE_BEFORE_HEADER_VALUE
        elif not _is_token(c):
            return ParseResult.ERROR
        else:
            response.headers[-1].name += chr(c)
        return None

    def _on_header_value(self, response: Response, c: int) -> Optional[ParseResult]:
        if c == _CR:
            header = response.headers[-1]
            name = header.name.lower()
            if name == "content-length":
                self._content_size = _atoi(header.value) & _SIZE_MASK
            elif name == "transfer-encoding" and header.value.lower() == "chunked":
                self._chunked = True
            self._state = _State.EXPECTING_NEWLINE_2
        elif _is_control(c):
            return ParseResult.ERROR
        else:
            response.headers[-1].value += chr(c)
        return None

    def _on_headers_end(self, response: Response, c: int) -> Optional[ParseResult]:
        connection = next(
            (h for h in response.headers if h.name.lower() == "connection"), None
        )
        if connection is not None:
            response.keep_alive = connection.value.lower() == "keep-alive"
        elif response.version_major > 1 or (
            response.version_major == 1 and response.version_minor == 1
        ):
            response.keep_alive = True

        if self._chunked:
            self._state = _State.CHUNK_SIZE
        elif self._content_size == 0:
            return ParseResult.COMPLETED if c == _LF else ParseResult.ERROR
        else:
            self._state = _State.BODY
        return None

    def _on_body(self, response: Response, c: int) -> Optional[ParseResult]:
        self._content_size -= 1
        response.content.append(c)
        if self._content_size == 0:
            return ParseResult.COMPLETED
        return None

    def _on_chunk_size(self, response: Response, c: int) -> Optional[ParseResult]:
        if _is_alnum(c):
            self._chunk_size_text += chr(c)
        elif c == ord(";"):
            self._state = _State.CHUNK_EXTENSION_NAME
        elif c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_extension_name(self, response: Response, c: int) -> Optional[ParseResult]:
        if _is_alnum(c) or c == _SP:
            pass
        elif c == ord("="):
            self._state = _State.CHUNK_EXTENSION_VALUE
        elif c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_extension_value(self, response: Response, c: int) -> Optional[ParseResult]:
        if _is_alnum(c) or c == _SP:
            pass
        elif c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_size_newline(self, response: Response, c: int) -> Optional[ParseResult]:
        if c != _LF:
            return ParseResult.ERROR
        self._chunk_size = _parse_hex(self._chunk_size_text)
        self._chunk_size_text = ""
        self._state = _State.CHUNK_SIZE_NEWLINE_2 if self._chunk_size == 0 else _State.CHUNK_DATA
        return None

    def _on_chunk_size_newline_2(self, response: Response, c: int) -> Optional[ParseResult]:
        if c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE_3
        elif _is_alpha(c):
            self._state = _State.CHUNK_TRAILER_NAME
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_size_newline_3(self, response: Response, c: int) -> Optional[ParseResult]:
        return ParseResult.COMPLETED if c == _LF else ParseResult.ERROR

    def _on_chunk_trailer_name(self, response: Response, c: int) -> Optional[ParseResult]:
        if _is_alnum(c):
            pass
        elif c == ord(":"):
            self._state = _State.CHUNK_TRAILER_VALUE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_trailer_value(self, response: Response, c: int) -> Optional[ParseResult]:
        if _is_alnum(c) or c == _SP:
            pass
        elif c == _CR:
            self._state = _State.CHUNK_SIZE_NEWLINE
        else:
            return ParseResult.ERROR
        return None

    def _on_chunk_data(self, response: Response, c: int) -> Optional[ParseResult]:
        response.content.append(c)
        self._chunk_size -= 1
        if self._chunk_size == 0:
            self._state = _State.CHUNK_DATA_NEWLINE_1
        return None