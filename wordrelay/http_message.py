"""HTTP request and response messages and the parser result codes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ParseResult(Enum):
    """Outcome of feeding bytes to an incremental HTTP parser."""

    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    ERROR = "error"


@dataclass
class HeaderItem:
    """A single header line: name and value as they appeared on the wire."""

    name: str = ""
    value: str = ""


def _render_headers(headers: list[HeaderItem]) -> str:
    return "".join(f"{item.name}: {item.value}\n" for item in headers)


def _render_content(content: bytes | bytearray) -> str:
    return bytes(content).decode("utf-8", errors="replace")


@dataclass
class Request:
    """A parsed HTTP request."""

    method: str = ""
    uri: str = ""
    version_major: int = 0
    version_minor: int = 0
    headers: list[HeaderItem] = field(default_factory=list)
    content: bytearray = field(default_factory=bytearray)
    keep_alive: bool = False

    def inspect(self) -> str:
        """Return a human-readable dump of the request."""
        return (
            f"{self.method} {self.uri} HTTP/{self.version_major}.{self.version_minor}\n"
            f"{_render_headers(self.headers)}"
            f"{_render_content(self.content)}\n"
            f"+ keep-alive: {int(self.keep_alive)}\n"
        )


@dataclass
class Response:
    """A parsed HTTP response."""

    version_major: int = 0
    version_minor: int = 0
    headers: list[HeaderItem] = field(default_factory=list)
    content: bytearray = field(default_factory=bytearray)
    keep_alive: bool = False
    status_code: int = 0
    status: str = ""

    def inspect(self) -> str:
        """Return a human-readable dump of the response."""
        return (
            f"HTTP/{self.version_major}.{self.version_minor} "
            f"{self.status_code} {self.status}\n"
            f"{_render_headers(self.headers)}"
            f"{_render_content(self.content)}\n"
        )