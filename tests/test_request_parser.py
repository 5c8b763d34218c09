import pytest

from wordrelay.http_message import ParseResult, Request
from wordrelay.request_parser import HttpRequestParser


def _parse(data):
    request = Request()
    result = HttpRequestParser().parse(request, data)
    return result, request


def test_simple_get():
    result, request = _parse(
        b"GET /index.html HTTP/1.1\r\nHost: example.com\r\n\r\n"
    )
    assert result is ParseResult.COMPLETED
    assert request.method == "GET"
    assert request.uri == "/index.html"
    assert (request.version_major, request.version_minor) == (1, 1)
    assert [(h.name, h.value) for h in request.headers] == [("Host", "example.com")]
    assert request.keep_alive is True
    assert request.content == bytearray()


def test_http_09_request_line_completes_at_cr():
    result, request = _parse(b"GET /\r")
    assert result is ParseResult.COMPLETED
    assert (request.version_major, request.version_minor) == (0, 9)
    assert request.uri == "/"


def test_post_with_content_length():
    result, request = _parse(
        b"POST /submit HTTP/1.0\r\nContent-Length: 5\r\n\r\nhello"
    )
    assert result is ParseResult.COMPLETED
    assert bytes(request.content) == b"hello"
    assert request.keep_alive is False


def test_content_length_ignored_for_get():
    result, request = _parse(b"GET / HTTP/1.1\r\nContent-Length: 5\r\n\r\n")
    assert result is ParseResult.COMPLETED
    assert request.content == bytearray()


def test_chunked_post():
    result, request = _parse(
        b"POST / HTTP/1.1\r\nTransfer-Encoding: chunked\r\n\r\n"
        b"4\r\nWiki\r\n5\r\npedia\r\n0\r\n\r\n"
    )
    assert result is ParseResult.COMPLETED
    assert bytes(request.content) == b"Wikipedia"


@pytest.mark.parametrize(
    "connection, expected",
    [(b"close", False), (b"Keep-Alive", True), (b"keep-alive", True)],
)
def test_connection_header_decides_keep_alive(connection, expected):
    result, request = _parse(
        b"GET / HTTP/1.0\r\nConnection: " + connection + b"\r\n\r\n"
    )
    assert result is ParseResult.COMPLETED
    assert request.keep_alive is expected


def test_folded_header_value():
    result, request = _parse(b"GET / HTTP/1.1\r\nX-Note: a\r\n  b\r\n\r\n")
    assert result is ParseResult.COMPLETED
    assert request.headers[-1].value == "ab"


def test_byte_by_byte_matches_single_call():
    data = b"POST /x HTTP/1.1\r\nContent-Length: 3\r\n\r\nabc"
    parser = HttpRequestParser()
    request = Request()
    results = [parser.parse(request, data[i : i + 1]) for i in range(len(data))]
    assert results[-1] is ParseResult.COMPLETED
    assert all(r is ParseResult.INCOMPLETE for r in results[:-1])
    _, whole = _parse(data)
    assert request == whole


def test_incomplete_headers():
    result, _ = _parse(b"GET / HTTP/1.1\r\nHost: exa")
    assert result is ParseResult.INCOMPLETE


@pytest.mark.parametrize(
    "data",
    [
        b"G(T / HTTP/1.1\r\n\r\n",
        b"GET / HTTX/1.1\r\n\r\n",
        b"GET / HTTP/x.1\r\n\r\n",
        b"GET / HTTP/1.1\r\nBad Header: v\r\n\r\n",
        b"GET / HTTP/1.1\r\nHost:value\r\n\r\n",
        b"GET / HTTP/1.1\r\n\rX",
        b"\x01GET / HTTP/1.1\r\n\r\n",
    ],
)
def test_malformed_requests_are_errors(data):
    result, _ = _parse(data)
    assert result is ParseResult.ERROR


def test_inspect_after_parse():
    _, request = _parse(b"POST /a HTTP/1.1\r\nContent-Length: 2\r\n\r\nhi")
    assert request.inspect() == (
        "POST /a HTTP/1.1\nContent-Length: 2\nhi\n+ keep-alive: 1\n"
    )