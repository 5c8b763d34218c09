import json

import pytest

from wordrelay.framing import (
    Endpoint,
    SocketError,
    encode_frame,
    json_http_message,
    read_json_http,
    split_frames,
)


def test_encode_frame_wire_bytes():
    assert encode_frame(b"abc") == b"\x03\x00\x00\x00abc"


def test_encode_empty_frame():
    assert encode_frame(b"") == b"\x00\x00\x00\x00"


def test_split_round_trip():
    payloads = [b"one", b"", b"three", b"x" * 300]
    data = b"".join(encode_frame(p) for p in payloads)
    frames, rest = split_frames(data)
    assert frames == payloads
    assert rest == b""


def test_split_keeps_partial_length_prefix():
    data = encode_frame(b"hello") + b"\x05\x00"
    frames, rest = split_frames(data)
    assert frames == [b"hello"]
    assert rest == b"\x05\x00"


def test_split_keeps_partial_payload():
    tail = encode_frame(b"world")[:-2]
    frames, rest = split_frames(encode_frame(b"hi") + tail)
    assert frames == [b"hi"]
    assert rest == tail


def test_split_resumes_with_remainder():
    data = encode_frame(b"first") + encode_frame(b"second")
    frames, rest = split_frames(data[:7])
    assert frames == []
    more, rest = split_frames(rest + data[7:])
    assert more == [b"first", b"second"]
    assert rest == b""


def test_split_empty_input():
    assert split_frames(b"") == ([], b"")


def test_json_http_message_layout():
    assert json_http_message({"text": "hi"}) == (
        b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
        b'Content-Length: 13\r\n\r\n{"text":"hi"}'
    )


def test_content_length_matches_body_bytes():
    message = json_http_message({"text": "h\u00e9llo w\u00f6rld"})
    head, body = message.split(b"\r\n\r\n", 1)
    assert f"Content-Length: {len(body)}".encode() in head
    assert json.loads(body) == {"text": "h\u00e9llo w\u00f6rld"}


@pytest.mark.parametrize(
    "obj",
    [{"text": "a b c"}, {"bytes": "42"}, {"text": 'quote " and \\ slash'}],
)
def test_json_http_round_trip(obj):
    assert read_json_http(json_http_message(obj)) == obj


def test_read_json_http_rejects_garbage():
    with pytest.raises(ValueError):
        read_json_http(b"garbage")


def test_read_json_http_rejects_incomplete_message():
    with pytest.raises(ValueError):
        read_json_http(json_http_message({"text": "abc"})[:-3])


def test_read_json_http_rejects_bad_json_body():
    message = b"HTTP/1.1 200 OK\r\nContent-Length: 3\r\n\r\n{x}"
    with pytest.raises(ValueError):
        read_json_http(message)


def test_endpoint_defaults():
    endpoint = Endpoint()
    assert (endpoint.ip, endpoint.port) == ("", 0)


def test_socket_error_message():
    err = SocketError("Socket is not connected to anything")
    assert str(err) == "Socket is not connected to anything"