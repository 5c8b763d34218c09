# wordrelay

Building blocks for a small text relay protocol. Every message on the wire
is an HTTP response carrying a JSON body, preceded by a four-byte
little-endian length prefix. The package provides the framing, the
JSON-over-HTTP wrapping, incremental HTTP parsers and a URL parser.

## Installation

```
pip install .
```

No third-party libraries are needed at run time.

## Modules

- `wordrelay.framing`
  - `encode_frame(payload)` – prefix bytes with their length as a 4-byte
    unsigned integer; raises `ValueError` if the payload is too large.
  - `split_frames(data)` – return `(frames, tail)`: the complete frame
    payloads found in `data` and the bytes left over for the next read.
  - `json_http_message(obj)` – wrap `obj` as compact JSON in an
    `HTTP/1.1 200 OK` message with `Content-Type` and `Content-Length`.
  - `read_json_http(payload)` – parse such a message and return the decoded
    JSON body; raises `ValueError` if the HTTP is incomplete or malformed.
  - `SocketError` and `Endpoint` (`ip`, `port`).
- `wordrelay.http_message` – the `Request` and `Response` dataclasses (each
  with an `inspect()` text dump), `HeaderItem`, and the `ParseResult` enum
  (`COMPLETED`, `INCOMPLETE`, `ERROR`).
- `wordrelay.response_parser` – `HttpResponseParser`, an incremental HTTP/1.x
  response parser supporting `Content-Length` and chunked bodies.
- `wordrelay.request_parser` – `HttpRequestParser`, its request counterpart;
  bodies are read only for `POST` and `PUT`.
- `wordrelay.url_parser` – `parse_url(text)` returning a `Url` with
  `scheme`, `username`, `password`, `hostname`, `port`, `path`, `query`,
  `fragment`, `integer_port` and `http_port()`; raises `ValueError` on
  malformed input and on IPv6 hosts.

Both HTTP parsers keep their state between calls to `parse(message, data)`,
so a message may be fed in pieces; use a fresh parser for each message.

## Examples

```python
from wordrelay.framing import encode_frame, json_http_message, read_json_http, split_frames

wire = encode_frame(json_http_message({"text": "hello"}))
frames, tail = split_frames(wire + wire[:3])
print([read_json_http(f) for f in frames], tail)  # [{'text': 'hello'}] b'...'
```

```python
from wordrelay.http_message import ParseResult, Response
from wordrelay.response_parser import HttpResponseParser

response = Response()
parser = HttpResponseParser()
print(parser.parse(response, b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\n"))
print(parser.parse(response, b"hi") is ParseResult.COMPLETED)  # True
print(response.inspect())
```

```python
from wordrelay.url_parser import parse_url

url = parse_url("http://example.com:8080/index.html?x=1#top")
print(url.hostname, url.http_port(), url.path, url.query, url.fragment)
# example.com 8080 /index.html x=1 top
```

## What this package does not do

The package has no networking of its own: it opens no sockets, runs no
servers and installs no commands. It only builds, splits and parses the
messages; sending them over TCP is left to the application.

## Tests

```
pip install .[test]
pytest
```