# httpwire

Building blocks for HTTP messages and HTTP/2 framing, with no runtime
dependencies:

- `httpwire.messages`: `Request`, `Response` and `Header` dataclasses, the
  `Method` and `Version` enumerations, and `HttpError` carrying an `ErrorCode`
- `httpwire.builder`: fluent `RequestBuilder` and `ResponseBuilder`, and
  `reason_phrase(code)`
- `httpwire.hpack`: HPACK `HpackEncoder` / `HpackDecoder` with dynamic tables,
  plus `encode_integer` / `decode_integer`
- `httpwire.hpack_tables`: the HPACK static table and Huffman code table,
  with `static_entry(index)` and `huffman_code(symbol)`
- `httpwire.h2types`: HTTP/2 frame, flag, error-code, settings and stream-state
  enumerations, `FrameHeader`, `StreamInfo`, `ConnectionSettings` and protocol
  constants such as `CONNECTION_PREFACE`
- `httpwire.h2parser`: a callback-driven `FrameParser`, `parse_preface`, and
  `request_from_headers` / `response_from_headers`

## Installation

```
pip install httpwire
```

## Building messages

```python
from httpwire.builder import RequestBuilder, ResponseBuilder

request = (
    RequestBuilder()
    .post("/api/users")
    .host("api.example.com")
    .authorization("Bearer token")
    .json_body('{"name": "alice"}')
    .build()
)

response = ResponseBuilder().not_found().text_body("missing").build()
print(response.status_code, response.reason_phrase)  # 404 Not Found
```

`build()` returns an independent copy, so a builder can be reused. Status codes
without a known phrase get `"Unknown"` unless a reason is passed to
`status(code, reason)`. Headers added through `authorization` and `cookie` are
marked sensitive. `form_body` joins `key=value` pairs with `&` and does not
percent-encode them. `Request.set_method` raises `HttpError` with
`ErrorCode.INVALID_METHOD` for an unknown method name.

## HPACK

```python
from httpwire.hpack import HpackEncoder, HpackDecoder
from httpwire.messages import Header

encoder = HpackEncoder()
decoder = HpackDecoder()

block = encoder.encode_headers([
    Header(":method", "GET"),
    Header(":path", "/"),
    Header("user-agent", "example/1.0"),
])
headers = decoder.decode_headers(block)
```

The encoder emits an indexed field when a name and value are found in the
static or dynamic table, a never-indexed literal for sensitive headers, and
otherwise a literal with incremental indexing that is added to the dynamic
table. Both sides expose `dynamic_table`, `dynamic_table_size` and
`dynamic_table_used`, and offer `set_dynamic_table_size` and
`clear_dynamic_table`. Truncated or invalid blocks raise `HttpError` with
`ErrorCode.NEED_MORE_DATA` or `ErrorCode.PROTOCOL_ERROR`.

## HTTP/2 frames

```python
from httpwire.h2parser import FrameParser, parse_preface

consumed = parse_preface(data)  # raises HttpError if the preface is wrong

parser = FrameParser(
    on_request=lambda stream_id, req: print(stream_id, req.method_type, req.target),
    on_data=lambda stream_id, payload, end_stream: print(stream_id, len(payload)),
)
parser.parse_frames(data[consumed:])
```

`parse_frames` returns the number of bytes consumed. A trailing piece shorter
than a frame header is left unconsumed; a frame whose payload is cut short
raises `HttpError` with `ErrorCode.NEED_MORE_DATA`. The callbacks
(`on_request`, `on_response`, `on_data`, `on_stream_error`, `on_settings`,
`on_ping`, `on_goaway`) may also be set as attributes after construction.
HEADERS blocks that fail to decode are reported through `on_stream_error`.

`FrameHeader.parse` and `FrameHeader.serialize` read and write the 9-byte frame
header. `ConnectionSettings.apply_setting` stores a setting and
`validate_setting` checks its value against the protocol limits.

## What it does not do

- There is no HTTP/1.x wire encoder or parser; the message classes and
  builders only hold and assemble messages.
- HPACK strings are written with the Huffman flag set but their octets are left
  unchanged, and the decoder reads string octets as they are. Header blocks
  from peers that really use Huffman coding will not decode to the right text.
- `FrameParser` acts on DATA, HEADERS, SETTINGS, PING and GOAWAY frames and
  ignores every other type, including CONTINUATION; it does not handle padding
  or priority fields in HEADERS frames.
- There is no frame generation, stream manager, flow control, or HTTP/2
  client or server connection.

## Running the tests

```
pip install -e ".[test]"
pytest
```