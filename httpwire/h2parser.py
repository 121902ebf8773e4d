"""HTTP/2 frame parsing that turns frames into messages and callbacks."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from httpwire.h2types import CONNECTION_PREFACE, MAX_STREAM_ID, FrameHeader, FrameType, H2ErrorCode
from httpwire.hpack import HpackDecoder
from httpwire.messages import ErrorCode, Header, HttpError, Request, Response, Version

RequestCallback = Callable[[int, Request], None]
ResponseCallback = Callable[[int, Response], None]
DataCallback = Callable[[int, bytes, bool], None]
StreamErrorCallback = Callable[[int, ErrorCode], None]
SettingsCallback = Callable[[dict[int, int]], None]
PingCallback = Callable[[bytes, bool], None]
GoawayCallback = Callable[[int, "H2ErrorCode | int", bytes], None]

_FLAG_END_STREAM = 0x01
_FLAG_ACK = 0x01
_SETTING_SIZE = 6
_PING_SIZE = 8
_GOAWAY_FIXED_SIZE = 8
_STATUS_ERROR = 500
_UINT32_MAX = 0xFFFFFFFF
_LEADING_DIGITS = re.compile(r"\d+")


def request_from_headers(headers: Iterable[Header]) -> Request:
    """Build an HTTP/2 request from a decoded header list and its pseudo-headers."""
    req = Request()
    for h in headers:
        if h.name == ":method":
            req.set_method(h.value)
        elif h.name == ":path":
            req.uri = h.value
            req.target = h.value
        elif h.name == ":scheme":
            continue
        elif h.name == ":authority":
            req.add_header("host", h.value)
        elif not h.name.startswith(":"):
            req.headers.append(h)
    req.protocol_version = Version.HTTP_2_0
    return req


def _parse_status(text: str) -> int:
    match = _LEADING_DIGITS.match(text)
    if match is None:
        return _STATUS_ERROR
    code = int(match.group())
    return _STATUS_ERROR if code > _UINT32_MAX else code


def response_from_headers(headers: Iterable[Header]) -> Response:
    """Build an HTTP/2 response from a decoded header list; a bad :status gives 500."""
    resp = Response()
    for h in headers:
        if h.name == ":status":
            resp.status_code = _parse_status(h.value)
        elif not h.name.startswith(":"):
            resp.headers.append(h)
    resp.protocol_version = Version.HTTP_2_0
    return resp


def parse_preface(data: bytes | bytearray | memoryview) -> int:
    """Check the client connection preface and return its length."""
    if len(data) < len(CONNECTION_PREFACE):
        raise HttpError(ErrorCode.NEED_MORE_DATA, "connection preface incomplete")
    if bytes(data[: len(CONNECTION_PREFACE)]) != CONNECTION_PREFACE:
        raise HttpError(ErrorCode.PROTOCOL_ERROR, "bad connection preface")
    return len(CONNECTION_PREFACE)


def _u32(raw: bytes) -> int:
    return int.from_bytes(raw, "big")


class FrameParser:
    """Parses HTTP/2 frames and reports what they carry through callbacks.

    The HPACK decoder lives as long as the parser, so header blocks from
    successive HEADERS frames share one dynamic table.
    """

    def __init__(
        self,
        *,
        on_request: RequestCallback | None = None,
        on_response: ResponseCallback | None = None,
        on_data: DataCallback | None = None,
        on_stream_error: StreamErrorCallback | None = None,
        on_settings: SettingsCallback | None = None,
        on_ping: PingCallback | None = None,
        on_goaway: GoawayCallback | None = None,
    ) -> None:
        self.on_request = on_request
        self.on_response = on_response
        self.on_data = on_data
        self.on_stream_error = on_stream_error
        self.on_settings = on_settings
        self.on_ping = on_ping
        self.on_goaway = on_goaway
        self.decoder = HpackDecoder()

    def parse_frames(self, data: bytes | bytearray | memoryview) -> int:
        """Process every whole frame in data and return the bytes consumed.

        A trailing piece shorter than a frame header is left unconsumed; a frame
        whose payload is cut short raises HttpError with NEED_MORE_DATA.
        """
        data = bytes(data)
        pos = 0
        while pos + FrameHeader.SIZE <= len(data):
            header = FrameHeader.parse(data[pos : pos + FrameHeader.SIZE])
            pos += FrameHeader.SIZE
            end = pos + header.length
            if end > len(data):
                raise HttpError(ErrorCode.NEED_MORE_DATA, "frame payload incomplete")
            self._dispatch(header, data[pos:end])
            pos = end
        return pos

    def _dispatch(self, header: FrameHeader, payload: bytes) -> None:
        if header.type == FrameType.DATA:
            if self.on_data:
                self.on_data(header.stream_id, payload, bool(header.flags & _FLAG_END_STREAM))
        elif header.type == FrameType.HEADERS:
            self._handle_headers(header.stream_id, payload)
        elif header.type == FrameType.SETTINGS:
            if self.on_settings:
                settings: dict[int, int] = {}
                usable = len(payload) - len(payload) % _SETTING_SIZE
                for offset in range(0, usable, _SETTING_SIZE):
                    chunk = payload[offset : offset + _SETTING_SIZE]
                    settings[_u32(chunk[:2])] = _u32(chunk[2:])
                self.on_settings(settings)
        elif header.type == FrameType.PING:
            if self.on_ping and len(payload) == _PING_SIZE:
                self.on_ping(payload, bool(header.flags & _FLAG_ACK))
        elif header.type == FrameType.GOAWAY:
            if self.on_goaway and len(payload) >= _GOAWAY_FIXED_SIZE:
                last_stream_id = _u32(payload[:4]) & MAX_STREAM_ID
                raw_code = _u32(payload[4:8])
                try:
                    code: H2ErrorCode | int = H2ErrorCode(raw_code)
                except ValueError:
                    code = raw_code
                self.on_goaway(last_stream_id, code, payload[_GOAWAY_FIXED_SIZE:])

    def _handle_headers(self, stream_id: int, payload: bytes) -> None:
        try:
            headers = self.decoder.decode_headers(payload)
        except HttpError as exc:
            self._stream_error(stream_id, exc.code)
            return
        except Exception:
            self._stream_error(stream_id, ErrorCode.COMPRESSION_ERROR)
            return
        is_request = any(h.name == ":method" for h in headers)
        try:
            if is_request and self.on_request:
                self.on_request(stream_id, request_from_headers(headers))
            elif not is_request and self.on_response:
                self.on_response(stream_id, response_from_headers(headers))
        except Exception:
            self._stream_error(stream_id, ErrorCode.COMPRESSION_ERROR)

    def _stream_error(self, stream_id: int, code: ErrorCode) -> None:
        if self.on_stream_error:
            self.on_stream_error(stream_id, code)