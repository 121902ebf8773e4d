"""HTTP/2 protocol constants, frame headers, stream and connection state."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar

from httpwire.messages import ErrorCode, HttpError


class FrameType(enum.IntEnum):
    """HTTP/2 frame types."""

    DATA = 0x00
    HEADERS = 0x01
    PRIORITY = 0x02
    RST_STREAM = 0x03
    SETTINGS = 0x04
    PUSH_PROMISE = 0x05
    PING = 0x06
    GOAWAY = 0x07
    WINDOW_UPDATE = 0x08
    CONTINUATION = 0x09


class FrameFlags(enum.IntFlag):
    """HTTP/2 frame flags; ACK shares its bit with END_STREAM."""

    NONE = 0x00
    END_STREAM = 0x01
    ACK = 0x01
    END_HEADERS = 0x04
    PADDED = 0x08
    PRIORITY = 0x20


class H2ErrorCode(enum.IntEnum):
    """HTTP/2 error codes."""

    NO_ERROR = 0x00
    PROTOCOL_ERROR = 0x01
    INTERNAL_ERROR = 0x02
    FLOW_CONTROL_ERROR = 0x03
    SETTINGS_TIMEOUT = 0x04
    STREAM_CLOSED = 0x05
    FRAME_SIZE_ERROR = 0x06
    REFUSED_STREAM = 0x07
    CANCEL = 0x08
    COMPRESSION_ERROR = 0x09
    CONNECT_ERROR = 0x0A
    ENHANCE_YOUR_CALM = 0x0B
    INADEQUATE_SECURITY = 0x0C
    HTTP_1_1_REQUIRED = 0x0D


class SettingsId(enum.IntEnum):
    """SETTINGS parameter identifiers."""

    HEADER_TABLE_SIZE = 0x01
    ENABLE_PUSH = 0x02
    MAX_CONCURRENT_STREAMS = 0x03
    INITIAL_WINDOW_SIZE = 0x04
    MAX_FRAME_SIZE = 0x05
    MAX_HEADER_LIST_SIZE = 0x06


class StreamState(enum.Enum):
    """Stream life-cycle states."""

    IDLE = "idle"
    RESERVED_LOCAL = "reserved_local"
    RESERVED_REMOTE = "reserved_remote"
    OPEN = "open"
    HALF_CLOSED_LOCAL = "half_closed_local"
    HALF_CLOSED_REMOTE = "half_closed_remote"
    CLOSED = "closed"


CONNECTION_PREFACE = b"PRI * HTTP/2.0\r\n\r\nSM\r\n\r\n"

UINT32_MAX = 0xFFFFFFFF

DEFAULT_HEADER_TABLE_SIZE = 4096
DEFAULT_ENABLE_PUSH = 1
DEFAULT_MAX_CONCURRENT_STREAMS = UINT32_MAX
DEFAULT_INITIAL_WINDOW_SIZE = 65535
DEFAULT_MAX_FRAME_SIZE = 16384
DEFAULT_MAX_HEADER_LIST_SIZE = UINT32_MAX

MAX_FRAME_SIZE_LIMIT = (1 << 24) - 1
MIN_MAX_FRAME_SIZE = 16384
MAX_WINDOW_SIZE = (1 << 31) - 1
MAX_STREAM_ID = (1 << 31) - 1
MAX_HEADER_LIST_SIZE_LIMIT = UINT32_MAX


@dataclass
class FrameHeader:
    """The fixed 9-byte header that starts every HTTP/2 frame."""

    length: int
    type: int
    flags: int
    stream_id: int

    SIZE: ClassVar[int] = 9

    @classmethod
    def parse(cls, data: bytes | bytearray | memoryview) -> "FrameHeader":
        """Read a frame header from the first nine bytes, dropping the reserved bit."""
        if len(data) < cls.SIZE:
            raise HttpError(ErrorCode.NEED_MORE_DATA, "frame header needs 9 bytes")
        raw = bytes(data[: cls.SIZE])
        return cls(
            length=int.from_bytes(raw[0:3], "big"),
            type=raw[3],
            flags=raw[4],
            stream_id=int.from_bytes(raw[5:9], "big") & MAX_STREAM_ID,
        )

    def serialize(self) -> bytes:
        """Return the nine wire bytes of this header, reserved bit cleared."""
        return (
            (self.length & MAX_FRAME_SIZE_LIMIT).to_bytes(3, "big")
            + bytes((self.type & 0xFF, self.flags & 0xFF))
            + (self.stream_id & MAX_STREAM_ID).to_bytes(4, "big")
        )


@dataclass
class Setting:
    """One SETTINGS parameter."""

    id: int
    value: int


@dataclass
class PriorityFrame:
    """Payload of a PRIORITY frame."""

    stream_dependency: int
    weight: int
    exclusive: bool


@dataclass
class WindowUpdateFrame:
    """Payload of a WINDOW_UPDATE frame."""

    window_size_increment: int


@dataclass
class StreamInfo:
    """State, flow-control windows and priority of one stream."""

    id: int
    state: StreamState = StreamState.IDLE
    window_size: int = DEFAULT_INITIAL_WINDOW_SIZE
    remote_window_size: int = DEFAULT_INITIAL_WINDOW_SIZE
    dependency: int = 0
    weight: int = 16
    exclusive: bool = False
    headers_complete: bool = False
    data_complete: bool = False
    local_closed: bool = False
    remote_closed: bool = False
    error: H2ErrorCode = H2ErrorCode.NO_ERROR

    def is_closed(self) -> bool:
        return self.state is StreamState.CLOSED

    def is_half_closed_local(self) -> bool:
        return self.state is StreamState.HALF_CLOSED_LOCAL or self.local_closed

    def is_half_closed_remote(self) -> bool:
        return self.state is StreamState.HALF_CLOSED_REMOTE or self.remote_closed

    def can_send_data(self) -> bool:
        return not self.is_closed() and not self.is_half_closed_local() and self.window_size > 0

    def can_receive_data(self) -> bool:
        return not self.is_closed() and not self.is_half_closed_remote()


@dataclass
class ConnectionSettings:
    """Connection-wide settings and flow-control windows."""

    header_table_size: int = DEFAULT_HEADER_TABLE_SIZE
    enable_push: bool = bool(DEFAULT_ENABLE_PUSH)
    max_concurrent_streams: int = DEFAULT_MAX_CONCURRENT_STREAMS
    initial_window_size: int = DEFAULT_INITIAL_WINDOW_SIZE
    max_frame_size: int = DEFAULT_MAX_FRAME_SIZE
    max_header_list_size: int = DEFAULT_MAX_HEADER_LIST_SIZE
    connection_window_size: int = DEFAULT_INITIAL_WINDOW_SIZE
    remote_connection_window_size: int = DEFAULT_INITIAL_WINDOW_SIZE

    def apply_setting(self, setting_id: int, value: int) -> None:
        """Store a setting's value; unknown identifiers are ignored."""
        if setting_id == SettingsId.HEADER_TABLE_SIZE:
            self.header_table_size = value
        elif setting_id == SettingsId.ENABLE_PUSH:
            self.enable_push = value != 0
        elif setting_id == SettingsId.MAX_CONCURRENT_STREAMS:
            self.max_concurrent_streams = value
        elif setting_id == SettingsId.INITIAL_WINDOW_SIZE:
            self.initial_window_size = value
        elif setting_id == SettingsId.MAX_FRAME_SIZE:
            self.max_frame_size = value
        elif setting_id == SettingsId.MAX_HEADER_LIST_SIZE:
            self.max_header_list_size = value

    def validate_setting(self, setting_id: int, value: int) -> bool:
        """Tell whether a value is allowed for a setting; unknown ones pass."""
        if setting_id == SettingsId.ENABLE_PUSH:
            return value <= 1
        if setting_id == SettingsId.INITIAL_WINDOW_SIZE:
            return value <= MAX_WINDOW_SIZE
        if setting_id == SettingsId.MAX_FRAME_SIZE:
            return MIN_MAX_FRAME_SIZE <= value <= MAX_FRAME_SIZE_LIMIT
        return True