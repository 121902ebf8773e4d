"""HTTP message model shared by the HTTP/1.x and HTTP/2 layers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Method(enum.Enum):
    """HTTP request methods."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"

    @classmethod
    def from_name(cls, name: str) -> "Method":
        """Look up a method by its wire name (case-sensitive, as on the wire)."""
        try:
            return cls(name)
        except ValueError:
            raise HttpError(ErrorCode.INVALID_METHOD, f"unknown method {name!r}") from None


class Version(enum.Enum):
    """HTTP protocol versions."""

    HTTP_1_0 = "HTTP/1.0"
    HTTP_1_1 = "HTTP/1.1"
    HTTP_2_0 = "HTTP/2.0"


class ErrorCode(enum.Enum):
    """Reasons a parse or encode operation can fail."""

    NEED_MORE_DATA = "need_more_data"
    PROTOCOL_ERROR = "protocol_error"
    COMPRESSION_ERROR = "compression_error"
    INVALID_METHOD = "invalid_method"


class HttpError(Exception):
    """Raised when a message cannot be parsed, decoded or built."""

    def __init__(self, code: ErrorCode, message: str | None = None) -> None:
        super().__init__(message or code.value)
        self.code = code


@dataclass
class Header:
    """One header field; sensitive fields are never indexed by HPACK."""

    name: str
    value: str
    sensitive: bool = False


def _find_header(headers: list[Header], name: str) -> str | None:
    wanted = name.lower()
    return next((h.value for h in headers if h.name.lower() == wanted), None)


@dataclass
class Request:
    """An HTTP request."""

    method_type: Method = Method.GET
    uri: str = ""
    target: str = ""
    protocol_version: Version = Version.HTTP_1_1
    headers: list[Header] = field(default_factory=list)
    body: str = ""

    def set_method(self, name: str) -> None:
        """Set the method from its wire name."""
        self.method_type = Method.from_name(name)

    def add_header(self, name: str, value: str, sensitive: bool = False) -> None:
        """Append a header field."""
        self.headers.append(Header(name, value, sensitive))

    def get_header(self, name: str) -> str | None:
        """Return the value of the first header with this name, ignoring case."""
        return _find_header(self.headers, name)


@dataclass
class Response:
    """An HTTP response."""

    status_code: int = 200
    reason_phrase: str = "OK"
    protocol_version: Version = Version.HTTP_1_1
    headers: list[Header] = field(default_factory=list)
    body: str = ""

    def add_header(self, name: str, value: str, sensitive: bool = False) -> None:
        """Append a header field."""
        self.headers.append(Header(name, value, sensitive))

    def get_header(self, name: str) -> str | None:
        """Return the value of the first header with this name, ignoring case."""
        return _find_header(self.headers, name)