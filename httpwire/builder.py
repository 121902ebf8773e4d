"""Fluent builders for HTTP requests and responses."""

from __future__ import annotations

import copy
from collections.abc import Mapping

from httpwire.messages import Method, Request, Response, Version

_REASON_PHRASES = {
    200: "OK",
    201: "Created",
    202: "Accepted",
    204: "No Content",
    301: "Moved Permanently",
    302: "Found",
    304: "Not Modified",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
}


def reason_phrase(code: int) -> str:
    """Return the default reason phrase for a status code, or "Unknown"."""
    return _REASON_PHRASES.get(code, "Unknown")


class RequestBuilder:
    """Builds a Request step by step; every setter returns the builder."""

    def __init__(self) -> None:
        self._req = Request()

    def method(self, m: Method | str) -> "RequestBuilder":
        if isinstance(m, Method):
            self._req.method_type = m
        else:
            self._req.set_method(m)
        return self

    def uri(self, u: str) -> "RequestBuilder":
        self._req.uri = u
        self._req.target = u
        return self

    def version(self, v: Version) -> "RequestBuilder":
        self._req.protocol_version = v
        return self

    def header(self, name: str, value: str, sensitive: bool = False) -> "RequestBuilder":
        self._req.add_header(name, value, sensitive)
        return self

    def body(self, b: str) -> "RequestBuilder":
        self._req.body = b
        return self

    def get(self, uri: str) -> "RequestBuilder":
        return self.method(Method.GET).uri(uri)

    def post(self, uri: str) -> "RequestBuilder":
        return self.method(Method.POST).uri(uri)

    def put(self, uri: str) -> "RequestBuilder":
        return self.method(Method.PUT).uri(uri)

    def delete(self, uri: str) -> "RequestBuilder":
        return self.method(Method.DELETE).uri(uri)

    def head(self, uri: str) -> "RequestBuilder":
        return self.method(Method.HEAD).uri(uri)

    def options(self, uri: str) -> "RequestBuilder":
        return self.method(Method.OPTIONS).uri(uri)

    def patch(self, uri: str) -> "RequestBuilder":
        return self.method(Method.PATCH).uri(uri)

    def host(self, h: str) -> "RequestBuilder":
        return self.header("Host", h)

    def user_agent(self, ua: str) -> "RequestBuilder":
        return self.header("User-Agent", ua)

    def content_type(self, ct: str) -> "RequestBuilder":
        return self.header("Content-Type", ct)

    def authorization(self, auth: str) -> "RequestBuilder":
        return self.header("Authorization", auth, True)

    def accept(self, accept: str) -> "RequestBuilder":
        return self.header("Accept", accept)

    def cookie(self, cookie: str) -> "RequestBuilder":
        return self.header("Cookie", cookie, True)

    def referer(self, ref: str) -> "RequestBuilder":
        return self.header("Referer", ref)

    def origin(self, origin: str) -> "RequestBuilder":
        return self.header("Origin", origin)

    def json_body(self, json: str) -> "RequestBuilder":
        return self.content_type("application/json").body(json)

    def form_body(self, form_data: Mapping[str, str]) -> "RequestBuilder":
        """Set a form body as key=value pairs joined by '&', values as given."""
        encoded = "&".join(f"{key}={value}" for key, value in form_data.items())
        return self.content_type("application/x-www-form-urlencoded").body(encoded)

    def text_body(self, text: str) -> "RequestBuilder":
        return self.content_type("text/plain").body(text)

    def build(self) -> Request:
        """Return an independent copy of the request built so far."""
        return copy.deepcopy(self._req)


class ResponseBuilder:
    """Builds a Response step by step; every setter returns the builder."""

    def __init__(self) -> None:
        self._resp = Response(
            status_code=200, reason_phrase="OK", protocol_version=Version.HTTP_1_1
        )

    def status(self, code: int, reason: str | None = None) -> "ResponseBuilder":
        """Set the status code, with the default reason phrase unless one is given."""
        self._resp.status_code = code
        self._resp.reason_phrase = reason_phrase(code) if reason is None else reason
        return self

    def version(self, v: Version) -> "ResponseBuilder":
        self._resp.protocol_version = v
        return self

    def header(self, name: str, value: str, sensitive: bool = False) -> "ResponseBuilder":
        self._resp.add_header(name, value, sensitive)
        return self

    def body(self, b: str) -> "ResponseBuilder":
        self._resp.body = b
        return self

    def ok(self) -> "ResponseBuilder":
        return self.status(200)

    def created(self) -> "ResponseBuilder":
        return self.status(201)

    def accepted(self) -> "ResponseBuilder":
        return self.status(202)

    def no_content(self) -> "ResponseBuilder":
        return self.status(204)

    def moved_permanently(self, location: str) -> "ResponseBuilder":
        return self.status(301).header("Location", location)

    def found(self, location: str) -> "ResponseBuilder":
        return self.status(302).header("Location", location)

    def not_modified(self) -> "ResponseBuilder":
        return self.status(304)

    def bad_request(self) -> "ResponseBuilder":
        return self.status(400)

    def unauthorized(self) -> "ResponseBuilder":
        return self.status(401)

    def forbidden(self) -> "ResponseBuilder":
        return self.status(403)

    def not_found(self) -> "ResponseBuilder":
        return self.status(404)

    def method_not_allowed(self) -> "ResponseBuilder":
        return self.status(405)

    def conflict(self) -> "ResponseBuilder":
        return self.status(409)

    def internal_server_error(self) -> "ResponseBuilder":
        return self.status(500)

    def not_implemented(self) -> "ResponseBuilder":
        return self.status(501)

    def bad_gateway(self) -> "ResponseBuilder":
        return self.status(502)

    def service_unavailable(self) -> "ResponseBuilder":
        return self.status(503)

    def content_type(self, ct: str) -> "ResponseBuilder":
        return self.header("Content-Type", ct)

    def content_length(self, length: int) -> "ResponseBuilder":
        return self.header("Content-Length", str(length))

    def server(self, s: str) -> "ResponseBuilder":
        return self.header("Server", s)

    def cache_control(self, cc: str) -> "ResponseBuilder":
        return self.header("Cache-Control", cc)

    def location(self, loc: str) -> "ResponseBuilder":
        return self.header("Location", loc)

    def set_cookie(self, cookie: str) -> "ResponseBuilder":
        return self.header("Set-Cookie", cookie)

    def cors_origin(self, origin: str) -> "ResponseBuilder":
        return self.header("Access-Control-Allow-Origin", origin)

    def json_body(self, json: str) -> "ResponseBuilder":
        return self.content_type("application/json").body(json)

    def html_body(self, html: str) -> "ResponseBuilder":
        return self.content_type("text/html").body(html)

    def text_body(self, text: str) -> "ResponseBuilder":
        return self.content_type("text/plain").body(text)

    def build(self) -> Response:
        """Return an independent copy of the response built so far."""
        return copy.deepcopy(self._resp)