"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Assembles responses and serializes them to wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                ← status line                 │
    │    Content-Type: text/plain\r\n       ← headers, in the order added │
    │    Content-Length: 5\r\n                                            │
    │    \r\n                               ← blank line                  │
    │    hello                              ← raw body, no terminator     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The serializer adds nothing of its own: no Date, no Server, and no
Content-Length. Whoever builds the response adds the length header, which
is what ``ResponseBuilder.text()`` / ``.binary()`` / ``.empty()`` and the
convenience constructors at the bottom of this module do.

Headers are an ordered list of (name, value) pairs, so the same name may
appear twice and the output order is exactly the insertion order.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .request import encode_head
from .status_codes import HTTPStatus


TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"

Status = Union[HTTPStatus, str]


@dataclass
class HTTPResponse:
    """
    A response under construction.

    Handlers create and mutate it; once ``to_bytes()`` has been called the
    connection handler only writes the result.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
            │                       │                        │
        HTTPResponse(            b"HTTP/1.1 200 OK\r\n   socket.sendall(
          status=OK,               Content-Type: ...\r\n     data
          headers=[...],           \r\n                    )
          body=b"hello"            hello"
        )

    =========================================================================
    """

    status: Status = HTTPStatus.OK
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_text(self) -> str:
        """The status as written on the wire, e.g. ``"404 Not Found"``."""
        if isinstance(self.status, HTTPStatus):
            return self.status.line
        return self.status

    @property
    def status_code(self) -> int:
        """Numeric status code (parsed from a literal status string if needed)."""
        if isinstance(self.status, HTTPStatus):
            return int(self.status)
        return int(self.status.split(None, 1)[0])

    @property
    def status_line(self) -> str:
        return f"{self.version} {self.status_text}"

    def add_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Append a header. Existing headers with the same name are kept.

        Returns:
            Self for method chaining
        """
        self.headers.append((name, value))
        return self

    def get_header(self, name: str) -> Optional[str]:
        """Value of the first header called ``name`` (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    def to_bytes(self) -> bytes:
        """
        Serialize the response.

            HTTP/1.1 <status>\r\n
            <name>: <value>\r\n        (once per header, insertion order)
            \r\n
            <body>

        Returns:
            Complete response bytes ready for socket.sendall()
        """
        lines = [self.status_line]
        for name, value in self.headers:
            lines.append(f"{name}: {value}")

        head = "\r\n".join(lines) + "\r\n\r\n"
        return encode_head(head) + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Each method returns ``self`` except ``build()`` and ``to_bytes()``:

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("hello")
            .build())

        # HTTP/1.1 200 OK
        # Content-Type: text/plain
        # Content-Length: 5
        #
        # hello
    """

    def __init__(self):
        self._status: Status = HTTPStatus.OK
        self._headers: List[Tuple[str, str]] = []
        self._body: bytes = b""

    def status(self, status: Status) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Append a header; duplicates are allowed."""
        self._headers.append((name, value))
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def content_length(self, length: int) -> "ResponseBuilder":
        return self.header("Content-Length", str(length))

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the raw body without touching the headers.

        Strings are encoded with the request-head encoding so text taken
        from a request path or header is written back byte for byte.
        """
        self._body = encode_head(body) if isinstance(body, str) else body
        return self

    def text(self, text: Union[str, bytes]) -> "ResponseBuilder":
        """Plain-text body with its Content-Type and Content-Length headers."""
        self.body(text)
        return self.content_type(TEXT_PLAIN).content_length(len(self._body))

    def binary(self, data: bytes) -> "ResponseBuilder":
        """Opaque body (file downloads) with its headers."""
        self.body(data)
        return self.content_type(OCTET_STREAM).content_length(len(self._body))

    def empty(self) -> "ResponseBuilder":
        """No body, but still ``Content-Type: text/plain`` and ``Content-Length: 0``."""
        return self.text(b"")

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=list(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok("hello")
#     return not_found()
#
# =============================================================================

def ok(body: Union[str, bytes] = b"") -> HTTPResponse:
    """200 OK with a text/plain body."""
    return ResponseBuilder().status(HTTPStatus.OK).text(body).build()


def created() -> HTTPResponse:
    """201 Created with an empty body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).empty().build()


def not_found() -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).empty().build()


def method_not_allowed() -> HTTPResponse:
    return ResponseBuilder().status(HTTPStatus.METHOD_NOT_ALLOWED).empty().build()


def internal_error() -> HTTPResponse:
    """
    500 Internal Server Error with an empty body.

    Nothing about the failure is exposed to the client; the cause is logged.
    """
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).empty().build()
