"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads exactly one HTTP/1.1 request from a connection's byte stream and turns
it into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  POST /files/note.txt HTTP/1.1\r\n        ← request line            │
    │  ─┬── ───────┬─────── ────┬───                                      │
    │   │          │            │                                         │
    │ Method      Path       Version                                      │
    │                                                                      │
    │  Host: localhost:4221\r\n                 ← headers, one per line   │
    │  User-Agent: curl/8.4.0\r\n                                         │
    │  Content-Length: 2\r\n                    ← tells us the body size  │
    │  \r\n                                     ← blank line: end of head │
    │                                                                      │
    │  hi                                       ← exactly 2 body bytes    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STREAM PARSING
=============================================================================

The parser reads from a buffered binary stream (``socket.makefile("rb")``
in production, ``io.BytesIO`` in tests) instead of a pre-collected buffer:

    1. readline()           → request line, split on whitespace
    2. readline() ... ""    → headers until the first blank line
    3. read(Content-Length) → body (empty when the header is absent)

Anything left on the stream after the body is ignored; the caller closes the
connection after one response.

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ Failure              │ Error                                        │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ < 3 tokens / no \n   │ MalformedRequestLine                         │
    │ EOF before blank line│ HeaderReadError                              │
    │ non-numeric length   │ InvalidContentLength                         │
    │ EOF inside the body  │ TruncatedBody                                │
    │ length above the cap │ PayloadTooLarge (only with max_body_size)    │
    └──────────────────────┴──────────────────────────────────────────────┘

=============================================================================
RESOURCE LIMITS
=============================================================================

Without ``max_body_size`` the parser trusts Content-Length: a client that
declares a huge length makes the worker allocate and wait for that many
bytes. Transfer-Encoding is never interpreted.

=============================================================================
"""

import io
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional


# The request head is decoded so that every byte survives a round trip:
# "/echo/<bytes>" and User-Agent values are re-encoded the same way.
HEAD_ENCODING = "utf-8"
HEAD_ERRORS = "surrogateescape"

# Unicode White_Space. str.isspace() also counts the \x1c-\x1f information
# separators, which are ordinary characters inside a token.
_SPACE = r"[^\S\x1c-\x1f]"
_SPACE_RUN = re.compile(_SPACE + "+")
_EDGE_SPACE = re.compile(rf"\A{_SPACE}+|{_SPACE}+\Z")


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    A parse failure is fatal for its connection: the handler logs it and
    closes the socket without writing a response.
    """


class MalformedRequestLine(HTTPParseError):
    """The first line is missing, unterminated, or has fewer than 3 tokens."""


class HeaderReadError(HTTPParseError):
    """The stream ended (or failed) before the blank line closing the headers."""


class InvalidContentLength(HTTPParseError):
    """Content-Length is not a non-negative integer."""


class TruncatedBody(HTTPParseError):
    """Fewer body bytes arrived than Content-Length announced."""


class PayloadTooLarge(HTTPParseError):
    """Content-Length exceeds the parser's configured body limit."""


def decode_head(raw: bytes) -> str:
    return raw.decode(HEAD_ENCODING, HEAD_ERRORS)


def encode_head(text: str) -> bytes:
    return text.encode(HEAD_ENCODING, HEAD_ERRORS)


def split_fields(text: str) -> List[str]:
    """Split on runs of whitespace, dropping empty fields."""
    return [part for part in _SPACE_RUN.split(text) if part]


def trim_space(text: str) -> str:
    return _EDGE_SPACE.sub("", text)


def find_header(
    headers: Dict[str, str],
    name: str,
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Look up a header value.

    The exact, case-preserved name wins. Otherwise names are compared
    case-insensitively, so ``content-length`` from a lower-casing client is
    still found under ``Content-Length``.
    """
    if name in headers:
        return headers[name]

    wanted = name.lower()
    found = default
    for key, value in headers.items():
        if key.lower() == wanted:
            found = value  # last one wins, like duplicate exact names
    return found


@dataclass
class RequestLine:
    """
    The three whitespace-separated tokens of the first request line.

        GET /echo/hello HTTP/1.1  →  RequestLine("GET", "/echo/hello", "HTTP/1.1")
    """

    method: str
    path: str
    version: str


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Created fresh for every connection and dropped once the response has
    been written.

    Attributes:
        request_line:   Method, raw path (not URL-decoded) and version.
        headers:        Header name → value, names kept as received.
                        A repeated name keeps its last value.
        body:           Exactly Content-Length bytes (b"" without the header).
        path_params:    Filled by the router from wildcard captures, e.g.
                        route "/echo/*text" on "/echo/abc" → {"text": "abc"}.
        client_address: (ip, port) of the peer, for logging.
    """

    request_line: RequestLine
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)

    @property
    def method(self) -> str:
        return self.request_line.method

    @property
    def path(self) -> str:
        return self.request_line.path

    @property
    def version(self) -> str:
        return self.request_line.version

    @property
    def user_agent(self) -> str:
        """The User-Agent header value, or "" when the client sent none."""
        return self.get_header("User-Agent")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (see find_header for the matching rules).

        Args:
            name: Header name.
            default: Returned when no header matches.
        """
        return find_header(self.headers, name, default)


class RequestParser:
    """
    Parses one HTTP request from a binary stream.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        stream
          │
          ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Request line ── readline(), fields ── < 3 tokens? ─► error   │
        │  2. Headers ─────── readline() until blank ── EOF? ──────► error │
        │                     "Name: Value", split on first ":"            │
        │                     lines without ":" are skipped               │
        │  3. Body ────────── Content-Length digits? ─────────────► error │
        │                     read(n) ── short read? ─────────────► error │
        └───────────────────────────────────────────────────────────────────┘
          │
          ▼
        HTTPRequest

    ==========================================================================
    """

    def __init__(self, max_body_size: Optional[int] = None):
        """
        Args:
            max_body_size: Largest Content-Length accepted, in bytes.
                           None (the default) accepts any length.
        """
        self.max_body_size = max_body_size

    def parse(
        self,
        stream: BinaryIO,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse a single request from the stream.

        Args:
            stream: Buffered binary reader supporting readline() and read(n).
            client_address: Peer (ip, port), copied onto the request.

        Returns:
            The parsed HTTPRequest.

        Raises:
            HTTPParseError: One of its subclasses, see the module table.
        """
        request_line = self._parse_request_line(stream)
        headers = self._parse_headers(stream)
        body = self._parse_body(stream, headers)

        return HTTPRequest(
            request_line=request_line,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, stream: BinaryIO) -> RequestLine:
        try:
            raw = stream.readline()
        except OSError as e:
            raise MalformedRequestLine(f"error reading request line: {e}") from e

        if not raw:
            raise MalformedRequestLine("connection closed before a request was sent")
        if not raw.endswith(b"\n"):
            raise MalformedRequestLine(f"unterminated request line: {raw!r}")

        # the trailing \r\n is whitespace too
        parts = split_fields(decode_head(raw))
        if len(parts) < 3:
            raise MalformedRequestLine(f"invalid request line: {raw!r}")

        return RequestLine(method=parts[0], path=parts[1], version=parts[2])

    def _parse_headers(self, stream: BinaryIO) -> Dict[str, str]:
        headers: Dict[str, str] = {}

        while True:
            try:
                raw = stream.readline()
            except OSError as e:
                raise HeaderReadError(f"error reading headers: {e}") from e

            if not raw.endswith(b"\n"):
                raise HeaderReadError("stream ended before end of headers")

            line = trim_space(decode_head(raw))
            if not line:
                return headers

            name, sep, value = line.partition(":")
            if not sep:
                continue  # not a header line, skip it

            headers[trim_space(name)] = trim_space(value)

    def _parse_body(self, stream: BinaryIO, headers: Dict[str, str]) -> bytes:
        content_length = self._content_length(headers)
        if content_length is None or content_length == 0:
            return b""

        if self.max_body_size is not None and content_length > self.max_body_size:
            raise PayloadTooLarge(
                f"Content-Length {content_length} exceeds limit of {self.max_body_size} bytes"
            )

        try:
            body = stream.read(content_length)
        except OSError as e:
            raise TruncatedBody(f"error reading body: {e}") from e

        if len(body) < content_length:
            raise TruncatedBody(
                f"expected {content_length} body bytes, got {len(body)}"
            )
        return body

    def _content_length(self, headers: Dict[str, str]) -> Optional[int]:
        """Return the declared body length, or None without the header."""
        value = find_header(headers, "Content-Length")
        if value is None:
            return None

        value = trim_space(value)
        if not (value.isascii() and value.isdigit()):
            raise InvalidContentLength(f"invalid Content-Length: {value!r}")
        return int(value)


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_body_size: Optional[int] = None,
) -> HTTPRequest:
    """
    Parse a request held entirely in memory.

    Wraps the bytes in a stream and runs a RequestParser over it; handy for
    tests and tools that already have the raw request.
    """
    parser = RequestParser(max_body_size=max_body_size)
    return parser.parse(io.BytesIO(data), client_address)
