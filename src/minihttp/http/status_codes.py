"""
=============================================================================
HTTP STATUS CODES (RFC 7231)
=============================================================================

Status codes the server can put on the wire, with their reason phrases.

=============================================================================
STATUS LINE
=============================================================================

Every response starts with a status line built from one of these values:

    HTTP/1.1 404 Not Found\r\n
    ──┬───── ─┬─ ────┬────
      │       │      │
   Version  Code   Reason phrase

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK            - echo, user-agent, file download      │
    │        │ 201 Created       - file upload stored                   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 404 Not Found     - unknown path or missing file         │
    │        │ 405 Method Not Allowed - /files/ with GET/POST only      │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - storage or handler failure   │
    └────────┴───────────────────────────────────────────────────────────┘

A request that cannot be parsed gets no status line at all: the
connection is closed without a response.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Being an IntEnum, members compare equal to their integer code:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.OK.phrase
        'OK'
        >>> HTTPStatus.NOT_FOUND.line
        '404 Not Found'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201

    # 4xx CLIENT ERRORS
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase that follows the code in the status line."""
        return _STATUS_PHRASES[self]

    @property
    def line(self) -> str:
        """Code and phrase as they appear after the version: ``"200 OK"``."""
        return f"{int(self)} {self.phrase}"


# =============================================================================
# REASON PHRASES
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
