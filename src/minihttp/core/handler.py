"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs one request/response exchange on an accepted connection. This is
the body of every per-connection worker thread.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Connection                                                         │
    │       │                                                              │
    │       ▼                                                              │
    │   RequestParser.parse(conn.reader)                                   │
    │       │                                                              │
    │       ├── HTTPParseError ──► log warning, close, NOTHING is written  │
    │       │                                                              │
    │       ▼                                                              │
    │   Router.handle(request)                                             │
    │       │                                                              │
    │       ├── unexpected exception ──► log traceback, 500               │
    │       │                                                              │
    │       ▼                                                              │
    │   response.to_bytes() ──► conn.send_response()                       │
    │       │                                                              │
    │       ▼                                                              │
    │   close                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

At most one response is written per connection, and the connection is
closed on every path, including errors.

=============================================================================
"""

import logging

from ..http.request import HTTPParseError, HTTPRequest, RequestParser
from ..http.response import HTTPResponse, internal_error
from ..http.router import Router
from .connection import Connection, ConnectionState


logger = logging.getLogger(__name__)

# One INFO line per answered request
access_logger = logging.getLogger("minihttp.access")


class ConnectionHandler:
    """
    Parse, route, build, write.

    The handler holds no per-connection state, so one instance serves
    every worker thread concurrently.

    Usage:
        handler = ConnectionHandler(create_router(storage), RequestParser())
        threading.Thread(target=handler.handle, args=(conn,)).start()
    """

    def __init__(self, router: Router, parser: RequestParser = None):
        self.router = router
        self.parser = parser or RequestParser()

    def handle(self, conn: Connection) -> None:
        with conn:
            try:
                request = self.parser.parse(conn.reader, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Dropping connection from {conn.client_ip}: {e}")
                return

            conn.state = ConnectionState.PROCESSING
            response = self._dispatch(conn, request)

            access_logger.info(
                f'{conn.client_ip} "{request.method} {request.path}" '
                f"{response.status_code} {len(response.body)}"
            )

            conn.send_response(response.to_bytes())

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        try:
            return self.router.handle(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            return internal_error()
