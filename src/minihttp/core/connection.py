"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the lifetime of a single
request/response exchange.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request sent as

    POST /files/a HTTP/1.1\r\nContent-Length: 2\r\n\r\nhi

may arrive as "POST /fi", "les/a HTTP/1.1\r\nCon", ... in any chunking.

Rather than collecting recv() chunks by hand, the connection exposes a
buffered binary reader (``socket.makefile("rb")``). The parser asks it for
whole lines and for an exact number of body bytes; the reader issues as many
recv() calls as that takes and returns short only at end of stream.

    ┌─────────────────────────────────────────────────────────────────┐
    │   socket ──recv()──► BufferedReader ──readline()──► request line │
    │                                      ──readline()──► headers     │
    │                                      ──read(n)─────► body        │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

There is no keep-alive: after one response (or a parse failure) the
connection is closed. ``with conn:`` guarantees the close on every path.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)

# Bounds on reading leftover client data while closing
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and debugging."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Parser is consuming the request
    PROCESSING = "processing"  # Request parsed, handler is executing
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence started
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │  1. BUFFERED READING   reader: line and fixed-size reads             │
    │  2. WRITING            send_response(): sendall, failures reported   │
    │  3. STATE TRACKING     what phase of the exchange we're in           │
    │  4. GRACEFUL CLOSE     FIN, drain, release the descriptor            │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout in seconds; None blocks indefinitely.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Accepted sockets may inherit the listener's accept timeout
        self.socket.setblocking(True)

        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def reader(self) -> BinaryIO:
        """
        Buffered binary stream over the socket, created on first use.

        Reading from it moves the connection into the READING state.
        """
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
        self.state = ConnectionState.READING
        return self._reader

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        sendall() keeps writing until every byte is out or the socket
        fails. A failure is logged and not retried.

        Returns:
            True if send succeeded, False if connection lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection gracefully.

        1. Close the buffered reader (it holds a reference to the socket)
        2. shutdown(SHUT_WR): send FIN so the client sees end of response
        3. Drain what the client still sends, within DRAIN_TIMEOUT and DRAIN_LIMIT
        4. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass
            self._reader = None

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self._drain()
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        """Discard unread client data, bounded in time and in bytes."""
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        while drained < DRAIN_LIMIT:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self.socket.settimeout(remaining)
            chunk = self.socket.recv(4096)
            if not chunk:
                break
            drained += len(chunk)

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                request = parser.parse(conn.reader)
                conn.send_response(data)
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
