"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the components together.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌────────────────┐    ┌──────────────┐      │
    │    │ SocketServer │    │ ConnectionHand-│    │    Router    │      │
    │    │ (accepting)  │    │ ler (exchange) │    │ (dispatching)│      │
    │    └──────┬───────┘    └───────┬────────┘    └──────┬───────┘      │
    │           │                    │                    │               │
    │           ▼                    ▼                    ▼               │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │  Connection  │    │RequestParser │    │   Handlers   │        │
    │    └──────────────┘    └──────────────┘    │  + Storage   │        │
    │                                            └──────────────┘        │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts a TCP connection
    2. A new daemon thread is started for it
    3. RequestParser reads one request from the socket
    4. Router picks the handler, which returns an HTTPResponse
    5. The response bytes are written and the connection is closed

The accept loop never waits on a worker, so a slow client only ties up
its own thread.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionHandler
from .handlers import create_router
from .http import RequestParser, Router
from .storage import DirectoryStorage, Storage


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    The HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        # Files under /tmp/files, default address 127.0.0.1:4221
        server = HTTPServer(ServerConfig(directory="/tmp/files"))
        server.run()            # Blocks until Ctrl+C

        # Embedded, with any Storage implementation
        server = HTTPServer(ServerConfig(port=0), storage=MemoryStorage())
        threading.Thread(target=server.run, daemon=True).start()
        server.wait_until_listening()
        host, port = server.address
        ...
        server.shutdown()

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        storage: Optional[Storage] = None,
    ):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.
            storage: Backing store for ``/files/``. When omitted, a
                     DirectoryStorage is built from ``config.directory``;
                     with neither, GET /files/ answers 404 and
                     POST answers 500.

        Raises:
            ValueError: The configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        if storage is None and self.config.directory:
            storage = DirectoryStorage(
                self.config.directory,
                confine=self.config.confine_files,
            )
        self.storage = storage

        self._router = create_router(self.storage)
        self._parser = RequestParser(max_body_size=self.config.max_body_size)
        self._handler = ConnectionHandler(self._router, self._parser)

        self._socket_server = SocketServer(self.config)

    @property
    def router(self) -> Router:
        """The router, for inspection or extra routes."""
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns once shutdown() is called or SIGINT/SIGTERM arrives.

        Raises:
            OSError: The address could not be bound.
        """
        self._setup_logging()

        if self.storage is not None:
            logger.info(f"Serving files from {self.storage!r}")
        for line in self._router.describe():
            logger.debug(f"Route: {line}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """
        Stop accepting connections.

        Workers already running finish their exchange on their own.
        """
        self._socket_server.shutdown()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_listening(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.log_level_value

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a worker thread for one connection.

        Called by SocketServer for each accepted client. Daemon threads do
        not keep the process alive after the listener stops.
        """
        worker = threading.Thread(
            target=self._handler.handle,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()
