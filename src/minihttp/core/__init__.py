"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Binds HOST:PORT, runs the accept() loop                          │
    │  • Stops on shutdown() or SIGINT/SIGTERM                            │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one new thread per connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                       CONNECTION HANDLER                             │
    │  • parse → route → build → write, exactly once                      │
    │  • parse failure: close without writing anything                    │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Client socket + buffered reader                                  │
    │  • Closed on every path (context manager)                           │
    └─────────────────────────────────────────────────────────────────────┘

Thread-per-connection keeps each exchange a plain blocking function.
Nothing bounds the number of live threads.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .handler import ConnectionHandler

__all__ = [
    "SocketServer",       # TCP listener - accepts connections
    "Connection",         # Client socket wrapper - handles I/O
    "ConnectionState",    # Connection lifecycle states
    "ConnectionHandler",  # One request/response exchange
]
