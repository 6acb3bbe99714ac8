"""
=============================================================================
MINIHTTP - A Small HTTP/1.1 Server on Raw Sockets
=============================================================================

One request per connection, one thread per connection, four endpoints:

    ANY   /                 200, empty body
    ANY   /echo/<text>      200, body is <text>
    ANY   /user-agent       200, body is the User-Agent header
    GET   /files/<name>     200 with the file, 404 if missing, 500 on I/O error
    POST  /files/<name>     201 after storing the request body, 500 on failure
    other /files/<name>     405

Any other path answers 404. A request that cannot be parsed is logged and
its connection closed without a response.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer: wires everything together
    ├── config.py            # ServerConfig dataclass
    ├── storage.py           # File storage backends
    ├── core/                # Networking
    │   ├── socket_server.py # TCP listener
    │   ├── connection.py    # Client socket wrapper
    │   └── handler.py       # One request/response exchange
    ├── http/                # HTTP protocol
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response building
    │   ├── router.py        # URL routing
    │   └── status_codes.py  # Status enum
    └── handlers/            # Endpoints
        ├── basic.py         # /, /echo, /user-agent
        └── files.py         # /files/

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/tmp/files"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
