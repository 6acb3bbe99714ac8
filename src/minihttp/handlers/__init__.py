"""
=============================================================================
HANDLERS MODULE
=============================================================================

The server's endpoints and the routing table that ties them together.

    ┌──────────────────────┬─────────┬─────────────────────────────────────┐
    │ Path                 │ Methods │ Handler                             │
    ├──────────────────────┼─────────┼─────────────────────────────────────┤
    │ /                    │ any     │ basic.index                         │
    │ /echo/<text>         │ any     │ basic.echo                          │
    │ /user-agent          │ any     │ basic.user_agent                    │
    │ /files/<name>        │ GET     │ FileHandler.get                     │
    │ /files/<name>        │ POST    │ FileHandler.post                    │
    │ /files/<name>        │ other   │ 405 (router fallback)               │
    │ anything else        │ any     │ 404 (router fallback)               │
    └──────────────────────┴─────────┴─────────────────────────────────────┘

Order matters: the router tries routes in registration order.

=============================================================================
"""

from typing import Optional

from ..http.router import Router
from ..storage import NoStorage, Storage
from .basic import index, echo, user_agent
from .files import FileHandler


def create_router(storage: Optional[Storage] = None) -> Router:
    """
    Build the router with every endpoint installed.

    Args:
        storage: Backing store for ``/files/``. Without one, GET answers
                 404 and POST answers 500; other methods still get 405.
    """
    router = Router()
    router.add_route("/", index, name="index")
    router.add_route("/echo/*text", echo, name="echo")
    router.add_route("/user-agent", user_agent, name="user_agent")

    FileHandler(storage if storage is not None else NoStorage()).register(router)

    return router


__all__ = [
    "create_router",
    "FileHandler",
    "index",
    "echo",
    "user_agent",
]
