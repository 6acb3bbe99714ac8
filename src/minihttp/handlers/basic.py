"""
Stateless endpoints: the root path, echo and user-agent.

All three answer any method with 200 OK and a text/plain body:

    GET /              → ""
    GET /echo/<text>   → "<text>"            (as received, not URL-decoded)
    GET /user-agent    → User-Agent header    ("" if absent)
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


def index(request: HTTPRequest) -> HTTPResponse:
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """Return the part of the path after ``/echo/``."""
    return ok(request.path_params.get("text", ""))


def user_agent(request: HTTPRequest) -> HTTPResponse:
    return ok(request.user_agent)
