"""
HTTP protocol components: request parsing, response building, routing.

    from minihttp.http import RequestParser, ResponseBuilder, Router, HTTPStatus
"""

from .status_codes import HTTPStatus
from .request import (
    HTTPRequest,
    RequestLine,
    RequestParser,
    HTTPParseError,
    MalformedRequestLine,
    HeaderReadError,
    InvalidContentLength,
    TruncatedBody,
    PayloadTooLarge,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,
    created,
    not_found,
    method_not_allowed,
    internal_error,
)
from .router import Router, Route, RouteMatch, Handler

__all__ = [
    # Status codes
    "HTTPStatus",
    # Request
    "HTTPRequest",
    "RequestLine",
    "RequestParser",
    "HTTPParseError",
    "MalformedRequestLine",
    "HeaderReadError",
    "InvalidContentLength",
    "TruncatedBody",
    "PayloadTooLarge",
    "parse_request",
    # Response
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "not_found",
    "method_not_allowed",
    "internal_error",
    # Routing
    "Router",
    "Route",
    "RouteMatch",
    "Handler",
]
