"""
=============================================================================
FILE HANDLER
=============================================================================

Reads and writes files through an injected Storage.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET  /files/<name>                                                  │
    │       storage.read(name)                                             │
    │         ok           → 200, application/octet-stream, file bytes    │
    │         NotFound     → 404                                           │
    │         IOError      → 500                                           │
    │                                                                      │
    │  POST /files/<name>                                                  │
    │       storage.write(name, request.body)                              │
    │         ok           → 201                                           │
    │         IOError      → 500                                           │
    │                                                                      │
    │  other methods       → 405 (router fallback)                         │
    └─────────────────────────────────────────────────────────────────────┘

Error responses have an empty body. The name is everything after
``/files/``, passed to storage as received.

=============================================================================
"""

import logging

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder,
    created, not_found, internal_error,
)
from ..http.status_codes import HTTPStatus
from ..http.router import Router
from ..storage import Storage, StorageError, StorageNotFound


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Handler for the ``/files/`` endpoints.

    Usage:
        files = FileHandler(DirectoryStorage("/tmp/files"))
        files.register(router)      # GET and POST /files/*filename
    """

    url_prefix = "/files/"

    def __init__(self, storage: Storage):
        self.storage = storage

    def register(self, router: Router) -> None:
        pattern = f"{self.url_prefix}*filename"
        router.add_route(pattern, self.get, method="GET", name="files.get")
        router.add_route(pattern, self.post, method="POST", name="files.post")

    def _filename(self, request: HTTPRequest) -> str:
        if "filename" in request.path_params:
            return request.path_params["filename"]
        return request.path[len(self.url_prefix):]

    def get(self, request: HTTPRequest) -> HTTPResponse:
        filename = self._filename(request)

        try:
            content = self.storage.read(filename)
        except StorageNotFound:
            logger.debug(f"File not found: {filename}")
            return not_found()
        except StorageError as e:
            logger.warning(f"Failed to read file {filename}: {e}")
            return internal_error()

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .binary(content)
            .build())

    def post(self, request: HTTPRequest) -> HTTPResponse:
        filename = self._filename(request)

        try:
            self.storage.write(filename, request.body)
        except StorageError as e:
            logger.warning(f"Failed to write file {filename}: {e}")
            return internal_error()

        return created()
