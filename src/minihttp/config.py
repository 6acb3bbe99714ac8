"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All server settings in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minihttp --port 3000                            │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=3000 python -m minihttp                         │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Validate eagerly at startup, not lazily at first use: a bad port or a
missing files directory should stop the process before it binds anything.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(log_level="DEBUG")

    Serving uploads from a directory, reachable from other hosts:
        ServerConfig(host="0.0.0.0", directory="/srv/files", confine_files=True)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 4221
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued connections before new ones are refused."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block indefinitely on a slow or silent client.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILE ENDPOINTS
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Root directory for /files/<name>.
    When unset, GET /files/<name> answers 404 and POST answers 500.
    """

    confine_files: bool = False
    """Answer 404 for file names that resolve outside ``directory``."""

    max_body_size: Optional[int] = None
    """
    Largest accepted Content-Length in bytes. None = no limit.
    Larger requests are dropped without a response.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST           Server host (default: 127.0.0.1)
        HTTP_PORT           Server port (default: 4221)
        HTTP_DIRECTORY      Files directory (default: none)
        HTTP_CONFINE_FILES  1/true/yes/on to confine file names (default: off)
        HTTP_TIMEOUT        Connection timeout in seconds (default: none)
        HTTP_MAX_BODY_SIZE  Request body cap in bytes (default: none)
        HTTP_LOG_LEVEL      Logging level (default: INFO)

        =====================================================================

        Raises:
            ValueError: A numeric variable does not parse.
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        max_body_size = os.getenv("HTTP_MAX_BODY_SIZE")

        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            directory=os.getenv("HTTP_DIRECTORY") or None,
            confine_files=os.getenv("HTTP_CONFINE_FILES", "").strip().lower() in _TRUE_VALUES,
            timeout=float(timeout) if timeout else None,
            max_body_size=int(max_body_size) if max_body_size else None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    @property
    def log_level_value(self) -> int:
        """The numeric ``logging`` level for ``log_level``."""
        return getattr(logging, self.log_level.upper())

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_body_size is not None and self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. Must be one of {', '.join(LOG_LEVELS)}."
            )

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(f"Not a directory: {self.directory}")
