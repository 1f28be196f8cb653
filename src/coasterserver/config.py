"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All settings live on one dataclass, validated once at startup.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHERE SETTINGS COME FROM                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Command-line flags     --workers 8 --log-level DEBUG            │
    │   2. Environment            ADMIN_PASSWORD, COASTERS_LOG_LEVEL, ...  │
    │   3. Dataclass defaults     port 3000 on all interfaces              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The listen address is deliberately not an environment or CLI setting: the
service always binds 0.0.0.0:3000. Tests construct ServerConfig directly
to bind a free port instead.

ADMIN_PASSWORD is read exactly once, here, and then only lives on the
config object that the admin handler is built from. It is kept out of
repr() so it never shows up in a log line.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .errors import ConfigurationError


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the coaster server.

    Groups:
        network       host, port, backlog, buffer_size, timeout
        http          keep_alive, keep_alive_timeout, max_request_size
        thread pool   min_workers, max_workers, queue_size
        logging       log_level, log_format
        identity      server_name
        auth          admin_password
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    port: int = 3000
    backlog: int = 128
    buffer_size: int = 8192

    timeout: Optional[float] = 30.0
    """Socket read timeout for the first request on a connection."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    keep_alive_timeout: float = 5.0
    max_request_size: int = 1024 * 1024

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    queue_size: int = 100
    """Accepted connections waiting for a worker before accept() stalls."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY / AUTH
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "CoasterServer/1.0"

    admin_password: str = field(default="", repr=False)
    """The only accepted password for user "admin" on /admin."""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """
        Build a config from environment variables.

            ADMIN_PASSWORD        admin password (required; checked by validate())
            COASTERS_LOG_LEVEL    DEBUG / INFO / WARNING / ... (default INFO)
            COASTERS_LOG_FORMAT   text or json (default text)
            COASTERS_WORKERS      max worker threads (default 16)

        Args:
            environ: Mapping to read instead of os.environ.

        Raises:
            ConfigurationError: If COASTERS_WORKERS is not an integer.
        """
        env = os.environ if environ is None else environ

        workers_raw = env.get("COASTERS_WORKERS", "16")
        try:
            max_workers = int(workers_raw)
        except ValueError:
            raise ConfigurationError(
                f"COASTERS_WORKERS must be an integer, got {workers_raw!r}"
            ) from None

        return cls(
            admin_password=env.get("ADMIN_PASSWORD", ""),
            log_level=env.get("COASTERS_LOG_LEVEL", "INFO").upper(),
            log_format=env.get("COASTERS_LOG_FORMAT", "text").lower(),
            max_workers=max_workers,
            min_workers=min(cls.min_workers, max(max_workers, 1)),
        )

    def validate(self) -> None:
        """
        Fail fast on settings the server cannot run with.

        Raises:
            ConfigurationError: Describing the first bad setting found.
        """
        if not self.admin_password:
            raise ConfigurationError(
                "ADMIN_PASSWORD is not set; refusing to start without an admin password"
            )

        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.min_workers < 1:
            raise ConfigurationError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ConfigurationError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ConfigurationError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ConfigurationError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}"
            )

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level!r}")
