"""Server configuration loaded from the environment.

Variables:
    TASKSYNC_DB_PATH: SQLite database file (default: tasksync.db)
    TASKSYNC_LOG_PATH: Server log file (default: tasksync-server.log)
    TASKSYNC_LOG_LEVEL: Logging level name (default: INFO)
    TASKSYNC_HOST: Bind address for ``tasksync serve`` (default: 127.0.0.1)
    TASKSYNC_PORT: Bind port for ``tasksync serve`` (default: 8000)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKSYNC_"


@dataclass
class ServerSettings:
    """Settings for running the sync server.

    Attributes:
        db_path: Path to the SQLite database file.
        log_path: Path to the server log file.
        log_level: Logging level name (e.g., "INFO").
        host: Address uvicorn binds to.
        port: Port uvicorn listens on.
    """

    db_path: Path = Path("tasksync.db")
    log_path: Path = Path("tasksync-server.log")
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self) -> None:
        """Normalize paths and log level."""
        self.db_path = Path(self.db_path)
        self.log_path = Path(self.log_path)
        self.log_level = self.log_level.upper()
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerSettings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ).

        Returns:
            ServerSettings with defaults for unset variables.

        Raises:
            ValueError: If TASKSYNC_PORT is not a valid port number.
        """
        env = os.environ if environ is None else environ
        port_value = env.get(f"{ENV_PREFIX}PORT", "8000")
        try:
            port = int(port_value)
        except ValueError as e:
            raise ValueError(f"Invalid port: {port_value!r}") from e

        return cls(
            db_path=Path(env.get(f"{ENV_PREFIX}DB_PATH", "tasksync.db")),
            log_path=Path(env.get(f"{ENV_PREFIX}LOG_PATH", "tasksync-server.log")),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
            host=env.get(f"{ENV_PREFIX}HOST", "127.0.0.1"),
            port=port,
        )
