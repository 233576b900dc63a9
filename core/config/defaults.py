# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Container image, credentials, host port and readiness bounds
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Settings for the disposable database that are not part of the per-project
JSON config. Each group can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides via from_env()
- Passed explicitly to the coordinator (no process-wide instance)
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass(frozen=True)
class ContainerDefaults:
    """
    Defaults for the disposable PostgreSQL container.

    The host port is deliberately not 5432 so a developer's local database
    keeps running alongside.
    """
    image: str = "postgres"
    tag: str = "12.4-alpine"
    container_name: str = "db-setup"
    container_port: int = 5432
    host_port: int = 45432

    # None means DOCKER_HOST or the platform socket
    docker_host: Optional[str] = None

    # Engine API timeouts (seconds); image pulls can take minutes
    api_timeout: float = 30.0
    pull_timeout: float = 600.0
    stop_timeout: int = 10

    @property
    def image_ref(self) -> str:
        """Full image reference, e.g. postgres:12.4-alpine."""
        return f"{self.image}:{self.tag}"

    @classmethod
    def from_env(cls) -> "ContainerDefaults":
        """Create from environment variables."""
        return cls(
            image=os.getenv("TSOOQ_DB_IMAGE", "postgres"),
            tag=os.getenv("TSOOQ_DB_IMAGE_TAG", "12.4-alpine"),
            container_name=os.getenv("TSOOQ_CONTAINER_NAME", "db-setup"),
            host_port=int(os.getenv("TSOOQ_DB_PORT", 45432)),
            docker_host=os.getenv("DOCKER_HOST") or None,
        )


@dataclass(frozen=True)
class DatabaseDefaults:
    """Credentials and connection settings for the disposable database."""
    host: str = "localhost"
    user: str = "setup"
    password: str = "s3cr3t"
    database: str = "setup"
    connect_timeout: int = 5

    def container_env(self) -> List[str]:
        """Environment assignments understood by the postgres image."""
        return [
            f"POSTGRES_USER={self.user}",
            f"POSTGRES_PASSWORD={self.password}",
            f"POSTGRES_DB={self.database}",
        ]

    @classmethod
    def from_env(cls) -> "DatabaseDefaults":
        """Create from environment variables."""
        return cls(
            host=os.getenv("TSOOQ_DB_HOST", "localhost"),
            user=os.getenv("TSOOQ_DB_USER", "setup"),
            password=os.getenv("TSOOQ_DB_PASSWORD", "s3cr3t"),
            database=os.getenv("TSOOQ_DB_NAME", "setup"),
            connect_timeout=int(os.getenv("TSOOQ_DB_CONNECT_TIMEOUT", 5)),
        )


@dataclass(frozen=True)
class ReadinessDefaults:
    """
    Defaults for the readiness poll.

    The poll stops at whichever bound is hit first: wall-clock timeout or
    attempt count.
    """
    interval_seconds: float = 1.0
    timeout_seconds: float = 60.0
    max_attempts: Optional[int] = None

    @classmethod
    def from_env(cls) -> "ReadinessDefaults":
        """Create from environment variables."""
        return cls(
            interval_seconds=float(os.getenv("TSOOQ_READY_INTERVAL_SECONDS", 1.0)),
            timeout_seconds=float(os.getenv("TSOOQ_READY_TIMEOUT_SECONDS", 60.0)),
            max_attempts=_optional_int("TSOOQ_READY_MAX_ATTEMPTS"),
        )


def default_docker_host() -> str:
    """Docker Engine endpoint for this platform."""
    if sys.platform == "win32":
        # httpx has no named-pipe transport; Docker Desktop can expose TCP
        return "tcp://localhost:2375"
    return "unix:///var/run/docker.sock"


# ============================================================================
# DEFAULTS BUNDLE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    container: ContainerDefaults = field(default_factory=ContainerDefaults)
    database: DatabaseDefaults = field(default_factory=DatabaseDefaults)
    readiness: ReadinessDefaults = field(default_factory=ReadinessDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            container=ContainerDefaults.from_env(),
            database=DatabaseDefaults.from_env(),
            readiness=ReadinessDefaults.from_env(),
        )

    def summary(self) -> Dict[str, object]:
        """Non-secret settings for logging."""
        return {
            "image": self.container.image_ref,
            "container_name": self.container.container_name,
            "host_port": self.container.host_port,
            "database": self.database.database,
            "user": self.database.user,
        }


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ContainerDefaults",
    "DatabaseDefaults",
    "ReadinessDefaults",
    "Defaults",
    "default_docker_host",
]
