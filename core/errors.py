# ============================================================================
# PIPELINE ERRORS
# ============================================================================
# STATUS: Core - Typed failures for every pipeline step
# PURPOSE: One exception class per failure kind so callers can tell steps apart
# CREATED: 18 OCT 2026
# ============================================================================
"""
Pipeline Errors

Every step of the generation pipeline fails with a subclass of PipelineError.
Low-level exceptions (psycopg, httpx, OSError, subprocess) are always chained
with ``raise ... from e`` so the original cause stays visible.

Hierarchy:
    PipelineError
    ├── ConfigurationError
    ├── ContainerError
    │   ├── ImagePullError
    │   ├── ContainerCreateError
    │   └── ContainerLifecycleError
    ├── ReadinessTimeoutError
    ├── PipelineCancelledError
    ├── DatabaseError
    ├── SchemaInitError
    ├── IntrospectionError
    └── OutputWriteError
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all pipeline failures."""

    def __init__(self, message: str, stage: Optional[str] = None):
        self.stage = stage
        super().__init__(message)


class ConfigurationError(PipelineError):
    """Missing, unreadable or contradictory settings."""


# ============================================================================
# CONTAINER ERRORS
# ============================================================================

class ContainerError(PipelineError):
    """Base for container-engine failures."""


class ImagePullError(ContainerError):
    """Registry or network failure while pulling an image."""

    def __init__(self, message: str, image: Optional[str] = None):
        self.image = image
        super().__init__(message, stage="pull_image")


class ContainerCreateError(ContainerError):
    """Container could not be created (name in use, unknown image, ...)."""

    def __init__(self, message: str, name: Optional[str] = None, status_code: Optional[int] = None):
        self.name = name
        self.status_code = status_code
        super().__init__(message, stage="create_container")


class ContainerLifecycleError(ContainerError):
    """
    A start/stop/delete transition failed.

    Attributes:
        transition: The attempted transition ("start", "stop", "delete")
        container: Container id or name
        cause: HTTP status code or transport error message
    """

    def __init__(self, transition: str, container: str, cause: str):
        self.transition = transition
        self.container = container
        self.cause = cause
        super().__init__(
            f"Container {transition} failed for {container}: {cause}",
            stage=f"{transition}_container",
        )


# ============================================================================
# DATABASE ERRORS
# ============================================================================

class ReadinessTimeoutError(PipelineError):
    """Database did not accept a connection before the deadline."""

    def __init__(self, attempts: int, elapsed: float, last_error: Optional[str] = None):
        self.attempts = attempts
        self.elapsed = elapsed
        self.last_error = last_error
        message = f"Database not ready after {attempts} attempts ({elapsed:.1f}s)"
        if last_error:
            message += f": {last_error}"
        super().__init__(message, stage="wait_ready")


class PipelineCancelledError(PipelineError):
    """The run was cancelled from outside (signal or cancel event)."""


class DatabaseError(PipelineError):
    """A catalog or script query failed."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


class SchemaInitError(PipelineError):
    """
    Schema initialization failed.

    For the DDL path the transaction has been rolled back before this is
    raised. For the migration path ``returncode`` holds the exit status.
    """

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message, stage="initialize_schema")


class IntrospectionError(PipelineError):
    """Catalog metadata could not be read."""

    def __init__(self, message: str, schema_name: Optional[str] = None, table_name: Optional[str] = None):
        self.schema_name = schema_name
        self.table_name = table_name
        super().__init__(message, stage="introspect")


class OutputWriteError(PipelineError):
    """The generated module could not be written."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message, stage="emit")


__all__ = [
    "PipelineError",
    "ConfigurationError",
    "ContainerError",
    "ImagePullError",
    "ContainerCreateError",
    "ContainerLifecycleError",
    "ReadinessTimeoutError",
    "PipelineCancelledError",
    "DatabaseError",
    "SchemaInitError",
    "IntrospectionError",
    "OutputWriteError",
]
