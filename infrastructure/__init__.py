# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Container engine and database access
# PURPOSE: Disposable database lifecycle, schema setup, catalog reads
# CREATED: 18 OCT 2026
# ============================================================================
"""
Infrastructure module for the model generator.

Provides:
- DockerEngineClient: pull/create/start/stop/delete over the Engine API
- ReadinessPoller: wait until the database accepts connections
- PostgreSQLRepository: pooled connections and transactions
- SchemaInitializer: DDL script or migration command
- SchemaIntrospector: information_schema reads

Usage:
    from infrastructure import DockerEngineClient, ContainerSpec

    with DockerEngineClient() as docker:
        docker.pull_image("postgres", "12.4-alpine")
"""

from infrastructure.docker_engine import (
    ContainerHandle,
    ContainerSpec,
    DockerEngineClient,
)
from infrastructure.postgresql import (
    ConnectionParams,
    PostgreSQLRepository,
    check_connection,
)
from infrastructure.readiness import ReadinessPoller
from infrastructure.database_initializer import SchemaInitializer
from infrastructure.introspection import SchemaIntrospector

__all__ = [
    # Containers
    'ContainerHandle',
    'ContainerSpec',
    'DockerEngineClient',
    # PostgreSQL
    'ConnectionParams',
    'PostgreSQLRepository',
    'check_connection',
    'ReadinessPoller',
    # Schema
    'SchemaInitializer',
    'SchemaIntrospector',
]
