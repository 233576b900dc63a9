# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Per-project JSON config plus environment-driven defaults
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides the per-project pipeline configuration and the container, database
and readiness defaults.
"""

from core.config.defaults import (
    ContainerDefaults,
    DatabaseDefaults,
    ReadinessDefaults,
    Defaults,
    default_docker_host,
)
from core.config.pipeline import (
    DEFAULT_CONFIG_FILE,
    PipelineConfig,
    load_config,
    resolve_config_path,
)

__all__ = [
    "ContainerDefaults",
    "DatabaseDefaults",
    "ReadinessDefaults",
    "Defaults",
    "default_docker_host",
    "DEFAULT_CONFIG_FILE",
    "PipelineConfig",
    "load_config",
    "resolve_config_path",
]
