# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Run orchestration layer
# PURPOSE: Sequence one model generation run
# CREATED: 18 OCT 2026
# ============================================================================
"""
Services Module

The pipeline coordinator ties the container engine, database and generator
together for a single run.

Usage:
    from services import PipelineCoordinator

    result = PipelineCoordinator(config).run()
"""

from .pipeline import (
    PipelineCoordinator,
    PipelineResult,
    StepResult,
    generate_models,
)

__all__ = [
    "PipelineCoordinator",
    "PipelineResult",
    "StepResult",
    "generate_models",
]
