# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Pipeline stage and step status enums
# PURPOSE: Define the run state machine shared by coordinator and logging
# CREATED: 18 OCT 2026
# ============================================================================
"""
Base contracts for the model generation pipeline.

A run moves strictly forward through PipelineStage values. Any step failure
moves it to FAILED; the coordinator still tears the container down.
"""

from enum import Enum
from typing import Dict, FrozenSet


# ============================================================================
# STATUS ENUMS
# ============================================================================

class PipelineStage(str, Enum):
    """
    Pipeline run states.

    State transitions:
        INIT -> IMAGE_PULLED -> CONTAINER_CREATED -> CONTAINER_STARTED
             -> DATABASE_READY -> SCHEMA_INITIALIZED -> INTROSPECTED
             -> EMITTED -> TORN_DOWN
        (any non-terminal) -> FAILED
    """
    INIT = "init"
    IMAGE_PULLED = "image_pulled"
    CONTAINER_CREATED = "container_created"
    CONTAINER_STARTED = "container_started"
    DATABASE_READY = "database_ready"
    SCHEMA_INITIALIZED = "schema_initialized"
    INTROSPECTED = "introspected"
    EMITTED = "emitted"
    TORN_DOWN = "torn_down"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self in (PipelineStage.TORN_DOWN, PipelineStage.FAILED)

    def can_transition_to(self, target: "PipelineStage") -> bool:
        """Check whether ``target`` is an allowed next stage."""
        return target in ALLOWED_TRANSITIONS.get(self, frozenset())


_ORDERED_STAGES = [
    PipelineStage.INIT,
    PipelineStage.IMAGE_PULLED,
    PipelineStage.CONTAINER_CREATED,
    PipelineStage.CONTAINER_STARTED,
    PipelineStage.DATABASE_READY,
    PipelineStage.SCHEMA_INITIALIZED,
    PipelineStage.INTROSPECTED,
    PipelineStage.EMITTED,
    PipelineStage.TORN_DOWN,
]

ALLOWED_TRANSITIONS: Dict[PipelineStage, FrozenSet[PipelineStage]] = {
    current: frozenset({following, PipelineStage.FAILED})
    for current, following in zip(_ORDERED_STAGES, _ORDERED_STAGES[1:])
}


class StepStatus(str, Enum):
    """Outcome of a single pipeline step."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class InitMethod(str, Enum):
    """How the schema is brought to its desired state."""
    DDL_SCRIPT = "ddl_script"
    MIGRATION_CMD = "migration_cmd"


__all__ = [
    "PipelineStage",
    "ALLOWED_TRANSITIONS",
    "StepStatus",
    "InitMethod",
]
