# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export contracts, errors, catalog models, and the generator
# CREATED: 18 OCT 2026
# ============================================================================

from core.contracts import PipelineStage, StepStatus, InitMethod
from core.errors import PipelineError, ConfigurationError
from core.models import FieldDefinition, TableDefinition
from core.schema import TypeScriptModelGenerator

__all__ = [
    # Enums
    "PipelineStage",
    "StepStatus",
    "InitMethod",
    # Errors
    "PipelineError",
    "ConfigurationError",
    # Models
    "FieldDefinition",
    "TableDefinition",
    # Generator
    "TypeScriptModelGenerator",
]
