# ============================================================================
# SCHEMA MODULE
# ============================================================================
# STATUS: Core - Code generation from catalog metadata
# PURPOSE: Naming rules and the TypeScript model generator
# CREATED: 18 OCT 2026
# ============================================================================

from core.schema.naming import (
    TYPE_MAP,
    to_output_type,
    to_type_name,
    to_constant_name,
    quote_literal,
)
from core.schema.model_generator import TypeScriptModelGenerator

__all__ = [
    # Generator
    "TypeScriptModelGenerator",
    # Naming
    "TYPE_MAP",
    "to_output_type",
    "to_type_name",
    "to_constant_name",
    "quote_literal",
]
