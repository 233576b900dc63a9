# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for catalog models
# CREATED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models describing catalog metadata read by the introspector and
rendered by the model generator.
"""

from core.models.catalog import FieldDefinition, TableDefinition

__all__ = [
    "FieldDefinition",
    "TableDefinition",
]
