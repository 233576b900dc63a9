# ============================================================================
# CATALOG MODELS
# ============================================================================
# STATUS: Core - Table and column metadata read from information_schema
# PURPOSE: Immutable input to the model generator
# CREATED: 18 OCT 2026
# ============================================================================
"""
Catalog Models

FieldDefinition and TableDefinition mirror one row of
information_schema.columns and one BASE TABLE of information_schema.tables.
Both are frozen: created once by the introspector, consumed once by the
generator.
"""

from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field


class FieldDefinition(BaseModel):
    """
    One column of a table as reported by the catalog.

    ``ordinal`` is the catalog's 1-based ordinal_position; it defines the
    emission order and is never re-sorted.
    """

    ordinal: int = Field(..., ge=1, description="1-based catalog ordinal_position")
    field_name: str = Field(..., description="Column name, unique within the table")
    data_type: str = Field(..., description="Catalog type name, e.g. 'character varying'")
    is_nullable: bool = Field(default=True, description="is_nullable == 'YES'")
    has_default: bool = Field(default=False, description="column_default is not NULL")

    model_config = {"frozen": True}

    @classmethod
    def from_catalog_row(cls, row: Dict[str, Any]) -> "FieldDefinition":
        """Build from an information_schema.columns row (dict_row)."""
        return cls(
            ordinal=row["ordinal_position"],
            field_name=row["column_name"],
            data_type=row["data_type"],
            is_nullable=row["is_nullable"] == "YES",
            has_default=row["column_default"] is not None,
        )


class TableDefinition(BaseModel):
    """A BASE TABLE with its columns in catalog ordinal order."""

    schema_name: str = Field(..., description="Owning schema")
    table_name: str = Field(..., description="Table name, unique within the schema")
    fields: Tuple[FieldDefinition, ...] = Field(default=(), description="Columns by ordinal")

    model_config = {"frozen": True}

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.field_name for f in self.fields)


__all__ = [
    "FieldDefinition",
    "TableDefinition",
]
