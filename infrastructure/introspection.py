# ============================================================================
# SCHEMA INTROSPECTION
# ============================================================================
# STATUS: Infrastructure - Catalog metadata queries
# PURPOSE: List base tables of a schema and describe their columns
# CREATED: 18 OCT 2026
# ============================================================================
"""
Schema Introspection

Reads information_schema for one schema:
- list_tables: BASE TABLE names (views excluded), unordered
- describe_table: columns in ordinal_position order

Every query failure becomes IntrospectionError; a partially read table is
never returned.
"""

import logging
from typing import List

from core.errors import DatabaseError, IntrospectionError
from core.models.catalog import FieldDefinition, TableDefinition
from infrastructure.postgresql import PostgreSQLRepository

logger = logging.getLogger(__name__)


LIST_TABLES_SQL = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = %s AND table_type = %s"
)

DESCRIBE_TABLE_SQL = (
    "SELECT ordinal_position, column_name, data_type, is_nullable, column_default "
    "FROM information_schema.columns "
    "WHERE table_schema = %s AND table_name = %s "
    "ORDER BY ordinal_position ASC"
)

BASE_TABLE = "BASE TABLE"


class SchemaIntrospector:
    """Catalog reader bound to one repository."""

    def __init__(self, repository: PostgreSQLRepository):
        self.repository = repository

    def list_tables(self, schema_name: str) -> List[str]:
        """
        List base tables in ``schema_name``.

        The catalog gives no ordering guarantee; callers sort.

        Raises:
            IntrospectionError: Catalog query failed
        """
        try:
            rows = self.repository.fetch_all(LIST_TABLES_SQL, (schema_name, BASE_TABLE))
        except DatabaseError as e:
            raise IntrospectionError(
                f"Cannot list tables in schema {schema_name}: {e}",
                schema_name=schema_name,
            ) from e

        tables = [row["table_name"] for row in rows]
        logger.debug(f"Schema {schema_name}: {len(tables)} base tables")
        return tables

    def describe_table(self, schema_name: str, table_name: str) -> TableDefinition:
        """
        Read the column definitions of one table.

        Raises:
            IntrospectionError: Catalog query failed or a row was malformed
        """
        try:
            rows = self.repository.fetch_all(DESCRIBE_TABLE_SQL, (schema_name, table_name))
        except DatabaseError as e:
            raise IntrospectionError(
                f"Cannot describe {schema_name}.{table_name}: {e}",
                schema_name=schema_name,
                table_name=table_name,
            ) from e

        try:
            fields = tuple(FieldDefinition.from_catalog_row(row) for row in rows)
        except (KeyError, ValueError) as e:
            raise IntrospectionError(
                f"Unexpected catalog row for {schema_name}.{table_name}: {e}",
                schema_name=schema_name,
                table_name=table_name,
            ) from e

        logger.debug(f"   {schema_name}.{table_name}: {len(fields)} columns")
        return TableDefinition(schema_name=schema_name, table_name=table_name, fields=fields)


__all__ = [
    "SchemaIntrospector",
    "LIST_TABLES_SQL",
    "DESCRIBE_TABLE_SQL",
]
