# ============================================================================
# CATALOG TO TYPESCRIPT MODEL GENERATOR
# ============================================================================
# STATUS: Core - Code generation from catalog metadata
# PURPOSE: Render tsooq table/field descriptors and write <schema>.ts
# CREATED: 18 OCT 2026
# EXPORTS: TypeScriptModelGenerator
# DEPENDENCIES: core.schema.naming
# ============================================================================
"""
Catalog to TypeScript Model Generator.

Renders TableDefinitions as tsooq descriptors. For each table:

    export class OrderItem extends TableImpl {
      private static readonly _TABLE_NAME = 'order_item';
      static readonly ID: Field<number> = new FieldImpl<number>(...);
      private static readonly _FIELDS: Field<any>[] = [OrderItem.ID];

      constructor() {
        super(OrderItem._TABLE_NAME, undefined, OrderItem._FIELDS);
      }
    }

followed by one ``Tables`` registry listing every table. Rendering is pure
and deterministic: the same TableDefinitions always give the same bytes.

Usage:
    generator = TypeScriptModelGenerator()
    path = generator.emit(tables, Path("src/generated"), "public")
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Sequence, Union

from core.errors import OutputWriteError
from core.models.catalog import FieldDefinition, TableDefinition
from core.schema.naming import (
    quote_literal,
    to_constant_name,
    to_output_type,
    to_type_name,
)

logger = logging.getLogger(__name__)


class TypeScriptModelGenerator:
    """
    Convert catalog metadata to a tsooq TypeScript module.

    Holds no per-run state; one instance can render any number of schemas.
    """

    LIBRARY = "tsooq"
    FILE_EXTENSION = ".ts"
    REGISTRY_CLASS = "Tables"

    # =========================================================================
    # RENDERING
    # =========================================================================

    def render_header(self) -> str:
        """Import of the query-building library's base types."""
        return f"import {{ Field, FieldImpl, Table, TableImpl }} from {quote_literal(self.LIBRARY)};\n\n"

    def render_field(self, class_name: str, field: FieldDefinition) -> str:
        """Render one static field descriptor line."""
        ts_type = to_output_type(field.data_type)
        args = ", ".join([
            f"{class_name}._TABLE_NAME",
            str(field.ordinal),
            quote_literal(field.field_name),
            "undefined",
            quote_literal(field.data_type),
            _ts_bool(field.is_nullable),
            _ts_bool(field.has_default),
        ])
        return (
            f"  static readonly {to_constant_name(field.field_name)}: Field<{ts_type}> = "
            f"new FieldImpl<{ts_type}>({args});\n"
        )

    def render_table(self, table: TableDefinition) -> str:
        """
        Render the class for one table.

        Fields appear in the order given, which is the catalog ordinal order.
        """
        class_name = to_type_name(table.table_name)

        lines = [
            f"export class {class_name} extends TableImpl {{\n",
            f"  private static readonly _TABLE_NAME = {quote_literal(table.table_name)};\n",
        ]
        lines.extend(self.render_field(class_name, field) for field in table.fields)

        field_refs = ", ".join(
            f"{class_name}.{to_constant_name(field.field_name)}" for field in table.fields
        )
        lines.append(f"  private static readonly _FIELDS: Field<any>[] = [{field_refs}];\n\n")
        lines.append("  constructor() {\n")
        lines.append(f"    super({class_name}._TABLE_NAME, undefined, {class_name}._FIELDS);\n")
        lines.append("  }\n")
        lines.append("}\n\n")
        return "".join(lines)

    def render_registry(self, tables: Sequence[TableDefinition]) -> str:
        """Render the registry class aggregating every table instance."""
        lines = [f"export class {self.REGISTRY_CLASS} {{\n"]
        for table in tables:
            lines.append(
                f"  static readonly {to_constant_name(table.table_name)}: Table = "
                f"new {to_type_name(table.table_name)}();\n"
            )
        lines.append("}\n")
        return "".join(lines)

    def render_module(self, tables: Sequence[TableDefinition]) -> str:
        """Render the complete module: header, one class per table, registry."""
        parts: List[str] = [self.render_header()]
        parts.extend(self.render_table(table) for table in tables)
        parts.append(self.render_registry(tables))
        return "".join(parts)

    # =========================================================================
    # OUTPUT
    # =========================================================================

    def output_path(self, output_dir: Union[str, Path], schema_name: str) -> Path:
        return Path(output_dir) / f"{schema_name}{self.FILE_EXTENSION}"

    def emit(
        self,
        tables: Sequence[TableDefinition],
        output_dir: Union[str, Path],
        schema_name: str,
    ) -> Path:
        """
        Write the module for ``schema_name`` into ``output_dir``.

        The directory is created if missing. Content goes to a temporary
        file in the same directory and is moved into place in one step, so a
        failed write never leaves a partial module behind.

        Args:
            tables: Table definitions in registry order
            output_dir: Target directory
            schema_name: Schema name; becomes the file name

        Returns:
            Path of the written file

        Raises:
            OutputWriteError: Directory creation or file write failed
        """
        content = self.render_module(tables)
        target = self.output_path(output_dir, schema_name)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputWriteError(f"Cannot create output directory {target.parent}: {e}", path=str(target)) from e

        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                newline="\n",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(content)
            # NamedTemporaryFile is created 0600
            os.chmod(tmp_path, 0o666 & ~_current_umask())
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise OutputWriteError(f"Cannot write {target}: {e}", path=str(target)) from e

        logger.info(f"Wrote {len(tables)} table models to {target}")
        return target


def _ts_bool(value: bool) -> str:
    return "true" if value else "false"


def _current_umask() -> int:
    """Process umask (os.umask can only be read by setting it)."""
    mask = os.umask(0o022)
    os.umask(mask)
    return mask


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["TypeScriptModelGenerator"]
