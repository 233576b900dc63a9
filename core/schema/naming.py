# ============================================================================
# NAMING & TYPE MAPPING
# ============================================================================
# STATUS: Core - Identifier and type transforms for generated code
# PURPOSE: Stable class/constant names and catalog -> TypeScript type mapping
# CREATED: 18 OCT 2026
# EXPORTS: to_type_name, to_constant_name, to_output_type, TYPE_MAP
# ============================================================================
"""
Naming and Type Mapping.

These transforms define the public surface of the generated module, so they
must stay byte-stable across releases:

    to_type_name("order_item")      -> "OrderItem"
    to_constant_name("order_item")  -> "ORDER_ITEM"
    to_output_type("numeric")       -> "number"
    to_output_type("uuid")          -> "uuid"   (unmapped types pass through)
"""

from typing import Dict


# ============================================================================
# TYPE MAPPING
# ============================================================================

TYPE_MAP: Dict[str, str] = {
    # Numeric
    "integer": "number",
    "numeric": "number",

    # Character
    "character": "string",
    "character varying": "string",
    "text": "string",

    # Date/time
    "date": "Date",
    "timestamp without time zone": "Date",
}


def to_output_type(catalog_type: str) -> str:
    """
    Map a catalog data_type to its TypeScript type.

    Unrecognized types are returned unchanged so new catalog types never
    break generation.
    """
    return TYPE_MAP.get(catalog_type, catalog_type)


# ============================================================================
# IDENTIFIERS
# ============================================================================

def to_type_name(identifier: str) -> str:
    """
    Convert a snake_case identifier to a class name.

    Underscores are dropped and the character following each one (and the
    first character) is uppercased. Other characters keep their case.
    """
    result = []
    upper = True
    for char in identifier:
        if char == "_":
            upper = True
        else:
            result.append(char.upper() if upper else char)
            upper = False
    return "".join(result)


def to_constant_name(identifier: str) -> str:
    """Uppercase an identifier verbatim for use as a static constant."""
    return identifier.upper()


def quote_literal(value: str) -> str:
    """Render a single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


__all__ = [
    "TYPE_MAP",
    "to_output_type",
    "to_type_name",
    "to_constant_name",
    "quote_literal",
]
