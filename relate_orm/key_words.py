KEY_WORDS = ["order", "group", "select", "table", "where", "from", "index", "references", "key"]


def get_column_name(name: str) -> str:
    """Return the column name, escaping it if it's a SQL keyword."""
    if name.lower() in KEY_WORDS:
        return f"[{name}]"
    return name


def reverse_column_name(escaped_name: str) -> str:
    """Return the original column name from an escaped name."""
    if escaped_name.startswith("[") and escaped_name.endswith("]"):
        return escaped_name[1:-1]
    return escaped_name


def get_table_reference(table: str, schema: str | None = None, delimiter: str = ".") -> str:
    """Return the table reference for a query, optionally inside a schema.

    With the default "." delimiter the schema names an attached SQLite
    database; any other delimiter folds the schema into the table name.
    """
    if not schema:
        return get_column_name(table)
    if delimiter == ".":
        return f"{get_column_name(schema)}.{get_column_name(table)}"
    return get_column_name(f"{schema}{delimiter}{table}")
