"""
SQL identifier and string literal quoting.

Provides the escaping primitives dialects build on, so that table and
column names (including non-ASCII ones) and inlined string literals are
always emitted safely.
"""

from typing import Optional


def quote_identifier(name: str, quote: str = '"') -> str:
    """
    Quote a SQL identifier (table or column name).

    Internal occurrences of the quote character are escaped by doubling.

    Args:
        name: The identifier to quote
        quote: Quote character of the dialect (``"`` or `````)

    Returns:
        Properly quoted identifier

    Examples:
        >>> quote_identifier("年金计划号")
        '"年金计划号"'
        >>> quote_identifier('column"name')
        '"column""name"'
        >>> quote_identifier("table", quote="`")
        '`table`'
    """
    escaped = name.replace(quote, quote + quote)
    return f"{quote}{escaped}{quote}"


def quote_string(value: str, quote: str = "'", escape_percent: bool = False) -> str:
    """
    Quote a string for inlining as a SQL literal.

    Args:
        value: Raw string value
        quote: Literal quote character of the dialect
        escape_percent: Double ``%`` signs for drivers using ``format`` placeholders

    Examples:
        >>> quote_string("O'Brien")
        "'O''Brien'"
        >>> quote_string("100%", escape_percent=True)
        "'100%%'"
    """
    escaped = value.replace(quote, quote + quote)
    if escape_percent:
        escaped = escaped.replace("%", "%%")
    return f"{quote}{escaped}{quote}"


def qualify_table(table: str, schema: Optional[str] = None, quote: str = '"') -> str:
    """
    Quote a table name with an optional schema prefix.

    Schema and table are quoted separately, so ``public.users`` names the
    ``users`` table of the ``public`` schema.

    Examples:
        >>> qualify_table("年金计划", schema="mapping")
        '"mapping"."年金计划"'
        >>> qualify_table("users")
        '"users"'
        >>> qualify_table("users", schema="public", quote="`")
        '`public`.`users`'
    """
    quoted_table = quote_identifier(table, quote)
    if schema:
        return f"{quote_identifier(schema, quote)}.{quoted_table}"
    return quoted_table
