"""
Dialect capability descriptor.

A dialect is consulted by expression nodes (feature gating) and by the
serializer (identifier quoting, bind placeholder syntax). Instances are
configured once per connection and never mutated afterwards.
"""

from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ..core.identifier import qualify_table, quote_identifier, quote_string

VersionInfo = Tuple[int, ...]

PARAMSTYLES = ("qmark", "format", "numeric", "named", "dollar")

# Driver-reported DB-API paramstyles that map onto one we emit
_PARAMSTYLE_ALIASES = {"pyformat": "format"}


class ConflictSyntax(str, Enum):
    """How a dialect spells unique-key conflict resolution on INSERT."""

    STANDARD = "standard"  # ON CONFLICT (...) DO NOTHING | DO UPDATE SET ...
    MYSQL = "mysql"  # INSERT IGNORE ... | ON DUPLICATE KEY UPDATE ...
    LEGACY_SQLITE = "legacy_sqlite"  # INSERT OR IGNORE ...
    NONE = "none"


def normalize_paramstyle(paramstyle: str) -> str:
    """
    Map a DB-API paramstyle onto one of the placeholder styles sqlcraft emits.

    Raises:
        ValueError: If the paramstyle is not supported
    """
    style = _PARAMSTYLE_ALIASES.get(paramstyle, paramstyle)
    if style not in PARAMSTYLES:
        raise ValueError(
            f"Unsupported paramstyle '{paramstyle}'. Expected one of: {', '.join(PARAMSTYLES)}"
        )
    return style


class Dialect:
    """
    Base SQL dialect.

    Class attributes describe the capabilities of the backend; subclasses
    override them and may refine them per server version in ``__init__``.
    """

    name = "generic"
    identifier_quote = '"'
    literal_quote = "'"
    paramstyle = "qmark"

    supports_multirow_insert = True
    supports_returning = False
    supports_locking_reads = False
    conflict_syntax = ConflictSyntax.NONE

    literal_default = "DEFAULT"
    literal_true = "TRUE"
    literal_false = "FALSE"
    share_lock = "FOR SHARE"
    update_lock = "FOR UPDATE"
    # LIMIT value emitted when OFFSET is requested without LIMIT (None: omit LIMIT)
    unbounded_limit: Optional[str] = None

    def __init__(
        self,
        paramstyle: Optional[str] = None,
        version: Optional[VersionInfo] = None,
    ):
        """
        Initialize the dialect.

        Args:
            paramstyle: Bind placeholder style; defaults to the dialect's own
            version: Server version tuple used for feature gating (optional)
        """
        self.paramstyle = normalize_paramstyle(paramstyle or type(self).paramstyle)
        self.version = tuple(version) if version else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(paramstyle={self.paramstyle!r}, version={self.version!r})"

    def version_at_least(self, *minimum: int) -> bool:
        """Return True when no version is known or the known version is >= minimum."""
        if self.version is None:
            return True
        return self.version[: len(minimum)] >= minimum

    def quote(self, identifier: str) -> str:
        """Quote an identifier using the dialect's quote character."""
        return quote_identifier(identifier, quote=self.identifier_quote)

    def qualify(self, table: str, schema: Optional[str] = None) -> str:
        """Quote a table name, prefixed by its quoted schema when given."""
        return qualify_table(table, schema, quote=self.identifier_quote)

    def literal_string(self, value: str) -> str:
        """Inline a string literal, escaping quotes (and ``%`` for format placeholders)."""
        return quote_string(
            value,
            quote=self.literal_quote,
            escape_percent=self.paramstyle == "format",
        )

    def literal_boolean(self, value: bool) -> str:
        return self.literal_true if value else self.literal_false

    def bind_placeholder(self, position: int) -> str:
        """
        Placeholder text for the bind at 1-based ``position``.

        Examples:
            qmark -> ``?``, format -> ``%s``, numeric -> ``:1``,
            named -> ``:p1``, dollar -> ``$1``
        """
        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        if self.paramstyle == "numeric":
            return f":{position}"
        if self.paramstyle == "named":
            return f":p{position}"
        return f"${position}"

    def placeholder_pattern(self) -> str:
        """Regular expression matching one placeholder in serialized text."""
        return {
            "qmark": r"\?",
            "format": r"%s",
            "numeric": r":\d+",
            "named": r":p\d+",
            "dollar": r"\$\d+",
        }[self.paramstyle]

    def encode_parameters(self, binds: Sequence[Any]) -> Union[Tuple[Any, ...], Dict[str, Any]]:
        """Shape the ordered bind list the way the driver expects it."""
        if self.paramstyle == "named":
            return {f"p{index}": value for index, value in enumerate(binds, start=1)}
        return tuple(binds)

    def conflict_modifier(self, ignore: bool) -> Optional[str]:
        """
        Statement-level keyword replacing the trailing conflict clause, if any.

        Args:
            ignore: True for "do nothing" resolution, False for updates
        """
        if not ignore:
            return None
        if self.conflict_syntax is ConflictSyntax.MYSQL:
            return "IGNORE"
        if self.conflict_syntax is ConflictSyntax.LEGACY_SQLITE:
            return "OR IGNORE"
        return None
