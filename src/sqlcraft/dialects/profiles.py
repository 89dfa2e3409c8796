"""
Custom dialect profiles loaded from YAML.

A profile derives a new dialect from a registered one and overrides its
capability flags, e.g. to describe an embedded engine that only accepts
single-row INSERT statements:

    profiles:
      legacy_sqlite:
        base: sqlite
        supports_multirow_insert: false
        supports_returning: false
        conflict_syntax: legacy_sqlite

Loaded profiles are registered and can be fetched with
``sqlcraft.dialects.get_dialect("legacy_sqlite")``.
"""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Set, Tuple, Type

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import DialectProfileError
from ..utils.logging import get_logger
from . import registry
from .base import ConflictSyntax, Dialect

logger = get_logger(__name__)

_LOADED_PATHS: Set[str] = set()

_CAPABILITY_FIELDS = (
    "supports_multirow_insert",
    "supports_returning",
    "supports_locking_reads",
    "conflict_syntax",
    "literal_default",
    "share_lock",
)


class DialectProfile(BaseModel):
    """Schema for a single dialect profile."""

    base: str = Field("generic", description="Registered dialect to derive from")
    description: Optional[str] = Field(None, description="Human-readable description")
    paramstyle: Optional[Literal["qmark", "format", "numeric", "named", "dollar"]] = Field(
        None, description="Default bind placeholder style"
    )
    identifier_quote: Optional[Literal['"', "`"]] = Field(
        None, description="Identifier quote character"
    )
    version: Optional[List[int]] = Field(None, description="Assumed server version")
    supports_multirow_insert: Optional[bool] = None
    supports_returning: Optional[bool] = None
    supports_locking_reads: Optional[bool] = None
    conflict_syntax: Optional[ConflictSyntax] = None
    literal_default: Optional[str] = None
    share_lock: Optional[str] = None

    def capability_overrides(self) -> Dict[str, Any]:
        """Capability flags explicitly set by the profile."""
        return {
            field_name: getattr(self, field_name)
            for field_name in _CAPABILITY_FIELDS
            if getattr(self, field_name) is not None
        }


class DialectProfilesConfig(BaseModel):
    """Schema for the complete profiles file."""

    profiles: Dict[str, DialectProfile] = Field(
        ..., min_length=1, description="Profile name -> profile"
    )


def build_dialect_class(name: str, profile: DialectProfile) -> Type[Dialect]:
    """
    Derive a dialect class from ``profile``.

    Capability overrides are re-applied after the base initializer, so they
    win over any version-based gating the base dialect performs.

    Raises:
        DialectProfileError: If the base dialect is not registered
    """
    try:
        base_cls = registry.available()[profile.base.lower()]
    except KeyError:
        raise DialectProfileError(
            f"Profile '{name}' derives from unknown dialect '{profile.base}'"
        ) from None

    overrides = profile.capability_overrides()
    default_version: Optional[Tuple[int, ...]] = (
        tuple(profile.version) if profile.version else None
    )

    def __init__(self, paramstyle=None, version=None):
        base_cls.__init__(self, paramstyle=paramstyle, version=version or default_version)
        for attr, value in overrides.items():
            setattr(self, attr, value)

    attrs: Dict[str, Any] = {
        "name": name,
        "__init__": __init__,
        "__doc__": profile.description or f"Dialect profile '{name}' derived from {base_cls.name}.",
    }
    if profile.paramstyle:
        attrs["paramstyle"] = profile.paramstyle
    if profile.identifier_quote:
        attrs["identifier_quote"] = profile.identifier_quote

    class_name = "".join(part.capitalize() for part in name.split("_")) + "Dialect"
    return type(class_name, (base_cls,), attrs)


def load_dialect_profiles(path: str) -> List[str]:
    """
    Load, validate and register the dialect profiles declared in ``path``.

    Returns:
        Names of the registered profiles, in file order

    Raises:
        DialectProfileError: If the file is missing, is not valid YAML, or
            fails schema validation
    """
    config_path = Path(path)

    if not config_path.exists():
        raise DialectProfileError(f"Dialect profile file not found: {path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise DialectProfileError(f"Invalid YAML in dialect profile file: {e}") from e

    if not isinstance(data, dict):
        raise DialectProfileError(
            f"Dialect profile file must contain a mapping, got {type(data).__name__}"
        )

    try:
        config = DialectProfilesConfig(**data)
    except ValidationError as e:
        raise DialectProfileError(f"Dialect profile validation failed: {e}") from e

    names = []
    for name, profile in config.profiles.items():
        registry.register(build_dialect_class(name, profile))
        names.append(name)

    logger.info(
        "dialect.profiles.loaded",
        config_path=str(config_path),
        profile_count=len(names),
        profiles=names,
    )
    return names


def ensure_profiles_loaded(path: Optional[str]) -> None:
    """Load profiles from ``path`` once per process, if a path is configured."""
    if not path or path in _LOADED_PATHS:
        return
    load_dialect_profiles(path)
    _LOADED_PATHS.add(path)


__all__ = [
    "DialectProfile",
    "DialectProfilesConfig",
    "build_dialect_class",
    "ensure_profiles_loaded",
    "load_dialect_profiles",
]
