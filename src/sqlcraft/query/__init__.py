"""Statement nodes: SELECT and INSERT."""

from .insert import ConflictAction, ConflictResolutionStrategy, Insert, Returning
from .select import LockingClause, LockMode, Select

__all__ = [
    "ConflictAction",
    "ConflictResolutionStrategy",
    "Insert",
    "LockMode",
    "LockingClause",
    "Returning",
    "Select",
]
