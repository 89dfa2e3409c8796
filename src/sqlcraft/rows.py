"""
Result rows and structured decoding.

Decoding is delegated to pydantic: any type a ``TypeAdapter`` accepts
(pydantic models, dataclasses, TypedDicts, ``dict``) can be requested.
"""

from functools import lru_cache
from typing import Any, Iterator, List, Mapping, Optional, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from .exceptions import RowDecodingError

T = TypeVar("T")


@lru_cache(maxsize=256)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def _model_name(model: Any) -> str:
    return getattr(model, "__name__", repr(model))


class Row(Mapping[str, Any]):
    """
    A read-only result row keyed by column name, in driver column order.

    Example:
        >>> row = Row({"id": 1, "name": "Ada"})
        >>> row.column("name")
        'Ada'
        >>> row.columns
        ['id', 'name']
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]):
        self._data = dict(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Row({self._data!r})"

    @property
    def columns(self) -> List[str]:
        return list(self._data)

    def contains(self, column: str) -> bool:
        return column in self._data

    def column(self, name: str) -> Any:
        """
        Value of column ``name``.

        Raises:
            RowDecodingError: If the row has no such column
        """
        try:
            return self._data[name]
        except KeyError:
            raise RowDecodingError("Column not found in row", column=name) from None

    def decode(self, model: Type[T], prefix: Optional[str] = None) -> T:
        """
        Decode the row into ``model``.

        Args:
            model: Target type
            prefix: Only use columns starting with ``prefix`` (stripped before
                decoding), e.g. ``"user_"`` for joined rows

        Raises:
            RowDecodingError: If validation fails
        """
        data = self._data
        if prefix:
            data = {
                key[len(prefix):]: value for key, value in data.items() if key.startswith(prefix)
            }
        try:
            return _adapter(model).validate_python(data)
        except ValidationError as e:
            errors = e.errors()
            column = None
            if errors and errors[0].get("loc"):
                column = str(errors[0]["loc"][0])
            raise RowDecodingError(
                f"Row validation failed: {e.error_count()} error(s)",
                model=_model_name(model),
                column=column,
            ) from e
