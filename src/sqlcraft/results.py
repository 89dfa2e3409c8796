"""
Success/failure values used to carry per-row decode outcomes.

Example:
    >>> Result.catching(int, "42").unwrap()
    42
    >>> Result.catching(int, "x").is_success
    False
"""

from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Result(Generic[T]):
    """Either a value or the exception that prevented producing it."""

    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[BaseException] = None):
        self._value = value
        self._error = error

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Result[T]":
        return cls(error=error)

    @classmethod
    def catching(cls, func: Callable[..., T], *args: Any, **kwargs: Any) -> "Result[T]":
        """Call ``func`` and capture its return value or the ``Exception`` it raised."""
        try:
            return cls.success(func(*args, **kwargs))
        except Exception as e:
            return cls.failure(e)

    @property
    def is_success(self) -> bool:
        return self._error is None

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def unwrap(self) -> T:
        """Return the value, or raise the captured exception."""
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.failure({self._error!r})"
        return f"Result.success({self._value!r})"
