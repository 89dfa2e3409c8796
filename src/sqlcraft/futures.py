"""Helpers for composing ``concurrent.futures.Future`` objects."""

from concurrent.futures import Future
from typing import Any, Callable, TypeVar

T = TypeVar("T")
U = TypeVar("U")


def completed_future(value: Any = None) -> "Future[Any]":
    future: "Future[Any]" = Future()
    future.set_result(value)
    return future


def failed_future(error: BaseException) -> "Future[Any]":
    future: "Future[Any]" = Future()
    future.set_exception(error)
    return future


def settle_future(
    source: "Future[T]", target: "Future[U]", transform: Callable[[T], U]
) -> None:
    """
    Complete ``target`` with ``transform(result)`` once ``source`` is done.

    ``target`` is left alone if something else completed it first, so a
    failure reported early (e.g. a row that did not decode) is kept.
    """

    def _done(done: "Future[T]") -> None:
        if target.done():
            return
        if done.cancelled():
            target.cancel()
            return
        error = done.exception()
        if error is not None:
            target.set_exception(error)
            return
        try:
            target.set_result(transform(done.result()))
        except Exception as e:
            target.set_exception(e)

    source.add_done_callback(_done)


def map_future(future: "Future[T]", transform: Callable[[T], U]) -> "Future[U]":
    """
    Return a future resolving to ``transform(result)``.

    A failure of ``future``, or an exception raised by ``transform``, fails
    the returned future.
    """
    mapped: "Future[U]" = Future()
    settle_future(future, mapped, transform)
    return mapped
