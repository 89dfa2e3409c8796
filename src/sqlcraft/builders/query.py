"""
Builder-level execution.

:class:`QueryBuilder` runs a statement without collecting output.
:class:`QueryFetcher` adds ``all``/``first`` collection and typed decoding.
Every method here goes through ``run`` or ``run_recording_performance``,
which in turn only call the ``Database.execute*`` methods.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, Type

from ..core.expressions import Expression
from ..futures import map_future, settle_future
from ..monitoring.performance import PerformanceRecord
from ..results import Result

if TYPE_CHECKING:
    from ..database import Database


def _discard(_: Any) -> None:
    return None


def _head(items: List[Any]) -> Optional[Any]:
    return items[0] if items else None


class QueryBuilder(ABC):
    """A builder whose statement can be executed against ``database``."""

    database: "Database"

    @property
    @abstractmethod
    def query(self) -> Expression:
        """The statement assembled so far."""

    def run(self) -> "Future[None]":
        return self.database.execute(self.query, _discard)

    def run_recording_performance(self) -> "Future[PerformanceRecord]":
        return self.database.execute_with_performance_tracking(self.query, _discard)


class QueryFetcher(QueryBuilder):
    """
    A builder whose statement returns rows.

    ``decoding`` turns every row into an instance of the given type (see
    :meth:`sqlcraft.rows.Row.decode`). With ``all``/``first`` a single row
    that fails to decode fails the whole future; rows decoded so far are
    discarded.
    """

    def run(
        self,
        handler: Optional[Callable[[Any], None]] = None,
        decoding: Optional[Type[Any]] = None,
    ) -> "Future[None]":
        """
        Execute, passing each row (or ``Result`` when ``decoding``) to ``handler``.

        The returned future completes once every row has been delivered.
        """
        handler = handler or _discard
        if decoding is not None:
            return self.database.execute_decoding(self.query, decoding, handler)
        return self.database.execute(self.query, handler)

    def run_recording_performance(
        self,
        handler: Optional[Callable[[Any], None]] = None,
        decoding: Optional[Type[Any]] = None,
    ) -> "Future[PerformanceRecord]":
        handler = handler or _discard
        if decoding is not None:
            return self.database.execute_decoding_with_performance_tracking(
                self.query, decoding, handler
            )
        return self.database.execute_with_performance_tracking(self.query, handler)

    def all(self, decoding: Optional[Type[Any]] = None) -> "Future[List[Any]]":
        """Collect every row (or decoded model) into a list."""
        items: List[Any] = []
        collected: "Future[List[Any]]" = Future()
        handler = self._collector(items, collected, decoding)
        settle_future(self.run(handler, decoding=decoding), collected, lambda _: items)
        return collected

    def all_recording_performance(
        self, decoding: Optional[Type[Any]] = None
    ) -> "Future[Tuple[List[Any], PerformanceRecord]]":
        items: List[Any] = []
        collected: "Future[Tuple[List[Any], PerformanceRecord]]" = Future()
        handler = self._collector(items, collected, decoding)
        settle_future(
            self.run_recording_performance(handler, decoding=decoding),
            collected,
            lambda record: (items, record),
        )
        return collected

    def first(self, decoding: Optional[Type[Any]] = None) -> "Future[Optional[Any]]":
        """First row (or decoded model), or None. Collects every row, then takes the head."""
        return map_future(self.all(decoding=decoding), _head)

    def first_recording_performance(
        self, decoding: Optional[Type[Any]] = None
    ) -> "Future[Tuple[Optional[Any], PerformanceRecord]]":
        return map_future(
            self.all_recording_performance(decoding=decoding),
            lambda outcome: (_head(outcome[0]), outcome[1]),
        )

    @staticmethod
    def _collector(
        items: List[Any], collected: "Future[Any]", decoding: Optional[Type[Any]]
    ) -> Callable[[Any], None]:
        if decoding is None:
            return items.append

        def _collect(result: Result[Any]) -> None:
            if result.is_success:
                items.append(result.unwrap())
            elif not collected.done():
                # Fail right away; the rows collected so far are never surfaced
                items.clear()
                collected.set_exception(result.error)

        return _collect
