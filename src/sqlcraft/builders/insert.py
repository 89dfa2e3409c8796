"""
INSERT builder.

Supports plain value rows, rows extracted from models, conflict handling
(ignore or upsert) and RETURNING:

    db.insert("users").columns("id", "name").values(1, "Ada").values(2, "Grace").run()

    (
        db.insert("plans")
        .models(plans)
        .on_conflict("plan_code", null_guard=True)
        .returning("id")
        .all()
    )
"""

import dataclasses
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel
from typing_extensions import Self

from ..core.expressions import Column, Excluded, Expression, Function, Identifier, to_expression
from ..exceptions import ContractViolationError
from ..query.insert import ConflictAction, ConflictResolutionStrategy, Insert, Returning
from .clauses import ColumnLike, column_reference, table_reference
from .query import QueryFetcher

if TYPE_CHECKING:
    from ..database import Database

UpdateSpec = Union[Sequence[str], Mapping[str, Any], None]


def model_values(model: Any) -> Dict[str, Any]:
    """
    Column -> value mapping of a dict, dataclass instance or pydantic model.

    Raises:
        TypeError: For any other object
    """
    if isinstance(model, Mapping):
        return dict(model)
    if isinstance(model, BaseModel):
        return model.model_dump()
    if dataclasses.is_dataclass(model) and not isinstance(model, type):
        return {field.name: getattr(model, field.name) for field in dataclasses.fields(model)}
    raise TypeError(
        f"Cannot extract INSERT values from {type(model).__name__}; "
        "expected a mapping, dataclass or pydantic model"
    )


class InsertBuilder(QueryFetcher):
    """Builds and runs an INSERT. Fetch methods return RETURNING rows."""

    def __init__(self, database: "Database", table: ColumnLike):
        self.database = database
        self.insert = Insert(table_reference(table))

    @property
    def query(self) -> Expression:
        return self.insert

    def columns(self, *names: ColumnLike) -> Self:
        """Set the column list (replacing any earlier one)."""
        self.insert.columns = [
            Identifier(name) if isinstance(name, str) else name for name in names
        ]
        return self

    def values(self, *values: Any) -> Self:
        """Append one row; plain values are bound, expressions (e.g. ``Literal.DEFAULT``) are kept."""
        self.insert.values.append([to_expression(value) for value in values])
        return self

    def rows(self, rows: Iterable[Sequence[Any]]) -> Self:
        for row in rows:
            self.values(*row)
        return self

    def model(self, model: Any) -> Self:
        """
        Append a row taken from a mapping, dataclass or pydantic model.

        The first model sets the column list when none was given; later
        models must carry exactly the same fields.

        Raises:
            ContractViolationError: If the model's fields differ from the columns
        """
        data = model_values(model)
        if not self.insert.columns:
            self.columns(*data.keys())

        names = self._column_names()
        if set(data) != set(names):
            raise ContractViolationError(
                f"Model fields {sorted(data)} do not match INSERT columns {names}"
            )
        return self.values(*(data[name] for name in names))

    def models(self, models: Iterable[Any]) -> Self:
        for model in models:
            self.model(model)
        return self

    def ignoring_conflicts(self, *targets: str) -> Self:
        """Keep the existing row on a unique-key conflict. Replaces any earlier strategy."""
        self.insert.conflict_strategy = ConflictResolutionStrategy(
            targets=[Identifier(target) for target in targets],
            action=ConflictAction.IGNORE,
        )
        return self

    def on_conflict(
        self,
        *targets: str,
        update: UpdateSpec = None,
        null_guard: bool = False,
        where: Optional[Expression] = None,
    ) -> Self:
        """
        Update the existing row on a unique-key conflict. Replaces any earlier strategy.

        Args:
            targets: Conflict target columns
            update: Column names to overwrite with the proposed values, or a
                ``{column: value}`` mapping. Defaults to every inserted
                column that is not a target, so set the
                columns first.
            null_guard: Only fill columns that are NULL in the existing row
            where: Optional filter on the update (ON CONFLICT dialects)
        """
        if update is None:
            update = [name for name in self._column_names() if name not in targets]

        if isinstance(update, Mapping):
            assignments = [
                (Identifier(name), to_expression(value)) for name, value in update.items()
            ]
        else:
            assignments = [(Identifier(name), self._proposed(name, null_guard)) for name in update]

        self.insert.conflict_strategy = ConflictResolutionStrategy(
            targets=[Identifier(target) for target in targets],
            action=ConflictAction.UPDATE,
            assignments=assignments,
            predicate=where,
        )
        return self

    def returning(self, *columns: ColumnLike) -> Self:
        """Return columns of the inserted rows (``*`` when none are named)."""
        self.insert.returning = Returning([column_reference(column) for column in columns])
        return self

    def _column_names(self) -> List[str]:
        return [
            column.name for column in self.insert.columns if isinstance(column, Identifier)
        ]

    def _proposed(self, name: str, null_guard: bool) -> Expression:
        if not null_guard:
            return Excluded(name)
        return Function("COALESCE", [Column(name, self.insert.table), Excluded(name)])
