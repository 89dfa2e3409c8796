"""
Per-execution performance record.

A :class:`PerformanceRecord` is an ordered bag of metric values collected
while one statement executes. Values are tagged (:class:`Duration`,
:class:`Count`, :class:`Flag`, :class:`Note`) and arithmetic is only defined
between values of the same kind.

Merging is deliberately asymmetric: numeric metrics roll up into a parent
record, while flags and notes describe a single execution and are dropped by
:meth:`PerformanceRecord.aggregate`.

Example:
    >>> record = PerformanceRecord()
    >>> record.record(Duration(0.5), Metric.SERIALIZATION_DURATION)
    >>> record.record_additional(Count(3), Metric.BOUND_PARAMETER_COUNT)
    >>> print(record)
    Query metrics:
      sqlcraft.metric.serializationDuration: 0.5000s
      sqlcraft.metric.boundParameterCount: 3
"""

import re
import time
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Union

from ..exceptions import MetricKindMismatchError


def format_duration(seconds: float) -> str:
    """
    Render a duration in seconds with four decimals, rounding half up.

    Examples:
        >>> format_duration(1.23456)
        '1.2346s'
        >>> format_duration(0.00005)
        '0.0001s'
    """
    quantized = Decimal(str(seconds)).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
    return f"{quantized}s"


class MetricKind(str, Enum):
    DURATION = "duration"
    COUNT = "count"
    FLAG = "flag"
    NOTE = "note"


@dataclass(frozen=True)
class Duration:
    seconds: float

    kind: ClassVar[MetricKind] = MetricKind.DURATION
    is_numeric: ClassVar[bool] = True

    def __add__(self, other: "Duration") -> "Duration":
        return Duration(self.seconds + other.seconds)

    def __sub__(self, other: "Duration") -> "Duration":
        return Duration(self.seconds - other.seconds)

    def __str__(self) -> str:
        return format_duration(self.seconds)

    @property
    def raw(self) -> float:
        return self.seconds


@dataclass(frozen=True)
class Count:
    value: int

    kind: ClassVar[MetricKind] = MetricKind.COUNT
    is_numeric: ClassVar[bool] = True

    def __add__(self, other: "Count") -> "Count":
        return Count(self.value + other.value)

    def __sub__(self, other: "Count") -> "Count":
        return Count(self.value - other.value)

    def __str__(self) -> str:
        return str(self.value)

    @property
    def raw(self) -> int:
        return self.value


@dataclass(frozen=True)
class Flag:
    value: bool

    kind: ClassVar[MetricKind] = MetricKind.FLAG
    is_numeric: ClassVar[bool] = False

    def __str__(self) -> str:
        return "true" if self.value else "false"

    @property
    def raw(self) -> bool:
        return self.value


@dataclass(frozen=True)
class Note:
    text: str

    kind: ClassVar[MetricKind] = MetricKind.NOTE
    is_numeric: ClassVar[bool] = False

    def __add__(self, other: "Note") -> "Note":
        return Note(self.text + other.text)

    def __str__(self) -> str:
        return self.text

    @property
    def raw(self) -> str:
        return self.text


MetricValue = Union[Duration, Count, Flag, Note]

_ZERO: Dict[MetricKind, MetricValue] = {
    MetricKind.DURATION: Duration(0.0),
    MetricKind.COUNT: Count(0),
    MetricKind.NOTE: Note(""),
}


def coerce_value(value: Any) -> MetricValue:
    """
    Wrap a plain Python value in its metric value type.

    ``bool`` becomes :class:`Flag`, ``int`` :class:`Count`, ``float``
    :class:`Duration` and ``str`` :class:`Note`. Tagged values pass through.

    Raises:
        TypeError: For any other type
    """
    if isinstance(value, (Duration, Count, Flag, Note)):
        return value
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return Flag(value)
    if isinstance(value, int):
        return Count(value)
    if isinstance(value, float):
        return Duration(value)
    if isinstance(value, str):
        return Note(value)
    raise TypeError(f"Cannot record {type(value).__name__!r} as a metric value")


@dataclass(frozen=True)
class Metric:
    """A stable, namespaced metric identifier."""

    key: str

    FULL_EXECUTION_DURATION: ClassVar["Metric"]
    SERIALIZATION_DURATION: ClassVar["Metric"]
    PARAMETER_ENCODING_DURATION: ClassVar["Metric"]
    PROCESSING_DURATION: ClassVar["Metric"]
    OUTPUT_ROWS_DECODING_DURATION: ClassVar["Metric"]
    STRUCTURED_RESULT_DECODING_DURATION: ClassVar["Metric"]
    SERIALIZED_QUERY_TEXT: ClassVar["Metric"]
    BOUND_PARAMETER_COUNT: ClassVar["Metric"]
    RETURNED_RESULT_ROW_COUNT: ClassVar["Metric"]
    DIRECT_EXECUTION_FLAG: ClassVar["Metric"]

    def __str__(self) -> str:
        return self.key


_NAMESPACE = "sqlcraft.metric."

Metric.FULL_EXECUTION_DURATION = Metric(_NAMESPACE + "fullExecutionDuration")
Metric.SERIALIZATION_DURATION = Metric(_NAMESPACE + "serializationDuration")
Metric.PARAMETER_ENCODING_DURATION = Metric(_NAMESPACE + "parameterEncodingDuration")
Metric.PROCESSING_DURATION = Metric(_NAMESPACE + "processingDuration")
Metric.OUTPUT_ROWS_DECODING_DURATION = Metric(_NAMESPACE + "outputRowsDecodingDuration")
Metric.STRUCTURED_RESULT_DECODING_DURATION = Metric(
    _NAMESPACE + "structuredResultDecodingDuration"
)
Metric.SERIALIZED_QUERY_TEXT = Metric(_NAMESPACE + "serializedQueryText")
Metric.BOUND_PARAMETER_COUNT = Metric(_NAMESPACE + "boundParameterCount")
Metric.RETURNED_RESULT_ROW_COUNT = Metric(_NAMESPACE + "returnedResultRowCount")
Metric.DIRECT_EXECUTION_FLAG = Metric(_NAMESPACE + "directExecution")


class PerformanceRecord:
    """
    Ordered metric bag for one execution.

    The mutation surface is limited to ``record``, ``record_additional``,
    ``apply``, ``deduct`` and ``aggregate``. Iteration order is the order in
    which each metric was first recorded.
    """

    def __init__(self) -> None:
        self._values: Dict[Metric, MetricValue] = {}

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, metric: object) -> bool:
        return metric in self._values

    def __getitem__(self, metric: Metric) -> MetricValue:
        return self._values[metric]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PerformanceRecord):
            return NotImplemented
        return list(self._values.items()) == list(other._values.items())

    def __repr__(self) -> str:
        return f"PerformanceRecord({self.to_dict()!r})"

    def __str__(self) -> str:
        lines = ["Query metrics:"]
        lines.extend(f"  {metric}: {value}" for metric, value in self._values.items())
        return "\n".join(lines)

    def has_value(self, metric: Metric) -> bool:
        return metric in self._values

    def get(self, metric: Metric, default: Optional[MetricValue] = None) -> Optional[MetricValue]:
        return self._values.get(metric, default)

    @property
    def all_metrics(self) -> List[Tuple[Metric, MetricValue]]:
        return list(self._values.items())

    def to_dict(self) -> Dict[str, Any]:
        """Plain ``{metric key: raw value}`` mapping, e.g. for structured logging."""
        return {metric.key: value.raw for metric, value in self._values.items()}

    def record(self, value: Any, metric: Metric) -> None:
        """Set ``metric``; the last write wins but first-appearance order is kept."""
        self._values[metric] = coerce_value(value)

    def record_additional(self, value: Any, metric: Metric) -> None:
        """
        Add ``value`` to the current value of ``metric``.

        A missing value, or one of a different kind, counts as zero (or the
        empty note) of ``value``'s kind.

        Raises:
            MetricKindMismatchError: If ``value`` is a flag
        """
        addition = coerce_value(value)
        if addition.kind is MetricKind.FLAG:
            raise MetricKindMismatchError(f"Flags cannot be accumulated ({metric})")
        current = self._values.get(metric)
        if current is None or current.kind is not addition.kind:
            current = _ZERO[addition.kind]
        self._values[metric] = current + addition

    def apply(self, source: Metric, target: Metric) -> None:
        """
        Add the value of ``source`` into ``target``.

        Does nothing unless both metrics are present.

        Raises:
            MetricKindMismatchError: If the kinds differ or are flags
        """
        source_value, target_value = self._pair(source, target, "apply")
        if source_value is None:
            return
        if source_value.kind is MetricKind.FLAG:
            raise MetricKindMismatchError(f"Cannot apply flag {source} to {target}")
        self._values[target] = target_value + source_value

    def deduct(self, source: Metric, target: Metric) -> None:
        """
        Subtract the value of ``source`` from ``target``.

        Does nothing unless both metrics are present.

        Raises:
            MetricKindMismatchError: If the kinds differ or are not numeric
        """
        source_value, target_value = self._pair(source, target, "deduct")
        if source_value is None:
            return
        if not source_value.is_numeric:
            raise MetricKindMismatchError(
                f"Cannot deduct {source_value.kind.value} {source} from {target}"
            )
        self._values[target] = target_value - source_value

    def aggregate(self, other: "PerformanceRecord") -> None:
        """
        Merge ``other`` into this record.

        Numeric metrics are summed (a metric missing on either side counts
        as zero). Flags and notes are removed from this record, whether or
        not ``other`` carries them.

        Raises:
            MetricKindMismatchError: If a metric has different numeric kinds
                on both sides
        """
        self._values = {
            metric: value for metric, value in self._values.items() if value.is_numeric
        }
        for metric, value in other._values.items():
            if not value.is_numeric:
                continue
            current = self._values.get(metric)
            if current is None:
                self._values[metric] = value
            elif current.kind is not value.kind:
                raise MetricKindMismatchError(
                    f"Cannot aggregate {value.kind.value} into {current.kind.value} ({metric})"
                )
            else:
                self._values[metric] = current + value

    @contextmanager
    def measure(self, metric: Metric) -> Iterator[None]:
        """
        Record the wall-clock duration of the block as ``metric``.

        The duration is recorded even when the block raises.
        """
        started = time.perf_counter()
        try:
            yield
        finally:
            self.record(Duration(time.perf_counter() - started), metric)

    def _pair(
        self, source: Metric, target: Metric, operation: str
    ) -> Tuple[Optional[MetricValue], Optional[MetricValue]]:
        source_value = self._values.get(source)
        target_value = self._values.get(target)
        if source_value is None or target_value is None:
            return None, None
        if source_value.kind is not target_value.kind:
            raise MetricKindMismatchError(
                f"Cannot {operation} {source_value.kind.value} {source} "
                f"and {target_value.kind.value} {target}"
            )
        return source_value, target_value


def collapse_placeholders(
    sql: str,
    placeholder_pattern: str,
    threshold: int = 4,
    max_length: int = 1024,
) -> str:
    """
    Shorten query text for reporting.

    Runs of more than ``threshold`` comma-separated placeholders are collapsed
    to the first one followed by ``...`` and the run length, and the result is
    truncated to ``max_length`` characters.

    Example:
        >>> collapse_placeholders("VALUES (?, ?, ?, ?, ?, ?)", r"\\?", threshold=2)
        'VALUES (?, ... [6 placeholders])'
    """
    run = re.compile(rf"(?:{placeholder_pattern})(?:\s*,\s*(?:{placeholder_pattern}))+")

    def _collapse(match: "re.Match[str]") -> str:
        count = len(re.findall(placeholder_pattern, match.group(0)))
        if count <= threshold:
            return match.group(0)
        first = re.match(placeholder_pattern, match.group(0)).group(0)
        return f"{first}, ... [{count} placeholders]"

    collapsed = run.sub(_collapse, sql)
    if len(collapsed) > max_length:
        return collapsed[: max_length - 3] + "..."
    return collapsed


__all__ = [
    "Count",
    "Duration",
    "Flag",
    "Metric",
    "MetricKind",
    "MetricValue",
    "Note",
    "PerformanceRecord",
    "coerce_value",
    "collapse_placeholders",
    "format_duration",
]
