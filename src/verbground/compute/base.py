"""Base classes and interfaces for the Compute Engine

This module defines the base components that are
necessary to represent a query plan and execute it.

Every verb of the dataframe (arrange, filter, select, ...)
ends up being a node in a plan made of these pieces.
"""

import abc
from typing import Any, Generator

import pyarrow as pa
import pyarrow.compute as pc


def true_divide(dividend: pa.Array | pa.Scalar, divisor: pa.Array | pa.Scalar) -> pa.Array:
    """Divide always producing floating point values.

    ``pyarrow.compute.divide`` performs an integer division
    when both sides are integers, while ``7 / 2`` is expected to be ``3.5``.
    """
    if pa.types.is_integer(dividend.type):
        dividend = pc.cast(dividend, pa.float64())
    return pc.divide(dividend, divisor)


class ColumnNotFoundError(KeyError):
    """A verb referenced a column that doesn't exist in the data."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available
        super().__init__(name)

    def __str__(self) -> str:
        if self.available is None:
            return f"Column not found: {self.name}"
        return f"Column not found: {self.name}, available columns: {self.available}"


class QueryPlanNode(abc.ABC):
    """A node of a query execution plan.

    The Query plan is represented as a tree
    of nodes. Each node is a step in the execution
    and all previous steps are children of the
    last one.

    For example sorting the measurements after
    removing the rows without an intensity
    would be a plan like::

        LoadDataNode -> FilterNode(intensity is not NA) -> SortNode(concentration)

    Each Node accepts :class:`pyarrow.RecordBatch`
    data as its input and emits a new
    :class:`pyarrow.RecordBatch` as its output.

    The base `QueryPlanNode` class does nothing
    and purely acts as the interface that all nodes
    must implement. Actual work will be done
    in the subclasses.

    For example a node that forwards the data
    unchanged while printing how many rows flow through it
    could be implemented as::

        class CountRowsNode(QueryPlanNode):
            def __init__(self, child):
                self.child = child

            def batches(self):
                for b in self.child.batches():
                    print(b.num_rows)
                    yield b

            def __str__(self):
                return f"CountRowsNode({self.child})"
    """

    RecordBatchesGenerator = Generator[pa.RecordBatch, None, None]

    @abc.abstractmethod
    def batches(self) -> RecordBatchesGenerator:
        """Emits the batches for the next node.

        Each QueryPlan node is expected to be able to
        generate data that has to be provided to the next
        node in the plan.

        Usually this happens by consuming data from its
        child nodes, transforming it somehow, and yielding
        it back to the next consumer.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the node."""
        ...


class Expression(abc.ABC):
    """Expression to apply to a RecordBatch.

    Expressions are some form of operation that
    has to be applied to the data of a :class:`pyarrow.RecordBatch`
    to create new data, like ``intensity / concentration``.

    As our engine is Column Major, applying an expression
    always results in a new column, thus in a
    :class:`pyarrow.Array` that contains the data
    for that column (or a scalar for constants).

    Expressions can be combined using the Python operators,
    which will build the equivalent
    :class:`verbground.compute.FunctionCallExpression`::

        (col("intensity") / col("concentration")) > 10
    """

    @abc.abstractmethod
    def apply(self, batch: pa.RecordBatch) -> pa.Array | pa.Scalar:
        """Apply the expression to a RecordBatch.

        Expression classes must implement this method
        to dictate what will happen when an expression
        is applied.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the expression."""
        ...

    def __repr__(self) -> str:
        return str(self)

    def _call(self, func: Any, *args: Any) -> "Expression":
        from .expressions import FunctionCallExpression

        return FunctionCallExpression(func, *(_as_expression(a) for a in args))

    def __add__(self, other: Any) -> "Expression":
        return self._call(pc.add, self, other)

    def __radd__(self, other: Any) -> "Expression":
        return self._call(pc.add, other, self)

    def __sub__(self, other: Any) -> "Expression":
        return self._call(pc.subtract, self, other)

    def __rsub__(self, other: Any) -> "Expression":
        return self._call(pc.subtract, other, self)

    def __mul__(self, other: Any) -> "Expression":
        return self._call(pc.multiply, self, other)

    def __rmul__(self, other: Any) -> "Expression":
        return self._call(pc.multiply, other, self)

    def __truediv__(self, other: Any) -> "Expression":
        return self._call(true_divide, self, other)

    def __rtruediv__(self, other: Any) -> "Expression":
        return self._call(true_divide, other, self)

    def __pow__(self, other: Any) -> "Expression":
        return self._call(pc.power, self, other)

    def __neg__(self) -> "Expression":
        return self._call(pc.negate, self)

    def __eq__(self, other: Any) -> "Expression":  # type: ignore[override]
        return self._call(pc.equal, self, other)

    def __ne__(self, other: Any) -> "Expression":  # type: ignore[override]
        return self._call(pc.not_equal, self, other)

    def __lt__(self, other: Any) -> "Expression":
        return self._call(pc.less, self, other)

    def __le__(self, other: Any) -> "Expression":
        return self._call(pc.less_equal, self, other)

    def __gt__(self, other: Any) -> "Expression":
        return self._call(pc.greater, self, other)

    def __ge__(self, other: Any) -> "Expression":
        return self._call(pc.greater_equal, self, other)

    # Kleene logic, so that NA & FALSE is FALSE like in R.
    def __and__(self, other: Any) -> "Expression":
        return self._call(pc.and_kleene, self, other)

    def __or__(self, other: Any) -> "Expression":
        return self._call(pc.or_kleene, self, other)

    def __invert__(self) -> "Expression":
        return self._call(pc.invert, self)

    __hash__ = object.__hash__


class ColumnRef(Expression):
    """References a column in a record batch.

    When another expression or the engine need
    to operate on a specific column, we will
    need a way to reference that column and its data.

    This expression is aware of the column and when
    applied to a record batch returns the data for
    that column.
    """

    def __init__(self, name: str) -> None:
        """
        :param name: The name of the column being referenced.
        """
        self.name = name

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Get the data for the column."""
        if batch.schema.get_field_index(self.name) < 0:
            raise ColumnNotFoundError(self.name, batch.schema.names)
        return batch.column(self.name)

    def __str__(self) -> str:
        return f"ColumnRef({self.name})"


class Literal(Expression):
    """A constant value.

    Applying a literal always returns the same
    :class:`pyarrow.Scalar`, the compute functions
    will broadcast it against the columns it's combined with.
    ``None`` stands for a missing value (NA).
    """

    def __init__(self, value: Any) -> None:
        """
        :param value: The python value of the constant.
        """
        self.value = value if isinstance(value, pa.Scalar) else pa.scalar(value)

    def apply(self, batch: pa.RecordBatch) -> pa.Scalar:
        return self.value

    def __str__(self) -> str:
        return f"Literal({self.value.as_py()!r})"


def empty_batch(schema: pa.Schema) -> pa.RecordBatch:
    """A batch with no rows, used to keep the schema flowing in the plan."""
    return pa.RecordBatch.from_pylist([], schema=schema)


def _as_expression(value: Any) -> Any:
    """Wrap plain python values into a :class:`Literal`."""
    if isinstance(value, Expression):
        return value
    return Literal(value)


col = ColumnRef
lit = Literal