"""Expressions executed by compute engine nodes.

The Compute Engine will sometimes need to filter data
or emit new data. This will be performed by nodes that
need to know how the data must be filtered or emitted.

Filters will need a ``predicate``, so an expression that
returns ``true`` or ``false`` for each row that has to be
filtered, like ``concentration > 1``.

Mutations will need an expression that computes the rows
for the new column, for example ``intensity / concentration``.

Conditional replacement of values, like setting the intensity
to NA when it's below a detection threshold, is a
combination of both: a predicate that decides which rows
to replace and the values to replace them with.
This module implements the most common expressions.
"""

from typing import Any, Callable

import pyarrow as pa
import pyarrow.compute as pc

from .. import utils
from .base import Expression, _as_expression, true_divide  # noqa: F401


def apply_expression_if_needed(batch: pa.RecordBatch, o: Expression | Any) -> Any:
    """Invoke Apply on expressions when needed

    If the provided object is an Expression,
    it will be applied to the target batch.

    Otherwise it will treat it as if it's
    already the result of an expression
    or a literal value.

    This allows us to apply all arguments
    we receive without having to care if
    they are the data we need or if they
    are the expression resulting in that data.
    """
    if isinstance(o, Expression):
        o = o.apply(batch)
    return o


class FunctionCallExpression(Expression):
    """Call a compute function on its arguments.

    Given a compute function, and a set of arguments
    (other expressions, literals or data), execute
    the function on the provided arguments and return
    the resulting data.

    For example to compute the ratio between two columns
    this would be used as::

        FunctionCallExpression(pyarrow.compute.divide, col("intensity"), col("concentration"))

    Keyword arguments are forwarded as they are to the function,
    this allows to pass options like ``nan_is_null=True``.
    """

    def __init__(self, func: Callable, *args: Expression | Any, **kwargs: Any) -> None:
        """
        :param func: The function accepting the arguments.
        :param *args: The arguments for the function.
        :param **kwargs: Options for the function, never resolved against the data.
        """
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def __str__(self) -> str:
        func_qualname = utils.inspect.get_qualname(self.func)
        return f"{func_qualname}({','.join(map(str, self.args))})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Invoke the function resolving all arguments on the recordbatch.

        When the function arguments are expressions themselves,
        this will apply the expressions on the provided recordbatch
        and the resulting data will be used as the arguments for the
        function.
        """
        args = tuple(apply_expression_if_needed(batch, arg) for arg in self.args)
        return self.func(*args, **self.kwargs)


class CaseWhenExpression(Expression):
    """Pick a value for each row based on the first matching condition.

    Each case is a ``(condition, value)`` pair, conditions are
    evaluated in order and the value of the first condition
    that is true for a row is used for that row.
    Conditions that evaluate to NA are considered false.

    Rows where no condition matched get the ``default`` value,
    or NA when no default was provided.

    This is the general form of conditional replacement,
    ``if_else`` is just a case when with a single case and a default::

        CaseWhenExpression(
            [(col("intensity") < 15, "low"), (col("intensity") < 50, "medium")],
            default="high"
        )
    """

    def __init__(
        self, cases: list[tuple[Expression, Any]], default: Any = None
    ) -> None:
        """
        :param cases: The ``(condition, value)`` pairs in priority order.
        :param default: The value for rows that matched no condition.
        """
        if not cases:
            raise ValueError("case_when requires at least one case")
        self.cases = [(_as_expression(c), _as_expression(v)) for c, v in cases]
        self.default = None if default is None else _as_expression(default)

    def __str__(self) -> str:
        cases = ",".join(f"{c}->{v}" for c, v in self.cases)
        return f"CaseWhen({cases},default={self.default})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Evaluate all the conditions and values and combine them.

        ``pyarrow.compute.case_when`` expects the conditions
        packed in a struct array with a boolean field per condition,
        and the values as additional arguments, the default being
        the last optional value.
        """
        conditions = []
        for condition, _ in self.cases:
            mask = _broadcast(condition.apply(batch), batch.num_rows)
            # Missing conditions never select a branch.
            conditions.append(pc.fill_null(mask, False))
        values = [value.apply(batch) for _, value in self.cases]
        if self.default is not None:
            values.append(self.default.apply(batch))
        values = unify_null_types(values)

        cond_struct = pa.StructArray.from_arrays(
            conditions, names=[f"c{idx}" for idx in range(len(conditions))]
        )
        return pc.case_when(cond_struct, *values)


def _broadcast(value: pa.Array | pa.Scalar, length: int) -> pa.Array:
    """Turn a scalar result into an array of the given length."""
    if isinstance(value, pa.ChunkedArray):
        return value.combine_chunks()
    if isinstance(value, pa.Scalar):
        return pa.repeat(value, length)
    return value


def unify_null_types(values: list[pa.Array | pa.Scalar]) -> list[pa.Array | pa.Scalar]:
    """Give a concrete type to the values that are a bare NA.

    A literal ``NA`` has the ``null`` type, which not all compute
    functions are able to combine with other types. Cast them to the
    type of the first value that has a real type.
    """
    target = next((v.type for v in values if not pa.types.is_null(v.type)), None)
    if target is None:
        return values
    return [v.cast(target) if pa.types.is_null(v.type) else v for v in values]
