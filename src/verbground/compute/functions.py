"""Functions to build expressions for the dataframe verbs.

The compute engine works with :class:`verbground.compute.FunctionCallExpression`
objects wrapping :mod:`pyarrow.compute` functions. Writing them by hand is verbose,
so this module provides shortcuts named after what they do,
in particular for the conditional replacement of values::

    df.mutate(intensity=if_else(col("intensity") < 15, None, col("intensity")))
    df.mutate(intensity=na_if(col("intensity"), 0))
    df.mutate(intensity=replace_na(col("intensity"), 0))
    df.mutate(level=case_when((col("intensity") < 15, "low"), default="high"))
"""

from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from .base import Expression, _as_expression
from .expressions import CaseWhenExpression, FunctionCallExpression, unify_null_types


def is_na(expr: Expression) -> Expression:
    """True where the value is missing, NaN counts as missing."""
    return FunctionCallExpression(pc.is_null, _as_expression(expr), nan_is_null=True)


def if_else(condition: Expression, true_value: Any, false_value: Any) -> Expression:
    """Pick ``true_value`` where ``condition`` holds, ``false_value`` elsewhere.

    Rows where the condition is NA get a NA value.
    """
    return FunctionCallExpression(
        _if_else,
        _as_expression(condition),
        _as_expression(true_value),
        _as_expression(false_value),
    )


def case_when(*cases: tuple[Expression, Any], default: Any = None) -> Expression:
    """Pick the value of the first condition that holds for each row."""
    return CaseWhenExpression(list(cases), default=default)


def coalesce(*exprs: Any) -> Expression:
    """The first value that is not missing, row by row."""
    return FunctionCallExpression(_coalesce, *(_as_expression(e) for e in exprs))


def replace_na(expr: Expression, value: Any) -> Expression:
    """Replace the missing values of ``expr`` with ``value``."""
    return coalesce(expr, value)


def na_if(expr: Expression, value: Any) -> Expression:
    """Turn into NA the values of ``expr`` that are equal to ``value``."""
    return FunctionCallExpression(_na_if, _as_expression(expr), _as_expression(value))


def between(expr: Expression, low: Any, high: Any) -> Expression:
    """True where ``low <= expr <= high``."""
    expr = _as_expression(expr)
    return (expr >= low) & (expr <= high)


def is_in(expr: Expression, values: list[Any]) -> Expression:
    """True where the value is one of ``values``.

    Missing values are never part of the set, like ``%in%`` in R
    a NA is only in the set if the set contains NA.
    """
    return FunctionCallExpression(
        _is_in, _as_expression(expr), value_set=pa.array(values)
    )


def _if_else(condition: pa.Array, true_value: Any, false_value: Any) -> pa.Array:
    true_value, false_value = unify_null_types([true_value, false_value])
    return pc.if_else(condition, true_value, false_value)


def _coalesce(*values: Any) -> pa.Array:
    return pc.coalesce(*unify_null_types(list(values)))


def _na_if(data: pa.Array, value: pa.Scalar) -> pa.Array:
    missing = pa.scalar(None, type=data.type)
    return pc.if_else(pc.equal(data, value), missing, data)


def _is_in(data: pa.Array, value_set: pa.Array) -> pa.Array:
    if value_set.type != data.type:
        value_set = value_set.cast(data.type)
    return pc.is_in(data, value_set=value_set, skip_nulls=False)
