"""Query plan nodes that remove duplicate rows.

Tables often contain the same case multiple times,
or we might want to know which unique combinations
of some columns exist, like which replicates were
measured for each sample.

This module implements the ``distinct`` verb.

Given the measurements::

    sample, replicate, concentration
    A,      r1,        0.5
    A,      r2,        0.5
    B,      r1,        1.0

keeping the distinct ``sample, concentration`` pairs would give::

    sample, concentration
    A,      0.5
    B,      1.0
"""

import logging
import math
from typing import Any

import pyarrow as pa

from .base import ColumnNotFoundError, QueryPlanNode

logger = logging.getLogger(__name__)


class DistinctNode(QueryPlanNode):
    """Keep only the first occurrence of each unique row.

    Uniqueness is checked on the ``keys`` columns, or on all
    columns when no key is provided. The rows are emitted in the
    same order they were received, the first time
    each combination of values is seen.

    Missing values are considered equal to each other,
    so two rows with NA in the same key column are duplicates.

    >>> import pyarrow as pa
    >>> from verbground.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"sample": ["A", "A", "B"], "replicate": ["r1", "r2", "r1"]})
    >>> next(DistinctNode(["sample"], False, PyArrowTableDataSource(data)).batches()).to_pydict()
    {'sample': ['A', 'B']}
    """

    def __init__(
        self, keys: list[str] | None, keep_all: bool, child: QueryPlanNode
    ) -> None:
        """
        :param keys: The columns that identify a unique row,
                     ``None`` means all the columns.
        :param keep_all: Emit all the columns instead of only the keys.
        :param child: The node emitting the data to deduplicate.
        """
        self.keys = keys
        self.keep_all = keep_all
        self.child = child

    def __str__(self) -> str:
        return f"DistinctNode(keys={self.keys}, keep_all={self.keep_all}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Deduplicate the rows provided by the child node.

        The node keeps track of the key values it has already seen,
        so only the keys are kept in memory and each batch can be
        emitted as soon as it's been processed.

        PyArrow doesn't provide a way to find unique rows
        over multiple columns preserving their order, so
        the keys are converted to python tuples and tracked in a set.
        """
        seen: set[tuple] = set()
        for batch in self.child.batches():
            names = batch.schema.names
            keys = names if self.keys is None else self.keys
            for key in keys:
                if key not in names:
                    raise ColumnNotFoundError(key, names)

            key_columns = [batch.column(k).to_pylist() for k in keys]
            indices = []
            for row_index, row_key in enumerate(zip(*key_columns)):
                row_key = tuple(_normalize_value(v) for v in row_key)
                if row_key in seen:
                    continue
                seen.add(row_key)
                indices.append(row_index)

            logger.debug(
                "Distinct kept %d out of %d rows", len(indices), batch.num_rows
            )
            batch = batch.take(pa.array(indices, type=pa.int64()))
            if not self.keep_all:
                batch = batch.select(keys)
            yield batch


class _NaN:
    """Stands for any NaN value when comparing keys."""

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, _NaN)

    def __hash__(self) -> int:
        return hash("NaN")


def _normalize_value(value: Any) -> Any:
    """NaN is not equal to itself in Python, make NaNs compare equal."""
    if isinstance(value, float) and math.isnan(value):
        return _NaN()
    return value
