"""Query plan nodes that implement filtering of rows.

The most common request when looking at a table
is to keep only the rows (cases) that respect a condition,
like only the samples measured at a concentration above 1.

This module implements the filtering capabilities
behind the ``filter`` verb.
"""

import pyarrow as pa
import pyarrow.compute as pc

from .base import QueryPlanNode
from .expressions import Expression, _broadcast


class FilterNode(QueryPlanNode):
    """Filter data based on a predicate expression.

    The filter expects an expression that when applied
    to the batch of data being filtered returns ``true``
    or ``false`` for each row in the data to mark which
    rows have to be preserved and which rows have to be discarded.

    Rows for which the predicate is NA are discarded too,
    a missing intensity is never greater than anything.

    >>> import pyarrow as pa
    >>> from verbground.compute import col, PyArrowTableDataSource
    >>> data = pa.record_batch({"intensity": [12.1, None, 41.2, 80.3]})
    >>> predicate = col("intensity") > 40
    >>> next(FilterNode(predicate, PyArrowTableDataSource(data)).batches()).to_pydict()
    {'intensity': [41.2, 80.3]}
    """

    def __init__(self, expression: Expression, child: QueryPlanNode) -> None:
        """
        :param expression: The predicate expression to filter with.
        :param child: The node emitting the data to be filtered.
        """
        self.expression = expression
        self.child = child

    def __str__(self) -> str:
        return f"FilterNode(filter={self.expression}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the filtering to the child node.

        For each recordbatch yielded by the child node,
        apply the expression and get back a mask
        (an array of only true/false/null values).

        Based on the mask filter the rows of the batch
        and return only those matching the filter.
        A constant predicate (like ``TRUE``) is expanded
        to the length of the batch first.
        """
        for batch in self.child.batches():
            mask = _broadcast(self.expression.apply(batch), batch.num_rows)
            if pa.types.is_null(mask.type):
                # A constant NA predicate, no row is kept.
                mask = mask.cast(pa.bool_())
            elif not pa.types.is_boolean(mask.type):
                raise ValueError(
                    f"Filter predicate must be boolean, got {mask.type}: {self.expression}"
                )
            yield batch.filter(pc.fill_null(mask, False))
