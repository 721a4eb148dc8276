"""Query plan nodes that perform sorting of data.

Looking at a table sorted by one or more columns
is frequently the first step to understand it,
like sorting the measurements by concentration to
see how the intensity grows with it.

This module implements the sorting capabilities
behind the ``arrange`` verb.
"""

import logging

import pyarrow as pa
import pyarrow.compute as pc

from .base import ColumnNotFoundError, QueryPlanNode, empty_batch

logger = logging.getLogger(__name__)


class SortNode(QueryPlanNode):
    """Sort data in-memory based on one or more columns.

    The node expects a list of columns and a list of
    sort directions. The data will be sorted based on
    the columns in the order they are provided, so the
    second column is only used to break ties of the first one.

    The sort directions are used to specify if the
    sorting should be ascending or descending.
    Missing values are always placed at the end,
    whatever the direction. The sort is stable, rows that
    compare equal keep the order they had.

    >>> import pyarrow as pa
    >>> from verbground.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"values": [3, None, 1, 5]})
    >>> # Sort the data in descending order
    >>> sort = SortNode(["values"], [True], PyArrowTableDataSource(data))
    >>> next(sort.batches()).to_pydict()
    {'values': [5, 3, 1, None]}
    """

    def __init__(
        self, keys: list[str], descending: list[bool], child: QueryPlanNode
    ) -> None:
        """
        :param keys: The columns to sort by in the order they should be sorted.
        :param descending: If each columns should be sorted in a descending order.
        :param child: The node emitting the data to be sorted.
        """
        if len(keys) != len(descending):
            raise ValueError("Keys and descending must have the same length")

        self.sorting = list(
            zip(keys, ("descending" if desc else "ascending" for desc in descending))
        )
        self.child = child

    def __str__(self) -> str:
        return f"SortNode(sorting={self.sorting}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the sorting to the child node.

        Batches provided by child node are accumulated
        until they are all loaded in memory, then they
        are merged and sorted as an unique table.
        """
        batches = list(self.child.batches())
        if not batches:
            return

        schema = batches[0].schema
        for key, _ in self.sorting:
            if schema.get_field_index(key) < 0:
                raise ColumnNotFoundError(key, schema.names)

        # Converting the batches to tables is a zero-copy operation
        # and tables can be concatenated at no cost
        # when promote_options is set to none as they are based on ChunkedArrays.
        table = pa.concat_tables(
            [pa.table(batch) for batch in batches], promote_options="none"
        )
        logger.debug("Sorting %d rows by %s", table.num_rows, self.sorting)
        table = table.take(self.sort_indices(table))
        if table.num_rows == 0:
            yield empty_batch(schema)
            return

        # combine_chunks gives back a single batch for the whole sorted table.
        yield from table.combine_chunks().to_batches()

    def sort_indices(self, table: pa.Table) -> pa.Array:
        """Indices that sort the table, with missing values last for every key.

        Each key is preceded by an ascending ``is_null`` key,
        so nulls end up last whatever the direction of the key
        and whatever the default null placement of the installed pyarrow.
        """
        columns = {}
        sort_keys = []
        for idx, (key, order) in enumerate(self.sorting):
            columns[f"null_{idx}"] = pc.is_null(table[key])
            columns[f"key_{idx}"] = table[key]
            sort_keys += [(f"null_{idx}", "ascending"), (f"key_{idx}", order)]
        return pc.sort_indices(pa.table(columns), sort_keys=sort_keys)
