"""Support taking a slice of rows out of a query plan.

Implements nodes whose purpose is to slice the data
emitted by a query plan, like peeking at the first rows
of a table. The rows that are not part of the selected
slice are discarded.
"""

from .base import QueryPlanNode, empty_batch


class PaginateNode(QueryPlanNode):
    """Emit only one page of the received data.

    Given a starting index and a length, only emit
    length rows after the starting index is reached.

    For example if ``offset=1`` and ``length=1``
    only the second row will be emitted::

        0: skip because < offset
        1: emit
        2: skip because > length=1 and one row was already emitted.
    """

    def __init__(self, offset: int, length: int, child: QueryPlanNode) -> None:
        """
        :param offset: From which row to take data, first row is 0.
        :param length: How many rows to take after offset was reached.
        :param child: the node from which to consume the rows.
        """
        if offset < 0 or length < 0:
            raise ValueError("offset and length must be non-negative")
        self.offset = offset
        self.length = length
        self.end = offset + length
        self.child = child

    def __str__(self) -> str:
        return f"PaginateNode({self.offset}:{self.end}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the pagination to the child node and emit the rows.

        Consume rows from the child node skipping those until we
        reach offset. Once offset is reached start yielding rows
        until length is reached.

        Subsequent rows are never consumed, so the child might
        not get exhausted and the generator is closed explicitly
        to release any resource the child is holding.

        When no row at all falls in the page, an empty batch
        is emitted so that consumers still know the columns.
        """
        consumed_rows = 0
        emitted = False
        schema = None

        batches_generator = self.child.batches()
        for batch in batches_generator:
            schema = batch.schema
            batch_size = batch.num_rows

            # Keep discarding batches until we get to the batch that
            # has the rows _after_ offset.
            if consumed_rows + batch_size <= self.offset:
                consumed_rows += batch_size
                continue

            start_in_batch = max(0, self.offset - consumed_rows)
            remaining_rows = self.end - consumed_rows - start_in_batch
            rows_in_this_batch = min(batch_size - start_in_batch, remaining_rows)
            if rows_in_this_batch > 0:
                emitted = True
                yield batch.slice(start_in_batch, rows_in_this_batch)
            consumed_rows += batch_size
            if consumed_rows >= self.end:
                batches_generator.close()
                break

        if not emitted and schema is not None:
            yield empty_batch(schema)
