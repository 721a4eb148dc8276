"""Query plan nodes that pick random rows.

When a table is too big to look at, or when we want to
check that a conclusion doesn't depend on a few specific cases,
it's useful to work on a random sample of its rows.

The sample can be of a fixed number of rows (``sample_n``)
or of a fraction of the rows (``sample_frac``), and rows
can be drawn with or without replacement.
Without replacement each row can appear at most once,
with replacement the same row can be drawn multiple times.
"""

import logging
import random

import pyarrow as pa

from .base import QueryPlanNode, empty_batch

logger = logging.getLogger(__name__)


class SampleNode(QueryPlanNode):
    """Emit a random sample of the rows of the child node.

    Exactly one of ``n`` or ``fraction`` must be provided.
    When ``fraction`` is used, the number of rows is
    ``round(fraction * total_rows)``.

    Providing a ``seed`` makes the sample reproducible,
    the same seed on the same data always picks the same rows.

    >>> import pyarrow as pa
    >>> from verbground.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"values": [1, 2, 3, 4, 5]})
    >>> batch = next(SampleNode(child=PyArrowTableDataSource(data), n=3, seed=42).batches())
    >>> batch.num_rows
    3
    """

    def __init__(
        self,
        child: QueryPlanNode,
        n: int | None = None,
        fraction: float | None = None,
        replace: bool = False,
        seed: int | None = None,
    ) -> None:
        """
        :param child: The node emitting the data to sample.
        :param n: How many rows to sample.
        :param fraction: Which fraction of the rows to sample.
        :param replace: If the same row can be sampled more than once.
        :param seed: Seed of the random generator, for reproducible samples.
        """
        if (n is None) == (fraction is None):
            raise ValueError("Exactly one of n or fraction must be provided")
        if n is not None and n < 0:
            raise ValueError(f"Sample size must be non-negative, got {n}")
        if fraction is not None and fraction < 0:
            raise ValueError(f"Sample fraction must be non-negative, got {fraction}")

        self.child = child
        self.n = n
        self.fraction = fraction
        self.replace = replace
        self.seed = seed

    def __str__(self) -> str:
        size = f"n={self.n}" if self.n is not None else f"fraction={self.fraction}"
        return f"SampleNode({size}, replace={self.replace}, seed={self.seed}, {self.child})"

    def sample_size(self, total_rows: int) -> int:
        """How many rows have to be drawn out of ``total_rows``."""
        if self.n is not None:
            size = self.n
        else:
            size = round(self.fraction * total_rows)

        if size > total_rows and (not self.replace or total_rows == 0):
            raise ValueError(
                f"Cannot take a sample of {size} rows out of {total_rows} "
                f"(replace={self.replace})"
            )
        return size

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Draw the sample from the data of the child node.

        To know how many rows there are, and to be able
        to pick any of them, all the batches provided
        by the child have to be loaded in memory.
        Then the indices of the rows to pick are drawn
        and the rows are taken in the order they were drawn.
        """
        batches = list(self.child.batches())
        if not batches:
            return

        table = pa.Table.from_batches(batches)
        total_rows = table.num_rows
        size = self.sample_size(total_rows)

        rng = random.Random(self.seed)
        if self.replace:
            indices = rng.choices(range(total_rows), k=size)
        else:
            indices = rng.sample(range(total_rows), size)
        logger.debug(
            "Sampling %d rows out of %d (replace=%s)", size, total_rows, self.replace
        )

        sampled = table.take(pa.array(indices, type=pa.int64())).combine_chunks()
        if sampled.num_rows == 0:
            yield empty_batch(table.schema)
        else:
            yield from sampled.to_batches()
