"""Query plan nodes that implement projection and renaming of columns.

Most verbs that work on columns (variables) instead of rows
are a form of projection:

* ``select`` keeps only some of the columns.
* ``mutate`` computes new columns and keeps all the existing ones.
* ``transmute`` computes new columns and keeps only them.
* ``rename`` changes the name of some columns keeping the data.

This module implements the projection and renaming capabilities.
"""

import logging

import pyarrow as pa

from .base import ColumnNotFoundError, QueryPlanNode
from .expressions import Expression, _broadcast
from .selectors import Selector, resolve_columns

logger = logging.getLogger(__name__)


class ProjectNode(QueryPlanNode):
    """Project data by selecting specific columns and computing expressions.

    The projection expects a list of columns to select and a dictionary
    of column names and expressions to project new columns.

    Expressions are evaluated in order, so an expression
    can refer to a column projected by a previous one.
    Projecting a column with the same name of an existing one
    replaces the existing column in its position.

    >>> import pyarrow as pa
    >>> from verbground.compute import col, PyArrowTableDataSource
    >>> data = pa.record_batch({"a": [1, 2, 3], "b": [4, 5, 6]})
    >>> next(ProjectNode(["a"], {"ab_sum": col("a") + col("b")},
    ...                  PyArrowTableDataSource(data)).batches()).to_pydict()
    {'a': [1, 2, 3], 'ab_sum': [5, 7, 9]}
    """

    def __init__(
        self,
        select: list[str | Selector] | None,
        project: dict[str, Expression] | None,
        child: QueryPlanNode,
    ) -> None:
        """
        :param select: The list of column names or selectors to keep.
                       ``None`` means keep all columns.
                       ``[]`` means keep only the projected columns.
        :param project: The dict {name: Expression} to project new columns.
        :param child: The node emitting the data to be projected.
        """
        self.select = select
        self.project = project or {}
        self.child = child

    def __str__(self) -> str:
        return f"ProjectNode(select={self.select}, project={self.project}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the projection to the child node.

        For each recordbatch yielded by the child node,
        sequentially apply the expressions to project new columns
        and then select the requested columns.

        The selected columns are resolved against the columns
        of the incoming data, before new columns are projected,
        so that selectors like ``everything()`` don't pick up
        the projected columns twice.
        """
        for batch in self.child.batches():
            if self.select is None:
                restrict_columns = None
            else:
                selected = resolve_columns(batch.schema.names, self.select)
                restrict_columns = selected + [
                    name for name in self.project if name not in selected
                ]

            for name, expr in self.project.items():
                data = _broadcast(expr.apply(batch), batch.num_rows)
                field_index = batch.schema.get_field_index(name)
                if field_index >= 0:
                    batch = batch.set_column(field_index, name, data)
                else:
                    batch = batch.append_column(name, data)

            if restrict_columns is not None:
                batch = batch.select(restrict_columns)

            yield batch


class RenameNode(QueryPlanNode):
    """Rename columns preserving their data and position.

    The mapping is in the form ``{new_name: old_name}``,
    the same order used when writing ``rename(new = old)``.

    >>> import pyarrow as pa
    >>> from verbground.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"conc": [0.5, 1.0], "sample": ["A", "B"]})
    >>> next(RenameNode({"concentration": "conc"}, PyArrowTableDataSource(data)).batches()).schema.names
    ['concentration', 'sample']
    """

    def __init__(self, mapping: dict[str, str], child: QueryPlanNode) -> None:
        """
        :param mapping: The dict {new_name: old_name} of columns to rename.
        :param child: The node emitting the data to be renamed.
        """
        self.mapping = mapping
        self.child = child

        old_names = list(mapping.values())
        if len(set(old_names)) != len(old_names):
            raise ValueError("Each column can only be renamed once")

    def __str__(self) -> str:
        return f"RenameNode(mapping={self.mapping}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Rename the columns of every batch emitted by the child node.

        The data itself is not touched, a new batch
        is built out of the same arrays with the new names.
        """
        renames = {old: new for new, old in self.mapping.items()}
        for batch in self.child.batches():
            names = batch.schema.names
            for old in renames:
                if old not in names:
                    raise ColumnNotFoundError(old, names)

            new_names = [renames.get(name, name) for name in names]
            if len(set(new_names)) != len(new_names):
                raise ValueError(f"Renaming would produce duplicate columns: {new_names}")

            yield pa.RecordBatch.from_arrays(batch.columns, names=new_names)
