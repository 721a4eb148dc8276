"""The verbground Compute Engine

The compute engine defines the in-memory
format for query plans and the plan nodes
supported. Each verb of the dataframe API
is backed by one of the nodes of the engine.

The compute engine is tightly bound to Apache Arrow,
thus the engine will expect to always deal with
:class:`pyarrow.RecordBatch` and emit a new RecordBatch
as the result of the node execution.

This allows to easily build compute pipelines like::

    (RecordBatch)-->Node1--(RecordBatch)-->Node2--(RecordBatch)-->...

The query plan nodes themselves are in charge of their execution,
this keeps the behavior near to the node and thus makes easy to
know how a Node is actually executed without having to look around too much.

Building a query plan requires to combine the nodes that we want
to be executed starting with one or more ``DataSource`` nodes as the
leaf nodes of a query:

>>> import pyarrow as pa
>>> data = pa.table({
...    "sample": pa.array(["A", "B", "C", "D"]),
...    "concentration": pa.array([0.5, 1.0, 2.0, 4.0])
... })
>>>
>>> from verbground.compute import col, PyArrowTableDataSource, FilterNode
>>> query = FilterNode(
...     col("concentration") >= 2,
...     child=PyArrowTableDataSource(data)
... )
>>> for batch in query.batches():
...     print(batch.to_pydict())
{'sample': ['C', 'D'], 'concentration': [2.0, 4.0]}
"""

from .base import ColumnNotFoundError, ColumnRef, Expression, Literal, QueryPlanNode, col, lit
from .datasources import CSVDataSource, ParquetDataSource, PyArrowTableDataSource
from .distinct import DistinctNode
from .expressions import CaseWhenExpression, FunctionCallExpression
from .filtering import FilterNode
from .pagination import PaginateNode
from .sampling import SampleNode
from .selection import ProjectNode, RenameNode
from .sorting import SortNode

__all__ = (
    "CSVDataSource",
    "ParquetDataSource",
    "PyArrowTableDataSource",
    "QueryPlanNode",
    "Expression",
    "FilterNode",
    "FunctionCallExpression",
    "CaseWhenExpression",
    "col",
    "lit",
    "ColumnRef",
    "Literal",
    "ColumnNotFoundError",
    "PaginateNode",
    "SortNode",
    "DistinctNode",
    "SampleNode",
    "ProjectNode",
    "RenameNode",
)
