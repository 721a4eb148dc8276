"""The Dataframe object itself."""
import logging
from typing import Any, Self

import pyarrow as pa

from ..compute import (
  CSVDataSource,
  DistinctNode,
  FilterNode,
  PaginateNode,
  ParquetDataSource,
  ProjectNode,
  PyArrowTableDataSource,
  RenameNode,
  SampleNode,
  SortNode,
)
from ..compute.base import Expression, Literal, QueryPlanNode
from ..compute.selectors import Selector
from ..formula import compile_formula
from ..utils import tabulate

logger = logging.getLogger(__name__)


class Descending:
  """Marks a column to be sorted in descending order by ``arrange``."""

  def __init__(self, column: str) -> None:
    self.column = column

  def __str__(self) -> str:
    return f"desc({self.column})"


def desc(column: str) -> Descending:
  """Sort ``column`` in descending order."""
  return Descending(column)


class Dataframe:
  """Data structure that handles data in rows and columns.

  The Dataframe object allows to represent in-memory data
  and transform it through verbs: ``arrange``, ``filter``,
  ``distinct``, ``sample_n``, ``select``, ``rename``, ``mutate``...
  Each verb returns a new Dataframe, so verbs can be chained::

    Dataframe(load_measurements()) \\
      .filter("!is.na(intensity)") \\
      .mutate(ratio="intensity / concentration") \\
      .arrange(desc("ratio"))

  The verbground dataframe object is lazy, which means that
  any transformation or analysis will be applied only when the
  ``.collect()`` method will be invoked and no data is kept
  in memory until that moment (unless it already was).
  """
  def __init__(self, node_or_table: QueryPlanNode | pa.Table | pa.RecordBatch) -> None:
    """
    :param node_or_table: A compute engine node expected to emit
                          the data for the dataframe or a `pyarrow.Table`.
    """
    if isinstance(node_or_table, (pa.Table, pa.RecordBatch)):
      node_or_table = PyArrowTableDataSource(node_or_table)

    if not isinstance(node_or_table, QueryPlanNode):
      raise ValueError("Invalid input, expected a QueryPlanNode or a PyArrow Table")

    self.node = node_or_table

  @classmethod
  def open_csv(cls, filename: str) -> Self:
    """Open a CSV file and create a Dataframe out of its data.

    :param filename: The path to a local CSV file.
    """
    return cls(CSVDataSource(filename))

  @classmethod
  def open_parquet(cls, filename: str) -> Self:
    """Open a Parquet file and create a Dataframe out of its data.

    :param filename: The path to a local Parquet file.
    """
    return cls(ParquetDataSource(filename))

  def arrange(self, *keys: str | Descending) -> Self:
    """Sort the rows by one or more columns.

    The columns are sorted in ascending order, unless
    they are wrapped in :func:`verbground.dataframe.desc`.
    Missing values always end up last.

    :param keys: The columns to sort by, the first one has the priority.
    """
    if not keys:
      return self

    columns = []
    descending = []
    for key in keys:
      if isinstance(key, Descending):
        columns.append(key.column)
        descending.append(True)
      elif isinstance(key, str):
        columns.append(key)
        descending.append(False)
      else:
        raise TypeError(f"Invalid sorting key: {key!r}")
    return self.__class__(SortNode(columns, descending, self.node))

  def filter(self, *predicates: Expression | str) -> Self:
    """Keep only the rows that match all the predicates.

    The returned dataframe will only contain the rows
    for which every predicate is true, rows where a
    predicate is false or NA are discarded.

    :param predicates: The expressions representing the predicates,
                       for example ``col("concentration") > 1``
                       or the formula ``"concentration > 1"``.
    """
    if not predicates:
      return self

    expressions = [self._as_expression(p) for p in predicates]
    expression = expressions[0]
    for other in expressions[1:]:
      expression = expression & other
    return self.__class__(FilterNode(expression, self.node))

  def distinct(self, *columns: str, keep_all: bool = False) -> Self:
    """Keep only the unique rows.

    When columns are provided, only their unique combinations
    are kept, and only those columns are returned unless ``keep_all`` is set.
    In that case the first row of each combination is returned whole.

    :param columns: The columns identifying unique rows, all of them when omitted.
    :param keep_all: Keep all the columns of the first row of each combination.
    """
    keys = list(columns) if columns else None
    return self.__class__(DistinctNode(keys, keep_all, self.node))

  def sample_n(self, n: int, replace: bool = False, seed: int | None = None) -> Self:
    """Pick ``n`` random rows.

    :param n: The number of rows to sample.
    :param replace: If the same row can be picked more than once.
    :param seed: Make the sample reproducible.
    """
    return self.__class__(SampleNode(self.node, n=n, replace=replace, seed=seed))

  def sample_frac(
    self, fraction: float, replace: bool = False, seed: int | None = None
  ) -> Self:
    """Pick a random fraction of the rows.

    :param fraction: The fraction of rows to sample, ``0.5`` is half of them.
    :param replace: If the same row can be picked more than once.
    :param seed: Make the sample reproducible.
    """
    return self.__class__(
      SampleNode(self.node, fraction=fraction, replace=replace, seed=seed)
    )

  def select(self, *selectors: str | Selector, **renames: str) -> Self:
    """Keep only some of the columns.

    Columns can be picked by name or with the selectors
    in :mod:`verbground.dataframe.selectors`.
    Keyword arguments select a column and rename it at the same time,
    ``select("sample", conc="concentration")``.
    """
    columns = list(selectors) + list(renames.values())
    node = ProjectNode(columns, None, self.node)
    if renames:
      node = RenameNode(renames, node)
    return self.__class__(node)

  def rename(self, mapping: dict[str, str] | None = None, /, **renames: str) -> Self:
    """Rename columns, in the form ``new_name="old_name"``.

    Names that are not valid Python identifiers can be provided
    in the ``mapping`` dictionary.
    """
    renames = {**(mapping or {}), **renames}
    if not renames:
      return self
    return self.__class__(RenameNode(renames, self.node))

  def mutate(self, exprs: dict[str, Any] | None = None, /, **named_exprs: Any) -> Self:
    """Add new columns, or replace existing ones, computed from expressions.

    All existing columns are preserved. Each expression
    can refer to the columns created by the previous ones.
    Expressions can be :class:`verbground.compute.Expression` objects,
    formula strings like ``"intensity / concentration"``
    or constant values.
    """
    project = self._as_projections({**(exprs or {}), **named_exprs})
    return self.__class__(ProjectNode(None, project, self.node))

  def transmute(self, *keep: str | Selector, **named_exprs: Any) -> Self:
    """Like :meth:`mutate` but keeps only ``keep`` and the new columns."""
    project = self._as_projections(named_exprs)
    return self.__class__(ProjectNode(list(keep), project, self.node))

  def head(self, n: int = 5) -> Self:
    """Keep only the first ``n`` rows."""
    return self.slice(0, n)

  def slice(self, offset: int, length: int) -> Self:
    """Keep ``length`` rows starting from the ``offset`` row, first row is 0."""
    return self.__class__(PaginateNode(offset, length, self.node))

  def collect(self) -> Self:
    """Collect all data of the dataframe in memory.

    Returns a new Dataframe that has all data from the
    previous dataframe eagerly loaded in memory.
    """
    return self.__class__(self.to_arrow())

  def to_arrow(self) -> pa.Table:
    """Collect all the data and return a pyarrow.Table"""
    logger.debug("Executing plan %s", self.node)
    batches = list(self.node.batches())
    if not batches:
      raise ValueError("The query plan emitted no data, unable to infer the schema")
    return pa.Table.from_batches(batches)

  def to_pydict(self) -> dict[str, list[Any]]:
    """Collect all the data and return it as ``{column: [values]}``."""
    return self.to_arrow().to_pydict()

  def explain(self) -> str:
    """Describe the query plan that will be executed."""
    return str(self.node)

  def show(self, max_rows: int = 20) -> str:
    """Format the data as a text table of at most ``max_rows`` rows."""
    return tabulate.tabulate(self.to_arrow(), max_rows=max_rows)

  def __str__(self) -> str:
    return self.show()

  @staticmethod
  def _as_expression(value: Any) -> Expression:
    if isinstance(value, Expression):
      return value
    elif isinstance(value, str):
      return compile_formula(value)
    return Literal(value)

  def _as_projections(self, exprs: dict[str, Any]) -> dict[str, Expression]:
    return {name: self._as_expression(expr) for name, expr in exprs.items()}
