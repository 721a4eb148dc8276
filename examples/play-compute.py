from verbground.compute import (
  FilterNode,
  ProjectNode,
  PyArrowTableDataSource,
  SortNode,
  col,
)
from verbground.datasets import load_measurements

query = SortNode(
  ["ratio"],
  [True],
  ProjectNode(
    ["sample", "replicate"],
    {"ratio": col("intensity") / col("concentration")},
    FilterNode(col("concentration") >= 1, PyArrowTableDataSource(load_measurements())),
  ),
)
print(query)
for batch in query.batches():
  print("---")
  print(batch)
