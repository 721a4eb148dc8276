import pyarrow as pa
import pytest

from verbground.compute import PaginateNode, PyArrowTableDataSource
from verbground.compute.base import QueryPlanNode


class MockQueryPlanNode(QueryPlanNode):
    def __init__(self, batches):
        self._batches = batches
        self.closed = False

    def batches(self):
        try:
            for batch in self._batches:
                yield batch
        finally:
            self.closed = True

    def __str__(self):
        return "MockQueryPlanNode"


@pytest.fixture
def split_batches():
    return [
        pa.record_batch({"values": [0, 1, 2]}),
        pa.record_batch({"values": [3, 4, 5]}),
        pa.record_batch({"values": [6, 7, 8]}),
    ]


def _values(node):
    return [v for batch in node.batches() for v in batch["values"].to_pylist()]


@pytest.mark.parametrize(
    "offset, length, expected",
    [
        (0, 2, [0, 1]),
        (1, 1, [1]),
        (2, 3, [2, 3, 4]),
        (3, 3, [3, 4, 5]),
        (4, 4, [4, 5, 6, 7]),
        (1, 7, [1, 2, 3, 4, 5, 6, 7]),
        (7, 10, [7, 8]),
    ],
)
def test_paginate_across_batches(split_batches, offset, length, expected):
    node = PaginateNode(offset, length, MockQueryPlanNode(split_batches))
    assert _values(node) == expected


def test_paginate_stops_consuming_child(split_batches):
    child = MockQueryPlanNode(split_batches)
    node = PaginateNode(0, 2, child)
    assert _values(node) == [0, 1]
    assert child.closed


@pytest.mark.parametrize("offset, length", [(0, 0), (20, 5)])
def test_paginate_empty_page_keeps_schema(split_batches, offset, length):
    node = PaginateNode(offset, length, MockQueryPlanNode(split_batches))
    batches = list(node.batches())
    assert len(batches) == 1
    assert batches[0].num_rows == 0
    assert batches[0].schema.names == ["values"]


def test_paginate_invalid_arguments():
    data = PyArrowTableDataSource(pa.table({"values": [1]}))
    with pytest.raises(ValueError):
        PaginateNode(-1, 2, data)
    with pytest.raises(ValueError):
        PaginateNode(0, -2, data)


def test_paginate_str():
    data = PyArrowTableDataSource(pa.table({"values": [1]}))
    assert (
        str(PaginateNode(2, 3, data))
        == "PaginateNode(2:5, PyArrowTableDataSource(columns=['values'], rows=1))"
    )
