import pyarrow as pa
import pytest

from verbground.compute.base import ColumnNotFoundError, QueryPlanNode
from verbground.compute.pagination import PaginateNode
from verbground.compute.sorting import SortNode


class MockQueryPlanNode(QueryPlanNode):
    def __init__(self, batches):
        self._batches = batches

    def batches(self):
        for batch in self._batches:
            yield batch

    def __str__(self):
        return "MockQueryPlanNode"


def test_sort_node_single_batch():
    data = pa.record_batch({"values": [5, 3, 1, 4, 2]})
    sort_node = SortNode(["values"], [False], MockQueryPlanNode([data]))

    sorted_batches = list(sort_node.batches())
    assert len(sorted_batches) == 1
    assert sorted_batches[0].column(0).to_pylist() == [1, 2, 3, 4, 5]


def test_sort_node_multiple_batches():
    data1 = pa.record_batch({"values": [5, 3]})
    data2 = pa.record_batch({"values": [1, 4, 2]})
    sort_node = SortNode(["values"], [False], MockQueryPlanNode([data1, data2]))

    sorted_batches = list(sort_node.batches())
    sorted_values = [
        val for batch in sorted_batches for val in batch.column(0).to_pylist()
    ]
    assert sorted_values == [1, 2, 3, 4, 5]


def test_sort_node_descending():
    data = pa.record_batch({"values": [1, 2, 3, 4, 5]})
    sort_node = SortNode(["values"], [True], MockQueryPlanNode([data]))

    sorted_batch = next(sort_node.batches())
    assert sorted_batch.column(0).to_pylist() == [5, 4, 3, 2, 1]


@pytest.mark.parametrize(
    "descending, expected",
    [(False, [1.0, 2.0, 3.0, None, None]), (True, [3.0, 2.0, 1.0, None, None])],
)
def test_sort_node_missing_values_last(descending, expected):
    data = pa.record_batch({"values": [2.0, None, 3.0, None, 1.0]})
    sort_node = SortNode(["values"], [descending], MockQueryPlanNode([data]))

    assert next(sort_node.batches())["values"].to_pylist() == expected


def test_sort_node_multiple_keys_is_stable():
    data = pa.record_batch(
        {
            "sample": ["B", "A", "B", "A"],
            "intensity": [20.0, 12.0, 21.0, 12.0],
            "replicate": ["r1", "r1", "r2", "r2"],
        }
    )
    sort_node = SortNode(["sample", "intensity"], [False, True], MockQueryPlanNode([data]))

    result = next(sort_node.batches())
    assert result["sample"].to_pylist() == ["A", "A", "B", "B"]
    assert result["intensity"].to_pylist() == [12.0, 12.0, 21.0, 20.0]
    # Ties keep the order they had.
    assert result["replicate"].to_pylist() == ["r1", "r2", "r2", "r1"]


def test_sort_node_missing_values_last_in_every_key():
    data = pa.record_batch(
        {"sample": ["A", "B", "A", "B"], "intensity": [None, 20.0, 12.0, None]}
    )
    sort_node = SortNode(["sample", "intensity"], [False, True], MockQueryPlanNode([data]))

    result = next(sort_node.batches())
    assert result["sample"].to_pylist() == ["A", "A", "B", "B"]
    assert result["intensity"].to_pylist() == [12.0, None, 20.0, None]


def test_sort_node_invalid_keys_and_descending_length():
    data = pa.record_batch({"values": [1, 2, 3, 4, 5]})
    with pytest.raises(ValueError):
        SortNode(["values"], [True, False], MockQueryPlanNode([data]))


def test_sort_node_unknown_column():
    data = pa.record_batch({"values": [1, 2, 3]})
    sort_node = SortNode(["missing"], [False], MockQueryPlanNode([data]))
    with pytest.raises(ColumnNotFoundError):
        list(sort_node.batches())


def test_sort_node_empty_data():
    data = pa.record_batch({"values": pa.array([], type=pa.int64())})
    sort_node = SortNode(["values"], [False], MockQueryPlanNode([data]))

    batches = list(sort_node.batches())
    assert len(batches) == 1
    assert batches[0].num_rows == 0
    assert batches[0].schema.names == ["values"]


def test_sort_node_with_paginate_node():
    child_node = MockQueryPlanNode(
        [
            pa.record_batch({"values": [5, 3, 1, 4, 2]}),
            pa.record_batch({"values": [6, 9, 8, 7, 10]}),
        ]
    )
    sort_node = SortNode(["values"], [False], child_node)
    paginate_node = PaginateNode(offset=0, length=2, child=sort_node)

    sorted_batches = next(paginate_node.batches())
    assert sorted_batches["values"].to_pylist() == [1, 2]
