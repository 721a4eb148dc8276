import pyarrow as pa
import pytest

from verbground.compute import PyArrowTableDataSource, SampleNode


@pytest.fixture
def data():
    return pa.table({"values": list(range(10))})


def _values(node):
    return [v for b in node.batches() for v in b["values"].to_pylist()]


def test_sample_n(data):
    values = _values(SampleNode(PyArrowTableDataSource(data), n=4, seed=1))
    assert len(values) == 4
    assert len(set(values)) == 4
    assert set(values) <= set(range(10))


def test_sample_frac(data):
    values = _values(SampleNode(PyArrowTableDataSource(data), fraction=0.3, seed=1))
    assert len(values) == 3


def test_sample_is_reproducible(data):
    first = _values(SampleNode(PyArrowTableDataSource(data), n=5, seed=42))
    second = _values(SampleNode(PyArrowTableDataSource(data), n=5, seed=42))
    assert first == second


def test_sample_whole_table_is_a_permutation(data):
    values = _values(SampleNode(PyArrowTableDataSource(data), fraction=1, seed=3))
    assert sorted(values) == list(range(10))


def test_sample_with_replacement_can_exceed_rows(data):
    values = _values(
        SampleNode(PyArrowTableDataSource(data), n=25, replace=True, seed=7)
    )
    assert len(values) == 25
    assert set(values) <= set(range(10))


def test_sample_without_replacement_too_many_rows(data):
    node = SampleNode(PyArrowTableDataSource(data), n=11)
    with pytest.raises(ValueError):
        list(node.batches())


def test_sample_zero_rows_keeps_schema(data):
    batches = list(SampleNode(PyArrowTableDataSource(data), n=0).batches())
    assert len(batches) == 1
    assert batches[0].num_rows == 0
    assert batches[0].schema.names == ["values"]


@pytest.mark.parametrize(
    "kwargs",
    [{}, {"n": 1, "fraction": 0.5}, {"n": -1}, {"fraction": -0.5}],
)
def test_sample_invalid_arguments(data, kwargs):
    with pytest.raises(ValueError):
        SampleNode(PyArrowTableDataSource(data), **kwargs)


def test_sample_str(data):
    node = SampleNode(PyArrowTableDataSource(data), n=2, seed=5)
    assert str(node) == (
        "SampleNode(n=2, replace=False, seed=5, "
        "PyArrowTableDataSource(columns=['values'], rows=10))"
    )
