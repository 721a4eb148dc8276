import os
import tempfile

import pyarrow as pa
import pyarrow.csv as csv
import pyarrow.parquet as pq
import pytest

from verbground.compute.datasources import (
    CSVDataSource,
    ParquetDataSource,
    PyArrowTableDataSource,
)

# Mock data for testing
MOCK_PYARROW_TABLE = pa.table({"col1": [1, 4, 7], "col2": [2, 5, 8], "col3": [3, 6, 9]})

MOCK_CSV_FILE = tempfile.NamedTemporaryFile(delete=False, mode="w+")
MOCK_PARQUET_FILE = tempfile.NamedTemporaryFile(delete=False, mode="w+")
MOCK_NA_CSV_FILE = tempfile.NamedTemporaryFile(delete=False, mode="w+", suffix=".csv")


def setup_module():
    csv.write_csv(MOCK_PYARROW_TABLE, MOCK_CSV_FILE.name)
    MOCK_CSV_FILE.close()
    pq.write_table(MOCK_PYARROW_TABLE, MOCK_PARQUET_FILE.name)
    MOCK_PARQUET_FILE.close()
    MOCK_NA_CSV_FILE.write(
        "sample,intensity\n"
        "A,12.1\n"
        "NA,\n"
        ",NA\n"
        "B,20.4\n"
    )
    MOCK_NA_CSV_FILE.close()


def teardown_module():
    os.unlink(MOCK_CSV_FILE.name)
    os.unlink(MOCK_PARQUET_FILE.name)
    os.unlink(MOCK_NA_CSV_FILE.name)


@pytest.mark.parametrize(
    "data_source_class, init_args, expected_str",
    [
        (
            CSVDataSource,
            (MOCK_CSV_FILE.name, None),
            f"CSVDataSource({MOCK_CSV_FILE.name}, block_size=None)",
        ),
        (
            ParquetDataSource,
            (MOCK_PARQUET_FILE.name, None),
            f"ParquetDataSource({MOCK_PARQUET_FILE.name}, batch_size=65536)",
        ),
        (
            PyArrowTableDataSource,
            (MOCK_PYARROW_TABLE,),
            "PyArrowTableDataSource(columns=['col1', 'col2', 'col3'], rows=3)",
        ),
        (
            PyArrowTableDataSource,
            (MOCK_PYARROW_TABLE.to_batches()[0],),
            "PyArrowTableDataSource(columns=['col1', 'col2', 'col3'], rows=3)",
        ),
    ],
)
def test_init_and_str(data_source_class, init_args, expected_str):
    data_source = data_source_class(*init_args)
    assert str(data_source) == expected_str


@pytest.mark.parametrize(
    "data_source_class, init_args, expected_batches",
    [
        (CSVDataSource, (MOCK_CSV_FILE.name, None), MOCK_PYARROW_TABLE.to_batches()),
        (
            ParquetDataSource,
            (MOCK_PARQUET_FILE.name, None),
            MOCK_PYARROW_TABLE.to_batches(),
        ),
        (
            PyArrowTableDataSource,
            (MOCK_PYARROW_TABLE,),
            MOCK_PYARROW_TABLE.to_batches(),
        ),
        (
            PyArrowTableDataSource,
            (MOCK_PYARROW_TABLE.to_batches()[0],),
            MOCK_PYARROW_TABLE.to_batches(),
        ),
    ],
)
def test_batches(data_source_class, init_args, expected_batches):
    data_source = data_source_class(*init_args)
    batches = list(data_source.batches())
    assert len(batches) == len(expected_batches)
    for batch, expected_batch in zip(batches, expected_batches):
        assert batch.equals(expected_batch)


@pytest.mark.parametrize(
    "data_source_class, init_args",
    [
        (CSVDataSource, (MOCK_CSV_FILE.name,)),
        (ParquetDataSource, (MOCK_PARQUET_FILE.name,)),
        (PyArrowTableDataSource, (MOCK_PYARROW_TABLE,)),
    ],
)
def test_poll_schema(data_source_class, init_args):
    data_source = data_source_class(*init_args)
    assert data_source.poll_schema().names == ["col1", "col2", "col3"]


def test_csv_missing_values():
    data_source = CSVDataSource(MOCK_NA_CSV_FILE.name)
    table = pa.Table.from_batches(list(data_source.batches()))
    assert table.schema.field("intensity").type == pa.float64()
    assert table.to_pydict() == {
        "sample": ["A", None, None, "B"],
        "intensity": [12.1, None, None, 20.4],
    }


def test_empty_table_emits_schema():
    empty = pa.table({"col1": pa.array([], type=pa.int64())})
    batches = list(PyArrowTableDataSource(empty).batches())
    assert len(batches) == 1
    assert batches[0].num_rows == 0
    assert batches[0].schema.names == ["col1"]


def test_empty_parquet_file_emits_schema(tmp_path):
    filename = str(tmp_path / "empty.parquet")
    pq.write_table(pa.table({"col1": pa.array([], type=pa.int64())}), filename)
    batches = list(ParquetDataSource(filename).batches())
    assert len(batches) == 1
    assert batches[0].num_rows == 0
    assert batches[0].schema.names == ["col1"]


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        list(CSVDataSource("/nonexistent/measurements.csv").batches())
