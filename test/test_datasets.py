import pyarrow.csv as csv

from verbground.datasets import MEASUREMENTS_SCHEMA, load_measurements, write_measurements_csv


def test_load_measurements():
    table = load_measurements()
    assert table.schema == MEASUREMENTS_SCHEMA
    assert table.num_rows == 12
    assert table["intensity"].null_count == 2


def test_write_measurements_csv(tmp_path):
    filename = write_measurements_csv(str(tmp_path / "measurements.csv"))
    table = csv.read_csv(filename)
    assert table.column_names == MEASUREMENTS_SCHEMA.names
    assert table.num_rows == 12
