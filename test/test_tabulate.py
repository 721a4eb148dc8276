import pyarrow as pa

from verbground.utils.tabulate import abbreviate_type, format_value, tabulate


def test_tabulate():
    data = pa.table(
        {
            "sample": ["A", "B"],
            "replicate": [1, 2],
            "intensity": [12.1, None],
            "valid": [True, False],
        }
    )
    assert tabulate(data) == "\n".join(
        [
            "# A table: 2 x 4",
            "sample | replicate | intensity | valid",
            "<str>  | <int>     | <dbl>     | <lgl>",
            "------ | --------- | --------- | -----",
            "A      | 1         | 12.10     | TRUE",
            "B      | 2         | NA        | FALSE",
        ]
    )


def test_tabulate_max_rows():
    data = pa.table({"values": list(range(10))})
    text = tabulate(data, max_rows=3)
    lines = text.splitlines()
    assert lines[0] == "# A table: 10 x 1"
    assert lines[4:7] == ["0", "1", "2"]
    assert lines[-1] == "... and 7 more rows"


def test_tabulate_empty():
    data = pa.table({"sample": pa.array([], type=pa.string())})
    assert tabulate(data) == "# A table: 0 x 1\nsample\n<str>\n------"


def test_abbreviate_type():
    assert abbreviate_type(pa.string()) == "str"
    assert abbreviate_type(pa.float32()) == "dbl"
    assert abbreviate_type(pa.int8()) == "int"
    assert abbreviate_type(pa.bool_()) == "lgl"
    assert abbreviate_type(pa.binary()) == "binary"


def test_format_value():
    assert format_value(None) == "NA"
    assert format_value(1.005) == "1.00"
    assert format_value(True) == "TRUE"
    assert format_value("x" * 40) == "x" * 27 + "..."
