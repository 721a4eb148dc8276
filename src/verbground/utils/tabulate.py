"""Format tabular data into a text table for print.

The `tabulate` function takes a `pyarrow.RecordBatch` or `pyarrow.Table`
and formats it into a text table, with a first line
that tells the size of the data and a second line
that tells the type of each column.
It will truncate long strings, format floats to 2 decimal places,
print missing values as ``NA`` and limit the number of rows to display.

Example:

    >>> import pyarrow as pa
    >>> data = {
    ...     "sample": ["A", "A", "B"],
    ...     "concentration": [0.5, 0.5, 1.0],
    ...     "intensity": [12.1, None, 20.4],
    ... }
    >>> table = pa.RecordBatch.from_pydict(data)
    >>> print(tabulate(table))
    # A table: 3 x 3
    sample | concentration | intensity
    <str>  | <dbl>         | <dbl>
    ------ | ------------- | ---------
    A      | 0.50          | 12.10
    A      | 0.50          | NA
    B      | 1.00          | 20.40
"""

from typing import Any

import pyarrow as pa

TYPE_ABBREVIATIONS = (
    (pa.types.is_string, "str"),
    (pa.types.is_large_string, "str"),
    (pa.types.is_boolean, "lgl"),
    (pa.types.is_integer, "int"),
    (pa.types.is_floating, "dbl"),
    (pa.types.is_date, "date"),
    (pa.types.is_timestamp, "dttm"),
    (pa.types.is_dictionary, "fct"),
)


def tabulate(data: pa.RecordBatch | pa.Table, max_rows: int = 20) -> str:
    """Format a RecordBatch or Table into a text table.

    Will produce a string like::

        # A table: 3 x 2
        sample | intensity
        <str>  | <dbl>
        ------ | ---------
        A      | 12.10
        A      | NA
        B      | 20.40
    """
    cols = data.column_names
    types = [f"<{abbreviate_type(f.type)}>" for f in data.schema]
    rows = [
        [format_value(row[c]) for c in cols]
        for row in data.slice(length=max_rows).to_pylist()
    ]

    colsizes = compute_max_colsize(cols, [types] + rows)
    title = [f"# A table: {data.num_rows} x {data.num_columns}"]
    header = [
        maketablerow(cols, colsizes=colsizes),
        maketablerow(types, colsizes=colsizes),
    ]
    separator = [maketablerow(["-"] * len(cols), colsizes=colsizes, fillvalue="-")]
    textrows = [maketablerow(row, colsizes=colsizes) for row in rows]

    table = "\n".join(title + header + separator + textrows)
    if data.num_rows > max_rows:
        table += f"\n... and {data.num_rows - max_rows} more rows"
    return table


def abbreviate_type(datatype: pa.DataType) -> str:
    """Short name of a column type, like ``dbl`` for ``double``."""
    for check, abbreviation in TYPE_ABBREVIATIONS:
        if check(datatype):
            return abbreviation
    return str(datatype)


def compute_max_colsize(cols: list[str], rows: list[list[str]]) -> list[int]:
    """Compute the maximum size of each column in a table."""
    return [
        max([len(row[colidx]) for row in rows] + [len(cols[colidx])])
        for colidx, _ in enumerate(cols)
    ]


def maketablerow(cols: list[str], colsizes: list[int], fillvalue: str = " ") -> str:
    """Make a table row with the given column sizes."""
    return " | ".join(
        [col.ljust(colsizes[idx], fillvalue) for idx, col in enumerate(cols)]
    ).rstrip()


def format_value(v: Any) -> str:
    """Format a value to be printed in the table.

    This function will format floats to 2 decimal places,
    print missing values as ``NA`` and truncate long strings.
    """
    if v is None:
        return "NA"
    elif isinstance(v, float):
        return f"{v:.2f}"
    elif isinstance(v, bool):
        return "TRUE" if v else "FALSE"

    v = str(v)
    if len(v) > 30:
        v = v[:27] + "..."
    return v
