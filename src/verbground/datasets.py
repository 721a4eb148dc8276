"""Example datasets to play with the verbs.

The ``measurements`` dataset is a small table of
intensities measured for four samples at increasing
concentrations, each one measured in three replicates.
Two measurements failed and their intensity is missing::

    sample | replicate | concentration | intensity
    A      | r1        | 0.50          | 12.10
    A      | r2        | 0.50          | 11.80
    A      | r3        | 0.50          | NA
    B      | r1        | 1.00          | 20.40
    ...

It's small enough to see at a glance what each verb did,
and it has both categorical and numeric columns plus
missing values, which is all we need to try every verb.
"""

import pyarrow as pa
import pyarrow.csv

MEASUREMENTS_SCHEMA = pa.schema(
    [
        pa.field("sample", pa.string()),
        pa.field("replicate", pa.string()),
        pa.field("concentration", pa.float64()),
        pa.field("intensity", pa.float64()),
    ]
)

_MEASUREMENTS = {
    "sample": ["A", "A", "A", "B", "B", "B", "C", "C", "C", "D", "D", "D"],
    "replicate": ["r1", "r2", "r3"] * 4,
    "concentration": [0.5] * 3 + [1.0] * 3 + [2.0] * 3 + [4.0] * 3,
    "intensity": [
        12.1, 11.8, None,
        20.4, 21.0, 19.7,
        41.2, None, 39.9,
        80.3, 82.1, 79.5,
    ],
}


def load_measurements() -> pa.Table:
    """Load the measurements dataset as a :class:`pyarrow.Table`."""
    return pa.table(_MEASUREMENTS, schema=MEASUREMENTS_SCHEMA)


def write_measurements_csv(filename: str) -> str:
    """Write the measurements dataset to a CSV file.

    Missing values are written as empty cells,
    which is how :class:`verbground.compute.CSVDataSource`
    reads them back.

    :param filename: Where to write the CSV file.
    """
    pa.csv.write_csv(load_measurements(), filename)
    return filename
