import pyarrow as pa
import pytest

from verbground.compute import col
from verbground.compute.functions import (
    between,
    case_when,
    coalesce,
    if_else,
    is_in,
    is_na,
    na_if,
    replace_na,
)


@pytest.fixture
def batch():
    return pa.record_batch(
        {
            "sample": ["A", "B", None, "D"],
            "intensity": [12.1, None, float("nan"), 80.3],
            "replicate": [1, 2, 3, 0],
        }
    )


def test_is_na(batch):
    assert is_na(col("intensity")).apply(batch).to_pylist() == [False, True, True, False]
    assert is_na(col("sample")).apply(batch).to_pylist() == [False, False, True, False]


def test_if_else(batch):
    expr = if_else(col("replicate") > 1, "late", "early")
    assert expr.apply(batch).to_pylist() == ["early", "late", "late", "early"]


def test_if_else_with_na_value(batch):
    expr = if_else(col("intensity") < 15, None, col("intensity"))
    result = expr.apply(batch).to_pylist()
    assert result[0] is None
    assert result[3] == 80.3


def test_if_else_na_condition(batch):
    expr = if_else(col("sample") == "A", 1, 0)
    assert expr.apply(batch).to_pylist() == [1, 0, None, 0]


def test_case_when(batch):
    expr = case_when(
        (col("replicate") == 1, "first"), (col("replicate") == 2, "second"), default="other"
    )
    assert expr.apply(batch).to_pylist() == ["first", "second", "other", "other"]


def test_coalesce(batch):
    expr = coalesce(col("sample"), "unknown")
    assert expr.apply(batch).to_pylist() == ["A", "B", "unknown", "D"]


def test_replace_na(batch):
    expr = replace_na(col("sample"), "X")
    assert expr.apply(batch).to_pylist() == ["A", "B", "X", "D"]


def test_replace_na_on_all_na_column(batch):
    missing = batch.append_column("missing", pa.nulls(batch.num_rows))
    expr = replace_na(col("missing"), 1)
    assert expr.apply(missing).to_pylist() == [1, 1, 1, 1]


def test_coalesce_skips_na_literal(batch):
    expr = coalesce(None, col("replicate"))
    assert expr.apply(batch).to_pylist() == [1, 2, 3, 0]


def test_na_if(batch):
    expr = na_if(col("replicate"), 0)
    assert expr.apply(batch).to_pylist() == [1, 2, 3, None]


def test_between(batch):
    expr = between(col("replicate"), 1, 2)
    assert expr.apply(batch).to_pylist() == [True, True, False, False]


def test_is_in(batch):
    expr = is_in(col("sample"), ["A", "D"])
    assert expr.apply(batch).to_pylist() == [True, False, False, True]


def test_is_in_with_na(batch):
    expr = is_in(col("sample"), ["A", None])
    assert expr.apply(batch).to_pylist() == [True, False, True, False]


def test_is_in_casts_values(batch):
    expr = is_in(col("intensity"), [80.3, 12])
    assert expr.apply(batch).to_pylist() == [False, False, False, True]
