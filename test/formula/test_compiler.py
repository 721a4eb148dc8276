import pyarrow as pa
import pytest

from verbground.compute import Expression
from verbground.formula import (
    FormulaError,
    FormulaSyntaxError,
    compile_formula,
    parse_assignment,
)


@pytest.fixture
def batch():
    return pa.record_batch(
        {
            "sample": ["A", "B", "C", "D"],
            "concentration": [0.5, 1.0, 2.0, 4.0],
            "intensity": [12.1, None, 41.2, 80.3],
            "replicate": [1, 2, 3, 4],
        }
    )


def evaluate(text, batch):
    return compile_formula(text).apply(batch).to_pylist()


def test_compile_returns_expression():
    assert isinstance(compile_formula("intensity * 2"), Expression)
    assert (
        str(compile_formula("concentration > 1"))
        == "pyarrow.compute.greater(ColumnRef(concentration),Literal(1))"
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("concentration * 2", [1.0, 2.0, 4.0, 8.0]),
        ("replicate + 1", [2, 3, 4, 5]),
        ("replicate - 1", [0, 1, 2, 3]),
        ("replicate / 2", [0.5, 1.0, 1.5, 2.0]),
        ("replicate ^ 2", [1, 4, 9, 16]),
        ("-replicate", [-1, -2, -3, -4]),
        ("-2 ^ 2 + replicate", [-3, -2, -1, 0]),
        ("(replicate + 1) * 2", [4, 6, 8, 10]),
        ("concentration >= 1", [False, True, True, True]),
        ("sample == 'B'", [False, True, False, False]),
        ("sample != 'B'", [True, False, True, True]),
        ("concentration >= 1 & replicate < 4", [False, True, True, False]),
        ("concentration < 1 | replicate == 4", [True, False, False, True]),
        ("!(concentration >= 1)", [True, False, False, False]),
        ("NOT concentration >= 1", [True, False, False, False]),
        ("intensity > 20", [False, None, True, True]),
        ("sample %in% c('A', 'D')", [True, False, False, True]),
        ("sample %in% 'C'", [False, False, True, False]),
        ("replicate %in% c(-1, 2)", [False, True, False, False]),
    ],
)
def test_compile_operators(batch, text, expected):
    assert evaluate(text, batch) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("is.na(intensity)", [False, True, False, False]),
        ("is_na(intensity)", [False, True, False, False]),
        ("!is.na(intensity)", [True, False, True, True]),
        ("if_else(intensity > 20, 'high', 'low')", ["low", None, "high", "high"]),
        ("ifelse(replicate > 2, 1, 0)", [0, 0, 1, 1]),
        ("if_else(intensity < 15, NA, intensity)", [None, None, 41.2, 80.3]),
        ("replace_na(intensity, 0)", [12.1, 0.0, 41.2, 80.3]),
        ("coalesce(intensity, concentration)", [12.1, 1.0, 41.2, 80.3]),
        ("na_if(replicate, 3)", [1, 2, None, 4]),
        ("between(replicate, 2, 3)", [False, True, True, False]),
        ("abs(-replicate)", [1, 2, 3, 4]),
        ("sqrt(concentration * 2)", [1.0, pytest.approx(2**0.5), 2.0, pytest.approx(8**0.5)]),
        ("log2(concentration)", [-1.0, 0.0, 1.0, 2.0]),
        ("log10(replicate)", [0.0, pytest.approx(0.30103, abs=1e-5), pytest.approx(0.47712, abs=1e-5), pytest.approx(0.60206, abs=1e-5)]),
        ("round(intensity / 3, 1)", [4.0, None, 13.7, 26.8]),
        ("round(concentration)", [0.0, 1.0, 2.0, 4.0]),
    ],
)
def test_compile_functions(batch, text, expected):
    assert evaluate(text, batch) == expected


def test_compile_case_when(batch):
    text = "case_when(intensity < 15, 'low', intensity < 50, 'medium', 'high')"
    assert evaluate(text, batch) == ["low", "high", "medium", "high"]


def test_compile_case_when_without_default(batch):
    text = "case_when(replicate == 1, 'first', replicate == 2, 'second')"
    assert evaluate(text, batch) == ["first", "second", None, None]


@pytest.mark.parametrize(
    "text, message",
    [
        ("mean(intensity)", "Unknown function: mean()"),
        ("is.na(intensity, sample)", "is.na() takes 1 arguments, got 2"),
        ("if_else(sample == 'A')", "if_else() takes 3 arguments, got 1"),
        ("case_when(sample == 'A')", "case_when() takes at least 2 arguments, got 1"),
        ("round(intensity, 1, 2)", "round() takes 1 or 2 arguments, got 3"),
        ("round(intensity, replicate)", "Expected a literal value"),
        ("round(intensity, 1.5)", "round() digits must be an integer literal"),
        ("c(1, 2)", "c() can only be used on the right side of %in%"),
        ("sample %in% c(replicate)", "Expected a literal value"),
    ],
)
def test_compile_errors(text, message):
    with pytest.raises(FormulaError) as err:
        compile_formula(text)
    assert str(err.value) == message


@pytest.mark.parametrize("text", ["", "   ", "a b", "a > 1)", "(a"])
def test_compile_syntax_errors(text):
    with pytest.raises(FormulaSyntaxError):
        compile_formula(text)


def test_compile_missing_column(batch):
    expr = compile_formula("weight > 1")
    with pytest.raises(KeyError):
        expr.apply(batch)


@pytest.mark.parametrize(
    "text, name",
    [
        ("ratio = intensity / concentration", "ratio"),
        ("ratio=intensity / concentration", "ratio"),
        ("`the ratio` = intensity / concentration", "the ratio"),
        ("norm.ratio = intensity / concentration", "norm.ratio"),
    ],
)
def test_parse_assignment(batch, text, name):
    parsed_name, expr = parse_assignment(text)
    assert parsed_name == name
    assert expr.apply(batch).to_pylist() == [24.2, None, 20.6, 20.075]


@pytest.mark.parametrize("text", ["intensity / concentration", "flag == TRUE", "= 3"])
def test_parse_assignment_errors(text):
    with pytest.raises(FormulaSyntaxError):
        parse_assignment(text)
