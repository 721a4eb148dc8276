"""Support for writing verb expressions as text formulas.

Building expressions out of :func:`verbground.compute.col` and operators
works well from Python code, but when the expressions come from
the command line or from a notebook cell it's more convenient
to write them as text, the same way they would be typed in a
statistical console::

    concentration >= 1 & !is.na(intensity)
    if_else(intensity < 15, NA, intensity)
    sample %in% c('A', 'B')

The formula support is constituted by three components:

1. Tokenizer, splits the text into tokens.
2. Parser, builds an abstract syntax tree out of the tokens.
3. Compiler, converts the tree into a :class:`verbground.compute.Expression`.

The :func:`compile_formula` function combines the three of them::

    expression = compile_formula("intensity / concentration")
    df.mutate(ratio=expression)

As a shortcut, the dataframe verbs accept formulas directly,
``df.filter("concentration > 1")`` compiles the formula for you.
"""

import re

from ..compute import Expression
from .compiler import FormulaCompiler
from .parser import ExpressionParser
from .tokenize import FormulaError, FormulaSyntaxError, Tokenizer

__all__ = (
    "compile_formula",
    "parse_assignment",
    "FormulaError",
    "FormulaSyntaxError",
)

ASSIGNMENT_RE = re.compile(r"^\s*(`[^`]+`|[A-Za-z_.][A-Za-z0-9_.]*)\s*=(?!=)(.*)$", re.S)


def compile_formula(text: str) -> Expression:
    """Compile a formula text into an expression.

    >>> str(compile_formula("intensity * 2"))
    'pyarrow.compute.multiply(ColumnRef(intensity),Literal(2))'
    """
    tokens = Tokenizer(text).tokenize()
    if not tokens:
        raise FormulaSyntaxError("Empty formula", text, 0)

    consumed, ast = ExpressionParser(tokens, text).parse()
    if consumed != len(tokens):
        unexpected = tokens[consumed]
        raise FormulaSyntaxError(
            f"Unexpected token {unexpected.value!r}", text, unexpected.position
        )
    return FormulaCompiler().compile(ast)


def parse_assignment(text: str) -> tuple[str, Expression]:
    """Split a ``name = formula`` text into the name and the compiled formula.

    Used by the command line to read the columns to mutate,
    like ``ratio = intensity / concentration``.
    """
    match = ASSIGNMENT_RE.match(text)
    if match is None:
        raise FormulaSyntaxError("Expected an assignment like name = expression", text, 0)
    name, formula = match.groups()
    return name.strip("`"), compile_formula(formula)
