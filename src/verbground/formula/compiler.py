"""Turn a formula AST into a compute engine expression.

The :class:`FormulaCompiler` class traverses the AST produced by
:class:`verbground.formula.parser.ExpressionParser` and builds
the equivalent tree of :class:`verbground.compute.Expression` objects.

Operators map directly to :mod:`pyarrow.compute` functions,
function calls are looked up in :attr:`FormulaCompiler.FUNCTIONS`
which knows how many arguments each function accepts
and how to build the expression for it.

Example:

    >>> from verbground.formula import compile_formula
    >>> str(compile_formula("concentration > 1"))
    'pyarrow.compute.greater(ColumnRef(concentration),Literal(1))'
"""

from typing import Any, Callable

import pyarrow.compute as pc

from ..compute import Expression, FunctionCallExpression, col, functions, lit
from ..compute.base import true_divide
from .tokenize import FormulaError


def _round(value: Expression, digits: Any = 0) -> Expression:
    if not isinstance(digits, int):
        raise FormulaError("round() digits must be an integer literal")
    return FunctionCallExpression(pc.round, value, ndigits=digits)


def _case_when(*args: Expression) -> Expression:
    # case_when(cond1, value1, cond2, value2, ..., default)
    pairs = list(zip(args[0::2], args[1::2]))
    default = args[-1] if len(args) % 2 else None
    return functions.case_when(*pairs, default=default)


def _unary(func: Callable) -> Callable[[Expression], Expression]:
    return lambda value: FunctionCallExpression(func, value)


class FormulaCompiler:
    """Create a compute engine expression from a parsed formula."""

    OPERATORS = {
        "+": pc.add,
        "-": pc.subtract,
        "*": pc.multiply,
        "/": true_divide,
        "^": pc.power,
        "==": pc.equal,
        "!=": pc.not_equal,
        "<": pc.less,
        ">": pc.greater,
        "<=": pc.less_equal,
        ">=": pc.greater_equal,
        "&": pc.and_kleene,
        "|": pc.or_kleene,
    }

    UNARY_OPERATORS = {
        "-": pc.negate,
        "!": pc.invert,
    }

    # name: (builder, min_args, max_args), max_args None means any number.
    FUNCTIONS: dict[str, tuple[Callable[..., Expression], int, int | None]] = {
        "is_na": (functions.is_na, 1, 1),
        "is.na": (functions.is_na, 1, 1),
        "if_else": (functions.if_else, 3, 3),
        "ifelse": (functions.if_else, 3, 3),
        "case_when": (_case_when, 2, None),
        "replace_na": (functions.replace_na, 2, 2),
        "coalesce": (functions.coalesce, 1, None),
        "na_if": (functions.na_if, 2, 2),
        "between": (functions.between, 3, 3),
        "abs": (_unary(pc.abs), 1, 1),
        "sqrt": (_unary(pc.sqrt), 1, 1),
        "exp": (_unary(pc.exp), 1, 1),
        "log": (_unary(pc.ln), 1, 1),
        "log2": (_unary(pc.log2), 1, 1),
        "log10": (_unary(pc.log10), 1, 1),
    }

    def compile(self, node: dict) -> Expression:
        """Compile an AST node, and all its children, into an Expression."""
        node_type = node["type"]
        if node_type in ("logical", "binary_op", "comparison"):
            left = self.compile(node["left"])
            right = self.compile(node["right"])
            return FunctionCallExpression(self.OPERATORS[node["op"]], left, right)
        elif node_type == "unary_op":
            return FunctionCallExpression(
                self.UNARY_OPERATORS[node["op"]], self.compile(node["operand"])
            )
        elif node_type == "membership":
            values = self.compile_values(node["values"])
            return functions.is_in(self.compile(node["operand"]), values)
        elif node_type == "function_call":
            return self.compile_function_call(node)
        elif node_type == "identifier":
            return col(node["value"])
        elif node_type == "literal":
            return lit(node["value"])
        raise FormulaError(f"Unsupported expression type: {node_type}")

    def compile_function_call(self, node: dict) -> Expression:
        """Look up the function and build its expression out of the arguments."""
        name = node["name"]
        args = node["args"]
        if name == "round":
            if not 1 <= len(args) <= 2:
                raise FormulaError(f"round() takes 1 or 2 arguments, got {len(args)}")
            digits = self.literal_value(args[1]) if len(args) == 2 else 0
            return _round(self.compile(args[0]), digits)
        elif name == "c":
            raise FormulaError("c() can only be used on the right side of %in%")

        try:
            builder, min_args, max_args = self.FUNCTIONS[name]
        except KeyError:
            raise FormulaError(f"Unknown function: {name}()") from None

        if len(args) < min_args or (max_args is not None and len(args) > max_args):
            if max_args is None:
                expected = f"at least {min_args}"
            elif min_args == max_args:
                expected = str(min_args)
            else:
                expected = f"{min_args} to {max_args}"
            raise FormulaError(
                f"{name}() takes {expected} arguments, got {len(args)}"
            )
        return builder(*(self.compile(arg) for arg in args))

    def compile_values(self, node: dict) -> list[Any]:
        """Compile the right side of ``%in%`` into a list of python values.

        Accepts either ``c(value, value, ...)`` or a single value.
        """
        if node["type"] == "function_call" and node["name"] == "c":
            return [self.literal_value(arg) for arg in node["args"]]
        return [self.literal_value(node)]

    def literal_value(self, node: dict) -> Any:
        """The python value of a literal, possibly negated."""
        if node["type"] == "literal":
            return node["value"]
        elif (
            node["type"] == "unary_op"
            and node["op"] == "-"
            and node["operand"]["type"] == "literal"
            and isinstance(node["operand"]["value"], (int, float))
        ):
            return -node["operand"]["value"]
        raise FormulaError("Expected a literal value")
