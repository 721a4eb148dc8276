"""Implement a parser for formulas.

A formula is a combination of literals, column names, operators and functions
that can be evaluated to a value for each row. This module provides a parser
for formulas with the following features:

- Arithmetic operators: ``+, -, *, /, ^``
- Comparison operators: ``==, !=, <, >, <=, >=``
- Membership: ``sample %in% c('A', 'B')``
- Logical operators: ``&, |, !`` (also spelled ``AND, OR, NOT``)
- Parentheses for grouping
- Function calls with arguments
- Column names and literals

The parser returns an abstract syntax tree (AST) made of nested dictionaries.

The parser is implemented as a recursive descent parser, with each method in the
parser class corresponding to a different level of the grammar,
from the lowest precedence to the highest::

    parse_expression        a | b
    parse_term              a & b
    parse_factor            !a
    parse_comparison        a > b, a %in% c(...)
    parse_additive_expr     a + b
    parse_multiplicative    a * b
    parse_unary_expr        -a
    parse_power             a ^ b   (right associative, so 2^3^2 is 2^9)
    parse_primary           (a), f(a), a, 1

For example ``conc > 1 & !is.na(intensity)`` becomes::

    {
        "type": "logical",
        "op": "&",
        "left": {
            "type": "comparison",
            "op": ">",
            "left": {"type": "identifier", "value": "conc"},
            "right": {"type": "literal", "value": 1},
        },
        "right": {
            "type": "unary_op",
            "op": "!",
            "operand": {
                "type": "function_call",
                "name": "is.na",
                "args": [{"type": "identifier", "value": "intensity"}],
            },
        },
    }
"""

from .tokenize import (
    EOFToken,
    FormulaSyntaxError,
    IdentifierToken,
    LiteralToken,
    OperatorToken,
    PunctuationToken,
    Token,
)


class ExpressionParser:
    """A parser for formulas.

    Handles parsing of formulas like "a + b", "x > 5 & y < 7" or "is.na(x)"
    into an abstract syntax tree (AST).
    """

    COMPARISON_OPERATORS = ("==", "!=", "<", ">", "<=", ">=")

    def __init__(self, tokens: list[Token], text: str | None = None) -> None:
        """
        :param tokens: A list of tokens representing the formula.
        :param text: The original formula, used to report errors.
        """
        if not tokens:
            raise FormulaSyntaxError("Empty formula.")
        self.tokens = tokens
        self.text = text
        self.pos = 0  # Current position in the tokens list
        self.current_token = tokens[self.pos]

    def advance(self) -> None:
        """Advance the parser to the next token."""
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current_token = self.tokens[self.pos]
        else:
            self.current_token = EOFToken()  # End of input

    def parse(self) -> tuple[int, dict]:
        """Main method to parse a whole formula.

        Returns the abstract syntax tree (AST) for the parsed formula
        and how many tokens were consumed to parse it.
        """
        ast = self.parse_expression()
        return self.pos, ast

    def parse_expression(self) -> dict:
        """Parse an expression, which are terms connected by OR."""
        term = self.parse_term()
        while self.is_operator("|"):
            self.advance()
            right = self.parse_term()
            term = {"type": "logical", "op": "|", "left": term, "right": right}
        return term

    def parse_term(self) -> dict:
        """Parse a term, which are factors connected by AND."""
        factor = self.parse_factor()
        while self.is_operator("&"):
            self.advance()
            right = self.parse_factor()
            factor = {"type": "logical", "op": "&", "left": factor, "right": right}
        return factor

    def parse_factor(self) -> dict:
        """Parse a factor, which are comparison expressions possibly negated by NOT."""
        if self.is_operator("!"):
            self.advance()
            operand = self.parse_factor()
            return {"type": "unary_op", "op": "!", "operand": operand}
        return self.parse_comparison()

    def parse_comparison(self) -> dict:
        """Parse a comparison or a membership test.

        If there is no comparison operator, it will return the left side as is.
        """
        left = self.parse_additive_expr()
        if self.is_operator(*self.COMPARISON_OPERATORS):
            op = self.current_token.value
            self.advance()
            right = self.parse_additive_expr()
            return {"type": "comparison", "op": op, "left": left, "right": right}
        elif self.is_operator("%in%"):
            self.advance()
            values = self.parse_additive_expr()
            return {"type": "membership", "operand": left, "values": values}
        return left

    def parse_additive_expr(self) -> dict:
        """Parse addition and subtraction expressions."""
        expr = self.parse_multiplicative_expr()
        while self.is_operator("+", "-"):
            op = self.current_token.value
            self.advance()
            right = self.parse_multiplicative_expr()
            expr = {"type": "binary_op", "op": op, "left": expr, "right": right}
        return expr

    def parse_multiplicative_expr(self) -> dict:
        """Parse multiplication and division expressions."""
        expr = self.parse_unary_expr()
        while self.is_operator("*", "/"):
            op = self.current_token.value
            self.advance()
            right = self.parse_unary_expr()
            expr = {"type": "binary_op", "op": op, "left": expr, "right": right}
        return expr

    def parse_unary_expr(self) -> dict:
        """Parse unary negation, like -X

        The exponent binds tighter than the negation, so ``-2^2`` is ``-4``.
        """
        if self.is_operator("-"):
            self.advance()
            operand = self.parse_unary_expr()
            return {"type": "unary_op", "op": "-", "operand": operand}
        return self.parse_power()

    def parse_power(self) -> dict:
        """Parse exponentiation, which is right associative."""
        base = self.parse_primary()
        if self.is_operator("^"):
            self.advance()
            exponent = self.parse_unary_expr()
            return {"type": "binary_op", "op": "^", "left": base, "right": exponent}
        return base

    def parse_primary(self) -> dict:
        """Parse primary expressions: function calls, atoms, or parenthesis expressions."""
        if self.is_punctuation("("):
            self.advance()
            expr = self.parse_expression()
            if not self.is_punctuation(")"):
                self.error("Expected ')'")
            self.advance()
            return expr
        return self.parse_atom()

    def parse_atom(self) -> dict:
        """Parse an identifier, literal, or function call.

        In case of literals it also casts them to Python values.
        """
        token = self.current_token
        if isinstance(token, IdentifierToken):
            self.advance()
            if self.is_punctuation("("):
                return self.parse_function_call(token.value)
            return {"type": "identifier", "value": token.value}
        elif isinstance(token, LiteralToken):
            self.advance()
            return {"type": "literal", "value": self.cast_literal(token.value)}
        elif isinstance(token, EOFToken):
            self.error("Unexpected end of formula")
        self.error(f"Unexpected token {token.value!r}")

    def parse_function_call(self, function_name: str) -> dict:
        """Parse the arguments of a function call.

        The arguments of the call are parsed as expressions too.
        """
        self.advance()  # Consume '('
        args = []
        if not self.is_punctuation(")"):
            while True:
                args.append(self.parse_expression())
                if self.is_punctuation(","):
                    self.advance()
                else:
                    break
        if not self.is_punctuation(")"):
            self.error("Expected ')'")
        self.advance()  # Consume ')'
        return {"type": "function_call", "name": function_name, "args": args}

    def is_operator(self, *ops: str) -> bool:
        """Check if the current token is an OperatorToken with a value in ops."""
        return (
            isinstance(self.current_token, OperatorToken)
            and self.current_token.value in ops
        )

    def is_punctuation(self, *chars: str) -> bool:
        """Check if the current token is a PunctuationToken with a value in chars."""
        return (
            isinstance(self.current_token, PunctuationToken)
            and self.current_token.value in chars
        )

    def error(self, message: str) -> None:
        """Raise a :class:`FormulaSyntaxError` pointing at the current token."""
        raise FormulaSyntaxError(message, self.text, self.current_token.position)

    def cast_literal(self, value: str) -> str | float | int | bool | None:
        """Cast a literal in a formula to a Python value.

        As the tokenizer returns literals as strings, we need to detect
        if the string represents a constant, an integer, a float or a string
        and cast it to the appropriate Python type.
        """
        if value in ("TRUE", "FALSE"):
            return value == "TRUE"
        elif value in ("NA", "NULL"):
            return None
        elif value[0] == value[-1] and value[0] in ("'", '"'):
            return _unescape(value[1:-1])
        try:
            return int(value)
        except ValueError:
            return float(value)


def _unescape(text: str) -> str:
    """Resolve backslash escapes inside quoted strings, ``\\'`` becomes ``'``."""
    result = []
    chars = iter(text)
    for char in chars:
        if char == "\\":
            result.append(next(chars, "\\"))
        else:
            result.append(char)
    return "".join(result)
