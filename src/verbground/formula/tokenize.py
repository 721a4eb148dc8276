"""Split a formula into tokens.

A formula like ``intensity / concentration > 10 & !is.na(intensity)``
is first converted into a sequence of tokens::

    [intensity, /, concentration, >, 10, &, !, is.na, (, intensity, )]

The tokenizer is regex based, at each position it tries the
known token patterns in order and picks the first one that matches.
Operators with multiple spellings (``&``, ``&&``, ``AND``)
are converted to a single canonical spelling, so that the parser
doesn't have to care about them.
"""

import re


class Token:
    """A token of a formula, identified by its type and its text."""

    def __init__(self, value: str, position: int = -1) -> None:
        """
        :param value: The text of the token.
        :param position: Where the token starts in the formula, used for errors.
        """
        self.value = value
        self.position = position

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.value == other.value

    def __hash__(self) -> int:
        return hash((type(self), self.value))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.value!r})"


class IdentifierToken(Token):
    """A column or function name."""


class LiteralToken(Token):
    """A number, a quoted string or one of ``TRUE FALSE NA NULL``."""


class OperatorToken(Token):
    """An arithmetic, comparison or logical operator."""


class PunctuationToken(Token):
    """Parenthesis and commas."""


class EOFToken(Token):
    """Marks the end of the formula."""

    def __init__(self, position: int = -1) -> None:
        super().__init__("", position)


class Tokenizer:
    """Convert a formula text into a list of tokens.

    >>> Tokenizer("conc >= 1 AND sample == 'A'").tokenize()
    [IdentifierToken('conc'), OperatorToken('>='), LiteralToken('1'), OperatorToken('&'), IdentifierToken('sample'), OperatorToken('=='), LiteralToken("'A'")]
    """

    CONSTANTS = ("TRUE", "FALSE", "NA", "NULL")
    KEYWORD_OPERATORS = {"AND": "&", "OR": "|", "NOT": "!"}
    OPERATOR_ALIASES = {"&&": "&", "||": "|"}

    TOKEN_PATTERNS = (
        (None, re.compile(r"\s+")),
        ("backquoted", re.compile(r"`([^`]+)`")),
        (LiteralToken, re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"")),
        (
            LiteralToken,
            re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?(?![A-Za-z_])"),
        ),
        (
            OperatorToken,
            re.compile(r"%in%|&&|\|\||==|!=|<=|>=|<|>|\+|-|\*|/|\^|&|\||!"),
        ),
        (PunctuationToken, re.compile(r"[(),]")),
        ("word", re.compile(r"[A-Za-z_.][A-Za-z0-9_.]*")),
    )

    def __init__(self, text: str) -> None:
        """
        :param text: The formula to tokenize.
        """
        self.text = text

    def tokenize(self) -> list[Token]:
        """Produce the list of tokens of the formula.

        Raises :class:`FormulaSyntaxError` when some part of the formula
        can't be recognized as any token.
        """
        tokens: list[Token] = []
        pos = 0
        while pos < len(self.text):
            for kind, pattern in self.TOKEN_PATTERNS:
                match = pattern.match(self.text, pos)
                if match is None:
                    continue
                token = self._make_token(kind, match, pos)
                if token is not None:
                    tokens.append(token)
                pos = match.end()
                break
            else:
                char = self.text[pos]
                hint = ", use == to compare values" if char == "=" else ""
                raise FormulaSyntaxError(
                    f"Unexpected character {char!r}{hint}", self.text, pos
                )
        return tokens

    def _make_token(self, kind: object, match: re.Match, pos: int) -> Token | None:
        if kind is None:
            return None
        elif kind == "backquoted":
            return IdentifierToken(match.group(1), pos)
        elif kind == "word":
            word = match.group(0)
            if word in self.KEYWORD_OPERATORS:
                return OperatorToken(self.KEYWORD_OPERATORS[word], pos)
            elif word in self.CONSTANTS:
                return LiteralToken(word, pos)
            return IdentifierToken(word, pos)
        elif kind is OperatorToken:
            op = match.group(0)
            return OperatorToken(self.OPERATOR_ALIASES.get(op, op), pos)
        return kind(match.group(0), pos)


class FormulaError(Exception):
    """A formula can't be turned into an expression."""


class FormulaSyntaxError(FormulaError):
    """A formula is not written correctly."""

    def __init__(self, message: str, text: str | None = None, position: int = -1) -> None:
        self.message = message
        self.text = text
        self.position = position
        super().__init__(message)

    def __str__(self) -> str:
        if self.text is None or self.position < 0:
            return self.message
        return f"{self.message} at position {self.position}: {self.text}"
