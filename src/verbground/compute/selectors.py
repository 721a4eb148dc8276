"""Pick columns by name, by pattern or by position.

When a table has many columns, listing all those we want
to keep is tedious. Selectors describe columns
by some property of their name instead, and they are resolved
against the actual columns of the data only when the
query is executed::

    starts_with("conc")                      ->  concentration
    column_range("sample", "concentration")  ->  sample, replicate, concentration
    -col_named("intensity")                  ->  everything except intensity

Resolving a list of selectors follows a few rules:

1. If the first selector is an exclusion, we start from all the
   columns and remove from there, otherwise we start from no column.
2. Inclusions append the columns they match, in the order
   they appear in the data, unless they were already selected.
3. Exclusions remove the columns they match from those selected so far.
"""

import abc
import re

from .base import ColumnNotFoundError


class Selector(abc.ABC):
    """Matches a set of columns out of the available ones."""

    @abc.abstractmethod
    def match(self, columns: list[str]) -> list[str]:
        """Return the matched columns, in the order they should be selected."""
        ...

    @abc.abstractmethod
    def __str__(self) -> str: ...

    def __repr__(self) -> str:
        return str(self)

    def __neg__(self) -> "Selector":
        return Exclude(self)

    __invert__ = __neg__


class ColumnName(Selector):
    """Select exactly one column by its name."""

    def __init__(self, name: str) -> None:
        self.name = name

    def match(self, columns: list[str]) -> list[str]:
        if self.name not in columns:
            raise ColumnNotFoundError(self.name, columns)
        return [self.name]

    def __str__(self) -> str:
        return self.name


class StartsWith(Selector):
    """Select the columns whose name starts with a prefix."""

    def __init__(self, prefix: str, ignore_case: bool = True) -> None:
        self.prefix = prefix
        self.ignore_case = ignore_case

    def match(self, columns: list[str]) -> list[str]:
        if self.ignore_case:
            prefix = self.prefix.lower()
            return [c for c in columns if c.lower().startswith(prefix)]
        return [c for c in columns if c.startswith(self.prefix)]

    def __str__(self) -> str:
        return f"starts_with({self.prefix!r})"


class EndsWith(Selector):
    """Select the columns whose name ends with a suffix."""

    def __init__(self, suffix: str, ignore_case: bool = True) -> None:
        self.suffix = suffix
        self.ignore_case = ignore_case

    def match(self, columns: list[str]) -> list[str]:
        if self.ignore_case:
            suffix = self.suffix.lower()
            return [c for c in columns if c.lower().endswith(suffix)]
        return [c for c in columns if c.endswith(self.suffix)]

    def __str__(self) -> str:
        return f"ends_with({self.suffix!r})"


class Contains(Selector):
    """Select the columns whose name contains a literal string."""

    def __init__(self, text: str, ignore_case: bool = True) -> None:
        self.text = text
        self.ignore_case = ignore_case

    def match(self, columns: list[str]) -> list[str]:
        if self.ignore_case:
            text = self.text.lower()
            return [c for c in columns if text in c.lower()]
        return [c for c in columns if self.text in c]

    def __str__(self) -> str:
        return f"contains({self.text!r})"


class Matches(Selector):
    """Select the columns whose name matches a regular expression.

    The expression can match anywhere in the name,
    use ``^`` and ``$`` to anchor it.
    """

    def __init__(self, pattern: str, ignore_case: bool = True) -> None:
        self.pattern = pattern
        self.regex = re.compile(pattern, re.IGNORECASE if ignore_case else 0)

    def match(self, columns: list[str]) -> list[str]:
        return [c for c in columns if self.regex.search(c)]

    def __str__(self) -> str:
        return f"matches({self.pattern!r})"


class Everything(Selector):
    """Select all the columns."""

    def match(self, columns: list[str]) -> list[str]:
        return list(columns)

    def __str__(self) -> str:
        return "everything()"


class ColumnRange(Selector):
    """Select a contiguous range of columns, both ends included.

    When ``last`` comes before ``first`` in the data the
    range is selected backward, like ``intensity:sample`` in R.
    """

    def __init__(self, first: str, last: str) -> None:
        self.first = first
        self.last = last

    def match(self, columns: list[str]) -> list[str]:
        for name in (self.first, self.last):
            if name not in columns:
                raise ColumnNotFoundError(name, columns)
        start = columns.index(self.first)
        end = columns.index(self.last)
        if start <= end:
            return columns[start : end + 1]
        return columns[end : start + 1][::-1]

    def __str__(self) -> str:
        return f"{self.first}:{self.last}"


class Exclude(Selector):
    """Remove the columns matched by another selector."""

    def __init__(self, selector: "Selector | str") -> None:
        self.selector = as_selector(selector)

    def match(self, columns: list[str]) -> list[str]:
        return self.selector.match(columns)

    def __neg__(self) -> Selector:
        return self.selector

    __invert__ = __neg__

    def __str__(self) -> str:
        return f"-{self.selector}"


def as_selector(value: "Selector | str") -> Selector:
    """Column names are the most common selector, accept them as plain strings."""
    if isinstance(value, Selector):
        return value
    if isinstance(value, str):
        return ColumnName(value)
    raise TypeError(f"Invalid column selector: {value!r}")


def resolve_columns(columns: list[str], selectors: list["Selector | str"]) -> list[str]:
    """Resolve selectors into the list of column names they select.

    :param columns: The columns available in the data, in their order.
    :param selectors: The selectors or column names to resolve.
    """
    selectors = [as_selector(s) for s in selectors]
    if selectors and isinstance(selectors[0], Exclude):
        selected = list(columns)
    else:
        selected = []

    for selector in selectors:
        matched = selector.match(columns)
        if isinstance(selector, Exclude):
            selected = [c for c in selected if c not in matched]
        else:
            selected.extend(c for c in matched if c not in selected)
    return selected


col_named = ColumnName
starts_with = StartsWith
ends_with = EndsWith
contains = Contains
matches = Matches
everything = Everything
column_range = ColumnRange
exclude = Exclude
