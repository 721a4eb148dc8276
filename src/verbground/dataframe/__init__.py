"""Dataframe library built on top of the verbground compute engine.

A dataframe library is a tool designed to handle and manipulate structured data,
typically in the form of tables (i.e., rows and columns).
It allows users to load data from various sources (like CSV files),
explore it, apply transformations, and analyze it.

The transformations are expressed as *verbs*, each verb
takes a table and returns a new table::

    arrange     sort the rows
    filter      keep the rows matching a condition
    distinct    remove duplicate rows
    sample_n    pick random rows
    select      keep some of the columns
    rename      change the name of some columns
    mutate      compute new columns
    transmute   compute new columns and drop the others

For example, using the measurements dataset shipped
with verbground:

>>> from verbground.datasets import load_measurements
>>> from verbground.dataframe import Dataframe, col, desc
>>> df = Dataframe(load_measurements()) \\
...   .filter(col("sample") == "D") \\
...   .select("replicate", "intensity") \\
...   .arrange(desc("intensity"))
>>> df.to_pydict()
{'replicate': ['r2', 'r1', 'r3'], 'intensity': [82.1, 80.3, 79.5]}
"""

from ..compute import col, lit
from ..compute.functions import (
  between,
  case_when,
  coalesce,
  if_else,
  is_in,
  is_na,
  na_if,
  replace_na,
)
from . import selectors
from .dataframe import Dataframe, desc
from .selectors import (
  col_named,
  column_range,
  contains,
  ends_with,
  everything,
  exclude,
  matches,
  starts_with,
)

__all__ = (
  "Dataframe",
  "col",
  "lit",
  "desc",
  "selectors",
  "between",
  "case_when",
  "coalesce",
  "if_else",
  "is_in",
  "is_na",
  "na_if",
  "replace_na",
  "col_named",
  "column_range",
  "contains",
  "ends_with",
  "everything",
  "exclude",
  "matches",
  "starts_with",
)
