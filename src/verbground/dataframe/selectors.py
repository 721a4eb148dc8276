"""Column selectors for :meth:`verbground.dataframe.Dataframe.select`.

Selectors pick columns by a property of their name
instead of listing them one by one::

    df.select("sample", starts_with("conc"))
    df.select(column_range("sample", "concentration"))
    df.select(-col_named("intensity"))

See :mod:`verbground.compute.selectors` for the rules
followed when combining multiple selectors.
"""

from ..compute.selectors import (
    Selector,
    col_named,
    column_range,
    contains,
    ends_with,
    everything,
    exclude,
    matches,
    resolve_columns,
    starts_with,
)

__all__ = (
    "Selector",
    "col_named",
    "column_range",
    "contains",
    "ends_with",
    "everything",
    "exclude",
    "matches",
    "resolve_columns",
    "starts_with",
)
