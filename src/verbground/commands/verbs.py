"""Command line interface for applying verbs to files.

This module provides a command line interface that loads a table
from a file, applies the verbs provided as options in the same order
they were written, and prints the result to the console in a tabular format
using the :mod:`verbground.utils.tabulate` module.
"""

import argparse
import logging
import re
from typing import Any, Sequence

import pyarrow as pa

from verbground.compute import ColumnNotFoundError
from verbground.compute.selectors import (
    Selector,
    col_named,
    column_range,
    contains,
    ends_with,
    everything,
    exclude,
    matches,
    starts_with,
)
from verbground.dataframe import Dataframe, desc
from verbground.dataframe.dataframe import Descending
from verbground.datasets import load_measurements
from verbground.formula import FormulaError, compile_formula, parse_assignment

logger = logging.getLogger(__name__)

SELECTOR_FUNCTIONS = {
    "starts_with": starts_with,
    "ends_with": ends_with,
    "contains": contains,
    "matches": matches,
}
SELECTOR_CALL_RE = re.compile(r"^(\w+)\((.*)\)$")


class AppendVerb(argparse.Action):
    """Record each verb option in a single list, preserving the command line order."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        pipeline = getattr(namespace, "pipeline", None) or []
        pipeline.append((self.dest, values))
        setattr(namespace, "pipeline", pipeline)


def build_parser() -> argparse.ArgumentParser:
    """Create the parser for the command line options."""
    parser = argparse.ArgumentParser(
        description="Apply data manipulation verbs to a table and print the result."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", help="Read the table from a CSV file.")
    source.add_argument("--parquet", help="Read the table from a Parquet file.")
    source.add_argument(
        "--example",
        action="store_true",
        help="Use the measurements example dataset.",
    )

    verbs = parser.add_argument_group(
        "verbs", "Applied in the order they are provided, can be repeated."
    )
    verbs.add_argument(
        "--arrange",
        action=AppendVerb,
        metavar="COLS",
        help="Sort by comma separated columns, wrap in desc() or prefix with - "
        "for descending order.",
    )
    verbs.add_argument(
        "--filter", action=AppendVerb, metavar="EXPR", help="Keep matching rows."
    )
    verbs.add_argument(
        "--distinct",
        action=AppendVerb,
        nargs="?",
        const="",
        metavar="COLS",
        help="Keep unique rows, or unique combinations of the comma separated columns.",
    )
    verbs.add_argument(
        "--sample-n",
        dest="sample_n",
        action=AppendVerb,
        type=int,
        metavar="N",
        help="Sample N random rows.",
    )
    verbs.add_argument(
        "--sample-frac",
        dest="sample_frac",
        action=AppendVerb,
        type=float,
        metavar="F",
        help="Sample a fraction of the rows.",
    )
    verbs.add_argument(
        "--select",
        action=AppendVerb,
        metavar="COLS",
        help="Keep comma separated columns: name, -name, first:last, starts_with(x), "
        "ends_with(x), contains(x), matches(regex), everything().",
    )
    verbs.add_argument(
        "--rename", action=AppendVerb, metavar="NEW=OLD", help="Rename a column."
    )
    verbs.add_argument(
        "--mutate",
        action=AppendVerb,
        metavar="NAME=EXPR",
        help="Add or replace a column.",
    )
    verbs.add_argument(
        "--transmute",
        action=AppendVerb,
        metavar="NAME=EXPR",
        help="Compute a column and drop all the others.",
    )
    verbs.add_argument(
        "--head", action=AppendVerb, type=int, metavar="N", help="Keep the first N rows."
    )

    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for reproducible samples."
    )
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Sample with replacement.",
    )
    parser.add_argument(
        "--max-rows",
        type=int,
        default=20,
        help="How many rows to print at most.",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Print the query plan before the result.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Verbosity of the logging output.",
    )
    return parser


def split_list(text: str) -> list[str]:
    """Split a comma separated list, ignoring commas inside parenthesis."""
    items, depth, current = [], 0, []
    for char in text:
        if char == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current.append(char)
    items.append("".join(current).strip())
    return [item for item in items if item]


def parse_selector(text: str) -> Selector:
    """Convert a selector written on the command line into a :class:`Selector`."""
    if text.startswith("-"):
        return exclude(parse_selector(text[1:]))

    call = SELECTOR_CALL_RE.match(text)
    if call is not None:
        name, argument = call.groups()
        argument = argument.strip().strip("'\"")
        if name == "everything":
            return everything()
        elif name in SELECTOR_FUNCTIONS:
            return SELECTOR_FUNCTIONS[name](argument)
        raise ValueError(f"Unknown selector: {name}()")
    elif ":" in text:
        first, last = text.split(":", 1)
        return column_range(first.strip(), last.strip())
    return col_named(text)


def parse_sorting_key(text: str) -> str | Descending:
    """Read ``-name`` or ``desc(name)`` as a descending key, anything else as ascending.

    As argparse takes values starting with ``-`` for options,
    ``--arrange=-intensity`` or ``--arrange "desc(intensity)"`` are the
    ways to sort by a single descending column.
    """
    call = SELECTOR_CALL_RE.match(text)
    if call is not None and call.group(1) == "desc":
        return desc(call.group(2).strip())
    elif text.startswith("-"):
        return desc(text[1:])
    return text


def apply_verb(df: Dataframe, verb: str, value: Any, args: argparse.Namespace) -> Dataframe:
    """Apply a single verb read from the command line to the dataframe."""
    logger.info("Applying %s %r", verb, value)
    if verb == "arrange":
        return df.arrange(*(parse_sorting_key(k) for k in split_list(value)))
    elif verb == "filter":
        return df.filter(compile_formula(value))
    elif verb == "distinct":
        return df.distinct(*split_list(value))
    elif verb == "sample_n":
        return df.sample_n(value, replace=args.replace, seed=args.seed)
    elif verb == "sample_frac":
        return df.sample_frac(value, replace=args.replace, seed=args.seed)
    elif verb == "select":
        return df.select(*(parse_selector(s) for s in split_list(value)))
    elif verb == "rename":
        if "=" not in value:
            raise ValueError(f"Expected NEW=OLD, got {value!r}")
        new, old = value.split("=", 1)
        return df.rename({new.strip(): old.strip()})
    elif verb == "mutate":
        name, expression = parse_assignment(value)
        return df.mutate({name: expression})
    elif verb == "transmute":
        name, expression = parse_assignment(value)
        return df.transmute(**{name: expression})
    elif verb == "head":
        return df.head(value)
    raise ValueError(f"Unknown verb: {verb}")


def load_source(args: argparse.Namespace) -> Dataframe:
    """Create the dataframe for the data source requested on the command line."""
    if args.example:
        return Dataframe(load_measurements())
    elif args.csv:
        return Dataframe.open_csv(args.csv)
    return Dataframe.open_parquet(args.parquet)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse the command line arguments and apply the verbs."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        df = load_source(args)
        for verb, value in getattr(args, "pipeline", None) or []:
            df = apply_verb(df, verb, value, args)

        if args.explain:
            print(df.explain())
        print(df.show(max_rows=args.max_rows))
    except FormulaError as e:
        print(f"Invalid expression, {e}")
        return 1
    except ColumnNotFoundError as e:
        print(f"Invalid column, {e}")
        return 1
    except FileNotFoundError as e:
        print(f"Unable to read data, {e}")
        return 1
    except pa.ArrowException as e:
        print(f"Invalid expression, {e}")
        return 1
    except ValueError as e:
        print(f"Invalid arguments, {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
