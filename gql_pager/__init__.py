"""Resolve nested, paginated GraphQL results into one materialized tree."""
__version__ = "0.3.1"

from gql_pager.errors import (
    GqlPagerError,
    TransportError,
    GraphError,
    SpecMismatchError,
    InvariantViolation,
)
from gql_pager.spec import Cursor, FromAncestor, Constant, SpecEntry, SpecTable
from gql_pager.fetcher import fetch, fetch_tree, run_fetch

__all__ = [
    "__version__",
    "GqlPagerError",
    "TransportError",
    "GraphError",
    "SpecMismatchError",
    "InvariantViolation",
    "Cursor",
    "FromAncestor",
    "Constant",
    "SpecEntry",
    "SpecTable",
    "fetch",
    "fetch_tree",
    "run_fetch",
]
