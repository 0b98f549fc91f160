"""Error types raised by gql_pager."""
from typing import Any, Dict, List, Optional


class GqlPagerError(Exception):
    """Base class for every error raised by gql_pager."""


class TransportError(GqlPagerError):
    """Network or HTTP-level failure, including non-2xx responses."""
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
        self.errors: List[Dict[str, Any]] = [{"message": message}]


class GraphError(GqlPagerError):
    """The response envelope carried a non-empty error list."""
    def __init__(self, errors: List[Dict[str, Any]], status: Optional[int] = 200, data: Any = None):
        self.errors = list(errors)
        self.status = status
        self.data = data
        first = self.errors[0].get("message", "Unknown error") if self.errors else "Unknown error"
        super().__init__(f"GraphQL error: {first}")


class SpecMismatchError(GqlPagerError):
    """The pagination specification does not match the response shape."""


class InvariantViolation(GqlPagerError):
    """Tree or walker misuse. Always a programming defect."""
