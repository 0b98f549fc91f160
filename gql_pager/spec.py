"""Declarative pagination specification.

A specification is an ordered table of entries, one per paginated connection
path in the result tree. Each entry names the query used to fetch the next
page of that connection, where the connection sits in that query's response,
and how the query variables are bound.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from gql_pager.errors import SpecMismatchError
from gql_pager.utils import iso_timestamp

Step = Union[str, Tuple[str, str]]
Path = Tuple[Step, ...]

MISSING = object()


@dataclass(frozen=True)
class Cursor:
    """Bind the end cursor of the previous page of this connection."""


@dataclass(frozen=True)
class FromAncestor:
    """Bind `field` of the nearest enclosing object, e.g. an issue id."""
    field: str


@dataclass(frozen=True)
class Constant:
    """Bind a caller variable or fetch constant of the same name, else `value`."""
    value: Any = MISSING


Binding = Union[Cursor, FromAncestor, Constant]


def expand_path(path: Iterable[Step]) -> Tuple[str, ...]:
    """Flatten pair steps so a path compares against field names."""
    names: List[str] = []
    for step in path:
        if isinstance(step, (tuple, list)):
            if len(step) != 2:
                raise SpecMismatchError(f"Path step {step!r} must be a field name or a pair")
            names.extend(step)
        else:
            names.append(step)
    return tuple(names)


@dataclass(frozen=True)
class SpecEntry:
    path: Path
    query: str
    result_path: Tuple[str, ...] = ()
    bindings: Dict[str, Binding] = field(default_factory=dict)
    since: Optional[Union[str, datetime]] = None
    since_field: str = "createdAt"
    flag: Optional[str] = None

    def __post_init__(self):
        if self.since is not None:
            try:
                iso_timestamp(self.since)
            except ValueError as e:
                raise SpecMismatchError(f"Invalid cutoff for {'.'.join(self.field_path)}: {e}")

    @property
    def field_path(self) -> Tuple[str, ...]:
        return expand_path(self.path)

    @property
    def cutoff(self) -> Optional[str]:
        if self.since is None:
            return None
        return iso_timestamp(self.since)


class SpecTable:
    """Ordered pagination specification keyed by expanded field path."""
    def __init__(self, entries: Iterable[SpecEntry]):
        self.entries: List[SpecEntry] = list(entries)
        self._by_path: Dict[Tuple[str, ...], SpecEntry] = {}
        for entry in self.entries:
            key = entry.field_path
            if key in self._by_path:
                raise SpecMismatchError(f"Duplicate specification entry for {'.'.join(key)}")
            self._by_path[key] = entry

    def lookup(self, field_path: Iterable[str]) -> Optional[SpecEntry]:
        return self._by_path.get(tuple(field_path))

    def entry_for(self, path: Path) -> SpecEntry:
        entry = self.lookup(expand_path(path))
        if entry is None:
            raise SpecMismatchError(f"No specification entry for {'.'.join(expand_path(path))}")
        return entry

    def flags(self) -> List[str]:
        return [entry.flag for entry in self.entries if entry.flag]

    def descendant_flags(self, entry: SpecEntry) -> List[str]:
        """Flags of `entry` and of every entry nested under its path."""
        prefix = entry.field_path
        return [
            other.flag for other in self.entries
            if other.flag and other.field_path[:len(prefix)] == prefix
        ]

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
