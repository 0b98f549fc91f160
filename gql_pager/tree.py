"""Materialized result tree stored in an index-based arena.

Every JSON value from a response is turned into exactly one node variant when
it enters the arena. Branch nodes refer to their children by id, so a subtree
can be swapped by allocating new ids for the changed nodes only.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from gql_pager.errors import InvariantViolation


@dataclass(frozen=True)
class PageInfo:
    has_next_page: bool = False
    end_cursor: Optional[str] = None


@dataclass(frozen=True)
class Edge:
    node_id: int
    cursor: Optional[str] = None


@dataclass(frozen=True)
class Scalar:
    value: Any = None


@dataclass(frozen=True)
class Mapping:
    fields: Tuple[Tuple[str, int], ...] = ()

    def get(self, name: str) -> Optional[int]:
        for key, child_id in self.fields:
            if key == name:
                return child_id
        return None


@dataclass(frozen=True)
class Sequence:
    items: Tuple[int, ...] = ()


@dataclass(frozen=True)
class Connection:
    edges: Tuple[Edge, ...] = ()
    page_info: PageInfo = PageInfo()

    @property
    def item_ids(self) -> Tuple[int, ...]:
        return tuple(edge.node_id for edge in self.edges)


class Arena:
    """Append-only node table keyed by integer id."""
    def __init__(self):
        self._nodes: Dict[int, Any] = {}
        self._next_id = 0

    def alloc(self, node) -> int:
        node_id = self._next_id
        self._nodes[node_id] = node
        self._next_id += 1
        return node_id

    def get(self, node_id: int):
        try:
            return self._nodes[node_id]
        except KeyError:
            raise InvariantViolation(f"Unknown node id {node_id}")

    def __len__(self):
        return len(self._nodes)


def is_connection_payload(value) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("pageInfo"), dict)
        and ("edges" in value or "nodes" in value)
    )


def _page_info(raw: Dict[str, Any]) -> PageInfo:
    return PageInfo(
        has_next_page=bool(raw.get("hasNextPage")),
        end_cursor=raw.get("endCursor") or None,
    )


def materialize(arena: Arena, value) -> int:
    """Allocate `value` and all of its descendants, returning the root id."""
    if is_connection_payload(value):
        edges = []
        if "edges" in value:
            for raw_edge in value.get("edges") or []:
                raw_edge = raw_edge or {}
                edges.append(Edge(materialize(arena, raw_edge.get("node")), raw_edge.get("cursor")))
        else:
            for raw_node in value.get("nodes") or []:
                edges.append(Edge(materialize(arena, raw_node)))
        return arena.alloc(Connection(tuple(edges), _page_info(value["pageInfo"])))
    if isinstance(value, dict):
        return arena.alloc(Mapping(tuple((key, materialize(arena, child)) for key, child in value.items())))
    if isinstance(value, list):
        return arena.alloc(Sequence(tuple(materialize(arena, child) for child in value)))
    return arena.alloc(Scalar(value))


def flatten(connection: Connection) -> Sequence:
    return Sequence(connection.item_ids)


def children(node) -> Tuple[int, ...]:
    if isinstance(node, Mapping):
        return tuple(child_id for _, child_id in node.fields)
    if isinstance(node, Sequence):
        return node.items
    if isinstance(node, Connection):
        return node.item_ids
    return ()


def with_child(node, index: int, child_id: int):
    """Copy of branch `node` whose child at `index` is `child_id`."""
    if isinstance(node, Mapping):
        key, _ = node.fields[index]
        fields = node.fields[:index] + ((key, child_id),) + node.fields[index + 1:]
        return Mapping(fields)
    if isinstance(node, Sequence):
        # copies every sibling id, so splicing under each of n items is O(n^2) per fetch
        return Sequence(node.items[:index] + (child_id,) + node.items[index + 1:])
    if isinstance(node, Connection):
        edge = node.edges[index]
        edges = node.edges[:index] + (Edge(child_id, edge.cursor),) + node.edges[index + 1:]
        return Connection(edges, node.page_info)
    raise InvariantViolation(f"{type(node).__name__} has no children")


def to_plain(arena: Arena, node_id: int):
    """Rebuild plain dict/list data. Connections come out flattened."""
    node = arena.get(node_id)
    if isinstance(node, Scalar):
        return node.value
    if isinstance(node, Mapping):
        return {key: to_plain(arena, child_id) for key, child_id in node.fields}
    return [to_plain(arena, child_id) for child_id in children(node)]
