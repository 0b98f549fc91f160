"""Resumable depth-first merge of paginated responses.

The walker scans the tree in pre-order. At every connection it merges the
newly fetched edges, and if the connection still has pages left it hands back
a follow-up call and suspends. The caller delivers the response to `resume`,
which picks the walk up at the saved focus.
"""
from typing import Any, Optional, Tuple

from gql_pager.coordinator import OutboundCall, PaginationCoordinator
from gql_pager.errors import InvariantViolation, SpecMismatchError
from gql_pager.logging_utils import log
from gql_pager.request import Request, WalkState
from gql_pager.spec import SpecEntry
from gql_pager.tree import Arena, Connection, Edge, Mapping, PageInfo, Scalar, flatten, materialize
from gql_pager.zipper import Zipper


class ResponseWalker:
    def __init__(self, coordinator: PaginationCoordinator):
        self.coordinator = coordinator

    def start(self, request: Request) -> OutboundCall:
        if request.state is not WalkState.START:
            raise InvariantViolation(f"Cannot start a request in state {request.state.name}")
        return self.coordinator.initial_call(request)

    def resume(self, request: Request, data: Any) -> Optional[OutboundCall]:
        """Feed one response in. Returns the next call, or None once delivered."""
        if request.state is WalkState.START:
            arena = Arena()
            zipper = Zipper.at_root(arena, materialize(arena, data))
            incoming = None
        elif request.state is WalkState.AWAIT:
            zipper = request.focus
            incoming = self._incoming_connection(zipper.arena, request.pending, data)
        else:
            raise InvariantViolation(f"Cannot resume a request in state {request.state.name}")
        request.state = WalkState.WALK
        request.pending = None
        return self._walk(request, zipper, incoming)

    def fail(self, request: Request, error) -> None:
        """Terminate without delivering a tree."""
        request.state = WalkState.DONE
        request.focus = None
        request.pending = None
        log(f"Fetch failed after {request.calls} call(s): {error}")
        if request.errorback is None:
            raise error
        request.errorback(getattr(error, "errors", [{"message": str(error)}]), getattr(error, "status", None))

    def _walk(self, request: Request, zipper: Zipper, incoming: Optional[Connection]) -> Optional[OutboundCall]:
        while not zipper.at_end:
            node = zipper.node
            if isinstance(node, Connection):
                entry = request.table.lookup(zipper.field_path())
                merged = self._merge(zipper, node, incoming, entry)
                incoming = None
                if merged.page_info.has_next_page:
                    if entry is not None:
                        zipper = zipper.replace(merged)
                        request.focus = zipper
                        request.pending = entry
                        request.state = WalkState.AWAIT
                        return self.coordinator.follow_up(request, zipper, entry)
                    log(f"No pagination declared for {'.'.join(zipper.field_path())}; keeping fetched pages only")
                zipper = zipper.replace(flatten(merged))
            zipper = zipper.next()
        request.state = WalkState.DONE
        request.focus = None
        result = zipper.root()
        log(f"Fetch resolved after {request.calls} call(s)")
        request.callback(result)
        return None

    def _merge(self, zipper: Zipper, existing: Connection, incoming: Optional[Connection],
               entry: Optional[SpecEntry]) -> Connection:
        if incoming is None:
            kept, fresh, page_info = (), existing.edges, existing.page_info
        else:
            kept, fresh, page_info = existing.edges, incoming.edges, incoming.page_info
        cutoff = entry.cutoff if entry is not None else None
        if cutoff is not None:
            accepted, truncated = self._apply_cutoff(zipper.arena, fresh, entry.since_field, cutoff)
            if truncated:
                log(f"Cutoff {cutoff} reached on {'.'.join(entry.field_path)}; not fetching further pages")
                page_info = PageInfo(False, page_info.end_cursor)
            fresh = accepted
        return Connection(kept + tuple(fresh), page_info)

    @staticmethod
    def _apply_cutoff(arena: Arena, edges: Tuple[Edge, ...], since_field: str, cutoff: str):
        accepted = []
        for edge in edges:
            item = arena.get(edge.node_id)
            stamp_id = item.get(since_field) if isinstance(item, Mapping) else None
            stamp = arena.get(stamp_id) if stamp_id is not None else None
            if not isinstance(stamp, Scalar) or not isinstance(stamp.value, str) or stamp.value <= cutoff:
                return accepted, True
            accepted.append(edge)
        return accepted, False

    @staticmethod
    def _incoming_connection(arena: Arena, entry: SpecEntry, data: Any) -> Connection:
        raw = data
        for key in entry.result_path:
            if not isinstance(raw, dict) or raw.get(key) is None:
                raise SpecMismatchError(
                    f"Follow-up response for {'.'.join(entry.field_path)} has no {'.'.join(entry.result_path)}"
                )
            raw = raw[key]
        connection = arena.get(materialize(arena, raw))
        if not isinstance(connection, Connection):
            raise SpecMismatchError(f"{'.'.join(entry.result_path)} is not a paginated connection")
        return connection
