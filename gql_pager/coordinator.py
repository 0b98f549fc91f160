"""Builds and dispatches the request for the next page a walk needs."""
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from gql_pager.errors import GraphError, SpecMismatchError, TransportError
from gql_pager.logging_utils import log
from gql_pager.spec import MISSING, Constant, Cursor, FromAncestor, SpecEntry
from gql_pager.tree import Connection, Scalar


@dataclass(frozen=True)
class OutboundCall:
    entry: SpecEntry
    body: Dict[str, Any]


def decode_envelope(status: Optional[int], raw_body) -> Any:
    """Return the `data` member of a GraphQL response or raise."""
    if status is None or not 200 <= status < 300:
        raise TransportError(f"GraphQL error: HTTP {status}", status)
    envelope = raw_body
    if isinstance(raw_body, (bytes, bytearray)):
        raw_body = raw_body.decode("utf-8", errors="replace")
    if isinstance(raw_body, str):
        try:
            envelope = json.loads(raw_body)
        except ValueError:
            raise TransportError("Invalid JSON received from API", status)
    if not isinstance(envelope, dict):
        raise TransportError("Unexpected response envelope", status)
    errors = envelope.get("errors")
    if errors:
        raise GraphError(errors, status, envelope.get("data"))
    data = envelope.get("data")
    if data is None:
        raise GraphError([{"message": "Response carried no data"}], status)
    return data


class PaginationCoordinator:
    """Decides the variables for the next call and issues it through a transport.

    The first call of a fetch enables every capability flag in the table. A
    follow-up enables only the flags of the connection being paginated and of
    the connections nested under it.
    """
    def __init__(self, transport):
        self.transport = transport

    def initial_call(self, request) -> OutboundCall:
        entry = request.table.entry_for(request.root_path)
        flags = {flag: True for flag in request.table.flags()}
        return self._build(request, entry, self.bind_variables(request, entry, None), flags)

    def follow_up(self, request, zipper, entry: SpecEntry) -> OutboundCall:
        enabled = set(request.table.descendant_flags(entry))
        flags = {flag: flag in enabled for flag in request.table.flags()}
        return self._build(request, entry, self.bind_variables(request, entry, zipper), flags)

    def _build(self, request, entry, variables, flags) -> OutboundCall:
        query = request.query_sources.get(entry.query)
        if query is None:
            raise SpecMismatchError(f"No query source named {entry.query!r}")
        variables = dict(variables)
        variables.update(flags)
        return OutboundCall(entry, {"query": query, "variables": variables})

    def bind_variables(self, request, entry: SpecEntry, zipper) -> Dict[str, Any]:
        values = {}
        for name, binding in entry.bindings.items():
            if isinstance(binding, Cursor):
                values[name] = self._cursor(zipper)
            elif isinstance(binding, FromAncestor):
                values[name] = self._ancestor_value(zipper, binding.field, entry)
            elif isinstance(binding, Constant):
                values[name] = self._constant(request, name, binding)
            else:
                raise SpecMismatchError(f"Unknown binding {binding!r} for ${name}")
        return values

    @staticmethod
    def _cursor(zipper):
        if zipper is None:
            return None
        node = zipper.node
        if isinstance(node, Connection):
            return node.page_info.end_cursor
        return None

    @staticmethod
    def _ancestor_value(zipper, field: str, entry: SpecEntry):
        location = ".".join(entry.field_path)
        if zipper is None:
            raise SpecMismatchError(f"{field!r} for {location} cannot be bound before the first response")
        mapping = zipper.nearest_mapping()
        child_id = mapping.get(field) if mapping is not None else None
        if child_id is None:
            raise SpecMismatchError(f"No {field!r} on the object enclosing {location}")
        node = zipper.arena.get(child_id)
        if not isinstance(node, Scalar) or node.value is None:
            raise SpecMismatchError(f"{field!r} enclosing {location} is not a scalar value")
        return node.value

    @staticmethod
    def _constant(request, name: str, binding: Constant):
        if name in request.variables:
            return request.variables[name]
        if name in request.constants:
            return request.constants[name]
        if binding.value is MISSING:
            raise SpecMismatchError(f"No value supplied for ${name}")
        return binding.value

    async def dispatch(self, request, call: OutboundCall) -> Any:
        request.calls += 1
        log(f"GraphQL call #{request.calls} for {'.'.join(call.entry.field_path) or '<root>'}")
        status, raw_body = await self.transport.issue(request.endpoint, "POST", request.headers, call.body)
        return decode_envelope(status, raw_body)
