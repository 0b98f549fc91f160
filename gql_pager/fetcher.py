"""Public entry points: drive a walk from the first request to delivery."""
import asyncio
from typing import Any, Callable, Dict, Optional

from gql_pager.config import auth_headers
from gql_pager.constants import GRAPHQL_URL
from gql_pager.coordinator import PaginationCoordinator
from gql_pager.errors import GraphError, TransportError
from gql_pager.request import Request
from gql_pager.spec import Path, SpecTable
from gql_pager.transport import AsyncTransport
from gql_pager.walker import ResponseWalker


async def _drive(request: Request, transport) -> None:
    coordinator = PaginationCoordinator(transport)
    walker = ResponseWalker(coordinator)
    call = walker.start(request)
    while call is not None:
        try:
            data = await coordinator.dispatch(request, call)
        except (TransportError, GraphError) as e:
            walker.fail(request, e)
            return
        call = walker.resume(request, data)


async def fetch(
    root_path: Path,
    query_sources: Dict[str, str],
    constants: Optional[Dict[str, Any]],
    table: SpecTable,
    callback: Callable[[Any], None],
    variables: Optional[Dict[str, Any]] = None,
    errorback: Optional[Callable[[Any, Optional[int]], None]] = None,
    transport=None,
    endpoint: str = GRAPHQL_URL,
    headers: Optional[Dict[str, str]] = None,
    token: Optional[str] = None,
) -> None:
    """Resolve every declared connection and hand the tree to `callback` once.

    Transport and GraphQL errors go to `errorback(errors, status)` when one is
    given and are raised otherwise. Specification mismatches always raise.
    `callback` is never called for a failed fetch.
    """
    if headers is None:
        headers = auth_headers(token)
    request = Request(
        endpoint=endpoint,
        headers=headers,
        table=table,
        query_sources=query_sources,
        root_path=tuple(root_path),
        callback=callback,
        errorback=errorback,
        constants=dict(constants or {}),
        variables=dict(variables or {}),
    )
    if transport is not None:
        await _drive(request, transport)
        return
    async with AsyncTransport() as owned:
        await _drive(request, owned)


async def fetch_tree(root_path, query_sources, constants, table, **kwargs) -> Any:
    """Like `fetch`, returning the delivered tree instead of calling back."""
    delivered = []
    await fetch(root_path, query_sources, constants, table, delivered.append, **kwargs)
    return delivered[0] if delivered else None


def run_fetch(root_path, query_sources, constants, table, **kwargs) -> Any:
    return asyncio.run(fetch_tree(root_path, query_sources, constants, table, **kwargs))
