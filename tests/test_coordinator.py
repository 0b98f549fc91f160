import asyncio
import json

import pytest

from gql_pager.coordinator import PaginationCoordinator, decode_envelope
from gql_pager.errors import GraphError, SpecMismatchError, TransportError
from gql_pager.request import Request
from gql_pager.spec import Constant, Cursor, FromAncestor, SpecEntry, SpecTable
from gql_pager.tree import Arena, materialize
from gql_pager.zipper import Zipper

TABLE = SpecTable([
    SpecEntry(
        path=("repository",),
        query="root",
        bindings={"owner": Constant(), "pageSize": Constant(50), "cursor": Cursor()},
    ),
    SpecEntry(path=("repository", "issues"), query="issues", flag="getIssues",
              bindings={"owner": Constant(), "cursor": Cursor()}),
    SpecEntry(path=("repository", "issues", "comments"), query="comments", flag="getComments",
              bindings={"issueId": FromAncestor("id"), "cursor": Cursor()}),
    SpecEntry(path=("repository", "labels"), query="labels", flag="getLabels"),
])
SOURCES = {"root": "query Root", "issues": "query Issues", "comments": "query Comments", "labels": "query Labels"}


def make_request(**kwargs):
    params = dict(
        endpoint="https://example.test/graphql",
        headers={},
        table=TABLE,
        query_sources=SOURCES,
        root_path=("repository",),
        callback=lambda tree: None,
        constants={"owner": "octo"},
    )
    params.update(kwargs)
    return Request(**params)


def focus_on(value, *path):
    arena = Arena()
    zipper = Zipper.at_root(arena, materialize(arena, value))
    while zipper.field_path() != path:
        zipper = zipper.next()
    return zipper


ISSUE_TREE = {
    "repository": {
        "issues": [
            {
                "id": "I7",
                "comments": {"pageInfo": {"hasNextPage": True, "endCursor": "c9"}, "edges": []},
            }
        ]
    }
}


def test_initial_call_requests_every_field():
    call = PaginationCoordinator(None).initial_call(make_request())
    assert call.body["query"] == "query Root"
    assert call.body["variables"] == {
        "owner": "octo",
        "pageSize": 50,
        "cursor": None,
        "getIssues": True,
        "getComments": True,
        "getLabels": True,
    }


def test_follow_up_enables_only_the_paginated_branch():
    zipper = focus_on(ISSUE_TREE, "repository", "issues", "comments")
    entry = TABLE.lookup(("repository", "issues", "comments"))
    call = PaginationCoordinator(None).follow_up(make_request(), zipper, entry)
    assert call.body["query"] == "query Comments"
    assert call.body["variables"] == {
        "issueId": "I7",
        "cursor": "c9",
        "getIssues": False,
        "getComments": True,
        "getLabels": False,
    }


def test_follow_up_for_parent_connection_keeps_nested_flags():
    tree = {"repository": {"issues": {"pageInfo": {"hasNextPage": True, "endCursor": "i1"}, "edges": []}}}
    zipper = focus_on(tree, "repository", "issues")
    entry = TABLE.lookup(("repository", "issues"))
    variables = PaginationCoordinator(None).follow_up(make_request(), zipper, entry).body["variables"]
    assert variables["getIssues"] is True
    assert variables["getComments"] is True
    assert variables["getLabels"] is False
    assert variables["cursor"] == "i1"


def test_caller_variables_take_precedence_over_constants():
    request = make_request(variables={"owner": "someone-else", "pageSize": 5})
    variables = PaginationCoordinator(None).initial_call(request).body["variables"]
    assert variables["owner"] == "someone-else"
    assert variables["pageSize"] == 5


def test_constant_without_any_value_is_a_mismatch():
    with pytest.raises(SpecMismatchError):
        PaginationCoordinator(None).initial_call(make_request(constants={}))


def test_missing_ancestor_field_is_a_mismatch():
    tree = {"repository": {"issues": [{"comments": {"pageInfo": {"hasNextPage": True}, "edges": []}}]}}
    zipper = focus_on(tree, "repository", "issues", "comments")
    entry = TABLE.lookup(("repository", "issues", "comments"))
    with pytest.raises(SpecMismatchError):
        PaginationCoordinator(None).follow_up(make_request(), zipper, entry)


def test_ancestor_binding_on_initial_call_is_a_mismatch():
    table = SpecTable([SpecEntry(path=("node",), query="root", bindings={"id": FromAncestor("id")})])
    request = make_request(table=table, root_path=("node",))
    with pytest.raises(SpecMismatchError):
        PaginationCoordinator(None).initial_call(request)


def test_unknown_query_source_is_a_mismatch():
    with pytest.raises(SpecMismatchError):
        PaginationCoordinator(None).initial_call(make_request(query_sources={}))


def test_decode_envelope_returns_data():
    assert decode_envelope(200, json.dumps({"data": {"viewer": {"login": "alice"}}})) == {"viewer": {"login": "alice"}}
    assert decode_envelope(200, b'{"data": {"a": 1}}') == {"a": 1}


def test_decode_envelope_non_2xx_is_transport_error():
    with pytest.raises(TransportError) as e:
        decode_envelope(502, "Bad Gateway")
    assert e.value.status == 502


def test_decode_envelope_invalid_json_is_transport_error():
    with pytest.raises(TransportError):
        decode_envelope(200, "<html>")


def test_decode_envelope_errors_with_data_is_graph_error():
    body = json.dumps({"data": {"a": 1}, "errors": [{"message": "partial"}]})
    with pytest.raises(GraphError) as e:
        decode_envelope(200, body)
    assert e.value.errors == [{"message": "partial"}]
    assert e.value.data == {"a": 1}
    assert "partial" in str(e.value)


def test_decode_envelope_without_data_is_graph_error():
    with pytest.raises(GraphError):
        decode_envelope(200, "{}")


def test_dispatch_posts_body_and_counts_calls():
    seen = []

    class Transport:
        async def issue(self, url, method, headers, body):
            seen.append((url, method, body))
            return 200, json.dumps({"data": {"ok": True}})

    coordinator = PaginationCoordinator(Transport())
    request = make_request()
    call = coordinator.initial_call(request)
    data = asyncio.run(coordinator.dispatch(request, call))
    assert data == {"ok": True}
    assert request.calls == 1
    assert seen == [("https://example.test/graphql", "POST", call.body)]
