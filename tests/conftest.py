"""Test configuration ensuring local package takes precedence over installed copies."""
from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
PROJECT_STR = str(PROJECT_ROOT)
if PROJECT_STR not in sys.path:
    sys.path.insert(0, PROJECT_STR)

from gql_pager import queries  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_log_file(monkeypatch, tmp_path):
    log_file = tmp_path / "logs" / "gql-pager.log"
    monkeypatch.setattr("gql_pager.logging_utils.LOG_FILE", str(log_file))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    return log_file


def make_issue(number, created_at, comment_count=0, comment_stamps=None):
    stamps = comment_stamps or [f"2024-06-0{9 - i}T00:00:00Z" for i in range(comment_count)]
    return {
        "id": f"I{number}",
        "number": number,
        "title": f"Issue {number}",
        "createdAt": created_at,
        "comments": [
            {"id": f"C{number}-{i + 1}", "body": f"comment {i + 1} on #{number}", "updatedAt": stamp}
            for i, stamp in enumerate(stamps)
        ],
    }


class FakeGitHub:
    """Transport stub serving a paginated repository with cursor = item offset.

    Fails the test if a second call starts while one is outstanding.
    """
    def __init__(self, issues, errors_on_call=None, status_on_call=None):
        self.issues = issues
        self.errors_on_call = errors_on_call or {}
        self.status_on_call = status_on_call or {}
        self.calls = []
        self.outstanding = 0
        self.max_outstanding = 0

    async def issue(self, url, method, headers, body):
        self.outstanding += 1
        self.max_outstanding = max(self.max_outstanding, self.outstanding)
        try:
            assert self.outstanding == 1, "two calls outstanding for one fetch"
            await asyncio.sleep(0)
            self.calls.append(body)
            number = len(self.calls)
            if number in self.status_on_call:
                return self.status_on_call[number], "Bad Gateway"
            if number in self.errors_on_call:
                return 200, json.dumps({"data": None, "errors": self.errors_on_call[number]})
            return 200, json.dumps({"data": self.respond(body)})
        finally:
            self.outstanding -= 1

    @staticmethod
    def page(items, cursor, size, render):
        start = int(cursor) if cursor else 0
        chunk = items[start:start + size]
        end = start + len(chunk)
        return {
            "totalCount": len(items),
            "pageInfo": {"hasNextPage": end < len(items), "endCursor": str(end) if chunk else cursor},
            "edges": [
                {"cursor": str(start + i + 1), "node": render(item)} for i, item in enumerate(chunk)
            ],
        }

    def render_issue(self, issue, variables):
        node = {key: issue[key] for key in ("id", "number", "title", "createdAt")}
        if variables["getComments"]:
            node["comments"] = self.page(issue["comments"], None, variables["pageSize"], dict)
        return node

    def respond(self, body):
        query, variables = body["query"], body["variables"]
        size = variables["pageSize"]

        def issues_page():
            return self.page(
                self.issues, variables.get("cursor"), size, lambda issue: self.render_issue(issue, variables)
            )

        if query == queries.REPOSITORY_QUERY:
            repository = {
                "id": "R1",
                "nameWithOwner": f"{variables['owner']}/{variables['name']}",
                "description": "demo",
                "createdAt": "2020-01-01T00:00:00Z",
                "stargazerCount": 3,
            }
            if variables["getIssues"]:
                repository["issues"] = issues_page()
            return {"repository": repository}
        if query == queries.ISSUES_QUERY:
            return {"repository": {"issues": issues_page()}}
        if query == queries.ISSUE_COMMENTS_QUERY:
            issue = next(i for i in self.issues if i["id"] == variables["issueId"])
            return {"node": {"comments": self.page(issue["comments"], variables["cursor"], size, dict)}}
        raise AssertionError("unexpected query")


@pytest.fixture
def fake_github():
    return FakeGitHub


@pytest.fixture
def issue_factory():
    return make_issue
