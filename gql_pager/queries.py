"""GitHub GraphQL documents and pagination tables for repository fetches."""
from typing import Any, Dict, Optional, Tuple
from gql_pager.constants import DEFAULT_PAGE_SIZE
from gql_pager.spec import Constant, Cursor, FromAncestor, SpecEntry, SpecTable

COMMENT_FIELDS = """
    fragment CommentFields on IssueComment {
      id
      body
      createdAt
      updatedAt
      author {
        login
      }
    }
"""
ISSUE_FIELDS = """
    fragment IssueFields on Issue {
      id
      number
      title
      state
      createdAt
      author {
        login
      }
      comments(first: $pageSize, orderBy: {field: UPDATED_AT, direction: DESC}) @include(if: $getComments) {
        pageInfo {
          hasNextPage
          endCursor
        }
        edges {
          cursor
          node {
            ...CommentFields
          }
        }
      }
    }
"""
REPOSITORY_QUERY = """
    query Repository($owner: String!, $name: String!, $pageSize: Int!, $cursor: String,
                     $getIssues: Boolean!, $getComments: Boolean!) {
      repository(owner: $owner, name: $name) {
        id
        nameWithOwner
        description
        createdAt
        stargazerCount
        issues(first: $pageSize, after: $cursor, orderBy: {field: CREATED_AT, direction: DESC}) @include(if: $getIssues) {
          pageInfo {
            hasNextPage
            endCursor
          }
          edges {
            cursor
            node {
              ...IssueFields
            }
          }
        }
      }
    }
""" + ISSUE_FIELDS + COMMENT_FIELDS
ISSUES_QUERY = """
    query RepositoryIssues($owner: String!, $name: String!, $pageSize: Int!, $cursor: String,
                           $getIssues: Boolean!, $getComments: Boolean!) {
      repository(owner: $owner, name: $name) {
        issues(first: $pageSize, after: $cursor, orderBy: {field: CREATED_AT, direction: DESC}) @include(if: $getIssues) {
          pageInfo {
            hasNextPage
            endCursor
          }
          edges {
            cursor
            node {
              ...IssueFields
            }
          }
        }
      }
    }
""" + ISSUE_FIELDS + COMMENT_FIELDS
ISSUE_COMMENTS_QUERY = """
    query IssueComments($issueId: ID!, $pageSize: Int!, $cursor: String, $getComments: Boolean!) {
      node(id: $issueId) {
        ... on Issue {
          comments(first: $pageSize, after: $cursor, orderBy: {field: UPDATED_AT, direction: DESC}) @include(if: $getComments) {
            pageInfo {
              hasNextPage
              endCursor
            }
            edges {
              cursor
              node {
                ...CommentFields
              }
            }
          }
        }
      }
    }
""" + COMMENT_FIELDS
QUERY_SOURCES = {
    "repository": REPOSITORY_QUERY,
    "issues": ISSUES_QUERY,
    "issue_comments": ISSUE_COMMENTS_QUERY,
}
ROOT_PATH = ("repository",)


def repository_spec(since=None, comments_since=None) -> Tuple[Tuple[str, ...], Dict[str, str], SpecTable]:
    """Pagination table for a repository, its issues and their comments.

    Issues come newest first by `createdAt` and comments most recently updated
    first, so `since` and `comments_since` can stop paging early.
    """
    repo_bindings = {
        "owner": Constant(),
        "name": Constant(),
        "pageSize": Constant(DEFAULT_PAGE_SIZE),
        "cursor": Cursor(),
    }
    table = SpecTable([
        SpecEntry(path=ROOT_PATH, query="repository", bindings=dict(repo_bindings)),
        SpecEntry(
            path=("repository", "issues"),
            query="issues",
            result_path=("repository", "issues"),
            bindings=dict(repo_bindings),
            since=since,
            flag="getIssues",
        ),
        SpecEntry(
            path=("repository", "issues", "comments"),
            query="issue_comments",
            result_path=("node", "comments"),
            bindings={
                "issueId": FromAncestor("id"),
                "pageSize": Constant(DEFAULT_PAGE_SIZE),
                "cursor": Cursor(),
            },
            since=comments_since,
            since_field="updatedAt",
            flag="getComments",
        ),
    ])
    return ROOT_PATH, dict(QUERY_SOURCES), table


def repository_constants(owner: str, name: str, page_size: Optional[int] = None) -> Dict[str, Any]:
    constants: Dict[str, Any] = {"owner": owner, "name": name}
    if page_size is not None:
        constants["pageSize"] = page_size
    return constants


async def fetch_repository(owner: str, name: str, callback, since=None, comments_since=None,
                           page_size: Optional[int] = None, **kwargs) -> None:
    """Fetch a repository with every issue and issue comment resolved."""
    from gql_pager.fetcher import fetch
    root_path, sources, table = repository_spec(since, comments_since)
    await fetch(root_path, sources, repository_constants(owner, name, page_size), table, callback, **kwargs)
