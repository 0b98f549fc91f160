"""Fetch a repository with all issues and issue comments resolved."""
import asyncio
import json
from gql_pager.config import load_token
from gql_pager.errors import GqlPagerError
from gql_pager.print_utils import Print, safe_print
from gql_pager.queries import fetch_repository
from gql_pager.transport import AsyncTransport
from gql_pager.utils import iso_timestamp


def summarize(tree):
    repository = (tree or {}).get("repository") or {}
    issues = repository.get("issues") or []
    comments = sum(len(issue.get("comments") or []) for issue in issues)
    return repository.get("nameWithOwner"), len(issues), comments


async def _fetch_repo_async(owner, name, token, since, comments_since, page_size, show_rate_limit):
    delivered = []
    async with AsyncTransport() as transport:
        await fetch_repository(
            owner, name, delivered.append,
            since=since, comments_since=comments_since, page_size=page_size,
            transport=transport, token=token,
        )
        if show_rate_limit:
            Print.info(transport.quota_info())
    return delivered[0]


def cmd_repo(args):
    repo = (args.repo or "").strip()
    if repo.count("/") != 1 or not all(repo.split("/")):
        Print.error("Repository must be given as OWNER/NAME.")
        return 1
    for flag, value in (("--since", args.since), ("--comments-since", args.comments_since)):
        if value is None:
            continue
        try:
            iso_timestamp(value)
        except ValueError:
            Print.error(f"{flag} must be an ISO-8601 timestamp, e.g. 2024-05-01T00:00:00Z.")
            return 1
    token = load_token()
    if not token:
        Print.error("GitHub token missing. Run 'gql-pager login' or set GITHUB_TOKEN.")
        return 1
    owner, name = repo.split("/")
    tree = asyncio.run(_fetch_repo_async(
        owner, name, token, args.since, args.comments_since, args.page_size,
        getattr(args, "show_rate_limit", False),
    ))
    full_name, issue_count, comment_count = summarize(tree)
    if full_name is None:
        raise GqlPagerError(f"Repository {repo} not found")
    safe_print("")
    Print.success(f"{full_name}: {issue_count} issues, {comment_count} comments")
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(tree, f, indent=2)
        Print.info(f"Saved to {args.output}")
    safe_print("")
    return 0
