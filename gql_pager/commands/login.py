import getpass
import sys
import requests
from gql_pager.config import load_token, save_token
from gql_pager.constants import REST_USER_URL
from gql_pager.logging_utils import log
from gql_pager.print_utils import Print, colorize, safe_print


def fetch_github_user(token):
    """Return the login the token belongs to, or None when it is rejected."""
    headers = {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github+json",
    }
    try:
        response = requests.get(REST_USER_URL, headers=headers, timeout=8)
        if response.status_code == 200:
            return response.json().get("login")
        log(f"Token validation returned HTTP {response.status_code}")
    except (requests.RequestException, ValueError) as e:
        Print.error(f"Token validation error: {e}")
    return None


def cmd_login(args):
    """Prompt for a personal access token, validate it and store it."""
    existing = load_token()
    if existing:
        user = fetch_github_user(existing)
        if user:
            safe_print("")
            Print.success(f"Already logged in as {colorize(user, '1')}")
            safe_print("")
            return
    try:
        token = getpass.getpass("GitHub token: ").strip()
    except (KeyboardInterrupt, EOFError):
        safe_print("")
        Print.warn("Login cancelled.")
        sys.exit(0)
    if not token:
        Print.error("No token entered.")
        sys.exit(1)
    user = fetch_github_user(token)
    if not user:
        Print.error("GitHub rejected the token.")
        sys.exit(1)
    save_token(token)
    Print.success(f"Logged in as {colorize(user, '1')}")
