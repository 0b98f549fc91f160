import argparse
import difflib
import sys
from gql_pager import __version__
from gql_pager.commands.login import cmd_login
from gql_pager.commands.logout import cmd_logout
from gql_pager.commands.repo import cmd_repo
from gql_pager.print_utils import Print, colorize, set_verbose
from gql_pager.version_check import notify_new_version
COMMANDS = {
    'login': ['l', 'log', 'signin', 'sign-in', 'auth'],
    'logout': ['lo', 'log-out', 'signout', 'sign-out'],
    'repo': ['r', 'repository', 'repos', 'fetch'],
}


def suggest_command(attempted):
    all_cmds = list(COMMANDS) + [alias for aliases in COMMANDS.values() for alias in aliases]
    matches = difflib.get_close_matches(attempted.lower(), all_cmds, n=1, cutoff=0.5)
    if not matches:
        return None
    for main, aliases in COMMANDS.items():
        if matches[0] == main or matches[0] in aliases:
            return main
    return None


class SilentArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        print("")
        if 'invalid choice:' in message:
            attempted = message.split('invalid choice:')[1].split('(')[0].strip().strip("'")
            Print.error("Invalid command.")
            suggestion = suggest_command(attempted) if attempted else None
            if suggestion:
                Print.info(f"Did you mean: gql-pager {suggestion}")
        else:
            Print.error(message)
        print("")
        sys.exit(2)


def print_help():
    print("")
    print(colorize("gql-pager: resolve nested paginated GitHub GraphQL results", '1'))
    print("")
    rows = [
        ("gql-pager login", "Store a GitHub token in the OS keyring"),
        ("gql-pager logout", "Remove the stored token"),
        ("gql-pager repo OWNER/NAME", "Fetch a repository with all issues and comments"),
        ("  --since ISO", "Only issues created after this time"),
        ("  --comments-since ISO", "Only comments updated after this time"),
        ("  --page-size N", "Items per page"),
        ("  -o FILE", "Write the resolved tree as JSON"),
        ("  -r, --show-rate-limit", "Print the remaining API quota"),
        ("--version (-v)", "Show version"),
        ("--verbose (-V)", "Echo log lines to the console"),
    ]
    pad = max(len(cmd) for cmd, _ in rows) + 4
    for cmd, desc in rows:
        print(colorize(f"  {cmd}".ljust(pad), '96') + colorize(desc, '93'))
    print("")


def build_parser():
    parser = SilentArgumentParser(prog="gql-pager", add_help=False)
    parser.add_argument("-h", "--help", action="store_true", help=argparse.SUPPRESS)
    subparsers = parser.add_subparsers(dest="command")
    login_parser = subparsers.add_parser("login", add_help=False)
    login_parser.set_defaults(func=cmd_login)
    logout_parser = subparsers.add_parser("logout", add_help=False)
    logout_parser.set_defaults(func=cmd_logout)
    repo_parser = subparsers.add_parser("repo", add_help=False)
    repo_parser.add_argument("repo", nargs="?")
    repo_parser.add_argument("--since")
    repo_parser.add_argument("--comments-since", dest="comments_since")
    repo_parser.add_argument("--page-size", dest="page_size", type=int)
    repo_parser.add_argument("-o", "--output")
    repo_parser.add_argument("-r", "--show-rate-limit", action="store_true")
    repo_parser.set_defaults(func=cmd_repo)
    return parser


def main_cli(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    if "--version" in argv or "-v" in argv:
        print("")
        print(f"gql-pager v{__version__}")
        notify_new_version(background=False)
        print("")
        sys.exit(0)
    if "--verbose" in argv or "-V" in argv:
        set_verbose(True)
        argv = [a for a in argv if a not in ("--verbose", "-V")]
    if not argv or argv[0] in ("-h", "--help", "help"):
        print_help()
        sys.exit(0)
    argv[0] = argv[0].lower()
    args = build_parser().parse_args(argv)
    if args.help or not hasattr(args, "func"):
        print_help()
        sys.exit(0)
    try:
        code = args.func(args)
    except KeyboardInterrupt:
        print("")
        Print.warn("Cancelled.")
        sys.exit(130)
    sys.exit(code or 0)
