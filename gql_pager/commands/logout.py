from gql_pager.config import delete_token
from gql_pager.print_utils import Print, safe_print


def cmd_logout(args):
    """Delete the stored token."""
    safe_print("")
    if delete_token():
        Print.success("Token removed from the keyring.")
    else:
        Print.warn("No stored token found.")
    safe_print("")
