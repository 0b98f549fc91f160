import threading
from typing import Optional
import requests
from packaging.version import InvalidVersion, Version
from gql_pager import __version__ as local_version
from gql_pager.constants import PYPI_URL
from gql_pager.logging_utils import log
from gql_pager.print_utils import Print


def get_version_from_pypi() -> Optional[str]:
    try:
        resp = requests.get(PYPI_URL, timeout=5)
        if resp.status_code == 200:
            return resp.json()["info"]["version"]
        log(f"PyPI responded with status code {resp.status_code}.")
    except (requests.RequestException, ValueError, KeyError) as e:
        log(f"Could not fetch version info from PyPI: {e}")
    return None


def newer_version_available() -> Optional[str]:
    latest = get_version_from_pypi()
    if latest is None:
        return None
    try:
        if Version(local_version) < Version(latest):
            return latest
    except InvalidVersion as e:
        log(f"Version comparison failed: {e}")
    return None


def notify_new_version(background: bool = True):
    def _check():
        latest = newer_version_available()
        if latest:
            Print.info(f"Update available: {latest}")
            Print.action("Use: pip install -U gql-pager")
    if not background:
        _check()
        return None
    t = threading.Thread(target=_check, daemon=True)
    t.start()
    return t
