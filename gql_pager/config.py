import os
from typing import Dict, Optional
from gql_pager.constants import CONFIG_DIR, KEYRING_SERVICE, KEYRING_USER, TOKEN_ENV_VAR
from gql_pager.errors import GqlPagerError
from gql_pager.logging_utils import log
try:
    import keyring
    KEYRING_AVAILABLE = True
except Exception:
    KEYRING_AVAILABLE = False


def _ensure_secure_store_available() -> None:
    if not KEYRING_AVAILABLE:
        raise GqlPagerError("An OS keyring backend is required to store the token.")


def ensure_config_dir():
    if not os.path.exists(CONFIG_DIR):
        os.makedirs(CONFIG_DIR, mode=0o700, exist_ok=True)
    try:
        os.chmod(CONFIG_DIR, 0o700)
    except OSError as e:
        log(f"Directory chmod failed: {e}")


def save_token(token: str):
    ensure_config_dir()
    _ensure_secure_store_available()
    keyring.set_password(KEYRING_SERVICE, KEYRING_USER, token)


def load_token() -> Optional[str]:
    """Token from the environment, else from the OS keyring."""
    env_token = os.environ.get(TOKEN_ENV_VAR, "").strip()
    if env_token:
        return env_token
    if not KEYRING_AVAILABLE:
        return None
    try:
        return keyring.get_password(KEYRING_SERVICE, KEYRING_USER) or None
    except Exception as e:
        log(f"Token load from keyring failed: {e}")
        return None


def delete_token() -> bool:
    _ensure_secure_store_available()
    try:
        if keyring.get_password(KEYRING_SERVICE, KEYRING_USER):
            keyring.delete_password(KEYRING_SERVICE, KEYRING_USER)
            return True
    except Exception as e:
        log(f"Token deletion from keyring failed: {e}")
    return False


def auth_headers(token: Optional[str] = None) -> Dict[str, str]:
    token = token or load_token()
    if not token:
        raise GqlPagerError("GitHub token missing. Run 'gql-pager login' or set GITHUB_TOKEN.")
    return {
        "Authorization": f"bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/vnd.github+json",
    }
