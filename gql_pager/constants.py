import os
HOME_DIR = os.path.expanduser("~")
CONFIG_DIR = os.path.join(HOME_DIR, ".gql-pager")
LOG_FILE = os.path.join(CONFIG_DIR, "gql-pager.log")
LOG_MAX_BYTES = 1024 * 1024
GRAPHQL_URL = "https://api.github.com/graphql"
REST_USER_URL = "https://api.github.com/user"
PYPI_URL = "https://pypi.org/pypi/gql-pager/json"
DEFAULT_PAGE_SIZE = 50
TOKEN_ENV_VAR = "GITHUB_TOKEN"
KEYRING_SERVICE = "gql-pager"
KEYRING_USER = "github_token"
