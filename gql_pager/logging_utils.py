import os
from datetime import datetime
from gql_pager import print_utils
from gql_pager.constants import LOG_FILE, LOG_MAX_BYTES
from gql_pager.utils import mask_sensitive


def log(msg):
    masked = mask_sensitive(str(msg))
    if print_utils.VERBOSE:
        print_utils.Print.info(masked)
    try:
        log_dir = os.path.dirname(LOG_FILE)
        if not os.path.isdir(log_dir):
            os.makedirs(log_dir, mode=0o700, exist_ok=True)
        if os.path.isfile(LOG_FILE) and os.path.getsize(LOG_FILE) > LOG_MAX_BYTES:
            os.remove(LOG_FILE)
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(f"[{datetime.now().isoformat()}] {masked}\n")
        try:
            os.chmod(LOG_FILE, 0o600)
        except OSError:
            pass
    except OSError as e:
        if print_utils.VERBOSE:
            print_utils.Print.warn(f"Log file error: {e}")
