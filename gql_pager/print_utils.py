import os
import sys
VERBOSE = False


def supports_color():
    if os.environ.get("NO_COLOR"):
        return False
    is_a_tty = hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()
    if sys.platform == 'win32':
        return is_a_tty and ('WT_SESSION' in os.environ or 'ANSICON' in os.environ)
    return is_a_tty and 'TERM' in os.environ


COLOR_ENABLED = supports_color()


def colorize(text, color_code):
    if COLOR_ENABLED:
        return f"\033[{color_code}m{text}\033[0m"
    return text


def safe_print(text='', **kwargs):
    """Print text with Unicode encoding error handling."""
    try:
        print(text, **kwargs)
    except UnicodeEncodeError:
        print(str(text).encode('ascii', errors='replace').decode('ascii'), **kwargs)


def _emit(prefix, color_code, msg, **kwargs):
    safe_print(colorize(f"[{prefix}] {msg}", color_code), **kwargs)


class Print:
    @staticmethod
    def success(msg, **kwargs):
        _emit("+", '92', msg, **kwargs)

    @staticmethod
    def error(msg, **kwargs):
        _emit("!", '91', msg, **kwargs)

    @staticmethod
    def warn(msg, **kwargs):
        _emit("?", '93', msg, **kwargs)

    @staticmethod
    def info(msg, **kwargs):
        _emit("*", '96', msg, **kwargs)

    @staticmethod
    def action(msg, **kwargs):
        _emit(">", '90', msg, **kwargs)


def set_verbose(v: bool):
    """Set verbose flag for printing/logging."""
    global VERBOSE
    VERBOSE = bool(v)
