import re


def mask_sensitive(text: str) -> str:
    """Mask GitHub tokens and bearer credentials before logging/displaying."""
    if not isinstance(text, str):
        return text
    text = re.sub(r"(ghp|gho|ghu|ghs|ghr)_[A-Za-z0-9_]{30,}", r"\1_********************", text)
    text = re.sub(r"github_pat_[A-Za-z0-9_]{50,}", "github_pat_********************", text)
    text = re.sub(r"(?i)((?:authorization|bearer|token)\s*[:=]?\s*(?:bearer\s+|token\s+)?)([A-Za-z0-9_\-\.]{20,})", r"\1***", text)
    return text


def iso_timestamp(value) -> str:
    """Normalise a datetime or ISO-8601 string to the GitHub UTC form.

    Raises ValueError for text that is not ISO-8601.
    """
    from datetime import datetime, timezone
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Not an ISO-8601 timestamp: {text!r}")
    return iso_timestamp(parsed)
