import re

CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def sanitize_string(v):
    """Drop control characters and trim. Non-strings pass through.

    Markup is stored as typed; escaping is the renderer's job.
    """
    if not isinstance(v, str):
        return v
    v = CONTROL_RE.sub("", v)
    return v.strip()


def normalize_username(username: str) -> str:
    # Usernames are case-insensitive: stored and looked up lowercased
    return username.strip().lower()
