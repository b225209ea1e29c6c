from typing import Optional
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")

# Characters never allowed in the host part of a URL.
_INVALID_HOST_CHARS = frozenset(' <>"{}|\\^`')


def _has_control_character(url: str) -> bool:
    return any(ord(c) < 0x20 or ord(c) == 0x7F for c in url)


def _parse(url: str):
    """
    Split the URL, raising ValueError for anything that is not structurally valid.

    urlsplit silently drops surrounding whitespace and embedded tabs or newlines,
    so those are rejected before it sees the input.
    """
    if _has_control_character(url):
        raise ValueError("invalid control character in URL")
    if url != url.strip():
        raise ValueError("leading or trailing whitespace in URL")

    parsed = urlsplit(url)
    # Port is parsed lazily; force it so malformed ports are rejected here.
    parsed.port

    host = parsed.netloc.rpartition("@")[2]
    for c in host:
        if c in _INVALID_HOST_CHARS:
            raise ValueError(f"invalid character {c!r} in host name")
    return parsed


def validate_url(url: Optional[str]) -> Optional[str]:
    """
    Validate a candidate probe URL before any network I/O.

    Args:
        url (Optional[str]): The raw URL supplied by the caller.

    Returns:
        Optional[str]: A human-readable reason if the URL is invalid, None if it is valid.
    """
    if url is None or not url.strip():
        return "URL is required"

    try:
        parsed = _parse(url)
    except ValueError as e:
        return f"Invalid URL format: {e}"

    if not parsed.scheme:
        return "URL must include a scheme (http or https)"

    # urlsplit lowercases the scheme; compare it as written in the input.
    if url[: len(parsed.scheme)] not in ALLOWED_SCHEMES:
        return "URL scheme must be http or https"

    host = parsed.netloc.rpartition("@")[2]
    if not host:
        return "URL must include a host"

    return None
