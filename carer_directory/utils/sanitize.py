"""Text and URL sanitization for externally sourced profile fields.

Every function here is total: wrong types and hostile content come back
as cleaned strings (possibly empty), never as exceptions.
"""

import re
from typing import Any, Optional
from urllib.parse import quote, urlsplit, urlunsplit

CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")
SCRIPT_TAG = re.compile(r"</?script[^>]*>", re.IGNORECASE)
ANGLE_BRACKETS = re.compile(r"[<>]")
WHITESPACE_RUN = re.compile(r"\s+")
LINE_BREAK = re.compile(r"\r\n|\r|\n")
INVALID_URL_SCHEME = re.compile(r"^(?:javascript|data|vbscript|file):", re.IGNORECASE)
SIMPLE_RELATIVE_URL = re.compile(r"^(?:\.{0,2}/)?[\w\-./]+$", re.ASCII)
FORBIDDEN_HOST_CHARACTERS = re.compile(r"[\s#%/:<>?@\[\\\]^|]")

ALLOWED_URL_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

# Characters left untouched when re-encoding the parts of an absolute URL
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = _PATH_SAFE + "?"


def _strip_dangerous_sequences(value: str) -> str:
    value = CONTROL_CHARACTERS.sub("", value)
    value = SCRIPT_TAG.sub("", value)
    return ANGLE_BRACKETS.sub("", value)


def _collapse(value: str) -> str:
    return WHITESPACE_RUN.sub(" ", value).strip()


def _truncate(value: str, max_length: Optional[int]) -> str:
    if isinstance(max_length, int) and not isinstance(max_length, bool) and max_length > 0:
        return value[:max_length]
    return value


def sanitize_single_line_text(value: Any, max_length: Optional[int] = None) -> str:
    """Clean a value meant to be shown on a single line.

    Control characters (line breaks included), script tags and angle
    brackets are removed, whitespace runs become one space, and the result
    is trimmed and cut to max_length.

    Example:
        >>> sanitize_single_line_text("  <b>Jo</b>   Smith ")
        'bJo/b Smith'
    """
    if not isinstance(value, str):
        return ""

    return _truncate(_collapse(_strip_dangerous_sequences(value)), max_length)


def sanitize_multiline_text(value: Any, max_length: Optional[int] = None) -> str:
    """Clean free text while keeping its line structure.

    Each line is cleaned like sanitize_single_line_text, blank lines are
    dropped and the rest rejoined with ``\\n`` before truncation.

    Example:
        >>> sanitize_multiline_text("  a  \\n\\n b\\t\\t c  ")
        'a\\nb c'
    """
    if not isinstance(value, str):
        return ""

    lines = (_collapse(_strip_dangerous_sequences(line)) for line in LINE_BREAK.split(value))
    return _truncate("\n".join(line for line in lines if line), max_length)


def _is_simple_relative(value: str) -> bool:
    return SIMPLE_RELATIVE_URL.fullmatch(value) is not None


def _normalize_host(host: str) -> str:
    """Validate a registered host name, IDNA-encoding non-ASCII labels.

    Raises:
        ValueError: If the host contains characters a host cannot carry
    """
    if FORBIDDEN_HOST_CHARACTERS.search(host):
        raise ValueError(f"Invalid host: {host!r}")
    if not host.isascii():
        # UnicodeError is a ValueError
        host = host.encode("idna").decode("ascii")
    return host


def _normalize_absolute(parts) -> str:
    scheme = parts.scheme.lower()
    host = parts.hostname or ""
    if not host:
        return ""

    if ":" in host:
        host = f"[{host}]"
    else:
        host = _normalize_host(host)

    # Raises ValueError for out-of-range or non-numeric ports
    port = parts.port

    netloc = host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{host}:{port}"

    if parts.username is not None:
        userinfo = quote(parts.username, safe="%")
        if parts.password is not None:
            userinfo = f"{userinfo}:{quote(parts.password, safe='%')}"
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path, safe=_PATH_SAFE) or "/"
    query = quote(parts.query, safe=_QUERY_SAFE)
    fragment = quote(parts.fragment, safe=_QUERY_SAFE + "#")

    return urlunsplit((scheme, netloc, path, query, fragment))


def sanitize_url(value: Any) -> str:
    """Validate a photo/link URL.

    Returns:
        The normalized absolute http(s) URL, the unchanged relative path when
        it is a plain path, or "" for anything else

    Example:
        >>> sanitize_url("javascript:alert(1)")
        ''
        >>> sanitize_url("./images/a.png")
        './images/a.png'
    """
    if not isinstance(value, str):
        return ""

    trimmed = value.strip()
    if not trimmed:
        return ""

    if INVALID_URL_SCHEME.match(trimmed) or trimmed.startswith("//"):
        return ""

    try:
        parts = urlsplit(trimmed)
        if not parts.scheme:
            # Relative to the placeholder origin
            return trimmed if _is_simple_relative(trimmed) else ""

        if parts.scheme.lower() in ALLOWED_URL_SCHEMES:
            return _normalize_absolute(parts)
    except ValueError:
        return trimmed if _is_simple_relative(trimmed) else ""

    return ""
