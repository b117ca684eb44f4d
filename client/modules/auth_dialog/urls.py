"""URL parsing for the reset-password and Google sign-in return flows."""

import re
from typing import Optional
from urllib.parse import parse_qs, parse_qsl, unquote, urlencode, urlsplit, urlunsplit

_RESET_PATH_RE = re.compile(r"/reset-password/([^/?#]+)")


def extract_reset_token(url: str) -> Optional[str]:
    """
    Find a password reset token in a URL.

    Looks at the `token` query parameter first, then at a
    /reset-password/<token> path segment.
    """
    parts = urlsplit(url)
    token = parse_qs(parts.query).get("token", [None])[0]
    if token:
        return token

    match = _RESET_PATH_RE.search(parts.path)
    return unquote(match.group(1)) if match else None


def is_google_auth_return(url: str) -> bool:
    return parse_qs(urlsplit(url).query).get("google_auth") == ["success"]


def strip_query_params(url: str, *names: str) -> str:
    """Remove the given query parameters, keeping the rest of the URL intact."""
    parts = urlsplit(url)
    kept = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in names]
    return urlunsplit(parts._replace(query=urlencode(kept)))
