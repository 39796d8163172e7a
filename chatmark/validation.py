"""URL and mention identifier validation.

Links are only rendered as navigable when their scheme is http, https or
mailto. The scheme is checked on both the raw URL and its percent-decoded
form so that encoded schemes such as ``javascript%3Aalert(1)`` cannot slip
through. Mention identifiers must be canonical version-4 UUIDs, which keeps
path traversal and injection payloads out of the routes built from them.
"""

import re
from urllib.parse import unquote, urlsplit

ALLOWED_SCHEMES = frozenset({"http", "https", "mailto"})

# Schemes that must not appear inside a mailto: address
DANGEROUS_SCHEMES = ("javascript", "data", "vbscript", "file")

# Only whole scheme names count: "profile:" does not embed "file:"
_EMBEDDED_SCHEME_PATTERN = re.compile(
    r"(?<![A-Za-z0-9+.-])(?:%s)\s*:" % "|".join(DANGEROUS_SCHEMES), re.IGNORECASE
)

# A syntactically valid scheme followed by its colon
_SCHEME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*:")

# Code points the URL standard forbids in a host name
_FORBIDDEN_HOST_PATTERN = re.compile(r"[\s\x00-\x1f\x7f#%/<>?@\[\\\]^|]")

UUID_V4_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-4[0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}"
)


def _split_scheme(url: str) -> tuple[str, str] | None:
    """Split ``url`` at the first colon into (lowercased scheme, remainder)."""
    scheme, sep, rest = url.partition(":")
    if not sep:
        return None
    return scheme.lower(), rest


def _is_valid_web_url(url: str) -> bool:
    if not url.split(":", 1)[1].startswith("//"):
        return False
    try:
        parts = urlsplit(url)
        # Accessing .port validates it
        parts.port
    except ValueError:
        return False
    host = parts.hostname
    if parts.scheme.lower() not in ("http", "https") or not host:
        return False
    # IPv6 literals keep their colons; urlsplit has already removed the port
    return _FORBIDDEN_HOST_PATTERN.search(host) is None


def _is_valid_mailto(rest: str) -> bool:
    # Headers after '?' (subject, body) are free text
    address = rest.split("?", 1)[0]
    if not address:
        return False
    if address.startswith("//") or "://" in address:
        return False
    return _EMBEDDED_SCHEME_PATTERN.search(address) is None


def _check_form(url: str) -> bool:
    """Validate a trimmed URL that must carry an allowed scheme."""
    if url.startswith("//"):
        return False
    split = _split_scheme(url)
    if split is None:
        return False
    scheme, rest = split
    if scheme not in ALLOWED_SCHEMES:
        return False
    if scheme == "mailto":
        return _is_valid_mailto(rest)
    return _is_valid_web_url(url)


def _check_raw_form(url: str) -> bool:
    """Validate the undecoded URL.

    A raw form without a scheme (``http%3A//host``) is left to the decoded
    check; a raw form that names a scheme must pass on its own.
    """
    if url.startswith("//"):
        return False
    if _SCHEME_PATTERN.match(url) is None:
        return True
    return _check_form(url)


def is_valid_url(candidate: str) -> bool:
    """Return True if ``candidate`` may be rendered as a navigable link.

    Only http, https and mailto URLs are accepted. Protocol-relative URLs
    (``//host``) are rejected. The URL is percent-decoded once; the decoded
    form must carry an allowed scheme, and the raw form is rejected if it
    names any other scheme. Path, query and fragment are not otherwise
    inspected.
    """
    if not isinstance(candidate, str):
        return False
    trimmed = candidate.strip()
    if not trimmed:
        return False
    decoded = unquote(trimmed)
    return _check_raw_form(trimmed) and _check_form(decoded)


def validate_url(candidate: str) -> str | None:
    """Return the trimmed URL if it is valid, otherwise None."""
    if is_valid_url(candidate):
        return candidate.strip()
    return None


def is_valid_identifier(candidate: str) -> bool:
    """Return True if ``candidate`` is a canonical version-4 UUID string.

    The whole string must match; hex digits are case-insensitive.
    """
    if not isinstance(candidate, str):
        return False
    return UUID_V4_PATTERN.fullmatch(candidate) is not None
