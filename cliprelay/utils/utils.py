"""
URL, request path and duration helpers
"""
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import urlparse, parse_qs


SUPPORTED_DOMAINS = (
    "www.youtube.com",
    "youtube.com",
    "youtu.be",
    "www.youtu.be",
    "instagram.com",
    "www.instagram.com",
    "www.twitch.tv",
    "twitch.tv",
    "reddit.com",
    "www.reddit.com",
)

# Marker separating the embedded URL from the relay's own parameters
PARAMS_MARKER = "/?"


def normalize_url(url: str) -> str:
    """
    Add a scheme to scheme-less links

    youtube.com/watch?v=ABC -> https://youtube.com/watch?v=ABC
    """
    url = url.strip()
    if url and "://" not in url:
        return f"https://{url}"
    return url


def is_approved_url(url: str, approved_domains: Iterable[str] = SUPPORTED_DOMAINS) -> bool:
    """
    Check that the URL host is on the allow-list

    Exact, case-insensitive host match; subdomains are not wildcarded.
    A URL that cannot be parsed is simply not approved.

    Args:
        url: URL to check
        approved_domains: Allowed host names (lower case)

    Returns:
        True if the host is allowed, False otherwise
    """
    try:
        parsed = urlparse(normalize_url(url))
        hostname = parsed.hostname
        # accessing .port validates it
        parsed.port
    except ValueError:
        return False

    if not hostname:
        return False
    return hostname.lower() in approved_domains


@dataclass(frozen=True)
class ParsedRequest:
    """Embedded URL plus the optional relay parameters"""
    source_url: str
    message: str = ""
    channel: Optional[str] = None


def parse_request_path(path: str) -> ParsedRequest:
    """
    Split an inbound path into the source URL and relay parameters

    Expected format:
        https://www.youtube.com/watch?v=tCDvOQI3pco/?message=hello%20there&channel=general

    The last '/?' wins; everything before it is the URL, taken verbatim.

    Args:
        path: Request path plus query string, with or without the leading '/'

    Returns:
        ParsedRequest (source_url is empty for the root path)
    """
    if path.startswith("/"):
        path = path[1:]

    marker = path.rfind(PARAMS_MARKER)
    if marker == -1:
        return ParsedRequest(source_url=path)

    params = parse_qs(path[marker + len(PARAMS_MARKER):])
    message = params.get("message", [""])[0]
    channel = params.get("channel", [""])[0].strip() or None
    return ParsedRequest(source_url=path[:marker], message=message, channel=channel)


def parse_duration(value: str) -> int:
    """
    Convert yt-dlp's human readable duration to seconds

    "1:02:03" -> 3723, "4:05" -> 245, "59" -> 59

    Raises:
        ValueError: if the string is not 1-3 colon separated integers
    """
    parts = value.strip().split(":")
    if not 1 <= len(parts) <= 3:
        raise ValueError(f"Unexpected duration format: '{value}'")

    seconds = 0
    for part in parts:
        part = part.strip()
        if not part.isdigit():
            raise ValueError(f"Unexpected duration format: '{value}'")
        seconds = seconds * 60 + int(part)
    return seconds
