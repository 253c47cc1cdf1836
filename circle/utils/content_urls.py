"""Submission link validation against per-type host allow-lists."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from circle.utils.errors import InvalidContentError

SUBMISSION_VIDEO = "video"
SUBMISSION_LIVESTREAM = "livestream"

YOUTUBE_HOSTS = frozenset({"youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be"})
TWITCH_HOSTS = frozenset({"twitch.tv", "www.twitch.tv", "m.twitch.tv"})

ACCEPTED_HOSTS: dict[str, frozenset[str]] = {
    SUBMISSION_VIDEO: YOUTUBE_HOSTS,
    SUBMISSION_LIVESTREAM: YOUTUBE_HOSTS | TWITCH_HOSTS,
}

_REJECTION_MESSAGES = {
    SUBMISSION_VIDEO: "Please enter a valid YouTube URL",
    SUBMISSION_LIVESTREAM: "Please enter a valid YouTube Live or Twitch URL",
}

_YOUTUBE_ID_RE = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?|live|shorts)/|.*[?&]v=)|youtu\.be/)"
    r"([^\"&?/\s]{11})"
)


def is_valid_url(value: str) -> bool:
    """Return True for an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return False
    return parts.scheme in {"http", "https"} and bool(parts.hostname)


def url_host(value: str) -> str:
    """Return the lowercased hostname of ``value`` (empty when absent)."""
    return (urlsplit(value.strip()).hostname or "").lower()


def _has_path(value: str) -> bool:
    parts = urlsplit(value.strip())
    return parts.path not in {"", "/"}


def is_youtube_url(value: str) -> bool:
    return is_valid_url(value) and url_host(value) in YOUTUBE_HOSTS and _has_path(value)


def is_twitch_url(value: str) -> bool:
    return is_valid_url(value) and url_host(value) in TWITCH_HOSTS and _has_path(value)


def extract_youtube_video_id(value: str) -> str | None:
    """Pull the 11-character video id out of a YouTube link."""
    match = _YOUTUBE_ID_RE.search(value)
    return match.group(1) if match else None


def validate_content_url(content_url: str | None, submission_type: str | None) -> str:
    """Return the trimmed URL or raise InvalidContentError.

    The host must be on the allow-list for ``submission_type``; a well-formed
    URL on another host is still rejected.
    """
    if submission_type not in ACCEPTED_HOSTS:
        raise InvalidContentError("Submission type must be 'video' or 'livestream'")

    url = (content_url or "").strip()
    if not url:
        raise InvalidContentError("Content URL is required")
    if not is_valid_url(url):
        raise InvalidContentError("Please enter a valid URL")
    if url_host(url) not in ACCEPTED_HOSTS[submission_type] or not _has_path(url):
        raise InvalidContentError(_REJECTION_MESSAGES[submission_type])
    return url
