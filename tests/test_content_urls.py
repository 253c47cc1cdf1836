"""Submission link validation tests."""

from __future__ import annotations

import pytest

from circle.utils.content_urls import extract_youtube_video_id, validate_content_url
from circle.utils.errors import InvalidContentError


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "http://m.youtube.com/watch?v=dQw4w9WgXcQ",
    ],
)
def test_youtube_links_are_accepted_as_video(url: str) -> None:
    assert validate_content_url(f"  {url} ", "video") == url


def test_vimeo_is_not_on_the_video_allow_list() -> None:
    """A well-formed URL on another host is still rejected."""
    with pytest.raises(InvalidContentError):
        validate_content_url("https://vimeo.com/123", "video")


def test_twitch_is_livestream_only() -> None:
    assert validate_content_url("https://www.twitch.tv/somestreamer", "livestream")
    assert validate_content_url("https://www.youtube.com/live/abc", "livestream")
    with pytest.raises(InvalidContentError):
        validate_content_url("https://www.twitch.tv/somestreamer", "video")


@pytest.mark.parametrize(
    "url",
    [
        "",
        "youtube.com/watch?v=dQw4w9WgXcQ",
        "ftp://youtube.com/watch?v=dQw4w9WgXcQ",
        "https://www.youtube.com/",
        "https://youtube.com.evil.example/watch?v=dQw4w9WgXcQ",
    ],
)
def test_malformed_or_spoofed_links_are_rejected(url: str) -> None:
    with pytest.raises(InvalidContentError):
        validate_content_url(url, "video")


def test_unknown_submission_type_is_rejected() -> None:
    with pytest.raises(InvalidContentError):
        validate_content_url("https://youtu.be/dQw4w9WgXcQ", "podcast")


def test_extract_youtube_video_id() -> None:
    assert extract_youtube_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ") == "dQw4w9WgXcQ"
    assert extract_youtube_video_id("https://youtu.be/dQw4w9WgXcQ?t=10") == "dQw4w9WgXcQ"
    assert extract_youtube_video_id("https://www.twitch.tv/somestreamer") is None
