"""Pytest fixtures for integration tests."""

import pytest

HOMEPAGE = "https://concerts.example.org/show/42"
BASE = "http://cdn.example.com/abc/"


@pytest.fixture
def concert_site(fake_http):
    """Fake site from the end-to-end example: two chunks behind a pointer file."""
    return fake_http(
        {
            HOMEPAGE: (
                "<html><body>"
                '<div class="player" audiourl="http://cdn.example.com/abc/stream.txt"></div>'
                "</body></html>"
            ),
            BASE + "stream.txt": "#pointer\nlist.m3u8\n",
            BASE + "list.m3u8": "#EXTM3U\n#EXTINF:10.0,\nseg1.aac\n#EXTINF:10.0,\nseg2.aac\n",
            BASE + "seg1.aac": b"SEG1",
            BASE + "seg2.aac": b"SEG2",
        }
    )
