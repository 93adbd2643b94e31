"""Unit tests for pointer/playlist resolution."""

import pytest

from concert_dl.exceptions import ManifestError
from concert_dl.manifest import (
    Manifest,
    ManifestResolver,
    filter_chunk_entries,
    read_playlist_name,
)
from concert_dl.source import Session

BASE = "http://cdn.example.com/abc/"
SESSION = Session(
    homepage_url="https://concerts.example.org/show/42",
    audio_pointer_url=BASE + "stream.txt",
    base_url=BASE,
)


class TestReadPlaylistName:
    """Test the last-non-empty-line rule."""

    def test_last_line(self, tmp_path):
        pointer = tmp_path / "pointer.txt"
        pointer.write_text("#EXTM3U\nold.m3u8\nplaylist.m3u8\n")
        assert read_playlist_name(pointer) == "playlist.m3u8"

    def test_trailing_blank_lines_and_whitespace(self, tmp_path):
        pointer = tmp_path / "pointer.txt"
        pointer.write_text("first.m3u8\n  playlist.m3u8  \r\n\n   \n")
        assert read_playlist_name(pointer) == "playlist.m3u8"

    def test_empty_file(self, tmp_path):
        pointer = tmp_path / "pointer.txt"
        pointer.write_text("\n \n")
        with pytest.raises(ManifestError, match="empty"):
            read_playlist_name(pointer)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestError):
            read_playlist_name(tmp_path / "missing.txt")

    def test_not_text(self, tmp_path):
        pointer = tmp_path / "pointer.txt"
        pointer.write_bytes(b"\xff\xfe\xfa\x00binary")
        with pytest.raises(ManifestError):
            read_playlist_name(pointer)


class TestFilterChunkEntries:
    """Test playlist line filtering."""

    def test_order_preserved_non_matching_dropped(self):
        lines = ["a.aac", "note.txt", "b.aac"]
        assert filter_chunk_entries(lines, ".aac") == ["a.aac", "b.aac"]

    def test_never_sorted(self):
        lines = ["seg10.aac", "seg2.aac", "seg1.aac"]
        assert filter_chunk_entries(lines, ".aac") == ["seg10.aac", "seg2.aac", "seg1.aac"]

    def test_case_sensitive_suffix(self):
        lines = ["a.AAC", "b.aac", "#EXTINF:10.0,", ""]
        assert filter_chunk_entries(lines, ".aac") == ["b.aac"]

    def test_strips_whitespace(self):
        assert filter_chunk_entries(["  a.aac\r"], ".aac") == ["a.aac"]


def test_manifest_chunk_urls():
    """Test chunk URLs are built by concatenation with the base URL."""
    manifest = Manifest(
        base_url=BASE,
        pointer_path=None,
        playlist_name="list.m3u8",
        playlist_path=None,
        chunk_entries=["a.aac", "sub/b.aac", "https://mirror.example/c.aac"],
    )

    assert manifest.playlist_url == BASE + "list.m3u8"
    assert manifest.chunk_urls() == [
        BASE + "a.aac",
        BASE + "sub/b.aac",
        "https://mirror.example/c.aac",
    ]


class TestManifestResolver:
    """Test ManifestResolver against a fake HTTP client."""

    def test_playlist_url_from_pointer(self, fake_http, workspace):
        """Test the playlist URL is exactly base + last pointer line."""
        http = fake_http(
            {
                BASE + "stream.txt": "header\nplaylist.m3u8\n",
                BASE + "playlist.m3u8": "a.aac\nnote.txt\nb.aac\n",
            }
        )

        manifest = ManifestResolver(http, workspace).resolve(SESSION)

        assert http.requests == [BASE + "stream.txt", BASE + "playlist.m3u8"]
        assert manifest.playlist_name == "playlist.m3u8"
        assert manifest.chunk_entries == ["a.aac", "b.aac"]
        assert manifest.chunk_urls() == [BASE + "a.aac", BASE + "b.aac"]

    def test_files_saved_in_workspace(self, fake_http, workspace):
        http = fake_http(
            {
                BASE + "stream.txt": "list.m3u8",
                BASE + "list.m3u8": "seg1.aac\n",
            }
        )

        manifest = ManifestResolver(http, workspace).resolve(SESSION)

        assert manifest.pointer_path == workspace.pointer_path
        assert manifest.pointer_path.read_text() == "list.m3u8"
        assert manifest.playlist_path == workspace.path("list.m3u8")
        assert manifest.playlist_path.exists()

    def test_empty_playlist_is_warning(self, fake_http, workspace, capsys):
        """Test a playlist without chunks is not an error."""
        http = fake_http(
            {
                BASE + "stream.txt": "list.m3u8",
                BASE + "list.m3u8": "#EXTM3U\n#EXT-X-ENDLIST\n",
            }
        )

        manifest = ManifestResolver(http, workspace).resolve(SESSION)

        assert manifest.chunk_entries == []
        assert "lists no '.aac' chunks" in capsys.readouterr().err

    def test_pointer_download_failure(self, fake_http, workspace):
        http = fake_http({})

        with pytest.raises(ManifestError, match="pointer file"):
            ManifestResolver(http, workspace).resolve(SESSION)

        assert http.requests == [BASE + "stream.txt"]

    def test_playlist_download_failure(self, fake_http, workspace):
        http = fake_http({BASE + "stream.txt": "list.m3u8"})

        with pytest.raises(ManifestError, match="playlist"):
            ManifestResolver(http, workspace).resolve(SESSION)

    def test_empty_pointer_file(self, fake_http, workspace):
        http = fake_http({BASE + "stream.txt": ""})

        with pytest.raises(ManifestError):
            ManifestResolver(http, workspace).resolve(SESSION)

        assert http.requests == [BASE + "stream.txt"]

    def test_unusual_playlist_name_is_claimed(self, fake_http, workspace):
        """Test a playlist not matching *.m3u8 is still cleaned up later."""
        http = fake_http(
            {
                BASE + "stream.txt": "chunks.lst",
                BASE + "chunks.lst": "a.aac\n",
            }
        )

        manifest = ManifestResolver(http, workspace).resolve(SESSION)

        assert manifest.playlist_path in workspace.artifacts()
