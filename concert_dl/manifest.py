"""Follow the pointer file to the chunk playlist."""

import fnmatch
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .exceptions import DownloadError, FetchError, ManifestError
from .http import HttpClient
from .source import Session
from .workspace import PLAYLIST_PATTERN, WorkspaceContext


@dataclass
class Manifest:
    """Resolved playlist for one stream.

    chunk_entries keeps the playlist's own order, which is the playback
    order of the final file.
    """

    base_url: str
    pointer_path: Path
    playlist_name: str
    playlist_path: Path
    chunk_entries: List[str] = field(default_factory=list)

    @property
    def playlist_url(self) -> str:
        return self.base_url + self.playlist_name

    def chunk_url(self, entry: str) -> str:
        """Absolute URL for a playlist entry."""
        if entry.startswith(("http://", "https://")):
            return entry
        return self.base_url + entry

    def chunk_urls(self) -> List[str]:
        return [self.chunk_url(entry) for entry in self.chunk_entries]


def _read_lines(path: Path) -> List[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read {path.name}: {e}") from e


def read_playlist_name(pointer_path: Path) -> str:
    """Return the last non-empty line of the pointer file, stripped.

    Raises:
        ManifestError: If the file is unreadable or has no content
    """
    lines = [line.strip() for line in _read_lines(pointer_path)]
    lines = [line for line in lines if line]
    if not lines:
        raise ManifestError(f"Pointer file {pointer_path.name} is empty")
    return lines[-1]


def filter_chunk_entries(lines: List[str], suffix: str) -> List[str]:
    """Keep lines ending in suffix (case-sensitive), in their original order."""
    entries = []
    for line in lines:
        line = line.strip()
        if line and line.endswith(suffix):
            entries.append(line)
    return entries


class ManifestResolver:
    """Two-stage indirection: pointer file names the playlist, playlist names chunks."""

    def __init__(self, http: HttpClient, workspace: WorkspaceContext):
        """Initialize resolver.

        Args:
            http: HTTP client
            workspace: Workspace receiving the pointer and playlist files
        """
        self.http = http
        self.workspace = workspace

    def _fetch(self, url: str, dest: Path, what: str):
        try:
            self.http.download(url, dest)
        except (FetchError, DownloadError) as e:
            raise ManifestError(f"Could not download {what}: {e}") from e

    def resolve(self, session: Session) -> Manifest:
        """Download pointer and playlist and build the Manifest.

        Raises:
            ManifestError: If either file cannot be downloaded or read
        """
        pointer_path = self.workspace.pointer_path
        print("📄 Downloading pointer file...")
        self._fetch(session.audio_pointer_url, pointer_path, "pointer file")

        playlist_name = read_playlist_name(pointer_path)
        local_name = Path(playlist_name).name
        if not local_name:
            raise ManifestError(f"Pointer file names no playlist: {playlist_name!r}")

        playlist_path = self.workspace.path(local_name)
        if not fnmatch.fnmatchcase(local_name, PLAYLIST_PATTERN):
            self.workspace.claim(playlist_path)

        manifest = Manifest(
            base_url=session.base_url,
            pointer_path=pointer_path,
            playlist_name=playlist_name,
            playlist_path=playlist_path,
        )

        print(f"📄 Downloading playlist: {playlist_name}")
        self._fetch(manifest.playlist_url, playlist_path, "playlist")

        manifest.chunk_entries = filter_chunk_entries(
            _read_lines(playlist_path), self.workspace.chunk_suffix
        )

        if manifest.chunk_entries:
            print(f"✅ Playlist lists {len(manifest.chunk_entries)} chunk(s)")
        else:
            print(
                f"⚠️ Playlist {playlist_name} lists no '{self.workspace.chunk_suffix}' chunks",
                file=sys.stderr,
            )

        return manifest
