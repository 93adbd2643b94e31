"""Sequential chunk download and concat list writing."""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, List
from urllib.parse import urlparse

from .exceptions import DownloadError, FetchError, ManifestError
from .http import HttpClient
from .manifest import Manifest
from .workspace import WorkspaceContext


@dataclass(frozen=True)
class Chunk:
    """One remote segment and the local file it is saved as."""

    remote_url: str
    local_name: str


def local_name_for(url: str) -> str:
    """Terminal path segment of url, ignoring query and fragment."""
    return PurePosixPath(urlparse(url).path).name


def build_chunk_set(manifest: Manifest, reserved: Iterable[str] = ()) -> List[Chunk]:
    """Chunks in manifest order.

    Args:
        manifest: Resolved playlist
        reserved: Local names the pipeline writes itself

    Raises:
        DownloadError: If a chunk URL has no file name
        ManifestError: If a chunk would be saved over a reserved file
    """
    reserved = set(reserved)
    chunks = []
    for url in manifest.chunk_urls():
        name = local_name_for(url)
        if not name:
            raise DownloadError(url, "URL has no file name")
        if name in reserved:
            raise ManifestError(f"Chunk {url} would overwrite working file {name}")
        chunks.append(Chunk(remote_url=url, local_name=name))
    return chunks


def concat_entry(local_name: str) -> str:
    """Format one line of an ffmpeg concat-demuxer list."""
    escaped = local_name.replace("'", "'\\''")
    return f"file '{escaped}'\n"


class ChunkFetcher:
    """Downloads chunks one at a time and records them in the concat list.

    The concat list is appended to only after a chunk is on disk, so its
    line order is exactly the download order, which is exactly manifest
    order.
    """

    def __init__(self, http: HttpClient, workspace: WorkspaceContext):
        self.http = http
        self.workspace = workspace

    def fetch_all(self, chunks: List[Chunk]) -> Path:
        """Download every chunk in order.

        Args:
            chunks: Chunk set in manifest order

        Returns:
            Path to the concat list

        Raises:
            DownloadError: On the first chunk that fails; nothing after it is fetched
        """
        spec_path = self.workspace.concat_spec_path
        total = len(chunks)

        with open(spec_path, "w", encoding="utf-8") as spec:
            for index, chunk in enumerate(chunks, start=1):
                print(f"\r⬇️ Chunk {index}/{total}: {chunk.local_name}", end="", flush=True)

                dest = self.workspace.path(chunk.local_name)
                try:
                    self.http.download(chunk.remote_url, dest)
                except (FetchError, DownloadError) as e:
                    print()
                    raise DownloadError(
                        chunk.remote_url, e.reason, index=index, total=total
                    ) from e

                spec.write(concat_entry(chunk.local_name))
                spec.flush()

        if total:
            print()
            print(f"✅ Downloaded {total} chunk(s)")

        return spec_path
