"""Plain GET requests over requests.Session."""

import sys
from pathlib import Path

try:
    import requests
except ImportError:
    print("Error: requests not installed", file=sys.stderr)
    print("Install with: pip install requests", file=sys.stderr)
    sys.exit(1)

from .exceptions import DownloadError, FetchError


class HttpClient:
    """Minimal HTTP client used by every pipeline stage.

    Non-2xx responses and network failures raise FetchError. There is no
    retry: the pipeline aborts on the first failed request.
    """

    def __init__(self, timeout: float = 30, user_agent: str = "concert-dl"):
        """Initialize HTTP client.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header value
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def _get(self, url: str, stream: bool = False) -> "requests.Response":
        try:
            response = self.session.get(url, stream=stream, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        try:
            response.raise_for_status()
        except requests.RequestException as e:
            # Release the pooled connection held by a streamed error response
            response.close()
            raise FetchError(url, str(e)) from e
        return response

    def get_text(self, url: str) -> str:
        """Fetch URL and return the decoded body."""
        return self._get(url).text

    def download(self, url: str, dest: Path) -> int:
        """Stream URL into dest, overwriting any existing file.

        Args:
            url: URL to fetch
            dest: Local file to write

        Returns:
            Number of bytes written

        Raises:
            FetchError: If the request fails
            DownloadError: If the file cannot be written
        """
        response = self._get(url, stream=True)
        written = 0

        try:
            with open(dest, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
        except requests.RequestException as e:
            self._discard(dest)
            raise FetchError(url, str(e)) from e
        except OSError as e:
            self._discard(dest)
            raise DownloadError(url, str(e)) from e
        finally:
            response.close()

        return written

    def _discard(self, path: Path):
        """Remove a partially written file."""
        try:
            if path.exists():
                path.unlink()
                print(f"🧹 Cleaned up partial file: {path.name}", file=sys.stderr)
        except OSError as cleanup_error:
            print(f"⚠️ Failed to clean up partial file: {cleanup_error}", file=sys.stderr)
