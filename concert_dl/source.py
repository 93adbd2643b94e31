"""Locate the audio pointer URL on a concert homepage."""

import html
import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlparse

from .exceptions import FetchError, ParseError
from .http import HttpClient

# Not an HTML parser: one attribute, first occurrence, either quote style
AUDIO_URL_PATTERN = re.compile(r"""audiourl\s*=\s*(?:"([^"]*)"|'([^']*)')""")


@dataclass(frozen=True)
class Session:
    """Where the stream lives.

    base_url always ends in "/" and is prepended to every playlist and
    chunk name.
    """

    homepage_url: str
    audio_pointer_url: str
    base_url: str


def extract_audio_url(page: str) -> Optional[str]:
    """Return the first audiourl attribute value in page, if any."""
    match = AUDIO_URL_PATTERN.search(page)
    if not match:
        return None
    value = match.group(1) if match.group(1) is not None else match.group(2)
    return html.unescape(value)


def derive_base_url(url: str) -> str:
    """Return url up to and including its last "/".

    Raises:
        ParseError: If url has no path separator
    """
    cut = url.rfind("/")
    if cut < 0:
        raise ParseError(f"Audio URL has no path separator: {url!r}")
    return url[: cut + 1]


def validate_url(url: str):
    """Reject anything that is not an absolute http(s) URL."""
    parsed = urlparse(url)

    if not parsed.scheme or parsed.scheme not in ["http", "https"]:
        raise ValueError(
            f"Invalid URL: '{url}'\n"
            "URLs must start with http:// or https://\n"
            "Run 'concert-dl --help' for usage examples"
        )

    if not parsed.netloc:
        raise ValueError(
            f"Invalid URL: '{url}'\n"
            "URL must include a domain name\n"
            "Run 'concert-dl --help' for usage examples"
        )


class SourceResolver:
    """Fetches the homepage and turns it into a Session."""

    def __init__(
        self,
        http: HttpClient,
        extractor: Callable[[str], Optional[str]] = extract_audio_url,
    ):
        """Initialize resolver.

        Args:
            http: HTTP client
            extractor: Returns the audio URL found in a page, or None
        """
        self.http = http
        self.extractor = extractor

    def resolve(self, homepage_url: str) -> Session:
        """Resolve homepage_url to a Session.

        Raises:
            ValueError: If homepage_url is not an http(s) URL
            FetchError: If the homepage cannot be fetched or is empty
            ParseError: If no audio URL is found
        """
        validate_url(homepage_url)

        print(f"🔎 Fetching homepage: {homepage_url}")
        page = self.http.get_text(homepage_url)
        if not page or not page.strip():
            raise FetchError(homepage_url, "empty response")

        audio_url = self.extractor(page)
        if not audio_url:
            raise ParseError(f"No audiourl attribute found on {homepage_url}")

        base_url = derive_base_url(audio_url)
        print(f"✅ Audio source: {audio_url}")

        return Session(
            homepage_url=homepage_url,
            audio_pointer_url=audio_url,
            base_url=base_url,
        )
