"""Provenance tags and a short report for the assembled file."""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.id3 import ID3, TXXX, ID3NoHeaderError


@dataclass
class StreamProvenance:
    """Where an assembled recording came from.

    Stored in the MP3 as TXXX frames so the file can be traced back to
    its concert page.
    """

    homepage_url: str
    """Page the audiourl attribute was found on"""

    audio_url: str
    """Pointer file URL"""

    chunk_count: int
    """Number of chunks concatenated"""

    codec: str
    """Encoder used for the final file"""


def tag_output(file_path: Path, provenance: StreamProvenance) -> bool:
    """Write provenance frames to file_path.

    Returns:
        True if the tags were saved
    """
    try:
        try:
            audio = ID3(str(file_path))
        except ID3NoHeaderError:
            audio = ID3()

        audio.add(TXXX(encoding=3, desc="SOURCE_URL", text=provenance.homepage_url))
        audio.add(TXXX(encoding=3, desc="AUDIO_URL", text=provenance.audio_url))
        audio.add(TXXX(encoding=3, desc="CHUNK_COUNT", text=str(provenance.chunk_count)))
        audio.add(TXXX(encoding=3, desc="ENCODER_CODEC", text=provenance.codec))

        audio.save(str(file_path))
        return True
    except (MutagenError, OSError) as e:
        print(f"⚠️ Failed to add provenance metadata: {e}", file=sys.stderr)
        return False


def format_duration(seconds: float) -> str:
    """Format duration as H:MM:SS (or M:SS under an hour)."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def summarize_output(file_path: Path) -> Optional[Dict]:
    """Duration, bitrate and size of file_path, or None if unreadable."""
    try:
        audio = MutagenFile(str(file_path))
    except (MutagenError, OSError):
        return None
    if not audio or not getattr(audio, "info", None):
        return None

    return {
        "file": file_path.name,
        "duration": getattr(audio.info, "length", 0),
        "bitrate": getattr(audio.info, "bitrate", 0),
        "size_mb": file_path.stat().st_size / (1024 * 1024),
    }
