"""Unit tests for provenance tagging."""

from mutagen.id3 import ID3

from concert_dl.provenance import (
    StreamProvenance,
    format_duration,
    summarize_output,
    tag_output,
)

PROVENANCE = StreamProvenance(
    homepage_url="https://concerts.example.org/show/42",
    audio_url="http://cdn.example.com/abc/stream.txt",
    chunk_count=2,
    codec="libmp3lame",
)


def test_tag_output_writes_txxx_frames(tmp_path):
    output = tmp_path / "output.mp3"
    output.write_bytes(b"\x00" * 128)

    assert tag_output(output, PROVENANCE) is True

    tags = ID3(str(output))
    assert tags["TXXX:SOURCE_URL"].text == ["https://concerts.example.org/show/42"]
    assert tags["TXXX:AUDIO_URL"].text == ["http://cdn.example.com/abc/stream.txt"]
    assert tags["TXXX:CHUNK_COUNT"].text == ["2"]
    assert tags["TXXX:ENCODER_CODEC"].text == ["libmp3lame"]


def test_tag_output_missing_file_is_warning(tmp_path, capsys):
    assert tag_output(tmp_path / "missing.mp3", PROVENANCE) is False
    assert "Failed to add provenance metadata" in capsys.readouterr().err


def test_format_duration():
    assert format_duration(59.9) == "0:59"
    assert format_duration(61) == "1:01"
    assert format_duration(3 * 3600 + 5 * 60 + 7) == "3:05:07"


def test_summarize_unreadable_file(tmp_path):
    junk = tmp_path / "output.mp3"
    junk.write_bytes(b"not audio at all")

    assert summarize_output(junk) is None
