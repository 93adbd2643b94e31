"""Shared pytest fixtures: isolated workspace, fake network, fake ffmpeg."""

import shutil
from pathlib import Path

import pytest
import yaml

from concert_dl.config import Config
from concert_dl.exceptions import FetchError
from concert_dl.transcoder import TranscodeMode, TranscodeResult
from concert_dl.workspace import WorkspaceContext


class FakeHttp:
    """Serves canned responses by URL; anything unknown is a 404."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.requests = []

    def _lookup(self, url):
        self.requests.append(url)
        if url not in self.responses:
            raise FetchError(url, "404 Client Error: Not Found")
        value = self.responses[url]
        if isinstance(value, Exception):
            raise value
        return value

    def get_text(self, url):
        value = self._lookup(url)
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def download(self, url, dest):
        value = self._lookup(url)
        data = value.encode("utf-8") if isinstance(value, str) else value
        Path(dest).write_bytes(data)
        return len(data)


class FakeTranscoder:
    """Stands in for ffmpeg: concat joins listed files, encode copies bytes."""

    def __init__(self, fail_mode=None, returncode=1):
        self.fail_mode = fail_mode
        self.returncode = returncode
        self.invocations = []

    def run(self, invocation):
        invocation.validate()
        self.invocations.append(invocation)

        if invocation.mode == self.fail_mode:
            return TranscodeResult(invocation, self.returncode, "simulated failure")

        source = invocation.inputs[0]
        if invocation.mode is TranscodeMode.CONCAT:
            data = b""
            for line in source.read_text(encoding="utf-8").splitlines():
                name = line[len("file '"):-1].replace("'\\''", "'")
                data += (source.parent / name).read_bytes()
            invocation.output.write_bytes(data)
        else:
            shutil.copy(source, invocation.output)

        return TranscodeResult(invocation, 0, "")

    @property
    def modes(self):
        return [invocation.mode for invocation in self.invocations]


@pytest.fixture(autouse=True)
def reset_config():
    """Config is a singleton; give every test a fresh one."""
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def workspace(tmp_path):
    """Empty workspace rooted in a temporary directory."""
    root = tmp_path / "work"
    root.mkdir()
    return WorkspaceContext(root=root)


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_path = tmp_path / "config.yaml"
    config_data = {
        "workdir": str(tmp_path / "work"),
        "output_name": "output.mp3",
        "failed_log": str(tmp_path / "failed.txt"),
        "stream": {"chunk_suffix": ".aac"},
        "transcoder": {"codec": "libmp3lame", "quality": "2"},
        "cleanup": {"confirm": "interactive"},
    }
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def test_config(temp_config_file):
    """Create a Config instance for testing."""
    return Config(temp_config_file)


@pytest.fixture
def fake_http():
    """Factory for FakeHttp instances."""
    return FakeHttp


@pytest.fixture
def fake_transcoder():
    """Factory for FakeTranscoder instances."""
    return FakeTranscoder
