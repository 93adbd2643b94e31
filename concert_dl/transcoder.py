"""ffmpeg invocation: concatenate chunks, then re-encode."""

import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .exceptions import InvocationError, ToolNotFoundError, TranscodeError
from .workspace import WorkspaceContext

BINARY_NAME = "ffmpeg"
COMMON_ARGS = ("-hide_banner", "-loglevel", "error", "-y")


class TranscodeMode(Enum):
    CONCAT = "concat"
    ENCODE = "encode"


@dataclass(frozen=True)
class TranscodeInvocation:
    """One ffmpeg run, checked before anything is executed."""

    mode: TranscodeMode
    inputs: Tuple[Path, ...]
    output: Path
    extra_args: Tuple[str, ...] = ()

    @classmethod
    def concat(cls, concat_spec: Path, output: Path) -> "TranscodeInvocation":
        """Stream-copy every file listed in concat_spec into output."""
        return cls(TranscodeMode.CONCAT, (concat_spec,), output, ("-c", "copy"))

    @classmethod
    def encode(
        cls, source: Path, output: Path, codec: str, quality: str
    ) -> "TranscodeInvocation":
        """Re-encode source audio with codec at VBR quality."""
        return cls(
            TranscodeMode.ENCODE,
            (source,),
            output,
            ("-vn", "-c:a", codec, "-q:a", str(quality)),
        )

    def validate(self):
        """Raise InvocationError if the invocation cannot work."""
        if len(self.inputs) != 1:
            raise InvocationError(
                f"{self.mode.value} takes exactly one input, got {len(self.inputs)}"
            )
        source = self.inputs[0]
        if not source.is_file():
            raise InvocationError(f"{self.mode.value} input does not exist: {source}")
        if source.resolve() == self.output.resolve():
            raise InvocationError(f"{self.mode.value} output would overwrite its input: {source}")

    def to_command(self, binary: Path) -> List[str]:
        """Build the argument list for subprocess."""
        cmd = [str(binary), *COMMON_ARGS]
        if self.mode is TranscodeMode.CONCAT:
            # -safe 0 allows any file name in the list
            cmd += ["-f", "concat", "-safe", "0"]
        cmd += ["-i", str(self.inputs[0]), *self.extra_args, str(self.output)]
        return cmd


@dataclass(frozen=True)
class TranscodeResult:
    invocation: TranscodeInvocation
    returncode: int
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def raise_for_status(self):
        """Raise TranscodeError for a non-zero exit status."""
        if not self.ok:
            raise TranscodeError(self.invocation.mode.value, self.returncode, self.stderr)


def _candidate_names() -> List[str]:
    if os.name == "nt":
        return [f"{BINARY_NAME}.exe", BINARY_NAME]
    return [BINARY_NAME]


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def resolve_binary(
    workspace: WorkspaceContext,
    configured: Optional[str] = None,
    prompt: Optional[Callable[[], str]] = None,
) -> Path:
    """Locate ffmpeg.

    Order: configured path, workspace root, PATH, then the prompt.

    Args:
        workspace: Workspace whose root is searched first
        configured: Explicit path from config or command line
        prompt: Asks the user for a path when nothing else is found

    Raises:
        ToolNotFoundError: If no executable binary is found
    """
    if configured:
        path = Path(configured).expanduser()
        if _is_executable(path):
            return path
        raise ToolNotFoundError(f"Configured ffmpeg not found or not executable: {path}")

    for name in _candidate_names():
        local = workspace.path(name)
        if _is_executable(local):
            return local

    found = shutil.which(BINARY_NAME)
    if found:
        return Path(found)

    if prompt is None:
        raise ToolNotFoundError(
            "ffmpeg not found in the working directory or on PATH\n"
            "Install ffmpeg or pass --ffmpeg /path/to/ffmpeg"
        )

    answer = prompt().strip()
    path = Path(answer).expanduser() if answer else None
    if path is None or not _is_executable(path):
        raise ToolNotFoundError(f"No executable ffmpeg at: {answer or '(empty path)'}")
    return path


class Transcoder:
    """Runs ffmpeg and reports the exit status as a TranscodeResult."""

    def __init__(self, binary: Path, cwd: Optional[Path] = None):
        """Initialize transcoder.

        Args:
            binary: ffmpeg executable
            cwd: Working directory for the process (concat lists resolve against it)
        """
        self.binary = binary
        self.cwd = cwd

    def run(self, invocation: TranscodeInvocation) -> TranscodeResult:
        """Run invocation; a non-zero exit is returned, not raised.

        Raises:
            InvocationError: If the invocation fails validation
            ToolNotFoundError: If the binary cannot be started
        """
        invocation.validate()
        cmd = invocation.to_command(self.binary)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, cwd=self.cwd)
        except OSError as e:
            raise ToolNotFoundError(f"Could not run ffmpeg at {self.binary}: {e}") from e
        return TranscodeResult(invocation, result.returncode, result.stderr or "")


class Assembler:
    """Concatenates downloaded chunks and encodes the final file."""

    def __init__(
        self,
        transcoder: Transcoder,
        workspace: WorkspaceContext,
        codec: str = "libmp3lame",
        quality: str = "2",
    ):
        self.transcoder = transcoder
        self.workspace = workspace
        self.codec = codec
        self.quality = quality

    def _run(self, invocation: TranscodeInvocation):
        result = self.transcoder.run(invocation)
        if not result.ok:
            if result.stderr:
                print(f"⚠️ ffmpeg: {result.stderr.strip()}", file=sys.stderr)
            result.raise_for_status()

    def assemble(self, concat_spec: Path) -> Path:
        """Concat (stream copy) then encode.

        Args:
            concat_spec: Ordered list of chunk files

        Returns:
            Path to the encoded output

        Raises:
            TranscodeError: If either step exits non-zero; encode never runs after a failed concat
        """
        intermediate = self.workspace.intermediate_path
        output = self.workspace.output_path

        print("🔄 Concatenating chunks...")
        self._run(TranscodeInvocation.concat(concat_spec, intermediate))

        print(f"🔄 Encoding to {output.name} ({self.codec}, q={self.quality})...")
        self._run(TranscodeInvocation.encode(intermediate, output, self.codec, self.quality))

        return output
