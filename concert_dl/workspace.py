"""Working directory ownership and pre/post-run cleanup."""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Set

import click

from .exceptions import CleanupDeclined, CleanupError

POINTER_FILE = "audio_pointer.txt"
CONCAT_SPEC_FILE = "concat.txt"
INTERMEDIATE_STEM = "combined"
DEFAULT_OUTPUT = "output.mp3"
PLAYLIST_PATTERN = "*.m3u8"


@dataclass
class WorkspaceContext:
    """Directory a single run owns, plus the temp files it is allowed to delete.

    Stages receive this instead of relying on the process working directory,
    so a run can be pointed at any directory (tests use tmp_path).
    """

    root: Path
    output_name: str = DEFAULT_OUTPUT
    chunk_suffix: str = ".aac"
    claimed: Set[str] = field(default_factory=set)

    def path(self, name: str) -> Path:
        """Resolve a workspace-relative file name."""
        return self.root / name

    @property
    def pointer_path(self) -> Path:
        return self.path(POINTER_FILE)

    @property
    def concat_spec_path(self) -> Path:
        return self.path(CONCAT_SPEC_FILE)

    @property
    def intermediate_path(self) -> Path:
        # Stream copy keeps the chunk container, so the suffix follows the chunks
        return self.path(f"{INTERMEDIATE_STEM}{self.chunk_suffix}")

    @property
    def output_path(self) -> Path:
        return self.path(self.output_name)

    @property
    def reserved_names(self) -> Set[str]:
        """Files the pipeline writes itself; no chunk may take one of these names."""
        return {POINTER_FILE, CONCAT_SPEC_FILE, self.intermediate_path.name, self.output_name}

    @property
    def patterns(self) -> List[str]:
        return [f"*{self.chunk_suffix}", PLAYLIST_PATTERN]

    def claim(self, path: Path):
        """Mark an extra file as a temp artifact of this run."""
        self.claimed.add(path.name)

    def artifacts(self, include_output: bool = True) -> List[Path]:
        """List temp files currently present in the workspace.

        Args:
            include_output: Whether the final output file counts as an artifact

        Returns:
            Sorted, de-duplicated list of existing paths
        """
        if not self.root.is_dir():
            return []

        names = {POINTER_FILE, CONCAT_SPEC_FILE, self.intermediate_path.name}
        names.update(self.claimed)
        if include_output:
            names.add(self.output_name)

        found = {self.path(name) for name in names if self.path(name).is_file()}
        for pattern in self.patterns:
            found.update(p for p in self.root.glob(pattern) if p.is_file())

        if not include_output:
            found.discard(self.output_path)

        return sorted(found)


class ConfirmationPolicy(ABC):
    """Decides whether a destructive action may go ahead."""

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Return True to proceed."""


class InteractiveConfirmation(ConfirmationPolicy):
    """Ask on the terminal; anything but an explicit yes is a refusal."""

    def confirm(self, message: str) -> bool:
        return click.confirm(message, default=False)


class AutoConfirmation(ConfirmationPolicy):
    """Fixed answer, for automation and tests."""

    def __init__(self, answer: bool):
        self.answer = answer

    def confirm(self, message: str) -> bool:
        return self.answer


class WorkspaceGuard:
    """Keeps leftovers from a previous run from leaking into the next one."""

    def __init__(self, workspace: WorkspaceContext, policy: ConfirmationPolicy):
        self.workspace = workspace
        self.policy = policy

    def sweep(self, include_output: bool = True, required: bool = True) -> int:
        """Delete temp artifacts after confirmation.

        Args:
            include_output: Also treat the final output file as an artifact
            required: Raise CleanupDeclined if the user refuses

        Returns:
            Number of files deleted

        Raises:
            CleanupDeclined: If required and confirmation is refused
            CleanupError: If a confirmed file cannot be deleted
        """
        artifacts = self.workspace.artifacts(include_output=include_output)
        if not artifacts:
            return 0

        print(f"🗂️ Found {len(artifacts)} temporary file(s) in {self.workspace.root}:")
        for path in artifacts:
            print(f"   {path.name}")

        if not self.policy.confirm("Delete these files?"):
            if required:
                raise CleanupDeclined(
                    "Cleanup declined; leftover files from a previous run must be "
                    "removed before starting"
                )
            print("ℹ️ Leaving temporary files in place", file=sys.stderr)
            return 0

        for path in artifacts:
            try:
                path.unlink()
            except OSError as e:
                raise CleanupError(f"Could not delete {path}: {e}") from e

        print(f"🧹 Removed {len(artifacts)} file(s)")
        return len(artifacts)
