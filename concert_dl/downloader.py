"""Main pipeline orchestrator."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .config import Config
from .exceptions import ConcertDLError
from .fetcher import ChunkFetcher, build_chunk_set
from .http import HttpClient
from .manifest import ManifestResolver
from .provenance import StreamProvenance, format_duration, summarize_output, tag_output
from .source import SourceResolver
from .transcoder import Assembler, Transcoder, resolve_binary
from .workspace import ConfirmationPolicy, WorkspaceContext, WorkspaceGuard


class ConcertDownloader:
    """Runs guard → source → manifest → fetch → assemble → guard, in that order."""

    def __init__(
        self,
        config: Config,
        workspace: WorkspaceContext,
        confirmation: ConfirmationPolicy,
        http: Optional[HttpClient] = None,
        transcoder: Optional[Transcoder] = None,
        ffmpeg_path: Optional[str] = None,
        path_prompt: Optional[Callable[[], str]] = None,
    ):
        """Initialize downloader.

        Args:
            config: Configuration object
            workspace: Directory this run owns
            confirmation: Policy consulted before deleting files
            http: HTTP client (built from config when omitted)
            transcoder: Transcoder (ffmpeg is located when omitted)
            ffmpeg_path: Explicit ffmpeg path, overrides config
            path_prompt: Asks for an ffmpeg path if none can be found
        """
        self.config = config
        self.workspace = workspace
        self.guard = WorkspaceGuard(workspace, confirmation)
        self.http = http or HttpClient(timeout=config.timeout, user_agent=config.user_agent)
        self.transcoder = transcoder
        self.ffmpeg_path = ffmpeg_path or config.transcoder_path
        self.path_prompt = path_prompt

        # Ensure workspace directory exists
        self.workspace.root.mkdir(parents=True, exist_ok=True)

    def _get_transcoder(self) -> Transcoder:
        if self.transcoder is None:
            binary = resolve_binary(self.workspace, self.ffmpeg_path, self.path_prompt)
            print(f"🔧 Using ffmpeg: {binary}")
            self.transcoder = Transcoder(binary, cwd=self.workspace.root)
        return self.transcoder

    def download(self, homepage_url: str) -> Optional[Path]:
        """Download and assemble the recording on homepage_url.

        Args:
            homepage_url: Concert page containing an audiourl attribute

        Returns:
            Path to the output file, or None if the playlist listed no chunks

        Raises:
            ConcertDLError: On the first failing stage
        """
        print(f"📁 Working directory: {self.workspace.root}")
        print()

        try:
            return self._run(homepage_url)
        except ConcertDLError as e:
            self._log_failure(homepage_url, str(e))
            raise

    def _run(self, homepage_url: str) -> Optional[Path]:
        self.guard.sweep()
        transcoder = self._get_transcoder()

        session = SourceResolver(self.http).resolve(homepage_url)
        manifest = ManifestResolver(self.http, self.workspace).resolve(session)
        chunks = build_chunk_set(manifest, reserved=self.workspace.reserved_names)

        if not chunks:
            print("⚠️ Nothing to download; skipping assembly", file=sys.stderr)
            self.guard.sweep(include_output=False, required=False)
            return None

        concat_spec = ChunkFetcher(self.http, self.workspace).fetch_all(chunks)

        assembler = Assembler(
            transcoder, self.workspace, codec=self.config.codec, quality=self.config.quality
        )
        output = assembler.assemble(concat_spec)

        tag_output(
            output,
            StreamProvenance(
                homepage_url=session.homepage_url,
                audio_url=session.audio_pointer_url,
                chunk_count=len(chunks),
                codec=self.config.codec,
            ),
        )

        self._report(output)
        self.guard.sweep(include_output=False, required=False)
        return output

    def _report(self, output: Path):
        summary = summarize_output(output)
        if summary:
            kbps = summary["bitrate"] // 1000
            print(
                f"✅ Saved: {output} ({format_duration(summary['duration'])}, "
                f"{kbps} kbps, {summary['size_mb']:.1f} MB)"
            )
        else:
            print(f"✅ Saved: {output}")

    def _log_failure(self, url: str, error: str):
        """Log failed download.

        Args:
            url: URL that failed
            error: Error message
        """
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M")
        log_entry = f"{timestamp} | {url} | {error}\n"

        log_path = self.config.failed_log
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(log_path, "a") as f:
                f.write(log_entry)
        except OSError as e:
            print(f"⚠️ Could not write failure log {log_path}: {e}", file=sys.stderr)
