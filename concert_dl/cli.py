"""Command-line interface for concert-dl."""

import shutil
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional

try:
    import click
except ImportError:
    print("Error: click not installed", file=sys.stderr)
    print("Install with: pip install click", file=sys.stderr)
    sys.exit(1)

from . import __version__
from .config import Config, default_config_dir
from .downloader import ConcertDownloader
from .exceptions import ConcertDLError, VersionError
from .workspace import (
    AutoConfirmation,
    ConfirmationPolicy,
    InteractiveConfirmation,
    WorkspaceContext,
    WorkspaceGuard,
)

MIN_PYTHON = (3, 9)


class DefaultGroup(click.Group):
    """Click group that defaults to a specified command when no command is given."""

    def __init__(self, *args, **kwargs):
        self.default_command = kwargs.pop("default_command", None)
        super().__init__(*args, **kwargs)

    def parse_args(self, ctx, args):
        # Treat a leading non-command, non-flag argument as the URL for the default command
        if (
            args
            and args[0] not in self.commands
            and self.default_command is not None
            and not args[0].startswith("-")
        ):
            args.insert(0, self.default_command)

        return super().parse_args(ctx, args)


def check_python_version(version_info=None):
    """Raise VersionError on interpreters older than MIN_PYTHON."""
    version_info = version_info or sys.version_info
    if tuple(version_info[:2]) < MIN_PYTHON:
        required = ".".join(str(part) for part in MIN_PYTHON)
        found = ".".join(str(part) for part in version_info[:3])
        raise VersionError(f"Python {required}+ is required (running {found})")


def build_confirmation(config: Config, assume_yes: bool) -> ConfirmationPolicy:
    """Pick the cleanup policy from the --yes flag and config."""
    if assume_yes:
        return AutoConfirmation(True)
    mode = config.cleanup_confirm
    if mode == "yes":
        return AutoConfirmation(True)
    if mode == "no":
        return AutoConfirmation(False)
    return InteractiveConfirmation()


def prompt_ffmpeg_path() -> str:
    """Ask the user where ffmpeg lives."""
    click.echo("⚠️ ffmpeg was not found in the working directory or on PATH", err=True)
    return click.prompt("Path to ffmpeg executable", default="", show_default=False)


def build_workspace(config: Config, workdir: Optional[str], output: Optional[str]) -> WorkspaceContext:
    root = Path(workdir) if workdir else config.workdir
    return WorkspaceContext(
        root=root.expanduser().resolve(),
        output_name=output or config.output_name,
        chunk_suffix=config.chunk_suffix,
    )


@click.group(cls=DefaultGroup, default_command="download", invoke_without_command=True)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx):
    """concert-dl - Download a streamed concert recording into a single audio file."""
    # Bare invocation prompts for the URL
    if ctx.invoked_subcommand is None:
        ctx.invoke(download)


@cli.command()
@click.argument("url", required=False)
@click.option("--output", "-o", help="Output file name (default: output.mp3)")
@click.option(
    "--workdir", "-w", type=click.Path(file_okay=False), help="Working directory (overrides config)"
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Delete leftover temp files without asking")
@click.option("--ffmpeg", "ffmpeg_path", type=click.Path(), help="Path to the ffmpeg executable")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file to use")
def download(
    url: Optional[str],
    output: Optional[str],
    workdir: Optional[str],
    assume_yes: bool,
    ffmpeg_path: Optional[str],
    config_path: Optional[str],
):
    """Download the concert recording embedded on URL.

    The page must carry an audiourl attribute pointing at the stream's
    pointer file. Chunks are fetched in playlist order, joined with
    ffmpeg and encoded to MP3.
    """
    config = Config(Path(config_path)) if config_path else Config()
    workspace = build_workspace(config, workdir, output)

    try:
        downloader = ConcertDownloader(
            config,
            workspace,
            build_confirmation(config, assume_yes),
            ffmpeg_path=ffmpeg_path,
            path_prompt=prompt_ffmpeg_path,
        )
        if not url:
            url = click.prompt("Concert page URL").strip()

        result = downloader.download(url)
    except KeyboardInterrupt:
        click.echo("\n⚠️ Download cancelled by user")
        sys.exit(1)
    except (ConcertDLError, ValueError) as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)

    if result is None:
        click.echo("❌ No audio chunks found; nothing was assembled", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--workdir", "-w", type=click.Path(file_okay=False), help="Working directory (overrides config)"
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Delete without asking")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file to use")
def clean(workdir: Optional[str], assume_yes: bool, config_path: Optional[str]):
    """Remove temporary files left by a previous run (including the output)."""
    config = Config(Path(config_path)) if config_path else Config()
    workspace = build_workspace(config, workdir, None)
    guard = WorkspaceGuard(workspace, build_confirmation(config, assume_yes))

    try:
        removed = guard.sweep()
    except ConcertDLError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)

    if removed == 0 and not workspace.artifacts():
        click.echo("✅ Nothing to clean")


@cli.command("check-setup")
def check_setup():
    """Verify all dependencies are installed."""
    click.echo("🔍 Checking concert-dl dependencies...")
    click.echo()

    all_ok = True

    # Check requests
    try:
        import requests

        click.echo(f"✅ requests: {requests.__version__}")
    except ImportError:
        click.echo("❌ requests: Not installed", err=True)
        click.echo("   Install: pip install requests", err=True)
        all_ok = False

    # Check mutagen
    try:
        import mutagen

        click.echo(f"✅ mutagen: {mutagen.version_string}")
    except ImportError:
        click.echo("❌ mutagen: Not installed", err=True)
        click.echo("   Install: pip install mutagen", err=True)
        all_ok = False

    # Check PyYAML
    try:
        import yaml

        click.echo(f"✅ PyYAML: {yaml.__version__}")
    except ImportError:
        click.echo("❌ PyYAML: Not installed", err=True)
        click.echo("   Install: pip install pyyaml", err=True)
        all_ok = False

    click.echo(f"✅ click: {metadata.version('click')}")

    # Check ffmpeg
    config = Config()
    configured = config.transcoder_path
    ffmpeg = configured if configured and Path(configured).expanduser().is_file() else shutil.which("ffmpeg")
    if ffmpeg:
        click.echo(f"✅ ffmpeg: {ffmpeg}")
    else:
        click.echo("⚠️ ffmpeg: Not found on PATH")
        click.echo("   You will be asked for its location when downloading")

    # Check config
    if config.config_path.exists():
        click.echo(f"✅ Configuration: {config.config_path}")
    else:
        click.echo("ℹ️ Configuration: using defaults (run 'concert-dl init' to create one)")

    click.echo()

    if all_ok:
        click.echo("🎉 All required dependencies are installed")
        click.echo()
        click.echo("Next step:")
        click.echo("  Run: concert-dl <concert page url>")
    else:
        click.echo("⚠️ Some dependencies are missing. Please install them first.", err=True)
        sys.exit(1)


@cli.command()
def init():
    """Initialize configuration file in ~/.config/concert-dl/."""
    config_dir = default_config_dir()
    config_path = config_dir / "config.yaml"

    if config_path.exists():
        click.echo(f"✅ Config already exists: {config_path}")
        click.echo()
        click.echo("To reconfigure, either:")
        click.echo(f"  1. Edit: {config_path}")
        click.echo("  2. Delete and run 'concert-dl init' again")
        return

    example = Path(__file__).parent.parent / "config.example.yaml"
    if not example.exists():
        click.echo(f"❌ Example config not found at {example}", err=True)
        click.echo("This might happen with certain installation methods.", err=True)
        click.echo("concert-dl works without a config file; defaults will be used.", err=True)
        sys.exit(1)

    config_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy(example, config_path)

    click.echo(f"✅ Created config: {config_path}")
    click.echo()
    click.echo("📝 Settings you may want to change:")
    click.echo("  - workdir: where chunks and the output file are written")
    click.echo("  - transcoder.path: ffmpeg location if it is not on PATH")
    click.echo("  - transcoder.quality: LAME VBR quality (0 best, 9 smallest)")
    click.echo()
    click.echo("✅ Ready! Try: concert-dl <concert page url>")


def main():
    """Main entry point."""
    try:
        check_python_version()
    except VersionError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)
    cli()


if __name__ == "__main__":
    main()
