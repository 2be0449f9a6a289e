"""
Main CLI application using Typer.

Wires environment settings, a destination and a StreamEngine together and
runs the relay until interrupted. Also offers dry-run helpers to inspect how
sources are classified and which ffmpeg command would be spawned.
"""

from __future__ import annotations

import asyncio
import shlex
import signal

import typer

from ..catalog.source_catalog import JsonSourceCatalog
from ..infra.exceptions import RelaycastError
from ..infra.logging import configure_logging
from ..infra.settings import settings
from ..platforms.rtmp import RtmpDestination
from ..runtime.config import resolve_config
from ..runtime.engine import StreamEngine
from ..streaming.ffmpeg_cmd import build_cmd, get_cmd_summary, redact_cmd
from ..streaming.sources import classify

app = typer.Typer(help="Relaycast operator CLI")


def _destination(
    ingest_url: str | None,
    stream_key: str | None,
    name: str | None = None,
    backup_url: str | None = None,
) -> RtmpDestination:
    return RtmpDestination(
        ingest_url or settings.ingest_url,
        stream_key or settings.stream_key,
        name=name or settings.platform_name,
        backup_url=backup_url or settings.backup_url or None,
    )


async def _serve(engine: StreamEngine) -> bool:
    """Run ``engine`` until a signal arrives or it stops by itself.

    Returns True when the engine was stopped by a signal.
    """
    interrupted = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, interrupted.set)
        except (NotImplementedError, RuntimeError):
            pass

    await engine.start()
    engine.print_queue_status()

    waiter = asyncio.create_task(engine.wait())
    signalled = asyncio.create_task(interrupted.wait())
    await asyncio.wait({waiter, signalled}, return_when=asyncio.FIRST_COMPLETED)

    if interrupted.is_set():
        typer.echo("\nShutting down...")
        await engine.stop()
    signalled.cancel()
    await asyncio.wait({waiter})
    return interrupted.is_set()


@app.command("run")
def run(
    sources: list[str] | None = typer.Argument(None, help="Files or URLs to relay, in order"),
    ingest_url: str | None = typer.Option(None, "--ingest-url", help="RTMP ingest URL (env: RELAY_INGEST_URL)"),
    stream_key: str | None = typer.Option(None, "--stream-key", help="Stream key (env: RELAY_STREAM_KEY)"),
    backup_url: str | None = typer.Option(None, "--backup-url", help="Backup RTMP ingest URL"),
    use_backup: bool = typer.Option(False, "--use-backup", help="Start on the backup ingest"),
    name: str | None = typer.Option(None, "--name", help="Destination name used in logs"),
    loop: bool | None = typer.Option(None, "--loop/--no-loop", help="Replay the queue when it runs out"),
    catalog: str | None = typer.Option(None, "--catalog", help="JSON source catalog to shuffle into the queue"),
    placeholder: str | None = typer.Option(None, "--placeholder", help="Media played when the queue is empty"),
    resolution: str | None = typer.Option(None, help="Output size, e.g. 1920x1080"),
    framerate: int | None = typer.Option(None, help="Output frame rate (1-120)"),
    video_bitrate: str | None = typer.Option(None, "--video-bitrate", help="e.g. 2500k"),
    audio_bitrate: str | None = typer.Option(None, "--audio-bitrate", help="e.g. 128k"),
):
    """
    Relay SOURCES (and any catalog entries) to an RTMP destination until interrupted.

    Examples:
        relaycast run clip1.mp4 https://example.com/live.m3u8 --ingest-url rtmp://live.twitch.tv/app --stream-key KEY
        relaycast run --catalog data/sources.json --loop
    """
    configure_logging(settings.log_level, settings.log_format)

    try:
        destination = _destination(ingest_url, stream_key, name, backup_url)
        engine = StreamEngine(
            destination,
            {
                "resolution": resolution,
                "framerate": framerate,
                "video_bitrate": video_bitrate,
                "audio_bitrate": audio_bitrate,
            },
            placeholder_path=placeholder or settings.placeholder_path,
            loop=settings.loop if loop is None else loop,
            ffmpeg_bin=settings.ffmpeg_bin,
            max_retries=settings.max_retry_attempts,
            retry_base_delay=settings.retry_base_delay,
            advance_delay=settings.advance_delay,
            stop_grace=settings.stop_grace_seconds,
            restart_pause=settings.restart_pause_seconds,
        )
    except RelaycastError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if use_backup:
        destination.use_backup()

    catalog_path = catalog or settings.catalog_path
    if catalog_path:
        engine.load_catalog(JsonSourceCatalog(catalog_path))
    if sources:
        engine.add_to_queue(*sources)

    try:
        interrupted = asyncio.run(_serve(engine))
    except RelaycastError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not interrupted:
        typer.echo("Relay stopped after repeated ffmpeg failures", err=True)
        raise typer.Exit(1)


@app.command("probe")
def probe(
    sources: list[str] = typer.Argument(..., help="Files or URLs to classify"),
):
    """
    Show how each source would be classified, without queueing anything.

    Examples:
        relaycast probe clip.mp4 https://example.com/live.m3u8 rtmp://origin/app/stream
    """
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Sources")
    table.add_column("Locator")
    table.add_column("Kind")
    table.add_column("Valid")

    invalid = 0
    for locator in sources:
        source = classify(locator)
        invalid += 0 if source.valid else 1
        table.add_row(source.locator, source.kind.value, "yes" if source.valid else "no")

    Console().print(table)
    if invalid:
        raise typer.Exit(1)


@app.command("command")
def command(
    source: str = typer.Argument(..., help="File or URL to relay"),
    ingest_url: str | None = typer.Option(None, "--ingest-url", help="RTMP ingest URL (env: RELAY_INGEST_URL)"),
    stream_key: str | None = typer.Option(None, "--stream-key", help="Stream key (env: RELAY_STREAM_KEY)"),
    resolution: str | None = typer.Option(None, help="Output size, e.g. 1920x1080"),
    framerate: int | None = typer.Option(None, help="Output frame rate (1-120)"),
    video_bitrate: str | None = typer.Option(None, "--video-bitrate", help="e.g. 2500k"),
    audio_bitrate: str | None = typer.Option(None, "--audio-bitrate", help="e.g. 128k"),
):
    """
    Print the ffmpeg command that would relay SOURCE, with the stream key masked.

    Examples:
        relaycast command clip.mp4 --ingest-url rtmp://a.rtmp.youtube.com/live2 --stream-key KEY
    """
    try:
        destination = _destination(ingest_url, stream_key)
        config = resolve_config(
            {
                "resolution": resolution,
                "framerate": framerate,
                "video_bitrate": video_bitrate,
                "audio_bitrate": audio_bitrate,
            }
        )
    except RelaycastError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    sink_args = destination.build_sink_args()
    cmd = build_cmd(source, config, sink_args, ffmpeg_bin=settings.ffmpeg_bin)
    typer.echo(get_cmd_summary(cmd))
    typer.echo(shlex.join(redact_cmd(cmd, len(sink_args))))


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
