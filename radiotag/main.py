"""
Main CLI interface for radiotag

Command groups:
- decode / timestamp: inspect ID3 tag dumps lifted from HLS segments
- station: show a station and its upcoming songs from the catalog
- replay: feed tag dumps through the now-playing scheduler with the console display
- config: show or initialize configuration
"""

import asyncio
import functools
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .catalog.client import CatalogClient
from .config.settings import get_settings, reload_settings
from .exceptions import ConfigError, RadioTagError
from .id3.parser import decode_embedded_timestamp, decode_frames, extract_container
from .sync.scheduler import MetadataScheduler, PlayerState
from .ui.console import ConsoleNowPlaying
from .utils.logger import configure_from_settings, get_logger


logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)  # Standard exit code for SIGINT
        except RadioTagError as e:
            logger.error(f"Command failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
            click.echo(click.style(f"Error: {e.message}", fg='red'), err=True)
            sys.exit(1)
        except OSError as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def _resolve_station_id(station_id: Optional[str]) -> str:
    station_id = station_id or get_settings().catalog.station_id
    if not station_id:
        raise ConfigError(
            "Missing station id",
            details={'hint': 'pass STATION_ID or set RADIOTAG_STATION_ID'}
        )
    return station_id


def _read_container(path: str, offset: int) -> Optional[bytes]:
    data = Path(path).read_bytes()
    return extract_container(data, offset)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option('--config', type=click.Path(exists=True, dir_okay=False), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    radiotag - follow what an HLS radio stream is playing

    Decodes the ID3 metadata carried inside the stream and keeps a
    now-playing display in step with the audio.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"radiotag {__version__}")
        return

    if config:
        reload_settings(config)

    settings = get_settings()
    if verbose:
        settings.logging.level = "DEBUG"
        ctx.obj['verbose'] = True

    configure_from_settings()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('tag_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--offset', '-o', type=int, default=0, show_default=True, help='Byte offset of the ID3 header')
@handle_error
def decode(tag_file, offset):
    """
    Print the frames of the ID3 tag in TAG_FILE
    """
    container = _read_container(tag_file, offset)
    if container is None:
        click.echo(click.style(f"No ID3 tag at offset {offset}", fg='yellow'))
        sys.exit(1)

    frames = decode_frames(container)
    click.echo(f"ID3 tag: {len(container)} bytes, {len(frames)} frames\n")

    for frame in frames:
        if frame.is_private:
            value = frame.data.hex()
        else:
            value = frame.data
        info = f" [{frame.info}]" if frame.info else ""
        click.echo(f"   {frame.key}{info}: {value}")

        timestamp = decode_embedded_timestamp(frame)
        if timestamp is not None:
            click.echo(f"      transport stream timestamp: {timestamp} ms")


@cli.command()
@click.argument('tag_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--offset', '-o', type=int, default=0, show_default=True, help='Byte offset of the ID3 header')
@handle_error
def timestamp(tag_file, offset):
    """
    Print the transport stream timestamp carried in TAG_FILE
    """
    container = _read_container(tag_file, offset)
    if container is None:
        click.echo(click.style(f"No ID3 tag at offset {offset}", fg='yellow'))
        sys.exit(1)

    for frame in decode_frames(container):
        value = decode_embedded_timestamp(frame)
        if value is not None:
            click.echo(str(value))
            return

    click.echo(click.style("No transport stream timestamp in tag", fg='yellow'))
    sys.exit(1)


async def _show_station(station_id: str) -> None:
    settings = get_settings()
    async with CatalogClient() as catalog:
        station = await catalog.get_station(station_id)
        songs = await catalog.fetch_next_songs(station.id, settings.catalog.next_count)

    click.echo(click.style(station.name, fg='green', bold=True))
    if station.slug:
        click.echo(f"   Slug: {station.slug}")
    if station.image_url:
        click.echo(f"   Image: {station.image_url}")

    if songs:
        on_air = songs[0]
        click.echo(f"\nOn air: {on_air.artist} - {on_air.title}")
    if len(songs) > 1:
        click.echo("\nComing up:")
        for song in songs[1:]:
            click.echo(f"   {song}")


@cli.command()
@click.argument('station_id', required=False)
@handle_error
def station(station_id):
    """
    Show STATION_ID and the songs it will play next
    """
    asyncio.run(_show_station(_resolve_station_id(station_id)))


async def _replay(station_id: str, tag_files, interval: float, use_catalog: bool, wait: bool) -> None:
    ui = ConsoleNowPlaying()
    catalog = CatalogClient() if use_catalog else None
    scheduler = MetadataScheduler(ui=ui, catalog=catalog, station_id=station_id)

    try:
        if catalog is not None:
            await scheduler.prime_upcoming()

        scheduler.start()
        scheduler.set_state(PlayerState.RUNNING)

        for path in tag_files:
            logger.debug(f"Feeding tag file {path}")
            scheduler.on_tag_bytes(Path(path).read_bytes())
            if interval:
                await asyncio.sleep(interval)

        while wait and scheduler.pending:
            await asyncio.sleep(0.25)
    finally:
        scheduler.set_state(PlayerState.STOPPED)
        ui.close()
        if catalog is not None:
            await catalog.close()


@cli.command()
@click.argument('tag_files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option('--station', 'station_id', help='Station id for the upcoming list')
@click.option('--interval', type=float, default=0.0, show_default=True, help='Seconds between tag files')
@click.option('--no-catalog', is_flag=True, help='Do not contact the catalog')
@click.option('--wait/--no-wait', default=True, show_default=True, help='Keep running until queued songs played out')
@handle_error
def replay(tag_files, station_id, interval, no_catalog, wait):
    """
    Feed TAG_FILES through the now-playing scheduler

    Each file holds one ID3 tag as delivered by the stream; files are fed in
    order, as the transport layer would.
    """
    if no_catalog:
        station_id = station_id or get_settings().catalog.station_id or None
    else:
        station_id = _resolve_station_id(station_id)

    asyncio.run(_replay(station_id, tag_files, interval, not no_catalog, wait))


@cli.group()
def config():
    """Configuration management commands"""
    pass


@config.command()
def show():
    """
    Show current configuration
    """
    settings = get_settings()
    click.echo("Current Configuration:")

    for section, values in settings.to_dict().items():
        click.echo(f"\n{section.capitalize()}:")
        for key, value in values.items():
            click.echo(f"   {key}: {value}")

    if not settings.validate():
        sys.exit(1)


@config.command()
@click.option('--path', type=click.Path(dir_okay=False), help='Where to write the file')
@handle_error
def init(path):
    """
    Write the active configuration to a YAML file
    """
    target = get_settings().save_config(path)
    click.echo(click.style(f"Configuration written to {target}", fg='green'))


if __name__ == '__main__':
    cli()
