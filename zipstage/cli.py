"""Command-line interface for zipstage."""
from __future__ import annotations

import logging
from pathlib import Path

import click

from .errors import ArchiveError
from .extract import extract_to_temp_file
from .names import normalize_path
from .payload import extract_payload_to_temp
from .session import STAGING_DIR, ArchiveContext


@click.group()
@click.option(
    "--staging-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=STAGING_DIR,
    show_default=True,
    envvar="ZIPSTAGE_STAGING_DIR",
    help="Directory that receives staged files.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages.")
@click.pass_context
def cli(ctx, staging_dir: Path, verbose: bool):
    """Inspect zip archives and stage their payload files."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s: %(message)s")
    archives = ArchiveContext(staging_dir)
    ctx.obj = archives
    ctx.call_on_close(archives.cleanup_all_open_sessions)


def _open(archives: ArchiveContext, archive: Path):
    try:
        return archives.open(archive)
    except ArchiveError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command("ls", help="List the entries of an archive.")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def list_cmd(archives: ArchiveContext, archive: Path):
    with _open(archives, archive) as session:
        for entry in session:
            marker = "d" if entry.is_directory else "-"
            click.echo(f"{marker} {entry.uncompressed_size:>10} {entry.compressed_size:>10}  {entry.name}")


@cli.command("extract", help="Stage one entry and print the staged path.")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("name")
@click.pass_obj
def extract_cmd(archives: ArchiveContext, archive: Path, name: str):
    with _open(archives, archive) as session:
        try:
            path = extract_to_temp_file(session, normalize_path(name))
        except ArchiveError as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo(str(path))


@cli.command("payload", help="Stage the first payload file and print its path.")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-e", "--ext", "extensions", multiple=True,
    help="Allowed payload extension, repeatable (default: built-in list).",
)
@click.pass_obj
def payload_cmd(archives: ArchiveContext, archive: Path, extensions: tuple[str, ...]):
    try:
        path = extract_payload_to_temp(archive, extensions or None, context=archives)
    except ArchiveError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(str(path))


@cli.command("purge", help="Delete everything in the staging directory.")
@click.pass_obj
def purge_cmd(archives: ArchiveContext):
    removed = archives.purge_staging()
    click.echo(f"Removed {removed} item(s) from {archives.staging_dir}.")


if __name__ == "__main__":  # pragma: no cover
    cli()
