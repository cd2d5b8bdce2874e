"""CLI interface for volscan."""

from __future__ import annotations

import json
import logging
import sys

import click

from volscan.config import ScanConfig
from volscan.core.exporter import FORMATS
from volscan.core.view import VolumeView, format_size
from volscan.core.volumes import list_volumes, volumes_for_paths
from volscan.models.volume import Volume
from volscan.session import Session
from volscan.utils import GIB, MIB

_BAR_WIDTH = 30


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _capacity(size_bytes: int) -> str:
    if size_bytes >= GIB:
        return f"{size_bytes / GIB:.1f} GB"
    return f"{size_bytes / MIB:.1f} MB"


def _usage_bar(volume: Volume) -> str:
    filled = round(volume.usage_percent / 100 * _BAR_WIDTH)
    color = "red" if volume.usage_percent >= 90 else "green"
    return click.style("█" * filled, fg=color) + click.style("░" * (_BAR_WIDTH - filled), fg="bright_black")


def _view_to_dict(view: VolumeView) -> dict:
    return {
        "name": view.volume.name,
        "mount_point": view.volume.mount_point,
        "total_space": view.volume.total_gib,
        "used_space": view.volume.used_gib,
        "match_count": view.match_count,
        "files": [{"path": f.path, "size_mb": f.size_mb} for f in view.files],
    }


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """volscan — inventory mounted volumes and their largest files."""
    _setup_logging(verbose)


# ── volumes ──────────────────────────────────────────────────────────────

@main.command("volumes")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def volumes_cmd(as_json: bool) -> None:
    """List mounted volumes and their capacity."""
    volumes = list_volumes()

    if as_json:
        data = [
            {
                "name": v.name,
                "mount_point": v.mount_point,
                "fstype": v.fstype,
                "total_bytes": v.total_bytes,
                "used_bytes": v.used_bytes,
            }
            for v in volumes
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not volumes:
        click.echo("No volumes found.")
        return

    for v in volumes:
        click.echo(
            f"  {click.style(v.name, fg='cyan', bold=True):30s}  {v.mount_point:25s} "
            f"{_capacity(v.used_bytes):>10s} / {_capacity(v.total_bytes):<10s} "
            f"({v.usage_percent:.0f}%)"
        )


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=False))
@click.option("--ext", "-e", default="", help="Only show files ending with this text (e.g. .iso)")
@click.option("--name", "-n", default="", help="Only show files whose path contains this text")
@click.option("--top", "-t", default=None, type=click.IntRange(min=0), help="Files to show per volume")
@click.option("--workers", "-w", default=None, type=click.IntRange(min=1), help="Walker threads per volume")
@click.option("--one-file-system", "-x", is_flag=True, help="Do not descend into other filesystems")
@click.option("--export", "export_fmt", default=None, type=click.Choice(FORMATS), help="Also export the full report")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(
    paths: tuple[str, ...],
    ext: str,
    name: str,
    top: int | None,
    workers: int | None,
    one_file_system: bool,
    export_fmt: str | None,
    as_json: bool,
) -> None:
    """Scan all volumes (or PATHS) and show the largest files."""
    config = ScanConfig().with_options(
        max_workers=workers,
        top_n=top,
        one_file_system=one_file_system or None,
    )
    lister = (lambda: volumes_for_paths(paths)) if paths else list_volumes

    def on_tick(seconds: int) -> None:
        click.echo(f"  Time elapsed: {seconds} seconds", err=True)

    session = Session(config, volume_lister=lister, on_tick=None if as_json else on_tick)
    session.set_extension_filter(ext)
    session.set_name_filter(name)

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning... Please wait...\n")

    session.scan()
    try:
        session.aggregator.wait()
    except KeyboardInterrupt:
        session.stop_scan()
        click.echo("Scan stopped.", err=True)
        sys.exit(130)

    if session.error_message:
        click.echo(click.style(session.error_message, fg="red"), err=True)
        sys.exit(1)

    views = session.view()
    if as_json:
        click.echo(json.dumps([_view_to_dict(v) for v in views], indent=2))
    else:
        for view in views:
            volume = view.volume
            click.echo(f"  {click.style('Disk:', bold=True)} {click.style(volume.name, fg='cyan', bold=True)}")
            click.echo(f"  Total Space: {volume.total_gib:.2f} GB")
            click.echo(f"  Used Space:  {volume.used_gib:.2f} GB")
            click.echo(f"  {_usage_bar(volume)} {volume.usage_percent:.0f}%")
            if not view.files:
                click.echo(f"  {click.style('·', fg='bright_black')} no matching files")
            for file in view.files:
                click.echo(f"    {click.style(format_size(file.size_mb), fg='green', bold=True):>20s}  {file.path}")
            if view.match_count > len(view.files):
                click.echo(click.style(f"    … {view.match_count - len(view.files):,} more", fg="bright_black"))
            click.echo()

        click.echo(f"Scan Duration: {session.aggregator.duration:.2f} seconds")
        click.echo(f"Scans performed: {session.aggregator.scan_count.value}")

    if export_fmt:
        exported = session.export_json() if export_fmt == "json" else session.export_csv()
        if not exported:
            click.echo(click.style(session.error_message, fg="red"), err=True)
            sys.exit(1)
        if not as_json:
            click.echo(f"Exported {len(session.report.volumes)} volumes as {export_fmt.upper()}.")


# ── service ──────────────────────────────────────────────────────────────

@main.group()
def service() -> None:
    """D-Bus service management."""


@service.command("start")
def service_start() -> None:
    """Start the D-Bus service in foreground."""
    from volscan.dbus_service import start_service

    click.echo("Starting volscan D-Bus service...")
    start_service()
