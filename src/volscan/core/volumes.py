"""Mounted volume discovery."""

from __future__ import annotations

import logging
from typing import Iterable

import psutil

from volscan.models.volume import Volume
from volscan.utils import display_path

log = logging.getLogger(__name__)


def _usage(mount_point: str) -> tuple[int, int] | None:
    """Return ``(total, used)`` bytes for a mount point, or None if unreadable.

    Used space is capacity minus what is available to unprivileged users,
    so reserved blocks count as used.
    """
    try:
        usage = psutil.disk_usage(mount_point)
    except OSError as e:
        log.debug("Skipping %s: %s", mount_point, e)
        return None
    used = max(0, usage.total - usage.free)
    return usage.total, min(used, usage.total)


def list_volumes() -> list[Volume]:
    """List the volumes currently mounted on this host.

    An empty list is a valid result; callers decide whether that is an error.
    """
    volumes: list[Volume] = []
    for partition in psutil.disk_partitions(all=False):
        usage = _usage(partition.mountpoint)
        if usage is None:
            continue
        total, used = usage
        volumes.append(
            Volume(
                name=display_path(partition.device),
                mount_point=partition.mountpoint,
                total_bytes=total,
                used_bytes=used,
                fstype=partition.fstype,
            )
        )
    log.debug("Found %d volumes", len(volumes))
    return volumes


def volumes_for_paths(paths: Iterable[str]) -> list[Volume]:
    """Treat arbitrary directories as volumes.

    Capacity comes from the filesystem containing each path.
    """
    volumes: list[Volume] = []
    for path in paths:
        usage = _usage(path)
        if usage is None:
            continue
        total, used = usage
        volumes.append(Volume(name=display_path(path), mount_point=path, total_bytes=total, used_bytes=used))
    return volumes
