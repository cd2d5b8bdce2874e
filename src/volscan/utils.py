"""Shared utility functions."""

from __future__ import annotations

import os

MIB = 1_048_576
GIB = 1_073_741_824


def default_workers() -> int:
    """Number of walker threads to use when none is configured."""
    return os.cpu_count() or 1


def display_path(path: str) -> str:
    """Printable form of a filesystem path; undecodable bytes become U+FFFD."""
    return os.fsencode(path).decode("utf-8", "replace")

