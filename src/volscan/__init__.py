"""volscan: inventory mounted volumes and rank their largest files."""

__version__ = "0.1.0"
