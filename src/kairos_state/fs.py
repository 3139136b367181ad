"""
File access abstraction.

Inspectors read host files (/proc, /sys, /etc) through a FileSystem
so tests can point them at a fixture tree instead of the real host.
Paths are always absolute host paths; the implementation decides where they live.
"""

from pathlib import Path
from typing import Protocol, Union


class FileSystem(Protocol):
    """Read-only view of a host's files."""

    def read_text(self, path: str) -> str:
        """Return file content. Raises OSError when unreadable."""
        ...


class HostFS:
    """FileSystem rooted at host_root ("/" for the live host, a mount for a chroot)."""

    def __init__(self, host_root: Union[str, Path] = "/"):
        self.host_root = Path(host_root)

    def _resolve(self, path: str) -> Path:
        return self.host_root / path.lstrip("/")

    def read_text(self, path: str) -> str:
        return self._resolve(path).read_text(errors="replace")

    def __repr__(self) -> str:
        return f"HostFS({str(self.host_root)!r})"
