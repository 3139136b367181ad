"""
Runs the host tools the partition resolver relies on (findmnt, lsblk).

The resolver takes an Executor instead of calling subprocess itself, so tests
hand it canned findmnt/lsblk JSON. Commands block until the tool exits.
"""

import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .logging import get_logger

log = get_logger("exec")


@dataclass
class RunResult:
    """Captured output and exit status of one findmnt/lsblk call."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Executor(Protocol):
    """Anything that runs a tool command line and returns its RunResult."""

    def __call__(self, cmd: List[str], *, cwd: Optional[str] = None) -> RunResult:
        ...


def subprocess_executor(cmd: List[str], *, cwd: Optional[str] = None) -> RunResult:
    """Run cmd on the host. A missing binary yields returncode 127."""
    log.debug("running {}", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, cwd=cwd)
    except FileNotFoundError:
        log.debug("{}: command not found", cmd[0])
        return RunResult(stdout="", stderr="Command not found", returncode=127)
    if result.returncode != 0:
        log.debug("{} exited {}: {}", cmd[0], result.returncode, (result.stderr or "").strip())
    return RunResult(
        stdout=result.stdout or "",
        stderr=result.stderr or "",
        returncode=result.returncode,
    )


def make_executor(host_root: str) -> Executor:
    """Executor that runs tools with host_root as working directory."""
    def run(cmd: List[str], *, cwd: Optional[str] = None) -> RunResult:
        return subprocess_executor(cmd, cwd=cwd or host_root)
    return run
