"""Boot inspector: which slot the host booted from, based on the kernel command line."""

from pathlib import Path
from typing import List, Tuple, Union

from ..fs import FileSystem
from ..logging import get_logger
from ..schema import Boot

log = get_logger("boot")

CMDLINE_PATH = "/proc/cmdline"

# Checked in order; first hit wins.
BOOT_MARKERS: List[Tuple[Boot, Tuple[str, ...]]] = [
    (Boot.ACTIVE, ("COS_ACTIVE",)),
    (Boot.PASSIVE, ("COS_PASSIVE",)),
    (Boot.RECOVERY, ("COS_RECOVERY", "COS_SYSTEM")),
    (Boot.LIVE_MEDIA, ("live:LABEL", "live:CDLABEL", "netboot")),
]


def classify(cmdline: str) -> Boot:
    for boot, markers in BOOT_MARKERS:
        if any(marker in cmdline for marker in markers):
            return boot
    return Boot.UNKNOWN


def detect_boot(host_root: Union[str, Path] = "/") -> Boot:
    """Classify the host's boot. An unreadable command line means UNKNOWN."""
    try:
        cmdline = (Path(host_root) / CMDLINE_PATH.lstrip("/")).read_text()
    except OSError as e:
        log.debug("cannot read {}: {}", CMDLINE_PATH, e)
        return Boot.UNKNOWN
    return classify(cmdline)


def detect_boot_with_fs(fs: FileSystem) -> Boot:
    """Classify the boot reading the command line through fs. Read errors propagate."""
    return classify(fs.read_text(CMDLINE_PATH))
