"""
Block-device enumerator: disks and partitions from udev, mounts from /proc/mounts.

Mount points are only matched by device path (/dev/<name>); a partition that
was mounted by label or UUID shows up as unmounted here. The partition
resolver repairs that with findmnt.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pyudev

from ..errors import EnumerationError
from ..fs import FileSystem
from ..logging import get_logger

log = get_logger("block")

PROC_MOUNTS = "/proc/mounts"
SECTOR_SIZE = 512

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


@dataclass
class Partition:
    """One partition as the enumerator sees it."""

    name: str  # kernel name, e.g. "sda2"
    type: str = ""  # filesystem type
    uuid: str = ""
    size_bytes: int = 0
    label: str = ""  # partition-table label
    filesystem_label: str = ""
    mount_point: str = ""
    is_read_only: bool = False


@dataclass
class Disk:
    name: str
    partitions: List[Partition] = field(default_factory=list)


def _unescape_mount_field(value: str) -> str:
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), value)


def parse_mounts(text: str) -> Dict[str, Tuple[str, bool]]:
    """Map device path -> (mount point, read-only) for the first mount of each device."""
    mounts: Dict[str, Tuple[str, bool]] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 4:
            continue
        device = _unescape_mount_field(parts[0])
        if device in mounts:
            continue
        options = parts[3].split(",")
        mounts[device] = (_unescape_mount_field(parts[1]), "ro" in options)
    return mounts


def _size_bytes(device) -> int:
    try:
        return device.attributes.asint("size") * SECTOR_SIZE
    except (KeyError, ValueError) as e:
        log.debug("no size for {}: {}", device.sys_name, e)
        return 0


def _partition(device, mounts: Dict[str, Tuple[str, bool]]) -> Partition:
    name = device.sys_name
    mount_point, read_only = mounts.get(f"/dev/{name}", ("", False))
    return Partition(
        name=name,
        type=device.get("ID_FS_TYPE", ""),
        uuid=device.get("ID_PART_ENTRY_UUID", ""),
        size_bytes=_size_bytes(device),
        label=device.get("ID_PART_ENTRY_NAME", ""),
        filesystem_label=device.get("ID_FS_LABEL", ""),
        mount_point=mount_point,
        is_read_only=read_only,
    )


def enumerate_disks(fs: FileSystem) -> List[Disk]:
    """
    List every block disk known to udev with its partitions.
    Raises EnumerationError if udev cannot be queried at all.
    """
    try:
        ctx = pyudev.Context()
        disk_devices = list(ctx.list_devices(subsystem="block", DEVTYPE="disk"))
        part_devices = list(ctx.list_devices(subsystem="block", DEVTYPE="partition"))
    except (ImportError, OSError) as e:
        raise EnumerationError(f"cannot enumerate block devices: {e}") from e

    try:
        mounts = parse_mounts(fs.read_text(PROC_MOUNTS))
    except OSError as e:
        log.debug("cannot read {}: {}", PROC_MOUNTS, e)
        mounts = {}

    disks = {d.sys_name: Disk(name=d.sys_name) for d in sorted(disk_devices, key=lambda d: d.sys_name)}
    for device in sorted(part_devices, key=lambda d: d.sys_name):
        parent = device.parent
        disk = disks.get(parent.sys_name) if parent is not None else None
        if disk is None:
            log.debug("partition {} has no known disk, skipping", device.sys_name)
            continue
        disk.partitions.append(_partition(device, mounts))
    for disk in disks.values():
        log.trace("disk {}: {} partitions", disk.name, len(disk.partitions))
    return list(disks.values())
