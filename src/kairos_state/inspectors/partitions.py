"""
Partition resolver: find each role's partition, falling through discovery tiers.

Tier 1 matches the enumerator's partitions by filesystem label and fills a
missing mount point from findmnt. Tier 2 asks lsblk by label, which also sees
LVM volumes; it only runs for the roles that live on LVM in practice.
No tool failure is fatal: a tier that learns nothing just yields no match.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..executor import Executor
from ..logging import get_logger
from ..schema import ROLE_LABELS, PartitionState, Role
from .block import Disk, Partition

log = get_logger("partitions")

# Roles that get the lsblk fallback.
RESOLVERS_WITH_FALLBACK = (Role.RECOVERY, Role.OEM)

_RW_OPTION = re.compile(r"(^|,)rw(,|$)")
_RO_OPTION = re.compile(r"(^|,)ro(,|$)")


class FindmntFilesystem(BaseModel):
    target: Optional[str] = None
    fs_options: Optional[str] = Field(default=None, alias="fs-options")


class FindmntOutput(BaseModel):
    """findmnt -J -o TARGET,FS-OPTIONS"""

    filesystems: List[FindmntFilesystem] = Field(default_factory=list)


class LsblkDevice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str = ""
    mountpoint: Optional[str] = None
    fstype: Optional[str] = None
    size: Optional[str] = None
    label: Optional[str] = None
    ro: Optional[bool] = False


class LsblkOutput(BaseModel):
    """lsblk -J -o PATH,FSTYPE,MOUNTPOINT,SIZE,RO,LABEL"""

    blockdevices: List[LsblkDevice] = Field(default_factory=list)


def _by_label(label: str) -> str:
    return f"/dev/disk/by-label/{label}"


def read_only_from_options(options: str, default: bool) -> bool:
    """
    Decide read-only from a mount options string. rw then ro are applied in
    turn, so ro wins when both are present; when neither is, the default is
    kept.
    """
    rw = bool(_RW_OPTION.search(options))
    ro = bool(_RO_OPTION.search(options))
    if rw and ro:
        log.warning("mount options {!r} carry both rw and ro, ro wins", options)
    read_only = default
    if rw:
        read_only = False
    if ro:
        read_only = True
    return read_only


def _findmnt(label: str, executor: Executor) -> Optional[FindmntFilesystem]:
    r = executor(["findmnt", _by_label(label), "-f", "-J", "-o", "TARGET,FS-OPTIONS"])
    if not r.ok:
        log.debug("findmnt for {} failed: {}", label, r.stderr.strip())
        return None
    log.trace("findmnt {}: {}", label, r.stdout)
    try:
        mnt = FindmntOutput.model_validate_json(r.stdout)
    except ValidationError as e:
        log.debug("findmnt for {} returned unparsable output: {}", label, e)
        return None
    if len(mnt.filesystems) != 1:
        log.debug("findmnt for {} returned {} filesystems, ignoring", label, len(mnt.filesystems))
        return None
    return mnt.filesystems[0]


def detect_partition_by_findmnt(part: Partition, executor: Executor) -> PartitionState:
    """Build the state of an enumerated partition, filling a missing mount point via findmnt."""
    mount_point = part.mount_point
    read_only = part.is_read_only
    if not part.mount_point and part.filesystem_label:
        fs = _findmnt(part.filesystem_label, executor)
        if fs is not None:
            mount_point = fs.target or ""
            read_only = read_only_from_options(fs.fs_options or "", read_only)
    return PartitionState(
        name=f"/dev/{part.name}",
        label=part.label,
        filesystem_label=part.filesystem_label,
        mount_point=mount_point,
        size_bytes=part.size_bytes,
        type=part.type,
        is_read_only=read_only,
        found=True,
        uuid=part.uuid,
    )


def detect_partition_by_lsblk(label: str, executor: Executor) -> PartitionState:
    """
    Look a partition up by filesystem label with lsblk. Catches LVM volumes the
    enumerator cannot see. Anything other than exactly one device means not found.
    """
    r = executor(["lsblk", _by_label(label), "-o", "PATH,FSTYPE,MOUNTPOINT,SIZE,RO,LABEL", "-J"])
    if not r.ok:
        log.debug("lsblk for {} failed: {}", label, r.stderr.strip())
        return PartitionState()
    log.trace("lsblk {}: {}", label, r.stdout)
    try:
        out = LsblkOutput.model_validate_json(r.stdout)
    except ValidationError as e:
        log.debug("lsblk for {} returned unparsable output: {}", label, e)
        return PartitionState()
    if len(out.blockdevices) != 1:
        log.debug("lsblk for {} returned {} devices, ignoring", label, len(out.blockdevices))
        return PartitionState()
    blk = out.blockdevices[0]
    # lsblk RO tends to be false even for ro mounts
    return PartitionState(
        name=blk.path,
        filesystem_label=blk.label or "",
        mount_point=blk.mountpoint or "",
        type=blk.fstype or "",
        is_read_only=bool(blk.ro),
        found=True,
    )


def _match_by_label(label: str, disks: List[Disk]) -> Optional[Partition]:
    match = None
    for disk in disks:
        for part in disk.partitions:
            if part.filesystem_label != label:
                continue
            if match is not None:
                log.debug("{} found on both {} and {}, using the latter", label, match.name, part.name)
            match = part
    return match


def resolve(role: Role, disks: List[Disk], executor: Executor) -> PartitionState:
    """Resolve one role's partition. Always returns a state, found or not."""
    label = ROLE_LABELS[role]
    part = _match_by_label(label, disks)
    if part is not None:
        state = detect_partition_by_findmnt(part, executor)
        log.debug("{}: {} via block devices", role.value, state.name)
        return state
    if role in RESOLVERS_WITH_FALLBACK:
        state = detect_partition_by_lsblk(label, executor)
        if state.found:
            log.debug("{}: {} via lsblk", role.value, state.name)
        return state
    log.debug("{}: not found", role.value)
    return PartitionState()
