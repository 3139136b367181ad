"""Kairos inspector: flavor, release version and the snapshot identifier."""

import os
import socket
import uuid
from typing import Dict

from ..fs import FileSystem
from ..logging import get_logger
from ..schema import Kairos

log = get_logger("kairos")

OS_RELEASE_PATH = "/etc/os-release"


def parse_os_release(text: str) -> Dict[str, str]:
    data = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, v = line.split("=", 1)
        data[k.strip()] = v.strip().strip('"').strip("'")
    return data


def os_release(key: str, fs: FileSystem) -> str:
    """
    Look up key in /etc/os-release, preferring the KAIROS_-prefixed variant.
    Raises OSError if the file is unreadable and KeyError if neither key is set.
    """
    data = parse_os_release(fs.read_text(OS_RELEASE_PATH))
    for k in (f"KAIROS_{key}", key):
        if k in data:
            return data[k]
    raise KeyError(key)


def flavor(fs: FileSystem) -> str:
    try:
        return os_release("FLAVOR", fs)
    except (OSError, KeyError) as e:
        log.debug("no flavor in {}: {}", OS_RELEASE_PATH, e)
        return ""


def run(fs: FileSystem) -> Kairos:
    version = ""
    try:
        version = os_release("VERSION", fs)
    except (OSError, KeyError) as e:
        log.debug("no version in {}: {}", OS_RELEASE_PATH, e)
    return Kairos(flavor=flavor(fs), version=version)


def _first_line(fs: FileSystem, path: str) -> str:
    try:
        lines = fs.read_text(path).strip().splitlines()
    except OSError:
        return ""
    return lines[0].strip() if lines else ""


def snapshot_uuid(fs: FileSystem, live_host: bool = True) -> str:
    """
    Identifier for a snapshot: $UUID if set, else "<machine-id>-<hostname>",
    else a random UUID.
    """
    env = os.environ.get("UUID")
    if env:
        return env
    machine_id = _first_line(fs, "/etc/machine-id")
    hostname = _first_line(fs, "/etc/hostname")
    if not hostname and live_host:
        hostname = socket.gethostname()
    if machine_id or hostname:
        return "-".join(p for p in (machine_id, hostname) if p)
    return str(uuid.uuid4())
