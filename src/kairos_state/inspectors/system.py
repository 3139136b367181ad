"""
System inspector: hardware and OS facts.

The result is an opaque dict carried verbatim in the snapshot. Each fact source is
independent; a failing one leaves its fields empty and never fails the rest.
"""

import platform
import socket
import time
from typing import Any, Dict

import psutil

from ..fs import FileSystem
from ..logging import get_logger
from .kairos import OS_RELEASE_PATH, parse_os_release

log = get_logger("system")

DMI_ID = "/sys/class/dmi/id"

# section -> {key: dmi attribute}
DMI_FIELDS = {
    "product": {"name": "product_name", "vendor": "sys_vendor", "version": "product_version", "serial": "product_serial"},
    "board": {"name": "board_name", "vendor": "board_vendor", "version": "board_version", "serial": "board_serial"},
    "chassis": {"type": "chassis_type", "vendor": "chassis_vendor", "version": "chassis_version", "serial": "chassis_serial"},
    "bios": {"vendor": "bios_vendor", "version": "bios_version", "date": "bios_date"},
}


def _read(fs: FileSystem, path: str) -> str:
    try:
        return fs.read_text(path).strip()
    except OSError:
        return ""


def _node(fs: FileSystem, live_host: bool) -> Dict[str, str]:
    hostname = _read(fs, "/etc/hostname")
    if not hostname and live_host:
        hostname = socket.gethostname()
    return {
        "hostname": hostname.splitlines()[0] if hostname else "",
        "machineid": _read(fs, "/etc/machine-id"),
        "timezone": time.strftime("%Z"),
    }


def _os(fs: FileSystem) -> Dict[str, str]:
    try:
        data = parse_os_release(fs.read_text(OS_RELEASE_PATH))
    except OSError as e:
        log.debug("cannot read {}: {}", OS_RELEASE_PATH, e)
        data = {}
    return {
        "name": data.get("PRETTY_NAME", data.get("NAME", "")),
        "vendor": data.get("ID", ""),
        "version": data.get("VERSION_ID", ""),
        "release": data.get("VERSION", ""),
        "architecture": platform.machine(),
    }


def _kernel() -> Dict[str, str]:
    return {
        "release": platform.release(),
        "version": platform.version(),
        "architecture": platform.machine(),
    }


def _cpu(fs: FileSystem) -> Dict[str, Any]:
    info: Dict[str, Any] = {"vendor": "", "model": "", "cpus": 0, "cores": 0, "threads": 0}
    for line in _read(fs, "/proc/cpuinfo").splitlines():
        if ":" not in line:
            continue
        k, v = (s.strip() for s in line.split(":", 1))
        if k == "vendor_id" and not info["vendor"]:
            info["vendor"] = v
        elif k == "model name" and not info["model"]:
            info["model"] = v
        elif k == "physical id":
            info["cpus"] = max(info["cpus"], int(v) + 1) if v.isdigit() else info["cpus"]
    info["cores"] = psutil.cpu_count(logical=False) or 0
    info["threads"] = psutil.cpu_count(logical=True) or 0
    return info


def _memory() -> Dict[str, int]:
    try:
        total = psutil.virtual_memory().total
    except (OSError, RuntimeError) as e:
        log.debug("cannot read memory info: {}", e)
        total = 0
    return {"size": total // (1024 * 1024)}


def _dmi(fs: FileSystem) -> Dict[str, Dict[str, str]]:
    return {
        section: {key: _read(fs, f"{DMI_ID}/{attr}") for key, attr in fields.items()}
        for section, fields in DMI_FIELDS.items()
    }


def run(fs: FileSystem, live_host: bool = True) -> Dict[str, Any]:
    """Collect facts. Only a live host (host_root "/") may fall back to this process's hostname."""
    facts: Dict[str, Any] = {
        "node": _node(fs, live_host),
        "os": _os(fs),
        "kernel": _kernel(),
    }
    facts.update(_dmi(fs))
    facts["cpu"] = _cpu(fs)
    facts["memory"] = _memory()
    return facts
