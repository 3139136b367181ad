"""
Inspectors produce the pieces of the runtime snapshot.
Each inspector reads the host through a FileSystem and, when it needs tools,
an Executor; new_runtime merges their results into one Runtime.
"""

from pathlib import Path
from typing import Optional, Union

from ..errors import EnumerationError
from ..executor import Executor, make_executor
from ..fs import FileSystem, HostFS
from ..logging import get_logger
from ..schema import Boot, Role, Runtime

from .block import enumerate_disks
from .boot import CMDLINE_PATH, detect_boot_with_fs
from .kairos import run as run_kairos, snapshot_uuid
from .partitions import resolve
from .system import run as run_system

log = get_logger("runtime")


def _boot(fs: FileSystem) -> Boot:
    try:
        return detect_boot_with_fs(fs)
    except OSError as e:
        log.debug("cannot read {}: {}", CMDLINE_PATH, e)
        return Boot.UNKNOWN


def new_runtime(
    host_root: Union[str, Path] = "/",
    executor: Optional[Executor] = None,
    fs: Optional[FileSystem] = None,
) -> Runtime:
    """
    Take a snapshot of the host.

    Raises EnumerationError when block devices cannot be enumerated at all; its
    ``runtime`` attribute still carries boot state, hardware facts and Kairos
    info, with every partition left not found.
    """
    host_root = Path(host_root)
    if fs is None:
        fs = HostFS(host_root)
    if executor is None:
        executor = make_executor(str(host_root))

    live_host = host_root == Path("/")
    fields = {
        "boot_state": _boot(fs),
        "uuid": snapshot_uuid(fs, live_host=live_host),
        "system": run_system(fs, live_host=live_host),
        "kairos": run_kairos(fs),
    }

    try:
        disks = enumerate_disks(fs)
    except EnumerationError as e:
        e.runtime = Runtime(**fields)
        raise

    for role in Role:
        fields[role.value] = resolve(role, disks, executor)
    runtime = Runtime(**fields)
    log.debug("snapshot {}: boot={}", runtime.uuid, runtime.boot_state.value)
    return runtime
