import functools
from pathlib import Path

import pytest
import pyudev

from kairos_state.executor import RunResult
from kairos_state.fs import HostFS

FIXTURES = Path(__file__).parent / "fixtures"
HOST_ROOT = FIXTURES / "host"


def _fixture(name):
    return RunResult(stdout=(FIXTURES / name).read_text(), stderr="", returncode=0)


def _fixture_executor(cmd, cwd=None):
    """Executor that returns fixture file content for the findmnt/lsblk calls the fixture host needs."""
    if "findmnt" in cmd and "/dev/disk/by-label/COS_PERSISTENT" in cmd:
        return _fixture("findmnt_persistent.json")
    if "findmnt" in cmd and "/dev/disk/by-label/COS_RECOVERY" in cmd:
        return _fixture("findmnt_recovery.json")
    return RunResult(stdout="", stderr="unknown command", returncode=1)


@pytest.fixture(autouse=True)
def _no_uuid_override(monkeypatch):
    """Snapshot identifiers come from the fixture host unless a test sets $UUID."""
    monkeypatch.delenv("UUID", raising=False)


@pytest.fixture
def fixture_executor():
    return _fixture_executor


@pytest.fixture
def host_root() -> Path:
    return HOST_ROOT


@pytest.fixture
def host_fs() -> HostFS:
    return HostFS(HOST_ROOT)


class RecordingExecutor:
    """Executor with canned responses keyed by (tool, label); records every call."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def __call__(self, cmd, *, cwd=None):
        self.calls.append(list(cmd))
        label = next((c.rsplit("/", 1)[-1] for c in cmd if c.startswith("/dev/disk/by-label/")), "")
        result = self.responses.get((cmd[0], label))
        if result is None:
            return RunResult(stdout="", stderr=f"{cmd[0]}: {label}: not found", returncode=1)
        if isinstance(result, RunResult):
            return result
        return RunResult(stdout=result, stderr="", returncode=0)

    def tools_called(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def recording_executor():
    return RecordingExecutor


class MockedUdevAttributes(object):
    def __init__(self, values):
        self.values = values

    def asint(self, attribute):
        value = self.values.get(attribute)
        if value is None:
            raise KeyError(attribute)
        return int(value)


class MockedUdevDevice(object):
    def __init__(self, sys_name, device_type, properties=None, size=None, parent=None):
        self.sys_name = sys_name
        self.device_type = device_type
        self.parent = parent
        self.properties = dict(properties or {})
        self.attributes = MockedUdevAttributes({"size": size})

    def get(self, attribute, default=None):
        return self.properties.get(attribute, default)


class UdevContextMocked(object):
    def __init__(self, mocked_devices):
        self.mocked_devices = mocked_devices

    def list_devices(self, subsystem=None, DEVTYPE=None):
        return [d for d in self.mocked_devices if DEVTYPE is None or d.device_type == DEVTYPE]


def _fixture_block_devices():
    """udev view of the fixture host: sda with the five Kairos partitions, plus an empty sr0."""
    sda = MockedUdevDevice("sda", "disk", size=41943040)
    devices = [sda, MockedUdevDevice("sr0", "disk")]
    for n, size, fstype, fslabel, plabel in [
        (1, 131072, "vfat", "COS_GRUB", "efi"),
        (2, 131072, "ext4", "COS_OEM", "oem"),
        (3, 8388608, "ext4", "COS_RECOVERY", "recovery"),
        (4, 16777216, "ext4", "COS_STATE", "state"),
        (5, 20971520, "ext4", "COS_PERSISTENT", "persistent"),
    ]:
        devices.append(MockedUdevDevice(
            f"sda{n}",
            "partition",
            properties={
                "ID_FS_TYPE": fstype,
                "ID_FS_LABEL": fslabel,
                "ID_PART_ENTRY_NAME": plabel,
                "ID_PART_ENTRY_UUID": f"5b1e0c4a-8d2f-4c7e-9a3b-00000000000{n}",
            },
            size=size,
            parent=sda,
        ))
    return devices


@pytest.fixture(autouse=True)
def udev_devices(monkeypatch):
    """Mocked udev database; tests may replace or extend the device list in place."""
    devices = _fixture_block_devices()
    # Partially apply the device list so Context() takes no arguments, like the real one
    monkeypatch.setattr(pyudev, "Context", functools.partial(UdevContextMocked, devices))
    return devices
