"""
Runtime snapshot schema.

Strongly typed contract between inspectors and renderers/queries.
Inspectors produce values that fit into this schema; renderers and the query
engine consume it. Serialized keys (aliases) are the ones existing consumers
query against, so they must not change.
"""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Boot(str, Enum):
    ACTIVE = "active_boot"
    PASSIVE = "passive_boot"
    RECOVERY = "recovery_boot"
    LIVE_MEDIA = "livecd_boot"
    UNKNOWN = "unknown"


class Role(str, Enum):
    """Well-known partition purposes."""

    PERSISTENT = "persistent"
    RECOVERY = "recovery"
    OEM = "oem"
    STATE = "state"


# Filesystem labels the installer puts on each role's partition.
ROLE_LABELS: Dict[Role, str] = {
    Role.PERSISTENT: "COS_PERSISTENT",
    Role.RECOVERY: "COS_RECOVERY",
    Role.OEM: "COS_OEM",
    Role.STATE: "COS_STATE",
}


class PartitionState(BaseModel):
    """Resolved state of one role's partition. Zero value means not found."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mounted: bool = False  # always recomputed from mount_point
    name: str = ""
    label: str = ""
    filesystem_label: str = Field(default="", alias="filesystemlabel")
    mount_point: str = ""
    size_bytes: int = Field(default=0, ge=0)
    type: str = ""
    is_read_only: bool = Field(default=False, alias="read_only")
    found: bool = False
    uuid: str = ""  # PARTUUID on linux, may be empty

    @model_validator(mode="before")
    @classmethod
    def _derive_mounted(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["mounted"] = bool(data.get("mount_point") or "")
        return data

    @model_validator(mode="after")
    def _not_found_is_empty(self) -> "PartitionState":
        if not self.found and any((
            self.name,
            self.label,
            self.filesystem_label,
            self.mount_point,
            self.size_bytes,
            self.type,
            self.is_read_only,
            self.uuid,
        )):
            raise ValueError("a partition that was not found cannot carry data")
        return self


class Kairos(BaseModel):
    """Distribution flavor and OS-release VERSION."""

    model_config = ConfigDict(frozen=True)

    flavor: str = ""
    version: str = ""


class Runtime(BaseModel):
    """
    Full runtime snapshot. Built once by inspectors.new_runtime and never
    mutated afterwards; ``system`` is the hardware-fact blob, kept opaque.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uuid: str = ""
    persistent: PartitionState = Field(default_factory=PartitionState)
    recovery: PartitionState = Field(default_factory=PartitionState)
    oem: PartitionState = Field(default_factory=PartitionState)
    state: PartitionState = Field(default_factory=PartitionState)
    boot_state: Boot = Field(default=Boot.UNKNOWN, alias="boot")
    system: Dict[str, Any] = Field(default_factory=dict)
    kairos: Kairos = Field(default_factory=Kairos)
