"""Ignition v2.2 config document.

Only the sections this package renders are modelled. Serialization drops
unset, empty and false-by-default fields the same way the upstream schema's
``omitempty`` tags do.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field

IGNITION_SCHEMA_VERSION = "2.2.0"


class _IgnitionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class ConfigReference(_IgnitionModel):
    source: str


class IgnitionConfig(_IgnitionModel):
    append: list[ConfigReference] = Field(default_factory=list)
    replace: ConfigReference | None = None


class Ignition(_IgnitionModel):
    version: str = IGNITION_SCHEMA_VERSION
    config: IgnitionConfig = Field(default_factory=IgnitionConfig)


class FileContents(_IgnitionModel):
    source: str = ""


class File(_IgnitionModel):
    filesystem: str
    path: str
    overwrite: bool | None = None
    append: bool = False
    mode: int | None = None
    contents: FileContents = Field(default_factory=FileContents)


class Storage(_IgnitionModel):
    files: list[File] = Field(default_factory=list)


class SystemdDropin(_IgnitionModel):
    name: str
    contents: str = ""


class Unit(_IgnitionModel):
    name: str
    enabled: bool | None = None
    contents: str = ""
    dropins: list[SystemdDropin] = Field(default_factory=list)


class Systemd(_IgnitionModel):
    units: list[Unit] = Field(default_factory=list)


class Config(_IgnitionModel):
    ignition: Ignition = Field(default_factory=Ignition)
    storage: Storage = Field(default_factory=Storage)
    systemd: Systemd = Field(default_factory=Systemd)

    def to_dict(self) -> dict:
        data = _prune(self.model_dump(mode="json"))
        # version is written even when everything else is empty
        ignition = {"version": self.ignition.version, **data.pop("ignition", {})}
        return {"ignition": ignition, **data}

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")


def _prune(value):
    if isinstance(value, dict):
        pruned = {}
        for key, item in value.items():
            item = _prune(item)
            if item is None or item == "" or item == [] or item == {}:
                continue
            if key in _OMIT_WHEN_FALSE and item is False:
                continue
            pruned[key] = item
        return pruned
    if isinstance(value, list):
        return [_prune(item) for item in value]
    return value


_OMIT_WHEN_FALSE = frozenset({"append"})
