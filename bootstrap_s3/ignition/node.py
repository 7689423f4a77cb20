from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FILE_MODE = 0o644
DEFAULT_DIR_MODE = 0o755


class _NodeModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class FileSpec(_NodeModel):
    """A file written to the machine's root filesystem at first boot."""

    path: str
    permissions: str | None = Field(default=None, description="Octal mode, e.g. '0640'.")
    content: str | None = None


class DropinSpec(_NodeModel):
    name: str
    content: str


class ServiceUnitSpec(_NodeModel):
    """A systemd unit plus its ordered drop-ins."""

    name: str
    content: str = ""
    enabled: bool = False
    dropins: tuple[DropinSpec, ...] = ()


class NodeModel(_NodeModel):
    """Files and services rendered into a machine's ignition config."""

    files: tuple[FileSpec, ...] = ()
    services: tuple[ServiceUnitSpec, ...] = ()
    version: str = ""
