"""Assembly of machine ignition configs from a node model and a template backend."""

from __future__ import annotations

import re
from urllib.parse import quote

from bootstrap_s3.core.exceptions import DocumentValidationError, FilePermissionError
from bootstrap_s3.core.logging import get_logger
from bootstrap_s3.ignition.backends import TemplateBackend
from bootstrap_s3.ignition.node import DEFAULT_FILE_MODE, FileSpec, NodeModel, ServiceUnitSpec
from bootstrap_s3.ignition.types import Config, File, FileContents, Storage, Systemd, SystemdDropin, Unit
from bootstrap_s3.ignition.validate import validate_config

logger = get_logger(__name__)

ROOT_FILESYSTEM = "root"

_OCTAL_DIGITS = re.compile(r"[0-7]+")


def data_url(content: str) -> str:
    """Embed ``content`` as an RFC 2397 ``data:`` URL."""
    return "data:," + quote(content, safe="")


def parse_mode(file: FileSpec) -> int:
    if not file.permissions:
        return DEFAULT_FILE_MODE
    if not _OCTAL_DIGITS.fullmatch(file.permissions):
        raise FilePermissionError(
            message=f"invalid permissions {file.permissions!r} for {file.path}",
            error_code="invalid_file_permissions",
            details={"path": file.path, "permissions": file.permissions},
        )
    return int(file.permissions, 8)


def get_storage(files: tuple[FileSpec, ...]) -> Storage:
    storage = Storage()
    for file in files:
        entry = File(
            filesystem=ROOT_FILESYSTEM,
            path=file.path,
            overwrite=True,
            append=False,
            mode=parse_mode(file),
        )
        if file.content:
            entry.contents = FileContents(source=data_url(file.content))
        storage.files.append(entry)
    return storage


def get_systemd(services: tuple[ServiceUnitSpec, ...]) -> Systemd:
    return Systemd(
        units=[
            Unit(
                name=service.name,
                enabled=service.enabled,
                contents=service.content,
                dropins=[SystemdDropin(name=dropin.name, contents=dropin.content) for dropin in service.dropins],
            )
            for service in services
        ]
    )


class Factory:
    """Builds user data through the backend chosen at construction."""

    def __init__(self, backend: TemplateBackend) -> None:
        self.backend = backend

    def user_data_dir(self) -> str:
        return self.backend.user_data_dir()

    def user_data_bucket(self) -> str:
        return self.backend.user_data_bucket()

    def file_path(self) -> str:
        return self.backend.file_path()

    def generate_user_data(self, node: NodeModel) -> bytes:
        """Render ``node`` on top of the backend template and return the JSON config.

        Raises:
            FilePermissionError: If a file's permissions are not octal
            DocumentValidationError: If the assembled config has fatal findings
        """
        template = self.backend.get_template(node)
        config = self.build_ignition_config(template, node)
        return config.to_json()

    def apply_config(self, node: NodeModel, payload: bytes) -> bytes:
        """Persist already rendered ``payload`` and return the config that points at it."""
        config = self.backend.apply_config(payload)
        logger.debug("ignition.config_applied", version=node.version, file_path=self.backend.file_path())
        return config.to_json()

    def build_ignition_config(self, base: Config, node: NodeModel) -> Config:
        config = base.model_copy(
            update={"storage": get_storage(node.files), "systemd": get_systemd(node.services)},
            deep=True,
        )

        report = validate_config(config)
        if report.is_fatal():
            logger.error("ignition.validation_failed", report=str(report), version=node.version)
            raise DocumentValidationError(message=str(report), report=report)
        for warning in report.warnings:
            logger.warning("ignition.validation_warning", finding=str(warning))
        return config
