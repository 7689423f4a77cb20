"""Sources of base ignition templates and sinks for rendered user data.

A backend is picked once, when the factory is built (see :func:`create_backend`).
Both variants resolve templates the same way; they differ in where
``apply_config`` puts the rendered payload.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Literal

from botocore.client import BaseClient

from bootstrap_s3.core.exceptions import ConfigurationError, InvalidInputError
from bootstrap_s3.core.logging import get_logger
from bootstrap_s3.ignition.node import NodeModel
from bootstrap_s3.ignition.templates import TemplateTable
from bootstrap_s3.ignition.types import Config, ConfigReference, Ignition, IgnitionConfig
from bootstrap_s3.services.objects import ObjectStore, object_url

logger = get_logger(__name__)

BackendKind = Literal["static", "s3"]


class TemplateBackend(ABC):
    """Interface every template backend implements."""

    @abstractmethod
    def get_template(self, node: NodeModel) -> Config:
        """Return the base config for ``node``."""

    @abstractmethod
    def apply_config(self, payload: bytes) -> Config:
        """Persist ``payload`` and return a config that replaces itself with it."""

    @abstractmethod
    def user_data_dir(self) -> str: ...

    @abstractmethod
    def user_data_bucket(self) -> str: ...

    @abstractmethod
    def file_path(self) -> str:
        """Key of the last payload written by ``apply_config`` ('' before the first)."""


class StaticTemplateBackend(TemplateBackend):
    """Resolves templates from a fixed table and keeps applied payloads in memory.

    Nothing touches the network, which makes this the backend for tests and
    dry runs.
    """

    def __init__(
        self,
        user_data_dir: str,
        user_data_bucket: str,
        templates: TemplateTable | None = None,
    ) -> None:
        self._user_data_dir = user_data_dir.strip("/")
        self._user_data_bucket = user_data_bucket
        self.templates = templates or TemplateTable()
        self._file_path = ""
        self.payloads: dict[str, bytes] = {}

    def user_data_dir(self) -> str:
        return self._user_data_dir

    def user_data_bucket(self) -> str:
        return self._user_data_bucket

    def file_path(self) -> str:
        return self._file_path

    def get_template(self, node: NodeModel) -> Config:
        template_path, matched = self.templates.resolve(node.version)
        if not matched:
            logger.warning(
                "ignition.template_version_unsupported",
                version=node.version,
                fallback_version=self.templates.default_version,
            )
        return self._base_config(
            IgnitionConfig(append=[ConfigReference(source=object_url(self._user_data_bucket, template_path))])
        )

    def apply_config(self, payload: bytes) -> Config:
        if not payload:
            raise InvalidInputError(message="got empty data", error_code="empty_payload")
        key = self._new_file_path()
        self.payloads[key] = payload
        self._file_path = key
        return self._replace_config(key)

    def _new_file_path(self) -> str:
        return f"{self._user_data_dir}/{uuid.uuid4()}"

    def _replace_config(self, key: str) -> Config:
        return self._base_config(
            IgnitionConfig(replace=ConfigReference(source=object_url(self._user_data_bucket, key)))
        )

    @staticmethod
    def _base_config(config: IgnitionConfig) -> Config:
        return Config(ignition=Ignition(config=config))


class ObjectStoreBackend(StaticTemplateBackend):
    """Writes applied payloads to the user-data bucket under a fresh key."""

    def __init__(
        self,
        user_data_dir: str,
        user_data_bucket: str,
        client: BaseClient,
        templates: TemplateTable | None = None,
    ) -> None:
        super().__init__(user_data_dir, user_data_bucket, templates)
        self.store = ObjectStore(client, user_data_bucket)

    def apply_config(self, payload: bytes) -> Config:
        key = self._new_file_path()
        self.store.put_key(key, payload)
        self._file_path = key
        logger.info("ignition.user_data_stored", bucket=self._user_data_bucket, key=key)
        return self._replace_config(key)


def create_backend(
    kind: BackendKind,
    *,
    user_data_dir: str,
    user_data_bucket: str,
    templates: TemplateTable | None = None,
    client: BaseClient | None = None,
) -> TemplateBackend:
    """Build the backend named by ``kind``; ``"s3"`` requires an S3 client."""
    if kind == "static":
        return StaticTemplateBackend(user_data_dir, user_data_bucket, templates)
    if kind == "s3":
        if client is None:
            raise ConfigurationError(
                message="the s3 ignition backend needs an S3 client",
                error_code="missing_s3_client",
            )
        return ObjectStoreBackend(user_data_dir, user_data_bucket, client, templates)
    raise ConfigurationError(
        message=f"unknown ignition backend {kind!r}",
        error_code="unknown_ignition_backend",
        details={"kind": kind, "supported": ["static", "s3"]},
    )
