"""Machine-facing entry points for ignition user data."""

from __future__ import annotations

from botocore.client import BaseClient

from bootstrap_s3.core.config import Settings, get_settings
from bootstrap_s3.core.logging import get_logger
from bootstrap_s3.ignition.backends import create_backend
from bootstrap_s3.ignition.factory import Factory
from bootstrap_s3.ignition.node import NodeModel
from bootstrap_s3.models import MachineRef
from bootstrap_s3.services.clients import get_s3_client
from bootstrap_s3.services.objects import ObjectStore, object_url

logger = get_logger(__name__)


def build_factory(settings: Settings | None = None, client: BaseClient | None = None) -> Factory:
    """Build a :class:`Factory` with the backend selected in settings."""
    settings = settings or get_settings()
    if client is None and settings.ignition_backend == "s3":
        client = get_s3_client()
    backend = create_backend(
        settings.ignition_backend,
        user_data_dir=settings.user_data_dir,
        user_data_bucket=settings.user_data_bucket,
        templates=settings.template_table(),
        client=client,
    )
    return Factory(backend)


class UserDataService:
    """Generates, stores and cleans up a node's ignition user data.

    ``store`` is the object store behind the factory's backend; without one,
    ``delete`` has nothing to remove.
    """

    def __init__(self, factory: Factory, node: NodeModel, store: ObjectStore | None = None) -> None:
        self.factory = factory
        self.node = node
        self.store = store
        self._keys: dict[str, str] = {}

    @classmethod
    def from_settings(
        cls,
        node: NodeModel,
        settings: Settings | None = None,
        client: BaseClient | None = None,
    ) -> UserDataService:
        settings = settings or get_settings()
        factory = build_factory(settings, client)
        store = None
        if settings.ignition_backend == "s3":
            store = ObjectStore(client or get_s3_client(), settings.user_data_bucket)
        return cls(factory, node, store)

    def user_data(self) -> bytes:
        """Return the rendered base ignition config for the node."""
        return self.factory.generate_user_data(self.node)

    def create(self, machine: MachineRef, data: bytes) -> str:
        """Store ``data`` for ``machine`` and return where it was written."""
        self.factory.apply_config(self.node, data)
        key = self.factory.file_path()
        self._keys[machine.key] = key
        reference = object_url(self.factory.user_data_bucket(), key)
        logger.info("user_data.created", machine=machine.key, reference=reference)
        return reference

    def key_for(self, machine: MachineRef) -> str | None:
        """Key of the payload stored for ``machine``, if this service created one."""
        return self._keys.get(machine.key)

    def delete(self, machine: MachineRef) -> None:
        """Best-effort removal of the payload stored for ``machine``."""
        key = self._keys.get(machine.key)
        if not key or self.store is None:
            logger.debug("user_data.delete_skipped", machine=machine.key, key=key)
            return
        self.store.delete_key(key)
        del self._keys[machine.key]
        logger.info("user_data.deleted", machine=machine.key, key=key)
