"""Kubernetes version to base ignition template mapping."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from bootstrap_s3.core.exceptions import ConfigurationError

DEFAULT_KUBERNETES_VERSION = "v1.17.4"

DEFAULT_TEMPLATES: Mapping[str, str] = MappingProxyType(
    {
        "v1.15.11": "ignition-config/k8s-v1.15.11.ign",
        "v1.16.8": "ignition-config/k8s-v1.16.8.ign",
        "v1.17.4": "ignition-config/k8s-v1.17.4.ign",
    }
)


@dataclass(frozen=True, slots=True)
class TemplateTable:
    """Immutable version -> template object path table with a fallback version."""

    versions: Mapping[str, str] = field(default_factory=lambda: DEFAULT_TEMPLATES)
    default_version: str = DEFAULT_KUBERNETES_VERSION

    def __post_init__(self) -> None:
        object.__setattr__(self, "versions", MappingProxyType(dict(self.versions)))
        if self.default_version not in self.versions:
            raise ConfigurationError(
                message=f"default template version {self.default_version!r} is not in the template table",
                error_code="invalid_template_table",
                details={"default_version": self.default_version, "versions": sorted(self.versions)},
            )

    def resolve(self, version: str) -> tuple[str, bool]:
        """Return ``(template_path, matched)``; unknown versions map to the default."""
        path = self.versions.get(version)
        if path is not None:
            return path, True
        return self.versions[self.default_version], False
