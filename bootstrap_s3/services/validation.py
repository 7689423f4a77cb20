"""Field checks for bucket settings.

Validation rules follow
https://docs.aws.amazon.com/AmazonS3/latest/userguide/bucketnamingrules.html.
"""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass

from bootstrap_s3.models import BucketSpec

_NOT_ALLOWED_CHARACTERS = re.compile(r"[^a-z0-9.-]")
_STARTS_WITH_LETTER_OR_DIGIT = re.compile(r"^[a-z0-9]")
_ENDS_WITH_LETTER_OR_DIGIT = re.compile(r"[a-z0-9]$")


@dataclass
class FieldError:
    """A single bucket settings finding."""

    field: str
    message: str
    is_critical: bool = True

    def __str__(self) -> str:
        severity = "CRITICAL" if self.is_critical else "WARNING"
        return f"[{severity}] {self.field}: {self.message}"


def _is_ip_address(name: str) -> bool:
    try:
        ipaddress.ip_address(name)
    except ValueError:
        return False
    return True


def validate_bucket_name(name: str, field: str = "spec.s3Bucket.name") -> list[FieldError]:
    errors: list[FieldError] = []

    if len(name) < 3 or len(name) > 63:
        errors.append(FieldError(field, "must be between 3 and 63 characters long"))

    if _NOT_ALLOWED_CHARACTERS.search(name):
        errors.append(FieldError(field, "must consist only of lowercase letters, numbers, dots (.), and hyphens (-)"))

    if not _STARTS_WITH_LETTER_OR_DIGIT.search(name) or not _ENDS_WITH_LETTER_OR_DIGIT.search(name):
        errors.append(FieldError(field, "must begin and end with a letter or number"))

    if _is_ip_address(name):
        errors.append(FieldError(field, "must not be formatted as an IP address (for example, 192.168.5.4)"))

    return errors


def validate_bucket_spec(spec: BucketSpec) -> list[FieldError]:
    """Return every problem with ``spec``; settings that don't create a bucket are always valid."""
    errors: list[FieldError] = []

    if not spec.create:
        return errors

    if not spec.control_plane_identity:
        errors.append(FieldError("spec.s3Bucket.controlPlaneIAMInstanceProfile", "can't be empty"))

    if not spec.node_identities:
        errors.append(FieldError("spec.s3Bucket.nodesIAMInstanceProfiles", "can't be empty"))

    for index, identity in enumerate(spec.node_identities):
        if not identity:
            errors.append(FieldError(f"spec.s3Bucket.nodesIAMInstanceProfiles[{index}]", "can't be empty"))
        elif identity == spec.control_plane_identity:
            errors.append(
                FieldError(
                    f"spec.s3Bucket.nodesIAMInstanceProfiles[{index}]",
                    "must differ from controlPlaneIAMInstanceProfile",
                )
            )

    if spec.name:
        errors.extend(validate_bucket_name(spec.name))

    return errors
