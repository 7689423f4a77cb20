"""Least-privilege bucket policy for bootstrap data.

Each role may only read objects under its own prefix. The prefix is derived
from the role inside :class:`BucketPolicyBuilder`, so a statement cannot be
built for one role's principal against another role's prefix.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from bootstrap_s3.core.exceptions import InvalidInputError, PolicyEncodingError
from bootstrap_s3.models import BucketSpec, Role

POLICY_VERSION = "2012-10-17"
GET_OBJECT_ACTION = "s3:GetObject"


def role_arn(account_id: str, role: str) -> str:
    return f"arn:aws:iam::{account_id}:role/{role}"


def prefix_arn(bucket: str, prefix: str) -> str:
    return f"arn:aws:s3:::{bucket}/{prefix}/*"


@dataclass(frozen=True, slots=True)
class PolicyStatement:
    sid: str
    role: Role
    principal: str
    resource: str
    action: str = GET_OBJECT_ACTION

    def to_dict(self) -> dict:
        return {
            "Sid": self.sid,
            "Effect": "Allow",
            "Principal": {"AWS": self.principal},
            "Action": [self.action],
            "Resource": self.resource,
        }


@dataclass(frozen=True, slots=True)
class BucketPolicy:
    bucket: str
    statements: tuple[PolicyStatement, ...]

    def to_dict(self) -> dict:
        return {
            "Version": POLICY_VERSION,
            "Statement": [statement.to_dict() for statement in self.statements],
        }

    def to_json(self) -> str:
        try:
            return json.dumps(self.to_dict())
        except (TypeError, ValueError) as exc:
            raise PolicyEncodingError(
                message=f"building bucket policy: {exc}",
                error_code="policy_encoding_failed",
                details={"bucket": self.bucket},
            ) from exc


@dataclass(slots=True)
class BucketPolicyBuilder:
    """Collects read grants per role and builds a :class:`BucketPolicy`."""

    bucket: str
    account_id: str
    _statements: list[PolicyStatement] = field(default_factory=list, init=False, repr=False)
    _roles_by_principal: dict[str, Role] = field(default_factory=dict, init=False, repr=False)

    def allow_read(self, role: Role, identity: str, sid: str | None = None) -> BucketPolicyBuilder:
        """Grant ``identity`` read access to the ``role`` prefix.

        Granting the same identity twice for the same role is a no-op; granting
        it for a second role is rejected.
        """
        if not identity:
            raise InvalidInputError(
                message=f"{role.value} identity can't be empty",
                error_code="empty_identity",
                details={"role": role.value},
            )

        principal = role_arn(self.account_id, identity)
        existing = self._roles_by_principal.get(principal)
        if existing is role:
            return self
        if existing is not None:
            raise InvalidInputError(
                message=f"identity {identity!r} can't read both {existing.value}/ and {role.value}/",
                error_code="identity_spans_roles",
                details={"identity": identity, "roles": [existing.value, role.value]},
            )

        self._roles_by_principal[principal] = role
        self._statements.append(
            PolicyStatement(
                sid=sid or identity,
                role=role,
                principal=principal,
                resource=prefix_arn(self.bucket, role.value),
            )
        )
        return self

    def build(self) -> BucketPolicy:
        return BucketPolicy(bucket=self.bucket, statements=tuple(self._statements))


def bootstrap_bucket_policy(spec: BucketSpec, bucket: str, account_id: str) -> BucketPolicy:
    """Build the read policy for a cluster's control-plane and node identities."""
    if not spec.node_identities:
        raise InvalidInputError(
            message="node identities can't be empty",
            error_code="empty_node_identities",
        )

    builder = BucketPolicyBuilder(bucket=bucket, account_id=account_id)
    builder.allow_read(Role.CONTROL_PLANE, spec.control_plane_identity, sid=Role.CONTROL_PLANE.value)
    for identity in spec.node_identities:
        builder.allow_read(Role.NODE, identity)
    return builder.build()
