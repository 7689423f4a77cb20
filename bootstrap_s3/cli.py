"""Operator tooling for bootstrap buckets and ignition user data.

Examples:
    bootstrap-s3 bucket-name --namespace demo --cluster cluster1
    bootstrap-s3 policy --bucket demo-cluster1 --account 123456789012 \
        --control-plane-role cp-role --node-role n1-role --node-role n2-role
    bootstrap-s3 render node.json
    bootstrap-s3 validate-bucket --name my.bucket
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from bootstrap_s3.core.config import get_settings
from bootstrap_s3.core.exceptions import BootstrapException, DocumentValidationError
from bootstrap_s3.core.logging import configure_logging
from bootstrap_s3.ignition.backends import StaticTemplateBackend
from bootstrap_s3.ignition.factory import Factory
from bootstrap_s3.ignition.node import NodeModel
from bootstrap_s3.models import BucketSpec
from bootstrap_s3.services.naming import derive_bucket_name
from bootstrap_s3.services.policy import bootstrap_bucket_policy
from bootstrap_s3.services.validation import validate_bucket_name


def cmd_bucket_name(args: argparse.Namespace) -> int:
    print(derive_bucket_name(args.name, args.namespace, args.cluster))
    return 0


def cmd_policy(args: argparse.Namespace) -> int:
    spec = BucketSpec(
        create=True,
        control_plane_identity=args.control_plane_role,
        node_identities=args.node_role,
    )
    policy = bootstrap_bucket_policy(spec, args.bucket, args.account)
    print(json.dumps(policy.to_dict(), indent=2))
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    settings = get_settings()
    try:
        raw = Path(args.node).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Error: cannot read node model {args.node}: {exc}", file=sys.stderr)
        return 1
    try:
        node = NodeModel.model_validate_json(raw)
    except ValidationError as exc:
        print(f"Error: invalid node model in {args.node}:\n{exc}", file=sys.stderr)
        return 1

    backend = StaticTemplateBackend(settings.user_data_dir, settings.user_data_bucket, settings.template_table())
    try:
        user_data = Factory(backend).generate_user_data(node)
    except DocumentValidationError as exc:
        print(f"Error: ignition config failed validation:\n{exc.report}", file=sys.stderr)
        return 1

    if args.pretty:
        print(json.dumps(json.loads(user_data), indent=2))
    else:
        print(user_data.decode("utf-8"))
    return 0


def cmd_validate_bucket(args: argparse.Namespace) -> int:
    errors = validate_bucket_name(args.name)
    for error in errors:
        print(error)
    if errors:
        return 1
    print(f"✓ {args.name} is a valid bucket name")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bootstrap-s3",
        description="Bootstrap bucket and ignition user-data tooling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    name_parser = subparsers.add_parser("bucket-name", help="Print the bucket name derived for a cluster")
    name_parser.add_argument("--namespace", required=True, help="Cluster namespace")
    name_parser.add_argument("--cluster", required=True, help="Cluster name")
    name_parser.add_argument("--name", default=None, help="Explicit bucket name override")
    name_parser.set_defaults(func=cmd_bucket_name)

    policy_parser = subparsers.add_parser("policy", help="Print the bucket read policy")
    policy_parser.add_argument("--bucket", required=True, help="Bucket name")
    policy_parser.add_argument("--account", required=True, help="AWS account id")
    policy_parser.add_argument("--control-plane-role", required=True, help="Control-plane IAM role name")
    policy_parser.add_argument(
        "--node-role",
        action="append",
        required=True,
        help="Node IAM role name (repeatable)",
    )
    policy_parser.set_defaults(func=cmd_policy)

    render_parser = subparsers.add_parser("render", help="Render ignition user data for a node model")
    render_parser.add_argument("node", help="Path to a node model JSON file")
    render_parser.add_argument("--pretty", action="store_true", help="Indent the output")
    render_parser.set_defaults(func=cmd_render)

    validate_parser = subparsers.add_parser("validate-bucket", help="Check a bucket name against S3 naming rules")
    validate_parser.add_argument("--name", required=True, help="Bucket name")
    validate_parser.set_defaults(func=cmd_validate_bucket)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        json_output=settings.log_json_output,
    )

    try:
        return args.func(args)
    except BootstrapException as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
