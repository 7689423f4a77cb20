"""Node model for machines that run ``kubeadm`` on first boot."""

from __future__ import annotations

from collections.abc import Sequence

from bootstrap_s3.ignition.node import DropinSpec, FileSpec, NodeModel, ServiceUnitSpec

KUBEADM_IGNITION_CONFIG_PATH = "/etc/kubeadm.yml"
KUBEADM_CONFIG_PERMISSIONS = "0640"
INIT_UNIT_NAME = "kubeinit.service"
PRE_KUBEADM_DROPIN = "10-pre-kubeadm.conf"
POST_KUBEADM_DROPIN = "20-post-kubeadm.conf"

INIT_UNIT_TEMPLATE = """[Unit]
Description=Initialize the Kubernetes node with kubeadm
Wants=network-online.target
After=network-online.target
ConditionPathExists=!/etc/kubernetes/kubelet.conf

[Service]
Type=oneshot
RemainAfterExit=yes
ExecStart=/usr/bin/kubeadm init --config {config_path} {verbosity}

[Install]
WantedBy=multi-user.target
"""


def _dropin(name: str, directive: str, commands: Sequence[str]) -> DropinSpec:
    lines = ["[Service]", *(f"{directive}={command}" for command in commands)]
    return DropinSpec(name=name, content="\n".join(lines) + "\n")


def commands_dropins(pre_commands: Sequence[str] = (), post_commands: Sequence[str] = ()) -> list[DropinSpec]:
    """Turn pre/post kubeadm commands into ``ExecStartPre``/``ExecStartPost`` drop-ins."""
    dropins = []
    if pre_commands:
        dropins.append(_dropin(PRE_KUBEADM_DROPIN, "ExecStartPre", pre_commands))
    if post_commands:
        dropins.append(_dropin(POST_KUBEADM_DROPIN, "ExecStartPost", post_commands))
    return dropins


def build_kubeadm_node(
    init_configuration: str,
    cluster_configuration: str,
    kubernetes_version: str,
    verbosity: int | None = None,
    pre_commands: Sequence[str] = (),
    post_commands: Sequence[str] = (),
) -> NodeModel:
    """Build the node model that writes the kubeadm config and runs ``kubeadm init``.

    Args:
        init_configuration: kubeadm InitConfiguration as YAML
        cluster_configuration: kubeadm ClusterConfiguration as YAML
        kubernetes_version: Version used to pick the base ignition template
        verbosity: Optional kubeadm ``--v`` level
        pre_commands: Commands run before ``kubeadm init``
        post_commands: Commands run after ``kubeadm init``
    """
    verbosity_flag = f"--v {verbosity}" if verbosity is not None else ""
    unit_content = INIT_UNIT_TEMPLATE.format(
        config_path=KUBEADM_IGNITION_CONFIG_PATH,
        verbosity=verbosity_flag,
    ).replace(" \n", "\n")

    return NodeModel(
        files=(
            FileSpec(
                path=KUBEADM_IGNITION_CONFIG_PATH,
                permissions=KUBEADM_CONFIG_PERMISSIONS,
                content="\n---\n".join([init_configuration, cluster_configuration]),
            ),
        ),
        services=(
            ServiceUnitSpec(
                name=INIT_UNIT_NAME,
                content=unit_content,
                enabled=True,
                dropins=tuple(commands_dropins(pre_commands, post_commands)),
            ),
        ),
        version=kubernetes_version,
    )
