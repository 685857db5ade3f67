import pytest
import yaml

from k3sctl.modules.manifests import (
    KubeVipParams,
    MetalLBParams,
    kube_vip_daemonset,
    manifest_names,
    metallb_config,
    to_yaml,
)


def test_to_yaml_multi_document():
    text = to_yaml({"kind": "A", "metadata": {"name": "a"}}, {"kind": "B", "metadata": {"name": "b"}})
    assert manifest_names(text) == ["A/a", "B/b"]


def test_kube_vip_targets_control_plane():
    ds = kube_vip_daemonset(KubeVipParams(address="10.0.0.100"))
    terms = ds["spec"]["template"]["spec"]["affinity"]["nodeAffinity"][
        "requiredDuringSchedulingIgnoredDuringExecution"]["nodeSelectorTerms"]
    keys = [t["matchExpressions"][0]["key"] for t in terms]
    assert keys == ["node-role.kubernetes.io/master", "node-role.kubernetes.io/control-plane"]
    container = ds["spec"]["template"]["spec"]["containers"][0]
    assert container["image"] == "ghcr.io/kube-vip/kube-vip:v0.4.4"
    assert all(isinstance(item["value"], str) for item in container["env"])


def test_metallb_requires_addresses():
    with pytest.raises(ValueError):
        metallb_config(MetalLBParams(addresses=()))


def test_rendered_yaml_round_trips():
    doc = metallb_config(MetalLBParams(addresses=["10.0.0.100/32"]))
    assert yaml.safe_load(to_yaml(doc)) == doc
