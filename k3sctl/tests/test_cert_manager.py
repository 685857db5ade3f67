import pytest

from k3sctl.errors import ChartInstallError
from k3sctl.modules.cert_manager import CertManagerInstaller
from k3sctl.modules.helm import Helm, ReleaseSpec


def test_atomic_upgrade_install(config, runner):
    CertManagerInstaller(config, Helm(runner)).install()
    assert runner.commands == [[
        "helm", "upgrade",
        "--atomic", "--cleanup-on-fail",
        "--create-namespace",
        "--install",
        "--namespace", "cert-manager",
        "--repo", "https://charts.jetstack.io",
        "--reset-values",
        "--set", "installCRDs=true",
        "--wait",
        "cert-manager", "cert-manager",
    ]]


def test_kubeconfig_is_passed(config, runner):
    CertManagerInstaller(config, Helm(runner, kubeconfig=config.kubeconfig)).install()
    assert runner.commands[0][:3] == ["helm", "--kubeconfig", str(config.kubeconfig)]


def test_failure_raises_chart_install_error(config, make_runner):
    runner = make_runner(failures={"helm": 1})
    with pytest.raises(ChartInstallError) as exc:
        CertManagerInstaller(config, Helm(runner)).install()
    assert exc.value.returncode == 1
    assert "cert-manager" in str(exc.value)


def test_release_options(runner):
    rel = ReleaseSpec(
        name="demo", chart="demo", namespace="ns", repo_url="https://example.test",
        version="1.2.3", atomic=False, create_namespace=False, reset_values=False, timeout="600s",
    )
    argv = Helm(runner).upgrade_install_args(rel)
    assert "--atomic" not in argv
    assert "--create-namespace" not in argv
    assert argv[argv.index("--version") + 1] == "1.2.3"
    assert argv[argv.index("--timeout") + 1] == "600s"
    assert argv[-2:] == ["demo", "demo"]
