import shutil
import subprocess

import pytest
from typer.testing import CliRunner
from urllib3.exceptions import MaxRetryError

from k3sctl.cli import app
from k3sctl.commands import install as install_module
from k3sctl.commands import uninstall as uninstall_module
from k3sctl.modules.teardown import K3S_UNINSTALL_SCRIPT
from k3sctl.utils import kube
from k3sctl.utils.kube import DaemonSetStatus

cli = CliRunner()


@pytest.fixture
def no_subprocess(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError(f"unexpected command: {args}")

    monkeypatch.setattr(subprocess, "run", fail)


@pytest.fixture
def tools_present(monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda tool, path=None: f"/usr/bin/{tool}")


def test_help():
    result = cli.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "install" in result.output
    assert "uninstall" in result.output


def test_no_command_is_a_usage_error(no_subprocess):
    result = cli.invoke(app, [])
    assert result.exit_code != 0


def test_unknown_command_is_a_usage_error(no_subprocess):
    result = cli.invoke(app, ["upgrade"])
    assert result.exit_code != 0


@pytest.mark.parametrize("command", ["install", "uninstall", "status"])
def test_missing_config_exits_before_any_command(tmp_path, no_subprocess, tools_present, command):
    result = cli.invoke(app, ["--env-file", str(tmp_path / "missing.env"), command])
    assert result.exit_code == 1


def test_install_dry_run(env_file, no_subprocess):
    path = env_file(MANAGED_DNS_PROVIDER="cloudflare", CLOUDFLARE_API_KEY="tok")
    result = cli.invoke(app, ["--env-file", str(path), "install", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "provision-nodes" in result.output
    assert "vip-loadbalancer" in result.output
    assert "Dry run" in result.output


def test_install_unsupported_provider(env_file, no_subprocess):
    path = env_file(MANAGED_DNS_PROVIDER="route53")
    result = cli.invoke(app, ["--env-file", str(path), "install", "--dry-run"])
    assert result.exit_code == 1


def test_install_missing_tool(env_file, monkeypatch, no_subprocess):
    monkeypatch.setattr(shutil, "which", lambda tool, path=None: None if tool == "helm" else f"/usr/bin/{tool}")
    result = cli.invoke(app, ["--env-file", str(env_file()), "install"])
    assert result.exit_code == 1


def test_install_runs_pipeline_and_prints_summary(env_file, monkeypatch, tools_present, make_runner):
    runner = make_runner()
    monkeypatch.setattr(install_module, "CommandRunner", lambda: runner)
    monkeypatch.setattr(install_module, "list_nodes", lambda kubeconfig: [])
    monkeypatch.setattr(
        install_module, "list_daemonsets",
        lambda kubeconfig, namespace: [DaemonSetStatus("speaker", 2, 2, 2)],
    )
    path = env_file(MANAGED_DNS_PROVIDER="cloudflare", CLOUDFLARE_API_KEY="tok")
    result = cli.invoke(app, ["--env-file", str(path), "install"])
    assert result.exit_code == 0, result.output
    assert runner.commands[0][:2] == ["k3sup", "install"]
    assert "speaker" in result.output
    assert "*.ws.example.com - 10.0.0.100" in result.output


def test_install_failure_exits_non_zero(env_file, monkeypatch, tools_present, make_runner):
    runner = make_runner(failures={"k3sup join": 1})
    monkeypatch.setattr(install_module, "CommandRunner", lambda: runner)
    result = cli.invoke(app, ["--env-file", str(env_file()), "install"])
    assert result.exit_code == 1
    assert not any(cmd[0] == "helm" for cmd in runner.commands)


def test_uninstall_declined(env_file, monkeypatch, tools_present, make_runner):
    runner = make_runner()
    monkeypatch.setattr(uninstall_module, "CommandRunner", lambda: runner)
    result = cli.invoke(app, ["--env-file", str(env_file()), "uninstall"], input="n")
    assert result.exit_code == 0
    assert runner.calls == []


def test_uninstall_confirmed(env_file, monkeypatch, tools_present, make_runner):
    runner = make_runner()
    monkeypatch.setattr(uninstall_module, "CommandRunner", lambda: runner)
    result = cli.invoke(app, ["--env-file", str(env_file()), "uninstall"], input="Y")
    assert result.exit_code == 0, result.output
    assert [cmd[-2:] for cmd in runner.commands] == [
        ["ubuntu@10.0.0.1", K3S_UNINSTALL_SCRIPT],
        ["ubuntu@10.0.0.2", K3S_UNINSTALL_SCRIPT],
    ]


def test_uninstall_partial_failure(env_file, monkeypatch, tools_present, make_runner):
    runner = make_runner(failures={"ubuntu@10.0.0.1": 255})
    monkeypatch.setattr(uninstall_module, "CommandRunner", lambda: runner)
    result = cli.invoke(app, ["--env-file", str(env_file()), "uninstall"], input="y")
    assert result.exit_code == 1
    assert len(runner.commands) == 2


def test_status_prints_node_table(env_file, monkeypatch):
    from k3sctl.commands import status as status_module
    from k3sctl.utils.kube import NodeStatus

    nodes = [NodeStatus("node-1", True, "10.0.0.1", ["master"], "v1.23.6+k3s1")]
    monkeypatch.setattr(status_module, "list_nodes", lambda kubeconfig: nodes)
    result = cli.invoke(app, ["--env-file", str(env_file()), "status"])
    assert result.exit_code == 0, result.output
    assert "node-1" in result.output
    assert "Ready" in result.output


@pytest.fixture
def unreachable_cluster(tmp_path, monkeypatch):
    kubeconfig = tmp_path / "kube" / "config"
    kubeconfig.parent.mkdir(parents=True, exist_ok=True)
    kubeconfig.write_text("apiVersion: v1\n")
    monkeypatch.setattr(kube.config, "load_kube_config", lambda config_file: None)

    class RefusingApi:
        def list_node(self):
            raise MaxRetryError(None, "/api/v1/nodes", reason=ConnectionRefusedError(111, "Connection refused"))

        def list_namespaced_daemon_set(self, namespace):
            raise MaxRetryError(None, f"/apis/apps/v1/namespaces/{namespace}/daemonsets")

    monkeypatch.setattr(kube.client, "CoreV1Api", RefusingApi)
    monkeypatch.setattr(kube.client, "AppsV1Api", RefusingApi)


def test_status_unreachable_server_exits_one(env_file, unreachable_cluster):
    result = cli.invoke(app, ["--env-file", str(env_file()), "status"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_install_reports_unreachable_server_as_warning(env_file, monkeypatch, tools_present, make_runner,
                                                       unreachable_cluster):
    runner = make_runner()
    monkeypatch.setattr(install_module, "CommandRunner", lambda: runner)
    result = cli.invoke(app, ["--env-file", str(env_file()), "install"])
    assert result.exit_code == 0, result.output
    assert "Gitpod" in result.output
