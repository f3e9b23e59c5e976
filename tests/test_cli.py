from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from lowpanctl import cli
from lowpanctl.core.errors import ConnectionUnavailable
from lowpanctl.core.model import KEY_NETWORK_PANID, Identity, Int32Value


class FakeInterface:
    def __init__(self, name: str) -> None:
        self.name = name
        self.calls: list[tuple] = []

    def leave(self) -> None:
        self.calls.append(("leave",))

    def form(self, provision) -> None:
        self.calls.append(("form", provision))

    def get_identity(self) -> Identity:
        return Identity(name="home")

    def get_property(self, key: str):
        if key == KEY_NETWORK_PANID:
            return Int32Value(0xBEEF)
        return None


class FakeManager:
    instances: list[FakeManager] = []

    def __init__(self, path: str, timeout_s: float) -> None:
        self.path = path
        self.timeout_s = timeout_s
        self.interfaces = {"wpan0": FakeInterface("wpan0"), "wpan1": FakeInterface("wpan1")}
        FakeManager.instances.append(self)

    @classmethod
    def connect(cls, path: str, *, timeout_s: float = 5.0) -> FakeManager:
        return cls(path, timeout_s)

    def get_interface_list(self):
        return list(self.interfaces)

    def get_interface(self, name: str):
        return self.interfaces.get(name)

    def close(self) -> None:
        pass


class UnreachableManager:
    @classmethod
    def connect(cls, path: str, *, timeout_s: float = 5.0):
        raise ConnectionUnavailable(f"Could not connect to {path}")


runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.delenv("LOWPANCTL_SOCKET", raising=False)
    FakeManager.instances = []


def test_list_command(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "SocketLowpanManager", FakeManager)
    result = runner.invoke(cli.app, ["list"])
    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["wpan0", "wpan1"]
    assert FakeManager.instances[0].path == "/run/lowpand/lowpand.sock"


def test_interface_option_and_subcommand_flags_pass_through(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "SocketLowpanManager", FakeManager)
    result = runner.invoke(cli.app, ["-I", "wpan1", "form", "--name", "mesh", "-p", "0x1234"])
    assert result.exit_code == 0
    assert "Forming Name:mesh, PANID:0x1234" in result.stdout
    assert "Formed." in result.stdout
    manager = FakeManager.instances[0]
    assert manager.interfaces["wpan1"].calls[0][0] == "form"
    assert manager.interfaces["wpan0"].calls == []


def test_get_formats_panid(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "SocketLowpanManager", FakeManager)
    result = runner.invoke(cli.app, ["get", KEY_NETWORK_PANID])
    assert result.exit_code == 0
    assert result.stdout.strip() == "0xBEEF"


def test_command_error_is_clean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "SocketLowpanManager", FakeManager)
    result = runner.invoke(cli.app, ["join", "mesh"])
    assert result.exit_code == 1
    assert "error: No credential (like a master key) was specified!" in result.stdout
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_unknown_command_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "SocketLowpanManager", FakeManager)
    result = runner.invoke(cli.app, ["bogus"])
    assert result.exit_code == 2
    assert "Error: unknown command 'bogus'" in result.stderr


def test_unreachable_service(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "SocketLowpanManager", UnreachableManager)
    result = runner.invoke(cli.app, ["status"])
    assert result.exit_code == 3
    assert "Error type 2" in result.stderr
    assert "error: Can't connect to LoWPAN service; is the service running?" in result.stdout


def test_config_file_sets_socket_and_interface(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli, "SocketLowpanManager", FakeManager)
    config = tmp_path / "lowpanctl.yaml"
    config.write_text("socket_path: /tmp/test.sock\ninterface: wpan1\nrequest_timeout_s: 2\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["--config", str(config), "leave"])
    assert result.exit_code == 0
    manager = FakeManager.instances[0]
    assert manager.path == "/tmp/test.sock"
    assert manager.timeout_s == 2.0
    assert manager.interfaces["wpan1"].calls == [("leave",)]


def test_invalid_config_is_reported(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli, "SocketLowpanManager", FakeManager)
    config = tmp_path / "lowpanctl.yaml"
    config.write_text("request_timeout_s: -1\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["--config", str(config), "list"])
    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.stderr
    assert FakeManager.instances == []
