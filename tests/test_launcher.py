import importlib.util
from pathlib import Path

import pytest

from cc_switch import launcher
from cc_switch.errors import LaunchError


def load_cli():
    spec = importlib.util.spec_from_file_location(
        "cc_switch_cli", Path(__file__).resolve().parents[1] / "cc-switch.py"
    )
    cli = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(cli)
    return cli


def make_run(monkeypatch, expected_cmd, returncode, seen_env):
    def fake_run(cmd, **kwargs):
        assert cmd == expected_cmd
        seen_env.update(kwargs["env"])

        class R:
            pass

        r = R()
        r.returncode = returncode
        return r

    monkeypatch.setattr(launcher.subprocess, "run", fake_run)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(launcher.time, "sleep", lambda _: None)


def test_script_reexports_launcher():
    cli = load_cli()
    assert cli.launch_claude is launcher.launch_claude
    assert cli.find_claude_cmd is launcher.find_claude_cmd


def test_launch_with_profile_bag_cleans_environment(monkeypatch, capsys):
    monkeypatch.setenv("ANTHROPIC_MODEL", "stale")
    monkeypatch.setenv("KEEP_ME", "1")
    seen = {}
    make_run(monkeypatch, ["claude", "--dangerously-skip-permissions"], 3, seen)
    code = launcher.launch_claude(
        {"ANTHROPIC_AUTH_TOKEN": "t"}, use_exec=False, find=lambda: ["claude"]
    )
    assert code == 3
    assert seen["ANTHROPIC_AUTH_TOKEN"] == "t"
    assert seen["KEEP_ME"] == "1"
    assert "ANTHROPIC_MODEL" not in seen
    out = capsys.readouterr().out
    assert "Waiting 0.5 seconds before launching Claude..." in out
    assert "Launching Claude CLI..." in out


def test_launch_without_bag_inherits_environment(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_MODEL", "from-shell")
    seen = {}
    make_run(monkeypatch, ["claude", "--dangerously-skip-permissions"], 0, seen)
    assert launcher.launch_claude(None, use_exec=False, find=lambda: ["claude"]) == 0
    assert seen["ANTHROPIC_MODEL"] == "from-shell"


def test_launch_uses_exec_on_posix(monkeypatch):
    captured = {}

    class Replaced(Exception):
        pass

    def fake_execvpe(file, argv, env):
        captured.update(file=file, argv=argv, env=env)
        raise Replaced

    monkeypatch.setattr(launcher.os, "execvpe", fake_execvpe)
    with pytest.raises(Replaced):
        launcher.launch_claude({}, use_exec=True, find=lambda: ["claude"])
    assert captured["file"] == "claude"
    assert captured["argv"] == ["claude", "--dangerously-skip-permissions"]


def test_exec_failure_is_launch_error(monkeypatch):
    def fake_execvpe(file, argv, env):
        raise FileNotFoundError(2, "No such file")

    monkeypatch.setattr(launcher.os, "execvpe", fake_execvpe)
    with pytest.raises(LaunchError, match="claude"):
        launcher.launch_claude({}, use_exec=True, find=lambda: ["claude"])


def test_missing_cli_raises(monkeypatch):
    with pytest.raises(LaunchError) as exc:
        launcher.launch_claude({}, find=lambda: None)
    assert str(exc.value) == launcher.NOT_FOUND_MESSAGE


def test_interrupt_while_waiting_returns_130(monkeypatch):
    def interrupted(_):
        raise KeyboardInterrupt

    monkeypatch.setattr(launcher.time, "sleep", interrupted)
    assert launcher.launch_claude({}, use_exec=False, find=lambda: ["claude"]) == 130


def test_find_claude_cmd(monkeypatch):
    monkeypatch.setattr(launcher.shutil, "which", lambda name: "/usr/bin/claude")
    assert launcher.find_claude_cmd() == ["claude"]

    def only_cmd(name):
        return "C:\\claude.cmd" if name == "claude.cmd" else None

    monkeypatch.setattr(launcher.shutil, "which", only_cmd)
    assert launcher.find_claude_cmd() == ["claude.cmd"]

    monkeypatch.setattr(launcher.shutil, "which", lambda name: None)
    assert launcher.find_claude_cmd() is None
