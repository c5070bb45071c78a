"""Tests for core.sandbox."""

import pytest

from core.sandbox import ShellCommandRunner, authorize_command


ALLOWED = ["npm install", "npm run lint"]


def test_authorize_exact_match():
    assert authorize_command("npm install", ALLOWED) == "npm install"


@pytest.mark.parametrize("command", [
    "npm install left-pad",     # prefix of an allowed entry
    "npm",                      # prefix the other way
    "npm install && rm -rf /",
    " npm install",
    "NPM INSTALL",
])
def test_authorize_rejects_anything_but_exact(command):
    with pytest.raises(ValueError, match="is not allowed"):
        authorize_command(command, ALLOWED)


def test_rejection_lists_allowed_commands():
    with pytest.raises(ValueError, match="Allowed commands: npm install, npm run lint"):
        authorize_command("curl evil.sh", ALLOWED)


def test_allowed_commands_returns_copy(tmp_path):
    runner = ShellCommandRunner(tmp_path, allowed_commands=["echo hi"])
    listed = runner.allowed_commands()
    listed.append("rm -rf /")
    assert runner.allowed_commands() == ["echo hi"]


def test_default_allowlist(tmp_path):
    from config.defaults import DEFAULTS
    runner = ShellCommandRunner(tmp_path)
    assert runner.allowed_commands() == DEFAULTS["allowed_commands"]


def test_run_allowed_command(tmp_path):
    runner = ShellCommandRunner(tmp_path, allowed_commands=["echo hello"])
    result = runner.run("echo hello")
    assert result.command == "echo hello"
    assert result.exit_code == 0
    assert result.stdout.strip() == "hello"


def test_run_in_working_directory(tmp_path):
    (tmp_path / "marker.txt").write_text("x")
    runner = ShellCommandRunner(tmp_path, allowed_commands=["ls"])
    assert "marker.txt" in runner.run("ls").stdout


def test_non_zero_exit_is_a_result(tmp_path):
    runner = ShellCommandRunner(tmp_path, allowed_commands=["echo oops >&2; exit 3"])
    result = runner.run("echo oops >&2; exit 3")
    assert result.exit_code == 3
    assert "oops" in result.stderr


def test_run_rejects_unlisted_command(tmp_path):
    runner = ShellCommandRunner(tmp_path, allowed_commands=["echo hello"])
    with pytest.raises(ValueError, match="is not allowed"):
        runner.run("echo goodbye")


def test_timeout(tmp_path):
    runner = ShellCommandRunner(tmp_path, allowed_commands=["sleep 5"], timeout=1)
    result = runner.run("sleep 5")
    assert result.exit_code == -1
    assert "timed out" in result.stderr.lower()


def test_output_truncated(tmp_path):
    command = "printf 'a%.0s' $(seq 1 50)"
    runner = ShellCommandRunner(tmp_path, allowed_commands=[command], max_output_chars=10)
    result = runner.run(command)
    assert result.stdout.startswith("a" * 10)
    assert "truncated 40 chars" in result.stdout


def test_invalid_cwd():
    with pytest.raises(ValueError, match="does not exist"):
        ShellCommandRunner("/nonexistent/path")
