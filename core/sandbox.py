"""Shell command runner with an exact-match command allowlist and timeout."""

import logging
import os
import subprocess

from config.defaults import DEFAULTS
from core.state import CommandResult

logger = logging.getLogger(__name__)


def authorize_command(command, allowed):
    """Return command if it is exactly one of the allowed strings.

    No prefix or pattern matching: the command is executed with shell
    semantics, so only literal allowlist entries may run.

    Raises:
        ValueError: If command is not in the allowlist.
    """
    if command not in allowed:
        raise ValueError(
            f"Command {command} is not allowed. Allowed commands: {', '.join(allowed)}"
        )
    return command


def _truncate(text, limit):
    if limit is None or len(text) <= limit:
        return text
    return text[:limit] + f"\n... (truncated {len(text) - limit} chars)"


class ShellCommandRunner:
    """Runs allowlisted shell commands inside a working directory."""

    def __init__(self, cwd, allowed_commands=None, timeout=None, max_output_chars=None):
        cwd = os.path.realpath(cwd)
        if not os.path.isdir(cwd):
            raise ValueError(f"Working directory does not exist: {cwd}")

        self.cwd = cwd
        if allowed_commands is None:
            allowed_commands = DEFAULTS["allowed_commands"]
        self._allowed = list(allowed_commands)
        self.timeout = timeout if timeout is not None else DEFAULTS["command_timeout"]
        self.max_output_chars = (
            max_output_chars if max_output_chars is not None else DEFAULTS["max_output_chars"]
        )

    def allowed_commands(self):
        """Return a copy of the allowlist so callers cannot mutate it."""
        return list(self._allowed)

    def run(self, command):
        """Run an allowlisted command and return its CommandResult.

        Non-zero exits, timeouts and a missing shell are reported as
        results (exit code -1 for the latter two), not raised.
        """
        authorize_command(command, self._allowed)
        logger.info("Running command in %s: %s", self.cwd, command)

        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", self.timeout, command)
            return CommandResult(
                command=command,
                exit_code=-1,
                stdout="",
                stderr=f"Command timed out after {self.timeout}s",
            )
        except FileNotFoundError as e:
            return CommandResult(command=command, exit_code=-1, stdout="", stderr=str(e))

        return CommandResult(
            command=command,
            exit_code=result.returncode,
            stdout=_truncate(result.stdout, self.max_output_chars),
            stderr=_truncate(result.stderr, self.max_output_chars),
        )
