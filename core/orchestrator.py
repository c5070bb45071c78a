"""Iterative coding-agent loop: prompt -> actions -> validate -> apply -> repeat.

Each iteration sends the task, the workspace file listing, the allowed
commands and the transcript so far to the thread service, parses the JSON
action envelope it answers with, and applies the actions in order. The run
ends when a finish action is accepted or the iteration budget runs out.
Parse failures, unsafe paths and unauthorized commands abort the run.
"""

import logging
import os

from core.actions import (
    FinishAction, MessageAction, RunCommandAction, UpdateFileAction, parse_actions,
)
from core.paths import assert_safe_path
from core.quality import RequiredStepGate
from core.sandbox import ShellCommandRunner, authorize_command
from core.state import IterationRecord, RunOptions, RunResult
from utils.llm import ThreadService

logger = logging.getLogger(__name__)

_PROMPT_FILE = os.path.join(os.path.dirname(__file__), "prompts", "coding_agent.txt")

MAX_LISTED_FILES = 40

BUDGET_EXHAUSTED_SUMMARY = (
    "Reached maximum iterations without a finish action. "
    "Review the iteration logs for more details."
)


def _load_prompt():
    with open(_PROMPT_FILE, encoding="utf-8") as f:
        return f.read().strip()


class RunCancelled(Exception):
    """Raised when a run's cancel event is set between suspension points."""


class CodingAgentRunner:
    """Drives one task at a time against a workspace and a command runner.

    Collaborators:
        thread_service: run_prompt(prompt, thread_id=None) -> result with
            .text and .thread_id
        workspace: root_dir, write_file(path, content), list_project_files()
        command_runner: allowed_commands(), run(command) -> CommandResult
    """

    def __init__(self, thread_service, workspace, command_runner, required_steps=None):
        self.thread_service = thread_service
        self.workspace = workspace
        self.command_runner = command_runner
        self.required_steps = required_steps
        self.system_prompt = _load_prompt()

    def run(self, task, max_iterations=None, enforce_required_commands=True, cancel_event=None):
        kwargs = {"task": task, "enforce_required_commands": enforce_required_commands}
        if max_iterations is not None:
            kwargs["max_iterations"] = max_iterations
        return self.run_options(RunOptions(**kwargs), cancel_event=cancel_event)

    def run_options(self, options: RunOptions, cancel_event=None) -> RunResult:
        gate = RequiredStepGate(
            enforce=options.enforce_required_commands, steps=self.required_steps,
        )
        iterations = []
        thread_id = None
        transcript = ""

        for i in range(1, options.max_iterations + 1):
            self._check_cancelled(cancel_event)
            logger.info("Iteration %d/%d", i, options.max_iterations)

            allowed = self.command_runner.allowed_commands()
            prompt = self.build_prompt(options.task, transcript, allowed)

            self._check_cancelled(cancel_event)
            reply = self.thread_service.run_prompt(prompt, thread_id=thread_id)
            if reply.thread_id:
                thread_id = reply.thread_id

            actions = parse_actions(reply.text)
            executed = []
            command_results = []
            summary = None

            for action in actions:
                if isinstance(action, MessageAction):
                    transcript += f"\nAgent message: {action.text}"

                elif isinstance(action, UpdateFileAction):
                    path = assert_safe_path(action.path)
                    self.workspace.write_file(path, action.content)
                    if path != action.path:
                        action = UpdateFileAction(path=path, content=action.content)
                    transcript += f"\nUpdated file {path} (length {len(action.content)})."
                    logger.info("Updated %s", path)

                elif isinstance(action, RunCommandAction):
                    authorize_command(action.command, allowed)
                    self._check_cancelled(cancel_event)
                    outcome = self.command_runner.run(action.command)
                    command_results.append(outcome)
                    transcript += f"\nCommand {action.command} exited {outcome.exit_code}."
                    if outcome.stdout:
                        transcript += f"\nSTDOUT:\n{outcome.stdout}"
                    if outcome.stderr:
                        transcript += f"\nSTDERR:\n{outcome.stderr}"
                    logger.info("Command %r exited %d", action.command, outcome.exit_code)
                    gate.record(action.command, outcome.exit_code)

                elif isinstance(action, FinishAction):
                    if gate.permits_finish():
                        summary = action.summary
                    else:
                        transcript += f"\n{gate.rejection_note()}"
                        logger.info("Finish rejected: %s", ", ".join(gate.missing_steps()))

                else:
                    raise RuntimeError(f"Unsupported action {action!r}")

                executed.append(action)
                if summary is not None:
                    break

            iterations.append(IterationRecord(
                iteration=i,
                prompt=prompt,
                response_text=reply.text,
                executed_actions=tuple(executed),
                command_results=tuple(command_results),
            ))

            if summary is not None:
                logger.info("Finished after %d iteration(s)", i)
                return RunResult(summary=summary, thread_id=thread_id, iterations=iterations)

        logger.warning("Iteration budget of %d exhausted without finish", options.max_iterations)
        return RunResult(summary=BUDGET_EXHAUSTED_SUMMARY, thread_id=thread_id, iterations=iterations)

    def build_prompt(self, task, transcript, allowed):
        files = self.workspace.list_project_files()
        listing = "\n".join(files[:MAX_LISTED_FILES])
        if len(files) > MAX_LISTED_FILES:
            listing += "\n... (truncated)"

        return (
            f"{self.system_prompt}\n\n"
            f"Workspace root: {self.workspace.root_dir}\n"
            f"Tracked files (subset):\n{listing}\n\n"
            f"Allowed commands: {', '.join(allowed) or '(none)'}\n\n"
            f"Your task: {task}\n\n"
            f"Previous context:{transcript or ' (none)'}\n\n"
            "Respond with JSON as specified."
        )

    @staticmethod
    def _check_cancelled(cancel_event):
        if cancel_event is not None and cancel_event.is_set():
            raise RunCancelled("Run cancelled")


def create_runner(workspace, thread_service=None, allowed_commands=None):
    """Wire a runner to a workspace with the default Claude thread service and shell."""
    return CodingAgentRunner(
        thread_service=thread_service or ThreadService(),
        workspace=workspace,
        command_runner=ShellCommandRunner(workspace.root_dir, allowed_commands=allowed_commands),
    )
