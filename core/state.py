"""Run state models shared by the agent loop and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field

from config.defaults import DEFAULTS
from core.actions import Action, UpdateFileAction


@dataclass(frozen=True)
class CommandResult:
    command: str
    exit_code: int
    stdout: str
    stderr: str


@dataclass(frozen=True)
class IterationRecord:
    iteration: int                      # 1-based
    prompt: str
    response_text: str
    executed_actions: tuple[Action, ...]
    command_results: tuple[CommandResult, ...]


@dataclass
class RequiredCommandState:
    install: bool = False
    lint: bool = False
    build: bool = False
    health_check: bool = False


@dataclass(frozen=True)
class RunOptions:
    task: str
    max_iterations: int = DEFAULTS["max_iterations"]
    enforce_required_commands: bool = True

    def __post_init__(self):
        if not self.task or not self.task.strip():
            raise ValueError("Task description cannot be empty")
        if not isinstance(self.max_iterations, int) or self.max_iterations < 1:
            raise ValueError(
                f"max_iterations must be a positive integer, got {self.max_iterations!r}"
            )


@dataclass
class RunResult:
    summary: str
    thread_id: str | None = None
    iterations: list[IterationRecord] = field(default_factory=list)

    @property
    def files_modified(self) -> int:
        return sum(
            1
            for record in self.iterations
            for action in record.executed_actions
            if isinstance(action, UpdateFileAction)
        )

    @property
    def commands_executed(self) -> int:
        return sum(len(record.command_results) for record in self.iterations)
