"""Action envelope parsing: model response text -> typed actions.

The model is asked to answer with a JSON object of the form::

    {"actions": [{"type": "message", "text": "..."},
                 {"type": "update_file", "path": "...", "content": "..."},
                 {"type": "run_command", "command": "..."},
                 {"type": "finish", "summary": "..."}]}

optionally wrapped in a ```json fenced block. Parsing never touches the
workspace or the command runner.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class MessageAction:
    text: str
    type: str = "message"


@dataclass(frozen=True)
class UpdateFileAction:
    path: str
    content: str
    type: str = "update_file"


@dataclass(frozen=True)
class RunCommandAction:
    command: str
    type: str = "run_command"


@dataclass(frozen=True)
class FinishAction:
    summary: str
    type: str = "finish"


Action = Union[MessageAction, UpdateFileAction, RunCommandAction, FinishAction]

# Only a ```json fence holds the envelope
_FENCE_RE = re.compile(r"```json\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def _field(raw, name):
    value = raw.get(name)
    if value is None:
        return ""
    return str(value)


def _build_message(raw):
    return MessageAction(text=_field(raw, "text"))


def _build_update_file(raw):
    return UpdateFileAction(path=_field(raw, "path"), content=_field(raw, "content"))


def _build_run_command(raw):
    return RunCommandAction(command=_field(raw, "command"))


def _build_finish(raw):
    return FinishAction(summary=_field(raw, "summary"))


ACTION_BUILDERS = {
    "message": _build_message,
    "update_file": _build_update_file,
    "run_command": _build_run_command,
    "finish": _build_finish,
}


def extract_payload(text):
    """Return the body of the first ```json block in text, or the whole text."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1)
    return text


def parse_actions(response_text):
    """Parse a model response into an ordered list of actions.

    Raises:
        json.JSONDecodeError: If the payload is not valid JSON.
        ValueError: If the envelope or one of its actions is malformed.
    """
    envelope = json.loads(extract_payload(response_text))

    if not isinstance(envelope, dict) or not isinstance(envelope.get("actions"), list):
        raise ValueError("Agent response missing actions array.")

    actions = []
    for raw in envelope["actions"]:
        action_type = _field(raw, "type") if isinstance(raw, dict) else ""
        if not action_type:
            raise ValueError("Agent action missing type.")

        builder = ACTION_BUILDERS.get(action_type)
        if builder is None:
            raise ValueError(f"Unsupported action type: {action_type}")
        actions.append(builder(raw))
    return actions
