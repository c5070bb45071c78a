"""Required-step completion gate evaluation."""

from dataclasses import fields

from config.rules import FINISH_REJECTED_TEMPLATE, REQUIRED_STEPS
from core.state import RequiredCommandState


def _matches(command, keyword_rules):
    return any(all(keyword in command for keyword in rule) for rule in keyword_rules)


class RequiredStepGate:
    """Tracks which required steps have succeeded and whether finish is allowed.

    A step flips to done the first time a matching command exits with 0 and
    stays done for the rest of the run. Step names are the fields of
    RequiredCommandState; only labels and keyword rules are configurable.
    """

    def __init__(self, enforce=True, steps=None):
        self.enforce = enforce
        self.steps = steps if steps is not None else REQUIRED_STEPS
        known = {f.name for f in fields(RequiredCommandState)}
        for name, _label, _rules in self.steps:
            if name not in known:
                raise ValueError(
                    f"Unknown required step {name!r}; expected one of: {', '.join(sorted(known))}"
                )
        self.state = RequiredCommandState()

    def record(self, command, exit_code):
        """Mark every step whose keywords match a successful command."""
        if exit_code != 0:
            return []
        satisfied = []
        for name, _label, keyword_rules in self.steps:
            if _matches(command, keyword_rules) and not getattr(self.state, name):
                setattr(self.state, name, True)
                satisfied.append(name)
        return satisfied

    def missing_steps(self):
        """Labels of required steps not yet satisfied, in declaration order."""
        return [
            label
            for name, label, _ in self.steps
            if not getattr(self.state, name)
        ]

    def permits_finish(self):
        if not self.enforce:
            return True
        return not self.missing_steps()

    def rejection_note(self):
        return FINISH_REJECTED_TEMPLATE.format(missing=", ".join(self.missing_steps()))
