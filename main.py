#!/usr/bin/env python3
"""agentloop - iterative coding agent.

Usage:
    python main.py run --task "add a dark mode toggle"                # fresh temp workspace
    python main.py run --task "..." --template ./my-app              # seed from a template project
    python main.py run --task "..." --workspace ./my-app --max-iters 4
    python main.py run --task "..." --no-enforce --verbose           # skip required-step gate
    python main.py commands                                          # show the command allowlist
"""

import argparse
import logging
import signal
import sys
import threading

from config.defaults import DEFAULTS
from core.orchestrator import create_runner
from core.workspace import FileSystemWorkspace, prepare_workspace


def _format_iterations(result):
    """Format per-iteration actions for CLI display."""
    lines = []
    for record in result.iterations:
        lines.append(f"\n--- Iteration {record.iteration} ---")
        for action in record.executed_actions:
            detail = getattr(action, "path", None) or getattr(action, "command", None) or ""
            lines.append(f"  [{action.type}] {detail}".rstrip())
        for outcome in record.command_results:
            lines.append(f"  exit {outcome.exit_code}: {outcome.command}")
    return "\n".join(lines)


def cmd_run(args):
    """Run the agent loop on a task and print the result."""
    if args.max_iters < 1 or args.max_iters > DEFAULTS["hard_max_iterations"]:
        print(
            f"--max-iters must be between 1 and {DEFAULTS['hard_max_iterations']}",
            file=sys.stderr,
        )
        return 2

    if args.workspace:
        workspace = FileSystemWorkspace(args.workspace)
    else:
        workspace = prepare_workspace(template_dir=args.template)

    print(f"Starting coding agent for task: {args.task}")
    print(f"Workspace root: {workspace.root_dir}")

    # Ctrl-C stops the run at the next iteration, model call or command
    cancel_event = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())
    try:
        runner = create_runner(workspace)
        result = runner.run(
            args.task,
            max_iterations=args.max_iters,
            enforce_required_commands=not args.no_enforce,
            cancel_event=cancel_event,
        )
    except Exception as e:
        print(f"\nTask failed: {e}", file=sys.stderr)
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    print(f"\nSummary:   {result.summary}")
    print(f"Thread ID: {result.thread_id or '(none)'}")
    print(f"Iterations: {len(result.iterations)}")
    print(f"Files modified:    {result.files_modified}")
    print(f"Commands executed: {result.commands_executed}")
    print(f"Workspace: {workspace.root_dir}")

    if args.verbose:
        print(_format_iterations(result))
    return 0


def cmd_commands(args):
    print("Allowed commands:")
    for command in DEFAULTS["allowed_commands"]:
        print(f"  {command}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="agentloop",
        description="Iterative coding agent with command allowlist and required-step gate",
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run the agent loop on a task")
    run_parser.add_argument("--task", required=True, help="Natural language task")
    run_parser.add_argument("--max-iters", type=int, default=DEFAULTS["max_iterations"],
                            help=f"Max iterations (default: {DEFAULTS['max_iterations']})")
    run_parser.add_argument("--no-enforce", action="store_true",
                            help="Allow finish without install/lint/build/health check")
    workspace_group = run_parser.add_mutually_exclusive_group()
    workspace_group.add_argument("--template", help="Template project copied into a temp workspace")
    workspace_group.add_argument("--workspace", help="Existing directory to work in, in place")
    run_parser.add_argument("--verbose", action="store_true",
                            help="Log progress and show each iteration's actions")

    subparsers.add_parser("commands", help="List allowed commands")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if getattr(args, "verbose", False) else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "run":
        return cmd_run(args)
    if args.command == "commands":
        return cmd_commands(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
