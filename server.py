#!/usr/bin/env python3
"""HTTP front end for the coding agent loop."""

import logging
import os
from datetime import datetime, timezone

from flask import Flask, jsonify, request

from config.defaults import DEFAULTS
from core.orchestrator import create_runner
from core.workspace import prepare_workspace

logger = logging.getLogger(__name__)

app = Flask(__name__)

MAX_PROMPT_CHARS = 4000
TEMPLATE_DIR = os.environ.get("AGENTLOOP_TEMPLATE_DIR") or None


def _error(message, status):
    return jsonify({"success": False, "error": message}), status


def _parse_generate_request(data):
    """Validate a /api/generate body. Returns (fields, error_message)."""
    if not isinstance(data, dict):
        return None, "Request body must be a JSON object"

    prompt = data.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        return None, "Prompt is required"
    if len(prompt) > MAX_PROMPT_CHARS:
        return None, f"Prompt must be less than {MAX_PROMPT_CHARS} characters"

    max_iters = data.get("maxIterations", DEFAULTS["max_iterations"])
    hard_max = DEFAULTS["hard_max_iterations"]
    if isinstance(max_iters, bool) or not isinstance(max_iters, int) or not 1 <= max_iters <= hard_max:
        return None, f"maxIterations must be an integer between 1 and {hard_max}"

    enforce = data.get("enforceRequiredCommands", True)
    if not isinstance(enforce, bool):
        return None, "enforceRequiredCommands must be a boolean"

    return {"task": prompt.strip(), "max_iterations": max_iters, "enforce": enforce}, None


@app.route("/api/health")
def api_health():
    return jsonify({
        "success": True,
        "message": "Service is healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@app.route("/api/generate", methods=["POST"])
def api_generate():
    """Run the agent loop on a fresh workspace and return the outcome."""
    fields, error = _parse_generate_request(request.get_json(silent=True))
    if error:
        return _error(error, 400)

    workspace = prepare_workspace(template_dir=TEMPLATE_DIR)
    try:
        runner = create_runner(workspace)
        result = runner.run(
            fields["task"],
            max_iterations=fields["max_iterations"],
            enforce_required_commands=fields["enforce"],
        )
    except Exception as e:
        logger.exception("Agent run failed in %s", workspace.root_dir)
        return _error(str(e), 500)

    return jsonify({
        "success": True,
        "message": "Application generated successfully",
        "workspaceId": workspace.root_dir,
        "summary": result.summary,
        "threadId": result.thread_id,
        "iterations": len(result.iterations),
        "filesModified": result.files_modified,
        "commandsExecuted": result.commands_executed,
    })


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("PORT", 5001))
    print(f"agentloop running at http://localhost:{port}")
    app.run(debug=False, port=port)
