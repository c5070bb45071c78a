"""Tests for server.py Flask endpoints: agent runs are mocked."""

from unittest.mock import patch, MagicMock

import pytest

from core.actions import UpdateFileAction
from core.state import CommandResult, IterationRecord, RunResult


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_result(summary="Built it", iterations=2):
    records = [
        IterationRecord(
            iteration=i + 1,
            prompt="p",
            response_text="{}",
            executed_actions=(UpdateFileAction(path="a.ts", content=""),),
            command_results=(CommandResult(command="npm install", exit_code=0,
                                           stdout="", stderr=""),),
        )
        for i in range(iterations)
    ]
    return RunResult(summary=summary, thread_id="thread-9", iterations=records)


@pytest.fixture
def client():
    import server
    server.app.config["TESTING"] = True
    with server.app.test_client() as c:
        yield c


@pytest.fixture
def workspace(tmp_path):
    ws = MagicMock()
    ws.root_dir = str(tmp_path)
    with patch("server.prepare_workspace", return_value=ws):
        yield ws


# ---------------------------------------------------------------------------
# GET /api/health
# ---------------------------------------------------------------------------

def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is True
    assert "timestamp" in data


# ---------------------------------------------------------------------------
# POST /api/generate (validation)
# ---------------------------------------------------------------------------

def test_generate_missing_body(client):
    resp = client.post("/api/generate", data="not json", content_type="text/plain")
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_generate_empty_prompt(client):
    resp = client.post("/api/generate", json={"prompt": "   "})
    assert resp.status_code == 400
    assert "Prompt is required" in resp.get_json()["error"]


def test_generate_prompt_too_long(client):
    resp = client.post("/api/generate", json={"prompt": "x" * 4001})
    assert resp.status_code == 400
    assert "less than 4000" in resp.get_json()["error"]


@pytest.mark.parametrize("value", [0, -3, 999, "8", 2.5, True])
def test_generate_bad_max_iterations(client, value):
    resp = client.post("/api/generate", json={"prompt": "x", "maxIterations": value})
    assert resp.status_code == 400
    assert "maxIterations" in resp.get_json()["error"]


def test_generate_bad_enforce_flag(client):
    resp = client.post("/api/generate", json={"prompt": "x", "enforceRequiredCommands": "no"})
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# POST /api/generate (runs)
# ---------------------------------------------------------------------------

def test_generate_success(client, workspace):
    runner = MagicMock()
    runner.run.return_value = _make_result()

    with patch("server.create_runner", return_value=runner) as mock_create:
        resp = client.post("/api/generate", json={
            "prompt": "  build a blog  ", "maxIterations": 3, "enforceRequiredCommands": False,
        })

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is True
    assert data["summary"] == "Built it"
    assert data["threadId"] == "thread-9"
    assert data["workspaceId"] == workspace.root_dir
    assert data["iterations"] == 2
    assert data["filesModified"] == 2
    assert data["commandsExecuted"] == 2
    mock_create.assert_called_once_with(workspace)
    runner.run.assert_called_once_with(
        "build a blog", max_iterations=3, enforce_required_commands=False,
    )


def test_generate_defaults(client, workspace):
    from config.defaults import DEFAULTS
    runner = MagicMock()
    runner.run.return_value = _make_result()

    with patch("server.create_runner", return_value=runner):
        client.post("/api/generate", json={"prompt": "build a blog"})

    runner.run.assert_called_once_with(
        "build a blog",
        max_iterations=DEFAULTS["max_iterations"],
        enforce_required_commands=True,
    )


def test_generate_run_failure_returns_500(client, workspace):
    runner = MagicMock()
    runner.run.side_effect = ValueError("Command rm -rf / is not allowed. Allowed commands: npm install")

    with patch("server.create_runner", return_value=runner):
        resp = client.post("/api/generate", json={"prompt": "build a blog"})

    assert resp.status_code == 500
    data = resp.get_json()
    assert data["success"] is False
    assert "is not allowed" in data["error"]
