"""Default agent loop settings."""

DEFAULTS = {
    "max_iterations": 8,
    "hard_max_iterations": 20,  # ceiling for callers (CLI, HTTP), not for the runner itself
    "model": "claude-sonnet-4-5-20250929",
    "max_tokens": 16384,
    "llm_timeout": 600,
    "command_timeout": 300,
    "max_output_chars": 8000,
    "workspace_prefix": "agentloop_",
    "allowed_commands": [
        "npm install",
        "npm run lint",
        "npm run build",
        "npm run dev > dev.log 2>&1 &",
        "curl -sf http://localhost:3000",
    ],
}
