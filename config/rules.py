"""Required verification steps and the command keywords that satisfy them."""

# Each entry: (step_name, label, keyword_rules)
# A keyword rule is a tuple of substrings that must all appear in the command.
# A step is satisfied when any of its rules matches a command that exited 0.
REQUIRED_STEPS = [
    ("install", "npm install", [("npm install",)]),
    ("lint", "npm run lint", [("npm run lint",), ("npm run eslint",)]),
    ("build", "npm run build", [("npm run build",)]),
    ("health_check", "health check (curl)", [("curl", "localhost")]),
]

FINISH_REJECTED_TEMPLATE = (
    "FINISH REJECTED: The following required steps have not been completed "
    "successfully: {missing}. Please complete these steps before finishing."
)
