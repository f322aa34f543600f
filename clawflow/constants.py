"""Shared constants for clawflow."""

LAST_OUTPUT_KEY = "_last_output"
TRIGGER_KEY = "_trigger"

DEFAULT_DELAY_MS = 1000
DEFAULT_AGENT_TIMEOUT_MS = 30000
DEFAULT_WEBHOOK_METHOD = "POST"
DEFAULT_MAX_STEP_EXECUTIONS = 1000

DEFAULT_AVAILABILITY_WEIGHT = 0.1
DEFAULT_EXPERIENCE_WEIGHT = 0.05
DEFAULT_MATCH_LIMIT = 10
