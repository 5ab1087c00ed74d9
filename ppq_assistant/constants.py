"""Constants and default configurations for ppq-assistant."""

from pathlib import Path

# Config file location
CONFIG_DIR = Path.home() / ".ppq"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Environment overrides (also picked up from a .env file)
ENV_API_TOKEN = "PPQ_API_TOKEN"
ENV_API_URL = "PPQ_API_URL"
ENV_MODEL = "PPQ_MODEL"

DEFAULT_API_URL = "https://api.ppq.ai/chat/completions"
DEFAULT_MODEL = "claude-3.7-sonnet"

# Accepted values for --model
AVAILABLE_MODELS = [
    "deepseek-r1",
    "gpt-4.5-preview",
    "deepseek-chat",
    "claude-3.7-sonnet",
    "claude-3.5-sonnet",
    "gpt-4o",
    "llama-3.1-405b-instruct",
    "llama-3-70b-instruct",
    "gpt-4o-mini",
    "gemini-flash-1.5",
    "mixtral-8x7b-instruct",
    "claude-3-5-haiku-20241022:beta",
    "gemini-2.0-flash-exp",
    "grok-2",
    "qwq-32b-preview",
    "nova-pro-v1",
    "llama-3.1-nemotron-70b-instruct",
    "gpt-4",
    "dolphin-mixtral-8x22b",
]

# Timeout for the chat completion request (seconds)
API_TIMEOUT = 600

# Number of body lines shown under each snippet label
PREVIEW_LINES = 3

# Seconds to wait after SIGTERM before a child process group gets SIGKILL
KILL_GRACE_PERIOD = 2.0

# Exit codes returned by the CLI
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNSUPPORTED = 2
EXIT_SPAWN_FAILURE = 127
EXIT_INTERRUPTED = 130
