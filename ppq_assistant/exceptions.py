"""Exception classes for ppq-assistant."""


class AssistantError(Exception):
    """Base exception for ppq-assistant errors."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class ConfigError(AssistantError):
    """Raised when configuration is invalid or missing."""
    pass


class ApiError(AssistantError):
    """Raised when the remote API call fails (network, auth, rate limit, bad payload)."""

    def __init__(self, provider: str, message: str, status: int | None = None, hint: str | None = None):
        super().__init__(f"{provider} error: {message}", hint=hint)
        self.provider = provider
        self.status = status


class UnsupportedLanguageError(AssistantError):
    """Raised when a language tag has no execution strategy."""

    def __init__(self, tag: str):
        shown = tag if tag.strip() else "<none>"
        super().__init__(
            f"Unsupported language: {shown}",
            hint="Supported tags: bash, sh, python, js, ruby, perl, php (and aliases).",
        )
        self.tag = tag


class SelectorError(AssistantError):
    """Raised when the selector is driven after it reached a terminal state."""
    pass
