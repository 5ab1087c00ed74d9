"""PPQ chat completions provider (HTTP-based, OpenAI-compatible)."""

import json
import logging
import urllib.error
import urllib.request

from .base import BaseProvider
from ..constants import API_TIMEOUT, DEFAULT_API_URL
from ..exceptions import ApiError

logger = logging.getLogger(__name__)

_STATUS_HINTS = {
    401: "Check 'api_token' in your config.",
    403: "Check 'api_token' in your config.",
    429: "Rate limited; wait a moment and try again.",
}


class PPQProvider(BaseProvider):
    """Provider for the PPQ chat completions API."""

    name = "ppq"

    def __init__(self, api_token: str | None, api_url: str = DEFAULT_API_URL, timeout: int = API_TIMEOUT):
        self._api_token = api_token
        self.api_url = api_url
        self.timeout = timeout

    @property
    def api_token(self) -> str | None:
        return self._api_token or None

    def is_available(self) -> bool:
        """Check if an API token is set."""
        return self.api_token is not None

    def call(self, model: str, prompt: str) -> str:
        """Call the chat completions endpoint and return the first choice's content."""
        if not self.is_available():
            raise ApiError(self.name, "api_token not set")

        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
        }

        req = urllib.request.Request(
            self.api_url,
            data=json.dumps(payload).encode(),
            headers={
                "Authorization": f"Bearer {self.api_token}",
                "Content-Type": "application/json",
            },
        )

        logger.debug("POST %s (model=%s)", self.api_url, model)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode()
        except urllib.error.HTTPError as e:
            try:
                error_body = e.read().decode() if e.fp else str(e)
            except OSError:
                error_body = str(e)
            raise ApiError(
                self.name, f"HTTP {e.code}: {error_body}",
                status=e.code, hint=_STATUS_HINTS.get(e.code),
            )
        except urllib.error.URLError as e:
            raise ApiError(self.name, f"Connection error: {e.reason}")
        except TimeoutError:
            raise ApiError(self.name, f"Request timed out after {self.timeout}s")

        return self._parse_content(raw)

    def _parse_content(self, raw: str) -> str:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ApiError(self.name, f"Invalid JSON response: {e}")

        if not isinstance(data, dict):
            raise ApiError(self.name, "Invalid response: expected a JSON object")

        if "error" in data:
            error = data["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise ApiError(self.name, message)

        choices = data.get("choices")
        if not choices or not isinstance(choices, list):
            raise ApiError(self.name, "Invalid response: missing 'choices'")

        message = choices[0].get("message") or {}
        content = message.get("content")
        if content is None:
            raise ApiError(self.name, "Invalid response: missing 'content'")

        return content
