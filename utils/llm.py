"""Claude API client used as the generation service."""

import logging
import os

import anthropic

from config.defaults import DEFAULTS

logger = logging.getLogger(__name__)


class MissingApiKeyError(RuntimeError):
    """Raised when a generation call is attempted without ANTHROPIC_API_KEY."""


def get_client(timeout=None):
    """Return an Anthropic client. Raises if no API key is set."""
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise MissingApiKeyError(
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Get a key at https://console.anthropic.com/ and run:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'"
        )
    return anthropic.Anthropic(
        api_key=api_key,
        timeout=timeout or DEFAULTS["request_timeout"],
        max_retries=0,
    )


class ClaudeClient:
    """Generation service: complete(system_role, user_content) -> text.

    The SDK client is created on first use, so constructing one never
    needs a key. Every call is bounded by `timeout` seconds; expiry raises
    anthropic.APITimeoutError like any other service failure.
    """

    def __init__(self, model=None, max_tokens=None, timeout=None):
        self.model = model or DEFAULTS["model"]
        self.max_tokens = max_tokens or DEFAULTS["max_tokens"]
        self.timeout = timeout or DEFAULTS["request_timeout"]
        self._client = None

    def _get(self):
        if self._client is None:
            self._client = get_client(self.timeout)
        return self._client

    def complete(self, system_role, user_content):
        client = self._get()

        # Use streaming to avoid SDK timeout for large max_tokens
        text = ""
        with client.messages.stream(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system_role,
            messages=[{"role": "user", "content": user_content}],
        ) as stream:
            for chunk in stream.text_stream:
                text += chunk
            stop_reason = stream.get_final_message().stop_reason

        if stop_reason == "max_tokens":
            logger.warning("Response hit the %d token limit and may be truncated", self.max_tokens)
        return text
