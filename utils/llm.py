"""Claude API client exposing a thread-style prompt interface."""

import logging
import os
import uuid
from dataclasses import dataclass

import anthropic

from config.defaults import DEFAULTS

logger = logging.getLogger(__name__)

MODEL = DEFAULTS["model"]
MAX_TOKENS = DEFAULTS["max_tokens"]


def get_client():
    """Return an Anthropic client. Raises if no API key is set."""
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError(
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Get a key at https://console.anthropic.com/ and run:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'"
        )
    return anthropic.Anthropic(api_key=api_key, timeout=DEFAULTS["llm_timeout"])


@dataclass(frozen=True)
class ThreadResult:
    text: str
    thread_id: str | None
    stop_reason: str | None = None


class ThreadService:
    """Runs prompts inside conversation threads.

    The Messages API is stateless, so a thread is the message history kept
    here under an opaque id. The id is returned after the first prompt and
    passed back on later prompts to continue the same conversation.
    Failures from the API are not retried.
    """

    def __init__(self, client=None, model=None, max_tokens=None):
        self._client = client
        self.model = model or MODEL
        self.max_tokens = max_tokens or MAX_TOKENS
        self._threads = {}

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def run_prompt(self, prompt, thread_id=None):
        """Send prompt on a new or existing thread and return the reply.

        Raises:
            ValueError: If prompt is empty or thread_id is unknown.
            RuntimeError: If the model returns an empty response.
        """
        if not prompt or not prompt.strip():
            raise ValueError("prompt must not be empty")

        if thread_id is None:
            thread_id = uuid.uuid4().hex
            self._threads[thread_id] = []
        elif thread_id not in self._threads:
            raise ValueError(f"Unknown thread id: {thread_id}")

        history = self._threads[thread_id]
        messages = history + [{"role": "user", "content": prompt}]

        # Streaming avoids the SDK timeout for large max_tokens
        text = ""
        with self.client.messages.stream(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=messages,
        ) as stream:
            for chunk in stream.text_stream:
                text += chunk
            stop_reason = stream.get_final_message().stop_reason

        text = text.strip()
        if not text:
            raise RuntimeError("Model returned an empty response")

        if stop_reason == "max_tokens":
            logger.warning("Response on thread %s hit the token limit", thread_id)

        history.append({"role": "user", "content": prompt})
        history.append({"role": "assistant", "content": text})
        return ThreadResult(text=text, thread_id=thread_id, stop_reason=stop_reason)
