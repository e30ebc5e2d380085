import logging
from typing import Any

from anthropic import Anthropic

from .config import DEFAULT_MAX_TOKENS, DEFAULT_MODEL

logger = logging.getLogger(__name__)


class InvalidModelJSON(ValueError):
    def __init__(self, raw_text: str, error: str, kind: str):
        super().__init__(f"Model output failure ({kind}): {error}")
        self.raw_text = raw_text
        self.error = error
        self.kind = kind


class EmptyModelOutput(InvalidModelJSON):
    def __init__(self):
        super().__init__(
            raw_text="",
            error="No text content found in model response",
            kind="empty_output",
        )


def resolve_client(client: Any | None = None, api_key: str | None = None) -> Any:
    if client is not None:
        return client
    # Exactly one attempt per invocation; the SDK reads ANTHROPIC_API_KEY
    # itself when api_key is None and raises if neither is set.
    return Anthropic(api_key=api_key, max_retries=0)


def extract_text(resp) -> str:
    parts = []
    for block in resp.content:
        if hasattr(block, "text") and block.text:
            parts.append(block.text)
    raw_text = "".join(parts)
    if not raw_text.strip():
        raise EmptyModelOutput()
    return raw_text.strip()


def complete(
    client: Any,
    prompt: str,
    *,
    system: str,
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    temperature: float = 0.0,
) -> str:
    """Single non-streaming completion call; returns the stripped text."""
    logger.debug("Requesting completion from %s (max_tokens=%d)", model, max_tokens)
    resp = client.messages.create(
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        system=system,
        messages=[{"role": "user", "content": prompt}],
    )
    return extract_text(resp)
