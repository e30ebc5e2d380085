import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError

from .config import DEFAULT_MAX_TOKENS, DEFAULT_MODEL
from .llm import EmptyModelOutput, InvalidModelJSON, complete, resolve_client
from .models import BLUEPRINT_ADAPTER, Blueprint, GenerationPhase, ImageRequest
from .prompts import (
    ASSIST_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
    build_assist_prompt,
    build_blueprint_prompt,
)

logger = logging.getLogger(__name__)

PhaseCallback = Callable[[GenerationPhase], None]

ASSIST_FALLBACK = "Sorry, I couldn't process that request."


@dataclass(frozen=True)
class BlueprintResult:
    artifacts: Blueprint
    raw: str


def parse_blueprint(raw: str) -> Blueprint:
    if not raw.strip():
        raise EmptyModelOutput()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidModelJSON(raw_text=raw, error=str(e), kind="json_decode") from e

    try:
        return BLUEPRINT_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise InvalidModelJSON(raw_text=raw, error=str(e), kind="schema_validation") from e


def request_blueprint(
    request: ImageRequest,
    *,
    client: Any | None = None,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    on_phase: PhaseCallback | None = None,
) -> BlueprintResult:
    """Ask the completion service for a blueprint of ``request``.

    Raises ``InvalidModelJSON`` when the output does not match the artifact
    schema; transport and auth errors from the SDK propagate unchanged.
    """

    def _phase(phase: GenerationPhase) -> None:
        if on_phase is not None:
            on_phase(phase)

    _phase(GenerationPhase.COMPOSE_PROMPT)
    prompt = build_blueprint_prompt(request)

    _phase(GenerationPhase.REQUEST)
    resolved_client = resolve_client(client=client, api_key=api_key)
    raw = complete(
        resolved_client,
        prompt,
        system=SYSTEM_PROMPT,
        model=model,
        max_tokens=max_tokens,
    )

    _phase(GenerationPhase.VALIDATE)
    artifacts = parse_blueprint(raw)
    logger.info("Blueprint for %s contains %d artifacts", request.hostname, len(artifacts))
    return BlueprintResult(artifacts=artifacts, raw=raw)


def ask_assistant(
    query: str,
    request: ImageRequest,
    *,
    client: Any | None = None,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> str:
    resolved_client = resolve_client(client=client, api_key=api_key)
    try:
        return complete(
            resolved_client,
            build_assist_prompt(query, request),
            system=ASSIST_SYSTEM_PROMPT,
            model=model,
            max_tokens=max_tokens,
            temperature=1.0,
        )
    except EmptyModelOutput:
        return ASSIST_FALLBACK
