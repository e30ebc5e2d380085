import json
from unittest.mock import patch

import pytest

from conftest import FOUR_ARTIFACTS, FakeClient
from isoforge.generator import (
    ASSIST_FALLBACK,
    ask_assistant,
    parse_blueprint,
    request_blueprint,
)
from isoforge.llm import EmptyModelOutput, InvalidModelJSON, resolve_client
from isoforge.models import GenerationPhase, ImageRequest
from isoforge.prompts import ASSIST_SYSTEM_PROMPT, SYSTEM_PROMPT


def test_parse_blueprint_preserves_order_and_contents():
    artifacts = parse_blueprint(json.dumps(FOUR_ARTIFACTS))
    assert [a.model_dump() for a in artifacts] == FOUR_ARTIFACTS


def test_parse_blueprint_keeps_duplicate_names():
    raw = json.dumps([
        {"name": "a.cfg", "content": "1", "language": "ini"},
        {"name": "a.cfg", "content": "2", "language": "ini"},
    ])
    assert [a.content for a in parse_blueprint(raw)] == ["1", "2"]


@pytest.mark.parametrize(
    "raw,kind",
    [
        ("Sure! Here are your files:", "json_decode"),
        ("```json\n[]\n```", "json_decode"),
        ('{"name": "a", "content": "b", "language": "c"}', "schema_validation"),
        ('[{"name": "a", "content": "b"}]', "schema_validation"),
        ('[{"name": "a", "content": 5, "language": "c"}]', "schema_validation"),
        ('[{"name": "a", "content": "b", "language": "c", "mode": "0644"}]', "schema_validation"),
        ("[]", "schema_validation"),
    ],
)
def test_parse_blueprint_rejects_schema_deviation(raw, kind):
    with pytest.raises(InvalidModelJSON) as exc_info:
        parse_blueprint(raw)
    assert exc_info.value.kind == kind
    assert exc_info.value.raw_text == raw


def test_parse_blueprint_empty_output():
    with pytest.raises(EmptyModelOutput):
        parse_blueprint("   ")


def test_request_blueprint_makes_one_call(four_artifacts_json):
    client = FakeClient(text=four_artifacts_json)
    request = ImageRequest(hostname="ubuntu-srv")

    result = request_blueprint(request, client=client, model="test-model", max_tokens=123)

    assert len(result.artifacts) == 4
    assert result.raw == four_artifacts_json
    assert len(client.messages.calls) == 1
    call = client.messages.calls[0]
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 123
    assert call["system"] == SYSTEM_PROMPT
    assert call["messages"][0]["role"] == "user"
    assert "Hostname: ubuntu-srv" in call["messages"][0]["content"]


def test_request_blueprint_reports_phases_in_order(four_artifacts_json):
    phases = []
    request_blueprint(ImageRequest(), client=FakeClient(text=four_artifacts_json), on_phase=phases.append)
    assert phases == [
        GenerationPhase.COMPOSE_PROMPT,
        GenerationPhase.REQUEST,
        GenerationPhase.VALIDATE,
    ]


def test_request_blueprint_with_no_text_blocks_is_empty_output():
    with pytest.raises(EmptyModelOutput):
        request_blueprint(ImageRequest(), client=FakeClient(text=None))


def test_request_blueprint_propagates_call_errors():
    client = FakeClient(exc=RuntimeError("quota exceeded"))
    with pytest.raises(RuntimeError, match="quota exceeded"):
        request_blueprint(ImageRequest(), client=client)
    assert len(client.messages.calls) == 1


def test_resolve_client_builds_sdk_client_without_retries():
    with patch("isoforge.llm.Anthropic") as mock_anthropic:
        client = resolve_client(api_key="secret")
    mock_anthropic.assert_called_once_with(api_key="secret", max_retries=0)
    assert client is mock_anthropic.return_value


def test_resolve_client_prefers_injected_client():
    injected = FakeClient(text="[]")
    with patch("isoforge.llm.Anthropic") as mock_anthropic:
        assert resolve_client(client=injected, api_key="secret") is injected
    mock_anthropic.assert_not_called()


def test_ask_assistant_returns_text():
    client = FakeClient(text="  Use netplan.  ")
    answer = ask_assistant("static ip?", ImageRequest(), client=client)
    assert answer == "Use netplan."
    assert client.messages.calls[0]["system"] == ASSIST_SYSTEM_PROMPT


def test_ask_assistant_falls_back_on_empty_output():
    assert ask_assistant("anything", ImageRequest(), client=FakeClient(text="")) == ASSIST_FALLBACK
