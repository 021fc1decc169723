from __future__ import annotations

from typing import Any

import pytest

from response_scorer.config import CompletionSettings
from response_scorer.llm import completion_client as cc
from response_scorer.models import ParameterSet


class StatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class APIConnectionError(Exception):
    """Shares its name with the SDK's connection error."""


class DummyMessage:
    def __init__(self, content: str) -> None:
        self.content = content


class DummyChoice:
    def __init__(self, content: str) -> None:
        self.message = DummyMessage(content)


class DummyUsage:
    def __init__(self) -> None:
        self.prompt_tokens = 12
        self.completion_tokens = 30
        self.total_tokens = 42


class DummyCompletion:
    def __init__(self, content: str | None) -> None:
        self.id = "chatcmpl-1"
        self.model = "served-model"
        self.choices = [DummyChoice(content)] if content is not None else []
        self.usage = DummyUsage()


def _install_fake_openai(monkeypatch, outcomes: list[Any]) -> dict[str, Any]:
    """Patch the OpenAI factory so each create() pops the next outcome."""
    state: dict[str, Any] = {"calls": [], "init": None}

    class DummyCompletions:
        def create(self, **kwargs: Any) -> Any:
            state["calls"].append(kwargs)
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

    class DummyChat:
        def __init__(self) -> None:
            self.completions = DummyCompletions()

    class DummyOpenAI:
        def __init__(self, **kwargs: Any) -> None:
            state["init"] = kwargs
            self.chat = DummyChat()

    monkeypatch.setattr(cc, "OpenAI", DummyOpenAI)
    monkeypatch.setattr(cc.time, "sleep", lambda _seconds: None)
    return state


PARAMS = ParameterSet(temperature=0.5, top_p=0.9, max_tokens=100)


def test_client_requires_api_key(monkeypatch):
    monkeypatch.setattr(cc, "OpenAI", object())
    with pytest.raises(ValueError):
        cc.CompletionClient(CompletionSettings(), api_key="")


def test_client_builds_request_and_parses_response(monkeypatch):
    """Sampling parameters are forwarded and unset optional ones are omitted."""
    state = _install_fake_openai(monkeypatch, [DummyCompletion("Generated text")])
    settings = CompletionSettings(model="m1", system_prompt="Be brief.")
    client = cc.CompletionClient(settings, api_key="token")

    result = client.complete("Explain DNS.", PARAMS)

    assert result.text == "Generated text"
    assert result.id == "chatcmpl-1"
    assert result.model == "served-model"
    assert result.usage.total_tokens == 42
    assert state["init"]["api_key"] == "token"
    assert state["init"]["base_url"] == settings.base_url
    request = state["calls"][0]
    assert request["model"] == "m1"
    assert request["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Explain DNS."},
    ]
    assert request["temperature"] == 0.5
    assert request["top_p"] == 0.9
    assert request["max_tokens"] == 100
    assert "seed" not in request
    assert "stop" not in request


def test_client_retries_rate_limit_then_succeeds(monkeypatch):
    state = _install_fake_openai(
        monkeypatch, [StatusError(429), StatusError(503), DummyCompletion("ok")]
    )
    client = cc.CompletionClient(CompletionSettings(), api_key="token")
    assert client.complete("prompt", PARAMS).text == "ok"
    assert len(state["calls"]) == 3


def test_client_retries_connection_errors(monkeypatch):
    state = _install_fake_openai(
        monkeypatch, [APIConnectionError("reset"), DummyCompletion("ok")]
    )
    client = cc.CompletionClient(CompletionSettings(), api_key="token")
    assert client.complete("prompt", PARAMS).text == "ok"
    assert len(state["calls"]) == 2


def test_client_does_not_retry_client_errors(monkeypatch):
    state = _install_fake_openai(monkeypatch, [StatusError(400)])
    client = cc.CompletionClient(CompletionSettings(), api_key="token")
    with pytest.raises(cc.CompletionError) as excinfo:
        client.complete("prompt", PARAMS)
    assert excinfo.value.status_code == 400
    assert len(state["calls"]) == 1


def test_client_gives_up_after_max_retries(monkeypatch):
    state = _install_fake_openai(monkeypatch, [StatusError(500)] * 3)
    client = cc.CompletionClient(CompletionSettings(max_retries=2), api_key="token")
    with pytest.raises(cc.CompletionError):
        client.complete("prompt", PARAMS)
    assert len(state["calls"]) == 3


def test_client_missing_choices_yield_empty_text(monkeypatch):
    _install_fake_openai(monkeypatch, [DummyCompletion(None)])
    client = cc.CompletionClient(CompletionSettings(), api_key="token")
    assert client.complete("prompt", PARAMS).text == ""


def test_backoff_delay_is_capped():
    settings = CompletionSettings(backoff_base=0.4, backoff_cap=4.0, jitter=0.0)
    client = cc.CompletionClient.__new__(cc.CompletionClient)
    client._settings = settings
    assert client._backoff_delay(1) == pytest.approx(0.4)
    assert client._backoff_delay(3) == pytest.approx(1.6)
    assert client._backoff_delay(10) == pytest.approx(4.0)


def test_resolve_api_key(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "from-env")
    assert cc.resolve_api_key(CompletionSettings()) == "from-env"
    assert cc.resolve_api_key(CompletionSettings(api_key="explicit")) == "explicit"
    monkeypatch.delenv("GROQ_API_KEY")
    with pytest.raises(RuntimeError):
        cc.resolve_api_key(CompletionSettings())
