from __future__ import annotations

import importlib
import logging
import os
import random
import time
import uuid
from typing import Any, Callable, Mapping, cast

from ..config import CompletionSettings
from ..models import CompletionResult, ParameterSet, TokenUsage

logger = logging.getLogger(__name__)

OpenAI: Callable[..., Any] | None = None

RETRIABLE_ERROR_NAMES = frozenset({"APIConnectionError", "APITimeoutError"})


class CompletionError(RuntimeError):
    """Raised when a completion request fails for good."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CompletionClient:
    """Chat-completion client for OpenAI-compatible endpoints with retry and backoff."""

    def __init__(self, settings: CompletionSettings, api_key: str) -> None:
        if not api_key:
            raise ValueError("An API key is required to request completions.")
        self._settings = settings
        self._api_key = api_key
        self._client_factory: Callable[..., Any] = _load_openai_factory()
        self._client: Any | None = None

    @property
    def settings(self) -> CompletionSettings:
        return self._settings

    def complete(self, prompt: str, parameters: ParameterSet) -> CompletionResult:
        """Request one completion, retrying rate limits, server errors and timeouts."""
        attempt = 0
        while True:
            started = time.monotonic()
            try:
                response: Any = self._ensure_client().chat.completions.create(
                    **self._build_request(prompt, parameters)
                )
            except Exception as exc:
                status = _status_code(exc)
                attempt += 1
                if not _is_retriable(exc, status) or attempt > self._settings.max_retries:
                    logger.error(
                        "Completion failed (status=%s, attempt %s): %s",
                        status,
                        attempt,
                        exc,
                    )
                    raise CompletionError(
                        f"Failed to generate response: {status or ''} {exc}".strip(),
                        status_code=status,
                    ) from exc
                delay = self._backoff_delay(attempt)
                logger.warning(
                    "Completion attempt %s/%s failed (status=%s); retrying in %.2fs: %s",
                    attempt,
                    self._settings.max_retries,
                    status,
                    delay,
                    exc,
                )
                time.sleep(delay)
                continue

            latency_ms = int((time.monotonic() - started) * 1000)
            result = self._to_result(response, latency_ms)
            logger.debug(
                "Completion succeeded model=%s latency=%sms tokens=%s",
                result.model,
                latency_ms,
                result.usage.total_tokens,
            )
            return result

    def _build_request(self, prompt: str, parameters: ParameterSet) -> dict[str, Any]:
        messages = []
        if self._settings.system_prompt:
            messages.append({"role": "system", "content": self._settings.system_prompt})
        messages.append({"role": "user", "content": prompt})
        request: dict[str, Any] = {
            "model": self._settings.model,
            "messages": messages,
            "temperature": parameters.temperature,
            "top_p": parameters.top_p,
            "max_tokens": parameters.max_tokens,
            "timeout": self._settings.request_timeout,
        }
        optional = {
            "frequency_penalty": parameters.frequency_penalty,
            "presence_penalty": parameters.presence_penalty,
            "stop": parameters.stop,
            "seed": parameters.seed,
        }
        request.update({key: value for key, value in optional.items() if value is not None})
        return request

    def _backoff_delay(self, attempt: int) -> float:
        base = min(
            self._settings.backoff_cap,
            self._settings.backoff_base * 2 ** (attempt - 1),
        )
        return base + random.uniform(0, self._settings.jitter)

    def _ensure_client(self) -> Any:
        if self._client is None:
            self._client = self._client_factory(
                api_key=self._api_key,
                base_url=self._settings.base_url,
                max_retries=0,
            )
        return self._client

    def _to_result(self, response: Any, latency_ms: int) -> CompletionResult:
        payload = _materialize_item(response)
        choices = payload.get("choices") or []
        text = ""
        if choices:
            message = _materialize_item(choices[0]).get("message") or {}
            text = _materialize_item(message).get("content") or ""
        usage = _materialize_item(payload.get("usage") or {})
        return CompletionResult(
            id=payload.get("id") or f"loc_{uuid.uuid4().hex}",
            text=text,
            model=payload.get("model") or self._settings.model,
            latency_ms=latency_ms,
            usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens"),
                completion_tokens=usage.get("completion_tokens"),
                total_tokens=usage.get("total_tokens"),
            ),
        )


def resolve_api_key(settings: CompletionSettings) -> str:
    """Resolve the API key from explicit config or the configured environment variable."""
    if settings.api_key:
        return settings.api_key
    env_name = settings.api_key_env
    if env_name and os.environ.get(env_name):
        return os.environ[env_name]
    raise RuntimeError(
        f"API key not provided. Set {env_name or 'an API key'} or pass --api-key."
    )


def _status_code(exc: Exception) -> int | None:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def _is_retriable(exc: Exception, status: int | None) -> bool:
    if status is not None:
        return status == 429 or 500 <= status <= 599
    return type(exc).__name__ in RETRIABLE_ERROR_NAMES


def _materialize_item(item: Any) -> dict[str, Any]:
    if isinstance(item, Mapping):
        return dict(cast(Mapping[str, Any], item))
    if hasattr(item, "model_dump"):
        dumpable: Any = item
        raw_dump: dict[str, Any] = dumpable.model_dump()
        return raw_dump
    if hasattr(item, "__dict__"):
        dumpable = item
        raw_dict: dict[str, Any] = dict(dumpable.__dict__)
        return raw_dict
    raise CompletionError("Unexpected completion response format.")


def _load_openai_factory() -> Callable[..., Any]:
    """Dynamically import the OpenAI client factory to avoid hard dependency at import."""
    global OpenAI
    if OpenAI is not None:
        return OpenAI
    try:  # pragma: no cover - import guard
        module = importlib.import_module("openai")
    except ImportError as exc:  # pragma: no cover - handled at runtime
        raise RuntimeError(
            "openai package is not installed. Install extras via 'pip install .[llm-openai]'."
        ) from exc
    openai_cls = getattr(module, "OpenAI", None)
    if openai_cls is None:  # pragma: no cover
        raise RuntimeError("openai.OpenAI client class is unavailable in this environment.")
    OpenAI = cast(Callable[..., Any], openai_cls)
    return OpenAI
