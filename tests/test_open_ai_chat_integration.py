# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-22
# Updated: 2026-01-22
# Description: test_open_ai_chat_integration.py
# -----------------------------------------------------------------------------
import os
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from chat.OpenAIChat import OpenAIChat
from config.Config import Config
from exceptions import ConfigurationError, UpstreamError


def _missing_openai_chat_env_vars() -> list[str]:
    """Check only the OpenAI env vars needed for chat."""
    return [name for name in Config.OPENAI_ENV_VARS if not os.getenv(name)]


def _skip_if_missing_prereqs():
    missing = _missing_openai_chat_env_vars()
    if missing:
        pytest.skip(f"Missing env vars for OpenAI: {', '.join(missing)}")


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return self.response


def _fake_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _response(content: str):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        model="gpt-4o-mini-2024",
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=2, total_tokens=12),
    )


def test_complete_returns_content_model_and_usage(cfg):
    completions = FakeCompletions(response=_response("OK"))
    chat = OpenAIChat(cfg=cfg, client=_fake_client(completions))

    out = chat.complete([{"role": "user", "content": "ping"}], temperature=0.0, max_tokens=5)

    assert out.content == "OK"
    assert out.model == "gpt-4o-mini-2024"
    assert out.usage == {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12}
    assert completions.calls[0]["model"] == cfg.openai_chat_model
    assert completions.calls[0]["max_tokens"] == 5


def test_sdk_error_becomes_upstream_error(cfg):
    chat = OpenAIChat(cfg=cfg, client=_fake_client(FakeCompletions(error=OpenAIError("503"))))

    with pytest.raises(UpstreamError):
        chat.simple_chat("ping")
    assert chat.healthcheck() is False


def test_malformed_response_becomes_upstream_error(cfg):
    chat = OpenAIChat(cfg=cfg, client=_fake_client(FakeCompletions(response=SimpleNamespace(choices=[]))))

    with pytest.raises(UpstreamError):
        chat.simple_chat("ping")


def test_missing_key_is_reported_on_first_use():
    chat = OpenAIChat(cfg=Config())

    with pytest.raises(ConfigurationError):
        chat.simple_chat("ping")


@pytest.mark.integration
def test_openai_chat_simple_roundtrip():
    """
    Integration test:
      - instantiate OpenAIChat (OpenAI only)
      - send a tiny prompt
      - verify response is returned
    """
    _skip_if_missing_prereqs()

    cfg = Config.from_env()
    assert cfg.openai_api_key, "OPENAI_API_KEY must not be empty"
    assert cfg.openai_chat_model, "OPENAI_CHAT_MODEL must not be empty"

    chat = OpenAIChat(cfg=cfg)

    resp = chat.simple_chat(
        user_text="Reply with a single word: OK",
        system_text="You are a test assistant.",
        temperature=0.0,
        max_tokens=5,
    )

    assert resp.content.strip().upper().startswith("OK")


@pytest.mark.integration
def test_openai_chat_healthcheck():
    """
    Light healthcheck integration test.
    """
    _skip_if_missing_prereqs()

    chat = OpenAIChat(cfg=Config.from_env())
    assert chat.healthcheck() is True


def test_openai_env_vars_are_known_config_vars():
    assert set(Config.OPENAI_ENV_VARS) <= set(Config.ENV_VARS.values())
