# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: test_voice_embedder.py
# -----------------------------------------------------------------------------
import os
from types import SimpleNamespace

import numpy as np
import pytest
from openai import OpenAIError

from config.Config import Config
from embedding.VoiceEmbedder import VoiceEmbedder
from exceptions import ConfigurationError, UpstreamError


class FakeEmbeddings:
    def __init__(self, vector=None, error=None):
        self.vector = vector if vector is not None else [3.0, 4.0]
        self.error = error
        self.calls = []

    def create(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=[SimpleNamespace(embedding=self.vector)])


def _embedder(cfg, embeddings, **kwargs) -> VoiceEmbedder:
    return VoiceEmbedder(cfg, client=SimpleNamespace(embeddings=embeddings), **kwargs)


def test_is_configured_reflects_api_key():
    assert VoiceEmbedder(Config(openai_api_key="sk-x")).is_configured() is True
    assert VoiceEmbedder(Config()).is_configured() is False


def test_embed_without_key_raises_before_any_call():
    fake = FakeEmbeddings()
    embedder = _embedder(Config(), fake)

    with pytest.raises(ConfigurationError):
        embedder.embed("hello")
    assert fake.calls == []


def test_embed_normalises_and_passes_model_params(cfg):
    fake = FakeEmbeddings([3.0, 4.0])
    embedder = _embedder(cfg, fake, dimensions=2)

    vec = embedder.embed("  hello world  ")

    assert vec.dtype == np.float32
    assert np.allclose(vec, [0.6, 0.8], atol=1e-6)
    assert fake.calls == [{"model": "text-embedding-3-small", "input": "hello world", "dimensions": 2}]


def test_empty_text_rejected(cfg):
    with pytest.raises(ValueError):
        _embedder(cfg, FakeEmbeddings()).embed("   ")


def test_long_text_truncated(cfg):
    fake = FakeEmbeddings()
    _embedder(cfg, fake, max_input_chars=5).embed("abcdefghij")
    assert fake.calls[0]["input"] == "abcde"


def test_sdk_error_wrapped_and_not_retried(cfg):
    fake = FakeEmbeddings(error=OpenAIError("rate limited"))
    embedder = _embedder(cfg, fake)

    with pytest.raises(UpstreamError):
        embedder.embed("hello")
    assert len(fake.calls) == 1


def test_empty_response_is_upstream_error(cfg):
    fake = FakeEmbeddings()
    fake.create = lambda **params: SimpleNamespace(data=[])

    with pytest.raises(UpstreamError):
        _embedder(cfg, fake).embed("hello")


@pytest.mark.integration
def test_openai_embedding_roundtrip():
    if not os.getenv(Config.ENV_VARS["openai_api_key"]):
        pytest.skip("Missing env vars for OpenAI: OPENAI_API_KEY")

    embedder = VoiceEmbedder(Config.from_env())
    vec = embedder.embed("Kurze Testaufnahme über das Budget.")

    assert vec.shape == (embedder.dimensions,)
    assert np.linalg.norm(vec) == pytest.approx(1.0, abs=1e-3)
