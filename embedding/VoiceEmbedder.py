# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-22
# Description: VoiceEmbedder
# -----------------------------------------------------------------------------
import time
from typing import Any, Optional

import numpy as np
from openai import OpenAI, OpenAIError

from config.Config import Config
from embedding.TextEmbedder import TextEmbedder
from exceptions import ConfigurationError, UpstreamError
from settings import EMBED_DIMENSIONS, EMBED_MAX_INPUT_CHARS
from utility.logging_utils import get_class_logger


class VoiceEmbedder(TextEmbedder):
    """
    OpenAI embeddings for transcriptions, enrichments and user questions.

    Never retries: a failed call surfaces as UpstreamError and the caller
    (batch orchestrator / API) decides what to do with it.
    """

    def __init__(
            self,
            cfg: Config,
            *,
            dimensions: Optional[int] = EMBED_DIMENSIONS,
            normalize: bool = True,
            out_dtype: str = "float32",
            max_input_chars: int = EMBED_MAX_INPUT_CHARS,
            client: Any = None,
            logger=None,
    ):
        self.cfg = cfg
        self.dimensions = dimensions
        self.normalize = normalize
        self.out_dtype = out_dtype
        self.max_input_chars = max_input_chars
        self.logger = logger or get_class_logger(self.__class__)

        # Created lazily so a missing key is reported by is_configured()
        # instead of failing at construction time.
        self._client = client

        self.model = cfg.openai_embed_model or "text-embedding-3-small"
        self.logger.info(
            "OpenAI Embedder initialised (model=%s, dimensions=%s, dtype=%s, configured=%s)",
            self.model,
            self.dimensions,
            self.out_dtype,
            self.is_configured(),
        )

    def is_configured(self) -> bool:
        return self.cfg.is_openai_configured()

    @property
    def client(self) -> Any:
        if self._client is None:
            kwargs = {"api_key": self.cfg.openai_api_key}
            if self.cfg.openai_base_url:
                kwargs["base_url"] = self.cfg.openai_base_url
            self._client = OpenAI(**kwargs)
        return self._client

    def _prepare(self, text: str) -> str:
        cleaned = (text or "").strip()
        if not cleaned:
            raise ValueError("Text cannot be empty")

        if len(cleaned) > self.max_input_chars:
            self.logger.warning(
                "Embedding input truncated from %d to %d chars",
                len(cleaned),
                self.max_input_chars,
            )
            cleaned = cleaned[:self.max_input_chars]
        return cleaned

    def embed(self, text: str) -> np.ndarray:
        if not self.is_configured():
            raise ConfigurationError("OpenAI API key is not configured (set OPENAI_API_KEY)")

        cleaned = self._prepare(text)

        params = {"model": self.model, "input": cleaned}
        # Only the text-embedding-3 family accepts a dimensions override
        if self.dimensions and self.model.startswith("text-embedding-3"):
            params["dimensions"] = self.dimensions

        start = time.time()
        try:
            resp = self.client.embeddings.create(**params)
        except OpenAIError as e:
            self.logger.error("OpenAI embedding call failed: %s", e)
            raise UpstreamError(f"Embedding generation failed: {e}") from e

        if not getattr(resp, "data", None) or not resp.data[0].embedding:
            raise UpstreamError("Embedding response contained no vector")

        arr = np.asarray(resp.data[0].embedding, dtype=np.float32)

        # Normalize vectors (cosine-friendly)
        if self.normalize:
            arr = arr / (np.linalg.norm(arr) + 1e-12)

        # Convert dtype if needed
        if self.out_dtype == "float16":
            arr = arr.astype(np.float16)
        elif self.out_dtype != "float32":
            self.logger.warning(f"Unsupported out_dtype '{self.out_dtype}', defaulting to float32")

        self.logger.debug(
            "Embedded %d chars -> dim=%d in %.1f ms",
            len(cleaned),
            arr.shape[0],
            (time.time() - start) * 1000.0,
        )
        return arr
