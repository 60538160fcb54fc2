# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-22
# Updated: 2026-01-22
# Description: OpenAIChat
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from openai import OpenAI, OpenAIError

from chat.CompletionClient import Completion, CompletionClient, Message
from config.Config import Config
from exceptions import ConfigurationError, UpstreamError
from utility.logging_utils import get_class_logger


def _usage_dict(usage: Any) -> Optional[Dict[str, Any]]:
    if usage is None:
        return None
    if hasattr(usage, "model_dump"):
        return usage.model_dump()
    return {
        "prompt_tokens": getattr(usage, "prompt_tokens", None),
        "completion_tokens": getattr(usage, "completion_tokens", None),
        "total_tokens": getattr(usage, "total_tokens", None),
    }


@dataclass
class OpenAIChat(CompletionClient):
    """
        OpenAI chat wrapper used for RAG answer synthesis.

        Expected Config fields:
          cfg.openai_api_key: str
          cfg.openai_base_url: str (optional)
          cfg.openai_chat_model: str  (e.g. "gpt-4o-mini", "gpt-4o", etc.)
    """

    cfg: Config
    client: Any = None
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        self.model = self.cfg.openai_chat_model
        if not self.model:
            raise ConfigurationError("Config missing openai_chat_model (OPENAI_CHAT_MODEL)")

        self.logger.info(
            "OpenAIChat initialised (model=%s, configured=%s)",
            self.model,
            self.cfg.is_openai_configured(),
        )

    def _get_client(self) -> Any:
        if self.client is None:
            if not self.cfg.is_openai_configured():
                raise ConfigurationError("OpenAI API key is not configured (set OPENAI_API_KEY)")
            kwargs: Dict[str, Any] = {"api_key": self.cfg.openai_api_key}
            if self.cfg.openai_base_url:
                kwargs["base_url"] = self.cfg.openai_base_url
            self.client = OpenAI(**kwargs)
        return self.client

    # Standard chat call
    def chat(
            self,
            messages: List[Message],
            temperature: float = 0.3,
            max_tokens: int = 1500,
            top_p: float = 1.0,
            seed: Optional[int] = None,
            extra_params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if not messages:
            raise ValueError("messages must be non-empty.")

        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "top_p": top_p,
        }
        if seed is not None:
            params["seed"] = seed
        if extra_params:
            params.update(extra_params)

        self.logger.debug(
            "Chat request: model=%s temp=%s max_tokens=%s top_p=%s",
            self.model, temperature, max_tokens, top_p
        )

        try:
            resp = self._get_client().chat.completions.create(**params)
        except OpenAIError as e:
            self.logger.error("OpenAI chat completion failed: %s", e)
            raise UpstreamError(f"Completion failed: {e}") from e

        # Log raw response for debugging
        self.logger.debug("Raw ChatCompletion response: %r", resp)

        # Return the full response object (NOT just the content)
        return resp

    def complete(
            self,
            messages: List[Message],
            *,
            temperature: float = 0.3,
            max_tokens: int = 1500,
    ) -> Completion:
        resp = self.chat(messages, temperature=temperature, max_tokens=max_tokens)

        try:
            content = resp.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            self.logger.error("Unexpected chat response format: %s", e, exc_info=True)
            raise UpstreamError(f"Unexpected chat response format: {e}") from e

        self.logger.info("Chat answer generated (model=%s, chars=%d)", getattr(resp, "model", None), len(content))
        self.logger.debug("Token usage: %r", getattr(resp, "usage", None))

        return Completion(
            content=content,
            model=getattr(resp, "model", None),
            usage=_usage_dict(getattr(resp, "usage", None)),
        )

    # Convenience helper
    def simple_chat(
            self,
            user_text: str,
            system_text: Optional[str] = None,
            **kwargs: Any,
    ) -> Completion:
        messages: List[Message] = []
        if system_text:
            messages.append({"role": "system", "content": system_text})
        messages.append({"role": "user", "content": user_text})
        return self.complete(messages, **kwargs)

    def healthcheck(self) -> bool:
        try:
            _ = self.simple_chat("ping", max_tokens=5, temperature=0.0)
            return True
        except Exception as e:
            self.logger.warning("Chat healthcheck failed: %s", e)
            return False
