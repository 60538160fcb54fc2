# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-08
# Updated: 2026-01-22
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv, find_dotenv

from exceptions import ConfigurationError

# Load .env once globally
load_dotenv(find_dotenv(usecwd=True), override=False)


@dataclass(frozen=True)
class Config:
    # OpenAI (embeddings + chat completions)
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_embed_model: str = "text-embedding-3-small"
    openai_chat_model: str = "gpt-4o-mini"

    # Relational database holding recordings / transcriptions / enrichments
    database_url: str = ""

    # Chroma Vector Database
    # chroma_path -> local PersistentClient, otherwise Chroma Cloud
    chroma_path: str = ""
    chroma_api_key: str = ""
    chroma_tenant: str = ""
    chroma_database: str = ""

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        # OpenAI
        "openai_api_key": "OPENAI_API_KEY",
        "openai_base_url": "OPENAI_BASE_URL",      # e.g. https://api.openai.com/v1
        "openai_embed_model": "OPENAI_EMBED_MODEL",
        "openai_chat_model": "OPENAI_CHAT_MODEL",

        # Database
        "database_url": "DATABASE_URL",            # e.g. postgresql+psycopg2://...

        # Chroma
        "chroma_path": "CHROMA_PATH",
        "chroma_api_key": "CHROMA_API_KEY",
        "chroma_tenant": "CHROMA_TENANT",
        "chroma_database": "CHROMA_DATABASE",
    }

    # Env vars the live OpenAI tests need
    OPENAI_ENV_VARS = (
        "OPENAI_API_KEY",
    )

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables (blank -> field default)."""
        kwargs = {}
        for field_name, env_name in Config.ENV_VARS.items():
            value = (os.getenv(env_name) or "").strip()
            if value:
                kwargs[field_name] = value
        return Config(**kwargs)

    def missing(self, *fields: str) -> List[str]:
        """Env var names for the given fields that resolved to empty values."""
        names = fields or tuple(self.ENV_VARS.keys())
        return [self.ENV_VARS[f] for f in names if not getattr(self, f)]

    def validate(self, *fields: str) -> None:
        """
        Fail fast if any of the given fields is missing.

        Strictness is per-context: the batch CLI only needs OpenAI + database,
        the API additionally needs the Chroma settings for cloud mode.
        """
        missing_env_vars = self.missing(*fields)
        if missing_env_vars:
            raise ConfigurationError(f"Missing required environment variables: {missing_env_vars}")

    def is_openai_configured(self) -> bool:
        return bool(self.openai_api_key)

    def uses_chroma_cloud(self) -> bool:
        return not self.chroma_path and bool(self.chroma_api_key)

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "openai_configured": self.is_openai_configured(),
            "openai_base_url": self.openai_base_url or None,
            "openai_embed_model": self.openai_embed_model,
            "openai_chat_model": self.openai_chat_model,
            "database_configured": bool(self.database_url),
            "chroma_path": self.chroma_path or None,
            "chroma_tenant": self.chroma_tenant or None,
            "chroma_database": self.chroma_database or None,
        }
