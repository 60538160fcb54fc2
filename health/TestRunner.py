# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-07
# Updated: 2026-01-22
# Description: TestRunner
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from chat.OpenAIChat import OpenAIChat
from config.Config import Config
from source.SourceRepository import SourceRepository
from utility.logging_utils import get_class_logger
from vectorstore.VoiceVectorStore import VoiceVectorStore


class TestRunner:
    """
    Orchestrates dependency checks and reports a consolidated result.

    Checks included:
      - openai_configured (API key present; no network call)
      - vector_store      (collection reachable)
      - database          (SELECT 1 on the source database)
      - openai_chat       (optional, one tiny paid completion)
    """

    __test__ = False  # not a pytest class

    def __init__(
        self,
        *,
        cfg: Config,
        store: VoiceVectorStore,
        repository: SourceRepository,
        chat: Optional[OpenAIChat] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.cfg = cfg
        self.store = store
        self.repository = repository
        self.chat = chat
        self.logger = logger or get_class_logger(self.__class__)

    # -------------------------------------------------------------------------
    def run_all(self, run_openai: bool = False) -> Dict[str, bool]:
        """
        Run all configured checks.

        :param run_openai: If True, also sends a short chat request to OpenAI.
        :return: Dict mapping check names to True/False.
        """
        self.logger.info("Starting dependency checks (run_openai=%s)", run_openai)

        checks: Dict[str, Callable[[], bool]] = {
            "openai_configured": self.cfg.is_openai_configured,
            "vector_store": self.store.test_connection,
            "database": self.repository.test_connection,
        }
        if run_openai and self.chat is not None:
            checks["openai_chat"] = self.chat.healthcheck

        results: Dict[str, bool] = {}
        for name, check in checks.items():
            try:
                ok = bool(check())
            except Exception as e:
                self.logger.exception("Check '%s' raised an exception: %s", name, e)
                ok = False
            results[name] = ok
            self._log_result(name, ok)

        self._log_summary(results)
        return results

    # -------------------------------------------------------------------------
    def _log_result(self, name: str, ok: bool) -> None:
        if ok:
            self.logger.info("%s: PASS", name)
        else:
            self.logger.error("%s: FAIL", name)

    def _log_summary(self, results: Dict[str, bool]) -> None:
        total = len(results)
        passed = sum(1 for v in results.values() if v)
        self.logger.info("Dependency check summary: %d total, %d passed, %d failed", total, passed, total - passed)
