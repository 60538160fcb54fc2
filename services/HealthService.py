# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-22
# Description: HealthService.py
# -----------------------------------------------------------------------------
from dataclasses import dataclass

from api.schemas.health import DeepHealthResponse, SmokeTestSummary
from health.TestRunner import TestRunner


@dataclass
class HealthService:
    """
    Wraps TestRunner which checks the OpenAI key, the vector store
    and the source database.
    Returns DeepHealthResponse for API layer
    """

    test_runner: TestRunner

    def deep_health(self, run_openai: bool = False) -> DeepHealthResponse:
        results = self.test_runner.run_all(run_openai=run_openai)

        total = len(results)
        passed = sum(1 for ok in results.values() if ok)
        failed = total - passed

        return DeepHealthResponse(
            status="ok" if failed == 0 else "error",
            results=results,
            summary=SmokeTestSummary(total=total, passed=passed, failed=failed),
        )
