# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-22
# Description: main.py
# -----------------------------------------------------------------------------
import logging

from fastapi import FastAPI

from api.routers import health, rag, stats

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",)
app = FastAPI(title="Voice RAG API")
app.include_router(health.router)
app.include_router(rag.router)
app.include_router(stats.router)
