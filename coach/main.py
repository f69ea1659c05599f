from __future__ import annotations

import logging
import os

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .agent.handlers import CoachTools, init_registry
from .agent.tools import ToolRegistry
from .api import router
from .providers import HistoryProvider, InMemoryHistory
from .providers.convex_client import ConvexHistory

logger = logging.getLogger(__name__)


def build_provider() -> HistoryProvider:
    """History backend from HISTORY_BACKEND: ``memory`` (default) or ``convex``."""
    backend = os.getenv("HISTORY_BACKEND", "memory").lower()
    if backend == "convex":
        return ConvexHistory()
    if backend != "memory":
        raise ValueError(f"Unknown HISTORY_BACKEND '{backend}' (expected 'memory' or 'convex')")
    return InMemoryHistory()


def create_app(registry: ToolRegistry | None = None) -> FastAPI:
    if registry is None:
        registry = init_registry(ToolRegistry(), CoachTools(build_provider()))
    logger.info("Registered %d tools", len(registry))

    app = FastAPI(title="coach")
    app.state.registry = registry
    app.include_router(router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:3001",
            os.getenv("FRONTEND_URL", ""),
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "tools": len(registry)}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("coach.main:app", host="0.0.0.0", port=8000, reload=True)
