from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mest_server.api.router import router as api_router
from mest_sim.rules.ruleset import default_ruleset

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ruleset = default_ruleset()
    logger.info("Loaded %d situational modifiers", len(ruleset.modifiers))
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="MEST Rules Engine", lifespan=lifespan)
    app.include_router(api_router)
    return app


app = create_app()
