"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from strokesight.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.strokesight_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="StrokeSight",
        description="Sketch recognition: fuses geometric, classifier, detector and LLM hypotheses",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import composite-pattern modules so @composite_pattern decorators fire
    from strokesight.engine.registry import load_patterns

    load_patterns()

    from strokesight.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
