"""FastAPI application entry point for Fieldscope."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fieldscope.ai_engine.engine import AIEngine
from fieldscope.api.routes import router
from fieldscope.config.settings import FieldscopeConfig

VERSION = "1.0.0"


def create_app(config: FieldscopeConfig | None = None, ai_engine: AIEngine | None = None) -> FastAPI:
    """Factory function for creating the FastAPI application."""
    config = config or FieldscopeConfig()
    logging.getLogger("fieldscope").setLevel(config.log_level.upper())

    app = FastAPI(
        title="Fieldscope",
        description="Field extraction and function-point classification",
        version=VERSION,
    )
    app.state.config = config
    app.state.ai_engine = ai_engine or AIEngine(config.vertex)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.allowed_origins,
        allow_credentials=config.api.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api/v1")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "fieldscope", "version": VERSION}

    return app


app = create_app()
