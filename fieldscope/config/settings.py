"""Fieldscope configuration settings."""

from __future__ import annotations

import os
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


class ServiceEndpoints(BaseModel):
    """URLs of the external services the image orchestrator calls."""

    vision_ai_url: str = Field(
        default_factory=lambda: os.getenv(
            "FIELDSCOPE_VISION_AI_URL", "http://localhost:8000/api/v1/gemini-extract"
        )
    )
    ocr_url: str = Field(
        default_factory=lambda: os.getenv("FIELDSCOPE_OCR_URL", "http://localhost:8001/api/vision-ocr")
    )
    field_extraction_url: str = Field(
        default_factory=lambda: os.getenv(
            "FIELDSCOPE_FIELD_EXTRACTION_URL", "http://localhost:8000/api/v1/extract-fields"
        )
    )

    @field_validator("vision_ai_url", "ocr_url", "field_extraction_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"Invalid service URL: {value}")
        return value


class TimeoutConfig(BaseModel):
    """Per-request timeouts, applied on the HTTP client."""

    http_timeout_s: float = 30.0
    ai_timeout_s: float = 60.0


class ExtractionConfig(BaseModel):
    """Thresholds and confidence values for the image tiers."""

    min_ocr_text_length: int = 10
    ai_confidence: float = Field(default=0.95, ge=0.0, le=1.0)
    regex_confidence: float = Field(default=0.9, ge=0.0, le=1.0)


class VertexConfig(BaseModel):
    """Vertex AI configuration."""

    project_id: str = Field(default_factory=lambda: os.getenv("VERTEX_PROJECT_ID", ""))
    location: str = Field(default_factory=lambda: os.getenv("VERTEX_LOCATION", "us-central1"))
    vision_model: str = "gemini-2.5-flash"


class APIConfig(BaseModel):
    """API runtime controls from environment."""

    allowed_origins: list[str] = Field(
        default_factory=lambda: APIConfig.parse_allowed_origins(
            os.getenv("FIELDSCOPE_ALLOWED_ORIGINS", "")
        )
    )
    cors_allow_credentials: bool = Field(
        default_factory=lambda: os.getenv("FIELDSCOPE_CORS_ALLOW_CREDENTIALS", "").lower() == "true"
    )

    @staticmethod
    def parse_allowed_origins(value: str) -> list[str]:
        if not value.strip():
            return ["http://localhost", "http://127.0.0.1"]
        origins = [origin.strip() for origin in value.split(",") if origin.strip()]
        if "*" in origins:
            raise ValueError("FIELDSCOPE_ALLOWED_ORIGINS cannot include '*'")
        return origins

    @field_validator("allowed_origins")
    @classmethod
    def _validate_allowed_origins(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("allowed_origins cannot be empty")
        for origin in value:
            parsed = urlparse(origin)
            if parsed.scheme not in {"http", "https"} or not parsed.netloc:
                raise ValueError(f"Invalid CORS origin: {origin}")
        return value


class FieldscopeConfig(BaseModel):
    """Root configuration for the extraction service."""

    services: ServiceEndpoints = Field(default_factory=ServiceEndpoints)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    vertex: VertexConfig = Field(default_factory=VertexConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    log_level: str = Field(default_factory=lambda: os.getenv("FIELDSCOPE_LOG_LEVEL", "INFO"))
