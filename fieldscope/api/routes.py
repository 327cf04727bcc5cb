"""REST API routes for Fieldscope.

Provides endpoints for:
- Extracting fields from text, HTML or JSON
- Extracting fields from a screenshot through the tier chain
- Function-point analysis of a field list
- The local OCR+Regex field-extraction service
- The Gemini vision adapter
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from fieldscope.ai_engine.engine import AIEngine, AIExtractionError, InvalidImageError
from fieldscope.conduit.engine import ExtractionConduit
from fieldscope.config.settings import FieldscopeConfig
from fieldscope.pipeline.extraction import ExtractedField, FunctionPointAnalysis
from fieldscope.pipeline.manager import analyze, extract_from_structured_input
from fieldscope.pipeline.regex_service import build_service_response
from fieldscope.signals.types import Signal

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---


def get_config(request: Request) -> FieldscopeConfig:
    return request.app.state.config


def get_ai_engine(request: Request) -> AIEngine:
    return request.app.state.ai_engine


async def get_http_client(
    config: FieldscopeConfig = Depends(get_config),
) -> AsyncIterator[httpx.AsyncClient]:
    """One outbound HTTP client per request, closed when the request ends."""
    async with httpx.AsyncClient(timeout=config.timeouts.http_timeout_s) as client:
        yield client


# --- Request/Response Models ---


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StructuredInputRequest(_CamelModel):
    """Raw text, HTML or JSON describing a screen."""

    raw: str


class ImageRequest(_CamelModel):
    image_base64: str = Field(min_length=1)


class AnalyzeRequest(_CamelModel):
    fields: list[ExtractedField]


class FieldsResponse(_CamelModel):
    fields: list[ExtractedField]


class ImageExtractionResponse(_CamelModel):
    """Fields plus the phase the extraction ended in and its progress signals."""

    fields: list[ExtractedField]
    phase: str
    signals: list[Signal] = Field(default_factory=list)


class TextRequest(BaseModel):
    text: str | None = None


# --- Endpoints ---


@router.post("/fields/extract", response_model=FieldsResponse)
async def extract_fields_from_input(request: StructuredInputRequest) -> FieldsResponse:
    """Extract fields from pasted text, HTML or JSON."""
    try:
        fields = extract_from_structured_input(request.raw)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    logger.info("Structured extraction returned %d fields", len(fields))
    return FieldsResponse(fields=fields)


@router.post("/fields/extract-image", response_model=ImageExtractionResponse)
async def extract_fields_from_image(
    request: ImageRequest,
    config: FieldscopeConfig = Depends(get_config),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> ImageExtractionResponse:
    """Run the AI, OCR+Regex and raw OCR tiers against a screenshot."""
    conduit = ExtractionConduit(config=config, http=http)
    fields = await conduit.extract_from_image(request.image_base64)
    return ImageExtractionResponse(
        fields=fields,
        phase=conduit.phase.value,
        signals=conduit.signals.signals,
    )


@router.post("/fields/analyze", response_model=FunctionPointAnalysis)
async def analyze_fields(request: AnalyzeRequest) -> FunctionPointAnalysis:
    """Aggregate a field list into the EI/EO/EQ/ILF/EIF breakdown."""
    return analyze(request.fields)


@router.post("/extract-fields")
async def extract_fields_from_text(request: TextRequest) -> dict[str, Any]:
    """OCR+Regex field-extraction service."""
    if not request.text or not request.text.strip():
        raise HTTPException(
            status_code=400,
            detail={"status": "error", "message": "Texto OCR é obrigatório"},
        )
    response = build_service_response(request.text)
    logger.info(
        "Regex service found %d fields in %d characters",
        response["estatisticas"]["campos_encontrados"],
        len(request.text),
    )
    return response


@router.post("/gemini-extract")
async def gemini_extract(
    request: ImageRequest, engine: AIEngine = Depends(get_ai_engine)
) -> dict[str, Any]:
    """Vision-AI service backed by Vertex AI Gemini."""
    if not engine.is_available and not await engine.initialize():
        raise HTTPException(status_code=503, detail="Vision AI is not configured")

    try:
        fields = await engine.extract_fields(request.image_base64)
    except InvalidImageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AIExtractionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return {
        "success": True,
        "fields": [field.model_dump() for field in fields],
        "source": "gemini",
    }
