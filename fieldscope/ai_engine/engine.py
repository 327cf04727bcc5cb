"""AI Engine: screen field extraction backed by Vertex AI Gemini.

The AI Engine reads a screenshot and reports the data fields it sees. It
returns raw field descriptions only; mapping them onto ExtractedField,
scoring and derived-field detection happen in the pipeline.

Initialization is optional. Without a project id the engine stays
unavailable and callers fall back to OCR.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from fieldscope.config.settings import VertexConfig
from fieldscope.services.clients import VisionAIField, VisionAIResponse
from fieldscope.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = (
    "Analise esta tela de sistema e extraia TODOS os campos de dados visíveis.\n\n"
    "EXTRAIA:\n"
    "- Campos onde o usuário insere ou edita dados (inputs, selects, checkboxes) "
    "com categoria \"entrada\"\n"
    "- Campos que mostram dados do banco (IDs, códigos, nomes) com categoria \"neutro\"\n\n"
    "IGNORE:\n"
    "- Botões (Salvar, Cancelar, Adicionar)\n"
    "- Títulos e cabeçalhos\n"
    "- Menus\n"
    "- Textos estáticos\n\n"
    "Para cada campo:\n"
    "- label: texto exato do campo\n"
    "- name: versão snake_case\n"
    "- type: text, number, date, select, checkbox, radio, file, email, url ou textarea\n"
    "- category: \"entrada\" ou \"neutro\"\n"
    "- required: true/false\n"
    "- value: valor visível ou null\n"
    "- description: descrição curta do campo\n\n"
    'Responda somente com JSON no formato {"fields": [...]}.'
)

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "fields": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "label": {"type": "string"},
                    "name": {"type": "string"},
                    "type": {"type": "string"},
                    "category": {"type": "string"},
                    "required": {"type": "boolean"},
                    "value": {"type": "string", "nullable": True},
                    "description": {"type": "string", "nullable": True},
                },
                "required": ["label", "name", "type"],
            },
        }
    },
    "required": ["fields"],
}

_DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class AIExtractionError(Exception):
    """Raised when the model call or its reply cannot produce a field list."""


class InvalidImageError(AIExtractionError):
    """Raised when the submitted image is not decodable base64."""


def strip_data_url(image_base64: str) -> str:
    return _DATA_URL_PREFIX.sub("", image_base64.strip())


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE.sub("", text.strip()).strip()


def parse_fields_reply(text: str) -> list[VisionAIField]:
    """Parse the model's JSON reply into validated field descriptions.

    Raises:
        AIExtractionError: if the reply is not JSON or has no ``fields`` array.
    """
    try:
        data = json.loads(strip_code_fences(text))
    except ValueError as exc:
        raise AIExtractionError(f"Model reply is not JSON: {exc}") from exc
    try:
        return VisionAIResponse.model_validate(data).fields
    except ValidationError as exc:
        raise AIExtractionError(f"Model reply has no valid fields array: {exc}") from exc


class AIEngine:
    """AI Engine client for Vertex AI Gemini.

    Stateless per call. ``model`` may be injected; otherwise it is created by
    ``initialize()``.
    """

    def __init__(self, config: VertexConfig, model: Any = None) -> None:
        self._config = config
        self._client: Any = model
        self._initialized = model is not None

    async def initialize(self) -> bool:
        """Initialize the Vertex AI client.

        Returns True if initialization succeeds, False otherwise.
        """
        if self._initialized:
            return True
        if not self._config.project_id:
            return False

        try:
            import vertexai
            from vertexai.generative_models import GenerativeModel

            vertexai.init(
                project=self._config.project_id,
                location=self._config.location,
            )
            self._client = GenerativeModel(self._config.vision_model)
            self._initialized = True
            return True
        except Exception as exc:
            emit_structured_error(
                logger,
                code=ErrorCode.AI_INITIALIZATION_FAILED,
                message=str(exc),
                suppressed=True,
            )
            self._initialized = False
            return False

    @property
    def is_available(self) -> bool:
        return self._initialized and self._client is not None

    async def extract_fields(self, image_base64: str) -> list[VisionAIField]:
        """Send a screenshot to Gemini and return the fields it reports.

        Raises:
            AIExtractionError: if the engine is unavailable, the image is not
                valid base64, the model call fails or the reply is malformed.
        """
        if not self.is_available:
            raise AIExtractionError("AI engine is not initialized")

        try:
            image_bytes = base64.b64decode(strip_data_url(image_base64), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidImageError(f"Image is not valid base64: {exc}") from exc

        try:
            from vertexai.generative_models import GenerationConfig, Part

            response = await self._client.generate_content_async(
                [Part.from_data(data=image_bytes, mime_type="image/jpeg"), EXTRACTION_PROMPT],
                generation_config=GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                    temperature=0.1,
                ),
            )
            reply = response.text
        except Exception as exc:
            emit_structured_error(
                logger,
                code=ErrorCode.AI_EXTRACTION_FAILED,
                message=str(exc),
                suppressed=False,
                details={"image_bytes": len(image_bytes)},
            )
            raise AIExtractionError(f"Model call failed: {exc}") from exc

        fields = parse_fields_reply(reply)
        logger.info("Gemini extracted %d fields", len(fields))
        return fields
