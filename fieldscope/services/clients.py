"""HTTP clients for the external services used by the image orchestrator.

Each client wraps a shared ``httpx.AsyncClient`` and validates the response
shape with a pydantic model. Anything other than a well-formed success
response raises ServiceError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from fieldscope.pipeline.extraction import BoundingBox

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Raised when an external service call does not yield a usable response."""

    def __init__(self, service: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service
        self.status_code = status_code


# --- Response models ---


class VisionAIField(BaseModel):
    """One field as reported by the vision-AI service."""

    model_config = ConfigDict(extra="ignore")

    label: str | None = None
    name: str | None = None
    type: str | None = None
    category: str | None = None
    required: bool = False
    value: Any = None
    description: str | None = None


class VisionAIResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    fields: list[VisionAIField]


class OCRTextElement(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    text: str
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    bounding_box: BoundingBox | None = Field(default=None, alias="boundingBox")


class OCRResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    success: bool = True
    text_elements: list[OCRTextElement] = Field(default_factory=list, alias="textElements")
    full_text: str = Field(default="", alias="fullText")


class FieldExtractionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str
    campos: dict[str, Any] = Field(default_factory=dict)
    fonte: str = "OCR+Regex"


# --- Clients ---


class _JSONServiceClient:
    service_name = "service"

    def __init__(self, http: httpx.AsyncClient, url: str, timeout: float | None = None) -> None:
        self._http = http
        self._url = url
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._url

    async def _post(self, body: dict[str, Any]) -> Any:
        options: dict[str, Any] = {}
        if self._timeout is not None:
            options["timeout"] = self._timeout
        try:
            response = await self._http.post(self._url, json=body, **options)
        except httpx.HTTPError as exc:
            raise ServiceError(self.service_name, f"request failed: {exc}") from exc

        if response.status_code != 200:
            raise ServiceError(
                self.service_name,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ServiceError(self.service_name, "response is not JSON") from exc

    def _parse(self, model: type[BaseModel], data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ServiceError(
                self.service_name, f"unexpected response shape: {exc.error_count()} errors"
            ) from exc


class VisionAIClient(_JSONServiceClient):
    """Client for the vision-AI field extraction endpoint."""

    service_name = "vision-ai"

    async def extract_fields(self, image_base64: str) -> list[VisionAIField]:
        data = await self._post({"imageBase64": image_base64})
        parsed: VisionAIResponse = self._parse(VisionAIResponse, data)
        if not parsed.success:
            raise ServiceError(self.service_name, "service reported success=false")
        logger.debug("Vision AI returned %d fields", len(parsed.fields))
        return parsed.fields


class OCRClient(_JSONServiceClient):
    """Client for the OCR endpoint."""

    service_name = "ocr"

    async def recognize(self, image_base64: str) -> OCRResponse:
        data = await self._post({"imageBase64": image_base64})
        parsed: OCRResponse = self._parse(OCRResponse, data)
        if not parsed.success:
            raise ServiceError(self.service_name, "service reported success=false")
        logger.debug("OCR returned %d text elements", len(parsed.text_elements))
        return parsed


class FieldExtractionClient(_JSONServiceClient):
    """Client for the OCR+Regex field-extraction endpoint."""

    service_name = "field-extraction"

    async def extract(self, text: str) -> FieldExtractionResponse:
        data = await self._post({"text": text})
        return self._parse(FieldExtractionResponse, data)
