"""Tests for the external service HTTP clients."""

from __future__ import annotations

import json

import httpx
import pytest

from fieldscope.services.clients import (
    FieldExtractionClient,
    OCRClient,
    ServiceError,
    VisionAIClient,
)


def _http(status: int = 200, body=None, raw: bytes | None = None, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if raw is not None:
            return httpx.Response(status, content=raw)
        return httpx.Response(status, json=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestVisionAIClient:
    @pytest.mark.asyncio
    async def test_posts_image_and_parses_fields(self):
        seen: list[httpx.Request] = []
        http = _http(body={"success": True, "fields": [{"label": "Nome", "name": "nome"}]}, seen=seen)
        fields = await VisionAIClient(http, "http://vision.test/x").extract_fields("aW1n")

        assert [f.label for f in fields] == ["Nome"]
        assert json.loads(seen[0].content) == {"imageBase64": "aW1n"}
        assert seen[0].method == "POST"

    @pytest.mark.asyncio
    async def test_non_ok_status_raises(self):
        client = VisionAIClient(_http(status=500, body={}), "http://vision.test/x")
        with pytest.raises(ServiceError) as excinfo:
            await client.extract_fields("aW1n")
        assert excinfo.value.status_code == 500
        assert excinfo.value.service == "vision-ai"

    @pytest.mark.asyncio
    async def test_missing_fields_array_raises(self):
        client = VisionAIClient(_http(body={"success": True}), "http://vision.test/x")
        with pytest.raises(ServiceError):
            await client.extract_fields("aW1n")

    @pytest.mark.asyncio
    async def test_success_false_raises(self):
        client = VisionAIClient(_http(body={"success": False, "fields": []}), "http://vision.test/x")
        with pytest.raises(ServiceError):
            await client.extract_fields("aW1n")

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        client = VisionAIClient(_http(raw=b"<html>oops</html>"), "http://vision.test/x")
        with pytest.raises(ServiceError):
            await client.extract_fields("aW1n")

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        with pytest.raises(ServiceError):
            await VisionAIClient(http, "http://vision.test/x", timeout=1.0).extract_fields("aW1n")


class TestOCRClient:
    @pytest.mark.asyncio
    async def test_parses_text_elements(self):
        body = {
            "success": True,
            "textElements": [
                {"text": "Nome", "confidence": 0.9, "boundingBox": {"x": 1, "y": 2, "width": 3, "height": 4}},
                {"text": "Email"},
            ],
            "fullText": "Nome\nEmail",
        }
        response = await OCRClient(_http(body=body), "http://ocr.test/x").recognize("aW1n")
        assert [e.text for e in response.text_elements] == ["Nome", "Email"]
        assert response.text_elements[0].bounding_box.height == 4
        assert response.text_elements[1].confidence is None
        assert response.full_text == "Nome\nEmail"

    @pytest.mark.asyncio
    async def test_success_false_raises(self):
        client = OCRClient(_http(body={"success": False}), "http://ocr.test/x")
        with pytest.raises(ServiceError):
            await client.recognize("aW1n")


class TestFieldExtractionClient:
    @pytest.mark.asyncio
    async def test_posts_text(self):
        seen: list[httpx.Request] = []
        http = _http(body={"status": "success", "campos": {"Nome": "Maria"}, "fonte": "regex"}, seen=seen)
        response = await FieldExtractionClient(http, "http://regex.test/x").extract("Nome: Maria")

        assert json.loads(seen[0].content) == {"text": "Nome: Maria"}
        assert response.campos == {"Nome": "Maria"}
        assert response.fonte == "regex"

    @pytest.mark.asyncio
    async def test_default_fonte(self):
        http = _http(body={"status": "success", "campos": {}})
        response = await FieldExtractionClient(http, "http://regex.test/x").extract("x")
        assert response.fonte == "OCR+Regex"

    @pytest.mark.asyncio
    async def test_missing_status_raises(self):
        http = _http(body={"campos": {}})
        with pytest.raises(ServiceError):
            await FieldExtractionClient(http, "http://regex.test/x").extract("x")
