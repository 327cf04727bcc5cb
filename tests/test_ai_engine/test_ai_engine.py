"""Tests for the Gemini vision adapter."""

from __future__ import annotations

import base64

import pytest

from fieldscope.ai_engine.engine import (
    AIEngine,
    AIExtractionError,
    InvalidImageError,
    parse_fields_reply,
    strip_code_fences,
    strip_data_url,
)
from fieldscope.config.settings import VertexConfig

IMAGE = base64.b64encode(b"\x89PNG fake image bytes").decode()


class _Reply:
    def __init__(self, text: str) -> None:
        self.text = text


class _FakeModel:
    def __init__(self, text: str | None = None, error: Exception | None = None) -> None:
        self._text = text
        self._error = error
        self.calls: list[tuple] = []

    async def generate_content_async(self, contents, generation_config=None):
        self.calls.append((contents, generation_config))
        if self._error:
            raise self._error
        return _Reply(self._text)


class TestReplyParsing:
    def test_strip_data_url(self):
        assert strip_data_url(f"data:image/png;base64,{IMAGE}") == IMAGE
        assert strip_data_url(IMAGE) == IMAGE

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"fields": []}\n```') == '{"fields": []}'
        assert strip_code_fences('{"fields": []}') == '{"fields": []}'

    def test_parse_fenced_reply(self):
        fields = parse_fields_reply(
            '```json\n{"fields": [{"label": "Nome", "name": "nome", "type": "text"}]}\n```'
        )
        assert [(f.label, f.name, f.type) for f in fields] == [("Nome", "nome", "text")]

    def test_parse_rejects_non_json(self):
        with pytest.raises(AIExtractionError):
            parse_fields_reply("Desculpe, não consegui ler a imagem.")

    def test_parse_rejects_missing_fields(self):
        with pytest.raises(AIExtractionError):
            parse_fields_reply('{"campos": []}')


class TestAIEngine:
    @pytest.mark.asyncio
    async def test_unavailable_without_project(self):
        engine = AIEngine(VertexConfig(project_id=""))
        assert await engine.initialize() is False
        assert not engine.is_available
        with pytest.raises(AIExtractionError):
            await engine.extract_fields(IMAGE)

    @pytest.mark.asyncio
    async def test_injected_model_is_available(self):
        engine = AIEngine(VertexConfig(project_id=""), model=_FakeModel("{}"))
        assert engine.is_available
        assert await engine.initialize() is True

    @pytest.mark.asyncio
    async def test_extract_fields(self):
        model = _FakeModel('{"fields": [{"label": "Email", "name": "email", "type": "email"}]}')
        engine = AIEngine(VertexConfig(project_id=""), model=model)

        fields = await engine.extract_fields(f"data:image/jpeg;base64,{IMAGE}")

        assert [f.name for f in fields] == ["email"]
        assert len(model.calls) == 1

    @pytest.mark.asyncio
    async def test_invalid_base64(self):
        engine = AIEngine(VertexConfig(project_id=""), model=_FakeModel("{}"))
        with pytest.raises(InvalidImageError):
            await engine.extract_fields("não é base64!!")

    @pytest.mark.asyncio
    async def test_model_failure_is_logged_and_raised(self, caplog):
        engine = AIEngine(VertexConfig(project_id=""), model=_FakeModel(error=RuntimeError("quota")))
        with caplog.at_level("ERROR", logger="fieldscope.ai_engine.engine"):
            with pytest.raises(AIExtractionError, match="quota"):
                await engine.extract_fields(IMAGE)
        [record] = [r for r in caplog.records if r.getMessage() == "fieldscope_error"]
        assert record.error_code.value == "AI_EXTRACTION_FAILED"
        assert record.suppressed is False
