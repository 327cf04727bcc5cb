"""Tests for the OCR+Regex field-extraction service."""

from fieldscope.pipeline.regex_service import build_service_response, extract_key_values

SAMPLE = "\n".join(
    [
        "Nome: Maria",
        "Email: maria@exemplo.com",
        "Total: 10",
        "Salvar: ok",
        "Nome: Outra",
        "sem dois pontos",
    ]
)


class TestExtractKeyValues:
    def test_campos_and_categories(self):
        campos = extract_key_values(SAMPLE)["campos"]
        assert campos == {
            "Nome": "Maria",
            "Nome_categoria": "entrada",
            "Email": "maria@exemplo.com",
            "Email_categoria": "entrada",
            "Total": "10",
            "Total_categoria": "saida",
        }

    def test_statistics(self):
        result = extract_key_values(SAMPLE)
        assert result["estatisticas"] == {"total_linhas": 6, "campos_encontrados": 3}
        assert result["categorias"] == {"entrada": 2, "saida": 1, "neutro": 0}

    def test_value_may_contain_colons(self):
        campos = extract_key_values("Site: https://exemplo.com")["campos"]
        assert campos["Site"] == "https://exemplo.com"

    def test_key_length_bounds(self):
        long_key = "k" * 61
        campos = extract_key_values(f"A: curta\n{long_key}: longa\nOk: sim")["campos"]
        assert "A" not in campos
        assert long_key not in campos
        assert campos["Ok"] == "sim"

    def test_empty_value_skipped(self):
        assert extract_key_values("Nome:   ")["campos"] == {}

    def test_empty_text(self):
        result = extract_key_values("")
        assert result["campos"] == {}
        assert result["estatisticas"]["campos_encontrados"] == 0


class TestBuildServiceResponse:
    def test_payload_shape(self):
        response = build_service_response("Observações: nenhuma")
        assert response["status"] == "success"
        assert response["fonte"] == "regex"
        assert response["texto_completo"] == "Observações: nenhuma"
        assert response["campos"] == {
            "Observações": "nenhuma",
            "Observações_categoria": "neutro",
        }
        assert response["estatisticas"]["categorias"]["neutro"] == 1
