"""Tests for the JSON, HTML and free-text field miners."""

import json

import pytest

from fieldscope.pipeline.heuristic import mine_html, mine_json, mine_text, parse_json_input


def _by_name(fields):
    return {f.name: f for f in fields}


def _select(name, options):
    body = "".join(f"<option value='{i}'>Opção {i}</option>" for i in range(options))
    return f'<select name="{name}">{body}</select>'


class TestParseJsonInput:
    def test_object(self):
        assert parse_json_input('  {"a": 1} ') == {"a": 1}

    def test_not_json_shaped(self):
        assert parse_json_input("Nome: Maria") is None

    def test_malformed(self):
        assert parse_json_input("{not json") is None


class TestMineJson:
    def test_field_definition(self):
        raw = json.dumps({"cliente": {"label": "Nome do Cliente", "type": "text", "required": True}})
        [field] = mine_json(raw)
        assert field.name == "Nome do Cliente"
        assert field.type == "text"
        assert field.complexity == "Low"
        assert field.fp_value == 3
        assert field.required is True
        assert field.source == "JSON"
        assert field.description == "Campo Nome do Cliente"
        assert field.field_category == "entrada"

    def test_description_drives_category(self):
        raw = json.dumps({"x": {"name": "resumo", "description": "valor calculado pelo sistema"}})
        [field] = mine_json(raw)
        assert field.description == "valor calculado pelo sistema"
        assert field.field_category == "saida"

    def test_array_of_definitions(self):
        raw = json.dumps({"fields": [{"name": "email", "type": "email"}, {"name": "cpf", "label": "CPF"}]})
        fields = mine_json(raw)
        assert [f.source for f in fields] == ["JSON Array", "JSON Array"]
        email, cpf = fields
        assert (email.name, email.type, email.complexity) == ("email", "email", "Average")
        assert (cpf.name, cpf.type, cpf.complexity) == ("CPF", "text", "High")

    def test_nested_objects_are_walked(self):
        raw = json.dumps({"form": {"section": {"cidade": {"label": "Cidade"}}}})
        assert [f.name for f in mine_json(raw)] == ["Cidade"]

    def test_reserved_keys_skipped(self):
        raw = json.dumps(
            {"_meta": {"label": "Oculto"}, "id": "123", "key": "abc", "nome": "Maria"}
        )
        [field] = mine_json(raw)
        assert field.name == "Nome"
        assert field.source == "JSON Property"
        assert field.field_category == "entrada"

    def test_non_field_string_values_skipped(self):
        raw = json.dumps({"Mensagem de boas vindas": "Olá"})
        assert mine_json(raw) == []

    def test_malformed_json_yields_nothing(self):
        assert mine_json('{"a": ') == []

    def test_plain_text_yields_nothing(self):
        assert mine_json("Nome: Maria") == []


class TestMineHtml:
    FORM = """
    <form>
      <label for="nome">Nome Completo *</label>
      <input type="text" id="nome" name="nome_cliente">
      <input type="email" name="email" placeholder="Informe seu email" required>
      <input type="submit" value="Enviar">
      <textarea name="obs"></textarea>
    </form>
    """

    def test_collects_controls_and_applies_labels(self):
        fields = mine_html(self.FORM)
        assert [f.name for f in fields] == ["Nome Completo", "Email", "Obs"]
        assert {f.source for f in fields} == {"HTML"}

    def test_label_marks_required(self):
        fields = _by_name(mine_html(self.FORM))
        assert fields["Nome Completo"].required is True

    def test_required_attribute(self):
        fields = _by_name(mine_html(self.FORM))
        assert fields["Email"].required is True
        assert fields["Obs"].required is False

    def test_required_inside_attribute_value_ignored(self):
        [field] = mine_html('<input name="apelido" placeholder="not required here">')
        assert field.required is False

    def test_types_and_complexity(self):
        fields = _by_name(mine_html(self.FORM))
        assert fields["Email"].type == "email"
        assert fields["Email"].complexity == "Average"
        assert fields["Obs"].type == "textarea"
        assert fields["Obs"].complexity == "High"
        assert fields["Nome Completo"].complexity == "Low"

    def test_placeholder_becomes_description(self):
        fields = _by_name(mine_html(self.FORM))
        assert fields["Email"].description == "Informe seu email"
        assert fields["Email"].field_category == "entrada"

    @pytest.mark.parametrize(
        ("options", "expected"), [(5, "Low"), (6, "Average"), (10, "Average"), (11, "High")]
    )
    def test_select_complexity_by_option_count(self, options, expected):
        [field] = mine_html(_select("uf", options))
        assert field.type == "select"
        assert field.complexity == expected
        assert field.description == f"Select com {options} opções"

    def test_missing_identifier_gets_positional_default(self):
        [field] = mine_html('<input type="text">')
        assert field.name == "Campo 1"

    def test_data_attributes_do_not_shadow_name(self):
        [field] = mine_html('<input data-name="ignorado" name="telefone">')
        assert field.name == "Telefone"

    def test_label_for_is_case_insensitive(self):
        html = '<input name="Cidade"><label for="cidade">Cidade de Origem</label>'
        [field] = mine_html(html)
        assert field.name == "Cidade de Origem"

    def test_standalone_label(self):
        fields = mine_html("<label>Telefone</label><label>Bem vindo ao portal</label>")
        assert [(f.name, f.source) for f in fields] == [("Telefone", "HTML Label")]

    def test_text_without_markup_yields_nothing(self):
        assert mine_html("Nome: Maria") == []


class TestMineText:
    def test_key_value_line(self):
        fields = mine_text("Email: usuario@exemplo.com")
        kv = [f for f in fields if f.source == "Text KeyValue"]
        assert len(kv) == 1
        assert kv[0].name == "Email"
        assert kv[0].type == "email"
        assert kv[0].complexity == "Average"
        assert kv[0].fp_value == 4
        assert kv[0].description == "usuario@exemplo.com"

    def test_indicator_prefix_and_required_marker(self):
        [field] = mine_text("Campo: Nome do cliente *")
        assert field.name == "Nome do cliente"
        assert field.required is True
        assert field.source == "Text"

    def test_required_word_stripped(self):
        fields = _by_name(mine_text("Telefone (obrigatório)"))
        assert fields["Telefone"].required is True

    def test_markup_is_stripped(self):
        assert [f.name for f in mine_text("<b>Cidade</b>")] == ["Cidade"]

    def test_short_lines_skipped(self):
        assert mine_text("ab\n\n  \n") == []

    def test_ignored_key_not_emitted_as_key_value(self):
        fields = mine_text("Senha: 1234")
        assert all(f.source != "Text KeyValue" for f in fields)

    def test_unrelated_prose_yields_nothing(self):
        assert mine_text("Bem vindo ao portal") == []
