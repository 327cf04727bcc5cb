"""Bilingual (Portuguese/English) vocabularies shared by every field heuristic.

All tables are immutable. Matching is always done against lowercased text.
"""

from __future__ import annotations

# Common field names, used by the name-likelihood check
PT_FIELD_NAMES = (
    "nome", "email", "telefone", "endereço", "cidade", "estado", "cep", "cpf", "rg",
    "data", "nascimento", "sexo", "gênero", "profissão", "empresa", "cargo",
    "salário", "observações", "senha", "confirmar", "código", "descrição",
    "título", "subtítulo", "categoria", "status", "prioridade", "anexo", "url", "site",
)

EN_FIELD_NAMES = (
    "name", "email", "phone", "address", "city", "state", "zip", "ssn", "id",
    "date", "birth", "gender", "sex", "occupation", "company", "position",
    "salary", "notes", "password", "confirm", "code", "description",
    "title", "subtitle", "category", "status", "priority", "attachment", "url", "website",
)

FIELD_NAME_PHRASES = ("campo de", "field for")

# Words that mark a free-text line as describing a field
FIELD_INDICATORS = (
    "campo", "field", "input", "entrada", "formulário", "form", "label", "rotulo",
)

REQUIRED_MARKERS = ("*", "obrigatório", "required", "mandatory")

# Imperative verbs and required-markers: the user types this value
INPUT_CUES = (
    "informe", "digite", "preencha", "insira", "forneça", "entre com", "informar",
    "digitar", "preencher", "inserir", "fornecer", "entrar com", "obrigatório",
    "enter", "input", "fill", "provide", "type", "required", "mandatory",
)

# The system produces this value
OUTPUT_CUES = (
    "calculado", "retornado", "resultado", "total", "valor final", "subtotal",
    "gerado", "processado", "computed", "calculated", "returned", "result",
    "generated", "processed", "output", "display", "shown", "presented",
)

OUTPUT_NAME_KEYWORDS = (
    "total", "subtotal", "resultado", "result", "calculado", "calculated",
    "gerado", "generated", "status", "situação",
)

INPUT_NAME_KEYWORDS = (
    "digite", "informe", "preencha", "enter", "input", "fill", "obrigatório", "required",
)

PERSONAL_FIELD_KEYWORDS = (
    "nome", "name", "email", "telefone", "phone", "endereço", "address",
    "cpf", "cnpj", "rg",
)

SYSTEM_FIELD_KEYWORDS = (
    "código", "code", "id", "criado em", "created at", "atualizado em",
    "updated at", "versão", "version",
)

# Calculation/aggregation words that make an AI-extracted field derived
DERIVED_KEYWORDS = (
    "total", "subtotal", "soma", "somatoria", "somatório",
    "media", "média", "percentual", "taxa", "calculo", "cálculo",
    "resultado", "final", "liquido", "líquido", "bruto",
    "desconto", "acrescimo", "acréscimo", "juros",
    "quantidade_total", "valor_total", "preco_final", "preço_final",
    "total_geral", "grand_total", "sum", "avg", "count",
    "average", "percentage", "gross", "discount", "grand total",
)

# Derived words too short to match inside other words ("internet", "taxonomy")
DERIVED_WHOLE_WORDS = ("net", "tax")

# Menu, button, pagination and boilerplate noise in OCR/AI output
IGNORED_TERMS = frozenset(
    {
        # pt
        "cancelar", "ações", "ajuda", "voltar", "menu", "visualizar", "arquivo",
        "configuração", "administração", "painel", "versão", "sair", "entrar",
        "salvar", "editar", "excluir", "novo", "pesquisar", "filtrar", "ordenar",
        "imprimir", "exportar", "importar", "atualizar", "fechar", "abrir",
        "copyright", "todos os direitos", "desenvolvido por", "powered by",
        "página", "próximo", "anterior", "primeiro", "último", "topo",
        "rodapé", "cabeçalho", "sistema", "aplicação", "app", "v.",
        "login", "logout", "senha", "usuário", "esqueci", "lembrar", "manter",
        "conectado", "registrar", "cadastrar", "criar conta", "entrar com",
        # en
        "cancel", "actions", "help", "back", "view", "file",
        "configuration", "administration", "dashboard", "version", "exit", "enter",
        "save", "edit", "delete", "new", "search", "filter", "sort",
        "print", "export", "import", "update", "close", "open",
        "all rights", "developed by",
        "page", "next", "previous", "first", "last", "top",
        "footer", "header", "system", "application",
        "password", "username", "forgot", "remember", "keep",
        "connected", "register", "sign up", "create account", "sign in with",
    }
)
