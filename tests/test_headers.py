from feedback360.core.headers import (
    CollaboratorKeyResolver,
    ParsedHeader,
    collaborator_key,
    display_name,
    parse_header,
)


def test_parse_question_and_collaborator():
    assert parse_header("Comunicação clara >> Ana") == ParsedHeader("Comunicação clara", "Ana", None)


def test_parse_inline_answer():
    parsed = parse_header(" Comunicação >>  Ana  >> Supera as expectativas ")
    assert parsed == ParsedHeader("Comunicação", "Ana", "Supera as expectativas")


def test_parse_empty_inline_answer_is_none():
    assert parse_header("Comunicação >> Ana >> ").inline_answer is None


def test_non_evaluation_headers():
    assert parse_header("Submission Date") is None
    assert parse_header("Comentário geral") is None
    assert parse_header("Pergunta >> Data") is None
    assert parse_header("Pergunta >> Submission Date") is None
    assert parse_header("Pergunta >>   ") is None
    assert parse_header(None) is None


def test_collaborator_key_merges_variants():
    assert collaborator_key("José_1") == collaborator_key(" jose ") == "jose"
    assert collaborator_key("Rafael Victor_12") == "rafael victor"


def test_display_name_drops_suffix_only():
    assert display_name("Rafael  Victor_1") == "Rafael Victor"
    assert display_name("Lúcia") == "Lúcia"


def test_resolver_keeps_first_spelling():
    resolver = CollaboratorKeyResolver()
    k1 = resolver.resolve("Ana Lúcia_2")
    k2 = resolver.resolve("ana lucia")
    assert k1 == k2
    assert resolver.display_name(k1) == "Ana Lúcia"
    assert len(resolver) == 1
    assert k1 in resolver
