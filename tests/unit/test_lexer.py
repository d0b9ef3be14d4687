import pytest

from html_extractor.exceptions import SpecSyntaxError
from html_extractor.lexer import EOF, IDENT, INT, PUNCT, STRING, TokenStream, tokenize


def kinds_and_values(tokens):
    return [(t.kind, t.value) for t in tokens]


def test_tokenize_field_definition():
    tokens = tokenize('foo: int = (text[2] of "#foo"),')

    assert kinds_and_values(tokens) == [
        (IDENT, "foo"), (PUNCT, ":"), (IDENT, "int"), (PUNCT, "="),
        (PUNCT, "("), (IDENT, "text"), (PUNCT, "["), (INT, "2"), (PUNCT, "]"),
        (IDENT, "of"), (STRING, "#foo"), (PUNCT, ")"), (PUNCT, ","), (EOF, ""),
    ]


def test_tokens_carry_line_and_column():
    tokens = tokenize('Foo {\n    bar: str = (text of ".bar")\n}')

    bar = tokens[2]
    assert (bar.value, bar.line, bar.column) == ("bar", 2, 5)
    closing = tokens[-2]
    assert (closing.value, closing.line, closing.column) == ("}", 3, 1)


def test_comments_are_skipped():
    tokens = tokenize('// leading comment\nFoo /* inline */ { }')

    assert [t.value for t in tokens] == ["Foo", "{", "}", ""]


def test_string_escapes():
    tokens = tokenize(r'"say \"hi\"" "tab\tx" "\d+" r"\"raw\"" ' + "'single'")

    values = [t.value for t in tokens if t.kind == STRING]
    assert values == ['say "hi"', "tab\tx", r"\d+", r"\"raw\"", "single"]


def test_unterminated_string_reports_start():
    with pytest.raises(SpecSyntaxError) as exc_info:
        tokenize('Foo {\n  a: int = (text of "#a)\n}')

    assert exc_info.value.line == 2
    assert exc_info.value.column == 21
    assert "unterminated string" in str(exc_info.value)


def test_unexpected_character():
    with pytest.raises(SpecSyntaxError) as exc_info:
        tokenize("Foo { a: int = $ }", source_name="page.spec")

    assert str(exc_info.value).startswith("page.spec:1:16:")
    assert exc_info.value.token == "$"


def test_unterminated_block_comment():
    with pytest.raises(SpecSyntaxError, match="unterminated block comment"):
        tokenize("Foo /* never closed")


def test_token_stream_expect_error_names_expected_and_found():
    stream = TokenStream(tokenize("foo int"))
    stream.expect_ident()

    with pytest.raises(SpecSyntaxError, match="expected `:`, found `int`"):
        stream.expect_punct(":")


def test_token_stream_stays_on_eof():
    stream = TokenStream(tokenize(""))

    assert stream.is_finished()
    assert stream.next().kind == EOF
    assert stream.next().kind == EOF
