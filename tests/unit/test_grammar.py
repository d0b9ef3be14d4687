import pytest

from html_extractor.exceptions import SpecSyntaxError
from html_extractor.grammar import parse_spec
from html_extractor.schemas import (
    AttributeTarget,
    CollectorMode,
    ElementTarget,
    InnerHtmlTarget,
    PresenceTarget,
    SingleField,
    TextNodeTarget,
    TupleField,
    TypeRef,
    VisibilityKind,
)


def only_field(text):
    [struct] = parse_spec(text)
    [field] = struct.fields
    return field


def test_parse_multiple_structs_with_attributes_and_visibility():
    structs = parse_spec("""
        #[derive(Debug, PartialEq)]
        pub Foo {
            foo: int = (text of "#foo"),
        }
        pub(crate) Bar {}
        Baz { baz: str = (text of "#baz") }
    """)

    assert [s.name for s in structs] == ["Foo", "Bar", "Baz"]
    assert structs[0].attributes == ("#[derive(Debug, PartialEq)]",)
    assert structs[0].visibility.kind == VisibilityKind.PUBLIC
    assert structs[1].visibility.kind == VisibilityKind.PUBLIC_SCOPED
    assert structs[1].visibility.scope == "crate"
    assert structs[1].fields == ()
    assert structs[2].visibility.kind == VisibilityKind.PRIVATE


def test_single_field_declaration():
    field = only_field('Foo { pub(super) foo: list<int> = (text of ".foo", collect) }')

    assert isinstance(field, SingleField)
    assert field.decl.name == "foo"
    assert field.decl.visibility.scope == "super"
    assert field.decl.declared_type == TypeRef(name="list", args=(TypeRef(name="int"),))
    assert field.extractor.collector == CollectorMode.ALL


def test_tuple_field_declaration():
    field = only_field(
        'Foo { (foo: int, pub bar: float,) = (text of "#x", capture with "foo=(.*), bar=(.*)") }'
    )

    assert isinstance(field, TupleField)
    assert [d.name for d in field.decls] == ["foo", "bar"]
    assert field.decls[1].visibility.kind == VisibilityKind.PUBLIC
    assert field.decls[1].declared_type == TypeRef(name="float")
    assert field.label == "(foo, bar)"
    assert field.extractor.capture == "foo=(.*), bar=(.*)"


@pytest.mark.parametrize("source, expected", [
    ("int", TypeRef(name="int")),
    ("list[str]", TypeRef(name="list", args=(TypeRef(name="str"),))),
    ("(int, str)", TypeRef(name="tuple", args=(TypeRef(name="int"), TypeRef(name="str")))),
    ("optional<(int,)>", TypeRef(name="optional", args=(TypeRef(name="tuple", args=(TypeRef(name="int"),)),))),
    ("shop.Currency", TypeRef(name="shop.Currency")),
])
def test_type_expressions(source, expected):
    field = only_field(f'Foo {{ a: {source} = (text of "#a", parse with str) }}')

    assert field.decl.declared_type == expected


def test_field_named_pub_is_not_a_visibility():
    field = only_field('Foo { pub: str = (text of "#pub") }')

    assert field.decl.name == "pub"
    assert field.decl.visibility.kind == VisibilityKind.PRIVATE


def test_all_targets():
    [struct] = parse_spec("""
        Foo {
            a: Inner = (elem of "#a"),
            b: int = (attr["data-b"] of "#b"),
            c: int = (text of "#c"),
            d: int = (text[3] of "#d"),
            e: str = (inner_html of "#e"),
            f: bool = (presence of "#f"),
        }
    """)
    targets = [f.extractor.target for f in struct.fields]

    assert targets == [
        ElementTarget(selector="#a"),
        AttributeTarget(attribute="data-b", selector="#b"),
        TextNodeTarget(index=0, selector="#c"),
        TextNodeTarget(index=3, selector="#d"),
        InnerHtmlTarget(selector="#e"),
        PresenceTarget(selector="#f"),
    ]


def test_clauses_in_any_order_and_last_write_wins():
    field = only_field(
        'Foo { a: optional<int> = (collect, parse with parse_price, text of "#x", '
        'optional, text of "#a", parse with int,) }'
    )
    spec = field.extractor

    assert spec.target == TextNodeTarget(index=0, selector="#a")
    assert spec.collector == CollectorMode.OPTIONAL
    assert spec.parser == "int"


def test_dotted_parser_reference():
    field = only_field('Foo { a: Decimal = (text of "#a", parse with decimal.Decimal) }')

    assert field.extractor.parser == "decimal.Decimal"


def test_missing_colon_names_expected_token():
    with pytest.raises(SpecSyntaxError) as exc_info:
        parse_spec('Foo { foo int = (text of "#a") }')

    assert "expected `:`, found `int`" in str(exc_info.value)
    assert (exc_info.value.line, exc_info.value.column) == (1, 11)


def test_missing_equals():
    with pytest.raises(SpecSyntaxError, match="expected `=`"):
        parse_spec('Foo { foo: int (text of "#a") }')


def test_unknown_clause_keyword():
    with pytest.raises(SpecSyntaxError, match="found `bogus`"):
        parse_spec('Foo { foo: int = (text of "#a", bogus) }')


def test_missing_target():
    with pytest.raises(SpecSyntaxError, match="target is not specified"):
        parse_spec('Foo { foo: list<int> = (collect) }')


def test_selector_must_be_a_string():
    with pytest.raises(SpecSyntaxError, match="expected selector string"):
        parse_spec('Foo { foo: int = (text of foo) }')


def test_text_index_must_be_an_integer():
    with pytest.raises(SpecSyntaxError, match="expected text node index"):
        parse_spec('Foo { foo: int = (text["1"] of "#a") }')


def test_unclosed_struct_body():
    with pytest.raises(SpecSyntaxError, match="expected `}`"):
        parse_spec('Foo { foo: int = (text of "#a")')


def test_fields_need_separators():
    with pytest.raises(SpecSyntaxError, match="expected `}`"):
        parse_spec('Foo { a: int = (text of "#a") b: int = (text of "#b") }')


def test_empty_specification():
    assert parse_spec("  // nothing here\n") == []


def test_unclosed_attribute_group():
    with pytest.raises(SpecSyntaxError, match="expected `\\)`, found end of input"):
        parse_spec("#[derive(Debug")
