import enum
from datetime import date
from decimal import Decimal
from typing import Any, Optional

import pytest

from html_extractor.schemas import TypeRef
from html_extractor.value_types import (
    TypeResolver,
    collection_factory,
    is_wrapper,
    optional_inner,
    parse_bool,
    resolve_reference,
    tuple_members,
)


class Color(enum.Enum):
    RED = "red"


class Widget:
    @classmethod
    def extract(cls, element):
        return cls()


def ref(name, *args):
    return TypeRef(name=name, args=args)


@pytest.mark.parametrize("text, expected", [("true", True), ("False", False), ("TRUE", True)])
def test_parse_bool(text, expected):
    assert parse_bool(text) is expected


def test_parse_bool_rejects_other_text():
    with pytest.raises(ValueError):
        parse_bool("yes")


def test_wrapper_helpers():
    assert collection_factory(ref("List", ref("int"))) is list
    assert collection_factory(ref("frozenset", ref("int"))) is frozenset
    assert collection_factory(ref("list")) is None
    assert optional_inner(ref("Optional", ref("str"))) == ref("str")
    assert tuple_members(ref("tuple", ref("int"), ref("str"))) == (ref("int"), ref("str"))
    assert is_wrapper(ref("set", ref("int")))
    assert not is_wrapper(ref("int"))


def test_resolve_reference_lookup_order():
    assert resolve_reference("int") is int
    assert resolve_reference("int", {"int": float}) is float
    assert resolve_reference("decimal.Decimal") is Decimal
    assert resolve_reference("Color.RED", {"Color": Color}) is Color.RED

    with pytest.raises(LookupError):
        resolve_reference("not_a_name")
    with pytest.raises(LookupError):
        resolve_reference("int.nope")


def test_default_parsers():
    resolver = TypeResolver({"Inner"}, {"Color": Color, "Widget": Widget})

    assert resolver.default_parser(ref("int")) is int
    assert resolver.default_parser(ref("decimal"))("1.5") == Decimal("1.5")
    assert resolver.default_parser(ref("date"))("2024-01-31") == date(2024, 1, 31)
    assert resolver.default_parser(ref("Color")) is Color
    assert resolver.default_parser(ref("Inner")) is None
    assert resolver.default_parser(ref("Widget")) is None
    assert resolver.default_parser(ref("list", ref("int"))) is None
    assert resolver.default_parser(ref("Unknown")) is None


def test_element_types():
    resolver = TypeResolver({"Inner"}, {"Widget": Widget, "Color": Color})

    assert resolver.is_element_type(ref("Inner"))
    assert resolver.is_element_type(ref("Widget"))
    assert not resolver.is_element_type(ref("Color"))
    assert not resolver.is_element_type(ref("str"))


def test_annotations():
    inner_cls = type("Inner", (), {})
    resolver = TypeResolver({"Inner"}, {"Color": Color})
    classes = {"Inner": inner_cls}

    assert resolver.annotation(ref("list", ref("int")), classes) == list[int]
    assert resolver.annotation(ref("optional", ref("Inner")), classes) == Optional[inner_cls]
    assert resolver.annotation(ref("tuple", ref("int"), ref("str")), classes) == tuple[int, str]
    assert resolver.annotation(ref("Color"), classes) is Color
    assert resolver.annotation(ref("decimal"), classes) is Decimal
    assert resolver.annotation(ref("Money"), classes) is Any
