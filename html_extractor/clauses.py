"""
Parser for the extractor clause of a field definition.

```
extractor := '(' clause (',' clause)* ','? ')'
clause    := 'elem' 'of' STRING
           | 'attr' '[' STRING ']' 'of' STRING
           | 'text' ('[' INT ']')? 'of' STRING
           | 'inner_html' 'of' STRING
           | 'presence' 'of' STRING
           | 'capture' 'with' STRING
           | 'collect' | 'optional'
           | 'parse' 'with' NAME ('.' NAME)*
```

Clauses may appear in any order. Writing the same kind of clause twice
keeps the later one; `collect` and `optional` overwrite each other.
Combination rules are checked later by the validator, not here.
"""

from typing import Optional

from .exceptions import SpecSyntaxError
from .lexer import IDENT, INT, TokenStream
from .schemas import (
    AttributeTarget,
    CollectorMode,
    ElementTarget,
    ExtractorSpec,
    InnerHtmlTarget,
    PresenceTarget,
    TextNodeTarget,
)

CLAUSE_KEYWORDS = (
    "elem", "attr", "text", "inner_html", "presence",
    "capture", "collect", "optional", "parse",
)
_EXPECTED_CLAUSE = ", ".join(f"`{k}`" for k in CLAUSE_KEYWORDS[:-1]) + f" or `{CLAUSE_KEYWORDS[-1]}`"


def _selector(ts: TokenStream) -> str:
    ts.expect_ident(word="of")
    return ts.expect_string("selector string").value


def _parser_reference(ts: TokenStream) -> str:
    parts = [ts.expect_ident("parser name").value]
    while ts.peek().is_punct("."):
        ts.next()
        parts.append(ts.expect_ident("parser name").value)
    return ".".join(parts)


def parse_extractor(ts: TokenStream) -> ExtractorSpec:
    """Parse one parenthesized extractor clause from the token stream."""
    opening = ts.expect_punct("(")

    target = None
    capture: Optional[str] = None
    collector = CollectorMode.FIRST
    parser: Optional[str] = None

    while not ts.peek().is_punct(")"):
        keyword = ts.peek()
        if keyword.kind != IDENT or keyword.value not in CLAUSE_KEYWORDS:
            raise ts.error(_EXPECTED_CLAUSE)
        ts.next()

        if keyword.value == "elem":
            target = ElementTarget(selector=_selector(ts))
        elif keyword.value == "attr":
            ts.expect_punct("[")
            attribute = ts.expect_string("attribute name string").value
            ts.expect_punct("]")
            target = AttributeTarget(attribute=attribute, selector=_selector(ts))
        elif keyword.value == "text":
            index = 0
            if ts.accept_punct("["):
                if ts.peek().kind != INT:
                    raise ts.error("text node index")
                index = int(ts.next().value)
                ts.expect_punct("]")
            target = TextNodeTarget(index=index, selector=_selector(ts))
        elif keyword.value == "inner_html":
            target = InnerHtmlTarget(selector=_selector(ts))
        elif keyword.value == "presence":
            target = PresenceTarget(selector=_selector(ts))
        elif keyword.value == "capture":
            ts.expect_ident(word="with")
            capture = ts.expect_string("regex string").value
        elif keyword.value == "collect":
            collector = CollectorMode.ALL
        elif keyword.value == "optional":
            collector = CollectorMode.OPTIONAL
        else:
            ts.expect_ident(word="with")
            parser = _parser_reference(ts)

        if not ts.accept_punct(","):
            break

    ts.expect_punct(")")

    if target is None:
        raise SpecSyntaxError("target is not specified", opening.line, opening.column,
                              ts.source_name, opening.value)

    return ExtractorSpec(
        target=target,
        capture=capture,
        collector=collector,
        parser=parser,
        line=opening.line,
        column=opening.column,
    )
