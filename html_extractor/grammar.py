"""
Grammar parser for the extraction specification language.

```
spec         := struct*
struct       := attribute* visibility NAME '{' (field (',' field)* ','?)? '}'
field        := single_field | tuple_field
single_field := attribute* visibility NAME ':' type '=' extractor
tuple_field  := '(' decl (',' decl)* ','? ')' '=' extractor
decl         := attribute* visibility NAME ':' type
attribute    := '#' '[' ... ']'
visibility   := ε | 'pub' | 'pub' '(' scope ')'
type         := '(' type (',' type)* ','? ')'
              | NAME ('.' NAME)* (('<' types '>') | ('[' types ']'))?
```

The `extractor` clause is handled by `clauses.parse_extractor`. Parsing
stops at the first unexpected token with a SpecSyntaxError naming what was
expected; a specification is never partially accepted.
"""

from typing import Optional

from .clauses import parse_extractor
from .lexer import EOF, IDENT, PUNCT, STRING, Token, TokenStream, tokenize
from .schemas import (
    FieldDecl,
    SingleField,
    StructSpec,
    TupleField,
    TypeRef,
    Visibility,
    VisibilityKind,
)
from .logger import get_module_logger

logger = get_module_logger("grammar")

_CLOSING = {"(": ")", "[": "]", "{": "}"}


def join_tokens(tokens: list[Token]) -> str:
    """Render tokens back to compact source text (`crate :: foo` → `crate::foo`)."""
    parts = []
    previous = None
    for token in tokens:
        if previous is not None and (
            (token.kind != PUNCT and previous.kind != PUNCT)
            or token.is_punct("=")
            or previous.is_punct("=")
            or previous.is_punct(",")
        ):
            parts.append(" ")
        parts.append(f'"{token.value}"' if token.kind == STRING else token.value)
        previous = token
    return "".join(parts)


class SpecParser:
    """Recursive-descent parser producing StructSpec objects."""

    def __init__(self, stream: TokenStream):
        self.ts = stream

    def parse(self) -> list[StructSpec]:
        structs = []
        while not self.ts.is_finished():
            structs.append(self.parse_struct())
        return structs

    def parse_struct(self) -> StructSpec:
        attributes = self.parse_attributes()
        start = self.ts.peek()
        visibility = self.parse_visibility()
        name = self.ts.expect_ident("struct name")

        self.ts.expect_punct("{")
        fields = []
        while not self.ts.peek().is_punct("}"):
            if self.ts.is_finished():
                raise self.ts.error("`}`")
            fields.append(self.parse_field())
            if not self.ts.accept_punct(","):
                break
        self.ts.expect_punct("}")

        logger.debug(f"Parsed struct {name.value} with {len(fields)} fields")
        return StructSpec(
            attributes=attributes,
            visibility=visibility,
            name=name.value,
            fields=tuple(fields),
            line=start.line,
            column=start.column,
        )

    def parse_field(self):
        if self.ts.peek().is_punct("("):
            self.ts.next()
            decls = []
            while not self.ts.peek().is_punct(")"):
                decls.append(self.parse_decl())
                if not self.ts.accept_punct(","):
                    break
            if not decls:
                raise self.ts.error("tuple member declaration")
            self.ts.expect_punct(")")
            self.ts.expect_punct("=")
            return TupleField(decls=tuple(decls), extractor=parse_extractor(self.ts))

        decl = self.parse_decl()
        self.ts.expect_punct("=")
        return SingleField(decl=decl, extractor=parse_extractor(self.ts))

    def parse_decl(self) -> FieldDecl:
        attributes = self.parse_attributes()
        visibility = self.parse_visibility()
        name = self.ts.expect_ident("field name")
        self.ts.expect_punct(":")
        declared_type = self.parse_type()
        return FieldDecl(
            attributes=attributes,
            visibility=visibility,
            name=name.value,
            declared_type=declared_type,
        )

    def parse_attributes(self) -> tuple[str, ...]:
        attributes = []
        while self.ts.peek().is_punct("#"):
            self.ts.next()
            self.ts.expect_punct("[")
            body = self._take_group("]")
            attributes.append(f"#[{join_tokens(body)}]")
        return tuple(attributes)

    def parse_visibility(self) -> Visibility:
        token = self.ts.peek()
        # `pub: T` is a field named pub, not a visibility
        if not token.is_ident("pub") or self.ts.peek(1).is_punct(":"):
            return Visibility()
        self.ts.next()
        if self.ts.peek().is_punct("("):
            self.ts.next()
            scope = self._take_group(")")
            if not scope:
                raise self.ts.error("visibility scope")
            return Visibility(kind=VisibilityKind.PUBLIC_SCOPED, scope=join_tokens(scope))
        return Visibility(kind=VisibilityKind.PUBLIC)

    def parse_type(self) -> TypeRef:
        if self.ts.accept_punct("("):
            args = self._parse_type_list(")")
            return TypeRef(name="tuple", args=args)

        name = self.ts.expect_ident("type").value
        while self.ts.peek().is_punct(".") and self.ts.peek(1).kind == IDENT:
            self.ts.next()
            name += "." + self.ts.next().value

        if self.ts.accept_punct("<"):
            return TypeRef(name=name, args=self._parse_type_list(">"))
        if self.ts.accept_punct("["):
            return TypeRef(name=name, args=self._parse_type_list("]"))
        return TypeRef(name=name)

    def _parse_type_list(self, closing: str) -> tuple[TypeRef, ...]:
        args = []
        while not self.ts.peek().is_punct(closing):
            args.append(self.parse_type())
            if not self.ts.accept_punct(","):
                break
        self.ts.expect_punct(closing)
        return tuple(args)

    def _take_group(self, closing: str) -> list[Token]:
        """Consume tokens up to the matching `closing` bracket (already inside the group)."""
        body = []
        stack = [closing]
        while True:
            token = self.ts.peek()
            if token.kind == EOF:
                raise self.ts.error(f"`{stack[-1]}`")
            self.ts.next()
            if token.kind == PUNCT and token.value in _CLOSING:
                stack.append(_CLOSING[token.value])
            elif token.kind == PUNCT and token.value == stack[-1]:
                stack.pop()
                if not stack:
                    return body
            elif token.kind == PUNCT and token.value in _CLOSING.values():
                raise self.ts.error(f"`{stack[-1]}`", token)
            body.append(token)


def parse_spec(text: str, source_name: Optional[str] = None) -> list[StructSpec]:
    """Tokenize and parse specification text into struct definitions."""
    tokens = tokenize(text, source_name)
    return SpecParser(TokenStream(tokens, source_name)).parse()
