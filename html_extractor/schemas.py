"""
Pydantic schemas for the intermediate representation of a specification.

Data flow through the compiler:
  lexer → tokens → grammar → StructSpec list (fields carry ExtractorSpec)
  StructSpec list → validator → plan builder → generated extractor classes

All models are frozen: a specification is immutable once parsed.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Declarations ---

class VisibilityKind(str, Enum):
    PRIVATE = "private"
    PUBLIC = "public"
    PUBLIC_SCOPED = "public_scoped"


class Visibility(_Frozen):
    """`pub`, `pub(scope)` or nothing."""
    kind: VisibilityKind = VisibilityKind.PRIVATE
    scope: Optional[str] = None   # Raw scope text for PUBLIC_SCOPED, e.g. "crate"

    @property
    def is_public(self) -> bool:
        return self.kind != VisibilityKind.PRIVATE


class TypeRef(_Frozen):
    """
    A declared field type.

    `name` is the dotted type name, `args` its parameters. Tuple literals
    like `(int, str)` are stored with name "tuple".
    """
    name: str
    args: tuple["TypeRef", ...] = ()

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}<{', '.join(str(a) for a in self.args)}>"


TypeRef.model_rebuild()


# --- Extractor clause ---

class CollectorMode(str, Enum):
    FIRST = "first"         # Only the first matched element; none is an error
    ALL = "all"             # Every matched element, in document order
    OPTIONAL = "optional"   # The first matched element if any, else None


class ElementTarget(_Frozen):
    kind: Literal["elem"] = "elem"
    selector: str


class AttributeTarget(_Frozen):
    kind: Literal["attr"] = "attr"
    attribute: str
    selector: str


class TextNodeTarget(_Frozen):
    kind: Literal["text"] = "text"
    index: int = 0
    selector: str


class InnerHtmlTarget(_Frozen):
    kind: Literal["inner_html"] = "inner_html"
    selector: str


class PresenceTarget(_Frozen):
    kind: Literal["presence"] = "presence"
    selector: str


TargetSpec = Annotated[
    Union[ElementTarget, AttributeTarget, TextNodeTarget, InnerHtmlTarget, PresenceTarget],
    Field(discriminator="kind"),
]


class ExtractorSpec(_Frozen):
    """Parsed `( ... )` clause of one field definition."""
    target: TargetSpec
    capture: Optional[str] = None               # Regex source
    collector: CollectorMode = CollectorMode.FIRST
    parser: Optional[str] = None                # Dotted reference from `parse with`; None = default conversion
    line: int = 0
    column: int = 0


# --- Fields and structs ---

class FieldDecl(_Frozen):
    """`attributes visibility name: type` of a single field or a tuple member."""
    attributes: tuple[str, ...] = ()
    visibility: Visibility = Field(default_factory=Visibility)
    name: str
    declared_type: TypeRef


class SingleField(_Frozen):
    kind: Literal["single"] = "single"
    decl: FieldDecl
    extractor: ExtractorSpec

    @property
    def label(self) -> str:
        return self.decl.name

    @property
    def members(self) -> tuple[FieldDecl, ...]:
        return (self.decl,)


class TupleField(_Frozen):
    kind: Literal["tuple"] = "tuple"
    decls: tuple[FieldDecl, ...]
    extractor: ExtractorSpec

    @property
    def label(self) -> str:
        return "(" + ", ".join(d.name for d in self.decls) + ")"

    @property
    def members(self) -> tuple[FieldDecl, ...]:
        return self.decls


FieldSpec = Annotated[Union[SingleField, TupleField], Field(discriminator="kind")]


class StructSpec(_Frozen):
    """One brace-delimited struct definition."""
    attributes: tuple[str, ...] = ()
    visibility: Visibility = Field(default_factory=Visibility)
    name: str
    fields: tuple[FieldSpec, ...] = ()
    line: int = 0
    column: int = 0
