"""
Extraction plan builder.

Turns validated StructSpec objects into:
  - one generated HtmlExtractor subclass per struct (a frozen pydantic model
    with one field per declared field; tuple fields are flattened)
  - one StructPlan per struct, holding a FieldPlan per field definition

A FieldPlan binds the field's selector, capture regex, resolved parsers and,
for `elem of` fields, the nested Extractable class. Selectors and regexes
are compiled lazily on first use, once, and then shared read-only by every
extraction call in every thread.
"""

import re
import threading
from dataclasses import dataclass, field as dc_field
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

import soupsieve
from pydantic import create_model

from .extractable import HtmlExtractor
from .extractor import extract_struct
from .logger import get_module_logger
from .schemas import CollectorMode, ElementTarget, PresenceTarget, StructSpec, TupleField
from .validator import element_references, value_type_of
from .value_types import TypeResolver, collection_factory, resolve_reference, tuple_members

logger = get_module_logger("plan")

T = TypeVar("T")
_UNSET = object()


class WriteOnce(Generic[T]):
    """A value computed by `factory` on first access, then never recomputed."""

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._value: Any = _UNSET
        self._lock = threading.Lock()

    def get(self) -> T:
        value = self._value
        if value is _UNSET:
            with self._lock:
                if self._value is _UNSET:
                    self._value = self._factory()
                value = self._value
        return value

    @property
    def initialized(self) -> bool:
        return self._value is not _UNSET


@dataclass(eq=False)
class FieldPlan:
    """Executable recipe for one field definition."""
    struct_name: str
    label: str                               # Field name, or "(a, b)" for tuple fields
    member_names: tuple[str, ...]
    is_tuple: bool
    target: Any                              # One of the TargetSpec models
    collector: CollectorMode
    capture: Optional[str] = None
    parsers: tuple[Callable[[str], Any], ...] = ()   # One per capture group, or one for the whole text
    nested: Any = None                       # Extractable class for `elem of`
    factory: Optional[type] = None           # list / set / frozenset for `collect`
    _selector: WriteOnce = dc_field(init=False, repr=False)
    _regex: Optional[WriteOnce] = dc_field(init=False, repr=False)

    def __post_init__(self):
        selector = self.target.selector
        self._selector = WriteOnce(lambda: soupsieve.compile(selector))
        capture = self.capture
        self._regex = WriteOnce(lambda: re.compile(capture)) if capture is not None else None

    @property
    def selector(self) -> soupsieve.SoupSieve:
        return self._selector.get()

    @property
    def regex(self) -> Optional[re.Pattern]:
        return self._regex.get() if self._regex is not None else None


@dataclass(eq=False)
class StructPlan:
    """All field recipes of one struct, plus the class that assembles the result."""
    name: str
    model: type
    fields: list[FieldPlan]

    def run(self, element) -> HtmlExtractor:
        return extract_struct(self, element)


class PlanBuilder:
    """Builds generated classes and their plans for a validated specification."""

    def __init__(self, structs: list[StructSpec], namespace: Optional[Mapping[str, Any]] = None):
        self.structs = structs
        self.namespace = dict(namespace or {})
        self.resolver = TypeResolver({s.name for s in structs}, self.namespace)

    def build(self) -> dict[str, type]:
        """Return generated classes by struct name, in definition order."""
        classes: dict[str, type] = {}
        for struct in self._dependency_order():
            classes[struct.name] = self._create_model(struct, classes)

        for struct in self.structs:
            model = classes[struct.name]
            plan = StructPlan(
                name=struct.name,
                model=model,
                fields=[self._field_plan(struct, f, classes) for f in struct.fields],
            )
            model.__extraction_plan__ = plan

        logger.debug(f"Built plans for {len(classes)} structs")
        return {s.name: classes[s.name] for s in self.structs}

    def _dependency_order(self) -> list[StructSpec]:
        """Structs ordered so every nested struct comes before its users."""
        by_name = {s.name: s for s in self.structs}
        ordered, seen = [], set()

        def visit(struct: StructSpec) -> None:
            if struct.name in seen:
                return
            seen.add(struct.name)
            for name in element_references(struct, self.resolver):
                visit(by_name[name])
            ordered.append(struct)

        for struct in self.structs:
            visit(struct)
        return ordered

    def _create_model(self, struct: StructSpec, classes: Mapping[str, type]) -> type:
        definitions = {}
        for field in struct.fields:
            custom = field.extractor.parser is not None
            for decl in field.members:
                annotation = Any if custom else self.resolver.annotation(decl.declared_type, classes)
                definitions[decl.name] = (annotation, ...)

        model = create_model(struct.name, __base__=HtmlExtractor, **definitions)
        model.__struct_spec__ = struct
        return model

    def _field_plan(self, struct: StructSpec, field, classes: Mapping[str, type]) -> FieldPlan:
        spec = field.extractor
        is_tuple = isinstance(field, TupleField)
        plan = dict(
            struct_name=struct.name,
            label=field.label,
            member_names=tuple(d.name for d in field.members),
            is_tuple=is_tuple,
            target=spec.target,
            collector=spec.collector,
            capture=spec.capture,
        )
        if spec.collector == CollectorMode.ALL:
            plan["factory"] = collection_factory(field.members[0].declared_type)

        if isinstance(spec.target, PresenceTarget):
            return FieldPlan(**plan)

        if isinstance(spec.target, ElementTarget):
            item = value_type_of(field.decl.declared_type, spec.collector)
            plan["nested"] = classes.get(item.name) or self.resolver.extractable_class(item)
            return FieldPlan(**plan)

        custom = resolve_reference(spec.parser, self.namespace) if spec.parser else None
        if spec.capture is None:
            item_types = [value_type_of(field.decl.declared_type, spec.collector)]
        elif is_tuple:
            item_types = [value_type_of(d.declared_type, spec.collector) for d in field.decls]
        else:
            item_types = list(tuple_members(value_type_of(field.decl.declared_type, spec.collector)))

        plan["parsers"] = tuple(custom or self.resolver.default_parser(t) for t in item_types)
        return FieldPlan(**plan)


def build_plans(structs: list[StructSpec], namespace: Optional[Mapping[str, Any]] = None) -> dict[str, type]:
    """Convenience function to build generated classes for validated specifications."""
    return PlanBuilder(structs, namespace).build()
