"""
Static validation of parsed specifications.

Runs after parsing and before any plan is built or any document is read.
For every field, in order:
  (a) the selector must compile with soupsieve
  (b) the capture regex, if any, must compile; its group count is taken
  (c) the specifiers must be compatible with each other and with the
      declared type (see the rule list in `_check_field`)
Then struct references made through `elem of` must not form a cycle.

The first violation raises SpecValidationError naming the struct and field.
"""

import re
from typing import Any, Mapping, Optional

import soupsieve

from .exceptions import SpecValidationError
from .extractable import HtmlExtractor
from .logger import get_module_logger
from .schemas import (
    CollectorMode,
    ElementTarget,
    PresenceTarget,
    StructSpec,
    TupleField,
    TypeRef,
)
from .value_types import TypeResolver, collection_factory, optional_inner, resolve_reference, tuple_members

logger = get_module_logger("validator")


def value_type_of(declared: TypeRef, collector: CollectorMode) -> Optional[TypeRef]:
    """
    The type of one extracted item: the declared type for `first`, the
    element type of the collection for `collect`, the inner type for
    `optional`. None when the declared type does not fit the collector.
    """
    if collector == CollectorMode.ALL:
        return declared.args[0] if collection_factory(declared) is not None else None
    if collector == CollectorMode.OPTIONAL:
        return optional_inner(declared)
    return declared


def element_references(struct: StructSpec, resolver: TypeResolver) -> list[str]:
    """Names of the structs this struct extracts through `elem of` fields."""
    names = []
    for field in struct.fields:
        if isinstance(field.extractor.target, ElementTarget) and not isinstance(field, TupleField):
            item = value_type_of(field.decl.declared_type, field.extractor.collector)
            if item is not None and resolver.is_struct(item) and item.name not in names:
                names.append(item.name)
    return names


def is_reserved_name(name: str) -> bool:
    """Names pydantic treats as private, or that would shadow the extractor API."""
    return name.startswith("_") or hasattr(HtmlExtractor, name)


class SpecValidator:
    """Checks a list of StructSpec objects against the rules above."""

    def __init__(self, structs: list[StructSpec], namespace: Optional[Mapping[str, Any]] = None):
        self.structs = structs
        self.namespace = dict(namespace or {})
        self.resolver = TypeResolver({s.name for s in structs}, self.namespace)
        self.structs_by_name = {s.name: s for s in structs}

    def validate(self) -> None:
        seen = set()
        for struct in self.structs:
            if struct.name in seen:
                raise SpecValidationError("struct is defined more than once", struct=struct.name)
            seen.add(struct.name)
            self._check_struct(struct)

        self._check_cycles()
        logger.debug(f"Validated {len(self.structs)} structs")

    def _check_struct(self, struct: StructSpec) -> None:
        names = set()
        for field in struct.fields:
            for decl in field.members:
                if decl.name in names:
                    raise SpecValidationError("field is declared more than once",
                                              struct=struct.name, field=decl.name)
                if is_reserved_name(decl.name):
                    raise SpecValidationError("field name is reserved by the extractor base class",
                                              struct=struct.name, field=decl.name)
                names.add(decl.name)
            self._check_field(struct, field)

    def _check_field(self, struct: StructSpec, field) -> None:
        spec = field.extractor
        target = spec.target

        def fail(message: str):
            return SpecValidationError(message, struct=struct.name, field=field.label)

        # (a) selector
        try:
            soupsieve.compile(target.selector)
        except soupsieve.SelectorSyntaxError as e:
            raise fail(f"cannot parse the selector `{target.selector}`: {e}")

        # (b) regex
        groups = None
        if spec.capture is not None:
            try:
                groups = re.compile(spec.capture).groups
            except re.error as e:
                raise fail(f"cannot parse the regex `{spec.capture}`: {e}")

        # (c) specifier compatibility
        is_tuple = isinstance(field, TupleField)
        if is_tuple and spec.capture is None:
            raise fail("tuple fields require capturing with `capture with ..`")

        if isinstance(target, ElementTarget):
            if spec.capture is not None:
                raise fail("`elem of ..` and `capture with ..` cannot be used for the same field")
            if spec.parser is not None:
                raise fail("`elem of ..` and `parse with ..` cannot be used for the same field")

        if isinstance(target, PresenceTarget):
            if spec.capture is not None or spec.collector != CollectorMode.FIRST or spec.parser is not None:
                raise fail("`presence of ..` cannot be used with any other specifier")
            if field.decl.declared_type != TypeRef(name="bool"):
                raise fail(f"`presence of ..` requires type `bool`, found `{field.decl.declared_type}`")
            return

        parser = None
        if spec.parser is not None:
            try:
                parser = resolve_reference(spec.parser, self.namespace)
            except LookupError:
                raise fail(f"cannot resolve parser `{spec.parser}`")
            if not callable(parser):
                raise fail(f"parser `{spec.parser}` is not callable")

        if spec.capture is not None:
            self._check_capture(field, groups, parser is not None, fail)
            return

        value_type = self._item_type(field.decl.declared_type, spec.collector, fail)
        if isinstance(target, ElementTarget):
            if not self.resolver.is_element_type(value_type):
                raise fail(f"`elem of ..` requires a struct or Extractable type, found `{value_type}`")
            if collection_factory(field.decl.declared_type) in (set, frozenset) \
                    and not self._is_hashable(value_type, set()):
                raise fail(f"`{field.decl.declared_type}` cannot hold `{value_type}`: "
                           f"it has list or set members, which are not hashable")
        elif parser is None:
            self._require_conversion(value_type, fail)

    def _check_capture(self, field, groups: int, has_parser: bool, fail) -> None:
        spec = field.extractor

        if spec.collector == CollectorMode.ALL:
            if isinstance(field, TupleField):
                raise fail("`collect` with `capture with ..` requires a single field of a collection of tuples")
            item_type = self._item_type(field.decl.declared_type, spec.collector, fail)
            members = tuple_members(item_type)
            if members is None:
                raise fail(f"`collect` with `capture with ..` requires a collection of tuples, "
                           f"found `{field.decl.declared_type}`")
            if len(members) != groups:
                raise fail(f"the regex has {groups} capture groups but the tuple has {len(members)} members")
            if not has_parser:
                for member in members:
                    self._require_conversion(member, fail)
            return

        if not isinstance(field, TupleField):
            raise fail("capturing with regex without `collect` requires a tuple field")
        if len(field.decls) != groups:
            raise fail(f"the regex has {groups} capture groups but the tuple has {len(field.decls)} members")
        for decl in field.decls:
            member_type = self._item_type(decl.declared_type, spec.collector, fail)
            if not has_parser:
                self._require_conversion(member_type, fail)

    def _is_hashable(self, type_ref: TypeRef, seen: set) -> bool:
        """Whether values of `type_ref` can be set members; structs are checked member by member."""
        factory = collection_factory(type_ref)
        if factory is not None:
            return factory is frozenset and self._is_hashable(type_ref.args[0], seen)
        inner = optional_inner(type_ref)
        if inner is not None:
            return self._is_hashable(inner, seen)
        members = tuple_members(type_ref)
        if members is not None:
            return all(self._is_hashable(m, seen) for m in members)
        if self.resolver.is_struct(type_ref) and type_ref.name not in seen:
            seen.add(type_ref.name)
            struct = self.structs_by_name[type_ref.name]
            return all(self._is_hashable(decl.declared_type, seen)
                       for field in struct.fields for decl in field.members)
        return True

    def _item_type(self, declared: TypeRef, collector: CollectorMode, fail) -> TypeRef:
        item = value_type_of(declared, collector)
        if item is None:
            if collector == CollectorMode.ALL:
                raise fail(f"`collect` requires a list, set or frozenset type, found `{declared}`")
            raise fail(f"`optional` requires an `optional<..>` type, found `{declared}`")
        return item

    def _require_conversion(self, type_ref: TypeRef, fail) -> None:
        if self.resolver.default_parser(type_ref) is None:
            raise fail(f"no default conversion from text to `{type_ref}`; use `parse with ..`")

    def _check_cycles(self) -> None:
        """Reject reference cycles among structs, including self references."""
        edges = {s.name: element_references(s, self.resolver) for s in self.structs}

        done = set()
        path = []

        def visit(name: str) -> None:
            if name in path:
                cycle = path[path.index(name):] + [name]
                raise SpecValidationError(
                    f"struct references form a cycle: {' -> '.join(cycle)}", struct=name
                )
            if name in done:
                return
            path.append(name)
            for child in edges.get(name, []):
                visit(child)
            path.pop()
            done.add(name)

        for struct in self.structs:
            visit(struct.name)


def validate_specs(structs: list[StructSpec], namespace: Optional[Mapping[str, Any]] = None) -> None:
    """Convenience function to validate parsed specifications."""
    SpecValidator(structs, namespace).validate()
