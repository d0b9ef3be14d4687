"""
Declared field types: default string-to-value conversions and Python annotations.

A TypeRef names either a leaf type (int, str, a struct, a namespace class),
a collection used by `collect` (list, set, frozenset), a fixed tuple used by
regex captures, or `optional<T>` used by the `optional` collector.
"""

import builtins
import importlib
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from .extractable import is_extractable
from .schemas import TypeRef


def parse_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"invalid boolean literal {text!r}")


# Leaf types with a built-in conversion: name → (parser, annotation)
LEAF_TYPES: dict[str, tuple[Callable[[str], Any], Any]] = {
    "int": (int, int),
    "float": (float, float),
    "str": (str, str),
    "bool": (parse_bool, bool),
    "decimal": (Decimal, Decimal),
    "Decimal": (Decimal, Decimal),
    "date": (date.fromisoformat, date),
    "datetime": (datetime.fromisoformat, datetime),
}

COLLECTIONS = {
    "list": list, "List": list,
    "set": set, "Set": set,
    "frozenset": frozenset, "FrozenSet": frozenset,
}
TUPLE_NAMES = {"tuple", "Tuple"}
OPTIONAL_NAMES = {"optional", "Optional"}


def collection_factory(type_ref: TypeRef) -> Optional[type]:
    """Return list/set/frozenset if `type_ref` is a one-argument collection."""
    if type_ref.name in COLLECTIONS and len(type_ref.args) == 1:
        return COLLECTIONS[type_ref.name]
    return None


def optional_inner(type_ref: TypeRef) -> Optional[TypeRef]:
    if type_ref.name in OPTIONAL_NAMES and len(type_ref.args) == 1:
        return type_ref.args[0]
    return None


def tuple_members(type_ref: TypeRef) -> Optional[tuple[TypeRef, ...]]:
    if type_ref.name in TUPLE_NAMES:
        return type_ref.args
    return None


def is_wrapper(type_ref: TypeRef) -> bool:
    """True for collection, tuple and optional types (anything that is not a leaf)."""
    return (collection_factory(type_ref) is not None
            or optional_inner(type_ref) is not None
            or tuple_members(type_ref) is not None)


def resolve_reference(reference: str, namespace: Optional[Mapping[str, Any]] = None) -> Any:
    """
    Resolve a dotted reference like `parse_price` or `decimal.Decimal`.

    Lookup order: the caller's namespace, builtins, then an importable
    `module.attribute` path. Raises LookupError when nothing matches.
    """
    head, *rest = reference.split(".")
    namespace = namespace or {}

    root = None
    if head in namespace:
        root = namespace[head]
    elif hasattr(builtins, head):
        root = getattr(builtins, head)

    if root is not None:
        try:
            for attr in rest:
                root = getattr(root, attr)
            return root
        except AttributeError:
            raise LookupError(f"cannot resolve `{reference}`")

    # Longest importable module prefix wins
    parts = reference.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            obj = importlib.import_module(module_name)
        except ImportError:
            continue
        try:
            for attr in parts[split:]:
                obj = getattr(obj, attr)
            return obj
        except AttributeError:
            break
    raise LookupError(f"cannot resolve `{reference}`")


class TypeResolver:
    """
    Resolves leaf type names for one specification.

    Struct names declared in the same specification take precedence over
    the caller's namespace, which takes precedence over LEAF_TYPES.
    """

    def __init__(self, struct_names: set[str], namespace: Optional[Mapping[str, Any]] = None):
        self.struct_names = struct_names
        self.namespace = dict(namespace or {})

    def namespace_object(self, name: str) -> Any:
        head = name.split(".")[0]
        if head not in self.namespace:
            return None
        try:
            return resolve_reference(name, self.namespace)
        except LookupError:
            return None

    def is_struct(self, type_ref: TypeRef) -> bool:
        return not type_ref.args and type_ref.name in self.struct_names

    def extractable_class(self, type_ref: TypeRef) -> Any:
        """A namespace class usable as an `elem of` target, or None."""
        if type_ref.args or type_ref.name in self.struct_names:
            return None
        obj = self.namespace_object(type_ref.name)
        return obj if is_extractable(obj) else None

    def is_element_type(self, type_ref: TypeRef) -> bool:
        return self.is_struct(type_ref) or self.extractable_class(type_ref) is not None

    def default_parser(self, type_ref: TypeRef) -> Optional[Callable[[str], Any]]:
        """The conversion used when no `parse with` is given, or None if there is none."""
        if type_ref.args or is_wrapper(type_ref) or self.is_element_type(type_ref):
            return None
        obj = self.namespace_object(type_ref.name)
        if obj is not None:
            return obj if callable(obj) else None
        if type_ref.name in LEAF_TYPES:
            return LEAF_TYPES[type_ref.name][0]
        return None

    def annotation(self, type_ref: TypeRef, classes: Mapping[str, type]) -> Any:
        """Python annotation for a declared type; Any where nothing better is known."""
        factory = collection_factory(type_ref)
        if factory is not None:
            return factory[self.annotation(type_ref.args[0], classes)]
        inner = optional_inner(type_ref)
        if inner is not None:
            return Optional[self.annotation(inner, classes)]
        members = tuple_members(type_ref)
        if members is not None:
            if not members:
                return tuple
            return tuple[tuple(self.annotation(m, classes) for m in members)]
        if type_ref.name in classes:
            return classes[type_ref.name]
        obj = self.namespace_object(type_ref.name)
        if isinstance(obj, type):
            return obj
        if obj is None and type_ref.name in LEAF_TYPES:
            return LEAF_TYPES[type_ref.name][1]
        return Any
