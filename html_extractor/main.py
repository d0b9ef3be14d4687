"""
Main entry point: compiling specification text into extractor classes.

Coordinates the compiler pipeline: Grammar → Validator → Plan builder.
Every stage either succeeds completely or raises a SpecError, so a module
returned from here is always fully usable.
"""

from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Union

from bs4 import Tag

from .config import ExtractorSettings, get_settings
from .grammar import parse_spec
from .logger import get_module_logger
from .plan import build_plans
from .schemas import StructSpec
from .spec_cache import SpecCache, get_default_cache
from .validator import validate_specs

logger = get_module_logger("main")


class ExtractorModule:
    """
    The compiled form of one specification.

    Generated classes are reachable as attributes (`module.Foo`) or items
    (`module["Foo"]`). `public` lists the structs declared `pub`.
    """

    def __init__(self, specs: list[StructSpec], structs: dict[str, type],
                 source_name: Optional[str] = None):
        self.specs = specs
        self.structs = structs
        self.source_name = source_name
        self.public = [s.name for s in specs if s.visibility.is_public]

    @property
    def __all__(self) -> list[str]:
        return list(self.public)

    def __getattr__(self, name: str) -> type:
        structs = self.__dict__.get("structs", {})
        if name in structs:
            return structs[name]
        raise AttributeError(f"specification defines no struct named {name!r}")

    def __getitem__(self, name: str) -> type:
        try:
            return self.structs[name]
        except KeyError:
            raise KeyError(f"specification defines no struct named {name!r}")

    def __contains__(self, name: object) -> bool:
        return name in self.structs

    def __iter__(self) -> Iterator[type]:
        return iter(self.structs.values())

    def __len__(self) -> int:
        return len(self.structs)

    def __repr__(self) -> str:
        return f"<ExtractorModule {self.source_name or '<spec>'}: {', '.join(self.structs)}>"

    def extract(self, struct_name: str, element: Tag) -> Any:
        """Extract struct `struct_name` from an already-located element."""
        return self[struct_name].extract(element)

    def extract_from_str(self, struct_name: str, html: str, parser: Optional[str] = None) -> Any:
        """Parse `html` and extract struct `struct_name` from its root element."""
        return self[struct_name].extract_from_str(html, parser=parser)


def compile_spec(
    text: str,
    namespace: Optional[Mapping[str, Any]] = None,
    *,
    source_name: Optional[str] = None,
    settings: Optional[ExtractorSettings] = None,
    cache: Optional[SpecCache] = None
) -> ExtractorModule:
    """
    Compile specification text.

    Args:
        text: Specification source
        namespace: Names visible to `parse with ..` and to declared types
            (custom parsers, Enum or Extractable classes)
        source_name: Name used in syntax error locations (e.g. a file path)
        settings: Overrides the process-wide settings
        cache: Cache to use instead of the default one

    Returns:
        ExtractorModule with one generated class per struct

    Raises:
        SpecSyntaxError, SpecValidationError
    """
    settings = settings or get_settings()
    namespace = dict(namespace or {})

    if settings.cache_compiled:
        cache = cache if cache is not None else get_default_cache()
        cached = cache.get(text, namespace, source_name)
        if cached is not None:
            return cached

    logger.info(f"Compiling specification {source_name or '<spec>'}")

    # Stage 1: parse
    # Input:  specification text
    # Output: StructSpec list with their ExtractorSpec clauses
    structs = parse_spec(text, source_name)

    # Stage 2: validate
    # Selectors, regexes, specifier combinations and struct cycles, before
    # anything is built
    validate_specs(structs, namespace)

    # Stage 3: build
    # Output: generated HtmlExtractor subclasses with their plans attached
    classes = build_plans(structs, namespace)

    module = ExtractorModule(structs, classes, source_name=source_name)
    logger.info(f"Compiled {len(classes)} structs: {', '.join(classes) or '(none)'}")

    if settings.cache_compiled:
        module = cache.put(text, module, namespace, source_name)
    return module


def load_spec_file(
    path: Union[str, Path],
    namespace: Optional[Mapping[str, Any]] = None,
    settings: Optional[ExtractorSettings] = None
) -> ExtractorModule:
    """Read and compile a specification file."""
    path = Path(path)
    return compile_spec(path.read_text(encoding="utf-8"), namespace,
                        source_name=str(path), settings=settings)
