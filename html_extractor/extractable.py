"""
The Extractable capability and the base class of generated extractors.

Every struct compiled from a specification becomes a frozen pydantic model
deriving from HtmlExtractor. Nested `elem of` fields call the target's
`extract` classmethod through the Extractable protocol, so a hand-written
class with the same classmethod can be used as a nested target too.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Protocol, Union, runtime_checkable

from bs4 import Tag
from pydantic import BaseModel, ConfigDict

from .document import parse_document, read_html_file, root_element

if TYPE_CHECKING:
    from .plan import StructPlan
    from .schemas import StructSpec


@runtime_checkable
class Extractable(Protocol):
    @classmethod
    def extract(cls, element: Tag) -> Any:
        ...


def is_extractable(obj: Any) -> bool:
    """True for classes with a callable `extract` (the Extractable capability)."""
    return isinstance(obj, type) and callable(getattr(obj, "extract", None))


class HtmlExtractor(BaseModel):
    """
    Base class of every generated extractor.

    Subclasses are created by `compile_spec`; their extraction plan is
    attached as `__extraction_plan__` once, at compile time.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, protected_namespaces=())

    __extraction_plan__: ClassVar[Optional["StructPlan"]] = None
    __struct_spec__: ClassVar[Optional["StructSpec"]] = None

    @classmethod
    def extract(cls, element: Tag) -> "HtmlExtractor":
        """Extract an instance from an already-located element."""
        plan = cls.__extraction_plan__
        if plan is None:
            raise TypeError(f"{cls.__name__} has no extraction plan; build it with compile_spec()")
        return plan.run(element)

    @classmethod
    def extract_from_str(cls, html: str, parser: Optional[str] = None) -> "HtmlExtractor":
        """Parse an HTML string and extract from its root element."""
        return cls.extract(root_element(parse_document(html, parser=parser)))

    @classmethod
    def extract_from_file(cls, path: Union[str, Path], parser: Optional[str] = None) -> "HtmlExtractor":
        """Read an HTML file, decoding it with its declared charset, and extract from it."""
        html, _charset = read_html_file(path)
        return cls.extract_from_str(html, parser=parser)
