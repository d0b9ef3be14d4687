"""
HTML Extractor

Declare how to pull typed values out of HTML in a small specification
language, and get extractor classes for it:

    Product {
        name: str = (text of "h1.title"),
        price: decimal = (attr["data-price"] of ".price"),
        tags: list<str> = (text of ".tag", collect),
        (width: int, height: int) = (text of ".size", capture with "(\\d+)x(\\d+)"),
        in_stock: bool = (presence of ".in-stock"),
    }

- Grammar / clause parser: specification text → StructSpec objects
- Validator: selectors, regexes and specifier combinations, before any HTML is read
- Plan builder: one pydantic model and one extraction plan per struct
- Extractor: runs a plan against a BeautifulSoup element

Public API surface:
  Compiling        — compile_spec, load_spec_file, ExtractorModule
  Generated types  — HtmlExtractor (base class), Extractable (capability)
  Error types      — SpecError family (compile time), InvalidInput family (extraction time)
  Documents        — parse_document, read_html_file
  Settings/caching — ExtractorSettings, SpecCache, get_default_cache
"""

# --- Compiler entry points ---
from .main import ExtractorModule, compile_spec, load_spec_file

# --- Generated classes ---
from .extractable import Extractable, HtmlExtractor

# --- Intermediate representation ---
from .schemas import CollectorMode, ExtractorSpec, StructSpec, TypeRef
from .grammar import parse_spec

# --- Exceptions ---
from .exceptions import (
    AttributeNotFound,
    HtmlExtractorError,
    InvalidInput,
    NoElementMatched,
    NothingCaptured,
    ParseFailed,
    SpecError,
    SpecSyntaxError,
    SpecValidationError,
    TextNodeNotFound,
)

# --- Documents, settings and caching ---
from .document import parse_document, read_html_file
from .config import ExtractorSettings
from .spec_cache import SpecCache, get_default_cache

__version__ = "0.1.0"
__all__ = [
    "compile_spec",
    "load_spec_file",
    "ExtractorModule",
    "HtmlExtractor",
    "Extractable",
    "parse_spec",
    "StructSpec",
    "ExtractorSpec",
    "CollectorMode",
    "TypeRef",
    "HtmlExtractorError",
    "SpecError",
    "SpecSyntaxError",
    "SpecValidationError",
    "InvalidInput",
    "NoElementMatched",
    "AttributeNotFound",
    "TextNodeNotFound",
    "NothingCaptured",
    "ParseFailed",
    "parse_document",
    "read_html_file",
    "ExtractorSettings",
    "SpecCache",
    "get_default_cache",
]
