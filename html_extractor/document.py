"""
HTML documents: decoding raw bytes and building the element tree.

The extraction engine only needs a BeautifulSoup tree. This module turns
strings and files into one:
- Detects the charset a page declares in its <meta> tags, with the same
  label remapping browsers apply
- Parses with the configured tree builder, falling back along
  html5lib → lxml → html.parser when a builder is not installed
"""

import re
from pathlib import Path
from typing import Optional, Union

from bs4 import BeautifulSoup, FeatureNotFound, Tag

from .config import get_settings
from .logger import get_module_logger

logger = get_module_logger("document")

# html5lib implements the WHATWG parsing algorithm and copes with the worst
# markup; lxml is faster; html.parser is always available.
PARSER_FALLBACK_CHAIN = ("html5lib", "lxml", "html.parser")

# WHATWG encoding spec: browsers silently remap these charsets.
# https://encoding.spec.whatwg.org/#names-and-labels
WHATWG_CHARSET_MAP = {
    'iso-8859-1': 'windows-1252',
    'iso8859-1': 'windows-1252',
    'iso88591': 'windows-1252',
    'latin-1': 'windows-1252',
    'latin1': 'windows-1252',
    'us-ascii': 'windows-1252',
    'ascii': 'windows-1252',
    'iso-8859-9': 'windows-1254',
    'iso-8859-11': 'windows-874',
}

_META_CHARSET = re.compile(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', re.IGNORECASE)
_META_CONTENT_TYPE = re.compile(r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)', re.IGNORECASE)


def detect_charset_from_bytes(raw_bytes: bytes) -> str:
    """
    Detect the charset declared in the first 2048 bytes of an HTML document.

    Looks for <meta charset=...> and then the legacy
    <meta http-equiv="Content-Type" content="...; charset=..."> form, and
    applies the WHATWG label mapping (e.g. iso-8859-1 → windows-1252).
    Returns 'utf-8' when nothing is declared.
    """
    # Decode as ASCII: only the charset label is needed, not the content
    head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

    m = _META_CHARSET.search(head_str) or _META_CONTENT_TYPE.search(head_str)
    if not m:
        return 'utf-8'

    charset = m.group(1).strip().lower()
    return WHATWG_CHARSET_MAP.get(charset, charset)


def read_html_file(path: Union[str, Path]) -> tuple[str, str]:
    """Read an HTML file and decode it with its declared charset. Returns (html, charset)."""
    raw_bytes = Path(path).read_bytes()
    charset = detect_charset_from_bytes(raw_bytes)
    try:
        html = raw_bytes.decode(charset, errors='replace')
    except LookupError:
        logger.warning(f"Unknown charset '{charset}' declared in {path}, decoding as utf-8")
        charset = 'utf-8'
        html = raw_bytes.decode(charset, errors='replace')
    return html, charset


def parse_document(html: str, parser: Optional[str] = None) -> BeautifulSoup:
    """
    Parse HTML into a BeautifulSoup document.

    Args:
        html: HTML string
        parser: Tree builder to try first (default: settings.html_parser)

    Returns:
        The parsed document
    """
    preferred = parser or get_settings().html_parser
    chain = [preferred] + [name for name in PARSER_FALLBACK_CHAIN if name != preferred]

    last_error = None
    for name in chain:
        try:
            return BeautifulSoup(html, name)
        except FeatureNotFound as e:
            logger.warning(f"Tree builder '{name}' is not available, trying the next one")
            last_error = e
    raise last_error


def root_element(document: BeautifulSoup) -> Tag:
    """
    The element extraction starts from: <html> when the parser produced one,
    the document itself otherwise (html.parser keeps fragments as-is).
    """
    html = document.find("html", recursive=False)
    return html if html is not None else document
