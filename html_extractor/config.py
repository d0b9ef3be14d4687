"""
Runtime settings for the HTML extractor.

Settings come from constructor arguments or from the environment:
  HTML_EXTRACTOR_PARSER     BeautifulSoup tree builder (html5lib, lxml, html.parser)
  HTML_EXTRACTOR_LOG_LEVEL  Level name for the package logger
  HTML_EXTRACTOR_CACHE      Set to "false" to compile every specification afresh

The command line script loads a .env file (python-dotenv) before reading them.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "HTML_EXTRACTOR_"


class ExtractorSettings(BaseModel):
    """Settings shared by the compiler and the document parser."""
    html_parser: str = Field(default="html5lib", description="Preferred BeautifulSoup tree builder")
    log_level: str = "INFO"
    cache_compiled: bool = True   # Reuse compiled modules for identical specification text

    @classmethod
    def from_env(cls) -> "ExtractorSettings":
        values = {}
        for field_name, env_name in (
            ("html_parser", "PARSER"),
            ("log_level", "LOG_LEVEL"),
            ("cache_compiled", "CACHE"),
        ):
            value = os.getenv(ENV_PREFIX + env_name)
            if value:
                values[field_name] = value
        return cls(**values)


_settings: Optional[ExtractorSettings] = None


def get_settings() -> ExtractorSettings:
    """Get or create the process-wide settings, read from the environment once."""
    global _settings
    if _settings is None:
        _settings = ExtractorSettings.from_env()
    return _settings


def set_settings(settings: Optional[ExtractorSettings]) -> None:
    """Replace the process-wide settings (None re-reads the environment on next use)."""
    global _settings
    _settings = settings
