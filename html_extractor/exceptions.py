"""
Custom exceptions for the HTML extractor.

Error strata:
  - SpecError    → raised while compiling a specification. The specification
                   never becomes usable; nothing is extracted.
  - InvalidInput → raised while extracting from a document. The first failing
                   field aborts its struct, and every enclosing struct after it.

InvalidInput is the one kind callers need to catch at extraction time. Its
subclasses name the step that failed so tests and logs can tell them apart.
"""

from typing import Any, Optional


class HtmlExtractorError(Exception):
    """Base exception for all HTML extractor errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Specification time ---

class SpecError(HtmlExtractorError):
    """Raised when a specification cannot be compiled."""
    pass


class SpecSyntaxError(SpecError):
    """
    Raised by the lexer and the parsers on an unexpected token.

    The message is prefixed with `source:line:column` so it points at the
    offending token in the specification text.
    """

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        source_name: Optional[str] = None,
        token: Optional[str] = None
    ):
        self.line = line
        self.column = column
        self.source_name = source_name or "<spec>"
        self.token = token
        super().__init__(
            f"{self.source_name}:{line}:{column}: {message}",
            details={"line": line, "column": column, "token": token}
        )
        self.reason = message


class SpecValidationError(SpecError):
    """Raised by the static validator for an ill-formed struct or field."""

    def __init__(self, message: str, struct: Optional[str] = None, field: Optional[str] = None):
        self.struct = struct
        self.field = field
        if struct and field:
            prefix = f"field `{field}` in struct `{struct}`: "
        elif struct:
            prefix = f"struct `{struct}`: "
        else:
            prefix = ""
        super().__init__(prefix + message, details={"struct": struct, "field": field})
        self.reason = message


# --- Extraction time ---

class InvalidInput(HtmlExtractorError):
    """
    Raised when a document does not satisfy a compiled specification.

    Carries the struct and field that failed; subclasses add the selector,
    attribute, text node index, capture group or conversion cause involved.
    """

    def __init__(self, message: str, struct: Optional[str] = None,
                 field: Optional[str] = None, **details: Any):
        super().__init__(message, details={"struct": struct, "field": field, **details})
        self.struct = struct
        self.field = field

    def wrap(self, struct: str, field: str) -> "InvalidInput":
        """
        Return a copy of this error seen from an enclosing struct's field.

        The class and step details are kept; the message is prefixed with
        the outer field's context.
        """
        wrapped = type(self).__new__(type(self))
        InvalidInput.__init__(
            wrapped,
            f"extracting the data of field `{field}` in struct `{struct}`: {self.message}",
            struct=struct,
            field=field,
            **{k: v for k, v in self.details.items() if k not in ("struct", "field")}
        )
        for key, value in vars(self).items():
            if key not in ("message", "details", "struct", "field"):
                setattr(wrapped, key, value)
        wrapped.inner = self
        return wrapped


class NoElementMatched(InvalidInput):
    """No element matched the selector of a `first` field."""
    pass


class AttributeNotFound(InvalidInput):
    """The matched element lacks the requested attribute."""
    pass


class TextNodeNotFound(InvalidInput):
    """The matched element has fewer direct text nodes than the index asks for."""
    pass


class NothingCaptured(InvalidInput):
    """The capture regex did not match, or one of its groups matched nothing."""
    pass


class ParseFailed(InvalidInput):
    """The string-to-value conversion raised for the extracted text."""

    def __init__(self, message: str, struct: Optional[str] = None,
                 field: Optional[str] = None, group: Optional[int] = None,
                 cause: Optional[BaseException] = None, **details: Any):
        super().__init__(message, struct=struct, field=field, group=group, **details)
        self.group = group
        self.cause = cause
