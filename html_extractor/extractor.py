"""
Extraction engine.

Runs a StructPlan against a BeautifulSoup element. Each field goes through:

  1. Select   – the field's compiled selector over the element's descendants,
                in document order (an empty result is not an error by itself)
  2. Collect  – first: the first match, or NoElementMatched
                all: every match, in order, into the declared collection
                optional: the first match, or None
  3. Read     – the attribute, direct text node, inner HTML, or the element
                itself for nested structs
  4. Parse    – regex captures converted group by group, or the whole string
                converted at once, or the nested struct's own `extract`

The first failing field aborts the struct; there is no partial result.
"""

from typing import TYPE_CHECKING, Any

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from .exceptions import (
    AttributeNotFound,
    InvalidInput,
    NothingCaptured,
    NoElementMatched,
    ParseFailed,
    TextNodeNotFound,
)
from .logger import get_module_logger
from .schemas import CollectorMode

if TYPE_CHECKING:
    from .plan import FieldPlan, StructPlan

logger = get_module_logger("extractor")


def _context(field: "FieldPlan") -> str:
    return f"extracting the data of field `{field.label}` in struct `{field.struct_name}`"


def extract_struct(plan: "StructPlan", element: Tag) -> Any:
    """Run every field recipe of `plan` against `element` and build the result."""
    logger.debug(f"Extracting {plan.name} from <{element.name}>")

    values = {}
    for field in plan.fields:
        value = extract_field(field, element)
        if field.is_tuple:
            if value is None:
                # `optional` tuple field with nothing matched
                value = (None,) * len(field.member_names)
            values.update(zip(field.member_names, value))
        else:
            values[field.member_names[0]] = value

    # Values are already converted by their parsers; no re-validation needed
    return plan.model.model_construct(**values)


def extract_field(field: "FieldPlan", element: Tag) -> Any:
    """Select, collect, read and parse one field."""
    selector = field.selector

    if field.collector == CollectorMode.ALL:
        items = [extract_item(field, candidate) for candidate in selector.iselect(element)]
        try:
            return field.factory(items)
        except TypeError as e:
            # Set members built by custom parsers or nested classes may be unhashable
            raise InvalidInput(
                f"{_context(field)}, cannot collect the matched values into a {field.factory.__name__}: {e}",
                struct=field.struct_name, field=field.label,
            ) from e

    candidate = selector.select_one(element)

    if field.target.kind == "presence":
        return candidate is not None

    if candidate is None:
        if field.collector == CollectorMode.OPTIONAL:
            return None
        raise NoElementMatched(
            f"{_context(field)}, no element matched the selector `{field.target.selector}`",
            struct=field.struct_name, field=field.label, selector=field.target.selector,
        )

    return extract_item(field, candidate)


def extract_item(field: "FieldPlan", candidate: Tag) -> Any:
    """Read and parse the datum of one matched element."""
    if field.target.kind == "elem":
        try:
            return field.nested.extract(candidate)
        except InvalidInput as e:
            raise e.wrap(field.struct_name, field.label) from e

    raw = read_target(field, candidate)
    if field.regex is not None:
        return parse_captures(field, raw)
    return parse_value(field, raw)


def direct_text_nodes(element: Tag) -> list[str]:
    """Text children of `element`, skipping comments, CDATA and other special strings."""
    return [
        str(child) for child in element.children
        if isinstance(child, NavigableString) and not isinstance(child, PreformattedString)
    ]


def read_target(field: "FieldPlan", candidate: Tag) -> str:
    target = field.target

    if target.kind == "attr":
        value = candidate.get(target.attribute)
        if value is None:
            raise AttributeNotFound(
                f"{_context(field)}, attribute `{target.attribute}` is not found "
                f"in the element matched by `{target.selector}`",
                struct=field.struct_name, field=field.label,
                selector=target.selector, attribute=target.attribute,
            )
        # Multi-valued attributes such as class come back as lists
        if isinstance(value, list):
            value = " ".join(value)
        return value

    if target.kind == "text":
        nodes = direct_text_nodes(candidate)
        if target.index >= len(nodes):
            raise TextNodeNotFound(
                f"{_context(field)}, text node {target.index} is not found "
                f"in the element matched by `{target.selector}` ({len(nodes)} text nodes)",
                struct=field.struct_name, field=field.label,
                selector=target.selector, index=target.index,
            )
        return nodes[target.index].strip()

    # inner_html
    return candidate.decode_contents(formatter="html5").strip()


def parse_captures(field: "FieldPlan", raw: str) -> tuple:
    """Apply the capture regex and convert each group with its parser."""
    regex = field.regex
    match = regex.search(raw)
    if match is None:
        raise NothingCaptured(
            f"{_context(field)}, nothing is captured with regex `{regex.pattern}` from `{raw}`",
            struct=field.struct_name, field=field.label, regex=regex.pattern,
        )

    values = []
    for group, parser in enumerate(field.parsers, start=1):
        text = match.group(group)
        if text is None:
            raise NothingCaptured(
                f"{_context(field)}, capture group {group} of regex `{regex.pattern}` matched nothing",
                struct=field.struct_name, field=field.label, regex=regex.pattern, group=group,
            )
        try:
            values.append(parser(text))
        except Exception as e:
            raise ParseFailed(
                f"{_context(field)}, cannot parse capture group {group} `{text}`: {e!r}",
                struct=field.struct_name, field=field.label, group=group, cause=e,
            ) from e
    return tuple(values)


def parse_value(field: "FieldPlan", raw: str) -> Any:
    parser = field.parsers[0]
    try:
        return parser(raw)
    except Exception as e:
        raise ParseFailed(
            f"{_context(field)}, cannot parse `{raw}`: {e!r}",
            struct=field.struct_name, field=field.label, cause=e,
        ) from e
