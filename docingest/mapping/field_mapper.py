"""Maps OCR text onto a field mapping model.

The OCR text is treated as a list of lines. Each field descriptor picks
one line, or joins several, and may keep a single space-separated token
of the result. Any offset that falls outside the text fails the whole
record with :class:`FieldMappingError`.
"""

from docingest.exceptions import FieldMappingError
from docingest.utils.logger import get_logger

from .models import FieldDescriptor, FieldMappingModel, FieldValue, StructuredRecord

logger = get_logger(__name__)


def split_lines(text: str) -> list[str]:
    """Split OCR text on newlines, keeping raw line content.

    Empty text has no lines at all.
    """
    if not text:
        return []
    return text.split("\n")


def _line_at(lines: list[str], offset: int, descriptor: FieldDescriptor) -> str:
    if offset >= len(lines):
        raise FieldMappingError(
            descriptor.name,
            f"line {offset} is out of range (text has {len(lines)} lines)",
        )
    return lines[offset]


def resolve_field(lines: list[str], descriptor: FieldDescriptor) -> str:
    """Compute the value of one field from the OCR lines.

    Args:
        lines: OCR text split into lines.
        descriptor: Field descriptor to resolve.

    Returns:
        The resolved field text.

    Raises:
        FieldMappingError: If a line offset or token position is out of range.
    """
    if isinstance(descriptor.index, list):
        value = " ".join(_line_at(lines, i, descriptor) for i in descriptor.index)
    else:
        value = _line_at(lines, descriptor.index, descriptor)

    if not descriptor.split:
        return value

    tokens = value.split(" ")
    if descriptor.part >= len(tokens):
        raise FieldMappingError(
            descriptor.name,
            f"token {descriptor.part} is out of range "
            f"(value has {len(tokens)} tokens)",
        )
    return tokens[descriptor.part]


def map_fields(text: str, model: FieldMappingModel) -> StructuredRecord:
    """Build a structured record from OCR text.

    Args:
        text: Text extracted by OCR.
        model: Field mapping model for the document type.

    Returns:
        One field value per descriptor, in model order.

    Raises:
        FieldMappingError: If any descriptor does not fit the text.
    """
    lines = split_lines(text)
    data = [
        FieldValue(field=descriptor.name, input=resolve_field(lines, descriptor))
        for descriptor in model.fields
    ]
    logger.info("Mapped %d fields from %d lines", len(data), len(lines))
    return StructuredRecord(data=data)
