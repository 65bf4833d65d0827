"""
Line scanner for the catalogue text.

Splits the text into logical lines and classifies each one. Only the small
subset of INI syntax the ROM catalogue uses is recognized: blank lines,
';' comments, '[<32 chars>]' section headers and 'Key=Value' pairs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from .entries import IDENTITY_KEY_LENGTH
from .errors import MalformedLine


class LineKind(Enum):
    """Classification of a catalogue line."""
    BLANK = "blank"
    COMMENT = "comment"
    SECTION = "section"
    KEY_VALUE = "key_value"


@dataclass(frozen=True)
class ScannedLine:
    """A classified catalogue line."""
    number: int
    kind: LineKind
    text: str
    key: Optional[str] = None    # section identity key, or the key of a pair
    value: Optional[str] = None  # value of a pair


def classify_line(number: int, text: str) -> ScannedLine:
    """
    Classify a single line (without its terminator).

    Raises:
        MalformedLine: for bad section headers or lines missing '='
    """
    if not text.strip():
        return ScannedLine(number, LineKind.BLANK, text)

    if text.startswith(";"):
        return ScannedLine(number, LineKind.COMMENT, text)

    if text.startswith("["):
        header = text.rstrip()
        if (len(header) != IDENTITY_KEY_LENGTH + 2 or not header.endswith("]")):
            raise MalformedLine(
                f"Section header must be '[' followed by exactly "
                f"{IDENTITY_KEY_LENGTH} characters and ']'",
                line=number
            )
        return ScannedLine(number, LineKind.SECTION, text, key=header[1:-1])

    key, sep, value = text.partition("=")
    if not sep:
        raise MalformedLine(f"Expected 'Key=Value', got {text!r}", line=number)

    key = key.strip()
    if not key:
        raise MalformedLine("Empty key before '='", line=number)

    return ScannedLine(number, LineKind.KEY_VALUE, text, key=key, value=value)


def scan_lines(text: str) -> Iterator[ScannedLine]:
    """Yield classified lines in their original order, numbered from 1."""
    for number, raw in enumerate(text.split("\n"), start=1):
        yield classify_line(number, raw.rstrip("\r"))
